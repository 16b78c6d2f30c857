# File: furniture_ocr/api/v1/routes_auth.py

"""
Auth API routes: register, login, logout, and the current user.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from furniture_ocr.api.deps import get_app_settings, get_current_user, get_db, get_login, get_login_throttle
from furniture_ocr.core.config import Settings
from furniture_ocr.models.user import User
from furniture_ocr.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserRead
from furniture_ocr.services import auth_service

router = APIRouter()


def _user_read(user: User) -> UserRead:
    return UserRead(uid=user.id, email=user.email, display_name=user.display_name)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account and sign in",
)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    user, token = auth_service.register_user(
        db,
        settings,
        email=payload.email,
        password=payload.password,
        display_name=payload.display_name,
    )
    return AuthResponse(access_token=token, user=_user_read(user))


@router.post("/login", response_model=AuthResponse, summary="Sign in with email and password")
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    throttle: auth_service.LoginThrottle = Depends(get_login_throttle),
):
    user, token = auth_service.authenticate_user(
        db,
        settings,
        throttle,
        email=payload.email,
        password=payload.password,
    )
    return AuthResponse(access_token=token, user=_user_read(user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="End the current session")
def logout(login=Depends(get_login), db: Session = Depends(get_db)):
    _, login_session = login
    auth_service.sign_out(db, login_session)


@router.get("/me", response_model=UserRead, summary="Current user")
def me(user: User = Depends(get_current_user)):
    return _user_read(user)
