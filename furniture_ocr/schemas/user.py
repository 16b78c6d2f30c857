# File: furniture_ocr/schemas/user.py

from typing import Optional

from pydantic import BaseModel, EmailStr


class UserBase(BaseModel):
    email: EmailStr


class UserRead(UserBase):
    uid: str
    display_name: Optional[str] = None


# Credentials are plain strings so that a malformed email reaches the auth
# service and comes back as "auth/invalid-email" instead of a 422.
class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(LoginRequest):
    display_name: str = ""


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
