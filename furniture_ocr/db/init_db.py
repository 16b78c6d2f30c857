"""
Database initialization helpers.

Models are imported here so their tables get registered on Base.metadata.
"""

from sqlalchemy.engine import Engine

from furniture_ocr.models.base import Base

from furniture_ocr.models import project, user  # noqa: F401


def init_db(engine: Engine) -> None:
    """
    Create all tables based on SQLAlchemy models.
    """
    Base.metadata.create_all(bind=engine)


def drop_db(engine: Engine) -> None:
    Base.metadata.drop_all(bind=engine)
