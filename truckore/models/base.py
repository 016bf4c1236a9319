"""SQLAlchemy declarative Base; its metadata is the schema for both storage backends."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass
