# playergate/app/db/base.py
"""SQLAlchemy declarative base for all ORM models."""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Usage:
        class Account(Base):
            __tablename__ = "accounts"
            id = Column(Integer, primary_key=True)
            ...
    """
    pass
