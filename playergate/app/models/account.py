# playergate/app/models/account.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from playergate.app.db.base import Base


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)

    # The single external handle for an account. Numeric ids are
    # returned to clients but never re-derived from this string.
    identity = Column(String(254), unique=True, index=True, nullable=False)

    # Verifier token of the password, never the password itself
    hashed_password = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
