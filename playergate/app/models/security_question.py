# playergate/app/models/security_question.py
"""
ORM model for the recovery question of an account.

The answer verifier is a password-equivalent credential: a correct
answer both trusts new devices and resets the password.
"""
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.sql import func

from playergate.app.db.base import Base


class SecurityQuestion(Base):
    __tablename__ = "security_questions"

    id = Column(Integer, primary_key=True, index=True)

    # At most one question per account
    account_id = Column(Integer, ForeignKey("accounts.id"), unique=True, nullable=False)

    question = Column(String(255), nullable=False)

    # Verifier token of the answer (same scheme as passwords)
    answer_hash = Column(String(255), nullable=False)

    # Track failed answers (for lockout)
    failed_attempts = Column(Integer, default=0, nullable=False)
    last_attempt_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())