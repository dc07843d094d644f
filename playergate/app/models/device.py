# playergate/app/models/device.py
"""
ORM model for device trust records.

One row per (account, device identifier). Rows are created untrusted on
the first login from a device and only ever move to trusted.
"""
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from playergate.app.db.base import Base


class Device(Base):
    __tablename__ = "devices"
    __table_args__ = (
        UniqueConstraint("account_id", "device_identifier", name="uq_device_account_identifier"),
    )

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)

    # Opaque client-supplied string naming an installation
    device_identifier = Column(String(255), nullable=False)

    # Trust flag, set only after a correct security answer
    is_verified = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    verified_at = Column(DateTime(timezone=True), nullable=True)
