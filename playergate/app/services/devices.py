# playergate/app/services/devices.py
"""
Device registry: the device-trust state machine.

    Unknown --record_or_inspect--> Untrusted --promote--> Trusted
    Unknown --promote-----------------------------------> Trusted

There is no transition out of Trusted. Each write is one upsert against
the (account_id, device_identifier) unique constraint.
"""
import enum
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from playergate.app.db.upsert import dialect_insert
from playergate.app.models.device import Device


class DeviceStatus(str, enum.Enum):
    NEW_UNTRUSTED = "new_untrusted"
    UNTRUSTED = "untrusted"
    TRUSTED = "trusted"

    @property
    def requires_verification(self) -> bool:
        return self is not DeviceStatus.TRUSTED


_CONFLICT_KEYS = ["account_id", "device_identifier"]


class DeviceRegistry:

    def __init__(self, session: AsyncSession):
        self.session = session
        self.table = Device.__table__

    async def status(self, account_id: int, device_identifier: str) -> Optional[DeviceStatus]:
        """Read-only lookup; None when the device was never seen."""
        result = await self.session.execute(
            select(Device.is_verified).where(
                Device.account_id == account_id,
                Device.device_identifier == device_identifier,
            )
        )
        is_verified = result.scalar_one_or_none()
        if is_verified is None:
            return None
        return DeviceStatus.TRUSTED if is_verified else DeviceStatus.UNTRUSTED

    async def record_or_inspect(self, account_id: int, device_identifier: str) -> DeviceStatus:
        """
        Login-time check.

        Inserts an untrusted record if none exists (NEW_UNTRUSTED),
        otherwise reports the stored flag. RETURNING only yields a row
        when this call performed the insert.
        """
        stmt = (
            dialect_insert(self.session, self.table)
            .values(
                account_id=account_id,
                device_identifier=device_identifier,
                is_verified=False,
            )
            .on_conflict_do_nothing(index_elements=_CONFLICT_KEYS)
            .returning(self.table.c.id)
        )
        result = await self.session.execute(stmt)
        if result.scalar_one_or_none() is not None:
            return DeviceStatus.NEW_UNTRUSTED

        return await self.status(account_id, device_identifier)

    async def promote(self, account_id: int, device_identifier: str) -> None:
        """Mark the device trusted, creating the record if needed. Idempotent."""
        now = datetime.now(timezone.utc)
        stmt = dialect_insert(self.session, self.table).values(
            account_id=account_id,
            device_identifier=device_identifier,
            is_verified=True,
            verified_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=_CONFLICT_KEYS,
            set_={"is_verified": True, "verified_at": now},
        )
        await self.session.execute(stmt)
