# playergate/app/services/auth.py
"""
Auth service: registration, login, device trust and recovery.

Every public method is one transaction over a single AsyncSession:
commit on success, rollback on any error. Domain failures surface as
AuthError subclasses; driver failures surface as StorageUnavailable and
are never retried here.

Flows:
- register:                   account + security question, atomically
- login:                      password check, then device record/inspect
- verify_device_for_recovery: security answer, then device promotion
- get_security_question:      read-only, for the recovery prompt
- reset_password:             security answer, then password overwrite

The security answer alone can trust a device or replace the password,
so it is verified and throttled exactly like a password.
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from playergate.app.core.errors import InvalidAnswer, RecoveryLocked, ValidationError, storage_errors
from playergate.app.models.security_question import SecurityQuestion
from playergate.app.security import recovery
from playergate.app.security.hashing import Verifier
from playergate.app.services.credentials import CredentialStore
from playergate.app.services.devices import DeviceRegistry, DeviceStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    account_id: int
    device_status: DeviceStatus

    @property
    def requires_verification(self) -> bool:
        return self.device_status.requires_verification


def _require(**fields: str) -> None:
    """Reject missing or blank inputs before touching the stores."""
    missing = [
        name for name, value in fields.items()
        if not isinstance(value, str) or not value.strip()
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


class AuthService:

    def __init__(
        self,
        session: AsyncSession,
        verifier: Verifier,
        max_failed_attempts: int = recovery.MAX_FAILED_ATTEMPTS,
        lockout_minutes: int = recovery.LOCKOUT_DURATION_MINUTES,
    ):
        self.session = session
        self.credentials = CredentialStore(session, verifier)
        self.devices = DeviceRegistry(session)
        self.max_failed_attempts = max_failed_attempts
        self.lockout_minutes = lockout_minutes

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        try:
            with storage_errors():
                yield
                await self.session.commit()
        except Exception:
            try:
                await self.session.rollback()
            except Exception:
                logger.exception("Rollback failed")
            raise

    async def register(self, identity: str, password: str, question: str, answer: str) -> int:
        _require(identity=identity, password=password, question=question, answer=answer)
        identity = identity.strip()

        async with self._transaction():
            account_id = await self.credentials.register(identity, password, question.strip(), answer)

        logger.info("Registered account %s", account_id)
        return account_id

    async def login(self, identity: str, password: str, device_identifier: str) -> LoginResult:
        _require(identity=identity, password=password, device_identifier=device_identifier)

        async with self._transaction():
            account_id = await self.credentials.verify_password(identity.strip(), password)
            status = await self.devices.record_or_inspect(account_id, device_identifier)

        logger.info("Login for account %s from device %s: %s", account_id, device_identifier, status.value)
        return LoginResult(account_id=account_id, device_status=status)

    async def verify_device_for_recovery(self, identity: str, device_identifier: str, answer: str) -> None:
        """
        Trust a device after a correct security answer.

        Raises:
            NotFound: unknown identity or no security question
            InvalidAnswer: wrong answer (device state unchanged)
            RecoveryLocked: too many recent wrong answers
        """
        _require(identity=identity, device_identifier=device_identifier, answer=answer)

        async with self._transaction():
            question = await self._check_answer(identity.strip(), answer)
            await self.devices.promote(question.account_id, device_identifier)

        logger.info("Device %s trusted for account %s", device_identifier, question.account_id)

    async def get_security_question(self, identity: str) -> str:
        _require(identity=identity)

        async with self._transaction():
            question = await self.credentials.get_security_question(identity.strip())
        return question.question

    async def reset_password(self, identity: str, answer: str, new_password: str) -> None:
        """
        Replace the password, gated solely by the security answer.

        Device trust records are left untouched.
        """
        _require(identity=identity, answer=answer, new_password=new_password)

        async with self._transaction():
            question = await self._check_answer(identity.strip(), answer)
            await self.credentials.reset_password(question.account_id, new_password)

        logger.info("Password reset for account %s", question.account_id)

    async def _check_answer(self, identity: str, answer: str) -> SecurityQuestion:
        # Row lock held until commit; parallel guesses queue behind it
        question = await self.credentials.get_security_question(identity, for_update=True)

        if recovery.is_recovery_locked(
            question.failed_attempts,
            question.last_attempt_at,
            max_attempts=self.max_failed_attempts,
            lockout_minutes=self.lockout_minutes,
        ):
            remaining = recovery.get_lockout_remaining_minutes(
                question.last_attempt_at, lockout_minutes=self.lockout_minutes
            )
            logger.warning("Recovery locked for account %s", question.account_id)
            raise RecoveryLocked(remaining)

        if not self.credentials.verify_answer(question, answer):
            # The failure counter must survive the request failing
            await self.credentials.record_failed_answer(question)
            await self.session.commit()
            logger.warning("Incorrect security answer for account %s", question.account_id)
            raise InvalidAnswer()

        if question.failed_attempts:
            await self.credentials.clear_failed_answers(question)
        return question
