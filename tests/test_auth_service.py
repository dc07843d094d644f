"""Tests for :class:`playergate.app.services.auth.AuthService`."""
import asyncio

import pytest
from sqlalchemy import func, select

from playergate.app.core.errors import (
    IdentityConflict,
    InvalidAnswer,
    InvalidCredentials,
    NotFound,
    RecoveryLocked,
    StorageUnavailable,
    ValidationError,
)
from playergate.app.db.session import Database
from playergate.app.models import Account, Device, SecurityQuestion
from playergate.app.security.hashing import BcryptVerifier, Sha256Verifier
from playergate.app.services.auth import AuthService
from playergate.app.services.devices import DeviceStatus


async def _device_rows(session, account_id):
    result = await session.execute(
        select(Device.device_identifier, Device.is_verified).where(Device.account_id == account_id)
    )
    return sorted(tuple(row) for row in result.all())


@pytest.mark.asyncio
async def test_end_to_end_new_device_flow(service):
    account_id = await service.register("p1", "pw", "q", "a")

    first = await service.login("p1", "pw", "dev-1")
    assert first.account_id == account_id
    assert first.device_status is DeviceStatus.NEW_UNTRUSTED
    assert first.requires_verification

    await service.verify_device_for_recovery("p1", "dev-1", "a")

    second = await service.login("p1", "pw", "dev-1")
    assert second.device_status is DeviceStatus.TRUSTED
    assert not second.requires_verification


@pytest.mark.asyncio
async def test_repeat_login_before_verification(service, session):
    account_id = await service.register("p1", "pw", "q", "a")
    await service.login("p1", "pw", "dev-1")

    again = await service.login("p1", "pw", "dev-1")
    assert again.device_status is DeviceStatus.UNTRUSTED
    assert again.requires_verification
    assert await _device_rows(session, account_id) == [("dev-1", False)]


@pytest.mark.asyncio
async def test_register_conflict_keeps_one_account(service, session):
    await service.register("p1", "pw", "q", "a")

    with pytest.raises(IdentityConflict):
        await service.register("p1", "pw2", "q2", "a2")

    count = await session.execute(select(func.count()).select_from(Account))
    assert count.scalar_one() == 1
    questions = await session.execute(select(func.count()).select_from(SecurityQuestion))
    assert questions.scalar_one() == 1


@pytest.mark.asyncio
async def test_login_failures_are_indistinguishable(service, session):
    await service.register("p1", "pw", "q", "a")

    with pytest.raises(InvalidCredentials) as unknown:
        await service.login("nobody", "pw", "dev-1")
    with pytest.raises(InvalidCredentials) as wrong:
        await service.login("p1", "bad", "dev-1")

    assert unknown.value.message == wrong.value.message
    # A failed login never records the device
    count = await session.execute(select(func.count()).select_from(Device))
    assert count.scalar_one() == 0


@pytest.mark.asyncio
async def test_wrong_answer_leaves_device_untrusted(service, session):
    account_id = await service.register("p1", "pw", "q", "a")
    await service.login("p1", "pw", "dev-1")

    with pytest.raises(InvalidAnswer):
        await service.verify_device_for_recovery("p1", "dev-1", "wrong")

    assert await _device_rows(session, account_id) == [("dev-1", False)]
    assert (await service.login("p1", "pw", "dev-1")).device_status is DeviceStatus.UNTRUSTED


@pytest.mark.asyncio
async def test_verify_unknown_device_creates_trusted_record(service, session):
    account_id = await service.register("p1", "pw", "q", "a")

    await service.verify_device_for_recovery("p1", "dev-new", "a")

    assert await _device_rows(session, account_id) == [("dev-new", True)]


@pytest.mark.asyncio
async def test_verify_unknown_identity(service):
    with pytest.raises(NotFound):
        await service.verify_device_for_recovery("ghost", "dev-1", "a")


@pytest.mark.asyncio
async def test_get_security_question(service):
    await service.register("p1", "pw", "What was your first pet?", "a")

    assert await service.get_security_question("p1") == "What was your first pet?"
    with pytest.raises(NotFound):
        await service.get_security_question("ghost")


@pytest.mark.asyncio
async def test_reset_password_keeps_devices(service, session):
    account_id = await service.register("p1", "pw", "q", "a")
    await service.login("p1", "pw", "dev-1")
    await service.verify_device_for_recovery("p1", "dev-1", "a")
    await service.login("p1", "pw", "dev-2")
    before = await _device_rows(session, account_id)

    await service.reset_password("p1", "a", "new-pw")

    with pytest.raises(InvalidCredentials):
        await service.login("p1", "pw", "dev-1")
    result = await service.login("p1", "new-pw", "dev-1")
    assert result.device_status is DeviceStatus.TRUSTED
    assert await _device_rows(session, account_id) == before


@pytest.mark.asyncio
async def test_reset_password_wrong_answer(service):
    await service.register("p1", "pw", "q", "a")

    with pytest.raises(InvalidAnswer):
        await service.reset_password("p1", "wrong", "new-pw")
    with pytest.raises(NotFound):
        await service.reset_password("ghost", "a", "new-pw")

    assert (await service.login("p1", "pw", "dev-1")).account_id


@pytest.mark.asyncio
async def test_recovery_locks_after_repeated_wrong_answers(service, session):
    await service.register("p1", "pw", "q", "a")

    for _ in range(3):
        with pytest.raises(InvalidAnswer):
            await service.verify_device_for_recovery("p1", "dev-1", "wrong")

    # Locked even for the right answer, on both recovery paths
    with pytest.raises(RecoveryLocked) as locked:
        await service.verify_device_for_recovery("p1", "dev-1", "a")
    assert locked.value.remaining_minutes >= 1
    with pytest.raises(RecoveryLocked):
        await service.reset_password("p1", "a", "new-pw")


@pytest.mark.asyncio
async def test_correct_answer_resets_failure_counter(service, session):
    account_id = await service.register("p1", "pw", "q", "a")

    for _ in range(2):
        with pytest.raises(InvalidAnswer):
            await service.reset_password("p1", "wrong", "x")
    await service.verify_device_for_recovery("p1", "dev-1", "a")

    result = await session.execute(
        select(SecurityQuestion.failed_attempts).where(SecurityQuestion.account_id == account_id)
    )
    assert result.scalar_one() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("args", [
    ("", "pw", "q", "a"),
    ("p1", "", "q", "a"),
    ("p1", "pw", "   ", "a"),
    ("p1", "pw", "q", None),
])
async def test_register_validation(service, session, args):
    with pytest.raises(ValidationError):
        await service.register(*args)
    count = await session.execute(select(func.count()).select_from(Account))
    assert count.scalar_one() == 0


@pytest.mark.asyncio
async def test_login_requires_device_identifier(service):
    await service.register("p1", "pw", "q", "a")
    with pytest.raises(ValidationError):
        await service.login("p1", "pw", "")


@pytest.mark.asyncio
async def test_concurrent_first_logins_create_one_device(database, verifier):
    async with database.session() as session:
        account_id = await AuthService(session, verifier).register("p1", "pw", "q", "a")

    async def login():
        async with database.session() as session:
            return await AuthService(session, verifier).login("p1", "pw", "dev-1")

    results = await asyncio.gather(login(), login())

    assert all(r.requires_verification for r in results)
    assert [r.device_status for r in results].count(DeviceStatus.NEW_UNTRUSTED) == 1
    async with database.session() as session:
        assert await _device_rows(session, account_id) == [("dev-1", False)]


@pytest.mark.asyncio
async def test_concurrent_wrong_answers_respect_limit(database, verifier):
    async with database.session() as session:
        account_id = await AuthService(session, verifier).register("p1", "pw", "q", "a")

    async def guess():
        async with database.session() as session:
            service = AuthService(session, verifier, max_failed_attempts=3)
            await service.verify_device_for_recovery("p1", "dev-1", "wrong")

    results = await asyncio.gather(*(guess() for _ in range(5)), return_exceptions=True)

    assert sum(isinstance(r, InvalidAnswer) for r in results) == 3
    assert sum(isinstance(r, RecoveryLocked) for r in results) == 2
    async with database.session() as session:
        result = await session.execute(
            select(SecurityQuestion.failed_attempts).where(SecurityQuestion.account_id == account_id)
        )
        assert result.scalar_one() == 3


@pytest.mark.asyncio
async def test_bcrypt_long_secrets(session):
    service = AuthService(session, BcryptVerifier(rounds=4))
    long_password = "x" * 100
    long_answer = "y" * 100

    account_id = await service.register("p1", long_password, "q", long_answer)
    assert (await service.login("p1", long_password, "dev-1")).account_id == account_id
    with pytest.raises(InvalidCredentials):
        await service.login("p1", "x" * 99 + "z", "dev-1")

    await service.reset_password("p1", long_answer, "n" * 200)
    assert (await service.login("p1", "n" * 200, "dev-1")).account_id == account_id


@pytest.mark.asyncio
async def test_unreachable_store_is_storage_unavailable(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path}/missing/dir/test.db")
    try:
        async with db.session() as session:
            service = AuthService(session, Sha256Verifier())
            with pytest.raises(StorageUnavailable):
                await service.login("p1", "pw", "dev-1")
            with pytest.raises(StorageUnavailable):
                await service.register("p1", "pw", "q", "a")
    finally:
        await db.dispose()


def test_storage_unavailable_is_not_a_domain_error():
    from playergate.app.core.errors import AuthError
    assert not issubclass(StorageUnavailable, AuthError)
