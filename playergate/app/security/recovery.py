# playergate/app/security/recovery.py
"""
Lockout rules for security-answer attempts.

A correct answer trusts a device or resets the password, so the answer
is throttled like a password: after max_attempts consecutive failures
the account's recovery is locked for lockout_minutes, counted from the
last failed attempt.
"""
from datetime import datetime, timezone
from typing import Optional


# Defaults, overridable through settings
MAX_FAILED_ATTEMPTS = 5
LOCKOUT_DURATION_MINUTES = 15


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _elapsed_minutes(last_attempt_at: datetime, now: Optional[datetime] = None) -> float:
    now = now or datetime.now(timezone.utc)
    return (now - _as_utc(last_attempt_at)).total_seconds() / 60


def is_recovery_locked(
    failed_attempts: int,
    last_attempt_at: Optional[datetime],
    max_attempts: int = MAX_FAILED_ATTEMPTS,
    lockout_minutes: int = LOCKOUT_DURATION_MINUTES,
    now: Optional[datetime] = None,
) -> bool:
    """
    Check if recovery is locked due to too many failed answers.

    Args:
        failed_attempts: Number of consecutive failed attempts
        last_attempt_at: Timestamp of last failed attempt
        max_attempts: Failures allowed before locking
        lockout_minutes: Lock duration after the last failure

    Returns:
        True if locked, False otherwise
    """
    if failed_attempts < max_attempts:
        return False

    if last_attempt_at is None:
        return False

    return _elapsed_minutes(last_attempt_at, now) < lockout_minutes


def get_lockout_remaining_minutes(
    last_attempt_at: Optional[datetime],
    lockout_minutes: int = LOCKOUT_DURATION_MINUTES,
    now: Optional[datetime] = None,
) -> int:
    """Remaining lockout time in whole minutes (at least 1 while locked)."""
    if last_attempt_at is None:
        return 0

    remaining = lockout_minutes - _elapsed_minutes(last_attempt_at, now)
    if remaining <= 0:
        return 0
    return max(1, int(remaining))
