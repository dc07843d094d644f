# playergate/app/core/errors.py
"""
Error taxonomy for the identity & device-trust service.

Two families:
- AuthError: expected, per-request domain outcomes (bad password,
  wrong answer, unknown identity...). Each carries the HTTP status and
  a stable machine-readable code.
- StorageUnavailable: the backing store could not be reached or a
  transaction failed. Deliberately NOT an AuthError so callers can
  tell infrastructure faults apart and apply their own retry policy.
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError


class AuthError(Exception):
    """Base class for domain failures returned to the caller."""

    status_code: int = 400
    code: str = "auth_error"
    message: str = "Request failed"

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(AuthError):
    status_code = 400
    code = "validation_error"
    message = "All fields are required"


class IdentityConflict(AuthError):
    status_code = 400
    code = "identity_conflict"
    message = "Identity already exists"


class InvalidCredentials(AuthError):
    # Same message for unknown identity and wrong password
    status_code = 401
    code = "invalid_credentials"
    message = "Invalid identity or password"


class InvalidAnswer(AuthError):
    status_code = 401
    code = "invalid_answer"
    message = "Incorrect security answer"


class NotFound(AuthError):
    status_code = 404
    code = "not_found"
    message = "Not found"


class NotAuthorized(AuthError):
    status_code = 403
    code = "not_authorized"
    message = "Could not validate credentials"


class RecoveryLocked(AuthError):
    status_code = 429
    code = "recovery_locked"
    message = "Too many failed attempts"

    def __init__(self, remaining_minutes: int):
        self.remaining_minutes = remaining_minutes
        super().__init__(
            f"Recovery locked due to too many failed attempts. "
            f"Try again in {remaining_minutes} minutes."
        )


class StorageUnavailable(Exception):
    """The persistence layer is unreachable or a transaction failed."""

    status_code = 503
    code = "storage_unavailable"

    def __init__(self, message: str = "Storage unavailable"):
        self.message = message
        super().__init__(message)


@contextmanager
def storage_errors() -> Iterator[None]:
    """
    Translate driver-level failures into StorageUnavailable.

    IntegrityError is left alone: uniqueness violations are domain
    outcomes that the stores map themselves.
    """
    try:
        yield
    except IntegrityError:
        raise
    except (OperationalError, DBAPIError) as e:
        raise StorageUnavailable(str(e.orig) if e.orig else str(e)) from e
    except OSError as e:
        # Raw socket failures from the async drivers while connecting
        raise StorageUnavailable(str(e)) from e
