# playergate/app/api/deps.py
from typing import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from playergate.app.core.config import Settings
from playergate.app.core.errors import NotAuthorized
from playergate.app.security.tokens import decode_access_token
from playergate.app.services.auth import AuthService
from playergate.app.services.progress import ProgressStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request from the Database opened by the lifespan.

    Usage in endpoints:
        async def handler(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with request.app.state.db.session() as session:
        yield session


def get_auth_service(
        request: Request,
        db: AsyncSession = Depends(get_db),
        settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(
        db,
        request.app.state.verifier,
        max_failed_attempts=settings.RECOVERY_MAX_FAILED_ATTEMPTS,
        lockout_minutes=settings.RECOVERY_LOCKOUT_MINUTES,
    )


def get_progress_store(db: AsyncSession = Depends(get_db)) -> ProgressStore:
    return ProgressStore(db)


async def get_current_account_id(
        credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
        settings: Settings = Depends(get_settings),
) -> int:
    """Account id from a valid bearer token, else 403."""
    if credentials is None:
        raise NotAuthorized()

    payload = decode_access_token(credentials.credentials, settings.SECRET_KEY, settings.ALGORITHM)
    if payload is None or payload.sub is None or not payload.sub.isdigit():
        raise NotAuthorized()

    return int(payload.sub)
