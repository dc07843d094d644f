# playergate/app/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from playergate.app.api.v1.router import api_router
from playergate.app.core.config import Settings, get_settings
from playergate.app.core.errors import AuthError, StorageUnavailable
from playergate.app.core.logging_config import setup_logging
from playergate.app.db.session import Database
from playergate.app.security.hashing import get_verifier

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    # Fail at startup on a bad scheme, not on the first request
    verifier = get_verifier(settings.VERIFIER_SCHEME, settings.BCRYPT_ROUNDS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Store handle lives exactly as long as the app
        db = Database(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        await db.create_all()
        app.state.db = db
        logger.info("%s started (verifier=%s)", settings.PROJECT_NAME, verifier.scheme)
        try:
            yield
        finally:
            await db.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.verifier = verifier

    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.BACKEND_CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        headers = None
        if exc.status_code == 401:
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "error": exc.code},
            headers=headers,
        )

    @app.exception_handler(StorageUnavailable)
    async def storage_error_handler(request: Request, exc: StorageUnavailable):
        logger.error("Storage unavailable on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": "Storage unavailable, retry later", "error": exc.code},
            headers={"Retry-After": str(settings.STORAGE_RETRY_AFTER_SECONDS)},
        )

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        return {"status": "Game Server is running"}

    return app


app = create_app()
