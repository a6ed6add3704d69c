"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session, sessionmaker

from usermanagement.api.v1 import router as v1_router
from usermanagement.api.v1.auth import enforce_access, get_current_principal
from usermanagement.core.config import Settings, get_settings
from usermanagement.core.database import SessionLocal
from usermanagement.core.security import PasswordHasher
from usermanagement.repositories.credential_store import SqlAlchemyCredentialStore
from usermanagement.services.access_control import default_policy
from usermanagement.services.seed import check_role_configuration
from usermanagement.services.sessions import SessionRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Check role configuration at startup; drop every session at shutdown."""
    settings: Settings = app.state.settings
    if settings.CHECK_ROLES_ON_STARTUP:
        db = app.state.session_factory()
        try:
            check_role_configuration(SqlAlchemyCredentialStore(db), settings.DEFAULT_ROLE)
        finally:
            db.close()
    yield
    app.state.sessions.clear()
    logger.info("Session table cleared on shutdown")


def create_app(
    settings: Settings | None = None,
    session_factory: sessionmaker[Session] | None = None,
) -> FastAPI:
    """Build the application with its own session table, hasher and access policy."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )

    app = FastAPI(
        title="User Management API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        dependencies=[Depends(enforce_access)],
    )
    app.state.settings = settings
    app.state.session_factory = session_factory or SessionLocal
    app.state.password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.sessions = SessionRegistry(policy=settings.SESSION_CONCURRENCY_POLICY)
    app.state.access_policy = default_policy(settings.API_V1_PREFIX)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root(request: Request, _principal=Depends(get_current_principal)) -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "User Management API", "api": request.app.state.settings.API_V1_PREFIX}

    return app


app = create_app()
