"""Database connection and session management."""

from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from usermanagement.core.config import settings


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Build an engine for url.

    In-memory SQLite gets a single shared connection so every session (and
    every thread, e.g. a test client) sees the same database.
    """
    if url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, pool_pre_ping=True, echo=echo)


def create_session_factory(url: str, echo: bool = False) -> sessionmaker[Session]:
    """Return a session factory bound to a fresh engine for url."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=create_db_engine(url, echo=echo),
    )


SessionLocal = create_session_factory(settings.DATABASE_URL, echo=settings.DEBUG)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that yields a DB session from the app's session factory and closes it when done."""
    factory = getattr(request.app.state, "session_factory", None) or SessionLocal
    db = factory()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
