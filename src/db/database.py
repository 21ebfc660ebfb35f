from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from config import get_settings
from src.db.models.base import Base

settings = get_settings()


def _engine_kwargs(url: str) -> dict[str, Any]:
    """Engine options per backend."""
    kwargs: dict[str, Any] = {"echo": settings.log_level == "DEBUG", "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # FastAPI runs sync dependencies in a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


def build_engine(url: str) -> Engine:
    """Create an engine for the given URL."""
    return create_engine(url, **_engine_kwargs(url))


# Sync engine/session
engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_engine() -> Engine:
    """Get the database engine."""
    return engine


def init_db(bind: Engine | None = None) -> None:
    """Initialize database tables."""
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables initialized")


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency for database sessions."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
