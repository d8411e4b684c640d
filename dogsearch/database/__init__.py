"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base: DeclarativeMeta = declarative_base()


def build_engine(db_url: str, *, echo: bool = False) -> Engine:
    """Create an engine for the listings database."""
    kwargs: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    if db_url.startswith("sqlite"):
        # Fetches run on worker threads
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in db_url:
            # Share one connection across threads
            kwargs["poolclass"] = StaticPool
    engine = create_engine(db_url, **kwargs)

    @event.listens_for(engine, "connect")
    def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
        logger.debug("Database connection established")

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Create listing tables that do not exist yet."""
    from dogsearch import models  # noqa: F401  # register models on Base.metadata

    Base.metadata.create_all(bind=engine)


__all__ = ["Base", "build_engine", "build_session_factory", "init_db", "session_scope"]
