"""Database engine and session factory for the billing store."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from waterbill.models import Base


def create_db_engine(database_url: str) -> Engine:
    """Create an engine for ``database_url``.

    SQLite connections may be used from the invoice worker threads, so the
    same-thread check is disabled for them.
    """
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory handing out short-lived, read-mostly sessions."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    """Create any missing billing tables."""
    Base.metadata.create_all(engine)


__all__ = ["create_db_engine", "create_session_factory", "init_schema"]
