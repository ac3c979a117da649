"""
Database Configuration Module
Synchronous SQLAlchemy engine and session factory
"""
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from config import DATABASE_URL

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    echo=False,
    pool_pre_ping=True,              # Verify connections before use
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(
    bind=engine,
    class_=Session,
    expire_on_commit=False,
    autoflush=False,
)

# Base for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI to get a database session.
    Commits are issued by the garden store; anything left open is rolled back.
    """
    session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bind=None) -> None:
    """Create all tables (idempotent)."""
    import models  # noqa: F401  registers the mappers

    Base.metadata.create_all(bind=bind or engine)


def close_db_connections() -> None:
    """
    Gracefully close all database connections.
    Call this on application shutdown.
    """
    engine.dispose()
