"""
Database engine and session management.

One synchronous SQLAlchemy session per request, handed out by ``get_db``.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from hop_service.config import settings


def _connect_args(database_url: str) -> dict:
    # SQLite connections are shared between the threadpool and the event loop
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    connect_args=_connect_args(settings.database_url),
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it after the request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create tables for every registered model"""
    # Import models so they're registered with Base
    from hop_service import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
