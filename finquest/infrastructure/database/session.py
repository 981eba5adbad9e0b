"""Database engine and per-request sessions"""

from typing import Any, Dict
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from finquest.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """
    Engine keyword arguments for a database URL.

    Postgres gets a bounded pool (20 connections, recycled hourly). SQLite,
    used for local runs, is shared across the server's worker threads and
    keeps SQLAlchemy's default pool.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": 10,
        "max_overflow": 10,
        "pool_recycle": 3600,
    }


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Request-scoped session; uncommitted work is discarded on close"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
