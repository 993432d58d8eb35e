"""
Database wiring for the intake automation log.

Only the ``automation_logs`` table lives here; extraction itself never
touches the database.
"""
from __future__ import annotations

import os
import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./intake.db")

# SQLAlchemy 2.0 only accepts the postgresql:// scheme
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# SQLite sessions are shared across FastAPI worker threads
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
logger = logging.getLogger("intake.automation_log")


def init_db() -> None:
    """Ensure the automation log table exists (idempotent)."""
    from packages.db.models import Base  # noqa: F811
    Base.metadata.create_all(bind=engine)
    logger.info("Automation log tables ready on %s", engine.url.get_backend_name())


def get_db() -> Generator[Session, None, None]:
    """
    Request-scoped session for the automation routes.

    Commits when the route returns normally, rolls back on an exception.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
