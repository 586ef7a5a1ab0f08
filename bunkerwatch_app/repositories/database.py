"""
SQLAlchemy database setup for the bunkerwatch calibration store.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    """Base declarative class for ORM models."""

    pass


def init_database(db_path: Path) -> sessionmaker:
    """
    Initialize the SQLite database, create tables, and return a session factory.

    The factory is owned by the caller (the CLI entry point or a test fixture)
    and passed on explicitly; there is no module-level session state.
    """
    # Import ORM models so their metadata is registered on Base
    from .calibration_repository import CompartmentORM, HeelCorrectionORM, MainSoundingORM, VesselORM  # noqa: F401
    from .sounding_log_repository import SoundingLogORM  # noqa: F401

    engine = create_engine(f"sqlite:///{db_path}", future=True, echo=False)
    Base.metadata.create_all(bind=engine)

    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        future=True,
    )


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """One session per unit of work; rolled back on error and always closed."""
    db = factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
