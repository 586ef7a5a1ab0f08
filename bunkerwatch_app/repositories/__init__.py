"""
Repository layer for persistence (SQLite via SQLAlchemy).
"""

from bunkerwatch_app.repositories.database import Base, init_database, session_scope
from bunkerwatch_app.repositories.calibration_repository import CalibrationRepository
from bunkerwatch_app.repositories.sounding_log_repository import SoundingLogRepository

__all__ = [
    "Base",
    "init_database",
    "session_scope",
    "CalibrationRepository",
    "SoundingLogRepository",
]
