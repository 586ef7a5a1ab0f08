"""
Basic settings and logging configuration for the bunkerwatch sounding tools.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path


_TRUE_STRINGS = ("1", "true", "yes", "on")


def _get_resource_root() -> Path:

    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        return Path(sys._MEIPASS)
    return Path(__file__).resolve().parents[2]


def _get_user_data_dir(resource_root: Path) -> Path:

    override = os.environ.get("BUNKERWATCH_DATA_DIR")
    if override:
        return Path(override)
    if getattr(sys, "frozen", False):
        exe_path = Path(getattr(sys, "executable", resource_root))
        return exe_path.parent / "bunkerwatch_app_data"
    return resource_root / "bunkerwatch_app_data"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_STRINGS


@dataclass(slots=True)
class Settings:
    """Application-level settings."""

    project_root: Path
    data_dir: Path
    db_path: Path
    # Report an interpolated sound that rounds to 0 as missing (upstream behaviour)
    zero_sound_is_missing: bool = True

    @classmethod
    def default(cls) -> "Settings":
        resource_root = _get_resource_root()
        data_dir = _get_user_data_dir(resource_root)
        data_dir.mkdir(parents=True, exist_ok=True)

        db_path = data_dir / "bunkerwatch.db"

        return cls(
            project_root=resource_root,
            data_dir=data_dir,
            db_path=db_path,
            zero_sound_is_missing=_env_flag("BUNKERWATCH_ZERO_SOUND_IS_MISSING", True),
        )


def init_logging(settings: Settings, console: bool = False) -> None:
    """Configure basic logging to a file in the data dir and optionally stderr."""
    log_file = settings.data_dir / "bunkerwatch.log"

    handlers: list[logging.Handler] = [logging.FileHandler(log_file, encoding="utf-8")]
    if console:
        stream = logging.StreamHandler()
        stream.setLevel(logging.WARNING)
        handlers.append(stream)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=handlers,
    )

    logging.getLogger(__name__).info("Logging initialized. DB at %s", settings.db_path)
