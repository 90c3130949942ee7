"""Runtime-writable paths for GiftBank.

Writing into the project directory works when running from source, but the
current exam, the simulation history and the logs belong to the user, not to
the checkout. Centralize all writable paths here.
"""

from __future__ import annotations

from pathlib import Path
import os

from .constants import APP_NAME


def get_app_data_dir() -> Path:
    """Return a writable per-user/app data directory."""
    override = os.environ.get("GIFTBANK_HOME")
    if override:
        path = Path(override)
    else:
        try:
            from PySide6.QtCore import QStandardPaths

            base = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
            if base:
                path = Path(base)
            else:
                raise RuntimeError("empty QStandardPaths")
        except Exception:
            # Fallback for non-Qt contexts (tests, tooling). Keep it stable.
            path = Path.home() / ".local" / "share" / APP_NAME

    path.mkdir(parents=True, exist_ok=True)
    return path


def get_preferences_path() -> Path:
    return get_app_data_dir() / "preferences.json"


def get_current_exam_path() -> Path:
    return get_app_data_dir() / "current_exam.json"


def get_simulation_history_path() -> Path:
    return get_app_data_dir() / "simulation_history.json"


def get_log_path() -> Path:
    return get_app_data_dir() / "giftbank.log"
