# infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "CredOpsBackOffice"
COMPANY_NAME = "CredOps"


def user_data_dir() -> Path:
    """
    Returns a per-user data directory, e.g.:

    Windows:
        C:\\Users\\<User>\\AppData\\Roaming\\CredOps\\CredOpsBackOffice

    macOS:
        ~/Library/Application Support/CredOps/CredOpsBackOffice

    Linux:
        ~/.local/share/CredOps/CredOpsBackOffice
    """
    try:
        if sys.platform.startswith("win"):
            base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))

        path = base / COMPANY_NAME / APP_NAME
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError:
        # Last-resort fallback: use home directory
        fallback = Path.home() / f".{APP_NAME}"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def default_db_path() -> Path:
    """
    The full path to the SQLite database file under the user data dir.
    """
    return user_data_dir() / "credops.db"


def database_url() -> str:
    """CREDOPS_DATABASE_URL when set, else the per-user SQLite file."""
    override = os.getenv("CREDOPS_DATABASE_URL", "").strip()
    if override:
        return override
    return f"sqlite:///{default_db_path().as_posix()}"
