from __future__ import annotations

import os
from pathlib import Path


DEFAULT_APP_VERSION = "0.3.0"
VERSION_ENV_VAR = "CREDOPS_APP_VERSION"
_VERSION_FILE = Path(__file__).with_name("app_version.txt")


def _read_version_file(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8").strip() or None
    except OSError:
        return None


def get_app_version(version_file: Path | None = None) -> str:
    """Environment override, then the bundled version file, then the default."""
    override = (os.getenv(VERSION_ENV_VAR) or "").strip()
    if override:
        return override
    return _read_version_file(version_file or _VERSION_FILE) or DEFAULT_APP_VERSION


__all__ = ["DEFAULT_APP_VERSION", "VERSION_ENV_VAR", "get_app_version"]
