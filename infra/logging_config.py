# infra/logging_config.py
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from infra.operational_support import (
    OperationalSupport,
    TraceIdLogFilter,
    get_operational_support,
    install_global_exception_hooks,
)
from infra.path import user_data_dir

LOG_LEVEL_ENV_VAR = "CREDOPS_LOG_LEVEL"


def resolve_log_level(default: int = logging.INFO) -> int:
    raw = (os.getenv(LOG_LEVEL_ENV_VAR) or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def setup_logging(
    log_dir: Path | None = None,
    *,
    support: OperationalSupport | None = None,
    install_hooks: bool = True,
) -> Path:
    """
    Configure root logging: rotating file under the per-user data directory
    plus a console handler, both tagged with the active trace id.
    Returns the log file path.
    """
    log_dir = log_dir or user_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "credops.log"

    root = logging.getLogger()
    root.setLevel(resolve_log_level())
    root.handlers.clear()

    trace_filter = TraceIdLogFilter()
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.addFilter(trace_filter)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] trace=%(trace_id)s %(name)s - %(message)s")
    )
    root.addHandler(file_handler)

    console = logging.StreamHandler()
    console.addFilter(trace_filter)
    console.setFormatter(logging.Formatter("%(levelname)s [trace=%(trace_id)s]: %(message)s"))
    root.addHandler(console)

    root.info("Logging initialized at level %s. Log file at %s", logging.getLevelName(root.level), log_file)
    recorder = support or get_operational_support()
    if install_hooks:
        install_global_exception_hooks(recorder)
    recorder.emit_event(
        event_type="app.logging.initialized",
        message=f"Logging initialized at {log_file}",
        data={"log_file": str(log_file)},
    )
    return log_file
