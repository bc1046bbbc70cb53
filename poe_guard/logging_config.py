import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


def parse_log_level(level: str) -> str:
    """Return the canonical level name for ``level``, raising ValueError for unknown names."""
    name = str(level or "").strip().upper()
    name = _LEVEL_ALIASES.get(name, name)
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r} (expected one of {', '.join(LOG_LEVELS)})")
    return name


def configure_logging(level: str = "WARNING", log_dir: Optional[Path] = None) -> None:
    """Send log records to stderr and, with ``log_dir``, to a timestamped file.

    stdout is left alone: it carries the single check result line.
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(parse_log_level(level))
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if not log_dir:
        return

    log_file = log_dir / f"poe-guard_{datetime.now().strftime('%Y-%m-%d__%H_%M_%S')}.log"
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    except OSError as exc:
        root.error("File logging disabled, cannot write %s: %s", log_file, exc)
        return

    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)
    root.info("Logging to file: %s", log_file)
