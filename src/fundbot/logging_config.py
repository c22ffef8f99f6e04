"""
Logging setup for fundbot.

Each pipeline area writes to its own rotating file under LOG_DIR:

    fundbot.app    -> app.log        (HTTP / CLI surface, startup banner)
    fundbot.agent  -> agent.log      (turn state machine, classifier, parser)
    fundbot.llm    -> llm_client.log (Gemini calls)
    fundbot.db     -> store.log      (record repository)

Child loggers (e.g. "fundbot.agent.cache") propagate into their area's file.
Warnings and errors are echoed to the console as well.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict

LOG_FILES: Dict[str, str] = {
    "fundbot.app": "app.log",
    "fundbot.agent": "agent.log",
    "fundbot.llm": "llm_client.log",
    "fundbot.db": "store.log",
}

FORMATTER = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
    "%Y-%m-%d %H:%M:%S",
)

ROTATE_AT_BYTES = 10 * 1024 * 1024
KEEP_ROTATIONS = 5


def _log_dir() -> Path:
    return Path(os.getenv("LOG_DIR") or Path.cwd() / "logs")


def _level() -> int:
    name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, name, logging.INFO)


def setup_file_logger(name: str, log_file: Path, level: int = logging.INFO) -> logging.Logger:
    """
    Attach a rotating file handler and a WARNING+ console handler to `name`,
    replacing whatever handlers it had.
    """
    target = logging.getLogger(name)
    target.setLevel(level)
    for old in list(target.handlers):
        target.removeHandler(old)
        old.close()

    to_file = RotatingFileHandler(
        log_file, maxBytes=ROTATE_AT_BYTES, backupCount=KEEP_ROTATIONS, encoding="utf-8"
    )
    to_file.setLevel(level)
    to_console = logging.StreamHandler()
    to_console.setLevel(logging.WARNING)

    for handler in (to_file, to_console):
        handler.setFormatter(FORMATTER)
        target.addHandler(handler)
    return target


def setup_logging() -> Path:
    """Configure every area logger; returns the directory the files live in."""
    level = _level()
    log_dir = _log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    for name, filename in LOG_FILES.items():
        setup_file_logger(name, log_dir / filename, level)
    logging.getLogger().setLevel(level)
    # Engine echo would flood store.log
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger("fundbot.app").info("Logging configured (level=%s). Log files in: %s",
                                          logging.getLevelName(level), log_dir)
    return log_dir


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
