from __future__ import annotations

import logging
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path

_LOGGER = logging.getLogger("sfxsynth.logging")
PACKAGE_LOGGER = "sfxsynth"
LOG_DIR_ENV = "SFXSYNTH_LOG_DIR"
DEBUG_ENV = "SFXSYNTH_DEBUG"
_LOG_FILE = "sfxsynth.log"
_CONSOLE_FORMAT = "%(level_prefix)s %(name)s: %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LEVEL_PREFIXES = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
}
# Marks handlers installed here so reset_logging() leaves foreign ones alone.
_OWNED = "_sfxsynth_owned"

_active_log_path: Path | None = None


class _ConsoleEmojiFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.level_prefix = _LEVEL_PREFIXES.get(record.levelno, "")
        return super().format(record)


def get_log_dir() -> Path:
    configured = os.environ.get(LOG_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / "sfxsynth" / "logs"


def get_log_path() -> Path:
    """Log file currently in use, or where the next one would be created."""
    return _active_log_path or get_log_dir() / _LOG_FILE


def debug_enabled(debug: bool | None = None) -> bool:
    return bool(os.environ.get(DEBUG_ENV)) if debug is None else debug


def _owned_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [handler for handler in logger.handlers if getattr(handler, _OWNED, False)]


def reset_logging() -> None:
    """Detach and close every handler configure_logging() installed."""

    global _active_log_path
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in _owned_handlers(logger):
        logger.removeHandler(handler)
        handler.close()
    _active_log_path = None


def configure_logging(
    *,
    console: bool = False,
    debug: bool | None = None,
    force: bool = False,
) -> Path | None:
    """Install the sfxsynth file handler, plus a stderr handler when ``console`` is set.

    Importing the package installs only the file handler; the CLI asks for
    the console one. Returns the log file path, or None when the log
    directory cannot be created.
    """

    global _active_log_path
    logger = logging.getLogger(PACKAGE_LOGGER)
    installed = _owned_handlers(logger)
    wants_console = console and not any(
        isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.FileHandler)
        for handler in installed
    )
    if installed and not force and not wants_console:
        return _active_log_path

    if force:
        reset_logging()
    logger.setLevel(logging.DEBUG)

    if console:
        console_handler = logging.StreamHandler(stream=sys.__stderr__)
        console_handler.setLevel(logging.DEBUG if debug_enabled(debug) else logging.INFO)
        console_handler.setFormatter(_ConsoleEmojiFormatter(_CONSOLE_FORMAT))
        setattr(console_handler, _OWNED, True)
        logger.addHandler(console_handler)

    if _active_log_path is None:
        path = get_log_dir() / _LOG_FILE
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
        except OSError as exc:
            _LOGGER.warning("File logging disabled, cannot open %s: %s", path, exc)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT))
            setattr(file_handler, _OWNED, True)
            logger.addHandler(file_handler)
            _active_log_path = path

    return _active_log_path


def log_exception(context: str, exc: BaseException) -> Path | None:
    """Append ``exc`` with its traceback to the log file; returns the file written."""

    path = get_log_path()
    stamp = datetime.now().strftime(_DATE_FORMAT)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"{stamp} [ERROR] {context} failed: {type(exc).__name__}: {exc}\n")
            handle.writelines(traceback.format_exception(type(exc), exc, exc.__traceback__))
    except OSError as log_exc:
        _LOGGER.warning("Failed to write log file %s: %s", path, log_exc)
        return None
    return path
