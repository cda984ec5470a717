from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from sfxsynth.logging_utils import (
    DEBUG_ENV,
    LOG_DIR_ENV,
    PACKAGE_LOGGER,
    configure_logging,
    get_log_dir,
    get_log_path,
    log_exception,
    reset_logging,
)


@pytest.fixture
def log_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    monkeypatch.setenv(LOG_DIR_ENV, str(tmp_path))
    monkeypatch.delenv(DEBUG_ENV, raising=False)
    reset_logging()
    yield tmp_path
    reset_logging()


def _handlers() -> list[logging.Handler]:
    return list(logging.getLogger(PACKAGE_LOGGER).handlers)


def _console_handlers() -> list[logging.Handler]:
    return [
        handler
        for handler in _handlers()
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.FileHandler)
    ]


def test_log_dir_uses_env_override(log_dir: Path) -> None:
    assert get_log_dir() == log_dir
    assert get_log_path() == log_dir / "sfxsynth.log"


def test_library_configuration_is_file_only(log_dir: Path) -> None:
    path = configure_logging()

    assert path == log_dir / "sfxsynth.log"
    assert [type(handler) for handler in _handlers()] == [logging.FileHandler]
    assert configure_logging() == path
    assert len(_handlers()) == 1


def test_console_level_follows_debug(log_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    configure_logging(console=True, debug=False)
    (console,) = _console_handlers()
    assert console.level == logging.INFO

    monkeypatch.setenv(DEBUG_ENV, "1")
    configure_logging(console=True, force=True)
    (console,) = _console_handlers()
    assert console.level == logging.DEBUG


def test_console_added_once_to_file_logging(log_dir: Path) -> None:
    configure_logging()
    configure_logging(console=True)
    configure_logging(console=True)

    assert len(_console_handlers()) == 1
    assert len(_handlers()) == 2


def test_reset_closes_owned_handlers_only(log_dir: Path) -> None:
    foreign = logging.NullHandler()
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.addHandler(foreign)
    try:
        configure_logging(console=True)
        (file_handler,) = [h for h in _handlers() if isinstance(h, logging.FileHandler)]

        reset_logging()

        assert _handlers() == [foreign]
        assert file_handler.stream is None
    finally:
        logger.removeHandler(foreign)


def test_unwritable_log_dir_disables_file_logging(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, log_dir: Path
) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    monkeypatch.setenv(LOG_DIR_ENV, str(blocker / "logs"))

    assert configure_logging() is None
    assert not [h for h in _handlers() if isinstance(h, logging.FileHandler)]


def test_log_exception_appends_traceback(log_dir: Path) -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError as exc:
        path = log_exception("render", exc)

    assert path == log_dir / "sfxsynth.log"
    text = path.read_text(encoding="utf-8")
    assert "[ERROR] render failed: RuntimeError: boom" in text
    assert "Traceback" in text
