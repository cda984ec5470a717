from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from sfxsynth.cli import build_parser, main
from sfxsynth.logging_utils import DEBUG_ENV, LOG_DIR_ENV, PACKAGE_LOGGER, reset_logging
from sfxsynth.playback import RecordingSink


@pytest.fixture(autouse=True)
def _isolated_logs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv(LOG_DIR_ENV, str(tmp_path))
    monkeypatch.delenv(DEBUG_ENV, raising=False)
    yield
    reset_logging()


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_presets_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["presets"]) == 0
    assert "laser" in capsys.readouterr().out


def test_info_command(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["info", "[,0,440,,.01,.02]", "--seed", "1"]) == 0
    out = capsys.readouterr().out
    assert "samples" in out
    assert str(9 + 441 + 882) in out


def test_play_command_uses_given_sink() -> None:
    sink = RecordingSink()

    assert main(["play", "preset:blip", "--seed", "3", "--channels", "2"], sink=sink) == 0

    channels, sample_rate = sink.last
    assert sample_rate == 44_100
    assert len(channels) == 2
    assert channels[0].size == channels[1].size


def test_errors_are_logged_and_return_one(tmp_path: Path) -> None:
    assert main(["info", "preset:kazoo"]) == 1

    log_text = (tmp_path / "sfxsynth.log").read_text(encoding="utf-8")
    assert "InvalidParameterError" in log_text


def _console_levels() -> list[int]:
    return [
        handler.level
        for handler in logging.getLogger(PACKAGE_LOGGER).handlers
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.FileHandler)
    ]


def test_debug_flag_lowers_console_level() -> None:
    assert main(["presets"]) == 0
    assert _console_levels() == [logging.INFO]

    assert main(["--debug", "presets"]) == 0
    assert _console_levels() == [logging.DEBUG]


def test_debug_env_enables_debug_console(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(DEBUG_ENV, "1")

    assert main(["presets"]) == 0
    assert _console_levels() == [logging.DEBUG]
