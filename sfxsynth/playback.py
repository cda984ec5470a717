from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict

from .audio import FloatArray, stack_channels
from .errors import PlaybackError
from .spinner import Spinner

_LOGGER = logging.getLogger("sfxsynth.playback")


@runtime_checkable
class AudioSink(Protocol):
    """Receives one sample array per channel and owns playback from there."""

    def play(self, channels: Sequence[NDArray[np.floating[Any]]], sample_rate: int) -> None: ...


class PlaybackBackend(BaseModel):
    name: str
    play_frames: Callable[[FloatArray, int], None]

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )


def _load_backend() -> PlaybackBackend | None:
    return _load_sounddevice() or _load_simpleaudio()


def resolve_backend() -> PlaybackBackend:
    backend = _load_backend()
    if backend is None:
        raise PlaybackError(
            "Playback requires sounddevice or simpleaudio. "
            "Install one of them, e.g. `pip install sfxsynth[playback]`."
        )
    _LOGGER.debug("Using %s playback backend", backend.name)
    return backend


class DeviceSink:
    """Plays through the first available audio device backend.

    The backend is resolved lazily on first use so constructing a sink never
    touches the audio hardware.
    """

    def __init__(
        self,
        backend: PlaybackBackend | None = None,
        *,
        show_progress: bool | None = None,
    ) -> None:
        self._backend = backend
        self._show_progress = show_progress

    @property
    def backend(self) -> PlaybackBackend:
        if self._backend is None:
            self._backend = resolve_backend()
        return self._backend

    def play(self, channels: Sequence[NDArray[np.floating[Any]]], sample_rate: int) -> None:
        frames = stack_channels(channels)
        backend = self.backend
        duration = frames.shape[0] / sample_rate if sample_rate > 0 else 0.0
        with Spinner(f"♪ Playing {duration:.2f}s ... ", enabled=self._show_progress):
            backend.play_frames(frames, sample_rate)


@dataclass
class RecordingSink:
    """Keeps what it was handed instead of playing it."""

    calls: list[tuple[list[FloatArray], int]] = field(default_factory=list)

    def play(self, channels: Sequence[NDArray[np.floating[Any]]], sample_rate: int) -> None:
        copies = [np.array(channel, dtype=np.float32) for channel in channels]
        self.calls.append((copies, sample_rate))

    @property
    def last(self) -> tuple[list[FloatArray], int]:
        if not self.calls:
            raise PlaybackError("Nothing has been played yet")
        return self.calls[-1]


def _load_sounddevice() -> PlaybackBackend | None:
    try:
        import sounddevice as sd_module  # type: ignore[import]
    except ImportError as exc:
        _LOGGER.info("sounddevice not available: %s", exc, exc_info=True)
        return None
    sd: Any = sd_module

    def _play_frames(frames: FloatArray, sample_rate: int) -> None:
        sd.play(frames, sample_rate)
        sd.wait()

    return PlaybackBackend(name="sounddevice", play_frames=_play_frames)


def _load_simpleaudio() -> PlaybackBackend | None:
    try:
        import simpleaudio as sa_module  # type: ignore[import]
    except ImportError as exc:
        _LOGGER.info("simpleaudio not available: %s", exc, exc_info=True)
        return None
    sa: Any = sa_module

    def _play_frames(frames: FloatArray, sample_rate: int) -> None:
        clipped = np.clip(frames, -1.0, 1.0)
        audio = np.ascontiguousarray((clipped * 32_767).astype(np.int16))
        play = sa.play_buffer(audio, audio.shape[1], 2, sample_rate)
        play.wait_done()

    return PlaybackBackend(name="simpleaudio", play_frames=_play_frames)
