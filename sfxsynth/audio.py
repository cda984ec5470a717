from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np
from numpy.typing import NDArray

from .errors import InvalidParameterError

FloatArray = NDArray[np.float32]
AudioNumbers = NDArray[np.floating[Any]] | Sequence[float] | FloatArray


def ensure_audio_contract(audio: AudioNumbers, *, check_peak: bool = True) -> FloatArray:
    """Normalize dtype/range/shape to the playback contract."""

    mono: FloatArray = np.asarray(audio, dtype=np.float32).reshape(-1)
    if mono.size == 0 or not check_peak:
        return mono
    peak = float(np.max(np.abs(mono)))
    if peak > 1.0:
        mono = mono / peak
    return mono


def stack_channels(channels: Sequence[AudioNumbers]) -> FloatArray:
    """Stack equal-length mono channels into a ``(frames, channels)`` array."""

    if not channels:
        raise InvalidParameterError("At least one channel is required")
    prepared = [np.asarray(channel, dtype=np.float32).reshape(-1) for channel in channels]
    lengths = {channel.size for channel in prepared}
    if len(lengths) != 1:
        raise InvalidParameterError(
            f"All channels must have the same length, got {sorted(lengths)}"
        )
    stacked: FloatArray = np.stack(prepared, axis=1)
    if stacked.size == 0:
        return stacked
    peak = float(np.max(np.abs(stacked)))
    if peak > 1.0:
        stacked = stacked / peak
    return stacked
