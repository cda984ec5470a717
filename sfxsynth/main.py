from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np
from numpy.typing import NDArray

from .config import DEFAULT_SETTINGS, SynthSettings
from .errors import InvalidParameterError
from .generator import FloatArray, WaveformGenerator
from .params import NormalizedParameters, ParameterSource, coerce_parameters
from .playback import AudioSink

_LOGGER = logging.getLogger("sfxsynth.main")


def _normalized(
    params: ParameterSource | NormalizedParameters,
    *,
    rng: np.random.Generator | None,
    settings: SynthSettings | None,
) -> NormalizedParameters:
    match params:
        case NormalizedParameters():
            if settings is not None and settings.sample_rate != params.sample_rate:
                raise InvalidParameterError(
                    "Normalized parameters were built for "
                    f"{params.sample_rate} Hz, not {settings.sample_rate} Hz"
                )
            return params
        case _:
            return coerce_parameters(params).normalize(rng, settings=settings)


def build_samples(
    params: ParameterSource | NormalizedParameters,
    *,
    rng: np.random.Generator | None = None,
    settings: SynthSettings | None = None,
) -> FloatArray:
    """Generate one mono sample buffer.

    ``params`` may be a ParameterSet, a compact array (sequence or string),
    a mapping of field names, or already-normalized parameters. ``rng`` is
    only consulted for the one-time frequency jitter.
    """

    return WaveformGenerator(_normalized(params, rng=rng, settings=settings)).generate()


def build_channels(
    params: ParameterSource,
    *,
    channels: int = 2,
    rng: np.random.Generator | None = None,
    settings: SynthSettings | None = None,
) -> list[FloatArray]:
    """Generate ``channels`` independent buffers of equal length.

    Each channel gets its own jitter draw; durations are never jittered so
    every buffer has the same length.
    """

    if channels < 1:
        raise InvalidParameterError(f"channels must be at least 1, got {channels}")
    parameter_set = coerce_parameters(params)
    generator = rng if rng is not None else np.random.default_rng()
    return [
        build_samples(parameter_set, rng=generator, settings=settings) for _ in range(channels)
    ]


def play_samples(
    *channels: NDArray[np.floating[Any]] | Sequence[float],
    sink: AudioSink,
    sample_rate: int | None = None,
) -> list[FloatArray]:
    """Hand equal-length channel buffers to ``sink``."""

    if not channels:
        raise InvalidParameterError("play_samples needs at least one channel")
    arrays = [np.asarray(channel, dtype=np.float64).reshape(-1) for channel in channels]
    lengths = {array.size for array in arrays}
    if len(lengths) != 1:
        raise InvalidParameterError(
            f"All channels must have the same length, got {sorted(lengths)}"
        )
    rate = sample_rate if sample_rate is not None else DEFAULT_SETTINGS.sample_rate
    _LOGGER.debug("Playing %d channel(s) of %d samples at %d Hz", len(arrays), arrays[0].size, rate)
    sink.play(arrays, rate)
    return arrays


def play_sound(
    params: ParameterSource | NormalizedParameters,
    *,
    sink: AudioSink,
    rng: np.random.Generator | None = None,
    settings: SynthSettings | None = None,
) -> FloatArray:
    """Build a sound and play it in one call; returns the generated samples."""

    normalized = _normalized(params, rng=rng, settings=settings)
    samples = WaveformGenerator(normalized).generate()
    play_samples(samples, sink=sink, sample_rate=normalized.sample_rate)
    return samples
