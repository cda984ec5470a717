"""
Sample generation.

One pass over the output buffer, one sample at a time:

1. Crush gate: sample-and-hold every `crush_interval` ticks
2. Oscillator, shaping curve, tremolo and envelope
3. One-tap feedback echo read back from the buffer itself
4. Slide, FM and noise advance the oscillator phase
5. Pitch jump and repeat retrigger the frequency state
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

from .params import TAU, NormalizedParameters, WaveShape

_LOGGER = logging.getLogger("sfxsynth.generator")

FloatArray: TypeAlias = NDArray[np.float64]
OscFn: TypeAlias = Callable[[float], float]


# =============================================================================
# OSCILLATORS
# =============================================================================


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


def sine(t: float) -> float:
    return math.sin(t)


def triangle(t: float) -> float:
    cycles = t / TAU
    return 1 - 4 * abs(_round_half_up(cycles) - cycles)


def sawtooth(t: float) -> float:
    return 1 - math.fmod(math.fmod(2 * t / TAU, 2) + 2, 2)


def tangent(t: float) -> float:
    return max(min(math.tan(t), 1.0), -1.0)


def cubic_noise(t: float) -> float:
    return math.sin(math.fmod(t, TAU) ** 3)


OSCILLATORS: Mapping[WaveShape, OscFn] = MappingProxyType(
    {
        WaveShape.SINE: sine,
        WaveShape.TRIANGLE: triangle,
        WaveShape.SAWTOOTH: sawtooth,
        WaveShape.TANGENT: tangent,
        WaveShape.NOISE: cubic_noise,
    }
)


def oscillate(shape: WaveShape, t: float) -> float:
    """Raw oscillator value for phase ``t`` (radians)."""
    return OSCILLATORS[shape](t)


def noise_jitter(i: int) -> float:
    """Per-sample phase perturbation in (-1, 1] derived from ``sin(i)``."""
    return 1 - math.fmod((math.sin(i) + 1) * 1e9, 2)


def _sign(value: float) -> float:
    return 1.0 if value > 0 else -1.0


# =============================================================================
# GENERATOR
# =============================================================================


@dataclass(slots=True)
class _GeneratorState:
    frequency: float
    start_frequency: float
    slide: float
    start_slide: float
    phase: float = 0.0
    mod_phase: int = 0
    # Pitch jump counter; 0 means disarmed.
    jump_counter: int = 1
    repeat_counter: int = 0
    crush_counter: int = 0
    sample: float = 0.0
    buffer: list[float] = field(default_factory=list)


class WaveformGenerator:
    """Turn normalized parameters into a mono sample buffer."""

    def __init__(self, params: NormalizedParameters) -> None:
        self.params = params
        self.length = params.length
        self._osc = OSCILLATORS[params.shape]

    def generate(self) -> FloatArray:
        p = self.params
        state = _GeneratorState(
            frequency=p.frequency,
            start_frequency=p.frequency,
            slide=p.slide,
            start_slide=p.slide,
        )
        for i in range(self.length):
            if self._crush_gate_open(state):
                value = self._shape(state.phase, i)
                state.sample = self._mix_echo(value, i, state.buffer)
            self._advance_phase(state, i)
            self._apply_pitch_jump(state)
            self._apply_repeat(state)
            state.buffer.append(state.sample)

        _LOGGER.debug(
            "Generated %d samples (%.3fs) shape=%s crush=%d repeat=%d",
            self.length,
            p.duration,
            p.shape.name.lower(),
            p.crush_interval,
            p.repeat_time,
        )
        return np.asarray(state.buffer, dtype=np.float64)

    def _crush_gate_open(self, state: _GeneratorState) -> bool:
        state.crush_counter += 1
        interval = self.params.crush_interval
        # A zero interval disables the crush: every sample is recomputed.
        if interval == 0:
            return True
        return state.crush_counter % interval == 0

    def _shape(self, phase: float, i: int) -> float:
        p = self.params
        osc = self._osc(phase)
        return (
            self.tremolo(i)
            * _sign(osc)
            * abs(osc) ** p.shape_curve
            * p.volume
            * p.master_volume
            * self.envelope(i)
        )

    def tremolo(self, i: int) -> float:
        p = self.params
        if not p.repeat_time:
            return 1.0
        return 1 - p.tremolo + p.tremolo * math.sin(TAU * i / p.repeat_time)

    def envelope(self, i: int) -> float:
        """Envelope gain at sample ``i``: attack, decay, sustain, release, then silence."""

        p = self.params
        if i < p.attack:
            return i / p.attack
        if i < p.attack + p.decay:
            return 1 - ((i - p.attack) / p.decay) * (1 - p.sustain_volume)
        if i < p.attack + p.decay + p.sustain:
            return p.sustain_volume
        if i < self.length - p.delay:
            return (self.length - i - p.delay) / p.release * p.sustain_volume
        return 0.0

    def _mix_echo(self, value: float, i: int, buffer: list[float]) -> float:
        p = self.params
        if not p.delay:
            return value
        if p.delay > i:
            return value / 2
        tail = 1.0 if i < self.length - p.delay else (self.length - i) / p.delay
        return value / 2 + tail * buffer[int(i - p.delay)] / 2

    def _advance_phase(self, state: _GeneratorState, i: int) -> None:
        p = self.params
        state.slide += p.delta_slide
        state.frequency += state.slide
        f = state.frequency * math.cos(p.modulation * state.mod_phase)
        state.mod_phase += 1
        state.phase += f - f * p.noise * noise_jitter(i)

    def _apply_pitch_jump(self, state: _GeneratorState) -> None:
        if not state.jump_counter:
            return
        state.jump_counter += 1
        if state.jump_counter > self.params.pitch_jump_time:
            state.frequency += self.params.pitch_jump
            state.start_frequency += self.params.pitch_jump
            state.jump_counter = 0

    def _apply_repeat(self, state: _GeneratorState) -> None:
        repeat_time = self.params.repeat_time
        if not repeat_time:
            return
        state.repeat_counter += 1
        if state.repeat_counter % repeat_time == 0:
            state.frequency = state.start_frequency
            state.slide = state.start_slide
            state.jump_counter = state.jump_counter or 1
