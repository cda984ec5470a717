"""
Synthesis parameters.

`ParameterSet` holds the user-facing controls in seconds and Hz.
`ParameterSet.normalize()` converts them into the sample domain used by the
generator and applies the one-time frequency jitter.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, ClassVar, cast

import numpy as np
from pydantic import (
    BaseModel,
    ConfigDict,
    ModelWrapValidatorHandler,
    ValidationError,
    field_validator,
    model_validator,
)

from .config import DEFAULT_SETTINGS, SynthSettings
from .errors import InvalidParameterError

_LOGGER = logging.getLogger("sfxsynth.params")

TAU = math.pi * 2

# Minimum attack in samples, keeps the onset from popping.
ATTACK_FLOOR = 9


class WaveShape(IntEnum):
    SINE = 0
    TRIANGLE = 1
    SAWTOOTH = 2
    TANGENT = 3
    NOISE = 4


class ParameterSet(BaseModel):
    """Sound parameters in their natural units (seconds, Hz)."""

    volume: float = 1.0
    randomness: float = 0.05
    frequency: float = 220.0
    attack: float = 0.0
    sustain: float = 0.0
    release: float = 0.1
    shape: int = WaveShape.SINE
    shape_curve: float = 1.0
    slide: float = 0.0
    delta_slide: float = 0.0
    pitch_jump: float = 0.0
    pitch_jump_time: float = 0.0
    repeat_time: float = 0.0
    noise: float = 0.0
    modulation: float = 0.0
    bit_crush: float = 0.0
    delay: float = 0.0
    sustain_volume: float = 1.0
    decay: float = 0.0
    tremolo: float = 0.0

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Positional order of the compact array form.
    FIELD_ORDER: ClassVar[tuple[str, ...]] = (
        "volume",
        "randomness",
        "frequency",
        "attack",
        "sustain",
        "release",
        "shape",
        "shape_curve",
        "slide",
        "delta_slide",
        "pitch_jump",
        "pitch_jump_time",
        "repeat_time",
        "noise",
        "modulation",
        "bit_crush",
        "delay",
        "sustain_volume",
        "decay",
        "tremolo",
    )
    DURATION_FIELDS: ClassVar[tuple[str, ...]] = (
        "attack",
        "sustain",
        "release",
        "decay",
        "delay",
        "pitch_jump_time",
        "repeat_time",
    )

    @model_validator(mode="wrap")
    @classmethod
    def _raise_parameter_error(
        cls, data: Any, handler: ModelWrapValidatorHandler["ParameterSet"]
    ) -> "ParameterSet":
        try:
            return handler(data)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'parameters'}: {error['msg']}"
                for error in exc.errors()
            )
            raise InvalidParameterError(f"Invalid sound parameters: {problems}") from exc

    @field_validator("shape", mode="before")
    @classmethod
    def _coerce_shape(cls, value: object) -> object:
        match value:
            case WaveShape():
                return int(value)
            case str() if not value.strip().lstrip("-").isdigit():
                try:
                    return int(WaveShape[value.strip().upper()])
                except KeyError as exc:
                    names = ", ".join(shape.name.lower() for shape in WaveShape)
                    raise InvalidParameterError(
                        f"Unknown wave shape {value!r}. Valid: {names}"
                    ) from exc
            case float() if not math.isfinite(value):
                raise InvalidParameterError(f"shape must be finite, got {value}")
            case _:
                return value

    @model_validator(mode="after")
    def _check_values(self) -> "ParameterSet":
        for name in self.FIELD_ORDER:
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidParameterError(f"{name} must be finite, got {value}")
        for name in self.DURATION_FIELDS:
            if getattr(self, name) < 0:
                raise InvalidParameterError(
                    f"{name} is a duration and cannot be negative, got {getattr(self, name)}"
                )
        if not WaveShape.SINE <= self.shape <= WaveShape.NOISE:
            raise InvalidParameterError(
                f"shape must be between {min(WaveShape)} and {max(WaveShape)}, got {self.shape}"
            )
        if not 0.0 <= self.randomness <= 1.0:
            raise InvalidParameterError(f"randomness must be within [0, 1], got {self.randomness}")
        if self.shape_curve < 0:
            raise InvalidParameterError(f"shape_curve cannot be negative, got {self.shape_curve}")
        if self.bit_crush < 0:
            raise InvalidParameterError(f"bit_crush cannot be negative, got {self.bit_crush}")
        return self

    @property
    def wave_shape(self) -> WaveShape:
        return WaveShape(self.shape)

    @classmethod
    def from_sequence(cls, values: Sequence[float | None]) -> "ParameterSet":
        """Build from the compact positional form; ``None`` keeps the default."""

        if len(values) > len(cls.FIELD_ORDER):
            raise InvalidParameterError(
                f"Expected at most {len(cls.FIELD_ORDER)} parameters, got {len(values)}"
            )
        data = {
            name: value for name, value in zip(cls.FIELD_ORDER, values) if value is not None
        }
        return cls.model_validate(data)

    @classmethod
    def parse(cls, text: str) -> "ParameterSet":
        """Parse ``"[,,925,.04,.3]"`` style text; empty items are holes."""

        body = text.strip()
        if body.startswith("[") and body.endswith("]"):
            body = body[1:-1]
        if not body.strip():
            return cls()
        values: list[float | None] = []
        for item in body.split(","):
            token = item.strip()
            if not token:
                values.append(None)
                continue
            try:
                values.append(float(token))
            except ValueError as exc:
                raise InvalidParameterError(f"Not a number in parameter list: {token!r}") from exc
        return cls.from_sequence(values)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ParameterSet":
        return cls.model_validate(data)

    def to_sequence(self) -> list[float | None]:
        """Return the compact positional form, defaults as holes, trailing holes trimmed."""

        defaults = type(self).model_fields
        values: list[float | None] = []
        for name in self.FIELD_ORDER:
            value = getattr(self, name)
            values.append(None if value == defaults[name].default else value)
        while values and values[-1] is None:
            values.pop()
        return values

    def to_compact(self) -> str:
        items = ["" if value is None else f"{value:.10g}" for value in self.to_sequence()]
        return "[" + ",".join(items) + "]"

    def normalize(
        self,
        rng: np.random.Generator | None = None,
        *,
        settings: SynthSettings | None = None,
    ) -> "NormalizedParameters":
        """Convert to sample-domain values, drawing the frequency jitter once."""

        active = settings or DEFAULT_SETTINGS
        generator = rng if rng is not None else np.random.default_rng()
        draw = float(generator.random())
        return NormalizedParameters.from_parameters(self, draw=draw, settings=active)


def _sample_count(name: str, value: float) -> int:
    if not math.isfinite(value):
        raise InvalidParameterError(f"{name} overflows when converted to samples")
    return int(value)


@dataclass(frozen=True, slots=True)
class NormalizedParameters:
    """Sample-domain parameters consumed by the waveform generator."""

    volume: float
    frequency: float
    attack: float
    decay: float
    sustain: float
    release: float
    delay: float
    shape: WaveShape
    shape_curve: float
    slide: float
    delta_slide: float
    pitch_jump: float
    pitch_jump_time: float
    repeat_time: int
    noise: float
    modulation: float
    crush_interval: int
    sustain_volume: float
    tremolo: float
    master_volume: float
    sample_rate: int

    @classmethod
    def from_parameters(
        cls,
        params: ParameterSet,
        *,
        draw: float,
        settings: SynthSettings = DEFAULT_SETTINGS,
    ) -> "NormalizedParameters":
        """Rescale ``params`` for ``settings.sample_rate`` using a uniform ``draw`` in [0, 1)."""

        if not 0.0 <= draw < 1.0:
            raise InvalidParameterError(f"Random draw must be within [0, 1), got {draw}")
        rate = settings.sample_rate
        jitter = 1 + params.randomness * (2 * draw - 1)
        frequency = params.frequency * jitter * TAU / rate
        _LOGGER.debug(
            "Frequency jitter draw=%.6f factor=%.6f (%.3f Hz -> %.3f Hz)",
            draw,
            jitter,
            params.frequency,
            params.frequency * jitter,
        )
        normalized = cls(
            volume=params.volume,
            frequency=frequency,
            attack=params.attack * rate + ATTACK_FLOOR,
            decay=params.decay * rate,
            sustain=params.sustain * rate,
            release=params.release * rate,
            delay=params.delay * rate,
            shape=params.wave_shape,
            shape_curve=params.shape_curve,
            slide=params.slide * 500 * TAU / rate / rate,
            delta_slide=params.delta_slide * 500 * TAU / rate**3,
            pitch_jump=params.pitch_jump * TAU / rate,
            pitch_jump_time=params.pitch_jump_time * rate,
            repeat_time=_sample_count("repeat_time", params.repeat_time * rate),
            noise=params.noise,
            modulation=params.modulation * TAU / rate,
            crush_interval=_sample_count("bit_crush", params.bit_crush * 100),
            sustain_volume=params.sustain_volume,
            tremolo=params.tremolo,
            master_volume=settings.master_volume,
            sample_rate=rate,
        )
        normalized._check_bounds()
        return normalized

    def _check_bounds(self) -> None:
        """Reject values whose sample-domain state would overflow during generation."""

        derived = {
            "frequency": self.frequency,
            "slide": self.slide,
            "delta_slide": self.delta_slide,
            "pitch_jump": self.pitch_jump,
            "modulation": self.modulation,
            "attack": self.attack,
            "decay": self.decay,
            "sustain": self.sustain,
            "release": self.release,
            "delay": self.delay,
            "pitch_jump_time": self.pitch_jump_time,
        }
        for name, value in derived.items():
            if not math.isfinite(value):
                raise InvalidParameterError(f"{name} overflows at {self.sample_rate} Hz")

        # Upper bounds over the whole buffer; pitch jumps can stack once per repeat.
        n = float(self.attack + self.decay + self.sustain + self.release + self.delay)
        peak_frequency = (
            abs(self.frequency)
            + n * abs(self.pitch_jump)
            + n * abs(self.slide)
            + n * (n * abs(self.delta_slide))
        )
        bounds = {
            "phase": n * peak_frequency * (1 + abs(self.noise)),
            "modulation": n * abs(self.modulation),
            "amplitude": abs(self.volume)
            * self.master_volume
            * (1 + 2 * abs(self.tremolo))
            * max(1.0, abs(self.sustain_volume)),
        }
        for name, bound in bounds.items():
            if not math.isfinite(bound):
                raise InvalidParameterError(
                    f"Parameters drive the {name} out of floating-point range"
                )

    @property
    def length(self) -> int:
        """Number of samples the generator will produce."""
        return int(self.attack + self.decay + self.sustain + self.release + self.delay)

    @property
    def duration(self) -> float:
        return self.length / self.sample_rate


ParameterSource = ParameterSet | Mapping[str, Any] | Sequence[float | None] | str


def coerce_parameters(value: ParameterSource) -> ParameterSet:
    match value:
        case ParameterSet():
            return value
        case str():
            return ParameterSet.parse(value)
        case Mapping():
            return ParameterSet.from_mapping(cast(Mapping[str, Any], value))
        case Sequence():
            return ParameterSet.from_sequence(cast(Sequence[float | None], value))
        case _:
            raise InvalidParameterError(f"Cannot build parameters from {type(value).__name__}")
