from __future__ import annotations

import logging
import math
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from .errors import InvalidParameterError

_LOGGER = logging.getLogger("sfxsynth.config")

SAMPLE_RATE = 44_100
MASTER_VOLUME = 0.3

SAMPLE_RATE_ENV = "SFXSYNTH_SAMPLE_RATE"
MASTER_VOLUME_ENV = "SFXSYNTH_MASTER_VOLUME"


class SynthSettings(BaseModel):
    """Process-level knobs shared by every generated sound."""

    sample_rate: int = SAMPLE_RATE
    master_volume: float = MASTER_VOLUME

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_ranges(self) -> "SynthSettings":
        if self.sample_rate <= 0:
            raise InvalidParameterError(f"sample_rate must be positive, got {self.sample_rate}")
        if not math.isfinite(self.master_volume) or self.master_volume < 0.0:
            raise InvalidParameterError(
                f"master_volume must be a finite non-negative number, got {self.master_volume}"
            )
        return self

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SynthSettings":
        env = os.environ if environ is None else environ
        overrides: dict[str, str] = {}
        if raw_rate := env.get(SAMPLE_RATE_ENV, "").strip():
            overrides["sample_rate"] = raw_rate
        if raw_volume := env.get(MASTER_VOLUME_ENV, "").strip():
            overrides["master_volume"] = raw_volume
        try:
            settings = cls.model_validate(overrides)
        except ValidationError as exc:
            raise InvalidParameterError(f"Invalid synth settings in environment: {exc}") from exc
        if overrides:
            _LOGGER.debug("Synth settings overridden from environment: %s", overrides)
        return settings


DEFAULT_SETTINGS = SynthSettings()
