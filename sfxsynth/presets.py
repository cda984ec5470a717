from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from .errors import InvalidParameterError
from .params import ParameterSet

# Compact arrays in field order: volume, randomness, frequency, attack,
# sustain, release, shape, shape_curve, slide, delta_slide, pitch_jump,
# pitch_jump_time, repeat_time, noise, modulation, bit_crush, delay,
# sustain_volume, decay, tremolo.
PRESETS: Mapping[str, str] = MappingProxyType(
    {
        "blip": "[1.5,.05,270,,.03,.05,1,1.5]",
        "pickup": "[,,1675,,.06,.24,1,1.82,,,837,.06]",
        "coin": "[,,1046,,.02,.2,1,1.5,,,514,.05]",
        "jump": "[,,178,.02,.05,.17,,1.37,11,,,,,,,,,.68,.08]",
        "hit": "[,,333,.01,,.09,2,1.5,-9,,,,,,,.1,,.5,.02]",
        "laser": "[,,925,.04,.3,.6,1,.3,,6.27,-184,.09,.17]",
        "explosion": "[,,45,.03,.21,.6,4,.74,-0.1,,,,,.7,50,.1,.1,.43,.2]",
        "powerup": "[,,20,.04,,.6,,1.31,,,-990,.06,.17,,,.04,.07]",
        "siren": "[,,440,.1,.6,.3,1,2,,,,,.2,,,,,.8,,.5]",
        "crunch": "[2,,100,,.05,.2,3,,,,,,,.3,,.3,.05]",
    }
)


def preset_names() -> list[str]:
    return sorted(PRESETS)


def get_preset(name: str) -> ParameterSet:
    key = name.strip().lower()
    try:
        compact = PRESETS[key]
    except KeyError as exc:
        raise InvalidParameterError(
            f"Unknown preset: {name!r}. Valid: {', '.join(preset_names())}"
        ) from exc
    return ParameterSet.parse(compact)
