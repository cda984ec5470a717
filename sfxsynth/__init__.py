from __future__ import annotations

from .audio import ensure_audio_contract, stack_channels
from .config import MASTER_VOLUME, SAMPLE_RATE, SynthSettings
from .errors import InvalidParameterError, PlaybackError, SfxSynthError
from .generator import WaveformGenerator, oscillate
from .logging_utils import configure_logging as _configure_logging
from .main import build_channels, build_samples, play_samples, play_sound
from .params import NormalizedParameters, ParameterSet, WaveShape
from .playback import AudioSink, DeviceSink, RecordingSink
from .presets import PRESETS, get_preset

__all__ = [
    "MASTER_VOLUME",
    "PRESETS",
    "SAMPLE_RATE",
    "AudioSink",
    "DeviceSink",
    "InvalidParameterError",
    "NormalizedParameters",
    "ParameterSet",
    "PlaybackError",
    "RecordingSink",
    "SfxSynthError",
    "SynthSettings",
    "WaveShape",
    "WaveformGenerator",
    "build_channels",
    "build_samples",
    "ensure_audio_contract",
    "get_preset",
    "oscillate",
    "play_samples",
    "play_sound",
    "stack_channels",
]

__version__ = "0.1.0"

_configure_logging()
del _configure_logging
