from __future__ import annotations


class SfxSynthError(Exception):
    """Base error for the sfxsynth library."""


class InvalidParameterError(SfxSynthError):
    """Raised when synthesis parameters cannot be validated."""


class PlaybackError(SfxSynthError):
    """Raised when no audio backend is available for playback."""
