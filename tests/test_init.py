import sfxsynth


def test_public_api_is_exported() -> None:
    for name in sfxsynth.__all__:
        assert hasattr(sfxsynth, name), name
    assert sfxsynth.SAMPLE_RATE == 44_100
    assert callable(sfxsynth.build_samples)
    assert issubclass(sfxsynth.InvalidParameterError, sfxsynth.SfxSynthError)
