from __future__ import annotations

import argparse
import logging

import numpy as np
from rich.console import Console
from rich.table import Table

from .config import SynthSettings
from .logging_utils import DEBUG_ENV, configure_logging, debug_enabled, log_exception
from .main import build_channels, build_samples, play_samples
from .params import ParameterSet
from .playback import AudioSink, DeviceSink
from .presets import PRESETS, get_preset, preset_names
from .spinner import Spinner, render_error

_LOGGER = logging.getLogger("sfxsynth.cli")
_CONSOLE = Console()
_PRESET_PREFIX = "preset:"


def _resolve_params(text: str) -> ParameterSet:
    if text.startswith(_PRESET_PREFIX):
        return get_preset(text[len(_PRESET_PREFIX) :])
    return ParameterSet.parse(text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sfxsynth")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help=f"Log debug output to stderr (also enabled by {DEBUG_ENV}).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="Generate a sound and print its statistics.")
    info.add_argument("params", type=str, help="Compact array like '[,,925,.04]' or preset:<name>.")
    info.add_argument("--seed", type=int, default=None)

    play = sub.add_parser("play", help="Generate a sound and play it.")
    play.add_argument("params", type=str, help="Compact array like '[,,925,.04]' or preset:<name>.")
    play.add_argument("--seed", type=int, default=None)
    play.add_argument("--channels", type=int, default=1)

    sub.add_parser("presets", help="List the built-in presets.")
    return parser


def main(argv: list[str] | None = None, *, sink: AudioSink | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    debug = debug_enabled(args.debug)
    configure_logging(console=True, debug=debug, force=True)
    try:
        settings = SynthSettings.from_env()

        if args.command == "info":
            params = _resolve_params(args.params)
            samples = build_samples(
                params, rng=np.random.default_rng(args.seed), settings=settings
            )
            peak = float(np.max(np.abs(samples))) if samples.size else 0.0
            rms = float(np.sqrt(np.mean(samples**2))) if samples.size else 0.0
            table = Table(title="sfxsynth sound")
            table.add_column("field")
            table.add_column("value", justify="right")
            table.add_row("parameters", params.to_compact())
            table.add_row("samples", str(samples.size))
            table.add_row("duration", f"{samples.size / settings.sample_rate:.3f}s")
            table.add_row("sample rate", f"{settings.sample_rate} Hz")
            table.add_row("peak", f"{peak:.4f}")
            table.add_row("rms", f"{rms:.4f}")
            _CONSOLE.print(table)
            return 0

        if args.command == "play":
            params = _resolve_params(args.params)
            with Spinner("Rendering sound"):
                channels = build_channels(
                    params,
                    channels=args.channels,
                    rng=np.random.default_rng(args.seed),
                    settings=settings,
                )
            play_samples(*channels, sink=sink or DeviceSink(), sample_rate=settings.sample_rate)
            return 0

        if args.command == "presets":
            table = Table(title="sfxsynth presets")
            table.add_column("name")
            table.add_column("parameters")
            for name in preset_names():
                table.add_row(name, PRESETS[name])
            _CONSOLE.print(table)
            return 0

        parser.print_help()
        return 1
    except Exception as exc:
        _LOGGER.warning("sfxsynth CLI failed: %s", exc, exc_info=debug)
        log_exception("sfxsynth CLI", exc)
        render_error("sfxsynth CLI", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
