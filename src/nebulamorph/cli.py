"""
Command-line interface for offline visualizer sessions.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from nebulamorph.config import SHAPE_LABELS, VisualConfig, VisualSettings, parse_shape
from nebulamorph.mood import JsonMoodAdvisor, MoodLookup
from nebulamorph.pipeline import SessionRunner


def _shape_arg(value):
    try:
        return parse_shape(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nebulamorph",
        description="Render audio-reactive particle control signals from an audio file",
    )

    parser.add_argument(
        "input",
        type=Path,
        help="Input audio file (wav, mp3, flac)",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output file path (default: <input>_signals.json)",
    )

    parser.add_argument(
        "-f", "--fps",
        type=int,
        default=60,
        help="Frames per second of the simulated render loop (default: 60)",
    )

    parser.add_argument(
        "-s", "--sample-rate",
        type=int,
        default=22050,
        help="Audio sample rate for analysis (default: 22050)",
    )

    parser.add_argument(
        "--format",
        choices=["json", "numpy"],
        default="json",
        help="Output format (default: json)",
    )

    parser.add_argument(
        "--shape",
        type=_shape_arg,
        default=None,
        help="Starting shape, e.g. SPHERE or lorenz_attractor "
             f"(one of {len(SHAPE_LABELS)})",
    )

    parser.add_argument(
        "--chaos",
        type=float,
        default=None,
        help="Starting chaos in [0, 1] (default: 0.5)",
    )

    parser.add_argument(
        "--speed",
        type=float,
        default=None,
        help="Music-time speed multiplier (default: 1.0)",
    )

    parser.add_argument(
        "--particles",
        type=int,
        default=15000,
        help="Visible particle count (default: 15000)",
    )

    parser.add_argument(
        "--max-duration",
        type=float,
        default=None,
        help="Only process the first N seconds of audio",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible sessions",
    )

    parser.add_argument(
        "--moods",
        type=Path,
        default=None,
        help="JSON file of per-track visual suggestions keyed by file stem",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress output",
    )

    return parser


def resolve_config(args) -> VisualConfig:
    """Starting config: mood suggestion (if any), then explicit flag overrides."""
    config = VisualConfig()

    if args.moods is not None:
        lookup = MoodLookup(JsonMoodAdvisor(args.moods), initial=config, seed=args.seed)
        try:
            lookup.request(str(args.input), args.input.stem).result()
            config = lookup.active
        finally:
            lookup.close()

    overrides = {}
    if args.shape is not None:
        overrides["shape"] = args.shape
    if args.chaos is not None:
        overrides["chaos"] = min(1.0, max(0.0, args.chaos))
    if args.speed is not None:
        overrides["speed"] = args.speed
    return replace(config, **overrides) if overrides else config


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Validate input
    if not args.input.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)
    if args.moods is not None and not args.moods.exists():
        print(f"Error: Moods file not found: {args.moods}", file=sys.stderr)
        sys.exit(1)

    # Determine output path
    output_path = args.output
    if output_path is None:
        suffix = ".npz" if args.format == "numpy" else ".json"
        output_path = args.input.with_name(f"{args.input.stem}_signals{suffix}")

    try:
        config = resolve_config(args)
    except (ValueError, json.JSONDecodeError) as e:
        print(f"Error: Invalid moods file {args.moods}: {e}", file=sys.stderr)
        sys.exit(1)

    runner = SessionRunner(
        fps=args.fps,
        sample_rate=args.sample_rate,
        settings=VisualSettings(particle_count=args.particles),
        seed=args.seed,
    )

    if not args.quiet:
        print(f"Processing: {args.input}")
        print(f"Shape: {SHAPE_LABELS[config.shape]} (chaos {config.chaos:.2f}, speed {config.speed:.2f})")
        print(f"Target FPS: {args.fps}")

    result = runner.process(
        args.input,
        output_path=output_path,
        config=config,
        format=args.format,
        max_duration=args.max_duration,
    )

    if not args.quiet:
        print(f"Duration: {result['duration']:.2f}s")
        print(f"Frames: {result['n_frames']}")
        print(f"Shape switches: {result['switches']}")
        print(f"Output: {result['output_path']}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
