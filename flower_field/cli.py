"""
Flower Field CLI - headless driver for the simulation.

Entry point:
    flower-field   - run the field against synthetic audio and log stats
"""

import argparse
import json
import logging
import random
import sys
from pathlib import Path

from .config import FieldConfig, get_preset, list_presets
from .field import FlowerField
from .logging_config import configure_logging
from .simulator import AudioSimulator

logger = logging.getLogger(__name__)


def validate_count(value: str) -> int:
    """Validate a non-negative integer."""
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid count: {value}")
    if count < 0:
        raise argparse.ArgumentTypeError(f"Count must be non-negative, got: {count}")
    return count


def validate_color_mode(value: str) -> int:
    """Validate color mode is in 0-9."""
    try:
        mode = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid color mode: {value}")
    if not 0 <= mode <= 9:
        raise argparse.ArgumentTypeError(f"Color mode must be between 0 and 9, got: {mode}")
    return mode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flower-field",
        description="Flower Field - audio-reactive procedural flower simulation (headless)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  flower-field                              # 600 frames, 120 flowers
  flower-field --reactive --frames 3600     # population follows the music
  flower-field --color-mode 4 --dump f.json # lavender palette, dump last frame
        """,
    )
    parser.add_argument("--count", "-n", type=validate_count, default=120, help="Initial flower count")
    parser.add_argument("--frames", "-f", type=validate_count, default=600, help="Frames to simulate")
    parser.add_argument("--fps", type=float, default=60.0, help="Simulated frame rate (default: 60)")
    parser.add_argument("--width", type=float, default=1280.0, help="Viewport width")
    parser.add_argument("--height", type=float, default=720.0, help="Viewport height")
    parser.add_argument("--reactive", action="store_true", help="Enable reactive population sizing")
    parser.add_argument(
        "--color-mode",
        type=validate_color_mode,
        default=0,
        help="0=cycle palettes, 1-8=fixed palette, 9=random per spawn",
    )
    parser.add_argument("--preset", choices=list_presets(), default=None, help="Configuration preset")
    parser.add_argument("--config", type=Path, default=None, help="JSON configuration file")
    parser.add_argument("--bpm", type=float, default=128.0, help="Synthetic audio tempo")
    parser.add_argument("--intensity", type=float, default=0.7, help="Synthetic audio intensity (0-1)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible run")
    parser.add_argument("--stats-every", type=int, default=120, help="Log stats every N frames")
    parser.add_argument("--dump", type=Path, default=None, help="Write last frame's draw commands as JSON")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return parser


def resolve_config(args: argparse.Namespace) -> FieldConfig:
    if args.config is not None:
        return FieldConfig.load(args.config)
    if args.preset is not None:
        return get_preset(args.preset)
    return FieldConfig.from_env()


def run(args: argparse.Namespace) -> int:
    configure_logging(args.log_level)

    try:
        config = resolve_config(args).validate()
    except (ValueError, json.JSONDecodeError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    rng = random.Random(args.seed)
    field = FlowerField(config, rng=rng)
    field.set_color_mode(args.color_mode)
    field.setup(args.count)
    field.set_reactive_mode(args.reactive)

    audio = AudioSimulator(bpm=args.bpm, intensity=args.intensity, rng=random.Random(args.seed))
    dt = 1.0 / args.fps if args.fps > 0 else 1.0 / 60.0

    for _ in range(args.frames):
        m = audio.generate(dt)
        field.update(m.volume, m.pitch, m.confidence, m.fullness, dt, args.width, args.height)
        if args.stats_every > 0 and field.state.frame % args.stats_every == 0:
            stats = field.stats()
            logger.info(
                f"frame={stats['frame']} population={stats['population']} target={stats['target']} "
                f"dying={stats['dying']} petals={stats['falling_petals']} activity={stats['activity']}",
                extra={k: stats[k] for k in ("frame", "population", "target", "activity", "falling_petals")},
            )

    commands = field.draw(args.width, args.height)
    logger.info(f"Finished {args.frames} frames, last frame has {len(commands)} draw commands")

    if args.dump is not None:
        args.dump.parent.mkdir(parents=True, exist_ok=True)
        with open(args.dump, "w") as f:
            json.dump({"stats": field.stats(), "commands": [c.to_dict() for c in commands]}, f)
        logger.info(f"Wrote draw commands to {args.dump}")

    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
