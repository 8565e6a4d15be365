#!/usr/bin/env python3
"""sprite-sequencer - frame-sequenced sprite animation player.

Loads a JSON file of animation definitions, validates it and either
prints a summary (``--check``) or opens a preview window that plays
the animations with sprites from a mascot directory.
"""

import argparse
import json
import logging
import os
import random
import signal
import sys

from animation_registry import AnimationRegistry, load_animations
from errors import AnimationError
from sequence_code import format_cue, format_sequence

logger = logging.getLogger("sprite-sequencer")

CONFIG_DIR = os.path.join(os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config")), "sprite-sequencer")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="sprite-sequencer",
        description="Frame-sequenced sprite animation player",
    )
    parser.add_argument(
        "definitions",
        type=str,
        help="Path to the JSON animation definitions file",
    )
    parser.add_argument(
        "--mascot",
        type=str,
        default=None,
        help="Directory with shime<N>.png sprites; frame handle N selects shime<N>.png",
    )
    parser.add_argument(
        "--play",
        type=str,
        default=None,
        help="Animation to play first (default: play_on_start from the definitions)",
    )
    parser.add_argument(
        "--size",
        type=int,
        default=128,
        help="Sprite size in pixels (default: 128)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random cue delays",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the definitions, print a summary and exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to stderr",
    )
    return parser.parse_args(argv)


def setup_logging(debug: bool) -> None:
    """Configure logging to stderr."""
    level = logging.DEBUG if debug else logging.WARNING
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
    )
    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def setup_signal_handlers(quit_fn) -> None:
    """Register SIGINT and SIGTERM to call ``quit_fn``."""
    def handle_signal(signum: int, frame: object) -> None:
        logger.info("Received signal %d, shutting down", signum)
        quit_fn()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)


def load_config() -> dict:
    """Read the persisted settings; currently only ``mascot``, the last sprite directory.

    A missing or unreadable file gives an empty config.
    """
    try:
        with open(CONFIG_FILE) as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError):
        return {}


def save_config(cfg: dict) -> None:
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(CONFIG_FILE, "w") as f:
        json.dump(cfg, f, indent=2)


def describe(registry: AnimationRegistry, play_on_start: str | None) -> str:
    """One line per animation, as printed by ``--check``."""
    lines = []
    for animation in registry:
        line = (
            f"{animation.name}: {animation.frame_count} frames @ {animation.fps} fps"
            f"{', loop' if animation.loop else ''}"
        )
        if animation.segments:
            line += f", sequence {format_sequence(animation.segments)}"
        if animation.cue_spec is not None:
            line += f", cue {format_cue(animation.cue_spec)}"
        if animation.triggers:
            line += ", triggers " + " ".join(
                f"{t.name}@{t.frame}" for t in animation.triggers
            )
        lines.append(line)
    if play_on_start:
        lines.append(f"play_on_start: {play_on_start}")
    return "\n".join(lines)


def run_preview(args: argparse.Namespace, registry: AnimationRegistry, first: str | None) -> int:
    import gi

    gi.require_version("Gtk", "3.0")
    from gi.repository import Gtk

    from preview_window import PreviewWindow
    from sprite_character import SpriteCharacter

    config = load_config()

    # Resolve mascot path: explicit --mascot > saved config
    mascot_path = args.mascot or config.get("mascot")
    if mascot_path is None or not os.path.isdir(mascot_path):
        print("Error: No mascot directory. Use --mascot <path>")
        return 1

    rng = random.Random(args.seed)
    character = SpriteCharacter(mascot_path, registry, play_on_start=first, rng=rng)
    if not character.sprite_count:
        print(f"Error: No shime*.png sprites found in {mascot_path}")
        return 1
    logger.info("Loaded mascot from %s (%d sprites)",
                mascot_path, character.sprite_count)

    if config.get("mascot") != mascot_path:
        config["mascot"] = mascot_path
        save_config(config)

    setup_signal_handlers(Gtk.main_quit)
    window = PreviewWindow(character, registry.names(), size=args.size)
    window.show_all()

    Gtk.main()
    character.teardown()
    logger.info("sprite-sequencer shut down")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.debug)

    try:
        registry, play_on_start = load_animations(args.definitions)
    except (OSError, json.JSONDecodeError, AnimationError) as e:
        print(f"Error: {args.definitions}: {e}")
        return 1

    first = args.play or play_on_start
    if first is not None and first not in registry:
        print(f"Error: unknown animation {first!r}")
        return 1

    if args.check:
        print(describe(registry, play_on_start))
        return 0

    logger.info("Starting sprite-sequencer: definitions=%s, first=%s",
                args.definitions, first or "(none)")
    return run_preview(args, registry, first)


if __name__ == "__main__":
    sys.exit(main())
