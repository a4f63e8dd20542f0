#!/usr/bin/env python3
"""
Turn a recorded demo session into an animated GIF or an HTML slideshow.

Examples:
  python generate_preview.py runs/checkout/session.json
  python generate_preview.py runs/checkout/session.json --frame-delay 500 --width 640
  python generate_preview.py session.json --out-dir build/preview --stage-assets
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from demo_session import load_session
from dp_config import configure_logging, load_config
from preview_generator import PreviewGenerator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate demo.gif (or an HTML fallback player) from demo screenshots."
    )
    parser.add_argument("session", help="Path to the recorder's session.json")
    parser.add_argument(
        "-o",
        "--out-dir",
        help="Directory for the generated files. Default: the session file's directory.",
    )
    parser.add_argument("--config", default=None, help="Optional path to config.yaml")
    parser.add_argument("--frame-delay", type=int, help="Milliseconds per frame.")
    parser.add_argument("--width", type=int, help="Output width in pixels.")
    parser.add_argument(
        "--quality",
        type=int,
        help="Palette quality 1-20, lower is better. Default: full palette.",
    )
    parser.add_argument("--loops", type=int, help="GIF loop count, 0 loops forever.")
    parser.add_argument(
        "--stage-assets",
        action="store_true",
        help="Copy screenshots into the assets directory used by the HTML player.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Could not read config: {exc}", file=sys.stderr)
        return 2
    configure_logging("DEBUG" if args.verbose else cfg.get("logging", {}).get("level", "INFO"))
    log = logging.getLogger("DemoPreview")

    try:
        session = load_session(args.session)
    except (OSError, ValueError) as exc:
        print(f"Could not read session: {exc}", file=sys.stderr)
        return 2

    out_dir = Path(args.out_dir).expanduser() if args.out_dir else Path(args.session).expanduser().parent
    out_dir.mkdir(parents=True, exist_ok=True)

    if args.stage_assets:
        cfg.setdefault("output", {})["stage_assets"] = True
    try:
        generator = PreviewGenerator.from_config(cfg)
        options = generator.defaults.merged(
            frame_delay=args.frame_delay,
            width=args.width,
            quality=args.quality,
            loops=args.loops,
        )
    except (TypeError, ValueError) as exc:
        print(f"Invalid options: {exc}", file=sys.stderr)
        return 2

    log.info("Generating preview for '%s' (%d steps)", session.title, len(session.steps))
    result = generator.generate(session, out_dir, options)
    if result is None:
        return 1

    print(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
