#!/usr/bin/env python3
"""
Generate a monster sprite from the command line.

Writes a PNG for a single frame or an animated GIF (plus optional per-frame
PNGs) for several frames, and optionally one PNG per layer.
"""

import argparse
import os
import sys

from pydantic import ValidationError

from spritegen.cli.args import build_common_parser
from spritegen.core import get_logger, load_config
from spritegen.monster.assembler import generate_sprite
from spritegen.monster.export import save_frames_png, save_gif, save_png

log = get_logger("spritegen.generate_monster")


def run(args) -> int:
    bundle = load_config(args.config)
    config = bundle.monster.with_overrides(
        seed=args.seed,
        dimension=args.dimension,
        frame_count=args.frames,
        palette_mode=args.palette_mode,
        noise_style=args.noise_style,
        color_style=args.color_style,
        number_of_colors=args.colors,
        draw_patterns=args.patterns,
        animation_intensity=args.intensity,
        frame_delay_ms=args.delay_ms,
    )
    out = bundle.output
    out_dir = args.out or out.directory

    result = generate_sprite(config)
    stem = os.path.join(out_dir, f"{out.prefix}_{result.seed}")

    if len(result.frames) == 1:
        written = save_png(result.frames[0], f"{stem}.png")
    elif out.gif:
        written = save_gif(result.frames, f"{stem}.gif", result.frame_delay_ms)
    else:
        written = save_frames_png(result.frames, stem)[0]

    if out.write_layers:
        for name, layer in result.parts.layers().items():
            save_png(layer, f"{stem}_{name}.png")

    log.info(f"Sprite written: {written} (seed={result.seed})")
    print(written)
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Generate a procedural pixel monster sprite", parents=[build_common_parser()]
    )
    parser.add_argument("--out", default=None, help="Output directory (overrides config)")
    args = parser.parse_args(argv)

    try:
        return run(args)
    except ValidationError as e:
        log.error(f"Invalid configuration: {e}")
        return 2
    except KeyboardInterrupt:
        log.info("Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
