import argparse

from spritegen.config.schemas import ColorStyle, NoiseStyle, PaletteMode


def _choices(enum_cls):
    return [m.value for m in enum_cls]


def build_common_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(add_help=False)
    ap.add_argument("--config", default=None, help="Path to a monster YAML config")
    ap.add_argument("--seed", type=int, default=None, help="Replay a sprite from its seed")
    ap.add_argument("--dimension", type=int, default=None, help="Sprite side length in pixels")
    ap.add_argument("--frames", type=int, default=None, help="Animation frame count (1 = static)")
    ap.add_argument("--palette-mode", choices=_choices(PaletteMode), default=None, help="Palette mode override")
    ap.add_argument("--noise-style", choices=_choices(NoiseStyle), default=None, help="Silhouette noise style")
    ap.add_argument("--color-style", choices=_choices(ColorStyle), default=None, help="Colour role derivation")
    ap.add_argument("--colors", type=int, default=None, help="Number of palette colours")
    ap.add_argument("--patterns", action="store_true", default=None, help="Draw internal spots/stripes")
    ap.add_argument("--intensity", type=float, default=None, help="Breathing squash/stretch intensity")
    ap.add_argument("--delay-ms", type=int, default=None, help="Per-frame delay for animated output")
    return ap
