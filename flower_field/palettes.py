"""
Color palettes for newly spawned flowers.

Color modes:
    0     cycle through the named palettes over time
    1-8   fixed named palette
    9     fully random colors per spawn
"""

import random
from dataclasses import dataclass
from typing import List, Tuple

from .draw import Color

COLOR_MODE_CYCLE = 0
COLOR_MODE_RANDOM = 9

Range = Tuple[float, float]


@dataclass(frozen=True)
class Palette:
    """HSB ranges (hue in degrees, saturation/brightness 0-1) for each part."""

    name: str
    petal_hues: Tuple[Range, ...]
    petal_saturation: Range = (0.47, 0.9)
    petal_brightness: Range = (0.63, 0.98)
    center_hue: Range = (35.0, 70.0)
    center_saturation: Range = (0.7, 0.94)
    center_brightness: Range = (0.78, 1.0)
    stem_hue: Range = (105.0, 155.0)
    stem_saturation: Range = (0.4, 0.78)
    stem_brightness: Range = (0.24, 0.63)


PALETTES: List[Palette] = [
    Palette("warm", petal_hues=((0.0, 56.0), (280.0, 365.0))),
    Palette("ocean", petal_hues=((185.0, 240.0),), center_hue=(45.0, 60.0)),
    Palette(
        "sunset",
        petal_hues=((10.0, 45.0), (320.0, 350.0)),
        petal_saturation=(0.7, 1.0),
        center_hue=(20.0, 40.0),
    ),
    Palette(
        "lavender",
        petal_hues=((250.0, 290.0),),
        petal_saturation=(0.3, 0.6),
        petal_brightness=(0.75, 1.0),
    ),
    Palette("meadow", petal_hues=((45.0, 60.0), (0.0, 10.0), (200.0, 230.0))),
    Palette(
        "ember",
        petal_hues=((0.0, 25.0),),
        petal_saturation=(0.85, 1.0),
        petal_brightness=(0.5, 0.85),
        center_hue=(0.0, 15.0),
        center_brightness=(0.2, 0.4),
    ),
    Palette(
        "pastel",
        petal_hues=((0.0, 360.0),),
        petal_saturation=(0.2, 0.4),
        petal_brightness=(0.9, 1.0),
    ),
    Palette(
        "monochrome",
        petal_hues=((0.0, 360.0),),
        petal_saturation=(0.0, 0.05),
        petal_brightness=(0.55, 1.0),
        center_saturation=(0.0, 0.05),
        stem_saturation=(0.0, 0.1),
    ),
]


def validate_color_mode(mode: int) -> int:
    if not isinstance(mode, int) or isinstance(mode, bool):
        raise ValueError(f"Color mode must be an integer, got {mode!r}")
    if not COLOR_MODE_CYCLE <= mode <= COLOR_MODE_RANDOM:
        raise ValueError(f"Color mode must be between 0 and 9, got {mode}")
    return mode


def palette_for_mode(mode: int, elapsed: float, cycle_seconds: float) -> Palette:
    """Palette new spawns should use (not used for random mode)."""
    if 1 <= mode <= len(PALETTES):
        return PALETTES[mode - 1]
    index = int(elapsed / cycle_seconds) % len(PALETTES) if cycle_seconds > 0 else 0
    return PALETTES[index]


def _uniform(rng: random.Random, r: Range) -> float:
    return rng.uniform(r[0], r[1])


def roll_colors(
    rng: random.Random, mode: int, elapsed: float = 0.0, cycle_seconds: float = 20.0
) -> Tuple[Color, Color, Color]:
    """Roll (petal, center, stem) colors for a new flower."""
    if mode == COLOR_MODE_RANDOM:
        return (
            Color.from_hsb(rng.uniform(0.0, 360.0), rng.uniform(0.3, 1.0), rng.uniform(0.5, 1.0)),
            Color.from_hsb(rng.uniform(0.0, 360.0), rng.uniform(0.5, 1.0), rng.uniform(0.6, 1.0)),
            Color.from_hsb(rng.uniform(80.0, 160.0), rng.uniform(0.3, 0.8), rng.uniform(0.2, 0.6)),
        )

    palette = palette_for_mode(mode, elapsed, cycle_seconds)
    hue_range = rng.choice(palette.petal_hues)
    petal = Color.from_hsb(
        _uniform(rng, hue_range),
        _uniform(rng, palette.petal_saturation),
        _uniform(rng, palette.petal_brightness),
    )
    center = Color.from_hsb(
        _uniform(rng, palette.center_hue),
        _uniform(rng, palette.center_saturation),
        _uniform(rng, palette.center_brightness),
    )
    stem = Color.from_hsb(
        _uniform(rng, palette.stem_hue),
        _uniform(rng, palette.stem_saturation),
        _uniform(rng, palette.stem_brightness),
    )
    return petal, center, stem
