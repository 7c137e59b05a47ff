"""
Random "personality" for new flowers.

Every roll takes the caller's random.Random so a seeded generator gives a
reproducible field. Layout variants are picked by weight; each variant
has its own parameter and petal-count ranges.
"""

import random
from dataclasses import dataclass
from typing import Callable, List, Tuple

from .draw import Color
from .head import (
    CenterOrnament,
    GeometricStar,
    HeadLayout,
    LayeredWhorlsLayout,
    NoiseConfig,
    PhyllotaxisLayout,
    PollenGrid,
    RadialLayout,
    RoseCurveLayout,
    SimpleDisc,
    Stamens,
    SuperformulaLayout,
)
from .palettes import roll_colors
from .stem import TendrilSpec
from .utils import lerp

X_RANGE = (0.02, 0.98)
Y_RANGE = (0.05, 0.98)
NEAR_SCALE = 1.2
FAR_SCALE = 0.3


@dataclass(frozen=True)
class FlowerTraits:
    """Immutable base properties rolled once per spawn."""

    x: float
    y: float
    depth_scale: float

    layout: HeadLayout
    ornament: CenterOrnament
    noise: NoiseConfig

    petal_count: int
    length: float
    width: float
    pointiness: float
    bulge: float
    edge_curvature: float
    center_radius: float

    petal_color: Color
    center_color: Color
    stem_color: Color

    stem_height: float
    stem_curvature: float
    taper_ratio: float
    segments: int
    node_width: float
    tendrils: Tuple[TendrilSpec, ...]

    pitch_direction: float  # +1 or -1: how pitch bends pointiness
    life_speed_mult: float
    rotation_speed: float  # deg/s
    rotation_direction: float  # +1 or -1


def depth_scale_for(y: float) -> float:
    """Perspective size: far (top) flowers small, near (bottom) flowers large."""
    t = (y - Y_RANGE[0]) / (Y_RANGE[1] - Y_RANGE[0])
    return lerp(FAR_SCALE, NEAR_SCALE, t)


# ============================================================================
# Layout rolls: (layout, petal_count, width)
# ============================================================================


def _roll_radial(rng: random.Random) -> Tuple[HeadLayout, int, float]:
    return RadialLayout(), rng.randint(4, 8), rng.uniform(0.2, 0.55)


def _roll_phyllotaxis(rng: random.Random) -> Tuple[HeadLayout, int, float]:
    layout = PhyllotaxisLayout(spiral_spacing=rng.uniform(1.5, 4.0))
    return layout, rng.randint(13, 34), rng.uniform(0.15, 0.3)


def _roll_rose(rng: random.Random) -> Tuple[HeadLayout, int, float]:
    layout = RoseCurveLayout(
        k=rng.choice((1.5, 2.0, 2.5, 3.0, 4.0, 5.0)),
        base_scale=rng.uniform(0.3, 0.7),
    )
    return layout, rng.randint(8, 16), rng.uniform(0.2, 0.4)


def _roll_superformula(rng: random.Random) -> Tuple[HeadLayout, int, float]:
    layout = SuperformulaLayout(
        m=float(rng.randint(3, 8)),
        n1=rng.uniform(0.5, 4.0),
        n2=rng.uniform(0.5, 3.0),
        n3=rng.uniform(0.5, 3.0),
        a=1.0,
        b=1.0,
    )
    return layout, rng.randint(10, 20), rng.uniform(0.15, 0.35)


def _roll_whorls(rng: random.Random) -> Tuple[HeadLayout, int, float]:
    layout = LayeredWhorlsLayout(
        layer_count=rng.randint(2, 4),
        petals_per_layer=rng.randint(5, 8),
        length_falloff=rng.uniform(0.55, 0.85),
        width_growth=rng.uniform(1.0, 1.4),
        phase_shift=0.5,
    )
    return layout, layout.total_petals, rng.uniform(0.25, 0.45)


LAYOUT_WEIGHTS: List[Tuple[str, float, Callable]] = [
    ("radial", 25.0, _roll_radial),
    ("phyllotaxis", 20.0, _roll_phyllotaxis),
    ("rose", 20.0, _roll_rose),
    ("superformula", 15.0, _roll_superformula),
    ("whorls", 20.0, _roll_whorls),
]


def roll_layout(rng: random.Random) -> Tuple[HeadLayout, int, float]:
    _, _, roll = rng.choices(LAYOUT_WEIGHTS, weights=[w for _, w, _ in LAYOUT_WEIGHTS])[0]
    return roll(rng)


def roll_ornament(rng: random.Random) -> CenterOrnament:
    detail = rng.uniform(0.8, 1.6)
    kind = rng.choices(("disc", "stamens", "pollen", "star"), weights=(40, 20, 20, 20))[0]
    if kind == "stamens":
        return Stamens(detail=detail)
    if kind == "pollen":
        return PollenGrid(detail=detail)
    if kind == "star":
        return GeometricStar(detail=detail)
    return SimpleDisc(detail=detail)


def roll_noise(rng: random.Random) -> NoiseConfig:
    return NoiseConfig(
        enabled=rng.random() < 0.7,
        seed=rng.uniform(0.0, 1000.0),
        length_amount=rng.uniform(0.05, 0.25),
        angle_amount=rng.uniform(2.0, 10.0),
        scale_amount=rng.uniform(0.02, 0.15),
        time_speed=rng.uniform(0.2, 1.0),
    )


def roll_tendrils(rng: random.Random) -> Tuple[TendrilSpec, ...]:
    if rng.random() > 0.4:
        return ()
    return tuple(
        TendrilSpec(
            stem_t=rng.uniform(0.3, 0.8),
            length=rng.uniform(10.0, 30.0),
            curl_amount=rng.uniform(1.5, 3.5),
            direction=rng.choice((-1, 1)),
            start_angle=rng.uniform(-0.5, 0.5),
            thickness=rng.uniform(0.6, 1.4),
        )
        for _ in range(rng.randint(1, 2))
    )


def roll_traits(
    rng: random.Random, color_mode: int = 0, elapsed: float = 0.0, palette_cycle_seconds: float = 20.0
) -> FlowerTraits:
    """Roll a complete personality for a new flower."""
    x = rng.uniform(*X_RANGE)
    y = rng.uniform(*Y_RANGE)
    layout, petal_count, width = roll_layout(rng)
    petal_color, center_color, stem_color = roll_colors(rng, color_mode, elapsed, palette_cycle_seconds)

    return FlowerTraits(
        x=x,
        y=y,
        depth_scale=depth_scale_for(y),
        layout=layout,
        ornament=roll_ornament(rng),
        noise=roll_noise(rng),
        petal_count=petal_count,
        length=rng.uniform(35.0, 75.0),
        width=width,
        pointiness=rng.uniform(0.2, 0.8),
        bulge=rng.uniform(0.3, 0.7),
        edge_curvature=rng.uniform(-0.15, 0.4),
        center_radius=rng.uniform(4.0, 12.0),
        petal_color=petal_color,
        center_color=center_color,
        stem_color=stem_color,
        stem_height=rng.uniform(60.0, 140.0),
        stem_curvature=rng.uniform(-0.4, 0.4),
        taper_ratio=rng.uniform(0.3, 0.7),
        segments=rng.randint(1, 4),
        node_width=rng.uniform(1.0, 1.6),
        tendrils=roll_tendrils(rng),
        pitch_direction=rng.choice((-1.0, 1.0)),
        life_speed_mult=rng.uniform(0.7, 1.3),
        rotation_speed=rng.uniform(2.0, 12.0),
        rotation_direction=rng.choice((-1.0, 1.0)),
    )


def stem_thickness(depth_scale: float) -> float:
    return lerp(1.5, 4.0, depth_scale)
