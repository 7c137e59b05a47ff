"""
Petal outline construction.

A petal is two cubic bezier arcs sharing a base point at the origin and a
tip at (0, -length). Screen coordinates: -Y points up, so an unrotated
petal grows straight up.
"""

from dataclasses import dataclass

from .draw import Path
from .utils import clamp

TIP_CONTROL_FRACTION = 0.92


@dataclass(frozen=True)
class PetalShape:
    """Shape parameters for one petal, recomputed every frame."""

    count: int = 5
    length: float = 60.0  # pixels from base to tip
    width: float = 0.35  # max half-width as fraction of length
    tip_pointiness: float = 0.5  # 0 = fully rounded tip, 1 = sharp point
    bulge_position: float = 0.5  # where the widest point sits (0=base, 1=tip)
    edge_curvature: float = 0.2  # >0 convex, <0 concave, 0 straight


def build_petal_outline(shape: PetalShape) -> Path:
    """Build the closed outline for a single petal."""
    length = shape.length
    half_width = length * shape.width
    bulge_y = length * clamp(shape.bulge_position, 0.05, 0.95)
    tip_width = half_width * (1.0 - clamp(shape.tip_pointiness, 0.0, 1.0))

    # Positive curvature pushes the bulge control points outward
    curve_shift = shape.edge_curvature * half_width * 0.5
    bulge_x = half_width + curve_shift
    near_tip_y = -(length * TIP_CONTROL_FRACTION)

    path = Path()
    path.move_to(0.0, 0.0)
    # Left edge: base to tip
    path.bezier_to(-bulge_x, -bulge_y, -tip_width, near_tip_y, 0.0, -length)
    # Right edge: tip back to base
    path.bezier_to(tip_width, near_tip_y, bulge_x, -bulge_y, 0.0, 0.0)
    path.close()
    return path
