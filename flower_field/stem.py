"""
Stem geometry: tapered ribbon along a cubic bezier centerline, with node
bumps at segment boundaries and optional curling tendrils.

The stem base sits at the local origin and grows toward -Y.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .draw import Color, DrawCommand, FillPath, Line, Path, Transform

NODE_INFLUENCE = 0.06  # fraction of the stem arc length
TENDRIL_STEPS = 15
MIN_SAMPLES = 20


@dataclass(frozen=True)
class TendrilSpec:
    """A curling tendril attached to the stem; fixed for the flower's life."""

    stem_t: float = 0.5  # attachment point along the stem (0=base, 1=tip)
    length: float = 20.0
    curl_amount: float = 2.5
    direction: int = 1  # +1 curls/leans right, -1 left
    start_angle: float = 0.3  # radians, blend from outward normal toward tangent
    thickness: float = 1.0


@dataclass(frozen=True)
class StemShape:
    height: float = 120.0
    thickness: float = 3.0
    taper_ratio: float = 0.5  # thickness at the tip relative to the base
    curvature: float = 0.0  # -1..1 bends left/right (wilting can push to 2)
    segments: int = 1
    node_width: float = 1.0  # thickness multiplier at segment boundaries
    tendrils: Tuple[TendrilSpec, ...] = ()
    tendril_scale: float = 1.0


def _control_points(shape: StemShape) -> np.ndarray:
    h = shape.height
    x_offset = shape.curvature * h * 0.3
    return np.array(
        [
            [0.0, 0.0],
            [x_offset * 0.6, -h * 0.5],
            [x_offset, -h * 0.9],
            [x_offset, -h],
        ]
    )


def _bezier(cp: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = t[:, None]
    mt = 1.0 - t
    return mt ** 3 * cp[0] + 3 * mt ** 2 * t * cp[1] + 3 * mt * t ** 2 * cp[2] + t ** 3 * cp[3]


def _bezier_derivative(cp: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = t[:, None]
    mt = 1.0 - t
    return 3 * mt ** 2 * (cp[1] - cp[0]) + 6 * mt * t * (cp[2] - cp[1]) + 3 * t ** 2 * (cp[3] - cp[2])


def _unit(vectors: np.ndarray) -> np.ndarray:
    """Normalize rows; degenerate rows point straight up."""
    norms = np.hypot(vectors[:, 0], vectors[:, 1])
    out = np.tile(np.array([0.0, -1.0]), (len(vectors), 1))
    ok = norms > 1e-9
    out[ok] = vectors[ok] / norms[ok][:, None]
    return out


def arc_fractions(points: np.ndarray) -> np.ndarray:
    """Cumulative polyline length at each point, normalized to 0-1."""
    steps = np.hypot(np.diff(points[:, 0]), np.diff(points[:, 1]))
    cumulative = np.concatenate(([0.0], np.cumsum(steps)))
    total = cumulative[-1]
    if total <= 1e-9:
        return np.linspace(0.0, 1.0, len(points))
    return cumulative / total


def node_profile(s: np.ndarray, segments: int, node_width: float) -> np.ndarray:
    """
    Thickness multiplier from cosine bumps at each internal segment boundary.

    ``s`` is the normalized arc length of each sample, so boundaries and the
    bump radius are fractions of the stem length.
    """
    profile = np.ones_like(s)
    if segments <= 1 or node_width == 1.0:
        return profile
    for k in range(1, segments):
        boundary = k / segments
        dist = np.abs(s - boundary)
        near = dist < NODE_INFLUENCE
        bump = 0.5 * (1.0 + np.cos(np.pi * dist[near] / NODE_INFLUENCE))
        profile[near] *= 1.0 + (node_width - 1.0) * bump
    return profile


class Stem:
    """Stem with a lazily rebuilt ribbon outline."""

    def __init__(self, shape: Optional[StemShape] = None):
        self._shape = shape or StemShape()
        self._cp = _control_points(self._shape)
        self._dirty = True
        self._outline = Path()
        self._tendrils: List[List[Tuple[float, float]]] = []
        self.rebuild_count = 0

    @property
    def shape(self) -> StemShape:
        return self._shape

    @property
    def dirty(self) -> bool:
        return self._dirty

    def set_shape(self, shape: StemShape):
        if shape != self._shape:
            self._dirty = True
            self._cp = _control_points(shape)
        self._shape = shape

    def sample_count(self) -> int:
        return max(self._shape.segments * 8, MIN_SAMPLES)

    def point_at(self, t: float) -> Tuple[float, float]:
        p = _bezier(self._cp, np.array([min(max(t, 0.0), 1.0)]))[0]
        return (float(p[0]), float(p[1]))

    def tangent_at(self, t: float) -> Tuple[float, float]:
        """Unit tangent pointing from base toward tip."""
        d = _unit(_bezier_derivative(self._cp, np.array([min(max(t, 0.0), 1.0)])))[0]
        return (float(d[0]), float(d[1]))

    def top(self) -> Tuple[float, float]:
        return self.point_at(1.0)

    def rebuild(self):
        shape = self._shape
        t = np.linspace(0.0, 1.0, self.sample_count())
        centers = _bezier(self._cp, t)
        tangents = _unit(_bezier_derivative(self._cp, t))
        normals = np.column_stack([-tangents[:, 1], tangents[:, 0]])

        taper = 1.0 + (shape.taper_ratio - 1.0) * t
        nodes = node_profile(arc_fractions(centers), shape.segments, shape.node_width)
        half = 0.5 * shape.thickness * taper * nodes

        left = centers - normals * half[:, None]
        right = centers + normals * half[:, None]

        path = Path()
        path.move_to(float(left[0, 0]), float(left[0, 1]))
        for x, y in left[1:]:
            path.line_to(float(x), float(y))
        for x, y in right[::-1]:
            path.line_to(float(x), float(y))
        path.close()
        self._outline = path

        self._tendrils = [self._tendril_points(spec) for spec in shape.tendrils]
        self._dirty = False
        self.rebuild_count += 1

    def outline(self) -> Path:
        if self._dirty:
            self.rebuild()
        return self._outline

    def tendril_polylines(self) -> List[List[Tuple[float, float]]]:
        if self._dirty:
            self.rebuild()
        return self._tendrils

    def _tendril_points(self, spec: TendrilSpec) -> List[Tuple[float, float]]:
        x, y = self.point_at(spec.stem_t)
        tx, ty = self.tangent_at(spec.stem_t)
        # Outward normal on the tendril's side of the stem
        nx, ny = -ty * spec.direction, tx * spec.direction
        dx = nx * math.cos(spec.start_angle) + tx * math.sin(spec.start_angle)
        dy = ny * math.cos(spec.start_angle) + ty * math.sin(spec.start_angle)
        heading = math.atan2(dy, dx)

        segment = spec.length * self._shape.tendril_scale / TENDRIL_STEPS
        curl_step = spec.curl_amount * math.pi / TENDRIL_STEPS * spec.direction

        points = [(x, y)]
        for step in range(TENDRIL_STEPS):
            fraction = step / TENDRIL_STEPS
            heading += curl_step
            seg = segment * (1.0 - 0.4 * fraction)
            x += math.cos(heading) * seg
            y += math.sin(heading) * seg
            points.append((x, y))
        return points

    def draw(self, x: float, y: float, color: Color, alpha: float = 1.0) -> List[DrawCommand]:
        """Ribbon then tendril strokes, stem base at (x, y)."""
        if self._shape.height <= 0.0:
            return []
        c = color.with_alpha(color.a * alpha).premultiplied()
        commands: List[DrawCommand] = [FillPath(self.outline(), c, Transform(x=x, y=y))]
        for spec, points in zip(self._shape.tendrils, self.tendril_polylines()):
            width = spec.thickness * max(self._shape.tendril_scale, 0.1)
            for (x1, y1), (x2, y2) in zip(points, points[1:]):
                commands.append(Line(x + x1, y + y1, x + x2, y + y2, width, c))
        return commands
