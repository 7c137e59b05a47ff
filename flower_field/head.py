"""
Flower head (inflorescence) geometry.

Five petal layouts and four center ornaments, each a small frozen
dataclass. The layout picks the placement algorithm; the ornament picks
the center renderer. Dispatch goes through the registries at the bottom
of each section, keyed by variant type.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Callable, ClassVar, Dict, List, Optional, Union

from .draw import Circle, Color, DrawCommand, FillPath, Line, Path, Transform
from .petal import PetalShape, build_petal_outline
from .utils import clamp, coherent_noise

GOLDEN_ANGLE = 137.508  # degrees
MAX_WHORL_WIDTH = 0.8
_EPS = 1e-6

# ============================================================================
# Layout variants
# ============================================================================


@dataclass(frozen=True)
class RadialLayout:
    """Petals evenly spaced around the center."""

    name: ClassVar[str] = "radial"


@dataclass(frozen=True)
class PhyllotaxisLayout:
    """Golden-angle spiral, radius growing with sqrt(index)."""

    name: ClassVar[str] = "phyllotaxis"
    spiral_spacing: float = 4.0


@dataclass(frozen=True)
class RoseCurveLayout:
    """Even spacing, petal length following |cos(k*theta)|."""

    name: ClassVar[str] = "rose"
    k: float = 3.0
    base_scale: float = 0.5


@dataclass(frozen=True)
class SuperformulaLayout:
    """Even spacing, petal length following the Gielis superformula."""

    name: ClassVar[str] = "superformula"
    m: float = 5.0
    n1: float = 2.0
    n2: float = 1.5
    n3: float = 1.5
    a: float = 1.0
    b: float = 1.0


@dataclass(frozen=True)
class LayeredWhorlsLayout:
    """Stacked rings of petals, inner rings shorter and alternately shifted."""

    name: ClassVar[str] = "whorls"
    layer_count: int = 3
    petals_per_layer: int = 6
    length_falloff: float = 0.7
    width_growth: float = 1.2
    phase_shift: float = 0.5

    @property
    def total_petals(self) -> int:
        return max(0, self.layer_count) * max(0, self.petals_per_layer)


HeadLayout = Union[
    RadialLayout, PhyllotaxisLayout, RoseCurveLayout, SuperformulaLayout, LayeredWhorlsLayout
]

# ============================================================================
# Center ornament variants
# ============================================================================


@dataclass(frozen=True)
class SimpleDisc:
    name: ClassVar[str] = "disc"
    detail: float = 1.0


@dataclass(frozen=True)
class Stamens:
    name: ClassVar[str] = "stamens"
    filament_count: float = 8.0
    detail: float = 1.0


@dataclass(frozen=True)
class PollenGrid:
    name: ClassVar[str] = "pollen"
    density: float = 20.0
    detail: float = 1.0


@dataclass(frozen=True)
class GeometricStar:
    name: ClassVar[str] = "star"
    points: float = 5.0
    detail: float = 1.0


CenterOrnament = Union[SimpleDisc, Stamens, PollenGrid, GeometricStar]

# ============================================================================
# Parameters
# ============================================================================


@dataclass(frozen=True)
class NoiseConfig:
    """Per-petal coherent jitter settings."""

    enabled: bool = False
    seed: float = 0.0
    length_amount: float = 0.15
    angle_amount: float = 6.0  # degrees
    scale_amount: float = 0.08
    time_speed: float = 0.5


@dataclass(frozen=True)
class InflorescenceParams:
    """Everything needed to draw one flower head."""

    petal: PetalShape = field(default_factory=PetalShape)
    layout: HeadLayout = field(default_factory=RadialLayout)
    ornament: CenterOrnament = field(default_factory=SimpleDisc)
    noise: NoiseConfig = field(default_factory=NoiseConfig)
    center_radius: float = 8.0
    rotation: float = 0.0  # degrees
    petal_color: Color = Color(0.86, 0.31, 0.47)
    center_color: Color = Color(1.0, 0.86, 0.2)


@dataclass(frozen=True)
class PetalPlacement:
    """Where and how one petal is drawn relative to the head center."""

    index: int
    angle: float  # degrees, 0 = straight up, clockwise
    radius: float = 0.0  # push-out from center along the petal axis
    length_scale: float = 1.0
    width_scale: float = 1.0
    layer: int = 0


# ============================================================================
# Placement algorithms
# ============================================================================


def _pow_abs(x: float, p: float) -> float:
    x = abs(x)
    if x == 0.0:
        if p > 0:
            return 0.0
        return 1.0 if p == 0 else math.inf
    try:
        return x ** p
    except OverflowError:
        return math.inf


def superformula_radius(
    theta: float, m: float, n1: float, n2: float, n3: float, a: float, b: float
) -> float:
    """
    Superformula radius at angle theta (radians), clamped to [0.2, 1.5].

    Falls back to 1.0 when the base term vanishes or the parameters are
    degenerate (zero n1/a/b, NaN).
    """
    if not (abs(n1) > _EPS and abs(a) > _EPS and abs(b) > _EPS):
        return 1.0

    quarter = m * theta / 4.0
    if not math.isfinite(quarter):
        return 1.0
    term = _pow_abs(math.cos(quarter) / a, n2) + _pow_abs(math.sin(quarter) / b, n3)
    if not term > _EPS:
        return 1.0
    if math.isinf(term):
        return 0.2 if n1 > 0 else 1.5

    # term ** (-1/n1) in log space so huge exponents cannot overflow
    log_r = -math.log(term) / n1
    log_r = clamp(log_r, math.log(0.2), math.log(1.5))
    return clamp(math.exp(log_r), 0.2, 1.5)


def rose_length_multiplier(theta: float, k: float, base_scale: float) -> float:
    return base_scale + abs(math.cos(k * theta)) * (1.0 - base_scale)


def _place_radial(layout: RadialLayout, count: int) -> List[PetalPlacement]:
    step = 360.0 / count
    return [PetalPlacement(index=i, angle=i * step) for i in range(count)]


def _place_phyllotaxis(layout: PhyllotaxisLayout, count: int) -> List[PetalPlacement]:
    return [
        PetalPlacement(
            index=i,
            angle=(i * GOLDEN_ANGLE) % 360.0,
            radius=layout.spiral_spacing * math.sqrt(i),
        )
        for i in range(count)
    ]


def _place_rose(layout: RoseCurveLayout, count: int) -> List[PetalPlacement]:
    step = 360.0 / count
    placements = []
    for i in range(count):
        angle = i * step
        mult = rose_length_multiplier(math.radians(angle), layout.k, layout.base_scale)
        placements.append(PetalPlacement(index=i, angle=angle, length_scale=mult))
    return placements


def _place_superformula(layout: SuperformulaLayout, count: int) -> List[PetalPlacement]:
    step = 360.0 / count
    placements = []
    for i in range(count):
        angle = i * step
        r = superformula_radius(
            math.radians(angle), layout.m, layout.n1, layout.n2, layout.n3, layout.a, layout.b
        )
        placements.append(PetalPlacement(index=i, angle=angle, length_scale=r))
    return placements


def _place_whorls(layout: LayeredWhorlsLayout, count: int) -> List[PetalPlacement]:
    per_layer = max(1, layout.petals_per_layer)
    last_layer = max(0, layout.layer_count - 1)
    step = 360.0 / per_layer
    placements = []
    for i in range(count):
        layer = min(i // per_layer, last_layer)
        pos = i % per_layer
        angle = pos * step
        if layer % 2 == 1:
            angle += layout.phase_shift * step
        placements.append(PetalPlacement(index=i, angle=angle % 360.0, layer=layer))
    # Outer layer first so inner rings overlap it
    placements.sort(key=lambda p: (p.layer, p.index))
    return placements


PLACEMENTS: Dict[type, Callable[..., List[PetalPlacement]]] = {
    RadialLayout: _place_radial,
    PhyllotaxisLayout: _place_phyllotaxis,
    RoseCurveLayout: _place_rose,
    SuperformulaLayout: _place_superformula,
    LayeredWhorlsLayout: _place_whorls,
}


def place_petals(layout: HeadLayout, count: int) -> List[PetalPlacement]:
    """Deterministic placement for ``count`` visible petals, in draw order."""
    if count <= 0:
        return []
    return PLACEMENTS[type(layout)](layout, count)


def apply_noise(
    placements: List[PetalPlacement], noise: NoiseConfig, elapsed: float
) -> List[PetalPlacement]:
    """Apply seeded coherent jitter to length, angle and scale."""
    if not noise.enabled:
        return placements

    y = elapsed * noise.time_speed
    jittered = []
    for p in placements:
        x = noise.seed + p.index * 7.3
        length_scale = 1.0 + coherent_noise(x, y) * noise.length_amount
        angle_offset = coherent_noise(x + 31.7, y + 11.3) * noise.angle_amount
        scale_offset = coherent_noise(x + 63.1, y + 23.9) * noise.scale_amount
        jittered.append(
            replace(
                p,
                angle=p.angle + angle_offset,
                length_scale=max(0.05, p.length_scale * length_scale + scale_offset),
                width_scale=max(0.05, p.width_scale + scale_offset),
            )
        )
    return jittered


def whorl_layer_shapes(shape: PetalShape, layout: LayeredWhorlsLayout) -> List[PetalShape]:
    """Per-layer petal shapes: inner layers shorter and (optionally) wider."""
    layers = max(1, layout.layer_count)
    shapes = []
    for layer in range(layers):
        t = layer / (layers - 1) if layers > 1 else 0.0
        length = shape.length * (1.0 - t * (1.0 - layout.length_falloff))
        width = min(shape.width * (1.0 + t * (layout.width_growth - 1.0)), MAX_WHORL_WIDTH)
        shapes.append(replace(shape, length=length, width=width))
    return shapes


# ============================================================================
# Center ornaments
# ============================================================================


def _render_disc(
    ornament: SimpleDisc, x: float, y: float, radius: float, rotation: float, color: Color
) -> List[DrawCommand]:
    return [Circle(x, y, radius, color.premultiplied())]


def _render_stamens(
    ornament: Stamens, x: float, y: float, radius: float, rotation: float, color: Color
) -> List[DrawCommand]:
    commands: List[DrawCommand] = [Circle(x, y, radius * 0.5, color.scaled(0.8).premultiplied())]
    count = int(ornament.filament_count * ornament.detail)
    filament_color = color.scaled(0.7).premultiplied()
    anther_color = color.scaled(1.25).premultiplied()
    for j in range(count):
        rad = math.radians(rotation + j * 360.0 / count)
        dx, dy = math.sin(rad), -math.cos(rad)
        tip_x = x + dx * radius * 1.3
        tip_y = y + dy * radius * 1.3
        commands.append(
            Line(x + dx * radius * 0.3, y + dy * radius * 0.3, tip_x, tip_y, max(0.5, radius * 0.08), filament_color)
        )
        commands.append(Circle(tip_x, tip_y, max(0.5, radius * 0.15), anther_color))
    return commands


def _render_pollen(
    ornament: PollenGrid, x: float, y: float, radius: float, rotation: float, color: Color
) -> List[DrawCommand]:
    commands: List[DrawCommand] = [Circle(x, y, radius, color.scaled(0.75).premultiplied())]
    count = int(ornament.density * ornament.detail)
    spread = radius * 0.8
    dot_color = color.scaled(1.3).premultiplied()
    dot_radius = max(0.3, radius * 0.08)
    for k in range(count):
        rad = math.radians(rotation + k * GOLDEN_ANGLE)
        r = spread * math.sqrt(k / count)
        commands.append(Circle(x + math.sin(rad) * r, y - math.cos(rad) * r, dot_radius, dot_color))
    return commands


def _render_star(
    ornament: GeometricStar, x: float, y: float, radius: float, rotation: float, color: Color
) -> List[DrawCommand]:
    points = int(ornament.points * ornament.detail)
    if points < 2:
        return [Circle(x, y, radius, color.premultiplied())]

    inner = radius * 0.45
    path = Path()
    for v in range(points * 2):
        r = radius if v % 2 == 0 else inner
        rad = math.radians(v * 180.0 / points)
        px, py = math.sin(rad) * r, -math.cos(rad) * r
        if v == 0:
            path.move_to(px, py)
        else:
            path.line_to(px, py)
    path.close()
    return [FillPath(path, color.premultiplied(), Transform(x=x, y=y, rotation=rotation))]


ORNAMENT_RENDERERS: Dict[type, Callable[..., List[DrawCommand]]] = {
    SimpleDisc: _render_disc,
    Stamens: _render_stamens,
    PollenGrid: _render_pollen,
    GeometricStar: _render_star,
}


def render_ornament(
    ornament: CenterOrnament,
    x: float,
    y: float,
    radius: float,
    color: Color,
    rotation: float = 0.0,
) -> List[DrawCommand]:
    """
    Draw commands for a center ornament at (x, y).

    ``color`` is straight (not premultiplied) alpha; each tint derived from
    it is premultiplied after scaling so RGB never exceeds alpha.
    """
    if radius <= 0.0:
        return []
    return ORNAMENT_RENDERERS[type(ornament)](ornament, x, y, radius, rotation, color)


# ============================================================================
# Inflorescence
# ============================================================================


class Inflorescence:
    """
    One flower head with a cached petal outline.

    The outline(s) are rebuilt lazily, only when the shape-relevant part of
    the parameters changes. Colors and rotation never trigger a rebuild.
    """

    def __init__(self, params: Optional[InflorescenceParams] = None):
        self._params = params or InflorescenceParams()
        self._dirty = True
        self._outlines: List[Path] = []
        self._layer_shapes: List[PetalShape] = []
        self.rebuild_count = 0

    @property
    def params(self) -> InflorescenceParams:
        return self._params

    @property
    def dirty(self) -> bool:
        return self._dirty

    @staticmethod
    def _shape_key(params: InflorescenceParams):
        # Visible count only changes how many petals are placed
        return (replace(params.petal, count=0), params.layout)

    def set_params(self, params: InflorescenceParams):
        if self._shape_key(params) != self._shape_key(self._params):
            self._dirty = True
        self._params = params

    def rebuild(self):
        """Recompute the cached outline(s) from the current parameters."""
        shape = self._params.petal
        layout = self._params.layout
        if isinstance(layout, LayeredWhorlsLayout):
            self._layer_shapes = whorl_layer_shapes(shape, layout)
        else:
            self._layer_shapes = [shape]
        self._outlines = [build_petal_outline(s) for s in self._layer_shapes]
        self._dirty = False
        self.rebuild_count += 1

    def outlines(self) -> List[Path]:
        if self._dirty:
            self.rebuild()
        return self._outlines

    def shape_for(self, placement: PetalPlacement) -> PetalShape:
        """Frozen shape of the petal at ``placement`` (used for detached petals)."""
        if self._dirty:
            self.rebuild()
        layer = min(placement.layer, len(self._layer_shapes) - 1)
        base = self._layer_shapes[layer]
        return replace(
            base,
            length=base.length * placement.length_scale,
            width=base.width * placement.width_scale / max(placement.length_scale, 0.05),
        )

    def placements(self, elapsed: float = 0.0, count: Optional[int] = None) -> List[PetalPlacement]:
        """Placement for each visible petal, noise applied, in draw order."""
        n = self._params.petal.count if count is None else count
        return apply_noise(place_petals(self._params.layout, n), self._params.noise, elapsed)

    def draw(self, x: float, y: float, elapsed: float = 0.0, alpha: float = 1.0) -> List[DrawCommand]:
        """Petals then center ornament, centered at (x, y)."""
        p = self._params
        commands: List[DrawCommand] = []

        placements = self.placements(elapsed)
        if placements:
            outlines = self.outlines()
            petal_color = p.petal_color.with_alpha(p.petal_color.a * alpha).premultiplied()
            for pl in placements:
                outline = outlines[min(pl.layer, len(outlines) - 1)]
                commands.append(
                    FillPath(
                        outline,
                        petal_color,
                        Transform(
                            x=x,
                            y=y,
                            rotation=p.rotation + pl.angle,
                            scale_x=pl.width_scale,
                            scale_y=pl.length_scale,
                            offset=pl.radius,
                        ),
                    )
                )

        center_color = p.center_color.with_alpha(p.center_color.a * alpha)
        commands.extend(render_ornament(p.ornament, x, y, p.center_radius, center_color, p.rotation))
        return commands
