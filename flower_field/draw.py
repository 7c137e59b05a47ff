"""
Abstract vector draw commands emitted by the flower field.

The simulation never touches pixels. Every frame it produces an ordered
list of these records; a rendering backend replays them in order.
Colors attached to commands are premultiplied by alpha.
"""

import colorsys
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union


@dataclass(frozen=True)
class Color:
    """RGBA color, channels in 0-1."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def from_hsb(cls, hue: float, saturation: float, brightness: float, alpha: float = 1.0) -> "Color":
        """Create from hue in degrees and saturation/brightness in 0-1."""
        r, g, b = colorsys.hsv_to_rgb((hue % 360.0) / 360.0, saturation, brightness)
        return cls(r, g, b, alpha)

    def with_alpha(self, alpha: float) -> "Color":
        return Color(self.r, self.g, self.b, max(0.0, min(1.0, alpha)))

    def scaled(self, factor: float) -> "Color":
        """Darken (<1) or lighten (>1) the RGB channels."""
        return Color(
            min(1.0, self.r * factor),
            min(1.0, self.g * factor),
            min(1.0, self.b * factor),
            self.a,
        )

    def premultiplied(self) -> "Color":
        return Color(self.r * self.a, self.g * self.a, self.b * self.a, self.a)

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.r, self.g, self.b, self.a)


class Path:
    """
    Outline built from move/line/bezier/close segments.

    Mirrors the usual vector-path API: each call appends one command tuple
    to ``commands``. Coordinates are local; placement is done by a
    :class:`Transform` on the draw command.
    """

    def __init__(self):
        self.commands: List[Tuple] = []

    def move_to(self, x: float, y: float) -> "Path":
        self.commands.append(("move", x, y))
        return self

    def line_to(self, x: float, y: float) -> "Path":
        self.commands.append(("line", x, y))
        return self

    def bezier_to(
        self, c1x: float, c1y: float, c2x: float, c2y: float, x: float, y: float
    ) -> "Path":
        self.commands.append(("bezier", c1x, c1y, c2x, c2y, x, y))
        return self

    def close(self) -> "Path":
        self.commands.append(("close",))
        return self

    @property
    def is_closed(self) -> bool:
        return bool(self.commands) and self.commands[-1][0] == "close"

    def anchor_points(self) -> List[Tuple[float, float]]:
        """On-curve points in order (segment end points, no control points)."""
        points = []
        for cmd in self.commands:
            if cmd[0] in ("move", "line"):
                points.append((cmd[1], cmd[2]))
            elif cmd[0] == "bezier":
                points.append((cmd[5], cmd[6]))
        return points

    def __eq__(self, other) -> bool:
        return isinstance(other, Path) and self.commands == other.commands

    def __len__(self) -> int:
        return len(self.commands)

    def __repr__(self) -> str:
        return f"Path({len(self.commands)} commands)"


@dataclass(frozen=True)
class Transform:
    """
    Placement of a local-space path.

    Applied as: scale (scale_x, scale_y), push out along local -Y by
    ``offset``, rotate by ``rotation`` degrees (clockwise on screen), then
    translate to (x, y).
    """

    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    offset: float = 0.0

    def apply(self, px: float, py: float) -> Tuple[float, float]:
        """Map a local point to screen space."""
        lx = px * self.scale_x
        ly = py * self.scale_y - self.offset
        rad = math.radians(self.rotation)
        cos_r, sin_r = math.cos(rad), math.sin(rad)
        return (
            self.x + lx * cos_r - ly * sin_r,
            self.y + lx * sin_r + ly * cos_r,
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "x": self.x,
            "y": self.y,
            "rotation": self.rotation,
            "scale_x": self.scale_x,
            "scale_y": self.scale_y,
            "offset": self.offset,
        }


# ============================================================================
# Draw commands
# ============================================================================


@dataclass
class FillPath:
    """Filled closed path with its own transform."""

    path: Path
    color: Color
    transform: Transform = field(default_factory=Transform)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "fill_path",
            "commands": [list(c) for c in self.path.commands],
            "transform": self.transform.to_dict(),
            "color": list(self.color.to_tuple()),
        }


@dataclass
class Circle:
    x: float
    y: float
    radius: float
    color: Color

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "circle",
            "x": self.x,
            "y": self.y,
            "radius": self.radius,
            "color": list(self.color.to_tuple()),
        }


@dataclass
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    color: Color

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "line",
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
            "width": self.width,
            "color": list(self.color.to_tuple()),
        }


DrawCommand = Union[FillPath, Circle, Line]
