"""
Flower Field
Audio-reactive procedural flower simulation emitting abstract vector draw commands.
"""

from .config import FieldConfig, get_preset, list_presets
from .draw import Circle, Color, FillPath, Line, Path, Transform
from .field import DetachEvent, FlowerField, FlowerInstance
from .head import (
    GeometricStar,
    Inflorescence,
    InflorescenceParams,
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
from .petal import PetalShape, build_petal_outline
from .stem import Stem, StemShape, TendrilSpec

__all__ = [
    "FlowerField",
    "FlowerInstance",
    "DetachEvent",
    "FieldConfig",
    "get_preset",
    "list_presets",
    "Color",
    "Path",
    "Transform",
    "FillPath",
    "Circle",
    "Line",
    "PetalShape",
    "build_petal_outline",
    "Inflorescence",
    "InflorescenceParams",
    "NoiseConfig",
    "RadialLayout",
    "PhyllotaxisLayout",
    "RoseCurveLayout",
    "SuperformulaLayout",
    "LayeredWhorlsLayout",
    "SimpleDisc",
    "Stamens",
    "PollenGrid",
    "GeometricStar",
    "Stem",
    "StemShape",
    "TendrilSpec",
]
