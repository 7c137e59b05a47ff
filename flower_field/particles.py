"""
Falling petals detached from flowers that are shedding.

Each petal pops up and outward from the head, then falls under gravity
while tumbling and fading. The sideways waver is a draw-time offset only;
physics and removal use the integrated base position.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .config import FallingPetalConfig
from .draw import Color, DrawCommand, FillPath, Path, Transform
from .petal import PetalShape, build_petal_outline

logger = logging.getLogger(__name__)


@dataclass
class FallingPetal:
    x: float
    y: float
    vx: float
    vy: float
    rotation: float  # degrees
    rotation_speed: float  # deg/s
    shape: PetalShape
    color: Color
    waver_phase: float = 0.0
    waver_amp: float = 0.0
    waver_freq: float = 1.0
    alpha: float = 1.0
    age: float = 0.0
    alive: bool = True
    outline: Path = field(default=None, repr=False)

    def __post_init__(self):
        if self.outline is None:
            self.outline = build_petal_outline(self.shape)

    def waver_offset(self) -> float:
        return math.sin(self.age * self.waver_freq * 2.0 * math.pi + self.waver_phase) * self.waver_amp

    def draw_position(self) -> Tuple[float, float]:
        return (self.x + self.waver_offset(), self.y)


class FallingPetalSystem:
    """Owns and steps all detached petals."""

    def __init__(self, config: FallingPetalConfig = None, rng: Optional[random.Random] = None):
        self.config = config or FallingPetalConfig()
        self.rng = rng or random.Random()
        self.petals: List[FallingPetal] = []

    def __len__(self) -> int:
        return len(self.petals)

    def _jitter(self, value: float) -> float:
        j = self.config.jitter
        return value * self.rng.uniform(1.0 - j, 1.0 + j)

    def spawn(
        self,
        head_position: Tuple[float, float],
        detach_angle: float,
        shape: PetalShape,
        color: Color,
        radius: float = 0.0,
    ) -> FallingPetal:
        """
        Detach one petal at ``detach_angle`` degrees from the head.

        ``radius`` is how far the petal base sat from the head center
        (phyllotaxis spirals push petals outward).
        """
        cfg = self.config
        rad = math.radians(detach_angle)
        dir_x, dir_y = math.sin(rad), -math.cos(rad)

        reach = max(0.0, radius) + 0.4 * shape.length
        pop = self._jitter(cfg.pop_speed)
        outward = pop * cfg.outward_ratio

        petal = FallingPetal(
            x=head_position[0] + dir_x * reach,
            y=head_position[1] + dir_y * reach,
            vx=dir_x * outward,
            vy=-pop + dir_y * outward,
            rotation=detach_angle,
            rotation_speed=self.rng.choice((-1.0, 1.0)) * self._jitter(cfg.tumble_speed),
            shape=shape,
            color=color,
            waver_phase=self.rng.uniform(0.0, 2.0 * math.pi),
            waver_amp=self._jitter(cfg.waver_amplitude),
            waver_freq=self._jitter(cfg.waver_frequency),
        )
        self.petals.append(petal)
        return petal

    def update(self, dt: float, viewport_height: float):
        """Integrate physics and drop dead petals."""
        cfg = self.config
        floor = viewport_height + cfg.bottom_margin
        for p in self.petals:
            p.age += dt
            p.vy += cfg.gravity * dt
            p.x += p.vx * dt
            p.y += p.vy * dt
            p.rotation += p.rotation_speed * dt
            if p.age > cfg.fade_delay:
                p.alpha = max(0.0, p.alpha - cfg.fade_speed * dt)
            if p.alpha <= 0.0 or p.age > cfg.max_lifetime or p.y > floor:
                p.alive = False

        before = len(self.petals)
        self.petals = [p for p in self.petals if p.alive]
        removed = before - len(self.petals)
        if removed:
            logger.debug(f"Removed {removed} fallen petals, {len(self.petals)} active")

    def draw(self) -> List[DrawCommand]:
        commands: List[DrawCommand] = []
        for p in self.petals:
            x, y = p.draw_position()
            color = p.color.with_alpha(p.color.a * p.alpha).premultiplied()
            commands.append(FillPath(p.outline, color, Transform(x=x, y=y, rotation=p.rotation)))
        return commands

    def clear(self):
        self.petals.clear()
