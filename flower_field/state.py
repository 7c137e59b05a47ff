"""
Process-wide simulation state.

One FieldState is created at setup and mutated by every tick. It is
passed explicitly to the smoothing, beat and activity steps rather than
living in module globals, so a test can build one and drive it directly.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque

from .config import SmoothingConfig
from .utils import clamp


@dataclass
class FieldState:
    # Smoothed inputs
    smoothed_volume: float = 0.0
    smoothed_pitch: float = 0.0
    smoothed_fullness: float = 0.0

    # Beat detection
    slow_volume: float = 0.0
    beat_cooldown: float = 0.0
    beat_times: Deque[float] = field(default_factory=deque)  # pruned to the history window
    is_beat: bool = False

    # Activity
    activity_level: float = 0.0

    # Modes
    reactive_mode: bool = False
    base_count: int = 0
    color_mode: int = 0

    # Clock and viewport
    elapsed: float = 0.0
    frame: int = 0
    viewport_width: float = 1280.0
    viewport_height: float = 720.0

    def smooth_inputs(
        self,
        volume: float,
        pitch: float,
        confidence: float,
        fullness: float,
        config: SmoothingConfig,
    ):
        """Fold one frame of (already sanitized) metrics into the running averages."""
        boosted = clamp(volume * config.volume_gain)
        self.smoothed_volume += (boosted - self.smoothed_volume) * config.volume_alpha
        self.smoothed_fullness += (fullness - self.smoothed_fullness) * config.fullness_alpha
        if confidence > config.confidence_gate and pitch > config.pitch_floor_hz:
            self.smoothed_pitch += (pitch - self.smoothed_pitch) * config.pitch_alpha
