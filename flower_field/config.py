"""
Flower Field Configuration - Centralized configuration management.

Provides:
- Tuning dataclasses for smoothing, lifecycle, population, beats and petals
- Presets for different moods
- Loading/saving from JSON/environment
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


class _DictMixin:
    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class SmoothingConfig(_DictMixin):
    """Input smoothing applied to the raw audio metrics."""

    volume_alpha: float = 0.18
    volume_gain: float = 5.0  # raw volume is boosted then clamped to 0-1
    fullness_alpha: float = 0.15
    pitch_alpha: float = 0.3
    confidence_gate: float = 0.1  # pitch ignored below this confidence
    pitch_floor_hz: float = 50.0


@dataclass
class LifecycleConfig(_DictMixin):
    """Lifecycle pacing."""

    cycle_seconds: float = 18.0  # full cycle at fullness=1
    min_speed_factor: float = 0.05  # never fully stopped
    reactive_speed_min: float = 0.5
    reactive_speed_max: float = 2.0
    overshoot_boost: float = 1.0
    fast_death_seconds: float = 0.67

    @property
    def base_rate(self) -> float:
        return 1.0 / self.cycle_seconds


@dataclass
class PopulationConfig(_DictMixin):
    """Reactive population sizing."""

    reactive_min: int = 30
    reactive_max: int = 1500
    max_growth_per_tick: int = 10
    max_fast_death_per_tick: int = 5
    palette_cycle_seconds: float = 20.0


@dataclass
class BeatConfig(_DictMixin):
    """Onset detection and activity scoring."""

    slow_alpha: float = 0.02
    ratio_threshold: float = 1.4
    volume_floor: float = 0.05
    cooldown_seconds: float = 0.25
    history_seconds: float = 5.0
    density_beats: int = 20  # beats in the window that count as full density
    activity_alpha: float = 0.03
    density_weight: float = 0.5
    volume_weight: float = 0.3
    fullness_weight: float = 0.2


@dataclass
class FallingPetalConfig(_DictMixin):
    """Falling petal physics."""

    gravity: float = 140.0  # px/s^2
    pop_speed: float = 70.0  # px/s upward
    outward_ratio: float = 0.4
    tumble_speed: float = 120.0  # deg/s
    waver_amplitude: float = 12.0  # px
    waver_frequency: float = 0.8  # Hz
    jitter: float = 0.35  # +/- fraction applied to the randomized values
    fade_delay: float = 1.5  # s
    fade_speed: float = 0.5  # alpha/s
    max_lifetime: float = 6.0  # s
    bottom_margin: float = 60.0  # px below the viewport


@dataclass
class FieldConfig:
    """Complete simulation configuration."""

    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    lifecycle: LifecycleConfig = field(default_factory=LifecycleConfig)
    population: PopulationConfig = field(default_factory=PopulationConfig)
    beat: BeatConfig = field(default_factory=BeatConfig)
    petals: FallingPetalConfig = field(default_factory=FallingPetalConfig)

    def validate(self) -> "FieldConfig":
        """Raise ValueError on settings the simulation cannot run with."""
        pop = self.population
        if pop.reactive_min < 0 or pop.reactive_max < 0:
            raise ValueError("reactive population bounds must be non-negative")
        if pop.reactive_min > pop.reactive_max:
            raise ValueError(
                f"reactive_min ({pop.reactive_min}) exceeds reactive_max ({pop.reactive_max})"
            )
        if pop.max_growth_per_tick < 0 or pop.max_fast_death_per_tick < 0:
            raise ValueError("per-tick growth/cull limits must be non-negative")
        if self.lifecycle.cycle_seconds <= 0:
            raise ValueError("cycle_seconds must be positive")
        if self.lifecycle.fast_death_seconds <= 0:
            raise ValueError("fast_death_seconds must be positive")
        if self.beat.density_beats <= 0:
            raise ValueError("density_beats must be positive")
        return self

    def to_dict(self) -> dict:
        return {
            "smoothing": self.smoothing.to_dict(),
            "lifecycle": self.lifecycle.to_dict(),
            "population": self.population.to_dict(),
            "beat": self.beat.to_dict(),
            "petals": self.petals.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FieldConfig":
        config = cls()
        if "smoothing" in data:
            config.smoothing = SmoothingConfig.from_dict(data["smoothing"])
        if "lifecycle" in data:
            config.lifecycle = LifecycleConfig.from_dict(data["lifecycle"])
        if "population" in data:
            config.population = PopulationConfig.from_dict(data["population"])
        if "beat" in data:
            config.beat = BeatConfig.from_dict(data["beat"])
        if "petals" in data:
            config.petals = FallingPetalConfig.from_dict(data["petals"])
        return config

    def save(self, path: Path) -> None:
        """Save configuration to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> "FieldConfig":
        """Load configuration from JSON file, defaults if missing."""
        if not path.exists():
            logger.info(f"No config at {path}, using defaults")
            return cls()
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_env(cls) -> "FieldConfig":
        """Start from FLOWER_FIELD_PRESET and apply numeric overrides."""
        config = get_preset(os.environ.get("FLOWER_FIELD_PRESET", "default"))
        if "FLOWER_FIELD_REACTIVE_MAX" in os.environ:
            config.population.reactive_max = int(os.environ["FLOWER_FIELD_REACTIVE_MAX"])
        if "FLOWER_FIELD_CYCLE_SECONDS" in os.environ:
            config.lifecycle.cycle_seconds = float(os.environ["FLOWER_FIELD_CYCLE_SECONDS"])
        return config


def _preset_default() -> FieldConfig:
    return FieldConfig()


def _preset_calm() -> FieldConfig:
    return FieldConfig(
        lifecycle=LifecycleConfig(cycle_seconds=30.0, reactive_speed_max=1.4),
        population=PopulationConfig(reactive_max=400, max_growth_per_tick=4),
        petals=FallingPetalConfig(gravity=90.0, fade_delay=2.5, max_lifetime=8.0),
    )


def _preset_dense() -> FieldConfig:
    return FieldConfig(
        lifecycle=LifecycleConfig(cycle_seconds=12.0, reactive_speed_max=2.5),
        population=PopulationConfig(reactive_min=80, max_growth_per_tick=20),
    )


# Presets are factories so callers can mutate their copy freely
PRESETS = {
    "default": _preset_default,
    "calm": _preset_calm,
    "dense": _preset_dense,
}


def get_preset(name: str) -> FieldConfig:
    """Get a preset by name, returns 'default' if not found."""
    return PRESETS.get(name.lower(), _preset_default)()


def list_presets() -> List[str]:
    """List available preset names."""
    return list(PRESETS.keys())


# Default config file location
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "flower_field" / "config.json"


def load_config(path: Optional[Path] = None) -> FieldConfig:
    """Load configuration from file or return defaults."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    return FieldConfig.load(path)


def save_config(config: FieldConfig, path: Optional[Path] = None) -> None:
    """Save configuration to file."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    config.save(path)
