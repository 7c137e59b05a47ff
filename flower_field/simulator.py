"""
Synthetic audio metrics for driving the field without an audio front-end.

Produces the four per-frame scalars the simulation consumes (volume,
pitch, pitch confidence, spectral fullness) from a tempo-locked kick
envelope, a wandering melody and slow sections of build-up and calm.
"""

import math
import random
from dataclasses import dataclass
from typing import Optional

# Melody notes (Hz) around middle C
SCALE = [196.0, 220.0, 261.6, 293.7, 329.6, 392.0, 440.0, 523.3, 659.3]


@dataclass
class AudioMetrics:
    volume: float
    pitch: float
    confidence: float
    fullness: float


class AudioSimulator:
    """Simulates music-like audio metrics with beats and sections."""

    def __init__(
        self,
        bpm: float = 128.0,
        intensity: float = 0.7,
        section_seconds: float = 16.0,
        rng: Optional[random.Random] = None,
    ):
        self.bpm = bpm
        self.intensity = intensity
        self.section_seconds = section_seconds
        self.rng = rng or random.Random()
        self.time = 0.0
        self._note = SCALE[2]

    def energy(self) -> float:
        """Slow section envelope: alternates between build-ups and breakdowns."""
        if self.section_seconds <= 0:
            return self.intensity
        section = 0.5 - 0.5 * math.cos(2.0 * math.pi * self.time / (2.0 * self.section_seconds))
        return self.intensity * (0.25 + 0.75 * section)

    def generate(self, dt: float = 1.0 / 60.0) -> AudioMetrics:
        """Generate one frame of metrics.

        Args:
            dt: Time delta in seconds
        """
        self.time += dt
        energy = self.energy()

        # Kick on each beat: fast attack, exponential decay
        beat_pos = (self.time * self.bpm / 60.0) % 1.0
        kick = math.exp(-beat_pos * 8.0)
        volume = 0.02 + energy * (0.04 + 0.14 * kick) + self.rng.uniform(0.0, 0.01)

        # Melody changes note every half beat
        half_beats = int(self.time * self.bpm / 30.0)
        if self.rng.random() < 0.05 or half_beats % 8 == 0:
            self._note = self.rng.choice(SCALE)
        pitch = self._note * (1.0 + self.rng.uniform(-0.01, 0.01))
        confidence = 0.3 + 0.6 * energy + self.rng.uniform(-0.1, 0.1)

        fullness = 0.2 + 0.7 * energy + self.rng.uniform(-0.05, 0.05)

        return AudioMetrics(
            volume=max(0.0, volume),
            pitch=pitch,
            confidence=max(0.0, min(1.0, confidence)),
            fullness=max(0.0, min(1.0, fullness)),
        )
