"""
Beat Detector - Onset detection and musical activity score.

A beat fires when the smoothed (fast) volume jumps well above a slow
moving baseline. Recent beats are kept for a few seconds; their density,
together with volume and spectral fullness, feeds a slowly moving
activity level that drives reactive population sizing.
"""

import logging

from .config import BeatConfig
from .state import FieldState
from .utils import clamp

logger = logging.getLogger(__name__)

_MIN_BASELINE = 1e-4


class BeatDetector:
    """Fast/slow envelope ratio onset detector with cooldown."""

    def __init__(self, config: BeatConfig = None):
        self.config = config or BeatConfig()

    def update(self, state: FieldState, dt: float) -> bool:
        """
        Advance the detector by one tick.

        Uses ``state.smoothed_volume`` as the fast envelope and
        ``state.elapsed`` as the clock. Returns True if a beat fired.
        """
        cfg = self.config
        now = state.elapsed
        state.beat_cooldown = max(0.0, state.beat_cooldown - dt)

        # Compare against the baseline from before this frame
        ratio = state.smoothed_volume / max(state.slow_volume, _MIN_BASELINE)
        fired = (
            state.beat_cooldown <= 0.0
            and state.smoothed_volume > cfg.volume_floor
            and ratio > cfg.ratio_threshold
        )
        if fired:
            state.beat_cooldown = cfg.cooldown_seconds
            state.beat_times.append(now)

        state.slow_volume += (state.smoothed_volume - state.slow_volume) * cfg.slow_alpha

        while state.beat_times and now - state.beat_times[0] > cfg.history_seconds:
            state.beat_times.popleft()

        state.is_beat = fired
        return fired

    def beat_density(self, state: FieldState) -> float:
        """Recent beats per window, normalized to 0-1."""
        return clamp(len(state.beat_times) / self.config.density_beats)


def update_activity(state: FieldState, detector: BeatDetector) -> float:
    """Fold the composite activity score into the slow activity level."""
    cfg = detector.config
    score = (
        cfg.density_weight * detector.beat_density(state)
        + cfg.volume_weight * state.smoothed_volume
        + cfg.fullness_weight * state.smoothed_fullness
    )
    state.activity_level += (score - state.activity_level) * cfg.activity_alpha
    state.activity_level = clamp(state.activity_level)
    return state.activity_level
