"""
Per-flower lifecycle.

A flower's normalized age (phase, 0-1) maps to the visual parameters it
is drawn with:

    [0.00, 0.15)  growing       - ease-in scale, fade in
    [0.15, 0.60)  blooming      - full audio reactivity
    [0.60, 0.80)  losing petals - petal count falls to 0, reactivity fades
    [0.80, 0.95)  wilting       - head shrinks, stem droops
    [0.95, 1.00)  dead          - fade out
    >= 1.0        terminal      - respawn or removal

Fast-death overrides the table with a short collapse animation used when
the population controller culls a flower.
"""

import math
from dataclasses import dataclass

from .utils import clamp, round_half_up

GROW_END = 0.15
BLOOM_END = 0.60
SHED_END = 0.80
WILT_END = 0.95
TERMINAL_PHASE = 1.0

VOLUME_PULSE_GAIN = 0.9
POINTINESS_PITCH_GAIN = 0.35
MAX_CURVE_BIAS = 1.5
FAST_DEATH_CURVE_GAIN = 3.0

PITCH_CENTER_HZ = 261.0
PITCH_LOW_HZ = 50.0
PITCH_HIGH_HZ = 2500.0


@dataclass
class LifecycleOutput:
    """Visual parameters for one flower at one tick."""

    scale: float = 1.0  # head scale
    stem_scale: float = 1.0  # stem height scale
    stem_curve_mod: float = 0.0  # extra bend while wilting
    alpha: float = 1.0
    volume_pulse: float = 1.0
    pointiness: float = 0.5
    visible_petals: int = 0
    reactivity: float = 0.0
    finished: bool = False  # fast-death animation complete


def normalize_pitch(smoothed_pitch: float) -> float:
    """Map pitch (Hz) log-2 onto [-1, 1] around middle C."""
    if smoothed_pitch <= PITCH_LOW_HZ:
        return 0.0
    log_range = math.log2(PITCH_HIGH_HZ) - math.log2(PITCH_LOW_HZ)
    norm = (math.log2(smoothed_pitch) - math.log2(PITCH_CENTER_HZ)) / (log_range * 0.5)
    return clamp(norm, -1.0, 1.0)


def _reactive(
    out: LifecycleOutput,
    reactivity: float,
    base_pointiness: float,
    pitch_direction: float,
    smoothed_volume: float,
    pitch_norm: float,
):
    out.reactivity = reactivity
    out.volume_pulse = 1.0 + smoothed_volume * VOLUME_PULSE_GAIN * reactivity
    mod = pitch_direction * pitch_norm * POINTINESS_PITCH_GAIN * reactivity
    out.pointiness = clamp(base_pointiness + mod, 0.0, 1.0)


def evaluate_phase(
    phase: float,
    base_petal_count: int,
    base_pointiness: float,
    pitch_direction: float = 1.0,
    smoothed_volume: float = 0.0,
    pitch_norm: float = 0.0,
) -> LifecycleOutput:
    """Visual parameters for a flower at ``phase``."""
    base_petal_count = max(0, base_petal_count)
    out = LifecycleOutput(pointiness=base_pointiness, visible_petals=base_petal_count)

    if phase < GROW_END:
        t = clamp(phase / GROW_END)
        out.scale = t * t
        out.stem_scale = t
        out.alpha = t
    elif phase < BLOOM_END:
        _reactive(out, 1.0, base_pointiness, pitch_direction, smoothed_volume, pitch_norm)
    elif phase < SHED_END:
        t = (phase - BLOOM_END) / (SHED_END - BLOOM_END)
        out.visible_petals = max(0, round_half_up(base_petal_count * (1.0 - t)))
        out.scale = 1.0 - t * 0.3
        _reactive(out, 1.0 - t, base_pointiness, pitch_direction, smoothed_volume, pitch_norm)
    elif phase < WILT_END:
        t = (phase - SHED_END) / (WILT_END - SHED_END)
        out.visible_petals = 0
        out.scale = (1.0 - t) * 0.7
        out.stem_scale = 1.0 - t * 0.6
        out.stem_curve_mod = t * MAX_CURVE_BIAS
        out.alpha = 1.0 - t * 0.6
    else:
        t = clamp((phase - WILT_END) / (TERMINAL_PHASE - WILT_END))
        out.visible_petals = 0
        out.scale = 0.01
        out.stem_scale = 0.4 * (1.0 - t)
        out.stem_curve_mod = MAX_CURVE_BIAS
        out.alpha = (1.0 - t) * 0.4

    out.alpha = clamp(out.alpha)
    return out


def evaluate_fast_death(timer: float, duration: float, base_pointiness: float) -> LifecycleOutput:
    """Collapse animation: petals gone at once, head and stem shrink, stem curls."""
    fd = clamp(timer / duration) if duration > 0 else 1.0
    return LifecycleOutput(
        scale=1.0 - fd,
        stem_scale=1.0 - fd,
        stem_curve_mod=fd * FAST_DEATH_CURVE_GAIN,
        alpha=clamp(1.0 - fd * fd),
        pointiness=base_pointiness,
        visible_petals=0,
        finished=fd >= 1.0,
    )


def lifecycle_speed(
    base_rate: float,
    fullness: float,
    min_speed_factor: float = 0.05,
    reactive: bool = False,
    activity: float = 0.0,
    reactive_speed_min: float = 0.5,
    reactive_speed_max: float = 2.0,
    overshoot: float = 0.0,
    overshoot_boost: float = 1.0,
) -> float:
    """
    Population-wide phase advance per second.

    Fullness sets the pace (never fully stopped). Reactive mode scales it
    with activity; outside reactive mode an oversized population (overshoot
    = len/base - 1) speeds up so it returns to baseline sooner.
    """
    speed = base_rate * (min_speed_factor + clamp(fullness) * (1.0 - min_speed_factor))
    if reactive:
        speed *= reactive_speed_min + clamp(activity) * (reactive_speed_max - reactive_speed_min)
    elif overshoot > 0.0:
        speed *= 1.0 + overshoot * overshoot_boost
    return speed
