"""
Flower field - population controller and per-tick pipeline.

Each tick:
    audio metrics -> smoothing -> beat detector -> activity level
    -> (reactive mode) grow toward / cull toward target population
    -> per-flower lifecycle -> head/stem parameters
    -> petal-loss detach events -> falling petals
    -> sweep terminal flowers, re-sort if anything (re)spawned

Structural changes found during the per-flower pass (detach events,
removals) are buffered and applied after the pass, so the collections
are never mutated while being iterated.
"""

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .beat import BeatDetector, update_activity
from .config import FieldConfig
from .draw import Color, DrawCommand
from .head import Inflorescence, InflorescenceParams
from .lifecycle import (
    BLOOM_END,
    GROW_END,
    SHED_END,
    TERMINAL_PHASE,
    LifecycleOutput,
    evaluate_fast_death,
    evaluate_phase,
    lifecycle_speed,
    normalize_pitch,
)
from .palettes import validate_color_mode
from .particles import FallingPetalSystem
from .petal import PetalShape
from .state import FieldState
from .stem import Stem, StemShape
from .traits import FlowerTraits, roll_traits, stem_thickness
from .utils import clamp, clamp_finite, lerp

logger = logging.getLogger(__name__)

MIN_DT = 0.001
MAX_DT = 0.1
DEFAULT_DT = 1.0 / 60.0
MIN_VISIBLE_ALPHA = 0.01


@dataclass(frozen=True)
class DetachEvent:
    """One petal leaving a flower head this tick."""

    head_position: Tuple[float, float]
    angle: float  # degrees
    shape: PetalShape
    color: Color
    radius: float = 0.0  # push-out of the petal base from the head center


class FlowerInstance:
    """A flower in the field: immutable traits plus mutable lifecycle state."""

    def __init__(self, traits: FlowerTraits, phase: float = 0.0, rotation: float = 0.0):
        self.traits = traits
        self.inflorescence = Inflorescence()
        self.stem = Stem()
        self.phase = phase
        self.rotation = rotation  # accumulated degrees
        self.fast_death = False
        self.fast_death_timer = 0.0
        self.alpha = 0.0
        self.visible_petals = 0
        self.last_visible_petals = evaluate_phase(
            phase, traits.petal_count, traits.pointiness
        ).visible_petals

    @property
    def is_terminal(self) -> bool:
        return self.phase >= TERMINAL_PHASE

    def eligible_for_cull(self) -> bool:
        return not self.fast_death and not self.is_terminal and GROW_END < self.phase < SHED_END

    def ground_position(self, width: float, height: float) -> Tuple[float, float]:
        return (self.traits.x * width, self.traits.y * height)

    def head_position(self, width: float, height: float) -> Tuple[float, float]:
        gx, gy = self.ground_position(width, height)
        tx, ty = self.stem.top()
        return (gx + tx, gy + ty)

    def apply(self, out: LifecycleOutput):
        """Push lifecycle output into the head and stem geometry."""
        t = self.traits
        self.alpha = out.alpha
        self.visible_petals = out.visible_petals

        petal = PetalShape(
            count=out.visible_petals,
            length=t.length * t.depth_scale * out.scale * out.volume_pulse,
            width=t.width,
            tip_pointiness=out.pointiness,
            bulge_position=t.bulge,
            edge_curvature=t.edge_curvature,
        )
        self.inflorescence.set_params(
            InflorescenceParams(
                petal=petal,
                layout=t.layout,
                ornament=t.ornament,
                noise=t.noise,
                center_radius=t.center_radius * t.depth_scale * max(out.scale, 0.1),
                rotation=self.rotation,
                petal_color=t.petal_color,
                center_color=t.center_color,
            )
        )
        self.stem.set_shape(
            StemShape(
                height=t.stem_height * t.depth_scale * out.stem_scale,
                thickness=stem_thickness(t.depth_scale),
                taper_ratio=t.taper_ratio,
                curvature=clamp(t.stem_curvature + out.stem_curve_mod, -2.0, 2.0),
                segments=t.segments,
                node_width=t.node_width,
                tendrils=t.tendrils,
                tendril_scale=t.depth_scale * out.stem_scale,
            )
        )

    def __repr__(self) -> str:
        return (
            f"FlowerInstance(layout={self.traits.layout.name}, phase={self.phase:.3f}, "
            f"petals={self.visible_petals}/{self.traits.petal_count}, fast_death={self.fast_death})"
        )


class FlowerField:
    """
    Owns the flower population and runs the per-tick simulation.

    Flowers are kept sorted by normalized y so farther (higher on screen)
    flowers are drawn first.
    """

    def __init__(self, config: FieldConfig = None, rng: Optional[random.Random] = None):
        self.config = (config or FieldConfig()).validate()
        self.rng = rng or random.Random()
        self.state = FieldState()
        self.beat_detector = BeatDetector(self.config.beat)
        self.petals = FallingPetalSystem(self.config.petals, self.rng)
        self.instances: List[FlowerInstance] = []

    # ------------------------------------------------------------------
    # Setup and modes
    # ------------------------------------------------------------------

    def setup(self, initial_count: int):
        """Create the initial batch with staggered phases."""
        if not isinstance(initial_count, int) or isinstance(initial_count, bool):
            raise ValueError(f"Initial count must be an integer, got {initial_count!r}")
        if initial_count < 0:
            raise ValueError(f"Initial count must be non-negative, got {initial_count}")

        self.state.base_count = initial_count
        self.instances = [
            self._spawn(phase=self.rng.uniform(0.0, 1.0)) for _ in range(initial_count)
        ]
        self.petals.clear()
        self._sort()
        logger.info(f"Flower field set up with {initial_count} flowers")

    def set_reactive_mode(self, enabled: bool):
        enabled = bool(enabled)
        if enabled != self.state.reactive_mode:
            logger.info(f"Reactive mode {'enabled' if enabled else 'disabled'}")
        self.state.reactive_mode = enabled

    def set_color_mode(self, mode: int):
        self.state.color_mode = validate_color_mode(mode)
        logger.info(f"Color mode set to {mode}")

    @property
    def reactive_mode(self) -> bool:
        return self.state.reactive_mode

    @property
    def color_mode(self) -> int:
        return self.state.color_mode

    def target_count(self) -> int:
        """Population the controller is steering toward."""
        if not self.state.reactive_mode:
            return self.state.base_count
        pop = self.config.population
        return int(round(lerp(pop.reactive_min, pop.reactive_max, self.state.activity_level)))

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------

    def _roll(self) -> FlowerTraits:
        return roll_traits(
            self.rng,
            self.state.color_mode,
            self.state.elapsed,
            self.config.population.palette_cycle_seconds,
        )

    def _spawn(self, phase: float = 0.0) -> FlowerInstance:
        return FlowerInstance(self._roll(), phase=phase, rotation=self.rng.uniform(0.0, 360.0))

    def _respawn(self, fi: FlowerInstance):
        """Reuse an instance slot for a brand new flower."""
        fi.traits = self._roll()
        fi.phase = 0.0
        fi.rotation = self.rng.uniform(0.0, 360.0)
        fi.fast_death = False
        fi.fast_death_timer = 0.0
        fi.alpha = 0.0
        fi.last_visible_petals = fi.traits.petal_count
        fi.visible_petals = fi.traits.petal_count

    def _sort(self):
        self.instances.sort(key=lambda fi: fi.traits.y)

    # ------------------------------------------------------------------
    # Reactive sizing
    # ------------------------------------------------------------------

    def _grow_toward(self, target: int) -> int:
        """Append up to max_growth_per_tick new flowers. Returns how many."""
        missing = target - len(self.instances)
        count = max(0, min(missing, self.config.population.max_growth_per_tick))
        for _ in range(count):
            self.instances.append(self._spawn(phase=0.0))
        if count:
            logger.debug(f"Grew population by {count} toward {target}")
        return count

    def _cull_toward(self, target: int) -> int:
        """Flag up to max_fast_death_per_tick blooming flowers for fast-death."""
        dying = sum(1 for fi in self.instances if fi.fast_death)
        surplus = len(self.instances) - dying - target
        if surplus <= 0:
            return 0
        eligible = [fi for fi in self.instances if fi.eligible_for_cull()]
        count = min(surplus, self.config.population.max_fast_death_per_tick, len(eligible))
        for fi in self.rng.sample(eligible, count):
            fi.fast_death = True
            fi.fast_death_timer = 0.0
        if count:
            logger.debug(f"Flagged {count} flowers for fast-death toward {target}")
        return count

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def update(
        self,
        volume: float,
        pitch: float,
        confidence: float,
        fullness: float,
        dt: float = DEFAULT_DT,
        viewport_width: Optional[float] = None,
        viewport_height: Optional[float] = None,
    ) -> List[DetachEvent]:
        """Advance the simulation one frame. Returns this tick's detach events."""
        state = self.state
        cfg = self.config

        dt = clamp_finite(dt, MIN_DT, MAX_DT, DEFAULT_DT)
        volume = clamp_finite(volume, 0.0, 10.0, 0.0)
        pitch = clamp_finite(pitch, 0.0, 20000.0, 0.0)
        confidence = clamp_finite(confidence, 0.0, 1.0, 0.0)
        fullness = clamp_finite(fullness, 0.0, 1.0, 0.0)
        if viewport_width is not None:
            state.viewport_width = clamp_finite(viewport_width, 1.0, 16384.0, state.viewport_width)
        if viewport_height is not None:
            state.viewport_height = clamp_finite(viewport_height, 1.0, 16384.0, state.viewport_height)

        state.elapsed += dt
        state.frame += 1
        state.smooth_inputs(volume, pitch, confidence, fullness, cfg.smoothing)
        self.beat_detector.update(state, dt)
        update_activity(state, self.beat_detector)
        pitch_norm = normalize_pitch(state.smoothed_pitch)

        target = self.target_count()
        needs_sort = False
        if state.reactive_mode:
            needs_sort = self._grow_toward(target) > 0
            self._cull_toward(target)

        overshoot = 0.0
        if not state.reactive_mode and state.base_count > 0 and len(self.instances) > state.base_count:
            overshoot = len(self.instances) / state.base_count - 1.0

        lc = cfg.lifecycle
        speed = lifecycle_speed(
            lc.base_rate,
            state.smoothed_fullness,
            min_speed_factor=lc.min_speed_factor,
            reactive=state.reactive_mode,
            activity=state.activity_level,
            reactive_speed_min=lc.reactive_speed_min,
            reactive_speed_max=lc.reactive_speed_max,
            overshoot=overshoot,
            overshoot_boost=lc.overshoot_boost,
        )

        surviving = sum(1 for fi in self.instances if not fi.fast_death and not fi.is_terminal)
        events: List[DetachEvent] = []

        for fi in self.instances:
            if fi.is_terminal:
                continue

            if fi.fast_death:
                fi.fast_death_timer += dt
                out = evaluate_fast_death(fi.fast_death_timer, lc.fast_death_seconds, fi.traits.pointiness)
                if out.finished:
                    fi.phase = TERMINAL_PHASE
            else:
                fi.phase += speed * fi.traits.life_speed_mult * dt
                if fi.phase >= TERMINAL_PHASE:
                    if surviving > target:
                        fi.phase = TERMINAL_PHASE
                        surviving -= 1
                    else:
                        self._respawn(fi)
                        needs_sort = True
                out = evaluate_phase(
                    min(fi.phase, TERMINAL_PHASE),
                    fi.traits.petal_count,
                    fi.traits.pointiness,
                    fi.traits.pitch_direction,
                    state.smoothed_volume,
                    pitch_norm,
                )

            if fi.is_terminal:
                fi.alpha = 0.0
                continue

            fi.rotation = (fi.rotation + fi.traits.rotation_speed * fi.traits.rotation_direction * dt) % 360.0
            fi.apply(out)
            events.extend(self._detach_events(fi))

        removed = self._sweep()
        if removed:
            logger.debug(f"Swept {removed} finished flowers, {len(self.instances)} remain")

        for ev in events:
            self.petals.spawn(ev.head_position, ev.angle, ev.shape, ev.color, ev.radius)
        self.petals.update(dt, state.viewport_height)

        if needs_sort:
            self._sort()
        return events

    def _detach_events(self, fi: FlowerInstance) -> List[DetachEvent]:
        """Events for every petal index lost since the previous tick."""
        visible = fi.visible_petals
        previous = fi.last_visible_petals
        fi.last_visible_petals = visible
        if visible >= previous:
            return []

        head = fi.head_position(self.state.viewport_width, self.state.viewport_height)
        params = fi.inflorescence.params
        color = params.petal_color.with_alpha(params.petal_color.a * fi.alpha)
        by_index = {
            p.index: p for p in fi.inflorescence.placements(self.state.elapsed, count=previous)
        }

        events = []
        for index in range(visible, previous):
            placement = by_index.get(index)
            if placement is None:
                continue
            events.append(
                DetachEvent(
                    head_position=head,
                    angle=params.rotation + placement.angle,
                    shape=fi.inflorescence.shape_for(placement),
                    color=color,
                    radius=placement.radius,
                )
            )
        return events

    def _sweep(self) -> int:
        before = len(self.instances)
        self.instances = [fi for fi in self.instances if not fi.is_terminal]
        return before - len(self.instances)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def draw(
        self, viewport_width: Optional[float] = None, viewport_height: Optional[float] = None
    ) -> List[DrawCommand]:
        """Ordered draw commands: flowers back to front, then falling petals."""
        w = viewport_width if viewport_width is not None else self.state.viewport_width
        h = viewport_height if viewport_height is not None else self.state.viewport_height

        commands: List[DrawCommand] = []
        for fi in self.instances:
            if fi.alpha <= MIN_VISIBLE_ALPHA or fi.is_terminal:
                continue
            gx, gy = fi.ground_position(w, h)
            commands.extend(fi.stem.draw(gx, gy, fi.traits.stem_color, fi.alpha))
            tx, ty = fi.stem.top()
            commands.extend(fi.inflorescence.draw(gx + tx, gy + ty, self.state.elapsed, fi.alpha))
        commands.extend(self.petals.draw())
        return commands

    def stats(self) -> Dict[str, float]:
        """Snapshot of population and audio state for logging."""
        return {
            "frame": self.state.frame,
            "population": len(self.instances),
            "target": self.target_count(),
            "dying": sum(1 for fi in self.instances if fi.fast_death),
            "blooming": sum(1 for fi in self.instances if GROW_END <= fi.phase < BLOOM_END),
            "falling_petals": len(self.petals),
            "activity": round(self.state.activity_level, 3),
            "beats": len(self.state.beat_times),
            "volume": round(self.state.smoothed_volume, 3),
        }
