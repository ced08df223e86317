"""
Per-frame animation controller.

Owns the "music time" clock, decides when the active shape switches,
blends the particle pool toward the active shape's target buffer and
derives every scalar the rendering side consumes.

Audio mapping:
  - loudness        -> music-time speed, switch interval/permission,
                       morph rate, beat scalar, shrink pulse, loud shimmer
  - top 30% of bins -> treble scalar
  - music time      -> warp oscillation, palette hue rotation

Gesture mapping:
  - left fist / open palm -> signed grip (+ implode, - explode)
  - right open palm       -> rain state
  - right pointing        -> touch flag + ripple center
"""

import logging
import math
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any

import numpy as np

from nebulamorph.config import (
    ALL_SHAPES,
    DEFAULT_COLORS,
    DEFAULT_VISUAL_CONFIG,
    STANDBY_CHAOS,
    STANDBY_DESCRIPTION,
    STANDBY_SPEED,
    AnimationConfig,
    VisualConfig,
    VisualSettings,
    VisualShape,
)
from nebulamorph.core.colors import lerp_colors, palette_from_hex, rgb_to_hex, rotate_palette
from nebulamorph.core.particles import ParticlePool
from nebulamorph.core.shapes import generate_shape
from nebulamorph.signals.audio import AudioFrame, treble_level
from nebulamorph.signals.gesture import GestureState, HandGesture

logger = logging.getLogger(__name__)


class ShapeMode(IntEnum):
    """Shader animation selector."""

    DEFAULT = 0
    RIPPLE = 1
    FLOWER = 2
    PULSE = 3


SHAPE_MODES = {
    VisualShape.LIQUID_WAVE: ShapeMode.RIPPLE,
    VisualShape.CYBER_FLOWER: ShapeMode.FLOWER,
    VisualShape.PULSING_BLACK_HOLE: ShapeMode.PULSE,
}


def shape_mode_for(shape: VisualShape) -> ShapeMode:
    return SHAPE_MODES.get(shape, ShapeMode.DEFAULT)


def standby_config(config: VisualConfig) -> VisualConfig:
    """Idle profile shown while playback is paused: slow, ordered sphere."""
    return replace(
        config,
        shape=VisualShape.SPHERE,
        speed=STANDBY_SPEED,
        chaos=STANDBY_CHAOS,
        description=STANDBY_DESCRIPTION,
    )


def effective_config(config: VisualConfig, is_playing: bool) -> VisualConfig:
    return config if is_playing else standby_config(config)


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, float(value)))


@dataclass
class ControlSignals:
    """Everything the rendering side needs for one frame."""

    shape: VisualShape
    shape_mode: ShapeMode
    time: float
    beat: float
    treble: float
    warp: float
    shrink: float
    colors: np.ndarray          # (3, 3) float RGB
    hand_grip: float
    rain_state: float
    touch_active: bool
    touch_point: tuple[float, float]
    visible_count: int
    size: float
    brightness: float
    bloom_intensity: float
    shape_switched: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "shape": self.shape.value,
            "shape_mode": int(self.shape_mode),
            "time": self.time,
            "beat": self.beat,
            "treble": self.treble,
            "warp": self.warp,
            "shrink": self.shrink,
            "colors": [rgb_to_hex(c) for c in self.colors],
            "hand_grip": self.hand_grip,
            "rain_state": self.rain_state,
            "touch_active": self.touch_active,
            "touch_point": list(self.touch_point),
            "visible_count": self.visible_count,
            "size": self.size,
            "brightness": self.brightness,
            "bloom_intensity": self.bloom_intensity,
            "shape_switched": self.shape_switched,
        }


class AnimationController:
    """
    Drives one particle pool, exactly one ``step`` per rendered frame.

    The controller is the only writer of ``pool.positions`` and of its own
    target buffer; readers look at them after ``step`` returns.
    """

    def __init__(
        self,
        pool: ParticlePool,
        config: VisualConfig | None = None,
        settings: VisualSettings | None = None,
        animation: AnimationConfig | None = None,
        seed: int | None = None,
    ):
        self.pool = pool
        self.cfg = animation or AnimationConfig()
        self.settings = settings or VisualSettings()
        self.rng = np.random.default_rng(seed)

        self.targets = np.zeros_like(pool.positions)

        # Clocks
        self.music_time = 0.0
        self.wall_time = 0.0
        self._last_switch = 0.0

        # Smoothed gesture / color state
        self._grip = 0.0
        self._rain = 0.0
        self._touch_active = False
        self._touch_point = np.zeros(2)
        self._colors = palette_from_hex(DEFAULT_COLORS)

        self.config: VisualConfig = config or DEFAULT_VISUAL_CONFIG
        self.active_shape: VisualShape = self.config.shape
        self.active_chaos: float = self.config.chaos
        self._palette = palette_from_hex(self.config.colors)
        self._regenerate(self.active_shape, self.active_chaos)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def apply_config(self, config: VisualConfig) -> bool:
        """
        Replace the active visual config.

        Returns True when the target buffer was regenerated (shape or chaos
        changed); the switch timer restarts in that case.
        """
        previous = self.config
        self.config = config
        self._palette = palette_from_hex(config.colors)
        if config.shape == previous.shape and config.chaos == previous.chaos:
            return False
        self._regenerate(config.shape, config.chaos)
        self._last_switch = self.wall_time
        return True

    def apply_settings(self, settings: VisualSettings):
        self.settings = settings

    @property
    def since_last_switch(self) -> float:
        return self.wall_time - self._last_switch

    def _regenerate(self, shape: VisualShape, chaos: float):
        flat = generate_shape(shape, self.pool.capacity, chaos, self.rng)
        self.targets[:] = flat.reshape(-1, 3)
        self.active_shape = shape
        self.active_chaos = chaos

    # ------------------------------------------------------------------
    # Shape switching
    # ------------------------------------------------------------------

    def _maybe_switch(self, loudness: float) -> bool:
        cfg = self.cfg
        since = self.since_last_switch
        interval = cfg.switch_base_interval / (0.5 + loudness)
        if since <= interval:
            return False
        if loudness <= cfg.switch_loudness_threshold and since <= cfg.force_switch_after:
            return False

        candidates = [s for s in ALL_SHAPES if s is not self.active_shape]
        next_shape = candidates[int(self.rng.integers(len(candidates)))]
        chaos = _clamp01(self.config.chaos + loudness * cfg.switch_chaos_gain)

        logger.debug(
            "Switching %s -> %s (loudness=%.2f, held %.1fs)",
            self.active_shape.value, next_shape.value, loudness, since,
        )
        self._regenerate(next_shape, chaos)
        self._last_switch = self.wall_time
        return True

    # ------------------------------------------------------------------
    # Frame update
    # ------------------------------------------------------------------

    def _lerp(self, current: float, target: float, factor: float) -> float:
        return current + (target - current) * factor

    def _update_gestures(self, gesture: GestureState):
        cfg = self.cfg
        left = gesture.left_hand
        grip_target = 0.0
        if left.active:
            grip_target = left.strength if left.is_fist else -left.strength
        self._grip = self._lerp(self._grip, grip_target, cfg.grip_smoothing)

        right = gesture.right_hand
        raining = right.active and right.gesture is HandGesture.RAIN
        self._rain = self._lerp(self._rain, 1.0 if raining else 0.0, cfg.rain_smoothing)

        self._touch_active = right.active and right.gesture is HandGesture.TOUCH
        if self._touch_active:
            target = np.array([right.x, right.y]) * cfg.touch_screen_scale
            self._touch_point = self._touch_point + (target - self._touch_point) * cfg.touch_smoothing

    def _blend_positions(self, loudness: float):
        cfg = self.cfg
        # Strong implosion gesture: leave positions where they are
        if self._grip > cfg.grip_blend_cutoff:
            return

        rate = (cfg.base_lerp + loudness * cfg.loudness_lerp) * (1.0 + self.config.speed * cfg.speed_lerp_gain)
        pos = self.pool.positions
        pos += (self.targets - pos) * np.float32(rate)

        if loudness > cfg.shimmer_threshold:
            push = (self.rng.random(pos.shape) - 0.5) * loudness * cfg.shimmer_gain
            pos += push.astype(np.float32)

    def step(
        self,
        delta_seconds: float,
        audio: AudioFrame | None = None,
        gesture: GestureState | None = None,
        is_playing: bool = True,
    ) -> ControlSignals:
        """
        Advance one frame.

        Args:
            delta_seconds: Wall-clock time since the previous frame. A zero
                delta leaves positions untouched.
            audio: Latest audio frame; silence when omitted.
            gesture: Latest gesture state; neutral when omitted.
            is_playing: Shape switching only happens during playback.

        Returns:
            The derived control signals for this frame.
        """
        cfg = self.cfg
        audio = audio if audio is not None else AudioFrame()
        gesture = gesture if gesture is not None else GestureState.neutral()

        loudness = _clamp01(audio.average_loudness)
        delta = max(0.0, float(delta_seconds))

        self.music_time += delta * self.config.speed * (0.5 + loudness * 2.0)
        self.wall_time += delta
        t = self.music_time

        treble = treble_level(audio.frequency_magnitudes, cfg.treble_fraction) * 2.0

        switched = self._maybe_switch(loudness) if is_playing else False

        self._update_gestures(gesture)

        hue_target = rotate_palette(self._palette, t * cfg.hue_rotation_speed)
        self._colors = lerp_colors(self._colors, hue_target, cfg.color_smoothing)

        # Positions only move when time passes
        if delta > 0.0:
            self._blend_positions(loudness)

        base_warp = 3.0 + math.sin(t * 0.2) * 2.0
        settings = self.settings
        return ControlSignals(
            shape=self.active_shape,
            shape_mode=shape_mode_for(self.active_shape),
            time=t,
            beat=loudness * 3.0,
            treble=treble,
            warp=base_warp * (0.5 + settings.trail_strength * 1.5),
            shrink=1.0 - loudness * 0.2 + math.sin(t) * 0.1,
            colors=self._colors.copy(),
            hand_grip=self._grip,
            rain_state=self._rain,
            touch_active=self._touch_active,
            touch_point=(float(self._touch_point[0]), float(self._touch_point[1])),
            visible_count=settings.visible_count(self.pool.capacity),
            size=settings.particle_size * cfg.size_scale,
            brightness=settings.brightness,
            bloom_intensity=settings.bloom_intensity,
            shape_switched=switched,
        )
