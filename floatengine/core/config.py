"""
floatengine: Defaults (Presets)

Tuning values for the gesture, capture, edge and trash animations.
Distances in *_dp fields are scaled by DeviceProfile.density.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from floatengine.core.types import MoveDirection, Shape


class PresetName(str, Enum):
    DEFAULT = "Default"
    SNAPPY = "Snappy"
    GENTLE = "Gentle"


@dataclass(frozen=True)
class GestureTuning:
    move_threshold_dp: float = 8.0
    long_press_factor: float = 1.5   # applied to the system long-press timeout
    scale_pressed: float = 0.9
    scale_normal: float = 1.0


@dataclass(frozen=True)
class CaptureTuning:
    refresh_ms: int = 17
    capture_ms: int = 300


@dataclass(frozen=True)
class EdgeTuning:
    duration_ms: int = 450
    overshoot_tension: float = 1.25
    frame_ms: int = 17


@dataclass(frozen=True)
class PhysicsTuning:
    update_ms: int = 10
    fling_friction: float = 1.7
    spring_x_damping: float = 0.7
    spring_x_stiffness: float = 350.0
    spring_y_damping: float = 0.75    # low bounce
    spring_y_stiffness: float = 200.0  # low stiffness
    x_velocity_divisor: float = 9.0
    y_velocity_divisor: float = 8.0
    throw_divisor: float = 9.0
    min_visible_change_px: float = 1.0


@dataclass(frozen=True)
class TrashTuning:
    background_height_dp: int = 164
    capture_horizontal_dp: float = 30.0
    capture_vertical_dp: float = 4.0
    icon_scale_duration_ms: int = 200
    icon_scale_tension: float = 2.0
    refresh_ms: int = 17
    background_duration_ms: int = 200
    open_start_delay_ms: int = 200
    open_duration_ms: int = 400
    close_duration_ms: int = 200
    overshoot_tension: float = 1.0
    move_limit_offset_x_dp: int = 22
    move_limit_top_offset_dp: int = -4
    sticky_range: float = 0.20
    vibrate_ms: int = 15
    icon_size_dp: int = 56


@dataclass(frozen=True)
class DeviceProfile:
    """Static properties of the display and its system chrome."""
    density: float = 1.0
    status_bar_height: int = 0
    status_bar_rotated_height: int = 0
    navigation_bar_height: int = 0
    navigation_bar_rotated_height: int = 0
    is_tablet: bool = False
    has_soft_navigation_bar: bool = True
    long_press_timeout_ms: int = 400
    max_fling_velocity: int = 8000


BARE_DEVICE = DeviceProfile()

PHONE = DeviceProfile(
    density=3.0,
    status_bar_height=72,
    status_bar_rotated_height=72,
    navigation_bar_height=144,
    navigation_bar_rotated_height=144,
    is_tablet=False,
    has_soft_navigation_bar=True,
    long_press_timeout_ms=400,
    max_fling_velocity=24000,
)

TABLET = DeviceProfile(
    density=2.0,
    status_bar_height=48,
    status_bar_rotated_height=48,
    navigation_bar_height=96,
    navigation_bar_rotated_height=96,
    is_tablet=True,
    has_soft_navigation_bar=True,
    long_press_timeout_ms=400,
    max_fling_velocity=16000,
)


@dataclass(frozen=True)
class FloaterOptions:
    shape: Shape = Shape.CIRCLE
    over_margin: int = 0
    initial_anchor: Optional[Tuple[int, int]] = None   # None -> (0, top of screen)
    move_direction: MoveDirection = MoveDirection.DEFAULT
    use_physics: bool = False
    animate_initial_move: bool = True
    size: Optional[Tuple[int, int]] = None             # None -> wrap content (measured)
    children: int = 1

    def __post_init__(self):
        if self.size is not None and (self.size[0] < 0 or self.size[1] < 0):
            raise ValueError(f"floater size must be non-negative, got {self.size}")
        if self.children < 0:
            raise ValueError(f"children must be non-negative, got {self.children}")
        # accept raw values from profiles / callers
        if not isinstance(self.move_direction, MoveDirection):
            object.__setattr__(self, "move_direction", MoveDirection(self.move_direction))
        if not isinstance(self.shape, Shape):
            object.__setattr__(self, "shape", Shape(self.shape))


@dataclass(frozen=True)
class Preset:
    name: PresetName
    gesture: GestureTuning = GestureTuning()
    capture: CaptureTuning = CaptureTuning()
    edge: EdgeTuning = EdgeTuning()
    physics: PhysicsTuning = PhysicsTuning()
    trash: TrashTuning = TrashTuning()


DEFAULT_PRESET = Preset(name=PresetName.DEFAULT)

SNAPPY_PRESET = Preset(
    name=PresetName.SNAPPY,
    gesture=GestureTuning(move_threshold_dp=6.0, long_press_factor=1.5),
    capture=CaptureTuning(refresh_ms=17, capture_ms=200),
    edge=EdgeTuning(duration_ms=300, overshoot_tension=1.5),
    physics=PhysicsTuning(spring_x_damping=0.8, spring_x_stiffness=500.0),
    trash=TrashTuning(open_start_delay_ms=120, open_duration_ms=300, close_duration_ms=150),
)

GENTLE_PRESET = Preset(
    name=PresetName.GENTLE,
    gesture=GestureTuning(move_threshold_dp=10.0, long_press_factor=2.0),
    capture=CaptureTuning(refresh_ms=17, capture_ms=400),
    edge=EdgeTuning(duration_ms=600, overshoot_tension=1.0),
    physics=PhysicsTuning(fling_friction=2.2, spring_x_damping=0.9, spring_x_stiffness=200.0),
    trash=TrashTuning(open_start_delay_ms=250, open_duration_ms=500, close_duration_ms=250),
)

PRESETS = {
    PresetName.DEFAULT: DEFAULT_PRESET,
    PresetName.SNAPPY: SNAPPY_PRESET,
    PresetName.GENTLE: GENTLE_PRESET,
}
