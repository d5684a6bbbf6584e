"""
Game configuration.

Every tuning value of the simulation lives here, grouped in frozen
dataclasses. ``GameConfig.from_dict`` overlays a nested dict on the defaults
so a front end can feed settings the same way it builds backend settings.
"""

from __future__ import annotations

import math
from dataclasses import (
    Field,
    asdict,
    dataclass,
    field,
    fields,
    is_dataclass,
    replace,
)
from typing import Any


class ConfigError(ValueError):
    """Raised when a configuration dict or value is invalid."""


@dataclass(frozen=True)
class AlienTypeConfig:
    """
    Per-kind alien settings.
    """

    rows: tuple[int, ...]
    points: int
    sprite_size: tuple[int, int]  # sprite pixels (width, height)
    can_dive: bool = False

    def hit_radius(self, scale: float) -> float:
        """Bounding-sphere radius of the voxel sprite at the given scale."""
        w, h = self.sprite_size
        return 0.5 * scale * math.hypot(w, h)


@dataclass(frozen=True)
class AlienTypesConfig:
    crab: AlienTypeConfig = AlienTypeConfig(
        rows=(0,), points=10, sprite_size=(11, 8)
    )
    bug: AlienTypeConfig = AlienTypeConfig(
        rows=(1, 2), points=20, sprite_size=(12, 8)
    )
    squid: AlienTypeConfig = AlienTypeConfig(
        rows=(3, 4), points=30, sprite_size=(8, 8), can_dive=True
    )

    def for_kind(self, kind: Any) -> AlienTypeConfig:
        """Look up the settings of an ``AlienKind`` (by its value)."""
        return getattr(self, kind.value)


@dataclass(frozen=True)
class FormationConfig:
    columns: int = 11
    rows: int = 5
    spacing_x: float = 16.0
    spacing_z: float = 36.0
    start_distance: float = 400.0
    start_height: float = 60.0
    drop_distance: float = 15.0
    step: float = 4.0
    edge_margin: float = 111.0  # one barrier width beyond the outer barriers
    scale: float = 2.0
    brightness_step: float = 0.15
    brightness_min: float = 0.3

    def __post_init__(self):
        if self.columns <= 0 or self.rows <= 0:
            raise ConfigError(
                f"Formation needs a positive grid, got "
                f"{self.columns}x{self.rows}"
            )

    @property
    def total(self) -> int:
        return self.columns * self.rows


@dataclass(frozen=True)
class TimingConfig:
    base_move_interval_frames: float = 55.0
    frame_rate: float = 60.0
    shoot_chance_base: float = 0.005  # per front alien per update, wave 1
    shoot_chance_max: float = 0.05  # wave 100
    wave_speed_step: float = 0.2
    ramp_waves: int = 99

    @property
    def base_move_interval(self) -> float:
        """Seconds between sweep steps with a full formation."""
        return self.base_move_interval_frames / self.frame_rate


@dataclass(frozen=True)
class DiveConfig:
    start_wave: int = 2
    dive_speed: float = 60.0
    return_speed: float = 80.0
    height_boost: float = 40.0
    wave_amplitude: float = 30.0
    wave_frequency: float = 3.0
    floor_height: float = 10.0
    retreat_z: float = -200.0  # well before the barriers
    first_dive_delay: float = 5.0
    min_interval_early: float = 3.0
    min_interval_late: float = 0.8
    max_interval_early: float = 8.0
    max_interval_late: float = 2.0
    max_divers_base: int = 1
    max_divers: int = 5
    strafe_interval_early: float = 1.0
    strafe_interval_late: float = 0.4
    strafe_late_wave: int = 75
    strafe_window_start: float = 0.2
    strafe_window_end: float = 0.8
    return_snap_distance: float = 1.0


@dataclass(frozen=True)
class IntroConfig:
    speed: float = 120.0
    row_delay: float = 0.15
    jitter: float = 0.1
    side_weights: tuple[float, float, float] = (0.35, 0.35, 0.30)
    side_margin: float = 80.0
    overhead_height: float = 120.0
    spread: float = 40.0


@dataclass(frozen=True)
class LandingConfig:
    height: float = 4.0
    duration: float = 1.6
    delay_per_unit: float = 0.004
    bump_height: float = 12.0
    wobble_amplitude: float = 3.0
    wobble_frequency: float = 4.0
    settle_delay: float = 1.0
    spread_fraction: float = 0.9
    depth_spread: float = 30.0


@dataclass(frozen=True)
class PlayerConfig:
    strafe_speed: float = 80.0
    strafe_limit: float = 111.0
    height: float = 5.0
    z: float = -50.0
    fire_rate: float = 0.4  # minimum seconds between shots
    base_pitch: float = 0.16  # level with the formation at spawn
    max_pitch: float = 0.6
    max_yaw: float = 0.14
    aim_speed: float = 1.2  # radians per second at full input
    muzzle_offset: float = 2.0
    hit_radius: float = 8.0
    target_height: float = 5.0  # where swarm shots aim


@dataclass(frozen=True)
class ProjectileConfig:
    player_speed: float = 150.0
    swarm_speed: float = 80.0
    player_radius: float = 0.5
    swarm_radius: float = 0.7
    muzzle_drop: float = 3.0
    player_overshoot: float = 50.0
    player_max_height: float = 150.0
    swarm_max_z: float = 50.0
    swarm_max_abs_x: float = 150.0


@dataclass(frozen=True)
class BarrierConfig:
    count: int = 4
    width: float = 24.0
    height: float = 30.0
    distance: float = 100.0
    spacing: float = 50.0
    cell_size: float = 2.0
    tilt: float = 0.4  # radians, leaning back toward the swarm
    base_health: int = 3
    min_health: int = 1
    player_damage: int = 50
    swarm_damage: int = 1
    single_hit_threshold: int = 5
    blast_multiple: float = 3.0
    packing_factor: float = 1.5

    @property
    def cell_radius(self) -> float:
        return self.cell_size / 2.0

    @property
    def cell_packing(self) -> float:
        return self.cell_size * self.packing_factor

    @property
    def blast_radius(self) -> float:
        return self.cell_radius * self.blast_multiple


@dataclass(frozen=True)
class GameplayConfig:
    lives: int = 3
    hits_per_life: int = 20
    speed_multiplier_min: float = 0.3
    danger_distance: float = 100.0
    wave_complete_delay: float = 1.0
    wave_complete_pause: float = 5.0
    life_lost_delay: float = 1.5
    life_lost_pause: float = 5.0


@dataclass(frozen=True)
class GameConfig:
    """
    Root configuration.
    """

    formation: FormationConfig = field(default_factory=FormationConfig)
    alien_types: AlienTypesConfig = field(default_factory=AlienTypesConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    dive: DiveConfig = field(default_factory=DiveConfig)
    intro: IntroConfig = field(default_factory=IntroConfig)
    landing: LandingConfig = field(default_factory=LandingConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    projectiles: ProjectileConfig = field(default_factory=ProjectileConfig)
    barrier: BarrierConfig = field(default_factory=BarrierConfig)
    gameplay: GameplayConfig = field(default_factory=GameplayConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameConfig:
        """
        Build a config from a nested dict, keeping defaults for
        anything left out.

        :param data: e.g. ``{"formation": {"columns": 8}}``
        :type data: dict

        :raises ConfigError: On unknown sections/keys or invalid values.
        """
        return _overlay(cls(), data, "")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _overlay(instance: Any, values: Any, path: str) -> Any:
    if not isinstance(values, dict):
        raise ConfigError(
            f"Expected a mapping for '{path or 'root'}', "
            f"got {type(values).__name__}"
        )

    known = {f.name: f for f in fields(instance)}
    changes: dict[str, Any] = {}
    for key, value in values.items():
        if key not in known:
            raise ConfigError(f"Unknown config key '{path}{key}'")
        current = getattr(instance, key)
        if is_dataclass(current):
            changes[key] = _overlay(current, value, f"{path}{key}.")
        else:
            changes[key] = _checked(
                current, value, known[key], f"{path}{key}"
            )
    return replace(instance, **changes)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _checked(current: Any, value: Any, field_def: Field, name: str) -> Any:
    """
    Validate a leaf value against the type of its default.

    :raises ConfigError: When the value cannot stand in for the default.
    """
    if isinstance(current, bool):
        valid = isinstance(value, bool)
    elif isinstance(current, int):
        valid = isinstance(value, int) and not isinstance(value, bool)
    elif isinstance(current, float):
        valid = _is_number(value)
    elif isinstance(current, tuple):
        # tuple[int, ...] fields may change length, fixed shapes may not
        variadic = "..." in str(field_def.type)
        valid = (
            isinstance(value, (list, tuple))
            and all(_is_number(v) for v in value)
            and (variadic or len(value) == len(current))
        )
        if valid:
            value = tuple(value)
    else:
        valid = isinstance(value, type(current))

    if not valid:
        raise ConfigError(f"Invalid value for '{name}': {value!r}")
    return value


DEFAULT_CONFIG = GameConfig()
