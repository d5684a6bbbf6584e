"""
Wave difficulty scaling.

All curves are linear ramps over the wave number, topping out at wave 100
unless stated otherwise.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from voxel_invaders.config import DEFAULT_CONFIG, GameConfig
from voxel_invaders.utils import lerp, round_half_up, wave_progress


def _ramp(wave: int, config: GameConfig) -> float:
    return wave_progress(wave, 1, config.timing.ramp_waves)


def shoot_chance(wave: int, config: GameConfig = DEFAULT_CONFIG) -> float:
    """Per-update chance that an unobstructed alien fires."""
    timing = config.timing
    return lerp(
        timing.shoot_chance_base, timing.shoot_chance_max, _ramp(wave, config)
    )


def move_speed(wave: int, config: GameConfig = DEFAULT_CONFIG) -> float:
    """Multiplier applied to the formation's move timer."""
    return 1.0 + max(0, wave - 1) * config.timing.wave_speed_step


def dive_interval(
    wave: int, config: GameConfig = DEFAULT_CONFIG
) -> tuple[float, float]:
    """(min, max) seconds between dive attacks."""
    dive = config.dive
    p = _ramp(wave, config)
    return (
        lerp(dive.min_interval_early, dive.min_interval_late, p),
        lerp(dive.max_interval_early, dive.max_interval_late, p),
    )


def max_divers(wave: int, config: GameConfig = DEFAULT_CONFIG) -> int:
    dive = config.dive
    return math.floor(
        lerp(dive.max_divers_base, dive.max_divers, _ramp(wave, config))
    )


def strafe_interval(wave: int, config: GameConfig = DEFAULT_CONFIG) -> float:
    """Seconds between strafe shots of one diving alien."""
    dive = config.dive
    p = wave_progress(
        wave, dive.start_wave, dive.strafe_late_wave - dive.start_wave
    )
    return lerp(dive.strafe_interval_early, dive.strafe_interval_late, p)


def barrier_health(wave: int, config: GameConfig = DEFAULT_CONFIG) -> int:
    """Starting health of every barrier cell."""
    barrier = config.barrier
    health = lerp(barrier.base_health, barrier.min_health, _ramp(wave, config))
    return max(barrier.min_health, round_half_up(health))


@dataclass(frozen=True)
class WaveDifficulty:
    """
    Snapshot of every wave-scaled tuning value, taken at wave reset.
    """

    wave: int
    shoot_chance: float
    move_speed: float
    dive_interval: tuple[float, float]
    max_divers: int
    strafe_interval: float
    barrier_health: int
    dives_enabled: bool

    @classmethod
    def for_wave(
        cls, wave: int, config: GameConfig = DEFAULT_CONFIG
    ) -> WaveDifficulty:
        return cls(
            wave=wave,
            shoot_chance=shoot_chance(wave, config),
            move_speed=move_speed(wave, config),
            dive_interval=dive_interval(wave, config),
            max_divers=max_divers(wave, config),
            strafe_interval=strafe_interval(wave, config),
            barrier_health=barrier_health(wave, config),
            dives_enabled=wave >= config.dive.start_wave,
        )
