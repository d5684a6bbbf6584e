"""
Session events.

The session reports what happened each frame as plain dataclasses; the front
end turns them into sounds, particles and screen text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from voxel_invaders.entities import AlienKind, ProjectileOwner
from voxel_invaders.geometry import Vec3


@dataclass(frozen=True)
class WaveStarted:
    wave: int


@dataclass(frozen=True)
class ShotFired:
    owner: ProjectileOwner
    position: Vec3


@dataclass(frozen=True)
class AlienKilled:
    kind: AlienKind
    points: int
    position: Vec3
    score: int  # total after this kill


@dataclass(frozen=True)
class BarrierHit:
    position: Vec3
    is_player_shot: bool
    destroyed: int


@dataclass(frozen=True)
class PlayerHit:
    health: int  # remaining


@dataclass(frozen=True)
class LifeLost:
    lives: int  # remaining


@dataclass(frozen=True)
class DangerLineReached:
    wave: int


@dataclass(frozen=True)
class WaveCleared:
    wave: int
    score: int


@dataclass(frozen=True)
class GameOver:
    score: int
    wave: int
    invaded: bool  # True when the swarm landed, False when out of lives


SessionEvent = Union[
    WaveStarted,
    ShotFired,
    AlienKilled,
    BarrierHit,
    PlayerHit,
    LifeLost,
    DangerLineReached,
    WaveCleared,
    GameOver,
]
