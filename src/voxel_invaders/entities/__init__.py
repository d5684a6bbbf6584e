"""
Voxel Invaders entities
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from voxel_invaders.config import DEFAULT_CONFIG, GameConfig
from voxel_invaders.geometry import Vec3
from voxel_invaders.view import ViewBinding


class AlienKind(str, Enum):
    CRAB = "crab"  # front row
    BUG = "bug"  # middle rows
    SQUID = "squid"  # back rows, dive bombers


class DivePhase(str, Enum):
    DIVING = "diving"
    RETURNING = "returning"


@dataclass
class FormationMotion:
    """Default state: position comes from the formation transform."""


@dataclass
class FlyingIn:
    start: Vec3
    target: Vec3
    delay: float
    duration: float
    progress: float = 0.0


@dataclass
class Diving:
    start: Vec3
    target_x: float
    phase: DivePhase = DivePhase.DIVING
    progress: float = 0.0
    last_shot_time: float = 0.0


@dataclass
class Landing:
    start: Vec3
    target: Vec3
    delay: float
    duration: float
    progress: float = 0.0
    landed: bool = False


MotionState = Union[FormationMotion, FlyingIn, Diving, Landing]


@dataclass(eq=False)
class Alien:
    """
    Alien entity

    Dead aliens stay in the formation list (hidden) so column/row lookups
    and projectile back-references keep working until the next wave.
    """

    kind: AlienKind
    column: int
    row: int
    points: int
    radius: float
    can_dive: bool = False
    position: Vec3 = field(default_factory=Vec3)
    rotation: Vec3 = field(default_factory=Vec3)  # cosmetic tilt only
    alive: bool = True
    brightness: float = 1.0
    frame: int = 0
    motion: MotionState = field(default_factory=FormationMotion)
    view: ViewBinding | None = None

    @property
    def in_formation(self) -> bool:
        return isinstance(self.motion, FormationMotion)

    @property
    def is_diving(self) -> bool:
        return isinstance(self.motion, Diving)

    @property
    def is_flying_in(self) -> bool:
        return isinstance(self.motion, FlyingIn)

    def set_position(self, position: Vec3, rotation: Vec3 | None = None):
        self.position = position
        if rotation is not None:
            self.rotation = rotation
        if self.view is not None:
            self.view.set_transform(self.position, self.rotation)

    def animate(self):
        """Flip between the two sprite frames."""
        self.frame = 1 - self.frame

    def hide(self):
        self.alive = False
        if self.view is not None:
            self.view.set_visible(False)

    def release(self):
        if self.view is not None:
            self.view.release()
            self.view = None


class ProjectileOwner(str, Enum):
    PLAYER = "player"
    SWARM = "swarm"


class ShotType(str, Enum):
    STRAIGHT = "straight"
    ROLLING = "rolling"
    PLUNGER = "plunger"
    SQUIGGLY = "squiggly"


SWARM_SHOT_TYPES = (ShotType.ROLLING, ShotType.PLUNGER, ShotType.SQUIGGLY)


@dataclass(eq=False)
class Projectile:
    """
    Projectile entity
    """

    position: Vec3
    velocity: Vec3
    owner: ProjectileOwner
    radius: float
    shot_type: ShotType = ShotType.STRAIGHT
    source: int | None = None  # formation index of the firing alien
    alive: bool = True
    view: ViewBinding | None = None

    @property
    def from_player(self) -> bool:
        return self.owner is ProjectileOwner.PLAYER

    def update(self, dt: float):
        self.position = self.position + self.velocity * dt
        if self.view is not None:
            self.view.set_transform(self.position, Vec3())

    def is_out_of_bounds(self, config: GameConfig = DEFAULT_CONFIG) -> bool:
        p = self.position
        limits = config.projectiles
        if self.from_player:
            formation = config.formation
            # behind the back row of a freshly built formation
            far_z = -(
                formation.start_distance
                + (formation.rows - 1) * formation.spacing_z
                + limits.player_overshoot
            )
            return p.z < far_z or p.y > limits.player_max_height or p.y < 0
        return (
            p.z > limits.swarm_max_z
            or p.y < 0
            or abs(p.x) > limits.swarm_max_abs_x
        )

    def destroy(self):
        self.alive = False
        if self.view is not None:
            self.view.release()
            self.view = None
