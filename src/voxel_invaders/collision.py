"""
Per-frame collision resolution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from voxel_invaders.barrier import Barrier, BarrierCell
from voxel_invaders.config import DEFAULT_CONFIG, GameConfig
from voxel_invaders.entities import Alien, Projectile
from voxel_invaders.formation import Formation
from voxel_invaders.geometry import Vec3


@dataclass(frozen=True)
class KillRecord:
    alien: Alien
    points: int
    position: Vec3


@dataclass(frozen=True)
class BarrierHitRecord:
    barrier: Barrier
    cell: BarrierCell
    position: Vec3
    is_player_shot: bool
    destroyed: int = 0


@dataclass
class CollisionOutcome:
    """
    Everything that happened in one resolve pass.

    The resolver only marks things dead; score, health and effects are
    applied by the caller from this record.
    """

    spent: list[Projectile] = field(default_factory=list)
    kills: list[KillRecord] = field(default_factory=list)
    barrier_hits: list[BarrierHitRecord] = field(default_factory=list)
    player_hit: bool = False

    @property
    def empty(self) -> bool:
        return not (
            self.spent or self.kills or self.barrier_hits or self.player_hit
        )


@dataclass
class CollisionResolver:
    """
    Resolves projectiles against aliens, barriers and the player.

    Every projectile hits at most one thing; the first match in check order
    wins.
    """

    config: GameConfig = DEFAULT_CONFIG

    def resolve(
        self,
        projectiles: Iterable[Projectile],
        formation: Formation,
        barriers: Sequence[Barrier],
        player_position: Vec3,
    ) -> CollisionOutcome:
        outcome = CollisionOutcome()
        for projectile in projectiles:
            if not projectile.alive:
                continue
            if projectile.from_player:
                hit = self._player_shot(
                    projectile, formation, barriers, outcome
                )
            else:
                hit = self._swarm_shot(
                    projectile, barriers, player_position, outcome
                )
            if hit:
                projectile.alive = False
                outcome.spent.append(projectile)
        return outcome

    def _player_shot(
        self,
        projectile: Projectile,
        formation: Formation,
        barriers: Sequence[Barrier],
        outcome: CollisionOutcome,
    ) -> bool:
        alien = formation.alien_at(projectile.position, projectile.radius)
        if alien is not None:
            alien.hide()
            outcome.kills.append(
                KillRecord(
                    alien=alien, points=alien.points, position=alien.position
                )
            )
            return True

        return self._barriers(
            projectile,
            barriers,
            self.config.barrier.player_damage,
            outcome,
        )

    def _swarm_shot(
        self,
        projectile: Projectile,
        barriers: Sequence[Barrier],
        player_position: Vec3,
        outcome: CollisionOutcome,
    ) -> bool:
        if self._barriers(
            projectile, barriers, self.config.barrier.swarm_damage, outcome
        ):
            return True

        # height is ignored: anything reaching the player's column hits
        reach = self.config.player.hit_radius + projectile.radius
        distance_sq = projectile.position.horizontal_distance_sq_to(
            player_position
        )
        if distance_sq < reach * reach:
            outcome.player_hit = True
            return True
        return False

    @staticmethod
    def _barriers(
        projectile: Projectile,
        barriers: Sequence[Barrier],
        damage: int,
        outcome: CollisionOutcome,
    ) -> bool:
        for barrier in barriers:
            if not barrier.contains(projectile.position):
                continue
            result = barrier.apply_damage(
                projectile.position, projectile.radius, damage
            )
            if not result.hit:
                continue
            outcome.barrier_hits.append(
                BarrierHitRecord(
                    barrier=barrier,
                    cell=result.cell,
                    position=result.position,
                    is_player_shot=projectile.from_player,
                    destroyed=result.destroyed,
                )
            )
            return True
        return False
