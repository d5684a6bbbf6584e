"""
Alien formation.

Owns every alien of the wave and drives:
- the sweep: discrete horizontal steps, edge bounce and drop toward the
  player, faster as the formation thins out;
- volleys from unobstructed aliens;
- dive attacks by back-row squids (dive, strafe, return);
- the wave intro fly-in and the invasion landing.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence, TypeVar

from mini_arcade_core.utils import logger

from voxel_invaders.config import DEFAULT_CONFIG, FormationConfig, GameConfig
from voxel_invaders.difficulty import WaveDifficulty
from voxel_invaders.entities import (
    SWARM_SHOT_TYPES,
    Alien,
    AlienKind,
    DivePhase,
    Diving,
    FlyingIn,
    FormationMotion,
    Landing,
    Projectile,
    ProjectileOwner,
    ShotType,
)
from voxel_invaders.geometry import Vec3
from voxel_invaders.utils import ease_out_cubic, ease_out_quad, lerp
from voxel_invaders.view import ViewFactory

T = TypeVar("T")


class RandomSource(Protocol):
    """The slice of ``random.Random`` the formation draws from."""

    def random(self) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...


class SpawnSide(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    OVERHEAD = "overhead"


def brightness_for(aliens_ahead: int, config: FormationConfig) -> float:
    """
    Brightness of an alien with ``aliens_ahead`` alive, non-diving aliens
    between it and the player in its column.
    """
    return max(
        config.brightness_min, 1.0 - aliens_ahead * config.brightness_step
    )


@dataclass
class FormationTransform:
    """
    Shared movement state of every alien sitting in formation.
    """

    offset_x: float = 0.0
    depth_z: float = -400.0  # grows toward the player
    height_y: float = 60.0
    direction: float = 1.0  # 1 = right, -1 = left
    move_timer: float = 0.0


class Formation:
    """
    Alien formation

    :param config: Game configuration
    :type config: GameConfig

    :param wave: Wave number (1-based), drives difficulty
    :type wave: int

    :param rng: Random source; inject a seeded one for replays/tests
    :type rng: RandomSource
    """

    def __init__(
        self,
        config: GameConfig = DEFAULT_CONFIG,
        wave: int = 1,
        rng: RandomSource | None = None,
        view_factory: ViewFactory[Alien] | None = None,
    ):
        self.config = config
        self.rng: RandomSource = rng if rng is not None else random.Random()
        self.view_factory = view_factory
        self.aliens: list[Alien] = []
        self.transform = FormationTransform()
        self.wave = wave
        self.difficulty = WaveDifficulty.for_wave(wave, config)

        self.dive_timer = 0.0
        self.next_dive_time = config.dive.first_dive_delay
        self.player_x = 0.0
        self.game_time = 0.0

        self._intro_elapsed = 0.0
        self._landing_elapsed = 0.0
        self._landing_end = 0.0

        self._build()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def reset(self, wave: int = 1):
        """Throw the current aliens away and build a fresh wave."""
        for alien in self.aliens:
            alien.release()
        self.wave = wave
        self.difficulty = WaveDifficulty.for_wave(wave, self.config)
        self.dive_timer = 0.0
        self.next_dive_time = self.config.dive.first_dive_delay
        self._build()

    def _build(self):
        cfg = self.config.formation
        self.transform = FormationTransform(
            depth_z=-cfg.start_distance, height_y=cfg.start_height
        )
        self.aliens = []
        for row in range(cfg.rows):
            kind = self._kind_for_row(row)
            kind_cfg = self.config.alien_types.for_kind(kind)
            for col in range(cfg.columns):
                alien = Alien(
                    kind=kind,
                    column=col,
                    row=row,
                    points=kind_cfg.points,
                    radius=kind_cfg.hit_radius(cfg.scale),
                    can_dive=kind_cfg.can_dive,
                )
                if self.view_factory is not None:
                    alien.view = self.view_factory(alien)
                alien.set_position(self.grid_position(alien), Vec3())
                self.aliens.append(alien)

        self.refresh_brightness()
        logger.info(
            f"Formation built for wave {self.wave}: "
            f"{len(self.aliens)} aliens, "
            f"shoot chance {self.difficulty.shoot_chance:.4f}, "
            f"max divers {self.difficulty.max_divers}"
        )

    def _kind_for_row(self, row: int) -> AlienKind:
        types = self.config.alien_types
        for kind in (AlienKind.SQUID, AlienKind.BUG):
            if row in types.for_kind(kind).rows:
                return kind
        return AlienKind.CRAB

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def total_count(self) -> int:
        return len(self.aliens)

    @property
    def alive_count(self) -> int:
        return sum(1 for a in self.aliens if a.alive)

    def alive_aliens(self) -> list[Alien]:
        return [a for a in self.aliens if a.alive]

    def index_of(self, alien: Alien) -> int:
        return self.aliens.index(alien)

    def grid_x(self, column: int) -> float:
        cfg = self.config.formation
        start_x = -(cfg.columns - 1) * cfg.spacing_x / 2.0
        return start_x + column * cfg.spacing_x + self.transform.offset_x

    def grid_position(self, alien: Alien) -> Vec3:
        """Where the alien sits when it is in formation."""
        cfg = self.config.formation
        return Vec3(
            self.grid_x(alien.column),
            self.transform.height_y,
            self.transform.depth_z - alien.row * cfg.spacing_z,
        )

    @property
    def move_interval(self) -> float:
        """Seconds between sweep steps, shrinking as aliens die."""
        total = self.total_count
        ratio = self.alive_count / total if total else 0.0
        multiplier = max(self.config.gameplay.speed_multiplier_min, ratio)
        return self.config.timing.base_move_interval * multiplier

    def has_reached_danger_line(self) -> bool:
        danger_z = -self.config.gameplay.danger_distance
        return any(a.alive and a.position.z > danger_z for a in self.aliens)

    def alien_at(self, point: Vec3, radius: float) -> Alien | None:
        """First alive alien whose hit sphere overlaps the given sphere."""
        for alien in self.aliens:
            if not alien.alive:
                continue
            reach = radius + alien.radius
            if alien.position.distance_sq_to(point) < reach * reach:
                return alien
        return None

    # ------------------------------------------------------------------
    # Sweep
    # ------------------------------------------------------------------

    def advance(
        self, dt: float, player_x: float = 0.0, game_time: float = 0.0
    ) -> int:
        """
        Advance the formation by one frame.

        :param dt: Frame time in seconds (already clamped by the caller)
        :type dt: float

        :param player_x: Player position, used as dive target
        :type player_x: float

        :param game_time: Elapsed play time, used for strafe cooldowns
        :type game_time: float

        :return: Number of aliens alive.
        """
        alive = self.alive_count
        if alive == 0:
            return 0

        self.player_x = player_x
        self.game_time = game_time

        self.transform.move_timer += dt * self.difficulty.move_speed
        if self.transform.move_timer >= self.move_interval:
            self.transform.move_timer = 0.0
            self.sweep_step()

        if self.difficulty.dives_enabled:
            self.dive_timer += dt
            if self.dive_timer >= self.next_dive_time:
                self.try_start_dive()
                self.schedule_next_dive()

        for alien in self.aliens:
            if alien.alive and isinstance(alien.motion, Diving):
                self._update_diver(alien, alien.motion, dt)

        return alive

    def sweep_step(self):
        """
        Move one step sideways; at the field edge, reverse, drop closer
        and take back the step that went over.
        """
        cfg = self.config.formation
        t = self.transform
        t.offset_x += cfg.step * t.direction

        xs = [self.grid_x(a.column) for a in self.aliens if a.alive]
        if xs and (max(xs) > cfg.edge_margin or min(xs) < -cfg.edge_margin):
            t.direction *= -1
            t.depth_z += cfg.drop_distance
            t.offset_x += cfg.step * t.direction

        for alien in self.aliens:
            if alien.alive:
                alien.animate()
        self._pin_to_grid()

    def _pin_to_grid(self):
        for alien in self.aliens:
            if alien.alive and alien.in_formation:
                alien.set_position(self.grid_position(alien), Vec3())

    def refresh_brightness(self):
        """
        Front alien of each column is brightest, the ones behind it dim.
        Diving aliens stay at full brightness.
        """
        columns: dict[int, list[Alien]] = {}
        for alien in self.aliens:
            if not alien.alive:
                continue
            if alien.is_diving:
                alien.brightness = 1.0
                continue
            columns.setdefault(alien.column, []).append(alien)

        for column in columns.values():
            column.sort(key=lambda a: a.row)
            for ahead, alien in enumerate(column):
                alien.brightness = brightness_for(
                    ahead, self.config.formation
                )

    # ------------------------------------------------------------------
    # Shooting
    # ------------------------------------------------------------------

    def firing_candidates(self) -> list[Alien]:
        """Alive aliens with no alive alien in front of them."""
        front_row: dict[int, int] = {}
        for alien in self.aliens:
            if not alien.alive:
                continue
            cur = front_row.get(alien.column)
            if cur is None or alien.row < cur:
                front_row[alien.column] = alien.row
        return [
            a for a in self.aliens if a.alive and front_row[a.column] == a.row
        ]

    def try_shoot(self) -> list[Projectile]:
        """
        Roll every unobstructed alien against the wave's shoot chance.

        Volleys drop straight down their column toward the player's depth;
        they never lead the player sideways.
        """
        shots: list[Projectile] = []
        for alien in self.firing_candidates():
            if self.rng.random() >= self.difficulty.shoot_chance:
                continue
            origin = self._muzzle(alien)
            target = Vec3(
                origin.x,
                self.config.player.target_height,
                self.config.player.z,
            )
            shots.append(
                self._swarm_shot(
                    origin,
                    target - origin,
                    self.rng.choice(SWARM_SHOT_TYPES),
                )
            )

        if shots:
            logger.debug(f"Formation volley: {len(shots)} shots")
        return shots

    def strafe_shots(
        self, game_time: float, player_x: float | None = None
    ) -> list[Projectile]:
        """
        Aimed shots from diving aliens.

        A diver fires only in the middle of its dive and no more often than
        the wave's strafe interval. Unlike volleys these lead the player.
        """
        dive = self.config.dive
        target_x = self.player_x if player_x is None else player_x
        shots: list[Projectile] = []
        for index, alien in enumerate(self.aliens):
            motion = alien.motion
            if not alien.alive or not isinstance(motion, Diving):
                continue
            if motion.phase is not DivePhase.DIVING:
                continue
            if game_time - motion.last_shot_time < (
                self.difficulty.strafe_interval
            ):
                continue
            if not (
                dive.strafe_window_start
                <= motion.progress
                <= dive.strafe_window_end
            ):
                continue

            motion.last_shot_time = game_time
            origin = self._muzzle(alien)
            target = Vec3(
                target_x,
                self.config.player.target_height,
                self.config.player.z,
            )
            shots.append(
                self._swarm_shot(
                    origin, target - origin, ShotType.PLUNGER, source=index
                )
            )
        return shots

    def _muzzle(self, alien: Alien) -> Vec3:
        return alien.position - Vec3(
            0.0, self.config.projectiles.muzzle_drop, 0.0
        )

    def _swarm_shot(
        self,
        origin: Vec3,
        heading: Vec3,
        shot_type: ShotType,
        source: int | None = None,
    ) -> Projectile:
        cfg = self.config.projectiles
        return Projectile(
            position=origin,
            velocity=heading.normalized() * cfg.swarm_speed,
            owner=ProjectileOwner.SWARM,
            radius=cfg.swarm_radius,
            shot_type=shot_type,
            source=source,
        )

    # ------------------------------------------------------------------
    # Dive attacks
    # ------------------------------------------------------------------

    @property
    def diver_count(self) -> int:
        return sum(1 for a in self.aliens if a.alive and a.is_diving)

    def can_dive(self, alien: Alien) -> bool:
        return alien.alive and alien.can_dive and alien.in_formation

    def has_escort(self) -> bool:
        """At least one alive non-diver kind is still holding formation."""
        return any(
            a.alive and not a.can_dive and a.in_formation for a in self.aliens
        )

    def start_dive(
        self, alien: Alien, target_x: float, game_time: float = 0.0
    ) -> bool:
        """
        Send an alien on a dive toward ``target_x``.

        A no-op (returns False) for aliens that are dead, cannot dive or
        are not sitting in formation.
        """
        if not self.can_dive(alien):
            return False
        alien.motion = Diving(
            start=alien.position,
            target_x=target_x,
            last_shot_time=game_time,
        )
        self.refresh_brightness()
        logger.debug(
            f"Alien col {alien.column} row {alien.row} dives "
            f"toward x={target_x:.1f}"
        )
        return True

    def try_start_dive(self) -> Alien | None:
        if self.diver_count >= self.difficulty.max_divers:
            return None
        if not self.has_escort():
            return None
        candidates = [a for a in self.aliens if self.can_dive(a)]
        if not candidates:
            return None
        alien = self.rng.choice(candidates)
        self.start_dive(alien, self.player_x, self.game_time)
        return alien

    def schedule_next_dive(self):
        low, high = self.difficulty.dive_interval
        self.dive_timer = 0.0
        self.next_dive_time = low + self.rng.random() * (high - low)

    def _update_diver(self, alien: Alien, motion: Diving, dt: float):
        if motion.phase is DivePhase.DIVING:
            self._advance_dive(alien, motion, dt)
        else:
            self._advance_return(alien, motion, dt)

    def _advance_dive(self, alien: Alien, motion: Diving, dt: float):
        dive = self.config.dive

        # never let a diver past the retreat line, whatever the frame time
        if alien.position.z >= dive.retreat_z:
            logger.debug(
                f"Alien col {alien.column} row {alien.row} hit the retreat "
                f"line at t={motion.progress:.2f}, returning"
            )
            self._begin_return(alien, motion)
            return

        distance = dive.retreat_z - motion.start.z
        if distance <= 0.0:
            self._begin_return(alien, motion)
            return

        motion.progress = min(
            1.0, motion.progress + dive.dive_speed * dt / distance
        )
        t = motion.progress
        start = motion.start

        arc = math.sin(t * math.pi)
        sway = math.sin(t * math.pi * dive.wave_frequency)
        x = lerp(start.x, motion.target_x, t)
        x += sway * dive.wave_amplitude * (1.0 - t)
        y = lerp(start.y, dive.floor_height, t) + dive.height_boost * arc
        z = lerp(start.z, dive.retreat_z, t)
        alien.set_position(
            Vec3(x, y, z), Vec3(-0.3 - arc * 0.3, 0.0, sway * 0.5)
        )

        if t >= 1.0:
            self._begin_return(alien, motion)

    def _begin_return(self, alien: Alien, motion: Diving):
        motion.phase = DivePhase.RETURNING
        motion.progress = 0.0
        motion.start = alien.position

    def _advance_return(self, alien: Alien, motion: Diving, dt: float):
        dive = self.config.dive
        # the slot keeps moving with the formation while we fly back
        target = self.grid_position(alien)
        distance = motion.start.distance_to(target)
        if distance < dive.return_snap_distance:
            self._finish_return(alien)
            return

        motion.progress += dive.return_speed * dt / distance
        if motion.progress >= 1.0:
            self._finish_return(alien)
            return

        t = motion.progress
        bump = math.sin(t * math.pi) * 0.5
        position = motion.start.lerp(target, t) + Vec3(
            0.0, dive.height_boost * 0.5 * bump, 0.0
        )
        alien.set_position(position, Vec3(-0.2 * (1.0 - t), 0.0, 0.0))

    def _finish_return(self, alien: Alien):
        alien.motion = FormationMotion()
        alien.set_position(self.grid_position(alien), Vec3())
        self.refresh_brightness()

    # ------------------------------------------------------------------
    # Wave intro
    # ------------------------------------------------------------------

    @property
    def intro_active(self) -> bool:
        return any(a.alive and a.is_flying_in for a in self.aliens)

    def start_intro(self) -> bool:
        """
        Scatter every alive alien off-field and have it fly to its slot,
        back rows first.
        """
        alive = self.alive_aliens()
        if not alive:
            return False

        cfg = self.config.intro
        rows = self.config.formation.rows
        self._intro_elapsed = 0.0
        for alien in alive:
            target = self.grid_position(alien)
            start = self._spawn_point(target)
            delay = (rows - 1 - alien.row) * cfg.row_delay
            delay += self.rng.random() * cfg.jitter
            alien.motion = FlyingIn(
                start=start,
                target=target,
                delay=delay,
                duration=start.distance_to(target) / cfg.speed,
            )
            alien.set_position(start, Vec3())

        logger.info(f"Wave {self.wave} intro started")
        return True

    def advance_intro(self, dt: float) -> bool:
        """
        Advance the fly-in.

        :return: True once every alive alien has reached its slot.
        """
        self._intro_elapsed += dt
        arrived = True
        for alien in self.aliens:
            motion = alien.motion
            if not alien.alive or not isinstance(motion, FlyingIn):
                continue

            local = self._intro_elapsed - motion.delay
            if local <= 0.0:
                arrived = False
                continue
            if motion.duration <= 0.0 or local >= motion.duration:
                alien.motion = FormationMotion()
                alien.set_position(self.grid_position(alien), Vec3())
                continue

            motion.progress = local / motion.duration
            eased = ease_out_quad(motion.progress)
            alien.set_position(motion.start.lerp(motion.target, eased))
            arrived = False

        if arrived:
            self.refresh_brightness()
        return arrived

    def _spawn_point(self, target: Vec3) -> Vec3:
        cfg = self.config.intro
        edge = self.config.formation.edge_margin
        side = self._pick_spawn_side()
        if side is SpawnSide.OVERHEAD:
            return Vec3(
                target.x + (self.rng.random() - 0.5) * cfg.spread,
                target.y + cfg.overhead_height + self.rng.random() * cfg.spread,
                target.z - self.rng.random() * cfg.spread,
            )

        x = edge + cfg.side_margin + self.rng.random() * cfg.spread
        if side is SpawnSide.LEFT:
            x = -x
        return Vec3(
            x,
            target.y + self.rng.random() * cfg.spread,
            target.z - self.rng.random() * cfg.spread,
        )

    def _pick_spawn_side(self) -> SpawnSide:
        sides = list(SpawnSide)
        weights = self.config.intro.side_weights
        roll = self.rng.random() * sum(weights)
        for side, weight in zip(sides, weights):
            if roll < weight:
                return side
            roll -= weight
        return sides[-1]

    # ------------------------------------------------------------------
    # Invasion landing
    # ------------------------------------------------------------------

    def start_landing(self) -> int:
        """
        Bring every alive alien down onto the ground in front of the
        player. Dives in progress are abandoned.

        :return: Number of landing aliens.
        """
        cfg = self.config.landing
        alive = sorted(
            self.alive_aliens(), key=lambda a: (a.position.x, a.row)
        )
        count = len(alive)
        half_span = self.config.formation.edge_margin * cfg.spread_fraction
        danger_z = -self.config.gameplay.danger_distance
        player_z = self.config.player.z

        self._landing_elapsed = 0.0
        self._landing_end = 0.0
        for slot, alien in enumerate(alive):
            if count == 1:
                x = 0.0
            else:
                x = -half_span + 2.0 * half_span * slot / (count - 1)
            target = Vec3(
                x, cfg.height, danger_z + self.rng.random() * cfg.depth_spread
            )
            delay = abs(alien.position.z - player_z) * cfg.delay_per_unit
            alien.motion = Landing(
                start=alien.position,
                target=target,
                delay=delay,
                duration=cfg.duration,
            )
            self._landing_end = max(self._landing_end, delay + cfg.duration)

        logger.info(f"Invasion landing started with {count} aliens")
        return count

    def advance_landing(self, dt: float) -> bool:
        """
        Advance the landing.

        :return: True once all aliens are down and the settle delay passed.
        """
        cfg = self.config.landing
        self._landing_elapsed += dt
        all_landed = True
        for alien in self.aliens:
            motion = alien.motion
            if not alien.alive or not isinstance(motion, Landing):
                continue
            if motion.landed:
                continue

            local = self._landing_elapsed - motion.delay
            if local <= 0.0:
                all_landed = False
                continue

            if motion.duration <= 0.0:
                p = 1.0
            else:
                p = min(1.0, local / motion.duration)
            motion.progress = p
            decay = 1.0 - p
            wobble = math.sin(p * math.pi * cfg.wobble_frequency)
            position = motion.start.lerp(
                motion.target, ease_out_cubic(p)
            ) + Vec3(
                cfg.wobble_amplitude * wobble * decay,
                cfg.bump_height * math.sin(p * math.pi) * decay,
                0.0,
            )
            alien.set_position(position, Vec3(0.0, 0.0, wobble * 0.3 * decay))

            if p >= 1.0:
                motion.landed = True
            else:
                all_landed = False

        return all_landed and (
            self._landing_elapsed >= self._landing_end + cfg.settle_delay
        )
