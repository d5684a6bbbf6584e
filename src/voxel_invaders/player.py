"""
Player turret.
"""

from __future__ import annotations

import math

from mini_arcade_core.utils import logger

from voxel_invaders.config import DEFAULT_CONFIG, GameConfig
from voxel_invaders.entities import Projectile, ProjectileOwner, ShotType
from voxel_invaders.geometry import Vec3
from voxel_invaders.utils import clamp


class PlayerTurret:
    """
    First-person turret standing in front of the barriers.

    :param config: Game configuration
    :type config: GameConfig
    """

    def __init__(self, config: GameConfig = DEFAULT_CONFIG):
        self.config = config
        self.x = 0.0
        self.yaw = 0.0
        self.pitch = config.player.base_pitch
        self.last_shot_time = -math.inf
        self.visible = True

    def reset(self):
        self.x = 0.0
        self.yaw = 0.0
        self.pitch = self.config.player.base_pitch
        self.last_shot_time = -math.inf
        self.visible = True

    @property
    def position(self) -> Vec3:
        cfg = self.config.player
        return Vec3(self.x, cfg.height, cfg.z)

    def update(
        self,
        dt: float,
        move_x: float = 0.0,
        aim_x: float = 0.0,
        aim_y: float = 0.0,
    ):
        """
        Strafe and aim.

        :param move_x: Strafe input in [-1, 1], positive to the right
        :param aim_x: Yaw input in [-1, 1]
        :param aim_y: Pitch input in [-1, 1], positive up
        """
        cfg = self.config.player
        self.x = clamp(
            self.x + move_x * cfg.strafe_speed * dt,
            -cfg.strafe_limit,
            cfg.strafe_limit,
        )
        self.yaw = clamp(
            self.yaw + aim_x * cfg.aim_speed * dt, -cfg.max_yaw, cfg.max_yaw
        )
        self.pitch = clamp(
            self.pitch + aim_y * cfg.aim_speed * dt,
            cfg.base_pitch - cfg.max_pitch,
            cfg.base_pitch + cfg.max_pitch,
        )

    def aim_direction(self) -> Vec3:
        """Unit vector the turret points along (forward is -z)."""
        horizontal = math.cos(self.pitch)
        return Vec3(
            math.sin(self.yaw) * horizontal,
            math.sin(self.pitch),
            -math.cos(self.yaw) * horizontal,
        )

    def can_fire(self, now: float) -> bool:
        return now - self.last_shot_time >= self.config.player.fire_rate

    def fire(self, now: float) -> Projectile | None:
        """
        Fire a shot if the cooldown allows it.

        :param now: Current game time in seconds
        :type now: float

        :return: The new projectile, or None while cooling down.
        """
        if not self.can_fire(now):
            return None

        self.last_shot_time = now
        direction = self.aim_direction()
        projectiles = self.config.projectiles
        origin = self.position + direction * self.config.player.muzzle_offset
        logger.debug(
            f"Player fired at x={self.x:.1f} "
            f"yaw={self.yaw:.2f} pitch={self.pitch:.2f}"
        )
        return Projectile(
            position=origin,
            velocity=direction * projectiles.player_speed,
            owner=ProjectileOwner.PLAYER,
            radius=projectiles.player_radius,
            shot_type=ShotType.STRAIGHT,
        )
