"""
Destructible barriers.

A barrier is a wall of small cells packed on a hexagonal lattice, tilted
back toward the swarm. Swarm shots chip single cells; player shots blast a
hole around the cell they hit.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from mini_arcade_core.utils import logger

from voxel_invaders.config import DEFAULT_CONFIG, BarrierConfig, GameConfig
from voxel_invaders.geometry import Box3, Vec3
from voxel_invaders.view import ViewBinding, ViewFactory


@dataclass(eq=False)
class BarrierCell:
    """
    One damageable unit of a barrier.
    """

    position: Vec3
    health: int
    max_health: int
    alive: bool = True
    view: ViewBinding | None = None

    @property
    def health_ratio(self) -> float:
        return self.health / self.max_health if self.max_health else 0.0

    def damage(self, amount: int) -> bool:
        """
        Take damage; returns True when the cell dies from it.
        """
        if not self.alive:
            return False
        self.health = max(0, self.health - amount)
        if self.health <= 0:
            self.destroy()
            return True
        return False

    def destroy(self):
        self.health = 0
        self.alive = False
        if self.view is not None:
            self.view.set_visible(False)


@dataclass(frozen=True)
class BarrierHitResult:
    hit: bool
    position: Vec3 | None = None
    cell: BarrierCell | None = None
    destroyed: int = 0


MISS = BarrierHitResult(hit=False)


class Barrier:
    """
    Destructible wall of lattice cells.

    :param center: Bottom-center anchor of the wall
    :type center: Vec3

    :param cell_health: Starting health of every cell
    :type cell_health: int
    """

    def __init__(
        self,
        center: Vec3,
        cell_health: int,
        config: BarrierConfig = DEFAULT_CONFIG.barrier,
        view_factory: ViewFactory[BarrierCell] | None = None,
    ):
        self.center = center
        self.config = config
        self.cell_health = cell_health
        self.cells: list[BarrierCell] = self._build_lattice()

        if view_factory is not None:
            for cell in self.cells:
                cell.view = view_factory(cell)
                if cell.view is not None:
                    cell.view.set_transform(cell.position, self.rotation)

        self.bounds = Box3.around(
            [c.position for c in self.cells],
            padding=config.cell_radius + config.cell_packing,
        )

    @property
    def rotation(self) -> Vec3:
        return Vec3(-self.config.tilt, 0.0, 0.0)

    def _build_lattice(self) -> list[BarrierCell]:
        cfg = self.config
        spacing = cfg.cell_size
        row_pitch = spacing * math.sqrt(3.0) / 2.0
        columns = int(cfg.width // spacing) + 1
        rows = int(cfg.height // row_pitch) + 1
        half_width = cfg.width / 2.0
        cos_t = math.cos(cfg.tilt)
        sin_t = math.sin(cfg.tilt)

        cells: list[BarrierCell] = []
        for r in range(rows):
            offset = spacing / 2.0 if r % 2 else 0.0
            local_y = r * row_pitch
            for c in range(columns):
                local_x = (c - (columns - 1) / 2.0) * spacing + offset
                if abs(local_x) > half_width + 1e-9:
                    continue
                # lattice plane leans back (away from the player) by tilt
                position = Vec3(
                    self.center.x + local_x,
                    self.center.y + local_y * cos_t,
                    self.center.z - local_y * sin_t,
                )
                cells.append(
                    BarrierCell(
                        position=position,
                        health=self.cell_health,
                        max_health=self.cell_health,
                    )
                )
        return cells

    def contains(self, point: Vec3) -> bool:
        """Coarse test against the padded bounding box."""
        return self.bounds.contains_point(point)

    def alive_cells(self) -> list[BarrierCell]:
        return [c for c in self.cells if c.alive]

    def has_alive_cells(self) -> bool:
        return any(c.alive for c in self.cells)

    def nearest_cell(
        self, point: Vec3, hit_radius: float
    ) -> BarrierCell | None:
        """
        Closest alive cell within ``hit_radius + cell_packing`` of point.
        Ties keep the first cell found.
        """
        threshold = hit_radius + self.config.cell_packing
        best: BarrierCell | None = None
        best_dist_sq = threshold * threshold
        for cell in self.cells:
            if not cell.alive:
                continue
            dist_sq = cell.position.distance_sq_to(point)
            if dist_sq < best_dist_sq:
                best = cell
                best_dist_sq = dist_sq
        return best

    def apply_damage(
        self, point: Vec3, hit_radius: float, damage: int
    ) -> BarrierHitResult:
        """
        Damage the cell nearest to point.

        Damage above the single-hit threshold blasts every alive cell within
        the blast radius of the struck cell, otherwise only the struck cell
        loses health.

        :return: Hit result with the world position of the struck cell.
        """
        cell = self.nearest_cell(point, hit_radius)
        if cell is None:
            return MISS

        epicenter = cell.position
        if damage > self.config.single_hit_threshold:
            destroyed = self._blast(epicenter)
            logger.debug(
                f"Barrier at x={self.center.x:.0f} blasted, "
                f"{destroyed} cells destroyed"
            )
        else:
            destroyed = 1 if cell.damage(damage) else 0
        return BarrierHitResult(
            hit=True, position=epicenter, cell=cell, destroyed=destroyed
        )

    def _blast(self, epicenter: Vec3) -> int:
        radius_sq = self.config.blast_radius**2
        destroyed = 0
        for cell in self.cells:
            if not cell.alive:
                continue
            if cell.position.distance_sq_to(epicenter) <= radius_sq:
                cell.destroy()
                destroyed += 1
        return destroyed

    def release(self):
        for cell in self.cells:
            if cell.view is not None:
                cell.view.release()
                cell.view = None


def build_barriers(
    cell_health: int,
    config: GameConfig = DEFAULT_CONFIG,
    view_factory: ViewFactory[BarrierCell] | None = None,
) -> list[Barrier]:
    """
    Lay out the row of barriers between the player and the swarm.
    """
    cfg = config.barrier
    total_width = (cfg.count - 1) * cfg.spacing
    start_x = -total_width / 2.0
    return [
        Barrier(
            Vec3(start_x + i * cfg.spacing, 0.0, -cfg.distance),
            cell_health,
            cfg,
            view_factory=view_factory,
        )
        for i in range(cfg.count)
    ]
