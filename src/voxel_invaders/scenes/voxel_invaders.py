"""
Voxel Invaders Scene
"""

from __future__ import annotations

from dataclasses import dataclass

from mini_arcade_core.backend import Backend
from mini_arcade_core.backend.keys import Key
from mini_arcade_core.scenes.autoreg import (  # pyright: ignore[reportMissingImports]
    register_scene,
)
from mini_arcade_core.scenes.sim_scene import (  # pyright: ignore[reportMissingImports]
    BaseIntent,
    BaseTickContext,
    BaseWorld,
    Drawable,
    DrawCall,
    SimScene,
)
from mini_arcade_core.scenes.systems.builtins import (
    BaseInputSystem,
    BaseRenderSystem,
)
from mini_arcade_core.utils import logger

from voxel_invaders.constants import MAX_FRAME_DT, VIEW_X_RANGE, VIEW_Z_RANGE
from voxel_invaders.entities import AlienKind
from voxel_invaders.events import GameOver, LifeLost, WaveStarted
from voxel_invaders.geometry import Vec3
from voxel_invaders.session import GameSession, GameState, SessionIntent

Color = tuple[int, int, int]

KIND_COLORS: dict[AlienKind, Color] = {
    AlienKind.CRAB: (80, 255, 80),
    AlienKind.BUG: (80, 200, 255),
    AlienKind.SQUID: (255, 90, 220),
}
PLAYER_COLOR: Color = (255, 255, 255)
PLAYER_SHOT_COLOR: Color = (255, 255, 120)
SWARM_SHOT_COLOR: Color = (255, 80, 80)
BARRIER_COLOR: Color = (60, 220, 60)


def shade(color: Color, brightness: float) -> Color:
    """Scale a color by brightness in [0, 1]."""
    r, g, b = color
    return (int(r * brightness), int(g * brightness), int(b * brightness))


@dataclass(frozen=True)
class TopDownProjection:
    """
    Maps the 3D field onto the screen seen from above: x across, z down
    (the swarm at the top, the player at the bottom). Height is dropped.
    """

    viewport: tuple[float, float]
    x_range: tuple[float, float] = VIEW_X_RANGE
    z_range: tuple[float, float] = VIEW_Z_RANGE

    @property
    def scale(self) -> tuple[float, float]:
        vw, vh = self.viewport
        x0, x1 = self.x_range
        z0, z1 = self.z_range
        return vw / (x1 - x0), vh / (z1 - z0)

    def to_screen(self, point: Vec3) -> tuple[float, float]:
        sx, sz = self.scale
        return (
            (point.x - self.x_range[0]) * sx,
            (point.z - self.z_range[0]) * sz,
        )

    def rect(self, point: Vec3, size: float) -> tuple[int, int, int, int]:
        """Screen rect of a square footprint centered on point."""
        sx, _ = self.scale
        cx, cy = self.to_screen(point)
        side = max(2, int(size * sx))
        return int(cx - side / 2), int(cy - side / 2), side, side


@dataclass
class VoxelInvadersWorld(BaseWorld):
    """
    Voxel Invaders World
    """

    viewport: tuple[float, float]
    session: GameSession


@dataclass
class VoxelInvadersIntent(BaseIntent):
    """
    Voxel Invaders Intent
    """

    move_left: float = 0.0
    move_right: float = 0.0
    aim_left: float = 0.0
    aim_right: float = 0.0
    aim_up: float = 0.0
    aim_down: float = 0.0
    fire: bool = False
    start: bool = False

    def to_session_intent(self) -> SessionIntent:
        return SessionIntent(
            move_x=self.move_right - self.move_left,
            aim_x=self.aim_right - self.aim_left,
            aim_y=self.aim_up - self.aim_down,
            fire=self.fire,
            start=self.start,
        )


@dataclass
class VoxelInvadersTickContext(
    BaseTickContext[VoxelInvadersWorld, VoxelInvadersIntent]
):
    """
    Voxel Invaders Tick Context
    """


@dataclass
class VoxelInvadersInputSystem(BaseInputSystem):
    """
    Process input and update intent.
    """

    name: str = "voxel_invaders_input"

    def step(self, ctx: VoxelInvadersTickContext):
        """Process input and update intent."""
        key_down = ctx.input_frame.keys_down
        key_pressed = ctx.input_frame.keys_pressed

        ctx.intent = VoxelInvadersIntent(
            move_left=1.0 if Key.LEFT in key_down else 0.0,
            move_right=1.0 if Key.RIGHT in key_down else 0.0,
            aim_left=1.0 if Key.A in key_down else 0.0,
            aim_right=1.0 if Key.D in key_down else 0.0,
            aim_up=1.0 if Key.W in key_down else 0.0,
            aim_down=1.0 if Key.S in key_down else 0.0,
            # held fire is fine, the turret cooldown paces it
            fire=Key.SPACE in key_down,
            start=Key.SPACE in key_pressed,
        )


@dataclass
class SessionSystem:
    """
    Advance the game session with a clamped frame time.
    """

    name: str = "voxel_invaders_session"
    order: int = 20

    def step(self, ctx: VoxelInvadersTickContext):
        intent = (
            ctx.intent.to_session_intent()
            if ctx.intent is not None
            else SessionIntent()
        )
        dt = min(ctx.dt, MAX_FRAME_DT)
        for event in ctx.world.session.update(dt, intent):
            if isinstance(event, (WaveStarted, LifeLost, GameOver)):
                logger.info(f"{type(event).__name__}: {event}")


class DrawAliens(Drawable):
    """
    Drawable Aliens
    """

    def draw(self, backend: Backend, ctx: VoxelInvadersTickContext):
        projection = TopDownProjection(ctx.world.viewport)
        formation = ctx.world.session.formation
        scale = formation.config.formation.scale
        for alien in formation.aliens:
            if not alien.alive:
                continue
            # the two sprite frames read as a slight size pulse from above
            size = alien.radius * (1.6 if alien.frame else 1.4)
            x, y, w, h = projection.rect(alien.position, size)
            color = shade(KIND_COLORS[alien.kind], alien.brightness)
            backend.render.draw_rect(x, y, w, h, color=color)
            if alien.is_diving:
                # height marker so divers read apart from the grid
                lift = int(alien.position.y / scale)
                backend.render.draw_rect(x, y - lift, w, 1, color=color)


class DrawBarriers(Drawable):
    """
    Drawable Barriers
    """

    def draw(self, backend: Backend, ctx: VoxelInvadersTickContext):
        projection = TopDownProjection(ctx.world.viewport)
        cell_size = ctx.world.session.config.barrier.cell_size
        for barrier in ctx.world.session.barriers:
            for cell in barrier.cells:
                if not cell.alive:
                    continue
                x, y, w, h = projection.rect(cell.position, cell_size)
                color = shade(BARRIER_COLOR, 0.4 + 0.6 * cell.health_ratio)
                backend.render.draw_rect(x, y, w, h, color=color)


class DrawProjectiles(Drawable):
    """
    Drawable Projectiles
    """

    def draw(self, backend: Backend, ctx: VoxelInvadersTickContext):
        projection = TopDownProjection(ctx.world.viewport)
        for p in ctx.world.session.projectiles:
            if not p.alive:
                continue
            color = PLAYER_SHOT_COLOR if p.from_player else SWARM_SHOT_COLOR
            x, y, w, h = projection.rect(p.position, p.radius * 4)
            backend.render.draw_rect(x, y, w, h, color=color)


class DrawPlayer(Drawable):
    """
    Drawable Player
    """

    def draw(self, backend: Backend, ctx: VoxelInvadersTickContext):
        session = ctx.world.session
        player = session.player
        if not player.visible or session.state is GameState.MENU:
            return
        projection = TopDownProjection(ctx.world.viewport)
        size = session.config.player.hit_radius * 2
        x, y, w, h = projection.rect(player.position, size)
        backend.render.draw_rect(x, y, w, h, color=PLAYER_COLOR)

        # aim line
        tip = player.position + player.aim_direction() * 20.0
        tx, ty = projection.to_screen(tip)
        cx, cy = projection.to_screen(player.position)
        backend.render.draw_rect(
            int(min(cx, tx)),
            int(min(cy, ty)),
            max(1, int(abs(tx - cx))),
            max(1, int(abs(ty - cy))),
            color=PLAYER_SHOT_COLOR,
        )


@dataclass
class VoxelInvadersRenderSystem(BaseRenderSystem):
    """
    Render the Voxel Invaders world.
    """

    name: str = "voxel_invaders_render"
    order: int = 100

    def step(self, ctx: VoxelInvadersTickContext):
        """Render the Voxel Invaders world."""

        ctx.draw_ops = [
            DrawCall(DrawBarriers(), ctx=ctx),
            DrawCall(DrawAliens(), ctx=ctx),
            DrawCall(DrawProjectiles(), ctx=ctx),
            DrawCall(DrawPlayer(), ctx=ctx),
        ]
        super().step(ctx)


@register_scene("voxel_invaders")
class VoxelInvadersScene(SimScene[VoxelInvadersTickContext]):
    """
    Top-down view of the voxel invaders simulation.
    Space starts a game from the menu or the game over screen.
    """

    world: VoxelInvadersWorld
    tick_context_type = VoxelInvadersTickContext

    def on_enter(self):
        # Justification: window typer is protocol, mypy can't infer correctly
        # pylint: disable=assignment-from-no-return
        vw, vh = self.context.services.window.get_virtual_size()
        # pylint: enable=assignment-from-no-return

        self.world = VoxelInvadersWorld(
            viewport=(vw, vh),
            session=GameSession(),
        )
        self.systems.extend(
            [
                VoxelInvadersInputSystem(),
                SessionSystem(),
                VoxelInvadersRenderSystem(),
            ]
        )
        logger.info("Voxel Invaders scene ready, press space to start")

    def _get_tick_context(self, input_frame, dt) -> VoxelInvadersTickContext:
        return VoxelInvadersTickContext(
            input_frame=input_frame,
            dt=dt,
            world=self.world,
            commands=self.context.command_queue,
        )
