"""
Game session.

Owns the formation, the barriers, the projectiles in flight and the player
turret. Runs the per-frame flow for the current game state and applies the
collision outcome: score, health, lives and wave progression.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum

from mini_arcade_core.utils import logger

from voxel_invaders.barrier import Barrier, BarrierCell, build_barriers
from voxel_invaders.collision import CollisionOutcome, CollisionResolver
from voxel_invaders.config import DEFAULT_CONFIG, GameConfig
from voxel_invaders.entities import Alien, Projectile
from voxel_invaders.events import (
    AlienKilled,
    BarrierHit,
    DangerLineReached,
    GameOver,
    LifeLost,
    PlayerHit,
    SessionEvent,
    ShotFired,
    WaveCleared,
    WaveStarted,
)
from voxel_invaders.formation import Formation, RandomSource
from voxel_invaders.player import PlayerTurret
from voxel_invaders.view import ViewFactory


class GameState(str, Enum):
    MENU = "menu"
    WAVE_INTRO = "wave_intro"
    PLAYING = "playing"
    WAVE_COMPLETE_DELAY = "wave_complete_delay"
    WAVE_COMPLETE = "wave_complete"
    LIFE_LOST_DELAY = "life_lost_delay"
    LIFE_LOST = "life_lost"
    INVASION_LANDING = "invasion_landing"
    GAME_OVER = "game_over"


@dataclass
class SessionIntent:
    """
    What the player asks for this frame.
    """

    move_x: float = 0.0
    aim_x: float = 0.0
    aim_y: float = 0.0
    fire: bool = False
    start: bool = False


class GameSession:
    """
    Caller-side game loop.

    :param config: Game configuration
    :type config: GameConfig

    :param rng: Random source shared with the formation
    :type rng: RandomSource
    """

    def __init__(
        self,
        config: GameConfig = DEFAULT_CONFIG,
        rng: RandomSource | None = None,
        alien_views: ViewFactory[Alien] | None = None,
        cell_views: ViewFactory[BarrierCell] | None = None,
        projectile_views: ViewFactory[Projectile] | None = None,
    ):
        self.config = config
        self.rng: RandomSource = rng if rng is not None else random.Random()
        self.cell_views = cell_views
        self.projectile_views = projectile_views

        self.state = GameState.MENU
        self.state_timer = 0.0
        self.score = 0
        self.lives = config.gameplay.lives
        self.health = config.gameplay.hits_per_life
        self.wave = 1
        self.game_time = 0.0  # advances while PLAYING only
        self.clock = 0.0  # advances in every state, drives fire cooldown

        self.formation = Formation(config, 1, self.rng, alien_views)
        self.barriers: list[Barrier] = []
        self.projectiles: list[Projectile] = []
        self.player = PlayerTurret(config)
        self.resolver = CollisionResolver(config)
        self.events: list[SessionEvent] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """
        Start a new game from the menu or the game over screen.

        :return: False (and nothing changes) in any other state.
        """
        if self.state not in (GameState.MENU, GameState.GAME_OVER):
            return False

        gameplay = self.config.gameplay
        self.score = 0
        self.lives = gameplay.lives
        self.health = gameplay.hits_per_life
        self.game_time = 0.0
        self.player.reset()
        logger.info("New game started")
        self._begin_wave(1)
        return True

    def _begin_wave(self, wave: int):
        self.wave = wave
        self._clear_projectiles()
        self.formation.reset(wave)
        self._rebuild_barriers()
        self.events.append(WaveStarted(wave))
        if self.formation.start_intro():
            self._set_state(GameState.WAVE_INTRO)
        else:
            self._set_state(GameState.PLAYING)

    def _rebuild_barriers(self):
        for barrier in self.barriers:
            barrier.release()
        self.barriers = build_barriers(
            self.formation.difficulty.barrier_health,
            self.config,
            self.cell_views,
        )

    def _set_state(self, state: GameState):
        logger.info(f"Session state: {self.state.value} -> {state.value}")
        self.state = state
        self.state_timer = 0.0

    # ------------------------------------------------------------------
    # Frame update
    # ------------------------------------------------------------------

    def update(
        self, dt: float, intent: SessionIntent | None = None
    ) -> list[SessionEvent]:
        """
        Advance the session by one frame.

        :param dt: Frame time in seconds; the caller clamps it
        :type dt: float

        :param intent: Player input for this frame
        :type intent: SessionIntent

        :return: Events raised during this frame.
        """
        intent = intent or SessionIntent()
        self.events = []
        handler = {
            GameState.MENU: self._update_idle,
            GameState.GAME_OVER: self._update_idle,
            GameState.WAVE_INTRO: self._update_intro,
            GameState.PLAYING: self._update_playing,
            GameState.WAVE_COMPLETE_DELAY: self._update_wave_complete_delay,
            GameState.WAVE_COMPLETE: self._update_wave_complete,
            GameState.LIFE_LOST_DELAY: self._update_life_lost_delay,
            GameState.LIFE_LOST: self._update_life_lost,
            GameState.INVASION_LANDING: self._update_landing,
        }[self.state]

        if self.state not in (GameState.MENU, GameState.GAME_OVER):
            self.clock += dt
            self.state_timer += dt
        handler(dt, intent)
        return self.events

    def _update_idle(self, dt: float, intent: SessionIntent):
        if intent.start:
            self.start()

    def _update_intro(self, dt: float, intent: SessionIntent):
        self._update_player(dt, intent)
        self._advance_projectiles(dt)
        self._apply(self._resolve())
        if self.state is not GameState.WAVE_INTRO:
            return
        if self.formation.advance_intro(dt):
            self._set_state(GameState.PLAYING)

    def _update_playing(self, dt: float, intent: SessionIntent):
        self.game_time += dt
        self._update_player(dt, intent)

        self.formation.advance(dt, self.player.x, self.game_time)
        self._launch(self.formation.try_shoot())
        self._launch(self.formation.strafe_shots(self.game_time))

        self._advance_projectiles(dt)
        self._apply(self._resolve())
        if self.state is not GameState.PLAYING:
            return

        if self.formation.alive_count == 0:
            self.events.append(WaveCleared(self.wave, self.score))
            self._set_state(GameState.WAVE_COMPLETE_DELAY)
        elif self.formation.has_reached_danger_line():
            logger.info(f"Swarm reached the danger line on wave {self.wave}")
            self.events.append(DangerLineReached(self.wave))
            self._clear_projectiles()
            self.formation.start_landing()
            self._set_state(GameState.INVASION_LANDING)

    def _update_wave_complete_delay(self, dt: float, intent: SessionIntent):
        self._update_player(dt, intent)
        self._advance_projectiles(dt)
        if self.state_timer >= self.config.gameplay.wave_complete_delay:
            self._clear_projectiles()
            self._set_state(GameState.WAVE_COMPLETE)

    def _update_wave_complete(self, dt: float, intent: SessionIntent):
        if self.state_timer >= self.config.gameplay.wave_complete_pause:
            self._begin_wave(self.wave + 1)

    def _update_life_lost_delay(self, dt: float, intent: SessionIntent):
        self._advance_projectiles(dt)
        if self.state_timer >= self.config.gameplay.life_lost_delay:
            self._clear_projectiles()
            self._set_state(GameState.LIFE_LOST)

    def _update_life_lost(self, dt: float, intent: SessionIntent):
        if self.state_timer >= self.config.gameplay.life_lost_pause:
            self.health = self.config.gameplay.hits_per_life
            self.player.reset()
            self._set_state(GameState.PLAYING)

    def _update_landing(self, dt: float, intent: SessionIntent):
        if self.formation.advance_landing(dt):
            self._game_over(invaded=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _update_player(self, dt: float, intent: SessionIntent):
        self.player.update(dt, intent.move_x, intent.aim_x, intent.aim_y)
        if intent.fire:
            shot = self.player.fire(self.clock)
            if shot is not None:
                self._launch([shot])

    def _launch(self, shots: list[Projectile]):
        for shot in shots:
            if self.projectile_views is not None:
                shot.view = self.projectile_views(shot)
            self.projectiles.append(shot)
            self.events.append(ShotFired(shot.owner, shot.position))

    def _advance_projectiles(self, dt: float):
        kept: list[Projectile] = []
        for projectile in self.projectiles:
            if not projectile.alive:
                continue
            projectile.update(dt)
            if projectile.is_out_of_bounds(self.config):
                projectile.destroy()
                continue
            kept.append(projectile)
        self.projectiles = kept

    def _clear_projectiles(self):
        for projectile in self.projectiles:
            projectile.destroy()
        self.projectiles = []

    def _resolve(self) -> CollisionOutcome:
        return self.resolver.resolve(
            self.projectiles,
            self.formation,
            self.barriers,
            self.player.position,
        )

    def _apply(self, outcome: CollisionOutcome):
        for projectile in outcome.spent:
            projectile.destroy()

        for kill in outcome.kills:
            self.score += kill.points
            self.events.append(
                AlienKilled(
                    kill.alien.kind, kill.points, kill.position, self.score
                )
            )
            self._drop_shots_from(kill.alien)
        if outcome.kills:
            self.formation.refresh_brightness()

        for hit in outcome.barrier_hits:
            self.events.append(
                BarrierHit(hit.position, hit.is_player_shot, hit.destroyed)
            )
        if outcome.barrier_hits:
            self._retire_barriers()

        self.projectiles = [p for p in self.projectiles if p.alive]

        if outcome.player_hit:
            self._player_hit()

    def _drop_shots_from(self, alien: Alien):
        index = self.formation.index_of(alien)
        for projectile in self.projectiles:
            if projectile.alive and projectile.source == index:
                projectile.destroy()

    def _retire_barriers(self):
        kept: list[Barrier] = []
        for barrier in self.barriers:
            if barrier.has_alive_cells():
                kept.append(barrier)
            else:
                logger.debug(f"Barrier at x={barrier.center.x:.0f} destroyed")
                barrier.release()
        self.barriers = kept

    def _player_hit(self):
        self.health = max(0, self.health - 1)
        self.events.append(PlayerHit(self.health))
        if self.health > 0:
            return

        self.lives -= 1
        self.events.append(LifeLost(self.lives))
        logger.info(f"Life lost, {self.lives} left")
        if self.lives <= 0:
            self._game_over(invaded=False)
            return
        self.player.visible = False
        self._set_state(GameState.LIFE_LOST_DELAY)

    def _game_over(self, invaded: bool):
        self.events.append(GameOver(self.score, self.wave, invaded))
        self._clear_projectiles()
        self.player.visible = False
        self._set_state(GameState.GAME_OVER)
