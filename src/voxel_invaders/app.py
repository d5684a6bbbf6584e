"""
Main application for Voxel Invaders using mini-arcade-core and the native
backend.
"""

from __future__ import annotations

from mini_arcade_core import (  # pyright: ignore[reportMissingImports]
    GameConfig,
    SceneRegistry,
    run_game,
)
from mini_arcade_core.utils import logger

# Justification: in editable installs, this module is provided by the package.
# pylint: disable=no-name-in-module
from mini_arcade_native_backend import (  # pyright: ignore[reportMissingImports]
    NativeBackend,
    NativeBackendSettings,
)

from voxel_invaders.constants import FPS, WINDOW_SIZE

# pylint: enable=no-name-in-module


def build_settings_data() -> dict:
    """
    Backend settings as a dict, fed to ``NativeBackendSettings.from_dict``.
    """
    w_width, w_height = WINDOW_SIZE
    return {
        "window": {
            "width": w_width,
            "height": w_height,
            "title": "Voxel Invaders (mini-arcade-core)",
            "high_dpi": False,
            "resizable": True,
        },
        "renderer": {"background_color": (0, 0, 0)},
        "audio": {
            "enable": False,
        },
    }


def run():
    """
    Main entry point for Voxel Invaders.

    - Auto-discovers scenes from the `voxel_invaders.scenes` package.
    - Sets up the game window with specified dimensions and background color.
    - Runs the game with the initial scene set to "voxel_invaders".
    """
    scene_registry = SceneRegistry(_factories={}).discover(
        "voxel_invaders.scenes", "mini_arcade_core.scenes"
    )

    backend_settings = NativeBackendSettings.from_dict(build_settings_data())
    backend = NativeBackend(settings=backend_settings)

    game_config = GameConfig(
        initial_scene="voxel_invaders",
        fps=FPS,
        backend=backend,
    )
    logger.info("Starting Voxel Invaders...")
    logger.info(backend_settings.to_dict())
    run_game(game_config=game_config, scene_registry=scene_registry)


if __name__ == "__main__":
    run()
