"""
Constants for the game.
"""

from __future__ import annotations

FPS = 60
WINDOW_SIZE = (800, 600)

# Largest simulation step after a stall (window dragged, tab hidden...)
MAX_FRAME_DT = 0.1

# World area shown by the top-down view: x across, z down the screen
VIEW_X_RANGE = (-150.0, 150.0)
VIEW_Z_RANGE = (-600.0, 0.0)
