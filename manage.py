"""
This is the main file to run the game.
It imports the run function from the voxel_invaders app and runs it.
"""

from voxel_invaders.app import run

if __name__ == "__main__":
    run()
