"""
View binding protocol.

The simulation never renders. Anything that shows an alien, a barrier cell
or a projectile plugs in through this interface.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional, Protocol, TypeVar

if TYPE_CHECKING:
    from voxel_invaders.geometry import Vec3

T = TypeVar("T")


class ViewBinding(Protocol):
    """
    Visual representation of one simulated object.
    """

    def set_transform(self, position: Vec3, rotation: Vec3) -> None:
        """Place the visual; rotation is (pitch, yaw, roll) in radians."""

    def set_visible(self, visible: bool) -> None:
        """Show or hide the visual."""

    def release(self) -> None:
        """Free whatever the visual holds; it will not be used again."""


ViewFactory = Callable[[T], Optional[ViewBinding]]
