"""
3D vector and box helpers used by the simulation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vec3:
    """
    Immutable 3D vector.

    World axes: x across the field, y up, z toward the player (the swarm
    starts at negative z and advances toward zero).
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vec3:
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> Vec3:
        return self * scalar

    def length_sq(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def length(self) -> float:
        return math.sqrt(self.length_sq())

    def distance_sq_to(self, other: Vec3) -> float:
        return (self - other).length_sq()

    def distance_to(self, other: Vec3) -> float:
        return math.sqrt(self.distance_sq_to(other))

    def horizontal_distance_sq_to(self, other: Vec3) -> float:
        """Squared distance on the ground plane (x/z), ignoring height."""
        dx = self.x - other.x
        dz = self.z - other.z
        return dx * dx + dz * dz

    def normalized(self) -> Vec3:
        length = self.length()
        if length == 0.0:
            return self
        return self * (1.0 / length)

    def lerp(self, other: Vec3, t: float) -> Vec3:
        return Vec3(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t,
            self.z + (other.z - self.z) * t,
        )


@dataclass(frozen=True)
class Box3:
    """Axis-aligned box, used as a coarse bounding volume."""

    minimum: Vec3
    maximum: Vec3

    @classmethod
    def around(cls, points: list[Vec3], padding: float = 0.0) -> Box3:
        if not points:
            return cls(Vec3(), Vec3())
        return cls(
            Vec3(
                min(p.x for p in points) - padding,
                min(p.y for p in points) - padding,
                min(p.z for p in points) - padding,
            ),
            Vec3(
                max(p.x for p in points) + padding,
                max(p.y for p in points) + padding,
                max(p.z for p in points) + padding,
            ),
        )

    def contains_point(self, point: Vec3) -> bool:
        return (
            self.minimum.x <= point.x <= self.maximum.x
            and self.minimum.y <= point.y <= self.maximum.y
            and self.minimum.z <= point.z <= self.maximum.z
        )
