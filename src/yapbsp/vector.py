"""Small tuple-based vector helpers shared by the partitioning code."""

from __future__ import annotations

import math
from typing import Sequence, Tuple

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]

PLUS_X: Vec3 = (1.0, 0.0, 0.0)
PLUS_Y: Vec3 = (0.0, 1.0, 0.0)
PLUS_Z: Vec3 = (0.0, 0.0, 1.0)
MINUS_Z: Vec3 = (0.0, 0.0, -1.0)


def to_vec3(point_like: Sequence[float]) -> Vec3:
    """Return the XYZ components of a point/vector as a float tuple."""

    if len(point_like) < 3:
        raise ValueError("value must have at least three components")
    return float(point_like[0]), float(point_like[1]), float(point_like[2])


def add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale(a: Vec3, c: float) -> Vec3:
    return (a[0] * c, a[1] * c, a[2] * c)


def dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def norm(a: Vec3) -> float:
    return math.sqrt(dot(a, a))


def dist(a: Vec3, b: Vec3) -> float:
    return norm(sub(a, b))


def normalize(a: Vec3) -> Vec3:
    """Return ``a`` scaled to unit length.

    Raises ``ValueError`` for zero-length or non-finite input.
    """

    n = norm(a)
    if n == 0.0 or not math.isfinite(n):
        raise ValueError(f"cannot normalize vector {a}")
    return (a[0] / n, a[1] / n, a[2] / n)


def neg(a: Vec3) -> Vec3:
    return (-a[0], -a[1], -a[2])


def orthogonal(a: Vec3) -> Vec3:
    """Return a unit vector orthogonal to ``a``."""

    # pick the axis least aligned with a to keep the cross product well conditioned
    ax, ay, az = abs(a[0]), abs(a[1]), abs(a[2])
    if ax <= ay and ax <= az:
        other = PLUS_X
    elif ay <= az:
        other = PLUS_Y
    else:
        other = PLUS_Z
    return normalize(cross(a, other))


def coordinate_compare(a: Sequence[float], b: Sequence[float]) -> int:
    """Lexicographic comparison of coordinates, ``-1``, ``0`` or ``1``."""

    for x, y in zip(a, b):
        if x < y:
            return -1
        if x > y:
            return 1
    return 0


# 2D helpers; points in a plane subspace are plain (x, y) tuples

def sub2(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] - b[0], a[1] - b[1])


def dot2(a: Vec2, b: Vec2) -> float:
    return a[0] * b[0] + a[1] * b[1]


def cross2(a: Vec2, b: Vec2) -> float:
    return a[0] * b[1] - a[1] * b[0]


def signed_area2(loop: Sequence[Vec2]) -> float:
    """Shoelace area of a closed 2D loop; positive when counter-clockwise."""

    total = 0.0
    n = len(loop)
    for i in range(n):
        x0, y0 = loop[i]
        x1, y1 = loop[(i + 1) % n]
        total += x0 * y1 - x1 * y0
    return total / 2.0


__all__ = [
    'Vec2', 'Vec3',
    'PLUS_X', 'PLUS_Y', 'PLUS_Z', 'MINUS_Z',
    'to_vec3', 'add', 'sub', 'scale', 'dot', 'cross', 'norm', 'dist',
    'normalize', 'neg', 'orthogonal', 'coordinate_compare',
    'sub2', 'dot2', 'cross2', 'signed_area2',
]
