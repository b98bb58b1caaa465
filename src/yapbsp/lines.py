"""Oriented lines in two and three dimensions.

Two dimensional lines live in the subspace of a :class:`yapbsp.plane.Plane`
and bound convex areas.  A 2D line is oriented: its *minus* side is to the
left of its direction, so the interior of a counter-clockwise polygon lies
on the minus side of every edge line.  Line subsets are 1D intervals of
abscissa values on a line; either end may be infinite.

Three dimensional lines and segments are the query objects of the
linecast engine.
"""

from __future__ import annotations

import math
from typing import Optional

from yapbsp.partition import HyperplaneLocation, Split, location_from_sign
from yapbsp.precision import PrecisionContext
from yapbsp.vector import (Vec2, Vec3, add, cross2, dot, dot2, norm, normalize,
                           scale, sub, sub2)


class Line2D:
    """Oriented line in the plane, with unit direction."""

    __slots__ = ('origin', 'direction', 'precision')

    def __init__(self, origin: Vec2, direction: Vec2, precision: PrecisionContext):
        length = math.hypot(direction[0], direction[1])
        if precision.eq_zero(length):
            raise ValueError(f'line direction has zero length: {direction}')
        self.origin = (float(origin[0]), float(origin[1]))
        self.direction = (direction[0] / length, direction[1] / length)
        self.precision = precision

    @classmethod
    def from_points(cls, a: Vec2, b: Vec2, precision: PrecisionContext) -> 'Line2D':
        return cls(a, sub2(b, a), precision)

    @property
    def normal(self) -> Vec2:
        # points to the plus (right hand) side
        return (self.direction[1], -self.direction[0])

    def offset(self, p: Vec2) -> float:
        return dot2(sub2(p, self.origin), self.normal)

    def classify(self, p: Vec2) -> HyperplaneLocation:
        return location_from_sign(self.precision.sign(self.offset(p)))

    def abscissa(self, p: Vec2) -> float:
        return dot2(sub2(p, self.origin), self.direction)

    def point_at(self, t: float) -> Vec2:
        return (self.origin[0] + t * self.direction[0],
                self.origin[1] + t * self.direction[1])

    def reverse(self) -> 'Line2D':
        return Line2D(self.origin, (-self.direction[0], -self.direction[1]), self.precision)

    def reflect_xy(self) -> 'Line2D':
        """Mirror the line across ``y = x``, keeping its minus side inside.

        Abscissa ``t`` on this line maps to ``-t`` on the result.
        """

        return Line2D((self.origin[1], self.origin[0]),
                      (-self.direction[1], -self.direction[0]),
                      self.precision)

    def is_parallel(self, other: 'Line2D') -> bool:
        return self.precision.eq_zero(cross2(self.direction, other.direction))

    def similar_orientation(self, other: 'Line2D') -> bool:
        return dot2(self.direction, other.direction) > 0.0

    def intersection(self, other: 'Line2D') -> Optional[Vec2]:
        """Return the crossing point of two lines, ``None`` if parallel."""

        denom = cross2(self.direction, other.direction)
        if self.precision.eq_zero(denom):
            return None
        t = cross2(sub2(other.origin, self.origin), other.direction) / denom
        return self.point_at(t)

    def span(self) -> 'LineSubset2D':
        return LineSubset2D(self, -math.inf, math.inf)

    def __repr__(self):
        return f'Line2D(origin={self.origin}, direction={self.direction})'


class LineSubset2D:
    """Interval ``[start, end]`` of abscissas on a :class:`Line2D`."""

    __slots__ = ('line', 'start', 'end')

    def __init__(self, line: Line2D, start: float, end: float):
        if start > end:
            raise ValueError(f'invalid interval [{start}, {end}]')
        self.line = line
        self.start = float(start)
        self.end = float(end)

    @property
    def precision(self) -> PrecisionContext:
        return self.line.precision

    def is_finite(self) -> bool:
        return math.isfinite(self.start) and math.isfinite(self.end)

    def is_full(self) -> bool:
        return self.start == -math.inf and self.end == math.inf

    @property
    def size(self) -> float:
        return self.end - self.start

    @property
    def start_point(self) -> Optional[Vec2]:
        return self.line.point_at(self.start) if math.isfinite(self.start) else None

    @property
    def end_point(self) -> Optional[Vec2]:
        return self.line.point_at(self.end) if math.isfinite(self.end) else None

    def contains(self, p: Vec2) -> bool:
        prec = self.precision
        if not prec.eq_zero(self.line.offset(p)):
            return False
        t = self.line.abscissa(p)
        return prec.lte(self.start, t) and prec.lte(t, self.end)

    def closest(self, p: Vec2) -> Vec2:
        t = min(max(self.line.abscissa(p), self.start), self.end)
        return self.line.point_at(t)

    def reflect_xy(self) -> 'LineSubset2D':
        return LineSubset2D(self.line.reflect_xy(), -self.end, -self.start)

    def split(self, splitter: Line2D) -> Split['LineSubset2D']:
        """Split by ``splitter``; see :class:`yapbsp.partition.Split`."""

        prec = splitter.precision
        rate = dot2(self.line.direction, splitter.normal)
        base = splitter.offset(self.line.origin)
        parallel = prec.eq_zero(rate)

        def loc(t):
            if math.isinf(t):
                if parallel:
                    return prec.sign(base)
                return (1 if rate > 0 else -1) * (1 if t > 0 else -1)
            return prec.sign(base + rate * t)

        start_loc = loc(self.start)
        end_loc = loc(self.end)

        if start_loc >= 0 and end_loc >= 0:
            if start_loc == 0 and end_loc == 0:
                return Split(None, None)
            return Split(None, self)
        if start_loc <= 0 and end_loc <= 0:
            return Split(self, None)

        t0 = -base / rate
        low = LineSubset2D(self.line, self.start, t0)
        high = LineSubset2D(self.line, t0, self.end)
        if rate > 0:
            return Split(low, high)
        return Split(high, low)

    def __repr__(self):
        return f'LineSubset2D({self.line!r}, start={self.start}, end={self.end})'


class Line3D:
    """Oriented 3D line.

    The stored origin is the point of the line closest to the coordinate
    origin, so abscissas of equal lines agree.
    """

    __slots__ = ('origin', 'direction', 'precision')

    def __init__(self, point: Vec3, direction: Vec3, precision: PrecisionContext):
        if precision.eq_zero(norm(direction)):
            raise ValueError(f'line direction has zero length: {direction}')
        d = normalize(direction)
        p = (float(point[0]), float(point[1]), float(point[2]))
        self.direction = d
        self.origin = sub(p, scale(d, dot(p, d)))
        self.precision = precision

    @classmethod
    def from_points(cls, a: Vec3, b: Vec3, precision: PrecisionContext) -> 'Line3D':
        return cls(a, sub(b, a), precision)

    @classmethod
    def from_point_and_direction(cls, p: Vec3, direction: Vec3,
                                 precision: PrecisionContext) -> 'Line3D':
        return cls(p, direction, precision)

    def abscissa(self, p: Vec3) -> float:
        return dot(sub(p, self.origin), self.direction)

    def point_at(self, t: float) -> Vec3:
        return add(self.origin, scale(self.direction, t))

    def closest(self, p: Vec3) -> Vec3:
        return self.point_at(self.abscissa(p))

    def distance(self, p: Vec3) -> float:
        return norm(sub(p, self.closest(p)))

    def contains(self, p: Vec3) -> bool:
        return self.precision.eq_zero(self.distance(p))

    def reverse(self) -> 'Line3D':
        return Line3D(self.origin, scale(self.direction, -1.0), self.precision)

    def eq(self, other: 'Line3D') -> bool:
        prec = self.precision
        return prec.vec_eq(self.origin, other.origin) and prec.vec_eq(self.direction, other.direction)

    def span(self) -> 'Segment3D':
        return Segment3D(self, -math.inf, math.inf)

    def segment(self, start: float, end: float) -> 'Segment3D':
        return Segment3D(self, min(start, end), max(start, end))

    def ray_from(self, p: Vec3) -> 'Segment3D':
        return Segment3D(self, self.abscissa(p), math.inf)

    def reverse_ray_to(self, p: Vec3) -> 'Segment3D':
        return Segment3D(self, -math.inf, self.abscissa(p))

    def __repr__(self):
        return f'Line3D(origin={self.origin}, direction={self.direction})'


class Segment3D:
    """Portion of a :class:`Line3D` between two abscissas.

    Infinite bounds are allowed: ``(-inf, inf)`` is the whole line and a
    single infinite bound makes a ray.
    """

    __slots__ = ('line', 'start', 'end')

    def __init__(self, line: Line3D, start: float, end: float):
        if start > end:
            raise ValueError(f'invalid segment interval [{start}, {end}]')
        self.line = line
        self.start = float(start)
        self.end = float(end)

    @classmethod
    def from_points(cls, a: Vec3, b: Vec3, precision: PrecisionContext) -> 'Segment3D':
        line = Line3D.from_points(a, b, precision)
        return cls(line, line.abscissa(a), line.abscissa(b))

    @property
    def precision(self) -> PrecisionContext:
        return self.line.precision

    @property
    def start_point(self) -> Optional[Vec3]:
        return self.line.point_at(self.start) if math.isfinite(self.start) else None

    @property
    def end_point(self) -> Optional[Vec3]:
        return self.line.point_at(self.end) if math.isfinite(self.end) else None

    def is_finite(self) -> bool:
        return math.isfinite(self.start) and math.isfinite(self.end)

    @property
    def size(self) -> float:
        return self.end - self.start

    def contains_abscissa(self, t: float) -> bool:
        prec = self.precision
        return prec.lte(self.start, t) and prec.lte(t, self.end)

    def contains(self, p: Vec3) -> bool:
        return self.line.contains(p) and self.contains_abscissa(self.line.abscissa(p))

    def __repr__(self):
        return f'Segment3D({self.line!r}, start={self.start}, end={self.end})'


__all__ = ['Line2D', 'LineSubset2D', 'Line3D', 'Segment3D']
