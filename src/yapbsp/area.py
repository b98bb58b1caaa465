"""Convex areas in a plane subspace.

A :class:`ConvexArea` is the intersection of the minus (left) half-planes
of its boundary lines.  Each boundary is a :class:`LineSubset2D`, the
part of the line actually touching the area.  Boundaries may be infinite,
so half-planes, strips and wedges are represented exactly; an area with
no boundaries is the whole plane.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from yapbsp.lines import Line2D, LineSubset2D
from yapbsp.partition import RegionLocation, Split, SplitLocation
from yapbsp.precision import PrecisionContext
from yapbsp.vector import Vec2, cross2, signed_area2, sub2


class ConvexArea:
    """Convex region of the plane bounded by oriented line subsets."""

    __slots__ = ('boundaries',)

    def __init__(self, boundaries: Sequence[LineSubset2D] = ()):
        self.boundaries: List[LineSubset2D] = list(boundaries)

    @classmethod
    def full(cls) -> 'ConvexArea':
        return cls([])

    @classmethod
    def from_vertices(cls, vertices: Sequence[Vec2], precision: PrecisionContext) -> 'ConvexArea':
        """Build a bounded area from the vertices of a convex polygon.

        Either winding is accepted.  Repeated points are dropped; fewer
        than three distinct vertices or a zero area raise ``ValueError``.
        """

        loop = dedup_loop(vertices, precision)
        if len(loop) < 3:
            raise ValueError('convex area needs at least three distinct vertices')
        area = signed_area2(loop)
        if precision.eq_zero(area):
            raise ValueError('convex area vertices are collinear')
        if area < 0:
            loop.reverse()

        boundaries = []
        count = len(loop)
        for i in range(count):
            a = loop[i]
            b = loop[(i + 1) % count]
            line = Line2D.from_points(a, b, precision)
            boundaries.append(LineSubset2D(line, 0.0, line.abscissa(b)))
        return cls(boundaries)

    def is_full(self) -> bool:
        return not self.boundaries

    def is_finite(self) -> bool:
        return bool(self.boundaries) and all(b.is_finite() for b in self.boundaries)

    def vertices(self) -> List[Vec2]:
        """Return the distinct finite corner points, counter-clockwise."""

        points: List[Vec2] = []
        for b in self.boundaries:
            for p in (b.start_point, b.end_point):
                if p is None:
                    continue
                prec = b.precision
                if not any(prec.vec_eq(p, q) for q in points):
                    points.append(p)
        if len(points) < 3:
            return points
        cx = sum(p[0] for p in points) / len(points)
        cy = sum(p[1] for p in points) / len(points)
        points.sort(key=lambda p: math.atan2(p[1] - cy, p[0] - cx))
        return points

    @property
    def size(self) -> float:
        if not self.is_finite():
            return math.inf
        total = 0.0
        for b in self.boundaries:
            total += cross2(b.start_point, b.end_point)
        return total / 2.0

    @property
    def centroid(self) -> Optional[Vec2]:
        if not self.is_finite():
            return None
        area2 = 0.0
        sx = sy = 0.0
        for b in self.boundaries:
            (x0, y0), (x1, y1) = b.start_point, b.end_point
            c = x0 * y1 - x1 * y0
            area2 += c
            sx += (x0 + x1) * c
            sy += (y0 + y1) * c
        if area2 == 0.0:
            return None
        return (sx / (3.0 * area2), sy / (3.0 * area2))

    def classify(self, p: Vec2) -> RegionLocation:
        on_boundary = False
        for b in self.boundaries:
            offset = b.line.offset(p)
            if b.precision.gt(offset, 0.0):
                return RegionLocation.OUTSIDE
            if b.precision.eq_zero(offset):
                on_boundary = True
        return RegionLocation.BOUNDARY if on_boundary else RegionLocation.INSIDE

    def contains(self, p: Vec2) -> bool:
        return self.classify(p) != RegionLocation.OUTSIDE

    def closest(self, p: Vec2) -> Vec2:
        """Point of the area nearest to ``p``; ``p`` itself when contained."""

        if self.contains(p):
            return (float(p[0]), float(p[1]))
        best = None
        best_d2 = math.inf
        for b in self.boundaries:
            q = b.closest(p)
            d = sub2(q, p)
            d2 = d[0] * d[0] + d[1] * d[1]
            if d2 < best_d2:
                best, best_d2 = q, d2
        return best

    def reflect_xy(self) -> 'ConvexArea':
        """Return the area with x and y coordinates swapped."""
        return ConvexArea([b.reflect_xy() for b in self.boundaries])

    def trim(self, line: Line2D) -> Optional[LineSubset2D]:
        """Return the part of ``line`` inside this area, or ``None``."""

        trimmed: Optional[LineSubset2D] = line.span()
        for b in self.boundaries:
            trimmed = trimmed.split(b.line).minus
            if trimmed is None:
                return None
        if line.precision.eq_zero(trimmed.size):
            return None
        return trimmed

    def split(self, splitter: Line2D) -> Split['ConvexArea']:
        trimmed = self.trim(splitter)
        if trimmed is None:
            return self._split_one_side(splitter)

        minus_bounds = []
        plus_bounds = []
        for b in self.boundaries:
            part = b.split(splitter)
            if part.minus is not None:
                minus_bounds.append(part.minus)
            if part.plus is not None:
                plus_bounds.append(part.plus)
        minus_bounds.append(trimmed)
        plus_bounds.append(LineSubset2D(trimmed.line.reverse(), -trimmed.end, -trimmed.start))
        return Split(ConvexArea(minus_bounds), ConvexArea(plus_bounds))

    def _split_one_side(self, splitter: Line2D) -> Split['ConvexArea']:
        for b in self.boundaries:
            loc = b.split(splitter).location
            if loc == SplitLocation.MINUS:
                return Split(self, None)
            if loc == SplitLocation.PLUS:
                return Split(None, self)
            if loc == SplitLocation.NEITHER:
                if b.line.similar_orientation(splitter):
                    return Split(self, None)
                return Split(None, self)

        # every boundary crosses the splitter yet nothing of it lies inside;
        # only reachable through round-off, so fall back on the corners
        points = self.vertices()
        if points:
            total = sum(splitter.offset(p) for p in points)
            if total > 0.0:
                return Split(None, self)
        return Split(self, None)

    def __repr__(self):
        return f'ConvexArea({self.boundaries!r})'


def dedup_loop(vertices: Sequence[Vec2], precision: PrecisionContext) -> List[Vec2]:
    """Drop consecutive repeated points from a closed 2D loop."""

    loop: List[Vec2] = []
    for v in vertices:
        p = (float(v[0]), float(v[1]))
        if loop and precision.vec_eq(loop[-1], p):
            continue
        loop.append(p)
    while len(loop) > 1 and precision.vec_eq(loop[0], loop[-1]):
        loop.pop()
    return loop


def is_convex_loop(loop: Sequence[Vec2], precision: PrecisionContext) -> bool:
    """True if a counter-clockwise loop has no reflex corners."""

    count = len(loop)
    if count < 3:
        return False
    for i in range(count):
        a = loop[i - 1]
        b = loop[i]
        c = loop[(i + 1) % count]
        if precision.lt(cross2(sub2(b, a), sub2(c, b)), 0.0):
            return False
    return True


__all__ = ['ConvexArea', 'dedup_loop', 'is_convex_loop']
