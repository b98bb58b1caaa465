"""Oriented planes and the planar regions that make up BSP boundaries.

A :class:`Plane` stores an orthonormal frame ``(u, v, w)`` with ``w`` the
unit normal and ``u x v == w``, plus an ``origin_offset`` so that the
signed distance of a point ``p`` is ``w . p + origin_offset``.  Points on
the side ``w`` points to are ``PLUS``.

:class:`PlaneConvexSubset` is a convex area of a plane expressed in the
plane's ``(u, v)`` subspace; :class:`PlaneSubset` is a plane region made
of several such convex pieces.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Union

from yapbsp.area import ConvexArea, dedup_loop, is_convex_loop
from yapbsp.lines import Line2D, Line3D, Segment3D
from yapbsp.partition import HyperplaneLocation, Split, location_from_sign
from yapbsp.precision import PrecisionContext
from yapbsp.triangulator import triangulate_loop
from yapbsp.vector import (Vec2, Vec3, add, cross, dot, neg, norm, normalize,
                           orthogonal, scale, sub, to_vec3)

logger = logging.getLogger(__name__)


class Plane:
    """Oriented plane carrying the precision used to classify against it."""

    __slots__ = ('u', 'v', 'w', 'origin_offset', 'precision')

    def __init__(self, u: Vec3, v: Vec3, w: Vec3, origin_offset: float,
                 precision: PrecisionContext):
        self.u = u
        self.v = v
        self.w = w
        self.origin_offset = float(origin_offset)
        self.precision = precision

    @classmethod
    def from_point_and_normal(cls, point: Sequence[float], normal: Sequence[float],
                              precision: PrecisionContext) -> 'Plane':
        n = to_vec3(normal)
        if precision.eq_zero(norm(n)):
            raise ValueError(f'plane normal has zero length: {normal}')
        w = normalize(n)
        u = orthogonal(w)
        v = cross(w, u)
        return cls(u, v, w, -dot(w, to_vec3(point)), precision)

    @classmethod
    def from_points(cls, p1: Sequence[float], p2: Sequence[float], p3: Sequence[float],
                    precision: PrecisionContext) -> 'Plane':
        """Plane through three points, normal given by the right hand rule."""

        a, b, c = to_vec3(p1), to_vec3(p2), to_vec3(p3)
        ab = sub(b, a)
        ac = sub(c, a)
        n = cross(ab, ac)
        if precision.eq_zero(norm(ab)) or precision.eq_zero(norm(n)):
            raise ValueError(f'points are collinear: {a}, {b}, {c}')
        u = normalize(ab)
        w = normalize(n)
        v = cross(w, u)
        return cls(u, v, w, -dot(w, a), precision)

    @property
    def normal(self) -> Vec3:
        return self.w

    @property
    def origin(self) -> Vec3:
        """Point of the plane closest to the coordinate origin."""
        return scale(self.w, -self.origin_offset)

    def offset(self, p: Sequence[float]) -> float:
        return dot(self.w, p) + self.origin_offset

    def classify(self, p: Sequence[float]) -> HyperplaneLocation:
        return location_from_sign(self.precision.sign(self.offset(p)))

    def contains(self, p: Sequence[float]) -> bool:
        return self.precision.eq_zero(self.offset(p))

    def project(self, p: Sequence[float]) -> Vec3:
        return sub(to_vec3(p), scale(self.w, self.offset(p)))

    def to_subspace(self, p: Sequence[float]) -> Vec2:
        return (dot(p, self.u), dot(p, self.v))

    def to_space(self, q: Sequence[float]) -> Vec3:
        return add(add(scale(self.u, q[0]), scale(self.v, q[1])),
                   scale(self.w, -self.origin_offset))

    def reverse(self) -> 'Plane':
        """Opposite plane; subspace coordinates swap under the new frame."""
        return Plane(self.v, self.u, neg(self.w), -self.origin_offset, self.precision)

    def similar_orientation(self, other: 'Plane') -> bool:
        return dot(self.w, other.w) > 0.0

    def is_parallel(self, other: 'Plane') -> bool:
        return self.precision.eq_zero(norm(cross(self.w, other.w)))

    def eq(self, other: 'Plane') -> bool:
        prec = self.precision
        return (prec.vec_eq(self.w, other.w)
                and prec.eq(self.origin_offset, other.origin_offset))

    def intersection(self, line: Union[Line3D, Segment3D]) -> Optional[Vec3]:
        """Point where ``line`` crosses the plane, ``None`` when parallel."""

        if isinstance(line, Segment3D):
            line = line.line
        rate = dot(self.w, line.direction)
        if self.precision.eq_zero(rate):
            return None
        return line.point_at(-self.offset(line.origin) / rate)

    def intersection_line(self, other: 'Plane') -> Optional[Line3D]:
        direction = cross(self.w, other.w)
        if self.precision.eq_zero(norm(direction)):
            return None
        c = dot(self.w, other.w)
        h1 = -self.origin_offset
        h2 = -other.origin_offset
        denom = 1.0 - c * c
        point = add(scale(self.w, (h1 - h2 * c) / denom),
                    scale(other.w, (h2 - h1 * c) / denom))
        return Line3D(point, direction, self.precision)

    def span(self) -> 'PlaneConvexSubset':
        return PlaneConvexSubset(self, ConvexArea.full())

    def __repr__(self):
        return f'Plane(normal={self.w}, origin_offset={self.origin_offset})'


class PlaneConvexSubset:
    """Convex region of a plane.

    The region is a :class:`ConvexArea` in the plane's subspace.  It may be
    unbounded; ``plane.span()`` is the whole plane.
    """

    __slots__ = ('plane', 'area')

    def __init__(self, plane: Plane, area: ConvexArea):
        self.plane = plane
        self.area = area

    @classmethod
    def from_vertices(cls, vertices: Sequence[Sequence[float]],
                      precision: PrecisionContext) -> 'PlaneConvexSubset':
        """Convex polygon through ``vertices``; the normal follows their winding."""

        pts = [to_vec3(v) for v in vertices]
        if len(pts) < 3:
            raise ValueError('a convex polygon needs at least three vertices')
        plane = Plane.from_points(pts[0], pts[1], pts[2], precision)
        return cls(plane, ConvexArea.from_vertices([plane.to_subspace(p) for p in pts], precision))

    @property
    def precision(self) -> PrecisionContext:
        return self.plane.precision

    def is_full(self) -> bool:
        return self.area.is_full()

    def is_finite(self) -> bool:
        return self.area.is_finite()

    def vertices(self) -> List[Vec3]:
        return [self.plane.to_space(q) for q in self.area.vertices()]

    @property
    def size(self) -> float:
        return self.area.size

    @property
    def centroid(self) -> Optional[Vec3]:
        c = self.area.centroid
        return None if c is None else self.plane.to_space(c)

    def contains(self, p: Sequence[float]) -> bool:
        return (self.plane.contains(p)
                and self.area.contains(self.plane.to_subspace(p)))

    def closest(self, p: Sequence[float]) -> Vec3:
        return self.plane.to_space(self.area.closest(self.plane.to_subspace(p)))

    def reverse(self) -> 'PlaneConvexSubset':
        return PlaneConvexSubset(self.plane.reverse(), self.area.reflect_xy())

    def to_convex(self) -> List['PlaneConvexSubset']:
        return [self]

    def split(self, splitter: Plane) -> Split['PlaneConvexSubset']:
        """Split by ``splitter``; a subset lying in it splits to NEITHER."""

        prec = splitter.precision
        if self.area.is_finite():
            signs = [prec.sign(splitter.offset(p)) for p in self.vertices()]
            if all(s == 0 for s in signs):
                return Split(None, None)
            if all(s <= 0 for s in signs):
                return Split(self, None)
            if all(s >= 0 for s in signs):
                return Split(None, self)

        line = self.plane.intersection_line(splitter)
        if line is None:
            side = prec.sign(splitter.offset(self.plane.origin))
            if side < 0:
                return Split(self, None)
            if side > 0:
                return Split(None, self)
            return Split(None, None)

        a = self.plane.to_subspace(line.origin)
        b = self.plane.to_subspace(add(line.origin, line.direction))
        cut = Line2D.from_points(a, b, self.plane.precision)
        n = cut.normal
        probe = self.plane.to_space((a[0] + n[0], a[1] + n[1]))
        if splitter.offset(probe) < 0.0:
            cut = cut.reverse()

        minus, plus = self.area.split(cut)
        return Split(None if minus is None else PlaneConvexSubset(self.plane, minus),
                     None if plus is None else PlaneConvexSubset(self.plane, plus))

    def intersection(self, query: Union[Line3D, Segment3D]) -> Optional[Vec3]:
        """Point where ``query`` crosses this subset, or ``None``.

        Segments parallel to the plane, including segments lying in it,
        never intersect.  Points within epsilon of an edge count as inside.
        """

        segment = query if isinstance(query, Segment3D) else None
        line = query.line if segment is not None else query
        rate = dot(self.plane.w, line.direction)
        if self.precision.eq_zero(rate):
            return None
        t = -self.plane.offset(line.origin) / rate
        if segment is not None and not segment.contains_abscissa(t):
            return None
        point = line.point_at(t)
        if self.area.contains(self.plane.to_subspace(point)):
            return point
        return None

    def __repr__(self):
        return f'PlaneConvexSubset({self.plane!r}, vertices={self.vertices()})'


class PlaneSubset:
    """Region of a plane made of convex pieces."""

    __slots__ = ('plane', 'pieces')

    def __init__(self, plane: Plane, pieces: Iterable[ConvexArea] = ()):
        self.plane = plane
        self.pieces: List[ConvexArea] = list(pieces)

    @classmethod
    def from_loop(cls, plane: Plane, loop: Sequence[Vec2]) -> 'PlaneSubset':
        """Region bounded by a counter-clockwise loop in ``plane``'s subspace.

        Convex loops become a single piece; other loops are cut into
        triangles by ear clipping.
        """

        prec = plane.precision
        points = dedup_loop(loop, prec)
        if is_convex_loop(points, prec):
            return cls(plane, [ConvexArea.from_vertices(points, prec)])

        pieces = []
        for tri in triangulate_loop(points):
            try:
                pieces.append(ConvexArea.from_vertices([points[i] for i in tri], prec))
            except ValueError:
                # sliver triangle from a collinear run of loop vertices
                continue
        logger.debug('decomposed %d vertex loop into %d triangles', len(points), len(pieces))
        return cls(plane, pieces)

    @property
    def precision(self) -> PrecisionContext:
        return self.plane.precision

    def is_empty(self) -> bool:
        return not self.pieces

    def is_full(self) -> bool:
        return any(p.is_full() for p in self.pieces)

    def is_finite(self) -> bool:
        return all(p.is_finite() for p in self.pieces)

    def to_convex(self) -> List[PlaneConvexSubset]:
        return [PlaneConvexSubset(self.plane, p) for p in self.pieces]

    def vertices(self) -> List[Vec3]:
        prec = self.precision
        out: List[Vec3] = []
        for piece in self.to_convex():
            for v in piece.vertices():
                if not any(prec.vec_eq(v, w) for w in out):
                    out.append(v)
        return out

    @property
    def size(self) -> float:
        return sum((p.size for p in self.pieces), 0.0)

    @property
    def centroid(self) -> Optional[Vec3]:
        total = 0.0
        cx = cy = 0.0
        for piece in self.pieces:
            c = piece.centroid
            if c is None:
                return None
            s = piece.size
            total += s
            cx += c[0] * s
            cy += c[1] * s
        if total == 0.0:
            return None
        return self.plane.to_space((cx / total, cy / total))

    def contains(self, p: Sequence[float]) -> bool:
        if not self.plane.contains(p):
            return False
        q = self.plane.to_subspace(p)
        return any(piece.contains(q) for piece in self.pieces)

    def reverse(self) -> 'PlaneSubset':
        return PlaneSubset(self.plane.reverse(), [p.reflect_xy() for p in self.pieces])

    def split(self, splitter: Plane) -> Split['PlaneSubset']:
        minus: List[ConvexArea] = []
        plus: List[ConvexArea] = []
        for piece in self.to_convex():
            part = piece.split(splitter)
            if part.minus is not None:
                minus.append(part.minus.area)
            if part.plus is not None:
                plus.append(part.plus.area)
        return Split(PlaneSubset(self.plane, minus) if minus else None,
                     PlaneSubset(self.plane, plus) if plus else None)

    def intersection(self, query: Union[Line3D, Segment3D]) -> Optional[Vec3]:
        for piece in self.to_convex():
            point = piece.intersection(query)
            if point is not None:
                return point
        return None

    def __repr__(self):
        return f'PlaneSubset({self.plane!r}, pieces={len(self.pieces)})'


__all__ = ['Plane', 'PlaneConvexSubset', 'PlaneSubset']
