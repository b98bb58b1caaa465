"""Convex volumes: the cells of a BSP tree."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from yapbsp.partition import RegionLocation, Split, SplitLocation
from yapbsp.plane import Plane, PlaneConvexSubset
from yapbsp.triangulator import fan_triangles
from yapbsp.vector import Vec3, add, cross, dot, scale, sub


class ConvexVolume:
    """Intersection of half-spaces, described by its boundary facets.

    Each boundary is a :class:`PlaneConvexSubset` whose plane normal points
    away from the volume.  A volume without boundaries is all of space.
    Unbounded volumes are valid: :meth:`is_finite` tells them apart and
    their ``size`` is ``math.inf``.
    """

    __slots__ = ('boundaries',)

    def __init__(self, boundaries: Sequence[PlaneConvexSubset] = ()):
        self.boundaries: List[PlaneConvexSubset] = list(boundaries)

    @classmethod
    def full(cls) -> 'ConvexVolume':
        return cls([])

    @classmethod
    def from_bounding_planes(cls, planes: Sequence[Plane]) -> 'ConvexVolume':
        """Volume on the minus side of every plane in ``planes``.

        Repeated planes are ignored.  Raises ``ValueError`` when the planes
        enclose nothing, as for two opposite coincident planes.
        """

        unique: List[Plane] = []
        for plane in planes:
            if any(plane.eq(p) for p in unique):
                continue
            unique.append(plane)

        volume = cls.full()
        for plane in unique:
            minus = volume.split(plane).minus
            if minus is None:
                raise ValueError('bounding planes do not enclose a convex region')
            volume = minus
        return volume

    def is_full(self) -> bool:
        return not self.boundaries

    def is_finite(self) -> bool:
        return bool(self.boundaries) and all(b.is_finite() for b in self.boundaries)

    def vertices(self) -> List[Vec3]:
        out: List[Vec3] = []
        for b in self.boundaries:
            prec = b.precision
            for v in b.vertices():
                if not any(prec.vec_eq(v, w) for w in out):
                    out.append(v)
        return out

    def classify(self, p: Sequence[float]) -> RegionLocation:
        on_boundary = False
        for b in self.boundaries:
            offset = b.plane.offset(p)
            if b.precision.gt(offset, 0.0):
                return RegionLocation.OUTSIDE
            if b.precision.eq_zero(offset):
                on_boundary = True
        return RegionLocation.BOUNDARY if on_boundary else RegionLocation.INSIDE

    def contains(self, p: Sequence[float]) -> bool:
        return self.classify(p) != RegionLocation.OUTSIDE

    def size_and_moment(self) -> Tuple[float, Optional[Vec3]]:
        """Return ``(volume, first moment)`` of a bounded cell.

        Each facet is fanned into triangles and the signed tetrahedra they
        form with a fixed reference point are summed.  Unbounded cells give
        ``(math.inf, None)``.
        """

        if not self.is_finite():
            return math.inf, None

        ref: Optional[Vec3] = None
        volume = 0.0
        mx = my = mz = 0.0
        for b in self.boundaries:
            verts = b.vertices()
            if len(verts) < 3:
                continue
            if ref is None:
                ref = verts[0]
            for i, j, k in fan_triangles(len(verts)):
                a = sub(verts[i], ref)
                bb = sub(verts[j], ref)
                c = sub(verts[k], ref)
                tet = dot(a, cross(bb, c)) / 6.0
                volume += tet
                # tetra centroid relative to ref is (a + b + c) / 4
                s = add(add(a, bb), c)
                mx += tet * s[0] / 4.0
                my += tet * s[1] / 4.0
                mz += tet * s[2] / 4.0
        if ref is None:
            return 0.0, None
        moment = add(scale(ref, volume), (mx, my, mz))
        return volume, moment

    @property
    def size(self) -> float:
        return self.size_and_moment()[0]

    @property
    def centroid(self) -> Optional[Vec3]:
        volume, moment = self.size_and_moment()
        if moment is None or volume == 0.0:
            return None
        return scale(moment, 1.0 / volume)

    def trim(self, subset: PlaneConvexSubset) -> Optional[PlaneConvexSubset]:
        """Return the part of ``subset`` inside this volume, or ``None``."""

        trimmed: Optional[PlaneConvexSubset] = subset
        for b in self.boundaries:
            trimmed = trimmed.split(b.plane).minus
            if trimmed is None:
                return None
        return trimmed

    def split(self, splitter: Plane) -> Split['ConvexVolume']:
        trimmed = self.trim(splitter.span())
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
        plus_bounds.append(trimmed.reverse())
        return Split(ConvexVolume(minus_bounds), ConvexVolume(plus_bounds))

    def _split_one_side(self, splitter: Plane) -> Split['ConvexVolume']:
        for b in self.boundaries:
            loc = b.split(splitter).location
            if loc == SplitLocation.MINUS:
                return Split(self, None)
            if loc == SplitLocation.PLUS:
                return Split(None, self)
            if loc == SplitLocation.NEITHER:
                if b.plane.similar_orientation(splitter):
                    return Split(self, None)
                return Split(None, self)

        points = self.vertices()
        if points and sum(splitter.offset(p) for p in points) > 0.0:
            return Split(None, self)
        return Split(self, None)

    def __repr__(self):
        return f'ConvexVolume(boundaries={len(self.boundaries)})'


__all__ = ['ConvexVolume']
