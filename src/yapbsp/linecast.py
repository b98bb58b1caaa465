"""Line and segment intersection queries against boundary sources.

A *boundary source* is anything with a ``boundary_stream()`` method that
yields planar boundary subsets; a :class:`~yapbsp.bsp.RegionBSPTree3D`
is one, :class:`BoundaryList` wraps a plain list.  Plain sequences of
subsets are accepted as well.

The engine here is brute force: every subset of the source is tested.
Sources that can do better implement :class:`Linecastable` and are
delegated to by :func:`linecast` and :func:`linecast_first`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import (Iterable, Iterator, List, Optional, Protocol,
                    Union, runtime_checkable)

from yapbsp.lines import Line3D, Segment3D
from yapbsp.vector import Vec3, coordinate_compare

logger = logging.getLogger(__name__)

Query = Union[Line3D, Segment3D]


@dataclass(frozen=True)
class LinecastPoint:
    """Intersection of a line with a region boundary."""

    point: Vec3
    normal: Vec3
    line: Line3D
    abscissa: float

    def compare(self, other: 'LinecastPoint') -> int:
        """Order by abscissa within tolerance, then by normal coordinates."""

        prec = self.line.precision
        cmp = prec.compare(self.abscissa, other.abscissa)
        if cmp == 0:
            cmp = coordinate_compare(self.normal, other.normal)
        return cmp


@runtime_checkable
class BoundarySource(Protocol):
    def boundary_stream(self) -> Iterator: ...


@runtime_checkable
class Linecastable(Protocol):
    def linecast(self, query: Query) -> List[LinecastPoint]: ...

    def linecast_first(self, query: Query) -> Optional[LinecastPoint]: ...


class BoundaryList:
    """Boundary source backed by a list of planar subsets."""

    def __init__(self, boundaries: Iterable = ()):
        self.boundaries = list(boundaries)

    def boundary_stream(self) -> Iterator:
        return iter(self.boundaries)

    def __len__(self):
        return len(self.boundaries)

    def __repr__(self):
        return f'BoundaryList({len(self.boundaries)} boundaries)'


def as_segment(query: Query) -> Segment3D:
    """Treat a bare line as the unbounded segment covering it."""
    if isinstance(query, Line3D):
        return query.span()
    return query


def intersect_boundary(subset, segment: Segment3D) -> Optional[LinecastPoint]:
    """Linecast point where ``segment`` crosses ``subset``, if any."""

    point = subset.intersection(segment)
    if point is None:
        return None
    line = segment.line
    return LinecastPoint(point, subset.plane.normal, line, line.abscissa(point))


def sort_and_filter(points: Iterable[LinecastPoint]) -> List[LinecastPoint]:
    """Sort linecast points and drop near duplicates.

    A point equal within tolerance to one already kept is dropped,
    whatever its normal, so the first point in sorted order wins.
    """

    ordered = sorted(points, key=cmp_to_key(LinecastPoint.compare))
    kept: List[LinecastPoint] = []
    for pt in ordered:
        prec = pt.line.precision
        duplicate = False
        for prev in reversed(kept):
            if not prec.eq(prev.abscissa, pt.abscissa):
                break
            if prec.vec_eq(prev.point, pt.point):
                duplicate = True
                break
        if not duplicate:
            kept.append(pt)
    return kept


def _subsets(source) -> Iterable:
    if isinstance(source, BoundarySource):
        return source.boundary_stream()
    return source


def linecast_boundaries(boundaries: Iterable, query: Query) -> List[LinecastPoint]:
    """Brute-force :func:`linecast` over an iterable of subsets."""

    segment = as_segment(query)
    hits = []
    tested = 0
    for subset in boundaries:
        tested += 1
        pt = intersect_boundary(subset, segment)
        if pt is not None:
            hits.append(pt)
    result = sort_and_filter(hits)
    logger.debug('linecast tested %d boundaries: %d hits, %d kept', tested, len(hits), len(result))
    return result


def linecast_first_boundaries(boundaries: Iterable, query: Query) -> Optional[LinecastPoint]:
    """Brute-force :func:`linecast_first` over an iterable of subsets."""

    segment = as_segment(query)
    best: Optional[LinecastPoint] = None
    for subset in boundaries:
        pt = intersect_boundary(subset, segment)
        if pt is not None and (best is None or pt.compare(best) < 0):
            best = pt
    return best


def linecast(source, query: Query) -> List[LinecastPoint]:
    """All boundary intersections of ``query``, sorted and deduplicated.

    ``source`` is a :class:`Linecastable`, a :class:`BoundarySource` or
    a plain sequence of planar subsets.
    """

    if isinstance(source, Linecastable):
        return source.linecast(query)
    return linecast_boundaries(_subsets(source), query)


def linecast_first(source, query: Query) -> Optional[LinecastPoint]:
    """First boundary intersection of ``query``, or ``None``."""

    if isinstance(source, Linecastable):
        return source.linecast_first(query)
    return linecast_first_boundaries(_subsets(source), query)


__all__ = [
    'LinecastPoint',
    'BoundarySource',
    'Linecastable',
    'BoundaryList',
    'as_segment',
    'intersect_boundary',
    'sort_and_filter',
    'linecast_boundaries',
    'linecast_first_boundaries',
    'linecast',
    'linecast_first',
]
