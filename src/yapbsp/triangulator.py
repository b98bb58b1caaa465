"""Ear clipping for non-convex facet loops.

We delegate to ``mapbox-earcut`` (the fast ear clipping implementation
used by Mapbox GL).  The helpers here only convert a yapBSP vertex loop
into the arrays earcut expects and hand back index triangles, so callers
can rebuild each triangle from their own, exact, coordinates.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

try:
    import mapbox_earcut as _earcut
except ImportError as exc:  # pragma: no cover - import guard
    raise ImportError(
        "mapbox-earcut must be installed to decompose non-convex facets"
    ) from exc

from yapbsp.vector import Vec2, signed_area2

Triangle = Tuple[int, int, int]


def triangulate_loop(loop: Sequence[Sequence[float]]) -> List[Triangle]:
    """Return index triangles covering a simple closed loop.

    ``loop`` is a sequence of XY-like points without a repeated closing
    point.  Indices refer to positions in ``loop``.  Every triangle is
    counter-clockwise when the loop is, whatever order earcut emits.
    """

    if len(loop) < 3:
        return []

    points: List[Vec2] = [(float(p[0]), float(p[1])) for p in loop]
    vertices = np.asarray(points, dtype=np.float64)
    rings = np.asarray([len(points)], dtype=np.uint32)
    indices = _earcut.triangulate_float64(vertices, rings)

    ccw = signed_area2(points) >= 0.0
    triangles: List[Triangle] = []
    for i in range(0, len(indices), 3):
        tri = (int(indices[i]), int(indices[i + 1]), int(indices[i + 2]))
        area = signed_area2([points[j] for j in tri])
        if (area < 0.0) == ccw:
            tri = (tri[0], tri[2], tri[1])
        triangles.append(tri)
    return triangles


def fan_triangles(count: int) -> List[Triangle]:
    """Index triangles fanning out from the first vertex of a convex loop."""

    return [(0, i, i + 1) for i in range(1, count - 1)]


__all__ = ['triangulate_loop', 'fan_triangles']
