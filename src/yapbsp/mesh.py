"""Build region BSP trees from polygon meshes.

A mesh is a list of vertices plus a list of facets, each facet a list of
vertex indices in counter-clockwise order seen from outside the region.
Facets may be any planar simple polygon; non-convex ones are decomposed
by ear clipping before insertion.

The builder checks each facet on its own (enough indices, indices in
range, planarity within tolerance) and validates the whole mesh before
touching the tree.  It does not check that the facets form a closed,
consistently oriented surface; see :mod:`yapbsp.geometry_checks` for
that.
"""

from __future__ import annotations

import logging
import numbers
from typing import List, Sequence

from yapbsp.area import dedup_loop
from yapbsp.bsp import RegionBSPTree3D
from yapbsp.errors import MalformedFacetError
from yapbsp.plane import Plane, PlaneSubset
from yapbsp.precision import PrecisionContext
from yapbsp.vector import signed_area2, to_vec3

logger = logging.getLogger(__name__)


def build_facet(vertices: Sequence[Sequence[float]], precision: PrecisionContext,
                facet_index=None) -> PlaneSubset:
    """Turn the ordered vertices of one facet into a :class:`PlaneSubset`.

    The plane comes from the first three vertices; every other vertex must
    lie on it within ``precision``.  If the projected loop winds clockwise
    the plane is reversed so the normal agrees with the loop.

    Raises :class:`MalformedFacetError` on any violation.
    """

    details = {'facet_index': facet_index}
    if len(vertices) < 3:
        raise MalformedFacetError(f'facet has {len(vertices)} vertices, need at least 3',
                                  dict(details, vertex_count=len(vertices)))
    pts = [to_vec3(v) for v in vertices]

    try:
        plane = Plane.from_points(pts[0], pts[1], pts[2], precision)
    except ValueError as exc:
        raise MalformedFacetError('first three facet vertices are collinear', details) from exc

    for i, p in enumerate(pts[3:], start=3):
        distance = plane.offset(p)
        if not precision.eq_zero(distance):
            raise MalformedFacetError(
                f'facet vertex {i} is {abs(distance):g} off the facet plane',
                dict(details, vertex_index=i, distance=distance))

    loop = dedup_loop([plane.to_subspace(p) for p in pts], precision)
    if len(loop) < 3:
        raise MalformedFacetError('facet has fewer than three distinct vertices', details)
    area = signed_area2(loop)
    if precision.eq_zero(area):
        raise MalformedFacetError('facet has zero area', details)
    if area < 0.0:
        plane = plane.reverse()
        loop = dedup_loop([plane.to_subspace(p) for p in pts], precision)

    return PlaneSubset.from_loop(plane, loop)


def build_facets(vertices: Sequence[Sequence[float]], facets: Sequence[Sequence[int]],
                 precision: PrecisionContext) -> List[PlaneSubset]:
    """Validate and build every facet of a mesh, in input order."""

    count = len(vertices)
    subsets = []
    for facet_index, facet in enumerate(facets):
        if len(facet) < 3:
            raise MalformedFacetError(
                f'facet {facet_index} has {len(facet)} indices, need at least 3',
                {'facet_index': facet_index, 'vertex_count': len(facet)})
        for idx in facet:
            valid = isinstance(idx, numbers.Integral) and not isinstance(idx, bool)
            if not valid or not 0 <= idx < count:
                raise MalformedFacetError(
                    f'facet {facet_index} references invalid vertex index {idx!r}',
                    {'facet_index': facet_index, 'vertex_index': idx})
        subsets.append(build_facet([vertices[i] for i in facet], precision, facet_index))
    return subsets


def insert_mesh(tree: RegionBSPTree3D, vertices: Sequence[Sequence[float]],
                facets: Sequence[Sequence[int]], precision: PrecisionContext) -> None:
    """Insert all facets of a mesh into ``tree``.

    Every facet is validated first, so a malformed facet leaves ``tree``
    unchanged.  Large meshes build slowly; see
    :meth:`RegionBSPTree3D.from_mesh` for the cost.
    """

    subsets = build_facets(vertices, facets, precision)
    for subset in subsets:
        tree.insert(subset)
    logger.debug('inserted mesh: %d vertices, %d facets', len(vertices), len(subsets))


def from_mesh(vertices: Sequence[Sequence[float]], facets: Sequence[Sequence[int]],
              precision: PrecisionContext) -> RegionBSPTree3D:
    tree = RegionBSPTree3D.empty()
    insert_mesh(tree, vertices, facets, precision)
    return tree


__all__ = ['build_facet', 'build_facets', 'insert_mesh', 'from_mesh']
