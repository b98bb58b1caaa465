"""Region BSP trees in three dimensions.

A :class:`RegionBSPTree3D` partitions space with oriented planes.  Every
internal node stores a *cut*: its plane trimmed to the convex cell the node
covers.  Leaves are tagged ``INSIDE`` or ``OUTSIDE``; the region is the
union of the ``INSIDE`` leaf cells.

Boundaries are inserted with their normals pointing away from the region.
With the default :attr:`RegionCutRule.MINUS_INSIDE` rule the minus side of
each new cut starts ``INSIDE`` and the plus side ``OUTSIDE``, so inserting
the facets of a closed surface in any order gives the same classification.

Nodes hold no reference to their parent.  Walks that need ancestor
information carry it on an explicit stack, and none of them recurse in
Python, so deep trees are fine.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from yapbsp.errors import BSPTreeError
from yapbsp.linecast import (BoundarySource, LinecastPoint, Query, as_segment,
                             intersect_boundary, linecast_boundaries)
from yapbsp.partition import (HyperplaneLocation, RegionCutRule, RegionLocation,
                              SplitLocation)
from yapbsp.plane import Plane, PlaneConvexSubset, PlaneSubset
from yapbsp.precision import PrecisionContext
from yapbsp.vector import (MINUS_Z, PLUS_Z, Vec3, add, coordinate_compare, dist, dot,
                           normalize, scale, to_vec3)
from yapbsp.volume import ConvexVolume

logger = logging.getLogger(__name__)


class RegionNode3D:
    """Node of a :class:`RegionBSPTree3D`.

    A leaf has a ``location``; an internal node has a ``cut`` and two
    children.  Nodes are created and rewired only by the owning tree.
    """

    __slots__ = ('_location', 'cut', 'minus', 'plus')

    def __init__(self, location: RegionLocation = RegionLocation.OUTSIDE):
        self._location = location
        self.cut: Optional[PlaneConvexSubset] = None
        self.minus: Optional['RegionNode3D'] = None
        self.plus: Optional['RegionNode3D'] = None

    def is_leaf(self) -> bool:
        return self.cut is None

    def is_internal(self) -> bool:
        return self.cut is not None

    @property
    def location(self) -> Optional[RegionLocation]:
        """Leaf location; ``None`` for internal nodes."""
        return self._location if self.cut is None else None

    def is_inside(self) -> bool:
        return self.cut is None and self._location == RegionLocation.INSIDE

    def is_outside(self) -> bool:
        return self.cut is None and self._location == RegionLocation.OUTSIDE

    @property
    def cut_plane(self) -> Optional[Plane]:
        return None if self.cut is None else self.cut.plane

    def _set_location(self, location: RegionLocation) -> None:
        if self.cut is not None:
            raise BSPTreeError('cannot set the location of an internal node')
        self._location = location

    def _set_subtree(self, cut: PlaneConvexSubset, minus: 'RegionNode3D',
                     plus: 'RegionNode3D') -> None:
        self.cut = cut
        self.minus = minus
        self.plus = plus

    def _make_leaf(self, location: RegionLocation) -> None:
        self.cut = None
        self.minus = None
        self.plus = None
        self._location = location

    def __repr__(self):
        if self.cut is None:
            return f'RegionNode3D(location={self._location.name})'
        return f'RegionNode3D(cut={self.cut.plane!r})'


@dataclass(frozen=True)
class RegionSizeProperties:
    """Volume and centroid of a region.

    ``size`` is ``math.inf`` for unbounded regions and ``0.0`` for empty
    ones; ``centroid`` is ``None`` in both cases.
    """

    size: float
    centroid: Optional[Vec3]


def _internal(cut: PlaneConvexSubset, minus: RegionNode3D, plus: RegionNode3D) -> RegionNode3D:
    node = RegionNode3D()
    node._set_subtree(cut, minus, plus)
    return node


def _copy_subtree(node: RegionNode3D) -> RegionNode3D:
    root = RegionNode3D(node._location)
    stack = [(node, root)]
    while stack:
        src, dst = stack.pop()
        if src.is_leaf():
            dst._make_leaf(src._location)
            continue
        minus = RegionNode3D()
        plus = RegionNode3D()
        # cuts are never mutated, so they can be shared
        dst._set_subtree(src.cut, minus, plus)
        stack.append((src.minus, minus))
        stack.append((src.plus, plus))
    return root


def _drive(step, *args):
    """Run a generator-based walk without Python recursion.

    ``step`` yields argument tuples for the sub-walks it needs and receives
    their results back; its return value is the result of the walk.
    """

    stack = [step(*args)]
    value = None
    while stack:
        try:
            request = stack[-1].send(value)
        except StopIteration as stop:
            stack.pop()
            value = stop.value
        else:
            stack.append(step(*request))
            value = None
    return value


def _split_node(node: RegionNode3D, partitioner: PlaneConvexSubset):
    """Split the subtree at ``node`` with a partitioner trimmed to its cell.

    Returns fresh ``(minus, plus)`` subtrees; the source is not modified.
    """

    if node.is_leaf():
        return _copy_subtree(node), _copy_subtree(node)

    splitter = partitioner.plane
    node_plane = node.cut.plane
    part_split = partitioner.split(node_plane)
    cut_split = node.cut.split(splitter)
    part_loc = part_split.location
    cut_loc = cut_split.location

    if part_loc == SplitLocation.PLUS:
        sub_minus, sub_plus = yield node.plus, partitioner
        if cut_loc == SplitLocation.PLUS:
            return sub_minus, _internal(node.cut, _copy_subtree(node.minus), sub_plus)
        return _internal(node.cut, _copy_subtree(node.minus), sub_minus), sub_plus

    if part_loc == SplitLocation.MINUS:
        sub_minus, sub_plus = yield node.minus, partitioner
        if cut_loc == SplitLocation.MINUS:
            return _internal(node.cut, sub_minus, _copy_subtree(node.plus)), sub_plus
        return sub_minus, _internal(node.cut, sub_plus, _copy_subtree(node.plus))

    if part_loc == SplitLocation.BOTH:
        minus_minus, minus_plus = yield node.minus, part_split.minus
        plus_minus, plus_plus = yield node.plus, part_split.plus
        cut_minus = cut_split.minus if cut_split.minus is not None else node.cut
        cut_plus = cut_split.plus if cut_split.plus is not None else node.cut
        return (_internal(cut_minus, minus_minus, plus_minus),
                _internal(cut_plus, minus_plus, plus_plus))

    # partitioner lies in the node plane
    if splitter.similar_orientation(node_plane):
        return _copy_subtree(node.minus), _copy_subtree(node.plus)
    return _copy_subtree(node.plus), _copy_subtree(node.minus)


class RegionBSPTree3D:
    """Binary space partitioning tree describing a region of 3D space."""

    def __init__(self, full: bool = False):
        self._root = RegionNode3D(RegionLocation.INSIDE if full else RegionLocation.OUTSIDE)
        self._size_properties: Optional[RegionSizeProperties] = None

    # -- construction ---------------------------------------------------

    @classmethod
    def full(cls) -> 'RegionBSPTree3D':
        return cls(full=True)

    @classmethod
    def empty(cls) -> 'RegionBSPTree3D':
        return cls(full=False)

    @classmethod
    def from_mesh(cls, vertices: Sequence[Sequence[float]], facets: Sequence[Sequence[int]],
                  precision: PrecisionContext) -> 'RegionBSPTree3D':
        """Tree for the region enclosed by an outward oriented mesh.

        See :func:`yapbsp.mesh.insert_mesh` for facet validation.

        Each facet is split against every cut on its way down, together
        with its plane trimmed to the current cell, so building costs about
        ``facets * depth**2`` subset splits.  Convex meshes give chain-like
        trees as deep as the facet count: a few hundred facets already take
        seconds and a UV sphere of ~700 facets takes around a minute.
        """

        from yapbsp.mesh import insert_mesh

        tree = cls.empty()
        insert_mesh(tree, vertices, facets, precision)
        return tree

    @classmethod
    def from_convex_volume(cls, volume: ConvexVolume) -> 'RegionBSPTree3D':
        if volume.is_full():
            return cls.full()
        tree = cls.empty()
        tree.insert(volume.boundaries)
        return tree

    @classmethod
    def rect(cls, a: Sequence[float], b: Sequence[float],
             precision: PrecisionContext) -> 'RegionBSPTree3D':
        """Axis-aligned box with opposite corners ``a`` and ``b``."""

        a = to_vec3(a)
        b = to_vec3(b)
        lo = tuple(min(x, y) for x, y in zip(a, b))
        hi = tuple(max(x, y) for x, y in zip(a, b))
        if any(precision.eq(x, y) for x, y in zip(lo, hi)):
            raise ValueError(f'box has zero size: {a}, {b}')

        planes = []
        for axis in range(3):
            normal = [0.0, 0.0, 0.0]
            normal[axis] = -1.0
            planes.append(Plane.from_point_and_normal(lo, normal, precision))
            normal[axis] = 1.0
            planes.append(Plane.from_point_and_normal(hi, normal, precision))
        return cls.from_convex_volume(ConvexVolume.from_bounding_planes(planes))

    @classmethod
    def rect_from_point(cls, pt: Sequence[float], x_delta: float, y_delta: float,
                        z_delta: float, precision: PrecisionContext) -> 'RegionBSPTree3D':
        """Axis-aligned box with one corner at ``pt``; deltas may be negative."""

        p = to_vec3(pt)
        return cls.rect(p, (p[0] + x_delta, p[1] + y_delta, p[2] + z_delta), precision)

    @classmethod
    def sphere(cls, center: Sequence[float], radius: float, stacks: int, slices: int,
               precision: PrecisionContext) -> 'RegionBSPTree3D':
        """Convex polyhedron approximating a sphere.

        ``stacks`` rings of ``slices`` planes each run from pole to pole,
        capped by two planes tangent to the poles.  The planes sit at a
        radius halfway between ``radius`` and the inscribed radius of a
        stack, so the volume stays close to that of the true sphere.
        """

        if not radius > 0.0:
            raise ValueError(f'sphere radius must be positive, got {radius}')
        if stacks < 1 or slices < 3:
            raise ValueError(f'need at least 1 stack and 3 slices, got {stacks} and {slices}')

        c = to_vec3(center)
        planes = [
            Plane.from_point_and_normal((c[0], c[1], c[2] + radius), PLUS_Z, precision),
            Plane.from_point_and_normal((c[0], c[1], c[2] - radius), MINUS_Z, precision),
        ]

        v_delta = math.pi / stacks
        h_delta = 2.0 * math.pi / slices
        adjusted = (radius + radius * math.cos(v_delta * 0.5)) / 2.0

        for i in range(stacks):
            v_angle = (i + 0.5) * v_delta
            stack_radius = math.sin(v_angle) * adjusted
            stack_height = math.cos(v_angle) * adjusted
            for j in range(slices):
                h_angle = (j + 0.5) * h_delta
                n = normalize((math.cos(h_angle) * stack_radius,
                               math.sin(h_angle) * stack_radius,
                               stack_height))
                planes.append(Plane.from_point_and_normal(add(c, scale(n, adjusted)), n, precision))

        logger.debug('sphere approximation from %d planes', len(planes))
        return cls.from_convex_volume(ConvexVolume.from_bounding_planes(planes))

    # -- structure ------------------------------------------------------

    @property
    def root(self) -> RegionNode3D:
        return self._root

    def _invalidate(self) -> None:
        self._size_properties = None

    def nodes(self) -> Iterator[RegionNode3D]:
        """Yield every node in pre-order, minus child before plus child."""

        stack = [self._root]
        while stack:
            node = stack.pop()
            yield node
            if node.is_internal():
                stack.append(node.plus)
                stack.append(node.minus)

    def count(self) -> int:
        return sum(1 for _ in self.nodes())

    def height(self) -> int:
        best = 0
        stack = [(self._root, 0)]
        while stack:
            node, depth = stack.pop()
            best = max(best, depth)
            if node.is_internal():
                stack.append((node.minus, depth + 1))
                stack.append((node.plus, depth + 1))
        return best

    def copy(self) -> 'RegionBSPTree3D':
        other = type(self)()
        other._root = _copy_subtree(self._root)
        other._size_properties = self._size_properties
        return other

    def _path_to(self, target: RegionNode3D) -> List[RegionNode3D]:
        stack = [(self._root, [self._root])]
        while stack:
            node, path = stack.pop()
            if node is target:
                return path
            if node.is_internal():
                stack.append((node.plus, path + [node.plus]))
                stack.append((node.minus, path + [node.minus]))
        raise BSPTreeError('node does not belong to this tree')

    def node_region(self, node: RegionNode3D) -> Optional[ConvexVolume]:
        """Convex cell covered by ``node``, rebuilt from the root path.

        Returns ``None`` if round-off leaves the cell empty.
        """

        path = self._path_to(node)
        cell: Optional[ConvexVolume] = ConvexVolume.full()
        for parent, child in zip(path, path[1:]):
            minus, plus = cell.split(parent.cut.plane)
            cell = minus if child is parent.minus else plus
            if cell is None:
                return None
        return cell

    # -- mutation -------------------------------------------------------

    def insert(self, boundary, cut_rule: RegionCutRule = RegionCutRule.MINUS_INSIDE) -> None:
        """Insert region boundaries.

        ``boundary`` is a :class:`PlaneConvexSubset`, a :class:`PlaneSubset`,
        a boundary source (anything with ``boundary_stream()``, including
        another tree) or an iterable of subsets.  Subsets are inserted in
        order.
        """

        pieces = self._convex_pieces(boundary)
        for piece in pieces:
            self._insert_convex(piece, cut_rule)
        self._invalidate()
        logger.debug('inserted %d convex boundary pieces', len(pieces))

    @staticmethod
    def _convex_pieces(boundary) -> List[PlaneConvexSubset]:
        if isinstance(boundary, (PlaneConvexSubset, PlaneSubset)):
            return boundary.to_convex()
        if isinstance(boundary, BoundarySource):
            items = list(boundary.boundary_stream())
        else:
            items = list(boundary)
        pieces: List[PlaneConvexSubset] = []
        for item in items:
            pieces.extend(item.to_convex())
        return pieces

    def _insert_convex(self, piece: PlaneConvexSubset, cut_rule: RegionCutRule) -> None:
        stack = [(self._root, piece, piece.plane.span())]
        while stack:
            node, sub, trimmed = stack.pop()
            if node.is_leaf():
                self._cut_leaf(node, trimmed if trimmed is not None else sub, cut_rule)
                continue

            splitter = node.cut.plane
            minus, plus = sub.split(splitter)
            if minus is None and plus is None:
                logger.debug('boundary lies in existing cut %r; merged', splitter)
                continue
            if trimmed is not None:
                trim_minus, trim_plus = trimmed.split(splitter)
            else:
                trim_minus = trim_plus = None
            if plus is not None:
                stack.append((node.plus, plus, trim_plus))
            if minus is not None:
                stack.append((node.minus, minus, trim_minus))

    @staticmethod
    def _cut_leaf(node: RegionNode3D, cut: PlaneConvexSubset, cut_rule: RegionCutRule) -> None:
        if node.is_internal():
            raise BSPTreeError('cannot cut an internal node')
        previous = node.location
        if cut_rule == RegionCutRule.MINUS_INSIDE:
            minus_loc, plus_loc = RegionLocation.INSIDE, RegionLocation.OUTSIDE
        elif cut_rule == RegionCutRule.PLUS_INSIDE:
            minus_loc, plus_loc = RegionLocation.OUTSIDE, RegionLocation.INSIDE
        else:
            minus_loc = plus_loc = previous
        node._set_subtree(cut, RegionNode3D(minus_loc), RegionNode3D(plus_loc))

    def complement(self) -> None:
        """Swap inside and outside."""

        for node in self.nodes():
            if node.is_leaf():
                flipped = (RegionLocation.OUTSIDE if node.is_inside()
                           else RegionLocation.INSIDE)
                node._set_location(flipped)
        self._invalidate()

    def condense(self) -> bool:
        """Merge sibling leaves with equal locations; True if anything changed."""

        changed = False
        stack = [(self._root, False)]
        while stack:
            node, children_done = stack.pop()
            if node.is_leaf():
                continue
            if not children_done:
                stack.append((node, True))
                stack.append((node.plus, False))
                stack.append((node.minus, False))
                continue
            minus, plus = node.minus, node.plus
            if minus.is_leaf() and plus.is_leaf() and minus.location == plus.location:
                node._make_leaf(minus.location)
                changed = True
        if changed:
            self._invalidate()
        return changed

    # -- classification -------------------------------------------------

    def classify(self, point: Sequence[float]) -> RegionLocation:
        """Classify ``point`` as INSIDE, OUTSIDE or on the BOUNDARY.

        A point lying on a cut is pushed down both sides; if the leaves
        reached disagree the point is on the boundary.
        """

        p = to_vec3(point)
        found = set()
        stack = [self._root]
        while stack:
            node = stack.pop()
            if node.is_leaf():
                found.add(node.location)
                continue
            side = node.cut.plane.classify(p)
            if side != HyperplaneLocation.PLUS:
                stack.append(node.minus)
            if side != HyperplaneLocation.MINUS:
                stack.append(node.plus)
        if len(found) == 1:
            return found.pop()
        return RegionLocation.BOUNDARY

    def contains(self, point: Sequence[float]) -> bool:
        return self.classify(point) != RegionLocation.OUTSIDE

    def is_empty(self) -> bool:
        return not any(node.is_inside() for node in self.nodes())

    def is_full(self) -> bool:
        return not any(node.is_outside() for node in self.nodes())

    # -- boundaries -----------------------------------------------------

    @staticmethod
    def _characterize(start: RegionNode3D, subset: PlaneConvexSubset
                      ) -> List[Tuple[PlaneConvexSubset, RegionLocation]]:
        """Push ``subset`` down from ``start``; return fragments with their leaf location."""

        out = []
        stack = [(start, subset)]
        while stack:
            node, frag = stack.pop()
            if node.is_leaf():
                out.append((frag, node.location))
                continue
            minus, plus = frag.split(node.cut.plane)
            if minus is None and plus is None:
                # fragment lies in this cut
                stack.append((node.minus, frag))
                continue
            if plus is not None:
                stack.append((node.plus, plus))
            if minus is not None:
                stack.append((node.minus, minus))
        return out

    def _cut_boundary(self, node: RegionNode3D) -> List[PlaneConvexSubset]:
        """Part of ``node``'s cut separating inside from outside, outward oriented."""

        result = []
        for frag, minus_loc in self._characterize(node.minus, node.cut):
            for piece, plus_loc in self._characterize(node.plus, frag):
                if minus_loc == RegionLocation.INSIDE and plus_loc == RegionLocation.OUTSIDE:
                    result.append(piece)
                elif minus_loc == RegionLocation.OUTSIDE and plus_loc == RegionLocation.INSIDE:
                    result.append(piece.reverse())
        return result

    def boundary_stream(self) -> Iterator[PlaneConvexSubset]:
        """Lazily yield the region boundary, outward oriented.

        Each call starts a new pass over the tree.
        """

        for node in self.nodes():
            if node.is_internal():
                yield from self._cut_boundary(node)

    def boundaries(self) -> List[PlaneConvexSubset]:
        return list(self.boundary_stream())

    def boundary_size(self) -> float:
        return sum((b.size for b in self.boundary_stream()), 0.0)

    def project(self, point: Sequence[float]) -> Optional[Vec3]:
        """Closest point of the region boundary to ``point``.

        Of several boundary points at the same distance the one with the
        smallest coordinates wins.  Returns ``None`` when the region has
        no boundary.
        """

        p = to_vec3(point)
        best: Optional[Vec3] = None
        best_dist = math.inf
        for node in self.nodes():
            if node.is_leaf():
                continue
            prec = node.cut.precision
            # nothing on this cut can beat the current best
            if best is not None and prec.gt(abs(node.cut.plane.offset(p)), best_dist):
                continue
            for piece in self._cut_boundary(node):
                candidate = piece.closest(p)
                d = dist(candidate, p)
                cmp = -1 if best is None else prec.compare(d, best_dist)
                if cmp < 0 or (cmp == 0 and coordinate_compare(candidate, best) < 0):
                    best = candidate
                    best_dist = min(d, best_dist)
        return best

    # -- convex decomposition and size -----------------------------------

    def to_convex(self) -> List[ConvexVolume]:
        """Convex cells of the INSIDE leaves; unbounded cells are included."""

        cells = []
        stack = [(self._root, ConvexVolume.full())]
        while stack:
            node, cell = stack.pop()
            if node.is_leaf():
                if node.is_inside():
                    cells.append(cell)
                continue
            minus, plus = cell.split(node.cut.plane)
            if plus is not None:
                stack.append((node.plus, plus))
            if minus is not None:
                stack.append((node.minus, minus))
        return cells

    def compute_region_size_properties(self) -> RegionSizeProperties:
        if self._size_properties is None:
            self._size_properties = self._compute_size_properties()
        return self._size_properties

    def _compute_size_properties(self) -> RegionSizeProperties:
        volume = 0.0
        moment: Vec3 = (0.0, 0.0, 0.0)
        cells = self.to_convex()
        for cell in cells:
            size, cell_moment = cell.size_and_moment()
            if math.isinf(size):
                return RegionSizeProperties(math.inf, None)
            if cell_moment is None:
                continue
            volume += size
            moment = add(moment, cell_moment)
        logger.debug('size of %d convex cells: %g', len(cells), volume)
        if volume <= 0.0:
            return RegionSizeProperties(0.0, None)
        return RegionSizeProperties(volume, scale(moment, 1.0 / volume))

    @property
    def size(self) -> float:
        return self.compute_region_size_properties().size

    @property
    def centroid(self) -> Optional[Vec3]:
        return self.compute_region_size_properties().centroid

    # -- split ----------------------------------------------------------

    def split(self, splitter: Plane) -> Tuple['RegionBSPTree3D', 'RegionBSPTree3D']:
        """Return ``(minus, plus)``: the parts of the region on each side of ``splitter``.

        This tree is not modified.  A side with nothing of the region on it
        is an empty tree.
        """

        partitioner = splitter.span()
        minus_root, plus_root = _drive(_split_node, self._root, partitioner)

        minus_tree = type(self)()
        minus_tree._root = _internal(partitioner, minus_root, RegionNode3D(RegionLocation.OUTSIDE))
        minus_tree.condense()

        plus_tree = type(self)()
        plus_tree._root = _internal(partitioner, RegionNode3D(RegionLocation.OUTSIDE), plus_root)
        plus_tree.condense()

        logger.debug('split tree of %d nodes into %d and %d nodes',
                     self.count(), minus_tree.count(), plus_tree.count())
        return minus_tree, plus_tree

    # -- linecast -------------------------------------------------------

    def linecast(self, query: Query) -> List[LinecastPoint]:
        return linecast_boundaries(self.boundary_stream(), query)

    def linecast_first(self, query: Query) -> Optional[LinecastPoint]:
        """First boundary crossing of ``query``.

        Walks the near side of each cut first and skips whatever cannot
        hold a hit before the best one found so far.
        """

        segment = as_segment(query)
        line = segment.line
        prec = line.precision
        best: Optional[LinecastPoint] = None

        stack = [('node', self._root, None)]
        while stack:
            kind, node, limit = stack.pop()
            if limit is not None and best is not None and prec.lt(best.abscissa, limit):
                continue
            if kind == 'cut':
                for subset in self._cut_boundary(node):
                    pt = intersect_boundary(subset, segment)
                    if pt is not None and (best is None or pt.compare(best) < 0):
                        best = pt
                continue
            if node.is_leaf():
                continue

            plane = node.cut.plane
            rate = dot(plane.normal, line.direction)
            if prec.eq_zero(rate):
                side = plane.classify(line.origin)
                if side != HyperplaneLocation.MINUS:
                    stack.append(('node', node.plus, None))
                if side != HyperplaneLocation.PLUS:
                    stack.append(('node', node.minus, None))
                continue

            t = -plane.offset(line.origin) / rate
            near, far = (node.plus, node.minus) if rate < 0.0 else (node.minus, node.plus)
            if prec.lt(segment.end, t):
                stack.append(('node', near, None))
            elif prec.gt(segment.start, t):
                stack.append(('node', far, None))
            else:
                stack.append(('node', far, t))
                stack.append(('cut', node, t))
                stack.append(('node', near, None))
        return best

    def __repr__(self):
        return f'RegionBSPTree3D(count={self.count()})'


__all__ = ['RegionNode3D', 'RegionBSPTree3D', 'RegionSizeProperties']
