import pytest

from yapbsp.bsp import RegionBSPTree3D
from yapbsp.linecast import (BoundaryList, Linecastable, LinecastPoint, linecast,
                             linecast_first, sort_and_filter)
from yapbsp.lines import Line3D
from yapbsp.mesh import build_facets
from yapbsp.plane import PlaneConvexSubset
from yapbsp.precision import PrecisionContext

PREC = PrecisionContext(1e-10)


def x_ray():
    return Line3D.from_points((-1, 0.5, 0.5), (0, 0.5, 0.5), PREC)


@pytest.fixture
def cube_tree(cube_vertices, cube_quads):
    return RegionBSPTree3D.from_mesh(cube_vertices, cube_quads, PREC)


def test_line_through_cube(cube_tree):
    line = x_ray()
    hits = linecast(cube_tree, line)
    assert len(hits) == 2
    entry, exit_ = hits
    assert entry.point == pytest.approx((0, 0.5, 0.5))
    assert entry.normal == pytest.approx((-1, 0, 0))
    assert entry.abscissa == pytest.approx(0.0)
    assert exit_.point == pytest.approx((1, 0.5, 0.5))
    assert exit_.normal == pytest.approx((1, 0, 0))
    assert exit_.abscissa == pytest.approx(1.0)
    assert exit_.line is line

    first = linecast_first(cube_tree, line)
    assert first.point == pytest.approx(entry.point)
    assert first.normal == pytest.approx(entry.normal)


def test_triangle_boundaries_dedup(cube_vertices, cube_triangles):
    triangles = []
    for facet in build_facets(cube_vertices, cube_triangles, PREC):
        triangles.extend(facet.to_convex())
    boundaries = BoundaryList(triangles)
    assert len(boundaries) == 12

    # the ray runs along the diagonals of the two x faces
    line = Line3D.from_points((-1, 0.5, 0.5), (2, 0.5, 0.5), PREC)
    shifted = Line3D.from_points((-1, 0.25, 0.25), (2, 0.25, 0.25), PREC)
    for query in (line, shifted):
        hits = linecast(boundaries, query)
        assert [h.normal for h in hits] == [pytest.approx((-1, 0, 0)),
                                           pytest.approx((1, 0, 0))]


def test_miss(cube_tree):
    line = Line3D.from_points((-1, 5, 0.5), (0, 5, 0.5), PREC)
    assert linecast(cube_tree, line) == []
    assert linecast_first(cube_tree, line) is None


def test_ray_from_inside(cube_tree):
    ray = x_ray().ray_from((0.5, 0.5, 0.5))
    hits = linecast(cube_tree, ray)
    assert len(hits) == 1
    assert hits[0].point == pytest.approx((1, 0.5, 0.5))
    assert linecast_first(cube_tree, ray).normal == pytest.approx((1, 0, 0))

    back = x_ray().reverse_ray_to((0.5, 0.5, 0.5))
    assert linecast_first(cube_tree, back).point == pytest.approx((0, 0.5, 0.5))


def test_segment_inside_region_misses(cube_tree):
    line = x_ray()
    inner = line.segment(line.abscissa((0.25, 0.5, 0.5)), line.abscissa((0.75, 0.5, 0.5)))
    assert linecast(cube_tree, inner) == []
    assert linecast_first(cube_tree, inner) is None


def test_parallel_boundary_is_skipped(cube_tree):
    # lies in the z=0 face plane
    line = Line3D.from_points((-1, 0.5, 0), (2, 0.5, 0), PREC)
    hits = linecast(cube_tree, line)
    assert all(h.normal != pytest.approx((0, 0, -1)) for h in hits)


class TestTieBreak:
    """Coincident hits on different boundaries keep the first in sorted order."""

    def _faces(self):
        x_face = PlaneConvexSubset.from_vertices(
            [(0, 0, 0), (0, 0, 1), (0, 1, 1), (0, 1, 0)], PREC)
        y_face = PlaneConvexSubset.from_vertices(
            [(0, 0, 0), (1, 0, 0), (1, 0, 1), (0, 0, 1)], PREC)
        return x_face, y_face

    def test_normals(self):
        x_face, y_face = self._faces()
        assert x_face.plane.normal == pytest.approx((-1, 0, 0))
        assert y_face.plane.normal == pytest.approx((0, -1, 0))

    @pytest.mark.parametrize('reverse', [False, True])
    def test_order_independent(self, reverse):
        faces = list(self._faces())
        if reverse:
            faces.reverse()
        line = Line3D.from_points((-1, -1, 0.5), (1, 1, 0.5), PREC)
        hits = linecast(faces, line)
        assert len(hits) == 1
        assert hits[0].point == pytest.approx((0, 0, 0.5))
        assert hits[0].normal == pytest.approx((-1, 0, 0))
        first = linecast_first(faces, line)
        assert first.normal == pytest.approx((-1, 0, 0))

    def test_sort_and_filter(self):
        line = x_ray()
        a = LinecastPoint((0.0, 0.5, 0.5), (0.0, -1.0, 0.0), line, 0.0)
        b = LinecastPoint((0.0, 0.5, 0.5), (-1.0, 0.0, 0.0), line, 0.0)
        c = LinecastPoint((1.0, 0.5, 0.5), (1.0, 0.0, 0.0), line, 1.0)
        kept = sort_and_filter([c, a, b])
        assert kept == [b, c]


class _Recorder:
    def __init__(self):
        self.calls = []

    def linecast(self, query):
        self.calls.append('linecast')
        return []

    def linecast_first(self, query):
        self.calls.append('linecast_first')
        return None


def test_dispatch_to_linecastable():
    source = _Recorder()
    assert isinstance(source, Linecastable)
    line = x_ray()
    assert linecast(source, line) == []
    assert linecast_first(source, line) is None
    assert source.calls == ['linecast', 'linecast_first']


def test_tree_is_linecastable(cube_tree):
    assert isinstance(cube_tree, Linecastable)
    assert not isinstance(BoundaryList(), Linecastable)


def test_plain_list_source(cube_tree):
    hits = linecast(cube_tree.boundaries(), x_ray())
    assert len(hits) == 2
