import pytest

from yapbsp.triangulator import fan_triangles, triangulate_loop
from yapbsp.vector import signed_area2

L_LOOP = [(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)]


def _areas(loop, triangles):
    return [signed_area2([loop[i] for i in tri]) for tri in triangles]


def test_square_gives_two_triangles():
    square = [(0, 0), (1, 0), (1, 1), (0, 1)]
    tris = triangulate_loop(square)
    assert len(tris) == 2
    assert sum(_areas(square, tris)) == pytest.approx(1.0)


def test_non_convex_loop_covers_area():
    tris = triangulate_loop(L_LOOP)
    assert len(tris) == len(L_LOOP) - 2
    areas = _areas(L_LOOP, tris)
    assert all(a > 0 for a in areas)
    assert sum(areas) == pytest.approx(3.0)


def test_clockwise_loop_keeps_winding():
    loop = list(reversed(L_LOOP))
    areas = _areas(loop, triangulate_loop(loop))
    assert all(a < 0 for a in areas)
    assert sum(areas) == pytest.approx(-3.0)


def test_degenerate_input():
    assert triangulate_loop([(0, 0), (1, 1)]) == []


def test_fan_triangles():
    assert fan_triangles(3) == [(0, 1, 2)]
    assert fan_triangles(5) == [(0, 1, 2), (0, 2, 3), (0, 3, 4)]
    assert fan_triangles(2) == []
