import math

import pytest

from yapbsp.partition import RegionLocation, SplitLocation
from yapbsp.plane import Plane
from yapbsp.precision import PrecisionContext
from yapbsp.volume import ConvexVolume

PREC = PrecisionContext(1e-10)


def box_planes(lo, hi):
    planes = []
    for axis in range(3):
        normal = [0.0, 0.0, 0.0]
        normal[axis] = -1.0
        planes.append(Plane.from_point_and_normal(lo, normal, PREC))
        normal[axis] = 1.0
        planes.append(Plane.from_point_and_normal(hi, normal, PREC))
    return planes


def x_plane(x, sign=1.0):
    return Plane.from_point_and_normal((x, 0, 0), (sign, 0, 0), PREC)


class TestConvexVolume:
    """Convex cells built from bounding planes."""

    def test_unit_cube(self):
        cube = ConvexVolume.from_bounding_planes(box_planes((0, 0, 0), (1, 1, 1)))
        assert cube.is_finite()
        assert len(cube.boundaries) == 6
        assert cube.size == pytest.approx(1.0)
        assert cube.centroid == pytest.approx((0.5, 0.5, 0.5))
        assert len(cube.vertices()) == 8

    def test_offset_box(self):
        box = ConvexVolume.from_bounding_planes(box_planes((1, 2, 3), (3, 3, 7)))
        assert box.size == pytest.approx(8.0)
        assert box.centroid == pytest.approx((2.0, 2.5, 5.0))

    def test_boundaries_point_outward(self):
        cube = ConvexVolume.from_bounding_planes(box_planes((0, 0, 0), (1, 1, 1)))
        for b in cube.boundaries:
            assert b.plane.classify((0.5, 0.5, 0.5)).name == 'MINUS'

    def test_classify(self):
        cube = ConvexVolume.from_bounding_planes(box_planes((0, 0, 0), (1, 1, 1)))
        assert cube.classify((0.5, 0.5, 0.5)) == RegionLocation.INSIDE
        assert cube.classify((1.0, 0.5, 0.5)) == RegionLocation.BOUNDARY
        assert cube.classify((1.5, 0.5, 0.5)) == RegionLocation.OUTSIDE
        assert cube.contains((0, 0, 0))

    def test_redundant_and_repeated_planes(self):
        planes = box_planes((0, 0, 0), (1, 1, 1))
        planes.append(x_plane(5.0))
        planes.append(planes[0])
        cube = ConvexVolume.from_bounding_planes(planes)
        assert len(cube.boundaries) == 6
        assert cube.size == pytest.approx(1.0)

    def test_empty_intersection(self):
        with pytest.raises(ValueError):
            ConvexVolume.from_bounding_planes([x_plane(0.0), x_plane(1.0, -1.0)])

    def test_full(self):
        full = ConvexVolume.full()
        assert full.is_full()
        assert not full.is_finite()
        assert full.size == math.inf
        assert full.centroid is None
        assert full.contains((1e6, -1e6, 3))

    def test_half_space(self):
        half = ConvexVolume.from_bounding_planes([x_plane(0.0)])
        assert not half.is_finite()
        assert half.size == math.inf
        assert half.contains((-4, 9, 9))
        assert not half.contains((4, 9, 9))


class TestConvexVolumeSplit:
    """Splitting convex cells."""

    def test_split_cube(self):
        cube = ConvexVolume.from_bounding_planes(box_planes((0, 0, 0), (1, 1, 1)))
        result = cube.split(x_plane(0.25))
        assert result.location == SplitLocation.BOTH
        assert result.minus.size == pytest.approx(0.25)
        assert result.plus.size == pytest.approx(0.75)
        assert result.minus.centroid == pytest.approx((0.125, 0.5, 0.5))
        assert len(result.minus.boundaries) == 6

    def test_split_miss(self):
        cube = ConvexVolume.from_bounding_planes(box_planes((0, 0, 0), (1, 1, 1)))
        assert cube.split(x_plane(3.0)).minus is cube
        assert cube.split(x_plane(-3.0)).plus is cube

    def test_split_on_face(self):
        cube = ConvexVolume.from_bounding_planes(box_planes((0, 0, 0), (1, 1, 1)))
        assert cube.split(x_plane(1.0)).location == SplitLocation.MINUS
        assert cube.split(x_plane(1.0, -1.0)).location == SplitLocation.PLUS
        assert cube.split(x_plane(0.0)).location == SplitLocation.PLUS

    def test_split_full(self):
        splitter = x_plane(2.0)
        minus, plus = ConvexVolume.full().split(splitter)
        assert len(minus.boundaries) == 1
        assert len(plus.boundaries) == 1
        assert minus.boundaries[0].plane.eq(splitter)
        assert plus.boundaries[0].plane.eq(splitter.reverse())
        assert minus.size == math.inf
        assert plus.size == math.inf
