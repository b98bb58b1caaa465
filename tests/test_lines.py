import math

import pytest

from yapbsp.lines import Line2D, Line3D, LineSubset2D, Segment3D
from yapbsp.partition import HyperplaneLocation, SplitLocation
from yapbsp.precision import PrecisionContext

PREC = PrecisionContext(1e-10)


class TestLine2D:
    """Oriented 2D lines."""

    def test_minus_side_is_left(self):
        line = Line2D.from_points((0, 0), (1, 0), PREC)
        assert line.normal == pytest.approx((0, -1))
        assert line.classify((0, 1)) == HyperplaneLocation.MINUS
        assert line.classify((0, -1)) == HyperplaneLocation.PLUS
        assert line.classify((5, 0)) == HyperplaneLocation.ON

    def test_zero_direction_rejected(self):
        with pytest.raises(ValueError):
            Line2D((0, 0), (0, 0), PREC)

    def test_abscissa_and_point_at(self):
        line = Line2D.from_points((1, 1), (1, 3), PREC)
        assert line.abscissa((1, 4)) == pytest.approx(3.0)
        assert line.point_at(2.0) == pytest.approx((1, 3))

    def test_intersection(self):
        a = Line2D.from_points((0, 0), (1, 1), PREC)
        b = Line2D.from_points((0, 2), (2, 0), PREC)
        assert a.intersection(b) == pytest.approx((1, 1))
        assert a.intersection(Line2D.from_points((0, 1), (1, 2), PREC)) is None

    def test_reflect_xy_negates_abscissa(self):
        line = Line2D((1, 2), (1, 0), PREC)
        mirrored = line.reflect_xy()
        p = line.point_at(3.0)
        assert mirrored.abscissa((p[1], p[0])) == pytest.approx(-3.0)
        # minus side maps to minus side
        q = (2.0, 3.0)
        assert line.classify(q) == HyperplaneLocation.MINUS
        assert mirrored.classify((q[1], q[0])) == HyperplaneLocation.MINUS


class TestLineSubset2D:
    """Splitting intervals on 2D lines."""

    def test_split_full_line(self):
        subset = Line2D.from_points((0, 0), (1, 0), PREC).span()
        splitter = Line2D.from_points((2, 0), (2, 1), PREC)
        result = subset.split(splitter)
        assert result.location == SplitLocation.BOTH
        assert result.minus.start == -math.inf
        assert result.minus.end == pytest.approx(2.0)
        assert result.plus.start == pytest.approx(2.0)
        assert result.plus.end == math.inf

    def test_split_reversed_direction(self):
        subset = Line2D.from_points((0, 0), (-1, 0), PREC).span()
        splitter = Line2D.from_points((2, 0), (2, 1), PREC)
        minus, plus = subset.split(splitter)
        # x < 2 is still the minus side, now at the high abscissa end
        assert minus.start == pytest.approx(-2.0)
        assert minus.end == math.inf
        assert plus.start == -math.inf
        assert plus.end == pytest.approx(-2.0)
        assert minus.start_point == pytest.approx((2, 0))

    def test_one_sided(self):
        subset = LineSubset2D(Line2D.from_points((0, 0), (1, 0), PREC), 0.0, 1.0)
        splitter = Line2D.from_points((2, 0), (2, 1), PREC)
        result = subset.split(splitter)
        assert result.location == SplitLocation.MINUS
        assert result.minus is subset

    def test_touching_endpoint_stays_on_one_side(self):
        subset = LineSubset2D(Line2D.from_points((0, 0), (1, 0), PREC), 0.0, 2.0)
        splitter = Line2D.from_points((2, 0), (2, 1), PREC)
        assert subset.split(splitter).location == SplitLocation.MINUS

    def test_on_splitter(self):
        line = Line2D.from_points((0, 0), (1, 0), PREC)
        subset = LineSubset2D(line, -1.0, 1.0)
        assert subset.split(line).location == SplitLocation.NEITHER
        assert subset.split(line.reverse()).location == SplitLocation.NEITHER

    def test_parallel_infinite(self):
        subset = Line2D.from_points((0, 1), (1, 1), PREC).span()
        below = Line2D.from_points((0, 0), (1, 0), PREC)
        assert subset.split(below).location == SplitLocation.MINUS
        assert subset.split(below.reverse()).location == SplitLocation.PLUS

    def test_bad_interval(self):
        with pytest.raises(ValueError):
            LineSubset2D(Line2D((0, 0), (1, 0), PREC), 1.0, 0.0)


class TestLine3D:
    """3D lines and segments."""

    def test_origin_is_closest_point(self):
        line = Line3D((5, 1, 0), (2, 0, 0), PREC)
        assert line.origin == pytest.approx((0, 1, 0))
        assert line.direction == pytest.approx((1, 0, 0))
        assert line.abscissa((3, 1, 0)) == pytest.approx(3.0)

    def test_contains_and_distance(self):
        line = Line3D.from_points((0, 0, 0), (0, 0, 1), PREC)
        assert line.contains((0, 0, 7))
        assert line.distance((3, 4, 2)) == pytest.approx(5.0)

    def test_reverse(self):
        line = Line3D.from_points((0, 0, 0), (1, 0, 0), PREC)
        rev = line.reverse()
        assert rev.direction == pytest.approx((-1, 0, 0))
        assert rev.abscissa((2, 0, 0)) == pytest.approx(-2.0)

    def test_zero_direction_rejected(self):
        with pytest.raises(ValueError):
            Line3D((0, 0, 0), (0, 0, 0), PREC)

    def test_segment_from_points(self):
        seg = Segment3D.from_points((0, 0, 0), (2, 0, 0), PREC)
        assert seg.start == pytest.approx(0.0)
        assert seg.end == pytest.approx(2.0)
        assert seg.contains_abscissa(1.0)
        assert seg.contains_abscissa(2.0 + 1e-12)
        assert not seg.contains_abscissa(3.0)
        assert seg.contains((1, 0, 0))
        assert not seg.contains((1, 1, 0))

    def test_rays(self):
        line = Line3D.from_points((0, 0, 0), (1, 0, 0), PREC)
        ray = line.ray_from((1, 0, 0))
        assert ray.start == pytest.approx(1.0)
        assert ray.end == math.inf
        assert ray.end_point is None
        back = line.reverse_ray_to((1, 0, 0))
        assert back.start == -math.inf
        assert back.contains_abscissa(-100.0)
        assert not back.contains_abscissa(2.0)
        assert not line.span().is_finite()
