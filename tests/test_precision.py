import math

import pytest

from yapbsp.precision import DEFAULT_EPSILON, PrecisionContext


class TestPrecisionContext:
    """Tolerance based comparisons."""

    prec = PrecisionContext(1e-6)

    def test_eq_within_epsilon(self):
        assert self.prec.eq(1.0, 1.0 + 5e-7)
        assert not self.prec.eq(1.0, 1.0 + 5e-6)

    def test_compare(self):
        assert self.prec.compare(1.0, 1.0 + 1e-9) == 0
        assert self.prec.compare(1.0, 2.0) == -1
        assert self.prec.compare(2.0, 1.0) == 1

    def test_sign(self):
        assert self.prec.sign(1e-8) == 0
        assert self.prec.sign(-1e-3) == -1
        assert self.prec.sign(1e-3) == 1

    def test_infinities(self):
        assert self.prec.eq(math.inf, math.inf)
        assert not self.prec.eq(-math.inf, math.inf)
        assert self.prec.lt(-math.inf, 0.0)
        assert self.prec.gt(math.inf, 1e300)

    def test_ordering_helpers(self):
        assert self.prec.lte(1.0, 1.0 + 1e-9)
        assert self.prec.gte(1.0 + 1e-9, 1.0)
        assert not self.prec.lt(1.0, 1.0 + 1e-9)

    def test_vec_eq(self):
        assert self.prec.vec_eq((0, 0, 1), (1e-9, 0, 1))
        assert not self.prec.vec_eq((0, 0, 1), (0, 0, 1.1))
        assert not self.prec.vec_eq((0, 0), (0, 0, 0))


@pytest.mark.parametrize('bad', [0.0, -1e-3, math.inf, math.nan, 'x', True])
def test_invalid_epsilon(bad):
    with pytest.raises(ValueError):
        PrecisionContext(bad)


def test_default_epsilon_is_usable():
    assert PrecisionContext(DEFAULT_EPSILON).epsilon == DEFAULT_EPSILON
