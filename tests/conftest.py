import pytest

from meshes import CUBE_QUADS, CUBE_TRIANGLES, CUBE_VERTICES
from yapbsp.precision import PrecisionContext


@pytest.fixture
def precision():
    return PrecisionContext(1e-10)


@pytest.fixture
def cube_vertices():
    return list(CUBE_VERTICES)


@pytest.fixture
def cube_quads():
    return [list(f) for f in CUBE_QUADS]


@pytest.fixture
def cube_triangles():
    return [list(f) for f in CUBE_TRIANGLES]
