import pytest
import numpy as np

from heat_aposteriori.mesh import TriMesh
from tests.meshes import square_mesh


@pytest.fixture
def ref_triangle():
    """
    Single reference triangle:
        v0 = (0, 0)
        v1 = (1, 0)
        v2 = (0, 1)
    """
    node = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    elem = np.array([[0, 1, 2]])
    return TriMesh(node, elem)


@pytest.fixture
def two_triangle_square():
    """
    Unit square split into two triangles along the diagonal (0-2):
      v3 (0,1) ---- v2 (1,1)
        |  \\          |
        |    \\        |
        |      \\      |
      v0 (0,0) ---- v1 (1,0)
    Triangles: [0,1,2] and [0,2,3]; interior edge (0,2).
    """
    node = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    elem = np.array([[0, 1, 2], [0, 2, 3]], dtype=int)
    return TriMesh(node, elem)


@pytest.fixture
def square4():
    """4×4 structured mesh of the unit square (32 triangles)."""
    return square_mesh(4)
