"""Unit tests for the edge-based neighbor topology."""
import numpy as np
import pytest

from heat_aposteriori.errors import EstimatorError
from heat_aposteriori.topology import EdgeNeighborTopology, MeshTopology


def test_single_triangle_is_its_own_neighbor(ref_triangle):
    topo = EdgeNeighborTopology.from_mesh(ref_triangle)
    assert isinstance(topo, MeshTopology)
    np.testing.assert_array_equal(topo.neighbors(), [[0, 0, 0]])
    assert topo.is_boundary().all()
    assert topo.shape == (1, 3)


def test_two_triangle_square_neighbors(two_triangle_square):
    topo = EdgeNeighborTopology.from_mesh(two_triangle_square)
    nb = topo.neighbors()
    # Element 0 = [0,1,2]: edge opposite vertex 1 is the diagonal (0,2).
    # Element 1 = [0,2,3]: edge opposite vertex 3 is the diagonal (0,2).
    np.testing.assert_array_equal(nb, [[0, 1, 0], [1, 1, 0]])
    assert topo.neighbor(0, 1) == 1
    assert topo.neighbor(1, 2) == 0

    bd = {tuple(e) for e in topo.boundary_edges().tolist()}
    assert bd == {(0, 1), (1, 2), (2, 3), (0, 3)}
    assert topo.shape == (2, 5)


def test_elem2edge_and_edge2elem_consistent(square4):
    topo = EdgeNeighborTopology.from_mesh(square4)
    n_elems, n_edges = topo.shape
    # Euler: V - E + F = 1 for a disk.
    assert square4.n_nodes - n_edges + n_elems == 1
    for t in range(n_elems):
        for k in range(3):
            e = topo.elem2edge[t, k]
            assert t in topo.edge2elem[e]
            verts = sorted(square4.elem[t, [(k + 1) % 3, (k + 2) % 3]])
            assert list(topo.edge[e]) == verts


def test_neighbor_relation_is_symmetric(square4):
    topo = EdgeNeighborTopology.from_mesh(square4)
    nb = topo.neighbors()
    for t in range(nb.shape[0]):
        for k in range(3):
            s = nb[t, k]
            assert t in nb[s]
    # 4x4 grid: 16 boundary edges.
    assert topo.is_boundary().sum() == 16


def test_nonmanifold_edge_raises():
    elem = np.array([[0, 1, 2], [0, 1, 3], [1, 0, 4]])
    with pytest.raises(EstimatorError):
        EdgeNeighborTopology(elem, 5)
