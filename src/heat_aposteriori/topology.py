"""Edge-based neighbor topology for triangular meshes.

The topology answers one question for the estimator: which element lies across
local edge ``k`` of element ``t``. Boundary edges point back to the element
itself, so any jump taken across them vanishes.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol, Tuple, runtime_checkable
from numpy.typing import NDArray

import numpy as np
import scipy.sparse as sp

from .config import to_cpu
from .errors import DimensionMismatch, EstimatorError

_LOGGER = logging.getLogger(__name__)

# Local edge k joins the two vertices other than k.
LOCAL_EDGES = np.array([[1, 2], [2, 0], [0, 1]], dtype=int)


@runtime_checkable
class MeshTopology(Protocol):
    """Element adjacency across local edges."""

    def neighbors(self) -> NDArray[Any]:
        """Return an (n_elems, 3) array of neighbor indices."""
        ...

    def neighbor(self, element: int, local_edge: int) -> int:
        """Return the element across ``local_edge`` of ``element``."""
        ...


class EdgeNeighborTopology:
    """Unique-edge data structure for a conforming triangulation.

    Args:
        elem (NDArray[Any]): Triangle indices (n_elems×3).
        n_nodes (Optional[int]): Number of mesh vertices. Defaults to
            ``elem.max() + 1``.

    Attributes:
        edge (NDArray[Any]): Unique undirected edges (n_edges×2), ``edge[:,0] < edge[:,1]``.
        elem2edge (NDArray[Any]): Edge index of each local edge (n_elems×3).
        edge2elem (NDArray[Any]): The two elements sharing each edge (n_edges×2);
            both entries are equal on boundary edges.
    """

    edge: NDArray[Any]
    elem2edge: NDArray[Any]
    edge2elem: NDArray[Any]

    def __init__(self, elem: Any, n_nodes: int | None = None) -> None:
        elem_np = np.asarray(to_cpu(elem))
        if elem_np.ndim != 2 or elem_np.shape[1] != 3:
            raise DimensionMismatch(f"elem must be (n_elems, 3); got {elem_np.shape}")
        elem_np = elem_np.astype(int, copy=False)
        n_elems = int(elem_np.shape[0])
        if n_nodes is None:
            n_nodes = int(elem_np.max()) + 1 if n_elems else 0

        # Stacked as all local edges 0, then 1, then 2.
        total = np.vstack([elem_np[:, LOCAL_EDGES[k]] for k in range(3)])
        lo = total.min(axis=1)
        hi = total.max(axis=1)

        # Duplicate (lo, hi) pairs are summed: data holds edge multiplicity.
        counts = sp.coo_matrix(
            (np.ones(total.shape[0], dtype=int), (lo, hi)), shape=(n_nodes, n_nodes)
        ).tocsr()
        counts.sum_duplicates()
        counts.sort_indices()

        nonmanifold = int(np.count_nonzero(counts.data > 2))
        if nonmanifold:
            _LOGGER.error(
                "EdgeNeighborTopology: %d non-manifold edge(s) (used by >2 elements).",
                nonmanifold,
            )
            raise EstimatorError(f"{nonmanifold} edge(s) shared by more than two elements")

        rows = np.repeat(np.arange(n_nodes), np.diff(counts.indptr))
        self.edge = np.column_stack((rows, counts.indices)).astype(int)
        n_edges = int(self.edge.shape[0])

        # Same sparsity pattern, data = 1-based edge id for lookups.
        ids = sp.csr_matrix(
            (np.arange(1, n_edges + 1), counts.indices, counts.indptr),
            shape=(n_nodes, n_nodes),
        )
        edge_of = np.asarray(ids[lo, hi]).ravel().astype(int) - 1
        self.elem2edge = edge_of.reshape(3, n_elems).T.copy()

        owner = np.tile(np.arange(n_elems), 3)
        # np.unique returns the index of the first occurrence of each edge.
        _, i_first = np.unique(edge_of, return_index=True)
        _, i_last = np.unique(edge_of[::-1], return_index=True)
        first = owner[i_first]
        last = owner[::-1][i_last]
        self.edge2elem = np.column_stack((first, last))

        other = np.where(first[edge_of] == owner, last[edge_of], first[edge_of])
        self._neighbor = other.reshape(3, n_elems).T.copy()

        _LOGGER.debug(
            "EdgeNeighborTopology: elems=%d edges=%d boundary=%d",
            n_elems,
            n_edges,
            int(np.count_nonzero(self.edge2elem[:, 0] == self.edge2elem[:, 1])),
        )

    @classmethod
    def from_mesh(cls, mesh: Any) -> EdgeNeighborTopology:
        """Build the topology of a `TriMesh`."""
        return cls(mesh.elem, mesh.n_nodes)

    def neighbors(self) -> NDArray[Any]:
        """Return the (n_elems, 3) neighbor array; boundary edges map to self."""
        return self._neighbor

    def neighbor(self, element: int, local_edge: int) -> int:
        """Return the element across ``local_edge`` of ``element``."""
        return int(self._neighbor[element, local_edge])

    def is_boundary(self) -> NDArray[Any]:
        """Boolean (n_elems, 3) mask of local edges on the domain boundary."""
        return self._neighbor == np.arange(self._neighbor.shape[0])[:, None]

    def boundary_edges(self) -> NDArray[Any]:
        """Return boundary edges as (n_bd×2) vertex pairs."""
        mask = self.edge2elem[:, 0] == self.edge2elem[:, 1]
        return self.edge[mask]

    @property
    def shape(self) -> Tuple[int, int]:
        """(n_elems, n_edges)."""
        return int(self._neighbor.shape[0]), int(self.edge.shape[0])
