"""Module defining the TriMesh class for planar triangular meshes.

This module provides:
  - Construction from node/element arrays, with shape and index validation.
  - Loading and saving through meshio (cell data such as estimator values).
  - Vectorized geometry: centroids, signed areas, opposite-edge vectors.

Local edge ``k`` of a triangle is the edge opposite its vertex ``k``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple
from numpy.typing import NDArray

import numpy as np
import meshio

from .config import xp, to_device, to_cpu, backend_name
from .errors import DimensionMismatch

_LOGGER = logging.getLogger(__name__)


class TriMesh:
    """Planar triangular mesh with counter-clockwise connectivity.

    Storage stays on CPU (NumPy); geometry helpers compute on the active
    backend and return backend arrays.

    Args:
        node (NDArray[Any]): Vertex coordinates (n_nodes×2). An (n_nodes×3)
            array is accepted when every z coordinate is zero.
        elem (NDArray[Any]): Triangle indices (n_elems×3), 0-based.

    Attributes:
        node (NDArray[Any]): Vertex array, shape (n_nodes, 2).
        elem (NDArray[Any]): Triangle indices, shape (n_elems, 3).
    """

    node: NDArray[Any]
    elem: NDArray[Any]

    def __init__(self, node: Any, elem: Any) -> None:
        node_np = np.asarray(to_cpu(node), dtype=float)
        elem_np = np.asarray(to_cpu(elem))

        if node_np.ndim != 2 or node_np.shape[1] not in (2, 3):
            _LOGGER.error("TriMesh: node must be (n, 2); got %s", node_np.shape)
            raise DimensionMismatch(f"node must be (n_nodes, 2); got {node_np.shape}")
        if node_np.shape[1] == 3:
            if not np.allclose(node_np[:, 2], 0.0):
                _LOGGER.error("TriMesh: non-planar node array (z != 0).")
                raise DimensionMismatch("node has non-zero z coordinates; mesh must be planar")
            node_np = node_np[:, :2]

        if elem_np.ndim != 2 or elem_np.shape[1] != 3:
            _LOGGER.error("TriMesh: elem must be (n, 3); got %s", elem_np.shape)
            raise DimensionMismatch(f"elem must be (n_elems, 3); got {elem_np.shape}")
        if elem_np.size and not np.issubdtype(elem_np.dtype, np.integer):
            if not np.all(np.equal(np.mod(elem_np, 1), 0)):
                raise DimensionMismatch("elem contains non-integer indices")
        elem_np = elem_np.astype(int, copy=False)
        if elem_np.size and ((elem_np < 0).any() or (elem_np >= node_np.shape[0]).any()):
            _LOGGER.error("TriMesh: connectivity has out-of-range indices.")
            raise DimensionMismatch("elem contains out-of-range vertex indices")

        self.node = np.ascontiguousarray(node_np)
        self.elem = np.ascontiguousarray(elem_np)

        _LOGGER.debug(
            "TriMesh initialized with %d nodes and %d elements (backend=%s)",
            self.n_nodes,
            self.n_elems,
            backend_name(),
        )

    @property
    def n_nodes(self) -> int:
        """Number of vertices."""
        return int(self.node.shape[0])

    @property
    def n_elems(self) -> int:
        """Number of triangles."""
        return int(self.elem.shape[0])

    def vertices(self) -> Tuple[Any, Any, Any]:
        """Return the three vertex coordinate arrays (each n_elems×2) on device."""
        n = to_device(self.node, dtype=float)
        t = to_device(self.elem)
        return n[t[:, 0]], n[t[:, 1]], n[t[:, 2]]

    def centroids(self) -> Any:
        """Triangle centroids, shape (n_elems, 2)."""
        a, b, c = self.vertices()
        return (a + b + c) / 3.0

    def edge_vectors(self) -> Any:
        """Opposite-edge vectors, shape (n_elems, 3, 2).

        ``ve[:, 0] = v2 - v1``, ``ve[:, 1] = v0 - v2``, ``ve[:, 2] = v1 - v0``.
        """
        a, b, c = self.vertices()
        return xp.stack((c - b, a - c, b - a), axis=1)

    def signed_area(self) -> Any:
        """Signed triangle areas; positive for counter-clockwise elements."""
        ve = self.edge_vectors()
        # 0.5 * cross(ve2, ve1) in 2D
        return 0.5 * (-ve[:, 2, 0] * ve[:, 1, 1] + ve[:, 2, 1] * ve[:, 1, 0])

    def area(self) -> Any:
        """Absolute triangle areas."""
        return xp.abs(self.signed_area())

    def edge_midpoints(self, k: int) -> Any:
        """Midpoints of local edge ``k`` (opposite vertex ``k``) of every element."""
        n = to_device(self.node, dtype=float)
        t = to_device(self.elem)
        i = (k + 1) % 3
        j = (k + 2) % 3
        return 0.5 * (n[t[:, i]] + n[t[:, j]])

    @classmethod
    def read(cls, filename: str) -> TriMesh:
        """Load a triangle mesh through meshio.

        Only the "triangle" cell blocks are used; other cell types are ignored.

        Args:
            filename: Any path meshio can read (e.g. ``.msh``, ``.vtu``, ``.obj``).

        Raises:
            DimensionMismatch: If the file holds no triangle cells.
        """
        m = meshio.read(filename)
        blocks = [c.data for c in m.cells if c.type == "triangle"]
        if not blocks:
            _LOGGER.error("TriMesh.read: no triangle cells in '%s'.", filename)
            raise DimensionMismatch(f"no triangle cells found in {filename!r}")
        elem = np.vstack(blocks)
        _LOGGER.info(
            "Loaded mesh from %s with %d nodes and %d triangles",
            filename,
            m.points.shape[0],
            elem.shape[0],
        )
        return cls(m.points, elem)

    def write(
        self,
        filename: str,
        point_data: Optional[Dict[str, NDArray[Any]]] = None,
        cell_data: Optional[Dict[str, NDArray[Any]]] = None,
    ) -> None:
        """Export this mesh (and optional point/cell data) through meshio.

        Accepts NumPy or CuPy arrays; all data are converted to NumPy on CPU
        before writing.

        Args:
            filename: Output path (e.g., ``"eta.vtu"``).
            point_data: Optional dict of per-node arrays.
            cell_data: Optional dict of per-triangle arrays (e.g. ``{"eta": eta}``).

        Raises:
            DimensionMismatch: If provided data have incompatible lengths.
        """
        # meshio writers expect 3D points for VTK formats.
        pts = np.column_stack((self.node, np.zeros(self.n_nodes)))
        m = meshio.Mesh(points=pts, cells=[("triangle", self.elem)])

        for name, arr in (point_data or {}).items():
            arr_np = np.asarray(to_cpu(arr))
            if arr_np.shape[0] != self.n_nodes:
                msg = f"point_data['{name}'] length {arr_np.shape[0]} != n_nodes {self.n_nodes}"
                _LOGGER.error("write: %s", msg)
                raise DimensionMismatch(msg)
            m.point_data[name] = arr_np

        normalized: Dict[str, List[NDArray[Any]]] = {}
        for name, arr in (cell_data or {}).items():
            arr_np = np.asarray(to_cpu(arr))
            if arr_np.shape[0] != self.n_elems:
                msg = f"cell_data['{name}'] length {arr_np.shape[0]} != n_elems {self.n_elems}"
                _LOGGER.error("write: %s", msg)
                raise DimensionMismatch(msg)
            normalized[name] = [arr_np]
        m.cell_data = normalized

        try:
            m.write(filename)
        except Exception:
            _LOGGER.exception("write failed for '%s'.", filename)
            raise
        _LOGGER.info(
            "Mesh written to '%s' (nodes=%d, tris=%d, point_data=%d, cell_data=%d)",
            filename,
            self.n_nodes,
            self.n_elems,
            len(point_data or {}),
            len(normalized),
        )

    def __repr__(self) -> str:
        return f"TriMesh(n_nodes={self.n_nodes}, n_elems={self.n_elems})"
