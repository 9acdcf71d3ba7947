"""Piecewise-constant gradient reconstruction for P1 finite elements."""
from __future__ import annotations

import logging
from typing import Any, Protocol, Tuple, runtime_checkable

import numpy as np

from .config import xp, to_device, to_cpu
from .errors import DimensionMismatch, EstimatorError

_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class GradientField(Protocol):
    """Per-element gradient of a nodal field."""

    def gradient_and_area(self, mesh: Any, values: Any) -> Tuple[Any, Any]:
        """Return ``(grad, area)`` with shapes (n_elems, 2) and (n_elems,)."""
        ...


def gradbasis(mesh: Any) -> Tuple[Any, Any]:
    """Gradients of the barycentric basis functions.

    Args:
        mesh: A `TriMesh`.

    Returns:
        Tuple[Any, Any]:
            - Dlambda: (n_elems, 2, 3) array, ``Dlambda[:, :, i]`` is grad(lambda_i).
            - area: absolute element areas (n_elems,).

    Raises:
        EstimatorError: If an element has zero area.
    """
    ve = mesh.edge_vectors()  # (NT, 3, 2)
    signed = mesh.signed_area()

    if to_cpu(xp.any(xp.abs(signed) <= 1e-15)):
        n_bad = int(to_cpu(xp.count_nonzero(xp.abs(signed) <= 1e-15)))
        _LOGGER.error("gradbasis: %d degenerate element(s) with ~zero area.", n_bad)
        raise EstimatorError(f"{n_bad} degenerate element(s) with zero area")

    n_cw = int(to_cpu(xp.count_nonzero(signed < 0)))
    if n_cw:
        _LOGGER.warning(
            "gradbasis: %d clockwise element(s); edge normals point inward there.",
            n_cw,
        )

    # grad(lambda_i) = rot90(ve_i) / (2 * signed area)
    two_a = 2.0 * signed
    Dlambda = xp.stack((-ve[:, :, 1], ve[:, :, 0]), axis=1) / two_a[:, None, None]
    return Dlambda, xp.abs(signed)


class P1Gradient:
    """Exact gradient of the continuous piecewise-linear interpolant."""

    def gradient_and_area(self, mesh: Any, values: Any) -> Tuple[Any, Any]:
        """Compute the constant gradient of ``values`` on every element.

        Args:
            mesh: A `TriMesh`.
            values: Nodal values, length ``mesh.n_nodes``.

        Returns:
            Tuple[Any, Any]: gradients (n_elems, 2) and areas (n_elems,).
        """
        u = to_device(values, dtype=float).reshape(-1)
        if int(u.shape[0]) != mesh.n_nodes:
            _LOGGER.error(
                "P1Gradient: %d nodal values for %d nodes.", int(u.shape[0]), mesh.n_nodes
            )
            raise DimensionMismatch(
                f"nodal field has {int(u.shape[0])} entries; mesh has {mesh.n_nodes} nodes"
            )
        Dlambda, area = gradbasis(mesh)
        t = to_device(mesh.elem)
        u_loc = u[t]  # (NT, 3)
        grad = xp.einsum("nci,ni->nc", Dlambda, u_loc)

        if _LOGGER.isEnabledFor(logging.DEBUG):
            g = np.asarray(to_cpu(grad))
            _LOGGER.debug(
                "P1Gradient: n=%d |grad| max=%.6g",
                g.shape[0],
                float(np.abs(g).max()) if g.size else 0.0,
            )
        return grad, area
