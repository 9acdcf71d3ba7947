"""Residual-type a posteriori error estimator for the heat equation.

For a P1 solution ``u`` at time level n and ``uold`` at level n-1 the
indicator of element T is

    eta_T^2 = |J_T| * |T|^(1/2) + eps_T^2 + r_T^2

with

    J_T   = 1/2 * sum_E ([K grad u . n_E]^2 - [grad uold . n_E]^2)
    eps_T = (sum(K grad u) - sum(grad uold)) * |T|
    r_T   = ((ubar_T - uoldbar_T) / dt - avg_T(f)) * |T|

``n_E`` is the right 90 degree rotation of the edge vector, so it has the edge
length as magnitude and ``[.]^2`` already carries the length weight. On
Neumann edges the jump of element T is replaced by ``|T| (g_N - K grad u . n)^2``
with the unit normal ``n``.

All quantities are computed for every element at once on the active array
backend; the only loops run over the three local edges and the quadrature
points.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
from numpy.typing import NDArray

from .config import xp, to_device, to_cpu, norm, backend_name
from .errors import DimensionMismatch, EstimatorError
from .fields import ConstantField, as_field, is_zero
from .gradient import GradientField, P1Gradient
from .mesh import TriMesh
from .pde import HeatData, as_heat_data
from .quadrature import quadpts
from .topology import EdgeNeighborTopology, MeshTopology

_LOGGER = logging.getLogger(__name__)

NEUMANN = 2


@dataclass(frozen=True)
class EstimatorTerms:
    """All per-element terms of one estimator evaluation (NumPy, CPU).

    Attributes:
        eta: Final indicator, non-negative.
        edge_jump: Squared flux jumps of ``u`` (Neumann edges substituted).
        edge_jump_old: Squared flux jumps of ``uold``.
        elem_residual: Quadrature average of the source over each element.
        elem_time_residual: ``(ut / dt - elem_residual) * area``.
        epsilon_residual: ``(sum(Du) - sum(Duold)) * area``.
        area: Element areas.
    """

    eta: NDArray[Any]
    edge_jump: NDArray[Any]
    edge_jump_old: NDArray[Any]
    elem_residual: NDArray[Any]
    elem_time_residual: NDArray[Any]
    epsilon_residual: NDArray[Any]
    area: NDArray[Any]


def _jump_sum(Du: Any, nb: Any, ne: Any) -> Any:
    """Sum over local edges of ``dot(Du - Du[neighbor], ne)^2``."""
    out = xp.zeros(Du.shape[0], dtype=float)
    for k in range(3):
        out = out + xp.sum((Du - Du[nb[:, k]]) * ne[:, k, :], axis=1) ** 2
    return out


class ResidualEstimator:
    """Element indicators for adaptive space/time refinement of the heat equation.

    Args:
        topology: Neighbor lookup. Built from the mesh on every call when None.
        gradient: Gradient reconstruction. Defaults to `P1Gradient`.
        quad_degree: Degree of the quadrature rule used for the source term.

    Raises:
        InvalidDegree: If ``quad_degree`` has no tabulated rule.
    """

    def __init__(
        self,
        topology: Optional[MeshTopology] = None,
        gradient: Optional[GradientField] = None,
        quad_degree: int = 3,
    ) -> None:
        quadpts(quad_degree)  # fail fast on unsupported degrees
        self.topology = topology
        self.gradient = gradient if gradient is not None else P1Gradient()
        self.quad_degree = quad_degree

    def estimate(
        self,
        mesh: TriMesh,
        u: Any,
        uold: Any,
        pde: Any,
        dt: float,
        bd_flag: Optional[Any] = None,
    ) -> NDArray[Any]:
        """Return one non-negative indicator per element.

        Args:
            mesh: The triangulation.
            u: Nodal solution at the current time level.
            uold: Nodal solution at the previous time level.
            pde: `HeatData` (or a mapping with keys ``f``, ``g_N``, ``d``).
            dt: Time-step size, positive.
            bd_flag: Optional (n_elems×3) edge markers; edges marked 2 are
                Neumann edges. When None no Neumann correction is applied.
        """
        return self.terms(mesh, u, uold, pde, dt, bd_flag).eta

    def terms(
        self,
        mesh: TriMesh,
        u: Any,
        uold: Any,
        pde: Any,
        dt: float,
        bd_flag: Optional[Any] = None,
    ) -> EstimatorTerms:
        """Evaluate the estimator and return every intermediate term."""
        pde = as_heat_data(pde)
        dt = float(dt)
        if not (math.isfinite(dt) and dt > 0.0):
            _LOGGER.error("estimate: invalid time step dt=%r", dt)
            raise EstimatorError(f"dt must be a positive finite number; got {dt!r}")

        n_elems = mesh.n_elems
        _LOGGER.debug(
            "estimate: n_elems=%d dt=%.6g backend=%s", n_elems, dt, backend_name()
        )

        # ---- Flux ---------------------------------------------------------------
        Du, area = self.gradient.gradient_and_area(mesh, u)
        Duold, _ = self.gradient.gradient_and_area(mesh, uold)
        d_field = as_field(pde.d)
        if d_field is not None:
            K = d_field.at(mesh.centroids())
            Du = K[:, None] * Du

        # ---- Jump of normal flux -----------------------------------------------
        topology = self.topology
        if topology is None:
            topology = EdgeNeighborTopology.from_mesh(mesh)
        nb_cpu = np.asarray(topology.neighbors())
        if nb_cpu.shape != (n_elems, 3):
            _LOGGER.error("estimate: neighbor array shape %s", nb_cpu.shape)
            raise DimensionMismatch(
                f"neighbor array must be ({n_elems}, 3); got {nb_cpu.shape}"
            )
        nb = to_device(nb_cpu)

        ve = mesh.edge_vectors()
        # scaled normal: right 90 degree rotation of the edge vector
        ne = xp.stack((ve[:, :, 1], -ve[:, :, 0]), axis=2)

        edge_jump = _jump_sum(Du, nb, ne)
        edge_jump_old = _jump_sum(Duold, nb, ne)

        # ---- Neumann edges -------------------------------------------------------
        if bd_flag is not None:
            bd = np.asarray(to_cpu(bd_flag))
            if bd.shape != (n_elems, 3):
                _LOGGER.error("estimate: bd_flag shape %s", bd.shape)
                raise DimensionMismatch(f"bd_flag must be ({n_elems}, 3); got {bd.shape}")
            g_field = as_field(pde.g_N)
            if g_field is None:
                if (bd == NEUMANN).any():
                    _LOGGER.warning(
                        "estimate: Neumann edges flagged but no g_N given; correction skipped."
                    )
            else:
                for k in range(3):
                    idx_cpu = bd[:, k] == NEUMANN
                    if not idx_cpu.any():
                        continue
                    idx = to_device(idx_cpu)
                    n_k = ne[idx, k, :]
                    n_unit = n_k / norm(n_k, axis=1, keepdims=True)
                    if isinstance(g_field, ConstantField):
                        # per-element data is indexed by owning element
                        g = g_field.at(mesh.edge_midpoints(k))[idx]
                    else:
                        g = g_field.at(mesh.edge_midpoints(k)[idx])
                    flux_n = xp.sum(Du[idx] * n_unit, axis=1)
                    edge_jump[idx] = (g - flux_n) ** 2 * area[idx]
                    _LOGGER.debug("estimate: %d Neumann edge(s) on local edge %d", int(idx_cpu.sum()), k)

        # ---- Elementwise residual ----------------------------------------------
        elem_residual = xp.zeros(n_elems, dtype=float)
        if pde.f is not None and not is_zero(pde.f):
            f_field = as_field(pde.f)
            if isinstance(f_field, ConstantField):
                # constant data is its own cell average
                elem_residual = elem_residual + f_field.at(mesh.centroids())
            else:
                lam, weight = quadpts(self.quad_degree)
                a, b, c = mesh.vertices()
                for p in range(lam.shape[0]):
                    pxy = lam[p, 0] * a + lam[p, 1] * b + lam[p, 2] * c
                    elem_residual = elem_residual + weight[p] * f_field.at(pxy)

        # ---- Time and space terms ------------------------------------------------
        t = to_device(mesh.elem)
        un = xp.mean(to_device(u, dtype=float).reshape(-1)[t], axis=1)
        un1 = xp.mean(to_device(uold, dtype=float).reshape(-1)[t], axis=1)
        ut = un - un1

        gru = xp.sum(Du, axis=1)
        gruold = xp.sum(Duold, axis=1)
        epsilon_residual = (gru - gruold) * area
        elem_time_residual = (ut / dt - elem_residual) * area
        edge_jumps = (edge_jump - edge_jump_old) / 2.0

        eta = xp.sqrt(
            xp.abs(edge_jumps) * xp.sqrt(area)
            + epsilon_residual**2
            + elem_time_residual**2
        )

        terms = EstimatorTerms(
            eta=np.asarray(to_cpu(eta)),
            edge_jump=np.asarray(to_cpu(edge_jump)),
            edge_jump_old=np.asarray(to_cpu(edge_jump_old)),
            elem_residual=np.asarray(to_cpu(elem_residual)),
            elem_time_residual=np.asarray(to_cpu(elem_time_residual)),
            epsilon_residual=np.asarray(to_cpu(epsilon_residual)),
            area=np.asarray(to_cpu(area)),
        )
        if _LOGGER.isEnabledFor(logging.DEBUG) and n_elems:
            _LOGGER.debug(
                "estimate: eta min=%.6g max=%.6g l2=%.6g",
                float(np.nanmin(terms.eta)),
                float(np.nanmax(terms.eta)),
                float(np.sqrt(np.nansum(terms.eta**2))),
            )
        return terms


def estimate_residual_heat(
    node: Any,
    elem: Any,
    u: Any,
    pde: Any,
    uold: Any,
    dt: float,
    bd_flag: Optional[Any] = None,
) -> NDArray[Any]:
    """Functional entry point taking raw node/element arrays.

    Argument order follows the toolbox convention ``(node, elem, u, pde,
    uold, dt, bd_flag)``. See `ResidualEstimator.estimate`.
    """
    return ResidualEstimator().estimate(TriMesh(node, elem), u, uold, pde, dt, bd_flag)
