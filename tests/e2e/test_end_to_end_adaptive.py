"""Estimate, mark and export on a structured mesh of the unit square.

u(x, y, t) = exp(-2 pi^2 t) sin(pi x) sin(pi y) solves u_t = Laplace(u) with
zero source; the nodal interpolant at two time levels is fed to the estimator.
"""
from pathlib import Path

import numpy as np
import pytest

from heat_aposteriori import HeatData, ResidualEstimator, TriMesh, mark

from tests.meshes import square_mesh

pytestmark = [pytest.mark.e2e]


def _exact(mesh: TriMesh, t: float) -> np.ndarray:
    x, y = mesh.node[:, 0], mesh.node[:, 1]
    return np.exp(-2.0 * np.pi**2 * t) * np.sin(np.pi * x) * np.sin(np.pi * y)


def test_estimate_mark_and_write(tmp_path: Path):
    mesh = square_mesh(8)
    dt = 1e-3
    u = _exact(mesh, 0.01)
    uold = _exact(mesh, 0.01 - dt)

    eta = ResidualEstimator().estimate(mesh, u, uold, HeatData(f=0), dt)
    assert eta.shape == (mesh.n_elems,)
    assert np.all(eta >= 0.0) and np.all(np.isfinite(eta))
    assert eta.max() > 0.0

    marked = mark(eta, theta=0.3)
    assert 0 < marked.size < mesh.n_elems
    assert eta[marked].min() >= np.delete(eta, marked).max() - 1e-12

    out = tmp_path / "eta.vtu"
    mesh.write(str(out), point_data={"u": u}, cell_data={"eta": eta})

    import meshio

    m = meshio.read(str(out))
    np.testing.assert_allclose(m.cell_data["eta"][0], eta)


def test_refined_mesh_lowers_total_estimate():
    dt = 1e-3
    totals = []
    for n in (4, 8, 16):
        mesh = square_mesh(n)
        eta = ResidualEstimator().estimate(
            mesh, _exact(mesh, 0.01), _exact(mesh, 0.01 - dt), HeatData(), dt
        )
        totals.append(float(np.sqrt(np.sum(eta**2))))
    assert totals[2] < totals[0]
