"""One estimate/mark step for the heat equation on the unit square.

Run with ``HEAT_APOSTERIORI_LOGLEVEL=INFO`` to see backend selection and
marking output. Writes ``eta.vtu`` with the indicators as cell data.
"""
import numpy as np

import heat_aposteriori as ha


def unit_square(n):
    xs = np.linspace(0.0, 1.0, n + 1)
    X, Y = np.meshgrid(xs, xs)
    node = np.column_stack((X.ravel(), Y.ravel()))
    elem = []
    for j in range(n):
        for i in range(n):
            v0 = j * (n + 1) + i
            elem.append([v0, v0 + 1, v0 + n + 2])
            elem.append([v0, v0 + n + 2, v0 + n + 1])
    return ha.TriMesh(node, np.array(elem))


def exact(mesh, t):
    x, y = mesh.node[:, 0], mesh.node[:, 1]
    return np.exp(-2.0 * np.pi**2 * t) * np.sin(np.pi * x) * np.sin(np.pi * y)


if __name__ == "__main__":
    mesh = unit_square(16)
    dt = 1e-3

    # Neumann data on the bottom edge (y = 0): local edges whose midpoint has y == 0.
    bd_flag = np.zeros((mesh.n_elems, 3), dtype=int)
    for k in range(3):
        mid = ha.to_cpu(mesh.edge_midpoints(k))
        bd_flag[np.isclose(mid[:, 1], 0.0), k] = 2

    pde = ha.HeatData(
        f=0,
        g_N=lambda p: -np.pi * np.exp(-2.0 * np.pi**2 * 0.05) * np.sin(np.pi * p[:, 0]),
        d=1.0,
    )
    eta = ha.ResidualEstimator().estimate(
        mesh, exact(mesh, 0.05), exact(mesh, 0.05 - dt), pde, dt, bd_flag
    )
    marked = ha.mark(eta, theta=0.3)

    print(f"eta: total={np.sqrt(np.sum(eta**2)):.4e} max={eta.max():.4e}")
    print(f"marked {marked.size} of {mesh.n_elems} elements")
    mesh.write("eta.vtu", cell_data={"eta": eta})
