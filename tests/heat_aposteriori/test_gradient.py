"""Unit tests for P1 gradient reconstruction."""
import numpy as np
import pytest
from numpy.testing import assert_allclose

from heat_aposteriori.errors import DimensionMismatch, EstimatorError
from heat_aposteriori.gradient import GradientField, P1Gradient, gradbasis
from heat_aposteriori.mesh import TriMesh


def test_gradbasis_reference_triangle(ref_triangle):
    Dlambda, area = gradbasis(ref_triangle)
    assert Dlambda.shape == (1, 2, 3)
    assert_allclose(Dlambda[0, :, 0], [-1.0, -1.0])
    assert_allclose(Dlambda[0, :, 1], [1.0, 0.0])
    assert_allclose(Dlambda[0, :, 2], [0.0, 1.0])
    assert_allclose(area, [0.5])


def test_gradbasis_sums_to_zero(square4):
    Dlambda, _ = gradbasis(square4)
    assert_allclose(Dlambda.sum(axis=2), 0.0, atol=1e-12)


def test_linear_field_reproduced_exactly(square4):
    x, y = square4.node[:, 0], square4.node[:, 1]
    grad, area = P1Gradient().gradient_and_area(square4, 2.0 * x - 3.0 * y + 1.0)
    assert isinstance(P1Gradient(), GradientField)
    assert grad.shape == (square4.n_elems, 2)
    assert_allclose(grad, np.tile([2.0, -3.0], (square4.n_elems, 1)), atol=1e-12)
    assert_allclose(area.sum(), 1.0)


def test_clockwise_element_gives_same_gradient():
    ccw = TriMesh([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], [[0, 1, 2]])
    cw = TriMesh([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], [[0, 2, 1]])
    u = np.array([0.0, 2.0, 5.0])
    g_ccw, a_ccw = P1Gradient().gradient_and_area(ccw, u)
    g_cw, a_cw = P1Gradient().gradient_and_area(cw, u)
    assert_allclose(g_cw, g_ccw)
    assert_allclose(a_cw, a_ccw)


def test_degenerate_element_raises():
    m = TriMesh([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]], [[0, 1, 2]])
    with pytest.raises(EstimatorError):
        gradbasis(m)


def test_wrong_field_length_raises(ref_triangle):
    with pytest.raises(DimensionMismatch):
        P1Gradient().gradient_and_area(ref_triangle, np.zeros(4))
