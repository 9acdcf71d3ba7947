"""Unit tests for reference-triangle quadrature rules."""
import math

import numpy as np
import pytest

from heat_aposteriori.errors import InvalidDegree
from heat_aposteriori.quadrature import MAX_DEGREE, quadpts


def _monomial_average(i: int, j: int) -> float:
    """Exact average of x^i y^j over the reference triangle (area 1/2)."""
    return 2.0 * math.factorial(i) * math.factorial(j) / math.factorial(i + j + 2)


@pytest.mark.parametrize("degree", range(1, MAX_DEGREE + 1))
def test_rule_is_exact_up_to_degree(degree):
    lam, w = quadpts(degree)
    assert lam.shape == (w.shape[0], 3)
    np.testing.assert_allclose(lam.sum(axis=1), 1.0)
    np.testing.assert_allclose(w.sum(), 1.0, rtol=1e-12)

    # Reference triangle (0,0),(1,0),(0,1): x = lambda_1, y = lambda_2.
    x, y = lam[:, 1], lam[:, 2]
    for i in range(degree + 1):
        for j in range(degree + 1 - i):
            approx = float(np.sum(w * x**i * y**j))
            assert approx == pytest.approx(_monomial_average(i, j), rel=1e-9, abs=1e-12)


def test_degree_three_rule_has_four_points():
    lam, w = quadpts(3)
    assert lam.shape == (4, 3)
    assert w[0] == pytest.approx(-27 / 48)


@pytest.mark.parametrize("degree", [0, 6, -1, 2.5, True])
def test_unsupported_degree_raises(degree):
    with pytest.raises(InvalidDegree):
        quadpts(degree)
