"""Quadrature rules on the reference triangle in barycentric coordinates.

Each rule returns ``(lambda, weight)`` where ``lambda`` is (n_quad×3) and the
weights sum to one, so ``sum(weight * f(points))`` is the cell average of
``f``. Degree-1 and degree-2 rules follow the usual centroid and edge-interior
points; degrees 4 and 5 are Dunavant's rules.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Tuple
from numpy.typing import NDArray

import numpy as np

from .errors import InvalidDegree

_LOGGER = logging.getLogger(__name__)


def _orbit3(a: float, b: float) -> list[list[float]]:
    """Three permutations of (a, b, b)."""
    return [[a, b, b], [b, a, b], [b, b, a]]


_RULES: Dict[int, Tuple[list, list]] = {
    1: ([[1 / 3, 1 / 3, 1 / 3]], [1.0]),
    2: (_orbit3(2 / 3, 1 / 6), [1 / 3] * 3),
    3: (
        [[1 / 3, 1 / 3, 1 / 3]] + _orbit3(0.6, 0.2),
        [-27 / 48] + [25 / 48] * 3,
    ),
    4: (
        _orbit3(0.108103018168070, 0.445948490915965)
        + _orbit3(0.816847572980459, 0.091576213509771),
        [0.223381589678011] * 3 + [0.109951743655322] * 3,
    ),
    5: (
        [[1 / 3, 1 / 3, 1 / 3]]
        + _orbit3(0.059715871789770, 0.470142064105115)
        + _orbit3(0.797426985353087, 0.101286507323456),
        [0.225] + [0.132394152788506] * 3 + [0.125939180544827] * 3,
    ),
}

MAX_DEGREE = max(_RULES)


def quadpts(degree: int) -> Tuple[NDArray[Any], NDArray[Any]]:
    """Return barycentric quadrature points and weights for ``degree``.

    Args:
        degree: Polynomial degree the rule integrates exactly (1..5).

    Raises:
        InvalidDegree: If no rule is tabulated for ``degree``.
    """
    if isinstance(degree, bool) or degree not in _RULES:
        _LOGGER.error("quadpts: unsupported degree %r", degree)
        raise InvalidDegree(
            f"quadrature degree must be an integer in 1..{MAX_DEGREE}; got {degree!r}"
        )
    lam, w = _RULES[int(degree)]
    return np.array(lam, dtype=float), np.array(w, dtype=float)
