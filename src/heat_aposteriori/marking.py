"""Select elements for refinement from estimator values."""
from __future__ import annotations

import logging
from typing import Any
from numpy.typing import NDArray

import numpy as np

from .config import to_cpu
from .errors import EstimatorError

_LOGGER = logging.getLogger(__name__)

STRATEGIES = ("bulk", "max")


def mark(eta: Any, theta: float = 0.5, strategy: str = "bulk") -> NDArray[Any]:
    """Return sorted indices of the elements to refine.

    Args:
        eta: Per-element indicators.
        theta: Marking parameter in (0, 1].
        strategy: ``"bulk"`` marks the fewest elements whose squared
            indicators sum to at least ``theta * sum(eta**2)`` (Doerfler).
            ``"max"`` marks every element with ``eta >= theta * max(eta)``.

    Raises:
        EstimatorError: On an unknown strategy or ``theta`` outside (0, 1].
    """
    if strategy not in STRATEGIES:
        _LOGGER.error("mark: unknown strategy %r", strategy)
        raise EstimatorError(f"strategy must be one of {STRATEGIES}; got {strategy!r}")
    if not (0.0 < theta <= 1.0):
        _LOGGER.error("mark: theta=%r outside (0, 1]", theta)
        raise EstimatorError(f"theta must lie in (0, 1]; got {theta!r}")

    e = np.asarray(to_cpu(eta), dtype=float).reshape(-1)
    if e.size == 0:
        return np.zeros(0, dtype=int)
    if not np.isfinite(e).all():
        _LOGGER.error("mark: %d non-finite indicator(s)", int((~np.isfinite(e)).sum()))
        raise EstimatorError("eta contains non-finite values")
    if e.max() <= 0.0:
        _LOGGER.debug("mark: all indicators are zero; nothing to refine")
        return np.zeros(0, dtype=int)

    if strategy == "max":
        marked = np.flatnonzero(e >= theta * e.max())
    else:
        e2 = e**2
        order = np.argsort(-e2, kind="stable")
        cumulative = np.cumsum(e2[order])
        n_marked = int(np.searchsorted(cumulative, theta * cumulative[-1]) + 1)
        marked = np.sort(order[: min(n_marked, e.size)])

    _LOGGER.info(
        "mark: %d of %d element(s) marked (strategy=%s, theta=%.3g)",
        marked.size,
        e.size,
        strategy,
        theta,
    )
    return marked
