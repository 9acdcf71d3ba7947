"""Exceptions raised by heat-aposteriori.

All errors derive from `EstimatorError`, itself a `ValueError`, so callers that
already guard numerical routines with ``except ValueError`` keep working.
"""


class EstimatorError(ValueError):
    """Base error for invalid estimator input (degenerate mesh, bad dt, ...)."""


class DimensionMismatch(EstimatorError):
    """Array shapes of mesh, solution or marker data are inconsistent."""


class InvalidDegree(EstimatorError):
    """Requested quadrature degree has no tabulated rule."""
