"""Coefficient fields: a precomputed array or a callable of coordinates.

PDE data such as the diffusion coefficient may be given either as values
already attached to the elements or as a function evaluated at points. Both are
resolved once into one of two field types before any array math happens.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import numbers
from typing import Any, Callable, Optional, Union

import numpy as np

from .config import xp, to_device
from .errors import DimensionMismatch

_LOGGER = logging.getLogger(__name__)


def _per_point(values: Any, n: int, source: str) -> Any:
    """Flatten ``values`` to length ``n``; a single value is repeated."""
    if values.size == 1:
        return xp.full(n, float(values.reshape(-1)[0]))
    if values.size != n:
        _LOGGER.error("%s: %d values for %d points", source, int(values.size), n)
        raise DimensionMismatch(
            f"{source} produced {int(values.size)} values; expected 1 or {n}"
        )
    return values.reshape(-1)


@dataclass(frozen=True)
class ConstantField:
    """Values given up front: a scalar or one value per element."""

    values: Any

    def at(self, points: Any) -> Any:
        """Return the stored values broadcast to ``len(points)`` entries.

        Raises:
            DimensionMismatch: If more than one value is stored and the count
                differs from the number of points.
        """
        return _per_point(to_device(self.values, dtype=float), int(points.shape[0]), "field data")


@dataclass(frozen=True)
class FunctionField:
    """A callable ``fn(points) -> values`` with points of shape (n, 2)."""

    fn: Callable[[Any], Any]

    def at(self, points: Any) -> Any:
        """Evaluate the function at ``points``, one value per point."""
        out = to_device(self.fn(points), dtype=float)
        return _per_point(out, int(points.shape[0]), "field function")


Field = Union[ConstantField, FunctionField]


def is_zero(obj: Any) -> bool:
    """True if ``obj`` is the literal numeric zero (scalar or all-zero array)."""
    if obj is None or callable(obj):
        return False
    if isinstance(obj, ConstantField):
        obj = obj.values
    if isinstance(obj, numbers.Number):
        return obj == 0
    try:
        arr = np.asarray(obj)
    except (TypeError, ValueError):
        return False
    return bool(arr.dtype.kind in "biuf" and arr.size > 0 and not arr.any())


def as_field(obj: Any) -> Optional[Field]:
    """Resolve user PDE data into a field, or None when absent.

    Args:
        obj: None, a number, an array-like, a callable, or an existing field.

    Raises:
        TypeError: If ``obj`` is none of the above, or is complex-valued.
    """
    if obj is None:
        return None
    if isinstance(obj, (ConstantField, FunctionField)):
        return obj
    if callable(obj):
        return FunctionField(obj)
    arr = np.asarray(obj)
    if arr.dtype.kind not in "biuf":
        _LOGGER.error("as_field: unsupported data of dtype %s", arr.dtype)
        raise TypeError(f"field data must be real numbers or a callable; got {arr.dtype}")
    return ConstantField(arr.astype(float))
