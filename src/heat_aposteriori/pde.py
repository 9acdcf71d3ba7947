"""Data of the heat equation u_t - div(d grad u) = f used by the estimator."""
from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Mapping
from typing import Any, Optional


@dataclass(frozen=True)
class HeatData:
    """PDE data bundle.

    Attributes:
        f: Source term; a callable of points (n×2), a scalar, one value per
            element, the literal 0, or None.
        g_N: Neumann data; a callable of edge midpoints (n×2), a scalar, one
            value per element, or None.
        d: Diffusion coefficient; a scalar, one value per element, a callable
            of element centroids (n×2), or None for d = 1.
    """

    f: Optional[Any] = None
    g_N: Optional[Any] = None
    d: Optional[Any] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> HeatData:
        """Build from a dict with keys ``f``, ``g_N`` (or ``g``) and ``d``."""
        g_N = data.get("g_N")
        if g_N is None:
            g_N = data.get("g")
        return cls(f=data.get("f"), g_N=g_N, d=data.get("d"))


def as_heat_data(pde: Any) -> HeatData:
    """Accept a `HeatData`, a mapping, or None."""
    if pde is None:
        return HeatData()
    if isinstance(pde, HeatData):
        return pde
    if isinstance(pde, Mapping):
        return HeatData.from_mapping(pde)
    raise TypeError(f"pde must be HeatData or a mapping; got {type(pde).__name__}")
