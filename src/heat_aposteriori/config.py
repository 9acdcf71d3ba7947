"""Array backend and logging settings for heat-aposteriori.

The estimator kernels never import NumPy or CuPy directly for their array
math; they go through the `xp` proxy defined here, which forwards to whichever
module the active backend holds. The backend is chosen from
``HEAT_APOSTERIORI_GPU`` at import and can be switched with `configure` or,
for a block of code, with `use`. Results handed back to callers are always
NumPy arrays (see `to_cpu`).
"""

from __future__ import annotations

from dataclasses import dataclass
import contextlib
import logging
import os
from typing import Any, ContextManager, Iterator


_LOGGER = logging.getLogger("heat_aposteriori.config")
_PACKAGE_LOGGER = logging.getLogger("heat_aposteriori")

DEVICES = ("cpu", "gpu", "auto")


def _parse_log_level(val: str | int | None, default: int = logging.WARNING) -> int:
    """Map a level name such as ``"info"`` (or an int) to a `logging` level."""
    if val is None:
        return default
    if isinstance(val, int):
        return val
    lvl = getattr(logging, str(val).strip().upper(), None)
    if isinstance(lvl, int):
        return lvl
    return default


def set_log_level(level: str | int = "WARNING") -> None:
    """Set the level of the ``heat_aposteriori`` logger and its children.

    Unknown level names fall back to WARNING.
    """
    _PACKAGE_LOGGER.setLevel(_parse_log_level(level))


set_log_level(os.getenv("HEAT_APOSTERIORI_LOGLEVEL", "WARNING"))


def _requested_device() -> str:
    """Read HEAT_APOSTERIORI_GPU: truthy -> 'gpu', falsy -> 'cpu', else 'auto'."""
    raw = os.getenv("HEAT_APOSTERIORI_GPU", "").strip().lower()
    if raw in {"1", "true", "yes", "on", "gpu"}:
        return "gpu"
    if raw in {"0", "false", "no", "off", "cpu"}:
        return "cpu"
    return "auto"


@dataclass
class ArrayBackend:
    """The array module used for estimator math, with host/device transfers."""

    name: str
    is_gpu: bool
    xp: Any

    def to_cpu(self, a: Any) -> Any:
        """Return ``a`` as host memory; CuPy arrays are copied, others pass through."""
        if self.is_gpu:
            import cupy as cp

            if isinstance(a, cp.ndarray):
                return cp.asnumpy(a)
        return a

    def to_device(self, a: Any, dtype: Any | None = None) -> Any:
        """Return ``a`` as an array of this backend, cast to ``dtype`` if given."""
        return self.xp.asarray(a, dtype=dtype)

    def norm(self, v: Any, axis: int = -1, keepdims: bool = False) -> Any:
        """Euclidean length of ``v`` along ``axis``."""
        return self.xp.linalg.norm(v, axis=axis, keepdims=keepdims)


def _numpy_backend() -> ArrayBackend:
    import numpy as np

    return ArrayBackend(name="numpy", is_gpu=False, xp=np)


def _cupy_backend() -> ArrayBackend:
    """CuPy backend on the current CUDA device.

    Raises:
        RuntimeError: If CuPy sees no CUDA device.
    """
    import cupy as cp

    if cp.cuda.runtime.getDeviceCount() < 1:
        raise RuntimeError("CuPy is installed but no CUDA device is visible")
    return ArrayBackend(name="cupy", is_gpu=True, xp=cp)


def _select_backend(device: str, *, strict: bool = False) -> ArrayBackend:
    """Build the backend for ``device``.

    'gpu' falls back to NumPy unless ``strict``; 'auto' tries CuPy quietly
    and settles for NumPy.
    """
    if device not in DEVICES:
        _LOGGER.error("Unknown device %r", device)
        raise ValueError(f"unknown device {device!r}; expected one of {DEVICES}")
    if device == "cpu":
        return _numpy_backend()
    try:
        be = _cupy_backend()
    except Exception as err:
        if device == "gpu":
            if strict:
                _LOGGER.error("Requested GPU backend is unavailable: %r", err)
                raise
            _LOGGER.warning("GPU requested but unavailable (%r); estimating on NumPy.", err)
        else:
            _LOGGER.debug("No usable CuPy device (%r); estimating on NumPy.", err)
        return _numpy_backend()
    _LOGGER.info("Estimator arrays will live on the GPU (CuPy).")
    return be


class Config:
    """Holds the active `ArrayBackend` for the whole package."""

    def __init__(self) -> None:
        device = _requested_device()
        self._backend: ArrayBackend = _select_backend(device)
        _LOGGER.debug("Backend at import: requested=%s active=%s", device, self._backend.name)

    def configure(self, device: str = "auto", *, strict: bool = False) -> Config:
        """Switch the backend for all later estimator calls.

        Args:
            device: 'cpu', 'gpu' or 'auto'.
            strict: Raise instead of falling back when the GPU is unavailable.

        Returns:
            This `Config`, for chaining.
        """
        self._backend = _select_backend(device, strict=strict)
        _LOGGER.info("Backend switched to %s", self._backend.name)
        return self

    @contextlib.contextmanager
    def use(self, device: str, *, strict: bool = False) -> Iterator[None]:
        """Run a block on ``device`` and restore the previous backend afterwards."""
        prev = self._backend
        try:
            self.configure(device=device, strict=strict)
            yield
        finally:
            self._backend = prev
            _LOGGER.debug("Backend restored to %s", prev.name)

    @property
    def is_gpu(self) -> bool:
        return self._backend.is_gpu

    @property
    def backend_name(self) -> str:
        return self._backend.name

    @property
    def xp(self) -> Any:
        return self._backend.xp

    def to_cpu(self, a: Any) -> Any:
        return self._backend.to_cpu(a)

    def to_device(self, a: Any, dtype: Any | None = None) -> Any:
        return self._backend.to_device(a, dtype=dtype)

    def norm(self, v: Any, axis: int = -1, keepdims: bool = False) -> Any:
        return self._backend.norm(v, axis=axis, keepdims=keepdims)


class _XPProxy:
    """Module-like object resolving attributes on the current backend's array module."""

    def __init__(self, _cfg: Config) -> None:
        self._cfg = _cfg

    def __getattr__(self, name: str) -> Any:
        return getattr(self._cfg.xp, name)


config = Config()
xp = _XPProxy(config)


def to_cpu(a: Any) -> Any:
    """Host copy of ``a`` (no-op for NumPy data)."""
    return config.to_cpu(a)


def to_device(a: Any, dtype: Any | None = None) -> Any:
    """``a`` as an array of the active backend."""
    return config.to_device(a, dtype=dtype)


def norm(v: Any, axis: int = -1, keepdims: bool = False) -> Any:
    """Euclidean length along ``axis`` on the active backend."""
    return config.norm(v, axis=axis, keepdims=keepdims)


def is_gpu() -> bool:
    """True while estimator math runs on CuPy."""
    return config.is_gpu


def backend_name() -> str:
    """'numpy' or 'cupy'."""
    return config.backend_name


def configure(device: str = "auto", *, strict: bool = False) -> Config:
    """Switch the package backend; see `Config.configure`."""
    return config.configure(device, strict=strict)


def use(device: str, *, strict: bool = False) -> ContextManager[None]:
    """Temporarily switch the package backend; see `Config.use`."""
    return config.use(device, strict=strict)
