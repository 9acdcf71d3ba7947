"""Tests for backend selection and package logging."""
from __future__ import annotations
import importlib
import logging

import numpy as np
import pytest

from heat_aposteriori.config import (
    backend_name,
    configure,
    is_gpu,
    norm,
    set_log_level,
    to_cpu,
    to_device,
    use,
)

# The package re-exports the `config` instance, which shadows the submodule
# attribute, so fetch the module itself.
cfg = importlib.import_module("heat_aposteriori.config")


def test_numpy_backend_transfers_are_host_arrays():
    configure("cpu")
    assert backend_name() == "numpy"
    assert is_gpu() is False
    a = to_device([[3.0, 4.0], [0.0, 2.0]], dtype=float)
    assert isinstance(to_cpu(a), np.ndarray)
    np.testing.assert_allclose(norm(a, axis=1), [5.0, 2.0])
    np.testing.assert_allclose(norm(a, axis=1, keepdims=True), [[5.0], [2.0]])


def test_use_restores_previous_backend_after_error():
    prev = backend_name()
    with pytest.raises(RuntimeError):
        with use("cpu"):
            raise RuntimeError("boom")
    assert backend_name() == prev


@pytest.mark.parametrize("device", ["tpu", "GPU0", ""])
def test_unknown_device_rejected(device):
    with pytest.raises(ValueError):
        configure(device)


@pytest.mark.parametrize(
    "raw, expected",
    [("1", "gpu"), ("on", "gpu"), ("cpu", "cpu"), ("0", "cpu"), ("", "auto"), ("maybe", "auto")],
)
def test_requested_device_from_environment(monkeypatch, raw, expected):
    monkeypatch.setenv("HEAT_APOSTERIORI_GPU", raw)
    assert cfg._requested_device() == expected


def test_set_log_level_by_name_and_fallback():
    pkg = logging.getLogger("heat_aposteriori")
    set_log_level("info")
    assert pkg.level == logging.INFO
    set_log_level("not-a-level")
    assert pkg.level == logging.WARNING
