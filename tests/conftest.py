from __future__ import annotations
import pytest


def _gpu_available() -> bool:
    try:
        import cupy

        return cupy.cuda.runtime.getDeviceCount() > 0
    except Exception:
        return False


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Auto-skip tests marked 'gpu' when no CUDA device is present."""
    if _gpu_available():
        return
    skip_marker = pytest.mark.skip(reason="GPU not available for CuPy.")
    for item in items:
        if "gpu" in item.keywords:
            item.add_marker(skip_marker)


@pytest.fixture(autouse=True)
def ha_cpu():
    """Run every test on the NumPy backend unless it switches explicitly."""
    import heat_aposteriori as ha

    with ha.use("cpu", strict=False):
        yield ha
