"""Pytest configuration shared across the suite."""

import pytest

try:
    from . import _bootstrap  # noqa: F401
except ImportError:  # pragma: no cover - rootdir-relative collection
    import _bootstrap  # type: ignore # noqa: F401


@pytest.fixture
def anyio_backend() -> str:
    """Run AnyIO-marked tests (the HTTP suite) on asyncio only."""
    return "asyncio"
