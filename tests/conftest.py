"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Add tests to path for gcp_mock imports
tests_path = Path(__file__).parent
sys.path.insert(0, str(tests_path))

from gcp_mock import FakeClock, RecordingMetrics  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock for the operation poll loop."""
    return FakeClock()


@pytest.fixture
def metrics() -> RecordingMetrics:
    """Metrics recorder collecting every action."""
    return RecordingMetrics()
