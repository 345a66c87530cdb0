"""Pytest configuration — adds src/ to sys.path for test discovery."""

import os
import sys

import pytest

# Add src/ to Python path so tests can import from sharepoint_mcp
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def anyio_backend() -> str:
    """Run anyio-marked tests on asyncio only."""
    return "asyncio"
