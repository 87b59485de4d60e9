"""
PyTest Configuration for convselect Tests

Provides fixtures, markers, and test setup.
"""
import sys
from pathlib import Path

import pytest
import torch

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Add tests directory to path for fixtures
tests_path = Path(__file__).parent
sys.path.insert(0, str(tests_path))


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "property: mark test as property-based")
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture
def int8() -> torch.dtype:
    """Element type the family is instantiated for by default."""
    return torch.int8
