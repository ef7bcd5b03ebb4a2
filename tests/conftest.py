"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.test_inputs import (
    get_reference_inputs,
    get_detailed_inputs,
)


@pytest.fixture
def reference_inputs():
    """The reference chalet: fixed expense, no escalation."""
    return get_reference_inputs()


@pytest.fixture
def detailed_inputs():
    """A chalet with every expense type, fees and ranged inputs."""
    return get_detailed_inputs()
