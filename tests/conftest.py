"""Configuration file for pytest."""

import copy
import sys
from pathlib import Path

import pytest

# Add src directory to the path so tests can import modules correctly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
# Shared sample documents live next to this file
sys.path.insert(0, str(Path(__file__).parent))

from sample_documents import PETSTORE_SPEC, SWAGGER_SPEC  # noqa: E402


@pytest.fixture
def petstore_spec():
    """Return a sample OpenAPI 3 document for testing."""
    return copy.deepcopy(PETSTORE_SPEC)


@pytest.fixture
def swagger_spec():
    """Return a sample Swagger 2.0 document for testing."""
    return copy.deepcopy(SWAGGER_SPEC)
