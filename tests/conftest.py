"""Pytest configuration for tests."""

import pytest

from mathnorm.config import ConfigManager
from mathnorm.normalizer import MathNormalizer


@pytest.fixture
def normalizer():
    """Normalizer with default settings."""
    return MathNormalizer()


@pytest.fixture
def config_manager(tmp_path):
    """Config manager writing into a temporary directory."""
    return ConfigManager(tmp_path / "mathnorm")
