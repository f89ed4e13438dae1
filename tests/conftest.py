"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from structcopy import Copier, CopierSettings


@pytest.fixture
def settings():
    """Settings isolated from the environment's .env file."""
    return CopierSettings(_env_file=None)


@pytest.fixture
def copier(settings):
    """Fresh Copier with its own descriptor cache."""
    return Copier(settings=settings)
