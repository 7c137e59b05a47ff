"""Shared pytest fixtures for the flower field test suite.

Every fixture injects a seeded random.Random so runs are reproducible.
"""

import logging
import random

import pytest

from flower_field.field import FlowerField


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def field() -> FlowerField:
    return FlowerField(rng=random.Random(42))


@pytest.fixture()
def restore_logging():
    """Undo configure_logging() changes to the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
