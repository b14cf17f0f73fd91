"""Pytest configuration and shared fixtures for optloop tests.

This module provides:
- Deterministic RNG fixtures for numpy and torch
- Log level reset between tests
"""

import logging
import os

import numpy as np
import pytest
import torch

from optloop.diagnostics import set_debug_enabled
from optloop.logging import configure_logging


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function")
def torch_rng() -> torch.Generator:
    """Provide a deterministic CPU torch RNG for tests."""
    generator = torch.Generator(device="cpu")
    generator.manual_seed(_seed())
    return generator


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Set global numpy and torch seeds for every test."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture(scope="function", autouse=True)
def reset_global_switches():
    """Restore logging and debug mode after each test."""
    yield
    configure_logging(level=logging.WARNING)
    set_debug_enabled(False)
