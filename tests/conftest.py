"""Root-level pytest fixtures for the arenapat test suite.

Provides shared arena geometries, a pattern factory and Pydantic-based
configuration fixtures.
"""

import shutil
import tempfile
from pathlib import Path

import numpy as np
import pytest

from arenapat.arena import ArenaGeometry
from arenapat.codec.bitpack import BitDepth
from arenapat.pattern import Pattern
from arenapat.schemas import ParamConfig, UserConfig, resolve_config


# =============================================================================
# Arena Fixtures
# =============================================================================

@pytest.fixture
def g4_arena():
    """Full G4 arena, 4 rows x 12 columns (64 x 192 px)."""
    return ArenaGeometry("G4", 4, 12)


@pytest.fixture
def g41_arena():
    """Full G4.1 arena, 2 rows x 12 columns (32 x 192 px)."""
    return ArenaGeometry("G4.1", 2, 12)


@pytest.fixture
def g6_arena():
    """Full G6 arena, 2 rows x 10 columns (40 x 200 px)."""
    return ArenaGeometry("G6", 2, 10)


@pytest.fixture
def g6_partial_arena():
    """G6 arena with 4 of 10 columns installed (40 x 80 px)."""
    return ArenaGeometry("G6", 2, 10, columns_installed=[1, 2, 5, 9])


@pytest.fixture
def rng():
    """Seeded random generator so pixel data is reproducible."""
    return np.random.default_rng(20240611)


@pytest.fixture
def make_pattern(rng):
    """Factory fixture for random patterns that fit an arena.

    Examples
    --------
    >>> def test_roundtrip(make_pattern, g6_arena):
    ...     pattern = make_pattern(g6_arena, bit_depth=4, x_num=3)
    ...     assert pattern.num_frames == 3
    """
    def _make(geometry, bit_depth=BitDepth.BINARY, x_num=2, y_num=1, stretch=None, **ids):
        bit_depth = BitDepth.coerce(bit_depth)
        shape = geometry.frame_shape + (x_num, y_num)
        frames = rng.integers(0, bit_depth.max_value + 1, size=shape, dtype=np.uint8)
        return Pattern(frames, bit_depth=bit_depth, stretch=stretch, **ids)

    return _make


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.
    """
    def _make(**user_overrides):
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)
