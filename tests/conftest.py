"""
Test configuration and fixtures for the sprite generator.

Provides small configs, seeded random streams and hand-built masks so stage
tests stay fast and independent of the full pipeline.
"""

import os
import sys

import numpy as np
import pytest

# Ensure repo root is on sys.path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from spritegen.config.schemas import MonsterConfig
from spritegen.monster.rng import RandomSource


@pytest.fixture
def default_config():
    """Small, seeded configuration"""
    return MonsterConfig(dimension=32, margin=3, seed=1)


@pytest.fixture
def seeded_rng():
    return RandomSource(1234)


def make_ellipse_mask(dimension, cx, cy, rx, ry):
    ys, xs = np.ogrid[:dimension, :dimension]
    return ((xs - cx) / rx) ** 2 + ((ys - cy) / ry) ** 2 <= 1.0


@pytest.fixture
def ellipse_mask():
    """24x24 grid with a centred 7x5 ellipse"""
    return make_ellipse_mask(24, 12, 12, 7, 5)


@pytest.fixture
def head_mask():
    """48x48 grid with a head-like blob in the top third"""
    return make_ellipse_mask(48, 24, 10, 8, 6)
