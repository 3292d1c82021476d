"""
Common pytest fixtures for helix tests.

This module contains trajectories shared across the test modules.
"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from helix_tracks.config import HelixSettings
from helix_tracks.helix.trajectory import Helix

# Configure logging for tests
logging.getLogger("helix_tracks").setLevel(logging.DEBUG)


@pytest.fixture
def settings() -> HelixSettings:
    """Default solver settings."""
    return HelixSettings()


@pytest.fixture
def straight_line() -> Helix:
    """Straight line along the y axis through the origin."""
    return Helix(curvature=0.0, dip_angle=0.0, phase=0.0, origin=(0, 0, 0), h=1)


@pytest.fixture
def flat_helix() -> Helix:
    """Circle of radius 100 in the x-y plane centred at (-100, 0)."""
    return Helix(curvature=0.01, dip_angle=0.0, phase=0.0, origin=(0, 0, 0), h=1)


@pytest.fixture
def dipped_helix() -> Helix:
    """Negative handedness helix with dip, phase and an offset origin."""
    return Helix(curvature=0.05, dip_angle=0.3, phase=0.4, origin=(1.0, 2.0, 3.0), h=-1)


@pytest.fixture(
    params=[
        (0.0, 0.0, 0.0, (0, 0, 0), 1),
        (0.0, 0.7, -2.0, (3.0, -1.0, 5.0), -1),
        (0.01, 0.0, 0.0, (0, 0, 0), 1),
        (0.05, 0.3, 0.4, (1.0, 2.0, 3.0), -1),
        (0.2, -1.2, 2.9, (-4.0, 0.5, -7.0), 1),
        (1.5, 1.0, -3.0, (0.0, 0.0, 100.0), -1),
    ],
    ids=["line", "dipped-line", "flat", "dipped", "steep", "tight"],
)
def any_helix(request) -> Helix:
    """Straight and curved trajectories for property tests."""
    curvature, dip, phase, origin, h = request.param
    return Helix(curvature, dip, phase, np.array(origin, dtype=float), h)
