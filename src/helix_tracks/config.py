# src/helix_tracks/config.py
"""
Configuration constants for the helix path-length solvers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# =============================================================================
# SOLVER SETTINGS
# =============================================================================


@dataclass
class HelixSettings:
    """Numerical settings shared by the helix queries and validity checks."""

    world_size: float = 1.0e5
    precision: float = 1.0e-4  # convergence of Newton refinements, length units
    max_iterations: int = 100
    min_step_size: float = 1.0e-3
    min_range: float = 10.0
    max_scan_passes: int = field(default=1000)

    def __post_init__(self):
        for name in ("world_size", "precision", "min_step_size", "min_range"):
            if not getattr(self, name) > 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("max_iterations", "max_scan_passes"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")

        if self.min_step_size > self.min_range:
            logger.warning(
                f"min_step_size ({self.min_step_size}) is larger than min_range "
                f"({self.min_range}); pairwise searches will stop after one pass."
            )


DEFAULT_SETTINGS = HelixSettings()
