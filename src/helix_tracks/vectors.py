"""Helpers for the plain 3-vectors exchanged with the helix model."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

LOGGER = logging.getLogger(__name__)


def as_vector(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """
    Convert a point or direction to a fresh float array of shape (3,).

    Args:
        values: Anything numpy can turn into three floats.

    Returns:
        A new array, never a view of the input.

    Raises:
        ValueError: If the input does not hold exactly three components.
    """
    vec = np.array(values, dtype=float).reshape(-1)
    if vec.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {np.shape(values)}")
    return vec


def perp(vec: np.ndarray) -> float:
    """Transverse (x-y plane) length of a 3-vector."""
    return float(np.hypot(vec[0], vec[1]))


def vector_defect(vec: np.ndarray, world_size: float) -> int:
    """
    Check the components of a vector against numeric sanity bounds.

    Returns 0 for a sane vector, ``10 + i`` if component ``i`` is not finite
    and ``20 + i`` if its magnitude exceeds ``world_size``.
    """
    for i, value in enumerate(vec):
        if not np.isfinite(value):
            return 10 + i
        if abs(value) > world_size:
            return 20 + i
    return 0
