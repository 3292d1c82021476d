"""Tabulate a single helix over a set of path lengths.

The tables are meant for diagnostics and plotting, one row per path length.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from collections.abc import Iterable

    from helix_tracks.helix.trajectory import Helix

LOGGER = logging.getLogger(__name__)

SAMPLE_COLUMNS = ["s", "x", "y", "z", "cx", "cy", "cz"]


def path_length_grid(helix: Helix, n_points: int, periods: float = 1.0) -> np.ndarray:
    """
    Evenly spaced path lengths starting at the origin.

    Args:
        helix: Trajectory to cover.
        n_points: Number of samples.
        periods: Number of turns to cover. A straight line has no period, so
            ``periods * helix.settings.min_range`` is covered instead.

    Returns:
        Array of ``n_points`` path lengths.
    """
    if n_points < 1:
        raise ValueError(f"n_points must be at least 1, got {n_points}")
    if not np.isfinite(helix.period()):
        length = periods * helix.settings.min_range
    else:
        length = periods * helix.period()
    return np.linspace(0.0, length, num=n_points)


def sample_helix(helix: Helix, path_lengths: Iterable[float]) -> pd.DataFrame:
    """
    Positions and unit tangents of ``helix`` at each path length.

    Args:
        helix: Trajectory to evaluate.
        path_lengths: Path lengths to evaluate at, in the order given.

    Returns:
        DataFrame with columns ``s, x, y, z, cx, cy, cz``.
    """
    s_values = np.asarray(list(path_lengths), dtype=float)
    LOGGER.debug(f"Sampling {helix!r} at {len(s_values)} path lengths")

    rows = np.empty((len(s_values), len(SAMPLE_COLUMNS)))
    for i, s in enumerate(s_values):
        rows[i, 0] = s
        rows[i, 1:4] = helix.at(s)
        rows[i, 4:7] = helix.tangent_at(s)
    return pd.DataFrame(rows, columns=SAMPLE_COLUMNS)
