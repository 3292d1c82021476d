"""
Example script for the helix path-length queries.

This script builds two tracks, checks their parameters the way a fit loop
would, finds where the first one crosses a set of detector cylinders and an
end-cap plane, and reports the closest approach between the two tracks.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from helix_tracks.helix.path_length import is_solution
from helix_tracks.helix.trajectory import Helix
from helix_tracks.helix.validity import describe_defect
from helix_tracks.sampling import path_length_grid, sample_helix

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

LAYER_RADII = [5.0, 15.0, 40.0, 80.0, 150.0]  # cm
END_CAP_Z = 200.0


def main() -> None:
    """Intersect a track with the detector layers and a second track."""
    track = Helix(curvature=0.004, dip_angle=0.35, phase=0.2, origin=(0.1, -0.05, 1.0), h=1)
    partner = Helix(curvature=0.006, dip_angle=0.30, phase=1.4, origin=(0.3, 0.2, 0.8), h=-1)

    for name, helix in (("track", track), ("partner", partner)):
        code = helix.bad()
        if code:
            logger.error(f"{name} failed validity check: {describe_defect(code)}")
            return
    logger.info(f"Track: {track}")

    for radius in LAYER_RADII:
        s_in, s_out = track.path_lengths_at_radius(radius)
        if not is_solution(s_in):
            logger.info(f"  r = {radius:6.1f}: not reached")
            continue
        s = s_in if s_in >= 0 else s_out
        x, y, z = track.at(s)
        logger.info(f"  r = {radius:6.1f}: s = {s:8.3f} at ({x:.3f}, {y:.3f}, {z:.3f})")

    s_cap = track.path_length_to_plane((0.0, 0.0, END_CAP_Z), (0.0, 0.0, 1.0))
    if is_solution(s_cap):
        logger.info(f"End cap at z = {END_CAP_Z} reached at s = {s_cap:.3f}")

    s1, s2 = track.path_lengths_to_helix(partner, min_step_size=1e-4)
    if is_solution(s1):
        separation = np.linalg.norm(track.at(s1) - partner.at(s2))
        logger.info(f"Closest approach {separation:.5f} at s1 = {s1:.4f}, s2 = {s2:.4f}")

    output_dir = Path("output")
    output_dir.mkdir(exist_ok=True)
    table = sample_helix(track, path_length_grid(track, 200, periods=0.25))
    table.to_csv(output_dir / "track_samples.csv", index=False)
    logger.info(f"Saved {len(table)} samples to {output_dir / 'track_samples.csv'}")


if __name__ == "__main__":
    main()
