"""Numeric sanity checks for helix parameter tuples.

A fit can hand back parameters that evaluate without error but produce
meaningless geometry (a dip angle at the pole, a curvature larger than the
detector, a NaN). :func:`parameter_defect` reports which bound was violated
with a distinct integer code so the caller can log or histogram failures.
The solvers never run these checks themselves.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from math import isfinite, pi

import numpy as np

from helix_tracks.vectors import vector_defect

LOGGER = logging.getLogger(__name__)

MAX_ABS_DIP_ANGLE = 1.58  # just above pi/2


class HelixDefect(IntEnum):
    """Fixed defect codes. Origin defects are ``ORIGIN + 100 * vector code``."""

    NONE = 0
    ORIGIN = 3
    DIP_ANGLE_NOT_FINITE = 11
    CURVATURE_NOT_FINITE = 12
    DIP_ANGLE_TOO_LARGE = 21
    CURVATURE_TOO_LARGE = 22
    BAD_HANDEDNESS = 24
    DIP_ANGLE_NEAR_POLE = 31
    NEGATIVE_CURVATURE = 32


_ORIGIN_FAILURES = {10: "not finite", 20: "outside the world volume"}


def parameter_defect(
    curvature: float,
    dip_angle: float,
    origin: np.ndarray,
    h: int,
    world_size: float,
) -> int:
    """
    Return 0 if the tuple is numerically trustworthy, else the first defect code.

    Checks run in a fixed order, so a tuple with several problems always
    reports the same code.
    """
    if not isfinite(dip_angle):
        return HelixDefect.DIP_ANGLE_NOT_FINITE
    if not isfinite(curvature):
        return HelixDefect.CURVATURE_NOT_FINITE

    origin_code = vector_defect(origin, world_size)
    if origin_code:
        return HelixDefect.ORIGIN + origin_code * 100

    if abs(dip_angle) > MAX_ABS_DIP_ANGLE:
        return HelixDefect.DIP_ANGLE_TOO_LARGE
    if abs(abs(dip_angle) - pi / 2) < 1.0 / world_size:
        return HelixDefect.DIP_ANGLE_NEAR_POLE
    if abs(curvature) > world_size:
        return HelixDefect.CURVATURE_TOO_LARGE
    if curvature < 0:
        return HelixDefect.NEGATIVE_CURVATURE
    if abs(h) != 1:
        return HelixDefect.BAD_HANDEDNESS
    return HelixDefect.NONE


def describe_defect(code: int) -> str:
    """Human readable description of a defect code, for log messages."""
    if code in {member.value for member in HelixDefect}:
        return HelixDefect(code).name.lower().replace("_", " ")

    kind, index = divmod((code - HelixDefect.ORIGIN) // 100, 10)
    axis = "xyz"[index] if 0 <= index < 3 else "?"
    reason = _ORIGIN_FAILURES.get(kind * 10, "unknown")
    return f"origin {axis} {reason}"
