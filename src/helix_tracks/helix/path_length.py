"""
Inverse queries on a helix: at which path length does a condition hold.

Every query returns a path length (or a pair) or :data:`NO_SOLUTION` when the
geometry has no answer. Nothing here raises on a geometric failure. Cylinder
crossings and the straight-line cases are solved in closed form; closest
approach to a point, general plane crossings and closest approach between two
helices use bounded iterations whose budgets come from
:class:`~helix_tracks.config.HelixSettings`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from helix_tracks.config import DEFAULT_SETTINGS
from helix_tracks.vectors import as_vector, perp

if TYPE_CHECKING:
    from collections.abc import Sequence

    from helix_tracks.config import HelixSettings
    from helix_tracks.helix.trajectory import Helix

LOGGER = logging.getLogger(__name__)

NO_SOLUTION = 3.0e33

# Largest turn angle a single damped Newton step may cover in plane_crossing;
# (cos(a) - 1)/a = 0.1 at a = 0.21
MAX_PLANE_STEP_ANGLE = 0.21

PARALLEL_TOLERANCE = 1.0e-12


def is_solution(value: float) -> bool:
    """True unless ``value`` is the :data:`NO_SOLUTION` sentinel."""
    return value != NO_SOLUTION


def _angle_to_path_length(helix: Helix, angle: float) -> float:
    """Path length nearest zero at which the helix reaches azimuth ``angle``."""
    turn = helix.h * (angle - helix.phase)
    turn = np.remainder(turn + np.pi, 2 * np.pi) - np.pi
    return float(turn / (helix.curvature * helix.cos_dip_angle))


# -----------------------------------------------------------------------------
# Bending-plane estimate
# -----------------------------------------------------------------------------
def fudge_path_length(helix: Helix, point: Sequence[float] | np.ndarray) -> float:
    """
    Path length of the closest approach to ``point`` in the bending plane only.

    The z component of the point is ignored. This is the seed of the 3D
    searches and is not a 3D answer by itself: the transverse solution repeats
    every period while z keeps growing.
    """
    p = as_vector(point)
    origin = helix.origin
    dx = p[0] - origin[0]
    dy = p[1] - origin[1]
    cos_dip = helix.cos_dip_angle
    cos_phase, sin_phase = helix.cos_phase, helix.sin_phase

    if cos_dip == 0:
        # No transverse motion, every s is equally close
        return 0.0
    if helix.is_straight:
        return float((dy * cos_phase - dx * sin_phase) / cos_dip)
    return float(
        np.arctan2(
            dy * cos_phase - dx * sin_phase,
            1.0 / helix.curvature + dx * cos_phase + dy * sin_phase,
        )
        / (helix.h * helix.curvature * cos_dip)
    )


# -----------------------------------------------------------------------------
# Cylinders
# -----------------------------------------------------------------------------
def cylinder_crossings(
    helix: Helix, radius: float, axis_x: float = 0.0, axis_y: float = 0.0
) -> tuple[float, float]:
    """
    Path lengths where the transverse distance to an axis equals ``radius``.

    Args:
        helix: Trajectory to intersect.
        radius: Cylinder radius.
        axis_x: x position of the cylinder axis (parallel to z).
        axis_y: y position of the cylinder axis.

    Returns:
        ``(first, second)`` with ``first <= second``; for a helix each is the
        crossing nearest ``s = 0`` within one period. ``(NO_SOLUTION,
        NO_SOLUTION)`` if the cylinder is out of reach.
    """
    no_solution = (NO_SOLUTION, NO_SOLUTION)
    cos_dip = helix.cos_dip_angle
    if cos_dip == 0:
        LOGGER.debug("Trajectory has no transverse motion, no cylinder crossing")
        return no_solution

    if helix.is_straight:
        offset = helix.origin - (axis_x, axis_y, 0.0)
        # Quadratic in the transverse distance travelled, t = s * cos_dip
        along = -offset[0] * helix.sin_phase + offset[1] * helix.cos_phase
        discriminant = along**2 - perp(offset) ** 2 + radius**2
        if discriminant < 0:
            LOGGER.debug(f"Straight line misses cylinder of radius {radius}")
            return no_solution
        root = np.sqrt(discriminant)
        first = float((-along - root) / cos_dip)
        second = float((-along + root) / cos_dip)
        return min(first, second), max(first, second)

    bending_radius = 1.0 / helix.curvature
    dx = helix.xcenter - axis_x
    dy = helix.ycenter - axis_y
    centre_distance = np.hypot(dx, dy)
    if centre_distance == 0:
        LOGGER.debug("Helix is concentric with the cylinder axis, no unique crossing")
        return no_solution

    cos_offset = (radius**2 - centre_distance**2 - bending_radius**2) / (
        2 * bending_radius * centre_distance
    )
    if abs(cos_offset) > 1:
        LOGGER.debug(
            f"Radius {radius} outside reachable range "
            f"[{abs(centre_distance - bending_radius)}, {centre_distance + bending_radius}]"
        )
        return no_solution

    axis_angle = np.arctan2(dy, dx)
    offset = np.arccos(cos_offset)
    first = _angle_to_path_length(helix, axis_angle - offset)
    second = _angle_to_path_length(helix, axis_angle + offset)
    return min(first, second), max(first, second)


# -----------------------------------------------------------------------------
# Points
# -----------------------------------------------------------------------------
def _scan_periods(helix: Helix, p: np.ndarray, s: float, max_steps: int) -> float:
    """Shift ``s`` by whole periods while that brings the helix closer to ``p``."""
    period = helix.period()
    if not np.isfinite(period):
        return s
    best_offset = 0
    best = np.linalg.norm(helix.at(s) - p)
    for direction in (1, -1):
        for j in range(1, max_steps):
            d = np.linalg.norm(helix.at(s + direction * j * period) - p)
            if d < best:
                best = d
                best_offset = direction * j
            else:
                break
    return s + best_offset * period


def _newton_refine(
    helix: Helix, p: np.ndarray, s: float, settings: HelixSettings
) -> float:
    """
    Newton iterations on ``d/ds |at(s) - p|**2 / 2``.

    Stops once the step is below ``settings.precision`` or after
    ``settings.max_iterations`` steps, returning the current estimate either
    way. Where the second derivative is not positive (near a distance maximum)
    a plain gradient step is taken instead.
    """
    bending = helix.curvature * helix.cos_dip_angle**2
    for _ in range(settings.max_iterations):
        diff = helix.at(s) - p
        tangent = helix.tangent_at(s)
        f = float(np.dot(tangent, diff))
        a = helix.phase + s * helix.h * helix.curvature * helix.cos_dip_angle
        fp = float(
            np.dot(tangent, tangent)
            - bending * (np.cos(a) * diff[0] + np.sin(a) * diff[1])
        )
        step = f / fp if fp > 0 else f
        s -= step
        if abs(step) < settings.precision:
            return s
    LOGGER.debug(
        f"Closest approach to {p} did not converge in {settings.max_iterations} "
        f"iterations, returning s={s}"
    )
    return s


def closest_to_point(
    helix: Helix,
    point: Sequence[float] | np.ndarray,
    scan_periods: bool = True,
    settings: HelixSettings | None = None,
) -> float:
    """
    Path length at the distance of closest approach to ``point``.

    Args:
        helix: Trajectory to search.
        point: Fixed point in 3D.
        scan_periods: Also try the bending-plane estimate shifted by whole
            periods and keep the closest. Without it the result may be a
            local minimum one or more turns away from the global one.
        settings: Precision and iteration budget.

    Returns:
        The path length; straight lines are solved exactly.
    """
    settings = settings if settings is not None else DEFAULT_SETTINGS
    p = as_vector(point)
    dx, dy, dz = p - helix.origin

    if helix.is_straight:
        return float(
            helix.cos_dip_angle * (helix.cos_phase * dy - helix.sin_phase * dx)
            + helix.sin_dip_angle * dz
        )

    s = fudge_path_length(helix, p)
    if scan_periods:
        s = _scan_periods(helix, p, s, settings.max_iterations)
    return float(_newton_refine(helix, p, s, settings))


def distance_to_point(
    helix: Helix,
    point: Sequence[float] | np.ndarray,
    scan_periods: bool = True,
    settings: HelixSettings | None = None,
) -> float:
    """Minimal distance between ``point`` and the helix."""
    p = as_vector(point)
    s = closest_to_point(helix, p, scan_periods, settings)
    return float(np.linalg.norm(helix.at(s) - p))


# -----------------------------------------------------------------------------
# Planes
# -----------------------------------------------------------------------------
def _linear_plane_crossing(
    origin: np.ndarray, direction: np.ndarray, r: np.ndarray, n: np.ndarray
) -> float:
    """Crossing of ``origin + s * direction`` with the plane through ``r``."""
    along = float(np.dot(n, direction))
    offset = float(np.dot(r - origin, n))
    tolerance = PARALLEL_TOLERANCE * np.linalg.norm(n)
    if abs(along) <= tolerance:
        if abs(offset) <= tolerance:
            return 0.0
        LOGGER.debug("Trajectory runs parallel to the plane, no crossing")
        return NO_SOLUTION
    return offset / along


def plane_crossing(
    helix: Helix,
    point_on_plane: Sequence[float] | np.ndarray,
    normal: Sequence[float] | np.ndarray,
    settings: HelixSettings | None = None,
) -> float:
    """
    Path length at which the helix crosses a plane.

    Straight lines, planes perpendicular to z and helices without transverse
    motion reduce to a linear equation. Otherwise a damped Newton search
    starting at ``s = 0`` finds the root of

        c * n.(origin - r) - nx*cos(phase) - ny*sin(phase)
            + nx*cos(a(s)) + ny*sin(a(s)) + nz*c*sin(dip)*s = 0

    Each step is limited to the path length covering ``MAX_PLANE_STEP_ANGLE``
    of turn. If the iteration budget runs out, the best candidate is returned
    only if it lies within ``settings.precision`` of the plane.
    """
    settings = settings if settings is not None else DEFAULT_SETTINGS
    r = as_vector(point_on_plane)
    n = as_vector(normal)
    origin = helix.origin

    if not np.any(n):
        LOGGER.debug("Plane normal is the zero vector, no crossing")
        return NO_SOLUTION

    if helix.is_straight or helix.cos_dip_angle == 0 or (n[0] == 0 and n[1] == 0):
        return _linear_plane_crossing(origin, helix.tangent_at(0.0), r, n)

    c = helix.curvature
    const = c * np.dot(origin - r, n) - n[0] * helix.cos_phase - n[1] * helix.sin_phase
    omega = helix.h * c * helix.cos_dip_angle
    slope = n[2] * c * helix.sin_dip_angle
    max_step = abs(MAX_PLANE_STEP_ANGLE / (c * helix.cos_dip_angle))

    def residual(s: float) -> tuple[float, float]:
        a = omega * s + helix.phase
        sin_a, cos_a = np.sin(a), np.cos(a)
        f = const + n[0] * cos_a + n[1] * sin_a + slope * s
        fp = -n[0] * sin_a * omega + n[1] * cos_a * omega + slope
        return float(f), float(fp)

    s = 0.0
    best_s, best_f = s, np.inf
    for _ in range(settings.max_iterations):
        f, fp = residual(s)
        if abs(f) < best_f:
            best_s, best_f = s, abs(f)
        if abs(fp) * max_step <= abs(f):
            # Newton would step too far, walk max_step downhill instead
            shift = max_step if (fp >= 0) == (f >= 0) else -max_step
            if shift < 0:
                shift *= 0.9
        else:
            shift = f / fp
        s -= shift
        if abs(shift) < settings.precision:
            return s

    f, _ = residual(s)
    if abs(f) < best_f:
        best_s, best_f = s, abs(f)
    # residual is c * (signed distance) * |n|
    best_distance = best_f / (c * np.linalg.norm(n))
    if best_distance < settings.precision:
        LOGGER.debug(f"Plane search out of iterations, accepting s={best_s}")
        return best_s
    LOGGER.debug(
        f"Plane search found no crossing in {settings.max_iterations} iterations "
        f"(closest candidate {best_distance} away)"
    )
    return NO_SOLUTION


# -----------------------------------------------------------------------------
# Pairs of helices
# -----------------------------------------------------------------------------
def _closest_between_lines(line: Helix, other: Helix) -> tuple[float, float]:
    dv = other.origin - line.origin
    a = line.tangent_at(0.0)
    b = other.tangent_at(0.0)
    ab = float(np.dot(a, b))
    g = float(np.dot(dv, a))
    k = float(np.dot(dv, b))
    denominator = ab * ab - 1.0
    if abs(denominator) < PARALLEL_TOLERANCE:
        # Every point is equally close, report the one at line's origin
        return 0.0, -k
    s2 = (k - ab * g) / denominator
    s1 = g + s2 * ab
    return s1, s2


def _transverse_seeds(helix: Helix, other: Helix) -> list[float]:
    """
    Seeds on ``helix`` from the two circles in the bending plane.

    Crossing circles give one seed per crossing. Otherwise the single seed is
    the point of ``helix``'s circle nearest to the other circle, on the line
    joining the centres.
    """
    xc, yc = helix.xcenter, helix.ycenter
    dx = other.xcenter - xc
    dy = other.ycenter - yc
    dd = np.hypot(dx, dy)
    if dd == 0:
        return [0.0]

    r1 = 1.0 / helix.curvature
    r2 = 1.0 / other.curvature
    cos_alpha = (r1 * r1 + dd * dd - r2 * r2) / (2 * r1 * dd)

    if abs(cos_alpha) < 1:
        sin_alpha = np.sqrt(1.0 - cos_alpha * cos_alpha)
        first = (
            xc + r1 * (cos_alpha * dx - sin_alpha * dy) / dd,
            yc + r1 * (sin_alpha * dx + cos_alpha * dy) / dd,
            0.0,
        )
        second = (
            xc + r1 * (cos_alpha * dx + sin_alpha * dy) / dd,
            yc + r1 * (cos_alpha * dy - sin_alpha * dx) / dd,
            0.0,
        )
        return [fudge_path_length(helix, first), fudge_path_length(helix, second)]

    # far side if helix lies inside the other circle
    rsign = -1 if (r2 - r1) > dd else 1
    nearest = (xc + rsign * r1 * dx / dd, yc + rsign * r1 * dy / dd, 0.0)
    return [fudge_path_length(helix, nearest)]


def _scan_from_seed(
    helix: Helix,
    other: Helix,
    seed: float,
    min_step_size: float,
    min_range: float,
    settings: HelixSettings,
) -> tuple[float, float]:
    """
    Zoom in on the ``s`` of ``helix`` closest to ``other``, starting at ``seed``.

    The first window spans at least one period of ``helix`` so that every
    azimuth is visited once. Returns ``(s, distance)``.
    """

    def distance_at(s: float) -> float:
        return distance_to_point(other, helix.at(s), True, settings)

    s = seed
    dmin = distance_at(s)
    search_range = max(2 * dmin, min_range)
    period = helix.period()
    if np.isfinite(period):
        search_range = max(search_range, period)
    ds = search_range / 10
    s1 = s - search_range / 2
    s2 = s + search_range / 2

    passes = 0
    while ds > min_step_size:
        if passes >= settings.max_scan_passes:
            LOGGER.debug(
                f"Pairwise scan stopped after {passes} passes at ds={ds}, "
                f"returning best candidate s={s}"
            )
            break
        passes += 1

        ss = s1
        s_last = s1
        while ss < s2 + ds:
            d = distance_at(ss)
            if d < dmin:
                dmin = d
                s = ss
            s_last = ss
            ss += ds

        # A minimum on the border may lie outside the window: shift it and
        # rescan at the same step. Otherwise zoom in around the minimum.
        if s == s1:
            shift = 0.8 * (s2 - s1)
            s1 -= shift
            s2 -= shift
        elif s == s_last:
            shift = 0.8 * (s2 - s1)
            s1 += shift
            s2 += shift
        else:
            s1 = s - ds
            s2 = s + ds
            ds /= 10

    LOGGER.debug(f"Scan from seed {seed} reached {dmin} at s={s} after {passes} passes")
    return s, dmin


def _closest_from(
    helix: Helix,
    other: Helix,
    min_step_size: float,
    min_range: float,
    settings: HelixSettings,
) -> tuple[float, float]:
    """Best ``(s1, s2)`` found by scanning ``helix`` from every transverse seed."""
    best_s, best_distance = 0.0, np.inf
    for seed in _transverse_seeds(helix, other):
        s, d = _scan_from_seed(helix, other, seed, min_step_size, min_range, settings)
        if d < best_distance:
            best_s, best_distance = s, d
    return float(best_s), closest_to_point(other, helix.at(best_s), True, settings)


def closest_between(
    helix: Helix,
    other: Helix,
    min_step_size: float | None = None,
    min_range: float | None = None,
    settings: HelixSettings | None = None,
) -> tuple[float, float]:
    """
    Path lengths ``(s1, s2)`` on ``helix`` and ``other`` at their closest approach.

    Two straight lines are solved exactly. A straight line paired with a helix
    has no solution here. For two helices every crossing of the bending-plane
    circles (or their nearest point when they do not cross) seeds a scan of
    ``s1`` over a window of at least one period and ``min_range`` in ten
    steps, evaluating the distance from ``at(s1)`` to ``other``. A minimum on
    the window border shifts the window; otherwise the window shrinks around
    the minimum and the step drops tenfold, until it is no larger than
    ``min_step_size``. The same search is run with the roles swapped and the
    closer pair wins, so the separation does not depend on argument order.

    Args:
        helix: First trajectory.
        other: Second trajectory.
        min_step_size: Finest scan step, sets the precision of ``s1``.
        min_range: Minimum extent of the first scan window.
        settings: Defaults for the above and the scan pass budget.

    Returns:
        ``(s1, s2)``, or ``(NO_SOLUTION, NO_SOLUTION)``.
    """
    settings = settings if settings is not None else DEFAULT_SETTINGS
    if min_step_size is None:
        min_step_size = settings.min_step_size
    if min_range is None:
        min_range = settings.min_range

    if helix.is_straight != other.is_straight:
        LOGGER.debug("Closest approach between a straight line and a helix is not supported")
        return NO_SOLUTION, NO_SOLUTION

    if helix.is_straight:
        return _closest_between_lines(helix, other)

    forward = _closest_from(helix, other, min_step_size, min_range, settings)
    s2, s1 = _closest_from(other, helix, min_step_size, min_range, settings)

    def separation(pair: tuple[float, float]) -> float:
        return float(np.linalg.norm(helix.at(pair[0]) - other.at(pair[1])))

    best = min((forward, (s1, s2)), key=separation)
    LOGGER.debug(f"Pairwise closest approach {separation(best)} at {best}")
    return best
