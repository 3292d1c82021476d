"""
Parametrisation of a helix, the path of a charged particle in a uniform field.

The helix is described by five parameters: the curvature (1/R in the bending
plane), the dip angle out of the bending plane, the phase (azimuth of the
origin measured from the circle centre), the origin (the point at path length
zero) and the handedness ``h = -sign(q*B)``. A curvature of zero describes a
straight line, which is handled by a separate branch in every formula so that
nothing is ever divided by the curvature.

Instances are mutable values: the two mutators recompute every cached quantity
before returning. Concurrent mutation of a single instance must be serialised
by the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from helix_tracks.config import DEFAULT_SETTINGS
from helix_tracks.helix import path_length as solver
from helix_tracks.helix.validity import describe_defect, parameter_defect
from helix_tracks.vectors import as_vector

if TYPE_CHECKING:
    from collections.abc import Sequence

    from helix_tracks.config import HelixSettings

LOGGER = logging.getLogger(__name__)

STRAIGHT_LINE_CURVATURE = np.finfo(float).eps


class Helix:
    """
    Helix (or straight line) parametrised by its path length ``s``.

    Usage:
        helix = Helix(curvature=0.01, dip_angle=0.2, phase=0.0,
                      origin=(0, 0, 0), h=1)
        point = helix.at(12.5)
        s_in, s_out = helix.path_lengths_at_radius(50.0)
    """

    def __init__(
        self,
        curvature: float,
        dip_angle: float,
        phase: float,
        origin: Sequence[float] | np.ndarray,
        h: int = -1,
        settings: HelixSettings | None = None,
    ):
        """
        Initialise the helix.

        Args:
            curvature: 1/R in the bending plane. Negative values are folded
                into the handedness and phase.
            dip_angle: Angle between the trajectory and the bending plane.
            phase: Azimuth of the origin seen from the circle centre.
            origin: Point at path length zero.
            h: Handedness, ``-sign(q*B)``. Any value >= 0 counts as +1.
            settings: Solver settings, ``DEFAULT_SETTINGS`` if omitted.
        """
        self.settings = settings if settings is not None else DEFAULT_SETTINGS
        self.set_parameters(curvature, dip_angle, phase, origin, h)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    def set_parameters(
        self,
        curvature: float,
        dip_angle: float,
        phase: float,
        origin: Sequence[float] | np.ndarray,
        h: int,
    ) -> None:
        """Replace the full parameter tuple and recompute the cache."""
        # Order matters: the curvature may flip h and shift the phase
        self._h = 1 if h >= 0 else -1
        self._origin = as_vector(origin)
        self._set_dip_angle(dip_angle)
        self._set_phase(phase)
        self._set_curvature(curvature)

        # h is meaningless for a straight line, keep +1 and preserve the direction
        if self._straight and self._h == -1:
            self._h = 1
            self._set_phase(self._phase - np.pi)

    def _set_curvature(self, value: float) -> None:
        if value < 0:
            self._curvature = -float(value)
            self._h = -self._h
            self._set_phase(self._phase + np.pi)
        else:
            self._curvature = float(value)
        self._straight = bool(abs(self._curvature) <= STRAIGHT_LINE_CURVATURE)

    def _set_phase(self, value: float) -> None:
        self._phase = float(value)
        self._cos_phase = float(np.cos(self._phase))
        self._sin_phase = float(np.sin(self._phase))
        if abs(self._phase) > np.pi:
            self._phase = float(np.arctan2(self._sin_phase, self._cos_phase))

    def _set_dip_angle(self, value: float) -> None:
        self._dip_angle = float(value)
        self._cos_dip_angle = float(np.cos(self._dip_angle))
        self._sin_dip_angle = float(np.sin(self._dip_angle))

    def move_origin(self, s: float) -> None:
        """Move the origin along the helix to ``s``, which then becomes ``s = 0``."""
        new_origin = self.at(s)
        if self._straight:
            self._origin = new_origin
            return
        new_phase = np.arctan2(new_origin[1] - self.ycenter, new_origin[0] - self.xcenter)
        self._origin = new_origin
        self._set_phase(new_phase)

    def copy(self) -> Helix:
        """Return an independent copy of this helix."""
        return Helix(
            self._curvature,
            self._dip_angle,
            self._phase,
            self._origin,
            self._h,
            settings=self.settings,
        )

    @property
    def curvature(self) -> float:
        return self._curvature

    @property
    def dip_angle(self) -> float:
        return self._dip_angle

    @property
    def phase(self) -> float:
        return self._phase

    @property
    def h(self) -> int:
        return self._h

    @property
    def origin(self) -> np.ndarray:
        """Point at path length zero (a copy)."""
        return self._origin.copy()

    @property
    def is_straight(self) -> bool:
        return self._straight

    @property
    def cos_dip_angle(self) -> float:
        return self._cos_dip_angle

    @property
    def sin_dip_angle(self) -> float:
        return self._sin_dip_angle

    @property
    def cos_phase(self) -> float:
        return self._cos_phase

    @property
    def sin_phase(self) -> float:
        return self._sin_phase

    @property
    def xcenter(self) -> float:
        """x of the circle centre in the bending plane (0 for a straight line)."""
        if self._straight:
            return 0.0
        return float(self._origin[0] - self._cos_phase / self._curvature)

    @property
    def ycenter(self) -> float:
        """y of the circle centre in the bending plane (0 for a straight line)."""
        if self._straight:
            return 0.0
        return float(self._origin[1] - self._sin_phase / self._curvature)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def _angle(self, s: float) -> float:
        return self._phase + s * self._h * self._curvature * self._cos_dip_angle

    def x(self, s: float) -> float:
        if self._straight:
            return float(self._origin[0] - s * self._cos_dip_angle * self._sin_phase)
        return float(
            self._origin[0] + (np.cos(self._angle(s)) - self._cos_phase) / self._curvature
        )

    def y(self, s: float) -> float:
        if self._straight:
            return float(self._origin[1] + s * self._cos_dip_angle * self._cos_phase)
        return float(
            self._origin[1] + (np.sin(self._angle(s)) - self._sin_phase) / self._curvature
        )

    def z(self, s: float) -> float:
        return float(self._origin[2] + s * self._sin_dip_angle)

    def at(self, s: float) -> np.ndarray:
        """Position at path length ``s``."""
        return np.array([self.x(s), self.y(s), self.z(s)])

    def cx(self, s: float) -> float:
        if self._straight:
            return -self._cos_dip_angle * self._sin_phase
        return float(-np.sin(self._angle(s)) * self._h * self._cos_dip_angle)

    def cy(self, s: float) -> float:
        if self._straight:
            return self._cos_dip_angle * self._cos_phase
        return float(np.cos(self._angle(s)) * self._h * self._cos_dip_angle)

    def cz(self, s: float = 0.0) -> float:
        return self._sin_dip_angle

    def tangent_at(self, s: float) -> np.ndarray:
        """Unit direction of travel at path length ``s``."""
        return np.array([self.cx(s), self.cy(s), self.cz(s)])

    def period(self) -> float:
        """Path length of one full turn in the bending plane (inf for a line)."""
        if self._straight or self._cos_dip_angle == 0:
            return np.inf
        return float(abs(2 * np.pi / (self._h * self._curvature * self._cos_dip_angle)))

    # ------------------------------------------------------------------
    # Path-length queries
    # ------------------------------------------------------------------
    def path_lengths_at_radius(
        self, radius: float, x: float = 0.0, y: float = 0.0
    ) -> tuple[float, float]:
        """Path lengths where the helix crosses a cylinder with axis at (x, y)."""
        return solver.cylinder_crossings(self, radius, x, y)

    def path_length_to_point(
        self, point: Sequence[float] | np.ndarray, scan_periods: bool = True
    ) -> float:
        """Path length at the distance of closest approach to ``point``."""
        return solver.closest_to_point(self, point, scan_periods, self.settings)

    def path_length_to_plane(
        self,
        point_on_plane: Sequence[float] | np.ndarray,
        normal: Sequence[float] | np.ndarray,
    ) -> float:
        """Path length at the intersection with a plane."""
        return solver.plane_crossing(self, point_on_plane, normal, self.settings)

    def path_length_xy(self, x: float, y: float) -> float:
        """Path length at the closest approach to (x, y) in the bending plane."""
        return solver.fudge_path_length(self, (x, y, 0.0))

    def path_lengths_to_helix(
        self,
        other: Helix,
        min_step_size: float | None = None,
        min_range: float | None = None,
    ) -> tuple[float, float]:
        """Path lengths on this helix and ``other`` at their closest approach."""
        return solver.closest_between(
            self, other, min_step_size, min_range, self.settings
        )

    def distance(
        self, point: Sequence[float] | np.ndarray, scan_periods: bool = True
    ) -> float:
        """Minimal distance between ``point`` and the helix."""
        return solver.distance_to_point(self, point, scan_periods, self.settings)

    # ------------------------------------------------------------------
    # Validity
    # ------------------------------------------------------------------
    def bad(self, world_size: float | None = None) -> int:
        """Defect code of the current parameters, 0 when they are trustworthy."""
        if world_size is None:
            world_size = self.settings.world_size
        code = parameter_defect(
            self._curvature, self._dip_angle, self._origin, self._h, world_size
        )
        if code:
            LOGGER.debug(f"Helix {self} failed validity check: {describe_defect(code)}")
        return code

    def valid(self, world_size: float | None = None) -> bool:
        return not self.bad(world_size)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Helix):
            return NotImplemented
        return (
            np.array_equal(self._origin, other._origin)
            and self._dip_angle == other._dip_angle
            and self._curvature == other._curvature
            and self._phase == other._phase
            and self._h == other._h
        )

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return (
            f"Helix(curvature={self._curvature!r}, dip_angle={self._dip_angle!r}, "
            f"phase={self._phase!r}, origin={tuple(self._origin.tolist())!r}, h={self._h})"
        )

    def __str__(self) -> str:
        x0, y0, z0 = self._origin
        return (
            f"(curvature = {self._curvature}, dip angle = {self._dip_angle}, "
            f"phase = {self._phase}, h = {self._h}, origin = ({x0}, {y0}, {z0}))"
        )
