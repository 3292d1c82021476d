"""Tests for helix_tracks.helix.trajectory: parameter handling and evaluation."""

from __future__ import annotations

import numpy as np
import pytest

from helix_tracks.helix.trajectory import Helix

S_VALUES = [-250.0, -13.7, -1.0, 0.0, 0.5, 4.2, 77.0, 1000.0]


class TestConstruction:
    """Tests for parameter normalisation in the constructor."""

    def test_parameters_stored(self, dipped_helix: Helix) -> None:
        assert dipped_helix.curvature == 0.05
        assert dipped_helix.dip_angle == 0.3
        assert dipped_helix.phase == 0.4
        assert dipped_helix.h == -1
        assert np.array_equal(dipped_helix.origin, [1.0, 2.0, 3.0])
        assert not dipped_helix.is_straight

    def test_cache_matches_parameters(self, dipped_helix: Helix) -> None:
        assert np.isclose(dipped_helix.cos_dip_angle, np.cos(0.3))
        assert np.isclose(dipped_helix.sin_dip_angle, np.sin(0.3))
        assert np.isclose(dipped_helix.cos_phase, np.cos(0.4))
        assert np.isclose(dipped_helix.sin_phase, np.sin(0.4))

    def test_origin_is_copied(self) -> None:
        """Neither the caller's array nor the returned origin alias the state."""
        origin = np.array([1.0, 2.0, 3.0])
        helix = Helix(0.01, 0.0, 0.0, origin, 1)
        origin[0] = 99.0
        returned = helix.origin
        returned[1] = -99.0
        assert np.array_equal(helix.origin, [1.0, 2.0, 3.0])

    def test_bad_origin_shape(self) -> None:
        with pytest.raises(ValueError, match="3-vector"):
            Helix(0.01, 0.0, 0.0, (1.0, 2.0), 1)

    @pytest.mark.parametrize("h, expected", [(1, 1), (0, 1), (7, 1), (-1, -1), (-3, -1)])
    def test_handedness_folded_to_unit(self, h: int, expected: int) -> None:
        helix = Helix(0.01, 0.0, 0.0, (0, 0, 0), h)
        assert helix.h == expected

    def test_default_handedness_is_negative(self) -> None:
        assert Helix(0.01, 0.0, 0.0, (0, 0, 0)).h == -1

    def test_negative_curvature_folded(self) -> None:
        """Negative curvature flips h and the phase but keeps the start direction."""
        dip, phase = 0.1, 0.2
        helix = Helix(-0.01, dip, phase, (0, 0, 0), 1)
        assert helix.curvature == 0.01
        assert helix.h == -1
        assert np.isclose(helix.phase, phase + np.pi - 2 * np.pi)
        expected = [
            -np.cos(dip) * np.sin(phase),
            np.cos(dip) * np.cos(phase),
            np.sin(dip),
        ]
        assert np.allclose(helix.tangent_at(0.0), expected)
        assert np.allclose(helix.at(0.0), [0, 0, 0], atol=1e-12)

    def test_phase_wrapped(self) -> None:
        helix = Helix(0.01, 0.0, 4.0, (0, 0, 0), 1)
        assert np.isclose(helix.phase, 4.0 - 2 * np.pi)
        assert -np.pi <= helix.phase <= np.pi

    def test_phase_within_range_untouched(self) -> None:
        helix = Helix(0.01, 0.0, -3.0, (0, 0, 0), 1)
        assert helix.phase == -3.0

    def test_straight_line_forces_positive_handedness(self) -> None:
        """h = -1 on a line becomes +1 with the phase shifted to keep the direction."""
        helix = Helix(0.0, 0.0, 0.3, (0, 0, 0), -1)
        assert helix.h == 1
        assert helix.is_straight
        assert np.allclose(helix.tangent_at(0.0), [np.sin(0.3), -np.cos(0.3), 0.0])

    def test_tiny_curvature_is_straight(self) -> None:
        helix = Helix(1e-17, 0.0, 0.0, (0, 0, 0), 1)
        assert helix.is_straight
        assert helix.xcenter == 0.0
        assert helix.ycenter == 0.0

    def test_set_parameters_replaces_everything(self, dipped_helix: Helix) -> None:
        dipped_helix.set_parameters(0.0, 0.0, 0.0, (0, 0, 0), 1)
        assert dipped_helix == Helix(0.0, 0.0, 0.0, (0, 0, 0), 1)
        assert dipped_helix.is_straight
        assert dipped_helix.cos_phase == 1.0


class TestEvaluation:
    """Tests for positions, tangents and the period."""

    @pytest.mark.parametrize("s", S_VALUES)
    def test_straight_line_along_y(self, straight_line: Helix, s: float) -> None:
        assert straight_line.x(s) == 0.0
        assert straight_line.y(s) == s
        assert straight_line.z(s) == 0.0

    def test_tangent_is_unit(self, any_helix: Helix) -> None:
        for s in S_VALUES:
            assert np.isclose(np.linalg.norm(any_helix.tangent_at(s)), 1.0, atol=1e-12)

    def test_tangent_is_derivative(self, any_helix: Helix) -> None:
        step = 1e-5
        for s in S_VALUES:
            numeric = (any_helix.at(s + step) - any_helix.at(s - step)) / (2 * step)
            assert np.allclose(numeric, any_helix.tangent_at(s), atol=1e-6)

    def test_at_matches_components(self, any_helix: Helix) -> None:
        for s in S_VALUES:
            assert np.array_equal(
                any_helix.at(s), [any_helix.x(s), any_helix.y(s), any_helix.z(s)]
            )
            assert np.array_equal(
                any_helix.tangent_at(s),
                [any_helix.cx(s), any_helix.cy(s), any_helix.cz(s)],
            )

    def test_origin_at_zero(self, any_helix: Helix) -> None:
        assert np.allclose(any_helix.at(0.0), any_helix.origin, atol=1e-12)

    def test_z_linear(self, any_helix: Helix) -> None:
        z0 = any_helix.origin[2]
        for s in S_VALUES:
            assert np.isclose(any_helix.z(s), z0 + s * np.sin(any_helix.dip_angle))

    def test_period_identity(self, any_helix: Helix) -> None:
        if any_helix.is_straight:
            assert any_helix.period() == np.inf
            return
        product = any_helix.period() * any_helix.curvature * any_helix.cos_dip_angle
        assert np.isclose(product, 2 * np.pi)

    def test_one_period_returns_transversely(self, dipped_helix: Helix) -> None:
        period = dipped_helix.period()
        start, end = dipped_helix.at(3.0), dipped_helix.at(3.0 + period)
        assert np.allclose(start[:2], end[:2], atol=1e-9)
        assert np.isclose(end[2] - start[2], period * np.sin(0.3))

    def test_points_on_bending_circle(self, dipped_helix: Helix) -> None:
        centre = np.array([dipped_helix.xcenter, dipped_helix.ycenter])
        for s in S_VALUES:
            radius = np.linalg.norm(dipped_helix.at(s)[:2] - centre)
            assert np.isclose(radius, 1 / dipped_helix.curvature)

    def test_flat_helix_centre(self, flat_helix: Helix) -> None:
        assert np.isclose(flat_helix.xcenter, -100.0)
        assert np.isclose(flat_helix.ycenter, 0.0)

    @pytest.mark.parametrize("h", [1, -1])
    def test_small_curvature_approaches_line(self, h: int) -> None:
        """The circular branch agrees with the straight branch to first order."""
        origin = (1.0, -2.0, 0.5)
        curved = Helix(1e-9, 0.2, 0.5, origin, h)
        line = Helix(0.0, 0.2, 0.5, origin, h)
        for s in [-10.0, 0.0, 3.0, 10.0]:
            assert np.allclose(curved.at(s), line.at(s), atol=1e-5)
            assert np.allclose(curved.tangent_at(s), line.tangent_at(s), atol=1e-7)


class TestMoveOrigin:
    """Tests for re-basing the origin along the trajectory."""

    def test_new_origin_matches_old_position(self, any_helix: Helix) -> None:
        s1 = 7.3
        before = any_helix.copy()
        any_helix.move_origin(s1)

        assert np.allclose(any_helix.at(0.0), before.at(s1), atol=1e-9)
        assert any_helix.curvature == before.curvature
        assert any_helix.dip_angle == before.dip_angle
        assert any_helix.h == before.h

    def test_trajectory_unchanged(self, any_helix: Helix) -> None:
        before = any_helix.copy()
        any_helix.move_origin(-21.0)
        for s in [-5.0, 0.0, 2.5, 40.0]:
            assert np.allclose(any_helix.at(s), before.at(s - 21.0), atol=1e-9)
            assert np.allclose(
                any_helix.tangent_at(s), before.tangent_at(s - 21.0), atol=1e-9
            )

    def test_centre_unchanged(self, dipped_helix: Helix) -> None:
        xc, yc = dipped_helix.xcenter, dipped_helix.ycenter
        dipped_helix.move_origin(55.0)
        assert np.isclose(dipped_helix.xcenter, xc)
        assert np.isclose(dipped_helix.ycenter, yc)
        assert np.isclose(dipped_helix.cos_phase, np.cos(dipped_helix.phase))
        assert np.isclose(dipped_helix.sin_phase, np.sin(dipped_helix.phase))


class TestDiagnostics:
    """Tests for copies, equality and string forms."""

    def test_copy_is_equal_and_independent(self, dipped_helix: Helix) -> None:
        clone = dipped_helix.copy()
        assert clone == dipped_helix
        clone.move_origin(10.0)
        assert clone != dipped_helix
        assert np.array_equal(dipped_helix.origin, [1.0, 2.0, 3.0])

    def test_equality_checks_every_parameter(self) -> None:
        base = Helix(0.01, 0.1, 0.2, (1, 2, 3), 1)
        assert base == Helix(0.01, 0.1, 0.2, (1, 2, 3), 1)
        assert base != Helix(0.02, 0.1, 0.2, (1, 2, 3), 1)
        assert base != Helix(0.01, 0.2, 0.2, (1, 2, 3), 1)
        assert base != Helix(0.01, 0.1, 0.3, (1, 2, 3), 1)
        assert base != Helix(0.01, 0.1, 0.2, (1, 2, 4), 1)
        assert base != Helix(0.01, 0.1, 0.2, (1, 2, 3), -1)
        assert base != "not a helix"

    def test_unhashable(self, flat_helix: Helix) -> None:
        with pytest.raises(TypeError):
            hash(flat_helix)

    def test_repr(self, flat_helix: Helix) -> None:
        assert repr(flat_helix) == (
            "Helix(curvature=0.01, dip_angle=0.0, phase=0.0, origin=(0.0, 0.0, 0.0), h=1)"
        )

    def test_str(self, flat_helix: Helix) -> None:
        text = str(flat_helix)
        assert text.startswith("(curvature = 0.01, dip angle = 0.0")
        assert "h = 1" in text
        assert "origin = (0.0, 0.0, 0.0)" in text
