"""
Tests for FractalState: defaults, validation and the coordinate transform.
"""

import math

import pytest

from rational_julia.complex_number import Complex
from rational_julia.recurrences import InverseSquare, JuliaConstants, RationalJulia
from rational_julia.state import FractalState


def state_fields(state):
    return dict(vars(state))


class TestDefaults:

    def test_documented_defaults(self):
        state = FractalState()
        assert state.center == Complex(0, 0)
        assert state.zoom == 3.0
        assert state.max_iterations == 100
        assert state.singularity == Complex(0.25, 0.5)
        assert state.constant_k == 1.0
        assert state.constant_x == Complex(0.15, -0.2)
        assert state.color_range == 1.0
        assert state.color_shift == 0.0
        assert state.smooth_coloring is True
        assert state.palette == "Hue"
        assert state.singularity_occurred is False
        assert (state.width, state.height) == (800, 600)
        assert isinstance(state.recurrence, RationalJulia)

    def test_invalid_viewport_falls_back(self):
        state = FractalState(0, -5)
        assert (state.width, state.height) == (800, 600)

    def test_recurrence_by_name(self):
        assert isinstance(FractalState(recurrence="Inverse Square").recurrence, InverseSquare)


class TestReset:

    def test_reset_restores_defaults(self, state):
        state.set_view(1.0, -1.0, 0.5)
        state.set_singularity(-0.3, 0.1)
        state.set_render_params(max_iterations=250, color_shift=0.4, smooth_coloring=False)
        state.singularity_occurred = True
        state.reset()
        assert state_fields(state) == state_fields(FractalState(32, 24))

    def test_reset_is_idempotent(self, state):
        state.pan(Complex(0.5, 0.5))
        state.reset()
        once = state_fields(state)
        state.reset()
        assert state_fields(state) == once

    def test_reset_keeps_viewport_and_recurrence(self, state):
        state.set_recurrence(InverseSquare())
        state.reset()
        assert (state.width, state.height) == (32, 24)
        assert isinstance(state.recurrence, InverseSquare)


class TestTransform:

    def test_corners(self):
        state = FractalState(400, 300)
        # zoom 3 -> plane 3 wide, 2.25 high, centered on the origin
        top_left = state.pixel_to_plane(0, 0)
        assert top_left.re == pytest.approx(-1.5)
        assert top_left.im == pytest.approx(1.125)
        center = state.pixel_to_plane(200, 150)
        assert center.re == pytest.approx(0.0)
        assert center.im == pytest.approx(0.0)

    def test_vertical_axis_flipped(self, state):
        assert state.pixel_to_plane(0, 0).im > state.pixel_to_plane(0, 10).im

    @pytest.mark.parametrize("center, zoom", [
        (Complex(0, 0), 3.0),
        (Complex(-0.7, 0.3), 0.01),
        (Complex(12.5, -8.0), 250.0),
    ])
    def test_round_trip(self, state, center, zoom):
        state.set_view(center.re, center.im, zoom)
        for x in range(0, state.width, 5):
            for y in range(0, state.height, 5):
                px, py = state.plane_to_pixel(state.pixel_to_plane(x, y))
                assert abs(px - x) < 1e-4
                assert abs(py - y) < 1e-4


class TestMutators:

    def test_set_view(self, state):
        assert state.set_view(0.5, -0.5, 1.5)
        assert state.center == Complex(0.5, -0.5)
        assert state.zoom == 1.5

    @pytest.mark.parametrize("zoom", [0.0, -1.0, math.inf, math.nan])
    def test_set_view_refuses_bad_zoom(self, state, zoom):
        assert not state.set_view(0.0, 0.0, zoom)
        assert state.zoom == 3.0

    def test_pan(self, state):
        state.pan(Complex(0.25, -0.5))
        state.pan(Complex(0.25, -0.5))
        assert state.center == Complex(0.5, -1.0)

    def test_zoom_in_then_out_restores_zoom(self, state):
        before = state.zoom
        p = Complex(0.1, -0.2)
        assert state.zoom_in(p, 2.0)
        assert state.zoom == before / 2.0
        assert state.zoom_out(2.0)
        assert state.zoom == before
        assert state.center == p

    @pytest.mark.parametrize("factor", [0, -2.0, math.nan])
    def test_zoom_refuses_bad_factor(self, state, factor):
        assert not state.zoom_in(Complex(1, 1), factor)
        assert not state.zoom_out(factor)
        assert state.zoom == 3.0
        assert state.center == Complex(0, 0)

    def test_set_singularity(self, state):
        assert state.set_singularity(-0.1, 0.9)
        assert state.singularity == Complex(-0.1, 0.9)
        assert not state.set_singularity(math.nan, 0.0)
        assert state.singularity == Complex(-0.1, 0.9)

    def test_render_params_partial_update(self, state):
        assert state.set_render_params(color_range=2.0)
        assert state.max_iterations == 100
        assert state.color_range == 2.0

    @pytest.mark.parametrize("cap", [0, -10, 2.5, True])
    def test_render_params_refuse_bad_cap(self, state, cap):
        assert not state.set_render_params(max_iterations=cap, color_shift=0.5)
        assert state.max_iterations == 100
        assert state.color_shift == 0.0

    def test_color_shift_wraps(self, state):
        state.set_render_params(color_shift=1.25)
        assert state.color_shift == pytest.approx(0.25)
        state.set_render_params(color_shift=-0.25)
        assert state.color_shift == pytest.approx(0.75)

    def test_tiny_negative_shift_stays_below_one(self, state):
        assert state.set_render_params(color_shift=-1e-17)
        assert 0.0 <= state.color_shift < 1.0
        assert state.color_shift == 0.0

    def test_palette(self, state):
        assert state.set_palette("Ocean")
        assert not state.set_palette("Nope")
        assert state.palette == "Ocean"

    def test_viewport(self, state):
        assert state.set_viewport(64, 48)
        assert not state.set_viewport(0, 48)
        assert (state.width, state.height) == (64, 48)

    def test_snapshot_is_independent(self, state):
        snap = state.snapshot()
        state.pan(Complex(1, 1))
        state.set_render_params(max_iterations=5)
        assert snap.center == Complex(0, 0)
        assert snap.max_iterations == 100

    def test_recurrence_constants(self, state):
        assert state.recurrence_constants() == JuliaConstants(1.0, Complex(0.15, -0.2))
        state.set_recurrence("Inverse Square")
        assert state.recurrence_constants() is None
