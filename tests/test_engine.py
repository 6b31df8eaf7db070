"""
Tests for the single-point escape-time iteration.
"""

import math

import pytest

from rational_julia.complex_number import Complex
from rational_julia.engine import (
    ESCAPE_RADIUS_SQ,
    IterationEngine,
    compute,
    continuous_escape,
)
from rational_julia.state import FractalState


@pytest.fixture
def engine():
    return IterationEngine()


def configure(state, v, x=(0.0, 0.0), k=1.0, recurrence=None):
    state.set_singularity(*v)
    state.constant_x = Complex(*x)
    state.constant_k = k
    if recurrence is not None:
        state.set_recurrence(recurrence)
    return state


class TestSingularity:

    def test_start_on_the_pole(self, engine, state):
        result = engine.compute(state.singularity, state)
        assert result.singularity_hit
        assert result.iterations == 0
        assert result.smooth_value == math.inf

    def test_rational_julia_hits_after_one_step(self, engine, state):
        # z0 = 0 -> z1 = (1 / -1)^2 = 1 = v
        configure(state, v=(1.0, 0.0))
        result = engine.compute(Complex(0, 0), state)
        assert result.singularity_hit
        assert result.iterations == 1

    def test_inverse_square_hits_after_one_step(self, engine, state):
        # z0 = 0 -> z1 = 1 / (0 - 1) = -1, and (-1)^2 - 1 = 0
        configure(state, v=(1.0, 0.0), recurrence="Inverse Square")
        result = engine.compute(Complex(0, 0), state)
        assert result.singularity_hit
        assert result.iterations == 1

    def test_compute_does_not_touch_the_state(self, engine, state):
        engine.compute(state.singularity, state)
        assert state.singularity_occurred is False

    def test_check_point(self, engine, state):
        assert engine.check_point(state.singularity, state)
        assert not engine.check_point(Complex(500, 0), state)


class TestEscape:

    def test_already_outside(self, engine, state):
        z0 = Complex(200, 0)
        assert z0.modulus_squared >= ESCAPE_RADIUS_SQ
        result = engine.compute(z0, state)
        assert result.iterations == 0
        assert not result.singularity_hit
        assert result.smooth_value == pytest.approx(1.0 - math.log(math.log(200.0)) / math.log(2.0))

    def test_escape_count(self, engine, state):
        # 0.5 -> 4 -> 1/16 -> 256, which is outside radius 100
        configure(state, v=(0.0, 0.0))
        result = engine.compute(Complex(0.5, 0), state)
        assert result.iterations == 3
        assert not result.singularity_hit
        assert result.smooth_value == pytest.approx(continuous_escape(3, 256.0))

    def test_smooth_off_reports_the_count(self, engine, state):
        configure(state, v=(0.0, 0.0))
        state.set_render_params(smooth_coloring=False)
        result = engine.compute(Complex(0.5, 0), state)
        assert result.iterations == 3
        assert result.smooth_value == 3.0

    def test_continuous_escape_formula(self):
        assert continuous_escape(4, 1000.0) == pytest.approx(5.0 - math.log(math.log(1000.0)) / math.log(2.0))

    def test_continuous_escape_small_modulus(self):
        assert continuous_escape(2, 0.5) == 3.0


class TestBounded:

    @pytest.mark.parametrize("recurrence", ["Rational Julia", "Inverse Square"])
    def test_fixed_point_reaches_the_cap(self, engine, state, recurrence):
        # With v = x = 0 and k = 1 both recurrences fix z = 1
        configure(state, v=(0.0, 0.0), recurrence=recurrence)
        result = engine.compute(Complex(1, 0), state)
        assert result.iterations == state.max_iterations
        assert not result.singularity_hit

    def test_cap_is_respected(self, engine):
        state = FractalState(8, 8)
        state.set_render_params(max_iterations=7)
        for x in range(8):
            for y in range(8):
                assert engine.compute_at_pixel(x, y, state).iterations <= 7

    def test_compute_at_pixel_uses_the_transform(self, engine, state):
        expected = engine.compute(state.pixel_to_plane(5, 9), state)
        assert engine.compute_at_pixel(5, 9, state) == expected


class TestModuleShortcut:

    def test_accepts_builtin_complex(self, state):
        configure(state, v=(0.0, 0.0))
        assert compute(0.5 + 0j, state) == compute(Complex(0.5, 0), state)


class TestDefaultScenario:

    def test_origin_with_defaults(self, engine):
        state = FractalState()
        result = engine.compute(Complex(0, 0), state)
        assert result.iterations <= 100
        if not result.singularity_hit:
            assert math.isfinite(result.smooth_value)
