"""
Tests for the GPU parameter struct and the PyTorch evaluator.
"""

import dataclasses

import numpy as np
import pytest

from rational_julia import compute_gpu
from rational_julia.complex_number import Complex
from rational_julia.compute import apply_coloring, compute_field
from rational_julia.compute_gpu import GPUParameters, GPUUnavailableError
from rational_julia.colormaps import get_colormap

from conftest import FakeDisplay


class TestGPUParameters:

    def test_from_state(self, state):
        state.set_view(0.5, -0.25, 2.0)
        state.set_singularity(0.1, 0.2)
        params = GPUParameters.from_state(state)
        assert (params.center_x, params.center_y, params.zoom) == (0.5, -0.25, 2.0)
        assert (params.width, params.height) == (32, 24)
        assert params.max_iterations == 100
        assert (params.v_real, params.v_imag) == (0.1, 0.2)
        assert params.k == 1.0
        assert (params.x_real, params.x_imag) == (0.15, -0.2)
        assert params.recurrence_id == 0

    def test_recurrence_id(self, state):
        state.set_recurrence("Inverse Square")
        assert GPUParameters.from_state(state).recurrence_id == 1

    def test_frozen(self, state):
        params = GPUParameters.from_state(state)
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.zoom = 1.0

    def test_shader_uniforms(self, state):
        state.set_palette("Ocean")
        uniforms = GPUParameters.from_state(state).as_shader_uniforms()
        assert uniforms["palette"] == 2
        assert uniforms["smooth_coloring"] == 1
        assert all(isinstance(value, (int, float)) for value in uniforms.values())


class TestWithoutTorch:

    def test_evaluator_refuses(self, monkeypatch):
        monkeypatch.setattr(compute_gpu, "TORCH_AVAILABLE", False)
        with pytest.raises(GPUUnavailableError):
            compute_gpu.TorchEvaluator()

    def test_default_evaluator_is_none(self, monkeypatch):
        monkeypatch.setattr(compute_gpu, "TORCH_AVAILABLE", False)
        assert compute_gpu.create_default_evaluator() is None
        assert compute_gpu.is_gpu_available() is False


class TestTorchEvaluator:

    @pytest.fixture
    def torch_evaluator(self):
        pytest.importorskip("torch")
        return compute_gpu.TorchEvaluator(display=FakeDisplay(), prefer_gpu=False)

    def test_publish_presents_an_image(self, torch_evaluator, state):
        image = torch_evaluator.publish(GPUParameters.from_state(state))
        assert image.shape == (24, 32, 4)
        assert image.dtype == np.uint8
        assert (image[:, :, 3] == 255).all()
        assert torch_evaluator.display.frames[-1].shape == (24, 32, 4)
        assert torch_evaluator.last_image is image

    @pytest.mark.parametrize("recurrence", ["Rational Julia", "Inverse Square"])
    def test_agrees_with_cpu_sweep(self, torch_evaluator, state, recurrence):
        state.set_recurrence(recurrence)
        iterations, _, singular = torch_evaluator.evaluate(GPUParameters.from_state(state))
        field = compute_field(state)
        same = (iterations.cpu().numpy() == field.iterations) & (singular.cpu().numpy() == field.singular)
        assert same.mean() > 0.99

    def test_colors_match_cpu_sweep(self, torch_evaluator, state):
        image = torch_evaluator.publish(GPUParameters.from_state(state))
        field = compute_field(state)
        expected = np.zeros((24, 32, 4), dtype=np.uint8)
        apply_coloring(field.iterations, field.smooth, field.singular, state.max_iterations,
                       state.color_range, state.color_shift, get_colormap(state.palette), expected)
        close = np.abs(image.astype(int) - expected.astype(int)).max(axis=-1) <= 3
        assert close.mean() > 0.95

    def test_singular_pixel(self, torch_evaluator, state):
        pole = state.pixel_to_plane(3, 2)
        state.set_singularity(pole.re, pole.im)
        image = torch_evaluator.publish(GPUParameters.from_state(state))
        assert torch_evaluator.last_singular[2, 3]
        assert tuple(image[2, 3]) == (255, 255, 255, 255)

    def test_center_on_the_pole(self, torch_evaluator, state):
        # The center pixel maps to 0, which is the pole when v = 0
        state.set_singularity(0.0, 0.0)
        state.constant_x = Complex(0, 0)
        iterations, _, singular = torch_evaluator.evaluate(GPUParameters.from_state(state))
        assert singular.cpu().numpy()[12, 16]
        assert iterations.cpu().numpy()[12, 16] == 0

    def test_device_info(self, torch_evaluator):
        assert "cpu" in torch_evaluator.get_device_info()
