"""
Pytest configuration and shared fixtures.
"""

import pytest

from rational_julia.renderer import FractalRenderer
from rational_julia.state import FractalState


class FakeDisplay:
    """Display surface that records every published frame."""

    def __init__(self):
        self.frames = []

    def present(self, rgba):
        self.frames.append(rgba.copy())


class FakeEvaluator:
    """GPU evaluator that records the parameter structs it receives."""

    def __init__(self, fail=False):
        self.published = []
        self.fail = fail

    def publish(self, params):
        if self.fail:
            raise RuntimeError("shader compile failed")
        self.published.append(params)


@pytest.fixture
def state():
    """A fresh state with a small viewport."""
    return FractalState(32, 24)


@pytest.fixture
def display():
    return FakeDisplay()


@pytest.fixture
def evaluator():
    return FakeEvaluator()


@pytest.fixture
def renderer(display):
    """A CPU renderer with a small viewport and a recording display."""
    return FractalRenderer(32, 24, display=display)
