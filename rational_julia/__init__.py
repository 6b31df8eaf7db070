"""
Rational Julia Explorer Package

An interactive escape-time fractal engine for the recurrence
z = (k / (z - v))^2 + x, where the player moves the pole v until some
orbit divides by zero. Pygame provides the display, Numba the JIT-compiled
CPU sweep and (optionally) PyTorch the GPU evaluator.

Quick Start:
    from rational_julia import run
    run()

Or from command line:
    python -m rational_julia

Package Structure:
    - complex_number.py: Immutable complex value with total division
    - recurrences.py: Pluggable recurrence strategies
    - state.py: Fractal parameters and the pixel <-> plane transform
    - engine.py: Single-point escape-time iteration
    - compute.py: JIT-compiled field sweep and coloring
    - compute_gpu.py: GPU parameter struct and PyTorch evaluator
    - colormaps.py: Palette definitions (Hue, Hot, Ocean, Grayscale)
    - renderer.py: Dirty-tracked CPU/GPU render pipeline
    - settings.py: settings.json loading
    - hud.py: Status overlay
    - app.py: Main application and event loop

Controls:
    - Arrows/WASD: Pan
    - Q/E or scroll: Zoom in/out
    - J/L, I/K: Move the singularity parameter v
    - +/-: Iteration cap
    - C, M, P: Color shift, smooth coloring, palette
    - T: Switch recurrence
    - G: Toggle GPU rendering
    - R: Reset
    - ESC: Quit
"""

from .complex_number import Complex
from .recurrences import (
    InverseSquare,
    RationalJulia,
    Recurrence,
    RecurrenceParams,
    get_recurrence,
    list_recurrence_names,
)
from .state import FractalState
from .engine import IterationEngine, IterationResult
from .compute_gpu import GPUParameters, TorchEvaluator
from .renderer import FractalRenderer
from .colormaps import COLORMAPS, get_colormap, list_colormap_names
from .app import run, FractalApp

__version__ = "1.0.0"
__all__ = [
    "run",
    "FractalApp",
    "FractalRenderer",
    "FractalState",
    "IterationEngine",
    "IterationResult",
    "Complex",
    "Recurrence",
    "RecurrenceParams",
    "RationalJulia",
    "InverseSquare",
    "get_recurrence",
    "list_recurrence_names",
    "GPUParameters",
    "TorchEvaluator",
    "COLORMAPS",
    "get_colormap",
    "list_colormap_names",
]
