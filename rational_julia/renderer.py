"""
Fractal renderer with a dirty flag and dual CPU/GPU update paths.

The FractalRenderer class handles:
- Ownership of the RGBA pixel buffer (recreated on viewport resize)
- Dirty tracking: every parameter edit marks the renderer dirty and the
  next tick() does the work
- CPU path: Numba sweep over every pixel, coloring, publish to a display
- GPU path: publish a flat parameter struct to an external evaluator, plus
  a CPU check of the center point for the singularity event
- Graceful fallback to the CPU path when no GPU evaluator is bound
"""

import logging
import threading
import time

import numpy as np

from .colormaps import get_colormap
from .complex_number import Complex
from .compute import apply_coloring, compute_field
from .compute_gpu import GPUParameters
from .engine import IterationEngine
from .state import FractalState

logger = logging.getLogger(__name__)


class FractalRenderer:
    """
    Owns a FractalState, a pixel buffer and the render pipeline.

    Usage:
        renderer = FractalRenderer(800, 600, display=surface)
        renderer.set_recurrence_parameter(0.3, 0.4)

        # In your game loop:
        renderer.tick()
        if renderer.get_singularity_flag():
            renderer.clear_singularity_flag()
            celebrate()

    Attributes:
        state: The active FractalState
        use_gpu: True when tick() publishes to the GPU evaluator
        display: Surface with present(rgba), or None
        gpu_evaluator: Object with publish(GPUParameters), or None
    """

    def __init__(self, width=None, height=None, use_gpu=False, display=None,
                 gpu_evaluator=None, recurrence=None, engine=None):
        """
        Initialize the renderer.

        Args:
            width, height: Viewport size in pixels (default 800x600)
            use_gpu: Start in GPU mode (falls back to CPU without an evaluator)
            display: Surface receiving finished CPU buffers (optional)
            gpu_evaluator: Evaluator receiving GPUParameters (optional)
            recurrence: Recurrence instance or name (default rational Julia)
            engine: IterationEngine used for the GPU-mode center check
        """
        self.lock = threading.Lock()
        self._dirty = True
        # Bumped by every edit; a sweep result only counts for its own generation
        self._generation = 0

        self.state = FractalState(width, height, recurrence)
        self.engine = engine or IterationEngine()
        self.display = display
        self.gpu_evaluator = gpu_evaluator
        self.use_gpu = False
        self.set_render_mode(use_gpu)

        self.buffer = self._allocate_buffer()
        self.last_sweep_seconds = None
        self.last_gpu_parameters = None
        self._warned_no_display = False

    def _allocate_buffer(self):
        return np.zeros((self.state.height, self.state.width, 4), dtype=np.uint8)

    # ------------------------------------------------------------------
    # Dirty tracking
    # ------------------------------------------------------------------

    def mark_dirty(self):
        with self.lock:
            self._dirty = True
            self._generation += 1

    @property
    def is_dirty(self):
        with self.lock:
            return self._dirty

    def _mutate(self, mutation, *args):
        """Run a state mutator under the lock and mark dirty if it was accepted."""
        with self.lock:
            accepted = mutation(*args)
            if accepted:
                self._dirty = True
                self._generation += 1
        return accepted

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self):
        """
        Advance the pipeline one step.

        Clean: nothing happens. Dirty: run the CPU sweep or the GPU
        parameter push for a snapshot of the current state, then go clean.
        Edits made while a sweep runs mark the renderer dirty again and are
        picked up by the next tick.

        Returns:
            True if work was done, False if the renderer was clean
        """
        with self.lock:
            if not self._dirty:
                return False
            self._dirty = False
            snapshot = self.state.snapshot()
            generation = self._generation
            if snapshot.width != self.buffer.shape[1] or snapshot.height != self.buffer.shape[0]:
                self.buffer = self._allocate_buffer()

        if self.use_gpu and self.gpu_evaluator is None:
            logger.warning("GPU mode without an evaluator; falling back to CPU rendering")
            self.use_gpu = False

        if self.use_gpu:
            try:
                self._render_gpu(snapshot, generation)
            except Exception:
                logger.exception("GPU evaluator failed; falling back to CPU rendering")
                self.use_gpu = False
                self._render_cpu(snapshot, generation)
        else:
            self._render_cpu(snapshot, generation)
        return True

    def _render_cpu(self, snapshot, generation):
        """Classify every pixel, color into the buffer and publish it."""
        start = time.perf_counter()
        field = compute_field(snapshot)
        apply_coloring(
            field.iterations, field.smooth, field.singular,
            snapshot.max_iterations, snapshot.color_range, snapshot.color_shift,
            get_colormap(snapshot.palette), self.buffer,
        )
        self.last_sweep_seconds = time.perf_counter() - start
        logger.debug("CPU sweep %dx%d took %.3fs", snapshot.width, snapshot.height,
                     self.last_sweep_seconds)

        if field.singular.any():
            self._raise_singularity(generation)
        self._publish_buffer()

    def _render_gpu(self, snapshot, generation):
        """Push parameters to the evaluator, then check the center point on the CPU."""
        params = GPUParameters.from_state(snapshot)
        self.gpu_evaluator.publish(params)
        self.last_gpu_parameters = params

        if self.engine.compute(snapshot.center, snapshot).singularity_hit:
            self._raise_singularity(generation)

    def _raise_singularity(self, generation):
        with self.lock:
            if generation != self._generation:
                logger.debug("Dropping singularity from a stale sweep")
                return
            # Single cell: un-consumed events collapse into one
            if not self.state.singularity_occurred:
                logger.info("Singularity reached: denominator vanished")
            self.state.singularity_occurred = True

    def _publish_buffer(self):
        if self.display is None:
            if not self._warned_no_display:
                logger.info("No display surface bound; keeping the buffer unpublished")
                self._warned_no_display = True
            return
        self.display.present(self.get_pixel_buffer())

    # ------------------------------------------------------------------
    # View and parameter operations
    # ------------------------------------------------------------------

    def pan(self, dx, dy):
        """Move the view center by (dx, dy) plane units."""
        return self._mutate(self.state.pan, Complex(dx, dy))

    def zoom_in(self, at, factor=2.0):
        """
        Center on a plane point and narrow the view.

        Args:
            at: Complex point (or Python complex) to center on
            factor: Zoom width is divided by this (> 0)
        """
        if not isinstance(at, Complex):
            at = Complex.from_builtin(at)
        return self._mutate(self.state.zoom_in, at, factor)

    def zoom_out(self, factor=2.0):
        return self._mutate(self.state.zoom_out, factor)

    def reset(self):
        """Restore default view and parameters and clear the singularity flag."""
        return self._mutate(self.state.reset)

    def set_view(self, center_x, center_y, zoom):
        return self._mutate(self.state.set_view, center_x, center_y, zoom)

    def set_recurrence_parameter(self, real, imag):
        """Move the user-tunable singularity."""
        return self._mutate(self.state.set_singularity, real, imag)

    def set_recurrence(self, recurrence):
        """Swap the recurrence strategy (instance, name or id)."""
        return self._mutate(self.state.set_recurrence, recurrence)

    def set_render_params(self, max_iterations=None, color_range=None,
                          color_shift=None, smooth_coloring=None):
        return self._mutate(self.state.set_render_params,
                            max_iterations, color_range, color_shift, smooth_coloring)

    def set_palette(self, name):
        return self._mutate(self.state.set_palette, name)

    def set_viewport(self, width, height):
        """Resize the viewport; the buffer is reallocated on the next tick."""
        return self._mutate(self.state.set_viewport, width, height)

    # ------------------------------------------------------------------
    # Render mode and collaborators
    # ------------------------------------------------------------------

    def set_render_mode(self, use_gpu):
        """
        Switch between CPU and GPU paths.

        Returns:
            bool: The mode actually in effect
        """
        if use_gpu and self.gpu_evaluator is None:
            logger.warning("GPU mode requested but no evaluator is bound; staying on CPU")
            use_gpu = False
        if use_gpu != self.use_gpu:
            logger.info("Render mode: %s", "GPU" if use_gpu else "CPU")
            self.use_gpu = use_gpu
            self.mark_dirty()
        return self.use_gpu

    def bind_display(self, display):
        self.display = display
        self._warned_no_display = False
        self.mark_dirty()

    def bind_gpu_evaluator(self, evaluator):
        self.gpu_evaluator = evaluator
        if evaluator is None and self.use_gpu:
            self.set_render_mode(False)
        self.mark_dirty()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_singularity_flag(self):
        return self.state.singularity_occurred

    def clear_singularity_flag(self):
        with self.lock:
            self.state.singularity_occurred = False

    def get_pixel_buffer(self):
        """Read-only view of the RGBA buffer, shape (height, width, 4)."""
        view = self.buffer.view()
        view.flags.writeable = False
        return view

    def get_gpu_parameters(self):
        """Flat parameter struct for the current state."""
        return GPUParameters.from_state(self.state)

    def get_recurrence_constants(self):
        """Variant-specific constants of the active recurrence (or None)."""
        return self.state.recurrence_constants()

    def get_current_state(self):
        return self.state

    def get_render_info(self):
        """
        Summary of the renderer for status displays.

        Returns:
            dict with keys 'mode', 'recurrence', 'formula', 'singularity',
            'center', 'zoom', 'max_iterations', 'palette', 'smooth_coloring',
            'last_sweep_seconds'
        """
        state = self.state
        return {
            'mode': 'GPU' if self.use_gpu else 'CPU',
            'recurrence': state.recurrence.name,
            'formula': state.recurrence.formula,
            'singularity': state.singularity,
            'center': state.center,
            'zoom': state.zoom,
            'max_iterations': state.max_iterations,
            'palette': state.palette,
            'smooth_coloring': state.smooth_coloring,
            'last_sweep_seconds': self.last_sweep_seconds,
        }
