"""
Fractal state: recurrence constants, view, render parameters and the
singularity event flag.

FractalState also owns the pixel <-> plane transform. Mutators validate
their input and refuse bad values (logging a warning and returning False)
instead of raising, so a stray UI value can never break the render loop.
"""

import copy
import logging
import math
import numbers

from .colormaps import COLORMAPS, DEFAULT_COLORMAP
from .complex_number import Complex
from .recurrences import RecurrenceParams, get_default_recurrence, get_recurrence

logger = logging.getLogger(__name__)


def _finite(*values):
    return all(isinstance(v, numbers.Real) and math.isfinite(v) for v in values)


class FractalState:
    """
    Mutable parameter set for one fractal view.

    Attributes:
        recurrence: Active Recurrence strategy
        singularity: User-tunable pole location (Complex)
        constant_k, constant_x: Fixed recurrence constants
        center: View center in the complex plane
        zoom: Width of the viewport in plane units (> 0)
        width, height: Viewport size in pixels (> 0)
        max_iterations: Iteration cap (> 0)
        color_range: Multiplier on the normalized escape value
        color_shift: Hue offset in [0, 1)
        smooth_coloring: Use the continuous escape value
        palette: Colormap name
        singularity_occurred: One-shot event flag set by the renderer
    """

    # Defaults
    DEFAULT_CENTER = Complex(0.0, 0.0)
    DEFAULT_ZOOM = 3.0
    DEFAULT_MAX_ITER = 100
    DEFAULT_COLOR_RANGE = 1.0
    DEFAULT_COLOR_SHIFT = 0.0
    DEFAULT_SMOOTH = True
    DEFAULT_SINGULARITY = Complex(0.25, 0.5)
    DEFAULT_K = 1.0
    DEFAULT_X = Complex(0.15, -0.2)
    DEFAULT_WIDTH = 800
    DEFAULT_HEIGHT = 600

    def __init__(self, width=None, height=None, recurrence=None):
        """
        Initialize with documented defaults.

        Args:
            width, height: Viewport size in pixels (default 800x600)
            recurrence: Recurrence instance or name (default rational Julia)
        """
        self.width = self.DEFAULT_WIDTH
        self.height = self.DEFAULT_HEIGHT
        if width is not None or height is not None:
            if not self.set_viewport(width or self.DEFAULT_WIDTH,
                                     height or self.DEFAULT_HEIGHT):
                logger.warning("Using default viewport %dx%d", self.width, self.height)
        self.recurrence = (get_recurrence(recurrence) if recurrence is not None
                           else get_default_recurrence())
        self.reset()

    def reset(self):
        """Restore all defaults (view, render params, constants) and clear the event flag."""
        self.center = self.DEFAULT_CENTER
        self.zoom = self.DEFAULT_ZOOM
        self.max_iterations = self.DEFAULT_MAX_ITER
        self.color_range = self.DEFAULT_COLOR_RANGE
        self.color_shift = self.DEFAULT_COLOR_SHIFT
        self.smooth_coloring = self.DEFAULT_SMOOTH
        self.palette = DEFAULT_COLORMAP
        self.singularity = self.DEFAULT_SINGULARITY
        self.constant_k = self.DEFAULT_K
        self.constant_x = self.DEFAULT_X
        self.singularity_occurred = False
        return True

    def snapshot(self):
        """Independent copy for a render sweep. Complex values are immutable, so shallow is enough."""
        return copy.copy(self)

    def recurrence_params(self):
        return RecurrenceParams(self.singularity, self.constant_k, self.constant_x)

    def recurrence_constants(self):
        """Variant-specific constants of the active recurrence, or None."""
        return self.recurrence.constants_view(self.recurrence_params())

    # ------------------------------------------------------------------
    # Coordinate transform
    # ------------------------------------------------------------------

    @property
    def plane_height(self):
        return self.zoom * self.height / self.width

    def pixel_to_plane(self, x, y):
        """
        Map pixel (x, y), origin top-left, to a point in the complex plane.

        The vertical axis is flipped: pixel y grows downward while the
        imaginary axis grows upward.
        """
        plane_w = self.zoom
        plane_h = self.plane_height
        re = x / self.width * plane_w + self.center.re - plane_w / 2.0
        im = (self.height - y) / self.height * plane_h + self.center.im - plane_h / 2.0
        return Complex(re, im)

    def plane_to_pixel(self, z):
        """Inverse of pixel_to_plane. Returns (x, y) as floats."""
        plane_w = self.zoom
        plane_h = self.plane_height
        x = (z.re - self.center.re + plane_w / 2.0) / plane_w * self.width
        y = self.height - (z.im - self.center.im + plane_h / 2.0) / plane_h * self.height
        return x, y

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def set_view(self, center_x, center_y, zoom):
        if not _finite(center_x, center_y, zoom) or zoom <= 0:
            logger.warning("Refusing view center=(%r, %r) zoom=%r", center_x, center_y, zoom)
            return False
        self.center = Complex(center_x, center_y)
        self.zoom = float(zoom)
        return True

    def pan(self, offset):
        """Move the center by a Complex offset."""
        new_center = self.center + offset
        if not new_center.is_finite():
            logger.warning("Refusing pan by %r", offset)
            return False
        self.center = new_center
        return True

    def zoom_in(self, point, factor):
        """Center on point and divide the zoom width by factor."""
        if not _finite(factor) or factor <= 0 or not point.is_finite():
            logger.warning("Refusing zoom_in at %r by %r", point, factor)
            return False
        new_zoom = self.zoom / factor
        if not math.isfinite(new_zoom) or new_zoom <= 0:
            logger.warning("Zoom %r / %r leaves the valid range", self.zoom, factor)
            return False
        self.center = point
        self.zoom = new_zoom
        return True

    def zoom_out(self, factor):
        if not _finite(factor) or factor <= 0:
            logger.warning("Refusing zoom_out by %r", factor)
            return False
        new_zoom = self.zoom * factor
        if not math.isfinite(new_zoom) or new_zoom <= 0:
            logger.warning("Zoom %r * %r leaves the valid range", self.zoom, factor)
            return False
        self.zoom = new_zoom
        return True

    def set_singularity(self, real, imag):
        if not _finite(real, imag):
            logger.warning("Refusing singularity parameter (%r, %r)", real, imag)
            return False
        self.singularity = Complex(real, imag)
        return True

    def set_render_params(self, max_iterations=None, color_range=None,
                          color_shift=None, smooth_coloring=None):
        """
        Update render parameters. None keeps the current value.

        The whole update is refused if any supplied value is invalid.
        color_shift is wrapped into [0, 1).
        """
        if max_iterations is not None:
            if isinstance(max_iterations, bool) or not isinstance(max_iterations, numbers.Integral) \
                    or max_iterations <= 0:
                logger.warning("Refusing max_iterations=%r", max_iterations)
                return False
        if color_range is not None and not _finite(color_range):
            logger.warning("Refusing color_range=%r", color_range)
            return False
        if color_shift is not None and not _finite(color_shift):
            logger.warning("Refusing color_shift=%r", color_shift)
            return False

        if max_iterations is not None:
            self.max_iterations = int(max_iterations)
        if color_range is not None:
            self.color_range = float(color_range)
        if color_shift is not None:
            shift = float(color_shift) % 1.0
            # A tiny negative shift rounds up to exactly 1.0
            if shift >= 1.0:
                shift = 0.0
            self.color_shift = shift
        if smooth_coloring is not None:
            self.smooth_coloring = bool(smooth_coloring)
        return True

    def set_palette(self, name):
        if name not in COLORMAPS:
            logger.warning("Unknown palette %r", name)
            return False
        self.palette = name
        return True

    def set_viewport(self, width, height):
        if isinstance(width, bool) or isinstance(height, bool) \
                or not isinstance(width, numbers.Integral) \
                or not isinstance(height, numbers.Integral) \
                or width <= 0 or height <= 0:
            logger.warning("Refusing viewport %rx%r", width, height)
            return False
        self.width = int(width)
        self.height = int(height)
        return True

    def set_recurrence(self, recurrence):
        self.recurrence = get_recurrence(recurrence)
        return True

    def __repr__(self):
        return (f"FractalState(recurrence={self.recurrence!r}, singularity={self.singularity!r}, "
                f"center={self.center!r}, zoom={self.zoom!r}, viewport={self.width}x{self.height}, "
                f"max_iterations={self.max_iterations})")
