"""
Escape-time iteration for a single point of the complex plane.

This is the reference implementation of the algorithm, written on top of
Complex and the Recurrence strategies. The Numba field kernel in
compute.py runs the same steps for every pixel of the viewport.
"""

import math
from collections import namedtuple

from .complex_number import Complex

ESCAPE_RADIUS = 100.0
ESCAPE_RADIUS_SQ = ESCAPE_RADIUS * ESCAPE_RADIUS
# Fixed so the solved condition means the same thing whatever the parameters.
SINGULARITY_THRESHOLD = 1e-6

LOG_2 = math.log(2.0)


IterationResult = namedtuple("IterationResult", ["iterations", "smooth_value", "singularity_hit"])


class IterationEngine:
    """
    Escape-time classifier for the rational recurrence family.

    Usage:
        engine = IterationEngine()
        result = engine.compute(Complex(0.1, 0.2), state)
        if result.singularity_hit:
            ...
    """

    escape_radius_sq = ESCAPE_RADIUS_SQ
    singularity_threshold = SINGULARITY_THRESHOLD

    def compute(self, z0, state):
        """
        Iterate the state's recurrence starting at z0.

        The state is only read. Raising state.singularity_occurred is left to
        the caller (the renderer), so compute() can run on snapshots.

        Args:
            z0: Starting point (Complex)
            state: FractalState supplying the recurrence and its constants

        Returns:
            IterationResult(iterations, smooth_value, singularity_hit).
            iterations == state.max_iterations means the point stayed bounded.
            On a singularity hit, smooth_value is +inf and iterations is the
            count at which the denominator vanished.
        """
        recurrence = state.recurrence
        params = state.recurrence_params()
        max_iter = state.max_iterations
        smooth = state.smooth_coloring

        z = z0
        iterations = 0
        smooth_value = math.exp(-z.modulus) if smooth else 0.0

        while z.modulus_squared < self.escape_radius_sq and iterations < max_iter:
            denominator = recurrence.denominator(z, params)
            if denominator.modulus < self.singularity_threshold:
                return IterationResult(iterations, math.inf, True)

            z = recurrence.advance(z, denominator, params)
            iterations += 1

            if smooth:
                smooth_value += _exp_neg(z.modulus)

        if not smooth:
            smooth_value = float(iterations)
        elif iterations < max_iter:
            modulus = z.modulus
            if 0.0 < modulus < math.inf:
                smooth_value = continuous_escape(iterations, modulus)
            else:
                smooth_value = iterations + 1.0

        return IterationResult(iterations, smooth_value, False)

    def compute_at_pixel(self, x, y, state):
        """Classify the plane point under pixel (x, y)."""
        return self.compute(state.pixel_to_plane(x, y), state)

    def check_point(self, z0, state):
        """True if iterating from z0 reaches the singularity."""
        return self.compute(z0, state).singularity_hit


def continuous_escape(iterations, modulus):
    """
    Smooth (fractional) escape count: n + 1 - log(log|z|) / log 2.

    Only meaningful for |z| > 1, which always holds after escaping the
    radius-100 disc.
    """
    log_modulus = math.log(modulus)
    if log_modulus <= 0.0:
        return iterations + 1.0
    return iterations + 1.0 - math.log(log_modulus) / LOG_2


def _exp_neg(value):
    # exp(-nan) is nan; an overflowed z contributes nothing
    if math.isnan(value):
        return 0.0
    return math.exp(-value)


_default_engine = IterationEngine()


def compute(z0, state):
    """Module-level shortcut for IterationEngine().compute."""
    if not isinstance(z0, Complex):
        z0 = Complex.from_builtin(z0)
    return _default_engine.compute(z0, state)
