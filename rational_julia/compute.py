"""
Fractal field computation using Numba JIT compilation.

This module contains the performance-critical CPU path. The functions
here run the escape-time algorithm of engine.IterationEngine on plain
floats so Numba can compile them, and sweep it over every pixel of the
viewport in parallel:
- Recurrence denominator / advance steps (dispatch on recurrence id)
- Single-point iteration with smooth coloring and singularity detection
- Full-field sweep (one prange row per thread, disjoint output cells)
- Palette coloring into an RGBA buffer

The arithmetic mirrors complex_number.Complex operation for operation, so
a pixel classified here matches IterationEngine.compute at the same point.
"""

import math
from collections import namedtuple

import numpy as np
from numba import jit, prange

from .colormaps import BACKGROUND_COLOR, SINGULARITY_COLOR
from .engine import ESCAPE_RADIUS_SQ, SINGULARITY_THRESHOLD
from .recurrences import RECURRENCE_RATIONAL_JULIA, RECURRENCE_INVERSE_SQUARE


FieldResult = namedtuple("FieldResult", ["iterations", "smooth", "singular"])

LOG_2 = math.log(2.0)

# Frozen into the coloring kernel at compile time
BACKGROUND_RGBA = np.array(BACKGROUND_COLOR, dtype=np.uint8)
SINGULARITY_RGBA = np.array(SINGULARITY_COLOR, dtype=np.uint8)


@jit(nopython=True, cache=True)
def complex_div(ar, ai, br, bi):
    """(a + bi) / (c + di), returning 0 for a zero-modulus divisor."""
    mod2 = br * br + bi * bi
    if mod2 == 0.0:
        return 0.0, 0.0
    return (ar * br + ai * bi) / mod2, (ai * br - ar * bi) / mod2


@jit(nopython=True, cache=True)
def recurrence_denominator(zr, zi, vr, vi, recurrence_id):
    """
    The expression whose modulus may approach zero.

    Args:
        zr, zi: Current z
        vr, vi: Singularity parameter v
        recurrence_id: RECURRENCE_* constant
    """
    if recurrence_id == RECURRENCE_INVERSE_SQUARE:
        # z² - v
        return zr * zr - zi * zi - vr, 2.0 * zr * zi - vi
    # z - v
    return zr - vr, zi - vi


@jit(nopython=True, cache=True)
def recurrence_advance(dr, di, k, xr, xi, recurrence_id):
    """Next z from this step's denominator."""
    if recurrence_id == RECURRENCE_INVERSE_SQUARE:
        # 1 / (z² - v)
        return complex_div(1.0, 0.0, dr, di)
    # (k / (z - v))² + x
    qr, qi = complex_div(k, 0.0, dr, di)
    return qr * qr - qi * qi + xr, 2.0 * qr * qi + xi


@jit(nopython=True, cache=True)
def iterate_point(zr, zi, max_iter, smooth, recurrence_id, vr, vi, k, xr, xi):
    """
    Escape-time iteration for one starting point.

    Returns:
        (iterations, smooth_value, singularity_hit)
    """
    iterations = 0
    smooth_value = 0.0
    if smooth:
        smooth_value = math.exp(-math.hypot(zr, zi))

    while zr * zr + zi * zi < ESCAPE_RADIUS_SQ and iterations < max_iter:
        dr, di = recurrence_denominator(zr, zi, vr, vi, recurrence_id)
        if math.hypot(dr, di) < SINGULARITY_THRESHOLD:
            return iterations, np.inf, True

        zr, zi = recurrence_advance(dr, di, k, xr, xi, recurrence_id)
        iterations += 1

        if smooth:
            m = math.hypot(zr, zi)
            if not math.isnan(m):
                smooth_value += math.exp(-m)

    if not smooth:
        smooth_value = float(iterations)
    elif iterations < max_iter:
        modulus = math.hypot(zr, zi)
        if modulus > 0.0 and modulus < np.inf:
            log_modulus = math.log(modulus)
            if log_modulus > 0.0:
                smooth_value = iterations + 1.0 - math.log(log_modulus) / LOG_2
            else:
                smooth_value = iterations + 1.0
        else:
            smooth_value = iterations + 1.0

    return iterations, smooth_value, False


@jit(nopython=True, parallel=True, cache=True)
def compute_field_kernel(width, height, center_re, center_im, zoom, max_iter, smooth,
                         recurrence_id, vr, vi, k, xr, xi,
                         iterations_out, smooth_out, singular_out):
    """
    Classify every pixel of the viewport.

    Pixel (px, py) maps to the plane exactly as FractalState.pixel_to_plane
    does (origin top-left, imaginary axis pointing up). Each pixel writes
    only its own output cells.

    Args:
        width, height: Viewport size in pixels
        center_re, center_im: View center
        zoom: Plane width spanned by the viewport
        max_iter: Iteration cap
        smooth: Smooth coloring flag
        recurrence_id, vr, vi, k, xr, xi: Recurrence and its constants
        iterations_out: (height, width) int32 array, modified in place
        smooth_out: (height, width) float64 array, modified in place
        singular_out: (height, width) bool array, modified in place
    """
    plane_w = zoom
    plane_h = zoom * height / width
    for py in prange(height):
        im = (height - py) / height * plane_h + center_im - plane_h / 2.0
        for px in range(width):
            re = px / width * plane_w + center_re - plane_w / 2.0
            n, value, hit = iterate_point(re, im, max_iter, smooth, recurrence_id,
                                          vr, vi, k, xr, xi)
            iterations_out[py, px] = n
            smooth_out[py, px] = value
            singular_out[py, px] = hit


def compute_field(state):
    """
    Run the escape-time sweep for the whole viewport of a state.

    Args:
        state: FractalState (or a snapshot of one)

    Returns:
        FieldResult(iterations, smooth, singular) arrays of shape (height, width)
    """
    height, width = state.height, state.width
    iterations = np.zeros((height, width), dtype=np.int32)
    smooth = np.zeros((height, width), dtype=np.float64)
    singular = np.zeros((height, width), dtype=np.bool_)

    params = state.recurrence_params()
    compute_field_kernel(
        width, height, state.center.re, state.center.im, state.zoom,
        state.max_iterations, state.smooth_coloring, state.recurrence.recurrence_id,
        params.singularity.re, params.singularity.im, params.k, params.x.re, params.x.im,
        iterations, smooth, singular,
    )
    return FieldResult(iterations, smooth, singular)


@jit(nopython=True, parallel=True, cache=True)
def apply_coloring(iterations, smooth, singular, max_iter, color_range, color_shift,
                   colormap, out):
    """
    Color classified pixels into an RGBA buffer.

    - singular pixels get SINGULARITY_COLOR
    - in-set pixels (iterations == max_iter) get BACKGROUND_COLOR
    - everything else looks up (smooth / max_iter * color_range + color_shift)
      mod 1 in the colormap with linear interpolation

    Args:
        iterations, smooth, singular: Arrays from compute_field
        max_iter: Iteration cap used for the sweep
        color_range: Multiplier on the normalized escape value
        color_shift: Offset added before wrapping
        colormap: Nx3 array of RGB colors (uint8)
        out: (height, width, 4) uint8 RGBA buffer, modified in place
    """
    height, width = iterations.shape
    num_colors = colormap.shape[0]

    for py in prange(height):
        for px in range(width):
            if singular[py, px]:
                for c in range(4):
                    out[py, px, c] = SINGULARITY_RGBA[c]
            elif iterations[py, px] >= max_iter:
                for c in range(4):
                    out[py, px, c] = BACKGROUND_RGBA[c]
            else:
                out[py, px, 3] = 255
                frac = (smooth[py, px] / max_iter * color_range + color_shift) % 1.0
                if not (frac >= 0.0 and frac < 1.0):
                    frac = 0.0
                fidx = frac * (num_colors - 1)
                idx0 = int(fidx)
                idx1 = min(idx0 + 1, num_colors - 1)
                t = fidx - idx0

                for c in range(3):
                    out[py, px, c] = np.uint8(colormap[idx0, c] * (1 - t) + colormap[idx1, c] * t)


def warmup_jit(colormap):
    """
    Warm up JIT compilation with a tiny field.

    Call this once at startup to pre-compile the Numba functions,
    avoiding a delay on the first real sweep.
    """
    iterations = np.zeros((4, 4), dtype=np.int32)
    smooth = np.zeros((4, 4), dtype=np.float64)
    singular = np.zeros((4, 4), dtype=np.bool_)
    for recurrence_id in (RECURRENCE_RATIONAL_JULIA, RECURRENCE_INVERSE_SQUARE):
        compute_field_kernel(4, 4, 0.0, 0.0, 3.0, 10, True, recurrence_id,
                             0.25, 0.5, 1.0, 0.15, -0.2, iterations, smooth, singular)
    out = np.zeros((4, 4, 4), dtype=np.uint8)
    apply_coloring(iterations, smooth, singular, 10, 1.0, 0.0, colormap, out)
