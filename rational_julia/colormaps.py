"""
Palette definitions for the fractal renderer.

Each colormap function returns a numpy array of shape (4096, 3) with RGB
values (uint8). The coloring kernel maps a point's normalized escape value
(a fraction in [0, 1)) to a position in the table and interpolates between
neighbouring entries.

The default palette, Hue, walks once around the HSV color wheel at full
saturation and value, so a fraction f is simply drawn with hue f.

To add a new colormap:
1. Define a create_colormap_xxx() function that returns the color array
2. Add it to the COLORMAPS dictionary at the bottom of this file
"""

import numpy as np


NUM_COLORS = 4096  # Resolution of colormap for smooth gradients

BACKGROUND_COLOR = (0, 0, 0, 255)      # In-set points
SINGULARITY_COLOR = (255, 255, 255, 255)  # Pixels whose orbit hit the pole


def hsv_to_rgb(h, s=1.0, v=1.0):
    """Convert HSV (0-1 range) to RGB (0-255 range)."""
    h = h % 1.0
    if s == 0:
        r = g = b = int(round(v * 255))
        return (r, g, b)

    h = h * 6
    i = int(h)
    f = h - i
    p = v * (1 - s)
    q = v * (1 - s * f)
    t = v * (1 - s * (1 - f))

    if i == 0:
        r, g, b = v, t, p
    elif i == 1:
        r, g, b = q, v, p
    elif i == 2:
        r, g, b = p, v, t
    elif i == 3:
        r, g, b = p, q, v
    elif i == 4:
        r, g, b = t, p, v
    else:
        r, g, b = v, p, q

    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))


def create_colormap_hue():
    """
    Hue colormap: one full trip around the color wheel.

    red -> yellow -> green -> cyan -> blue -> magenta -> (back to red).
    The first and last entries are both pure red, so the table wraps cleanly.
    """
    colors = np.zeros((NUM_COLORS, 3), dtype=np.uint8)
    for i in range(NUM_COLORS):
        colors[i] = hsv_to_rgb(i / (NUM_COLORS - 1))
    return colors


def create_colormap_hot():
    """
    Hot colormap: black -> red -> orange -> yellow -> white.

    Uses a power curve to spend more time in the bright colors.
    """
    colors = np.zeros((NUM_COLORS, 3), dtype=np.uint8)
    for i in range(NUM_COLORS):
        t = (i / (NUM_COLORS - 1)) ** 0.8

        colors[i, 0] = int(min(255, 255 * min(1, t * 2.5)))
        colors[i, 1] = int(min(255, 255 * max(0, (t - 0.4) * 2.5)))
        colors[i, 2] = int(min(255, 255 * max(0, (t - 0.7) * 3.3)))
    return colors


def create_colormap_ocean():
    """Ocean colormap: deep blue -> cyan -> white."""
    colors = np.zeros((NUM_COLORS, 3), dtype=np.uint8)
    for i in range(NUM_COLORS):
        t = i / (NUM_COLORS - 1)
        colors[i, 0] = int(min(255, 255 * max(0, (t - 0.5) * 2)))
        colors[i, 1] = int(min(255, 255 * t))
        colors[i, 2] = int(min(255, 50 + 205 * t))
    return colors


def create_colormap_grayscale():
    """Grayscale colormap: black -> white."""
    ramp = np.linspace(0, 255, NUM_COLORS).astype(np.uint8)
    return np.repeat(ramp[:, None], 3, axis=1)


# Registry of all available colormaps.
# Keys are display names, values are factory functions.
COLORMAPS = {
    'Hue': create_colormap_hue,
    'Hot': create_colormap_hot,
    'Ocean': create_colormap_ocean,
    'Grayscale': create_colormap_grayscale,
}

DEFAULT_COLORMAP = 'Hue'

_cache = {}


def get_colormap(name):
    """
    Get a colormap by name. Tables are built once and shared.

    Args:
        name: Key from COLORMAPS dictionary

    Returns:
        Colormap array (4096, 3) of uint8 RGB values

    Raises:
        KeyError if name not found
    """
    if name not in _cache:
        colors = COLORMAPS[name]()
        colors.flags.writeable = False
        _cache[name] = colors
    return _cache[name]


def get_default_colormap():
    return get_colormap(DEFAULT_COLORMAP)


def list_colormap_names():
    """Get list of available colormap names."""
    return list(COLORMAPS.keys())
