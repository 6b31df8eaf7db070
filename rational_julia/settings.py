"""
Host settings loaded from settings.json.

The JSON file next to this module holds the defaults for the pygame host
(window size, render mode, input step sizes). A user file can be passed
instead; its keys are merged over the built-in defaults.
"""

import json
import logging
import os

logger = logging.getLogger(__name__)

SETTINGS_PATH = os.path.join(os.path.dirname(__file__), 'settings.json')

DEFAULT_SETTINGS = {
    'width': 800,
    'height': 600,
    'use_gpu': False,
    'fps': 60,
    'pan_step': 0.1,          # fraction of the zoom width per frame
    'zoom_step': 1.2,         # factor per frame
    'singularity_step': 0.01,
    'iteration_step': 10,
    'color_shift_step': 0.05,
}


def load_settings(path=None):
    """
    Load settings from a JSON file.

    Args:
        path: File to read (default: the packaged settings.json)

    Returns:
        dict with every key of DEFAULT_SETTINGS. Unknown keys in the file
        are ignored; values of the wrong type keep the default.
    """
    settings = dict(DEFAULT_SETTINGS)
    path = path or SETTINGS_PATH
    try:
        with open(path, 'r') as f:
            loaded = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.warning("Could not load %s: %s", path, e)
        return settings

    if not isinstance(loaded, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return settings

    for key, default in DEFAULT_SETTINGS.items():
        if key not in loaded:
            continue
        value = loaded[key]
        if isinstance(default, bool):
            ok = isinstance(value, bool)
        elif isinstance(default, int):
            ok = isinstance(value, int) and not isinstance(value, bool)
        else:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        if ok:
            settings[key] = value
        else:
            logger.warning("Ignoring setting %s=%r (expected %s)", key, value, type(default).__name__)
    return settings
