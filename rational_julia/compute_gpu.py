"""
GPU parameter publishing and a PyTorch field evaluator.

In GPU mode the renderer does no per-pixel work itself: it packs the view
and recurrence into a flat GPUParameters struct and hands it to an
evaluator's publish() method. TorchEvaluator is the evaluator shipped with
the package. It auto-detects available hardware:
- CUDA (NVIDIA GPUs)
- MPS (Apple Silicon)
- CPU fallback via PyTorch (still vectorized)

Usage:
    from rational_julia.compute_gpu import TorchEvaluator

    evaluator = TorchEvaluator(display=my_surface)
    renderer.bind_gpu_evaluator(evaluator)
"""

import logging
import math
from dataclasses import asdict, dataclass

import numpy as np

from .colormaps import BACKGROUND_COLOR, SINGULARITY_COLOR, get_colormap, list_colormap_names
from .engine import ESCAPE_RADIUS_SQ, SINGULARITY_THRESHOLD
from .recurrences import RECURRENCE_INVERSE_SQUARE

# Try to import PyTorch
try:
    import torch
    TORCH_AVAILABLE = True
except ImportError:
    TORCH_AVAILABLE = False
    torch = None

logger = logging.getLogger(__name__)

LOG_2 = math.log(2.0)


class GPUUnavailableError(RuntimeError):
    """Raised when a GPU evaluator is requested but PyTorch is missing."""


@dataclass(frozen=True)
class GPUParameters:
    """Flat parameter struct consumed by a GPU evaluator."""

    center_x: float
    center_y: float
    zoom: float
    width: int
    height: int
    max_iterations: int
    color_range: float
    color_shift: float
    smooth_coloring: bool
    palette: str
    recurrence_id: int
    v_real: float
    v_imag: float
    k: float
    x_real: float
    x_imag: float

    @classmethod
    def from_state(cls, state):
        params = state.recurrence_params()
        return cls(
            center_x=state.center.re,
            center_y=state.center.im,
            zoom=state.zoom,
            width=state.width,
            height=state.height,
            max_iterations=state.max_iterations,
            color_range=state.color_range,
            color_shift=state.color_shift,
            smooth_coloring=state.smooth_coloring,
            palette=state.palette,
            recurrence_id=state.recurrence.recurrence_id,
            v_real=params.singularity.re,
            v_imag=params.singularity.im,
            k=params.k,
            x_real=params.x.re,
            x_imag=params.x.im,
        )

    def as_shader_uniforms(self):
        """
        Name -> value mapping for binding to a shader.

        Strings are not valid uniforms, so the palette is sent as its index
        in the colormap registry and the smooth flag as an int.
        """
        uniforms = asdict(self)
        uniforms["palette"] = list_colormap_names().index(self.palette)
        uniforms["smooth_coloring"] = int(self.smooth_coloring)
        return uniforms


class TorchEvaluator:
    """
    Evaluate the fractal field from a GPUParameters struct with PyTorch.

    Automatically detects and uses the best available device:
    - CUDA for NVIDIA GPUs
    - MPS for Apple Silicon (float32 only)
    - CPU as fallback

    Attributes:
        display: Optional surface with a present(rgba) method
        last_image: RGBA uint8 array from the latest publish, or None
        last_singular: Bool mask of pixels that hit the singularity, or None
    """

    def __init__(self, display=None, prefer_gpu=True):
        """
        Initialize the evaluator.

        Args:
            display: Surface receiving each finished image (optional)
            prefer_gpu: If False, force the PyTorch CPU device

        Raises:
            GPUUnavailableError if PyTorch is not installed
        """
        if not TORCH_AVAILABLE:
            raise GPUUnavailableError("PyTorch not available")

        self.display = display
        self.last_image = None
        self.last_singular = None
        self.is_gpu = False
        self.is_cuda = False
        self.is_mps = False

        if prefer_gpu and torch.cuda.is_available():
            self.device = torch.device("cuda")
            self.device_name = torch.cuda.get_device_name(0)
            self.is_gpu = True
            self.is_cuda = True
            self.dtype = torch.float64
        elif prefer_gpu and hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
            self.device = torch.device("mps")
            self.device_name = "Apple Silicon GPU (MPS)"
            self.is_gpu = True
            self.is_mps = True
            self.dtype = torch.float32  # MPS only supports float32
        else:
            self.device = torch.device("cpu")
            self.device_name = "CPU (PyTorch)"
            self.dtype = torch.float64
        logger.info("GPU evaluator using %s", self.get_device_info())

    def get_device_info(self):
        """Return a string describing the compute device."""
        return f"{self.device_name} [{self.device}]"

    def publish(self, params):
        """
        Evaluate, color and present one frame.

        Args:
            params: GPUParameters

        Returns:
            The RGBA image (height, width, 4) as a numpy uint8 array
        """
        iterations, smooth, singular = self.evaluate(params)
        image = self.colorize(iterations, smooth, singular, params)
        self.last_image = image
        self.last_singular = singular.cpu().numpy()
        if self.display is not None:
            self.display.present(image)
        return image

    def _plane_grid(self, params):
        """Plane coordinates for every pixel, (height, width) tensors."""
        width, height = params.width, params.height
        plane_w = params.zoom
        plane_h = params.zoom * height / width
        px = torch.arange(width, device=self.device, dtype=self.dtype)
        py = torch.arange(height, device=self.device, dtype=self.dtype)
        re = px / width * plane_w + params.center_x - plane_w / 2.0
        im = (height - py) / height * plane_h + params.center_y - plane_h / 2.0
        zi, zr = torch.meshgrid(im, re, indexing='ij')
        return zr.contiguous(), zi.contiguous()

    def _divide(self, ar, ai, br, bi):
        """Vectorized complex division; zero-modulus divisors give 0."""
        mod2 = br * br + bi * bi
        zero = mod2 == 0
        safe = torch.where(zero, torch.ones_like(mod2), mod2)
        qr = (ar * br + ai * bi) / safe
        qi = (ai * br - ar * bi) / safe
        return torch.where(zero, torch.zeros_like(qr), qr), torch.where(zero, torch.zeros_like(qi), qi)

    def _denominator(self, zr, zi, params):
        if params.recurrence_id == RECURRENCE_INVERSE_SQUARE:
            return zr * zr - zi * zi - params.v_real, 2 * zr * zi - params.v_imag
        return zr - params.v_real, zi - params.v_imag

    def _advance(self, dr, di, params):
        if params.recurrence_id == RECURRENCE_INVERSE_SQUARE:
            return self._divide(torch.ones_like(dr), torch.zeros_like(di), dr, di)
        qr, qi = self._divide(torch.full_like(dr, params.k), torch.zeros_like(di), dr, di)
        return qr * qr - qi * qi + params.x_real, 2 * qr * qi + params.x_imag

    def evaluate(self, params):
        """
        Run the escape-time algorithm on every pixel at once.

        Pixels drop out of the active mask when they escape or hit the
        singularity; the loop stops early once no pixel is active.

        Returns:
            (iterations, smooth, singular) tensors of shape (height, width)
        """
        zr, zi = self._plane_grid(params)
        max_iter = params.max_iterations

        iterations = torch.zeros(zr.shape, device=self.device, dtype=torch.int32)
        singular = torch.zeros(zr.shape, device=self.device, dtype=torch.bool)
        active = torch.ones(zr.shape, device=self.device, dtype=torch.bool)
        if params.smooth_coloring:
            smooth = torch.exp(-torch.hypot(zr, zi))

        for _ in range(max_iter):
            active = active & (zr * zr + zi * zi < ESCAPE_RADIUS_SQ)
            dr, di = self._denominator(zr, zi, params)
            hit = active & (torch.hypot(dr, di) < SINGULARITY_THRESHOLD)
            singular = singular | hit
            active = active & ~hit
            if not bool(active.any()):
                break

            nr, ni = self._advance(dr, di, params)
            zr = torch.where(active, nr, zr)
            zi = torch.where(active, ni, zi)
            iterations = iterations + active.to(torch.int32)

            if params.smooth_coloring:
                contrib = torch.nan_to_num(torch.exp(-torch.hypot(zr, zi)), nan=0.0)
                smooth = smooth + torch.where(active, contrib, torch.zeros_like(contrib))

        iter_f = iterations.to(self.dtype)
        if params.smooth_coloring:
            escaped = (iterations < max_iter) & ~singular
            modulus = torch.hypot(zr, zi)
            log_mod = torch.log(torch.clamp(modulus, min=1.0))
            usable = escaped & torch.isfinite(modulus) & (log_mod > 0)
            continuous = iter_f + 1 - torch.log(torch.clamp(log_mod, min=1e-12)) / LOG_2
            smooth = torch.where(usable, continuous,
                                 torch.where(escaped, iter_f + 1, smooth))
        else:
            smooth = iter_f
        smooth = torch.where(singular, torch.full_like(smooth, math.inf), smooth)
        return iterations, smooth, singular

    def colorize(self, iterations, smooth, singular, params):
        """
        Map an evaluated field to RGBA with the same rules as the CPU kernel.

        Returns:
            numpy uint8 array (height, width, 4)
        """
        colormap = get_colormap(params.palette)
        num_colors = colormap.shape[0]
        colormap_t = torch.from_numpy(colormap.astype(np.float32)).to(self.device)

        data = smooth.to(torch.float32)
        frac = torch.remainder(data / params.max_iterations * params.color_range + params.color_shift, 1.0)
        frac = torch.where(torch.isfinite(frac) & (frac < 1.0), frac, torch.zeros_like(frac))

        fidx = frac * (num_colors - 1)
        idx0 = fidx.long().clamp(0, num_colors - 1)
        idx1 = (idx0 + 1).clamp(0, num_colors - 1)
        t = (fidx - idx0.float()).unsqueeze(-1)
        rgb = colormap_t[idx0] * (1 - t) + colormap_t[idx1] * t

        alpha = torch.full(rgb.shape[:2] + (1,), 255.0, device=self.device)
        rgba = torch.cat([rgb, alpha], dim=-1)

        in_set = iterations >= params.max_iterations
        rgba[in_set] = torch.tensor(BACKGROUND_COLOR, dtype=rgba.dtype, device=self.device)
        rgba[singular] = torch.tensor(SINGULARITY_COLOR, dtype=rgba.dtype, device=self.device)
        return rgba.cpu().numpy().astype(np.uint8)


def is_gpu_available():
    """Check if PyTorch can see a CUDA or MPS device."""
    if not TORCH_AVAILABLE:
        return False
    if torch.cuda.is_available():
        return True
    return hasattr(torch.backends, 'mps') and torch.backends.mps.is_available()


def create_default_evaluator(display=None):
    """
    Build a TorchEvaluator if PyTorch is installed, else None.

    Returns:
        TorchEvaluator or None
    """
    try:
        return TorchEvaluator(display=display)
    except GPUUnavailableError as exc:
        logger.warning("No GPU evaluator: %s", exc)
        return None
