"""
Pygame host for the rational Julia explorer.

Contains the FractalApp class which handles:
- Window setup and main loop (calls renderer.tick() once per frame)
- Keyboard and mouse-wheel input mapped onto renderer operations
- Display surfaces for both render paths
- Reporting the singularity (win) event
"""

import logging

import pygame

from .colormaps import get_default_colormap, list_colormap_names
from .compute import warmup_jit
from .compute_gpu import create_default_evaluator
from .hud import StatusOverlay
from .recurrences import list_recurrence_names
from .renderer import FractalRenderer
from .settings import load_settings

logger = logging.getLogger(__name__)

CAPTION = "Rational Julia - find the division by zero"


class PygameDisplay:
    """Display surface that turns RGBA buffers into a pygame Surface."""

    def __init__(self):
        self.surface = None

    def present(self, rgba):
        # Buffers are (height, width, 4); surfarray wants (width, height, 3)
        self.surface = pygame.surfarray.make_surface(rgba[:, :, :3].swapaxes(0, 1))


class FractalApp:
    """
    Main application class for the explorer.

    Owns the pygame window and the FractalRenderer, and drives the render
    pipeline at a fixed frame rate.
    """

    def __init__(self, width=None, height=None, use_gpu=None, settings=None):
        """
        Initialize the application.

        Args:
            width, height: Window size in pixels (default from settings)
            use_gpu: Start in GPU mode (default from settings)
            settings: Settings dict (default: load_settings())
        """
        self.settings = settings or load_settings()
        self.width = width or self.settings['width']
        self.height = height or self.settings['height']
        self.use_gpu = self.settings['use_gpu'] if use_gpu is None else use_gpu

        self.screen = None
        self.clock = None
        self.display = PygameDisplay()
        self.renderer = None
        self.overlay = StatusOverlay()
        self.running = False

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        self._init_components()

        self.running = True
        while self.running:
            self._handle_events()
            self._handle_held_keys()
            self.renderer.tick()
            self._check_win_condition()
            self._draw()
            self.clock.tick(self.settings['fps'])

        pygame.quit()

    def _init_pygame(self):
        pygame.init()
        self.screen = pygame.display.set_mode((self.width, self.height), pygame.DOUBLEBUF)
        pygame.display.set_caption("Compiling (first run only)...")
        self.clock = pygame.time.Clock()

    def _init_components(self):
        warmup_jit(get_default_colormap())
        self.renderer = FractalRenderer(self.width, self.height, display=self.display)
        if self.use_gpu:
            self._enable_gpu()
        pygame.display.set_caption(CAPTION)

    def _enable_gpu(self):
        if self.renderer.gpu_evaluator is None:
            self.renderer.bind_gpu_evaluator(create_default_evaluator(display=self.display))
        return self.renderer.set_render_mode(True)

    def _check_win_condition(self):
        """Consume the one-shot singularity event."""
        if self.renderer.get_singularity_flag():
            logger.info("Player won: division by zero found at v = %s",
                        self.renderer.state.singularity)
            pygame.display.set_caption("Division by zero found! - " + CAPTION)
            self.overlay.show_banner()
            self.renderer.clear_singularity_flag()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEWHEEL:
                self._handle_zoom(event)
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event)

    def _handle_zoom(self, event):
        """Zoom in at the cursor on scroll up, out on scroll down."""
        step = self.settings['zoom_step']
        if event.y > 0:
            mx, my = pygame.mouse.get_pos()
            self.renderer.zoom_in(self.renderer.state.pixel_to_plane(mx, my), step)
        elif event.y < 0:
            self.renderer.zoom_out(step)

    def _handle_held_keys(self):
        """Continuous pan/zoom while keys are held."""
        keys = pygame.key.get_pressed()
        state = self.renderer.state
        step = self.settings['pan_step'] * state.zoom

        dx = dy = 0.0
        if keys[pygame.K_RIGHT] or keys[pygame.K_d]:
            dx += step
        if keys[pygame.K_LEFT] or keys[pygame.K_a]:
            dx -= step
        if keys[pygame.K_UP] or keys[pygame.K_w]:
            dy += step
        if keys[pygame.K_DOWN] or keys[pygame.K_s]:
            dy -= step
        if dx or dy:
            self.renderer.pan(dx, dy)

        if keys[pygame.K_q]:
            self.renderer.zoom_in(state.center, self.settings['zoom_step'])
        if keys[pygame.K_e]:
            self.renderer.zoom_out(self.settings['zoom_step'])

    def _handle_key(self, event):
        renderer = self.renderer
        state = renderer.state
        v_step = self.settings['singularity_step']
        v = state.singularity

        if event.key == pygame.K_ESCAPE:
            self.running = False
        elif event.key == pygame.K_r:
            renderer.reset()
            pygame.display.set_caption(CAPTION)
        elif event.key == pygame.K_j:
            renderer.set_recurrence_parameter(v.re - v_step, v.im)
        elif event.key == pygame.K_l:
            renderer.set_recurrence_parameter(v.re + v_step, v.im)
        elif event.key == pygame.K_i:
            renderer.set_recurrence_parameter(v.re, v.im + v_step)
        elif event.key == pygame.K_k:
            renderer.set_recurrence_parameter(v.re, v.im - v_step)
        elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            renderer.set_render_params(max_iterations=state.max_iterations + self.settings['iteration_step'])
        elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            # set_render_params refuses a non-positive cap
            renderer.set_render_params(max_iterations=state.max_iterations - self.settings['iteration_step'])
        elif event.key == pygame.K_c:
            renderer.set_render_params(color_shift=state.color_shift + self.settings['color_shift_step'])
        elif event.key == pygame.K_m:
            renderer.set_render_params(smooth_coloring=not state.smooth_coloring)
        elif event.key == pygame.K_p:
            names = list_colormap_names()
            renderer.set_palette(names[(names.index(state.palette) + 1) % len(names)])
        elif event.key == pygame.K_t:
            names = list_recurrence_names()
            renderer.set_recurrence(names[(names.index(state.recurrence.name) + 1) % len(names)])
        elif event.key == pygame.K_g:
            if renderer.use_gpu:
                renderer.set_render_mode(False)
            else:
                self._enable_gpu()
        elif event.key == pygame.K_h:
            self.overlay.toggle()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _draw(self):
        self.screen.fill((0, 0, 0))
        if self.display.surface is not None:
            self.screen.blit(self.display.surface, (0, 0))
        self.overlay.draw(self.screen, self.renderer.get_render_info())
        pygame.display.flip()


def run(width=None, height=None, use_gpu=None, settings=None):
    """
    Run the explorer.

    Args:
        width, height: Window size (default from settings.json)
        use_gpu: Start in GPU mode (default from settings.json)
        settings: Settings dict overriding settings.json
    """
    app = FractalApp(width, height, use_gpu, settings)
    try:
        app.run()
    except KeyboardInterrupt:
        pygame.quit()
