"""
Status overlay for the pygame host.

Draws a translucent panel with the current recurrence, singularity
parameter, view and render settings, plus a banner once the singularity
has been found. Purely informational: all editing goes through the
keyboard handlers in app.py.
"""

import pygame

CONTROLS_HELP = [
    "Arrows/WASD pan   Q/E zoom   wheel zoom at cursor",
    "J/L  I/K  move v   +/- iterations   C color shift",
    "M smooth   P palette   T recurrence   G GPU   R reset",
]


class StatusOverlay:
    """Text panel in the top-left corner of the window."""

    def __init__(self, x=10, y=10, width=360):
        self.x = x
        self.y = y
        self.width = width
        self.visible = True
        self.font = None
        self.small_font = None
        self.banner_frames = 0

    def init_fonts(self):
        pygame.font.init()
        self.font = pygame.font.SysFont('Arial', 14)
        self.small_font = pygame.font.SysFont('Arial', 12)

    def toggle(self):
        self.visible = not self.visible

    def show_banner(self, frames=180):
        """Show the win banner for a number of frames."""
        self.banner_frames = frames

    def _lines(self, info):
        v = info['singularity']
        center = info['center']
        return [
            f"{info['recurrence']}:  z = {info['formula']}",
            f"v = {v.re:+.4f} {v.im:+.4f}i",
            f"center = {center.re:+.6f} {center.im:+.6f}i   width = {info['zoom']:.3g}",
            f"iterations = {info['max_iterations']}   palette = {info['palette']}   "
            f"smooth = {'on' if info['smooth_coloring'] else 'off'}",
            f"mode = {info['mode']}",
        ]

    def draw(self, screen, info):
        if self.font is None:
            self.init_fonts()

        if self.visible:
            lines = self._lines(info)
            height = 8 + 18 * len(lines) + 16 * len(CONTROLS_HELP) + 8
            panel = pygame.Surface((self.width, height), pygame.SRCALPHA)
            panel.fill((20, 20, 20, 190))
            screen.blit(panel, (self.x, self.y))
            pygame.draw.rect(screen, (100, 100, 100), (self.x, self.y, self.width, height), 1)

            y = self.y + 8
            for line in lines:
                screen.blit(self.font.render(line, True, (220, 220, 220)), (self.x + 8, y))
                y += 18
            for line in CONTROLS_HELP:
                screen.blit(self.small_font.render(line, True, (150, 150, 150)), (self.x + 8, y))
                y += 16

        if self.banner_frames > 0:
            self.banner_frames -= 1
            text = self.font.render("Division by zero found!", True, (255, 230, 80))
            rect = text.get_rect(center=(screen.get_width() // 2, screen.get_height() - 40))
            pygame.draw.rect(screen, (40, 40, 40), rect.inflate(24, 12))
            screen.blit(text, rect)
