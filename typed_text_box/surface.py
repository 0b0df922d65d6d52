"""Drawable surfaces and pixel-probe text measurement on top of pygame."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import pygame

RGB = tuple[int, int, int]
RGBA = tuple[int, int, int, int]

TRANSPARENT: RGBA = (0, 0, 0, 0)


class DrawSurface(Protocol):
    def fill(self, color: RGB | RGBA) -> None: ...

    def draw_string(self, text: str, x: int, y: int, color: RGB) -> None: ...

    def get_pixel(self, x: int, y: int) -> RGBA: ...


@dataclass(slots=True)
class TextFont:
    family: str | None = None
    size: int = 25
    _font: pygame.font.Font | None = field(default=None, init=False, repr=False, compare=False)

    def pygame_font(self) -> pygame.font.Font:
        if self._font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            if self.family:
                self._font = pygame.font.SysFont(self.family, self.size)
            else:
                self._font = pygame.font.Font(None, self.size)
        return self._font


class PygameSurface:
    """``DrawSurface`` backed by a per-pixel-alpha ``pygame.Surface``.

    ``draw_string`` takes the baseline as ``y``, so a line drawn at
    ``y == font.size`` sits inside the first ``font.size`` rows.
    """

    def __init__(self, width: int, height: int, font: TextFont) -> None:
        self.font = font
        self.image = pygame.Surface((max(width, 1), max(height, 1)), pygame.SRCALPHA)
        self.image.fill(TRANSPARENT)

    @property
    def width(self) -> int:
        return self.image.get_width()

    @property
    def height(self) -> int:
        return self.image.get_height()

    def fill(self, color: RGB | RGBA) -> None:
        self.image.fill(color)

    def draw_string(self, text: str, x: int, y: int, color: RGB) -> None:
        if not text:
            return
        font = self.font.pygame_font()
        rendered = font.render(text, True, color)
        self.image.blit(rendered, (x, y - font.get_ascent()))

    def get_pixel(self, x: int, y: int) -> RGBA:
        pixel = self.image.get_at((x, y))
        return (pixel.r, pixel.g, pixel.b, pixel.a)


def measure_width(font: TextFont, text: str) -> int:
    """Return the rendered pixel width of ``text`` by probing a scratch surface.

    Expensive: it renders and scans the glyphs on every call. Use it at setup
    time or for centering, never for per-frame layout of long text.
    """
    # Glyphs are taller than wide, so size / 1.2 per character bounds even wide letters.
    max_width = int(len(text) * (font.size / 1.2))
    if max_width == 0:
        return 0
    scratch = PygameSurface(max_width, font.size, font)
    scratch.draw_string(text, 0, font.size, (255, 255, 255))
    stride = max(1, font.size // 4)
    for x in range(max_width - 1, -1, -1):
        for y in range(0, font.size, stride):
            if scratch.get_pixel(x, y) != TRANSPARENT:
                return x + 1
    return 0
