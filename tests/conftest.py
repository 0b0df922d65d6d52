from __future__ import annotations

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest  # noqa: E402

from typed_text_box.surface import RGBA, TRANSPARENT, TextFont  # noqa: E402


class FakeSurface:
    """Records drawing calls instead of rasterizing them."""

    def __init__(self, width: int, height: int, font: TextFont) -> None:
        self.width = width
        self.height = height
        self.font = font
        self.fills: list[tuple[int, ...]] = []
        self.drawn: list[tuple[str, int, int]] = []

    def fill(self, color: tuple[int, ...]) -> None:
        self.fills.append(color)
        self.drawn = []

    def draw_string(self, text: str, x: int, y: int, color: tuple[int, int, int]) -> None:
        self.drawn.append((text, x, y))

    def get_pixel(self, x: int, y: int) -> RGBA:
        return TRANSPARENT


class FixedCoin:
    """Stand-in for ``random.Random`` that always lands on the same face."""

    def __init__(self, face: int) -> None:
        self.face = face

    def randrange(self, stop: int) -> int:
        return self.face % stop


@pytest.fixture
def fake_surface_factory() -> type[FakeSurface]:
    return FakeSurface
