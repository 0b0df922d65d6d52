"""On-screen text box sprite built around a ``TypedTextBuffer``.

The box can be left aligned or centered. Centering measures every line on
every render with ``measure_width``, which is slow; prefer left alignment for
boxes that redraw each frame with many lines.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pygame

from typed_text_box.buffer import TypedTextBuffer
from typed_text_box.keys import KeyEvent
from typed_text_box.models import TextBoxSettings
from typed_text_box.surface import DrawSurface, PygameSurface, TextFont, measure_width

SurfaceFactory = Callable[[int, int, TextFont], DrawSurface]


class TextBox(pygame.sprite.Sprite):
    def __init__(
        self,
        settings: TextBoxSettings | None = None,
        surface_factory: SurfaceFactory = PygameSurface,
    ) -> None:
        super().__init__()
        self.settings = settings if settings is not None else TextBoxSettings()
        self.buffer = TypedTextBuffer(self.settings)
        self.font = TextFont(self.settings.font_family, self.settings.font_size)
        self.surface = surface_factory(self.settings.width, self.settings.height, self.font)
        self.image = getattr(self.surface, "image", None)
        self.rect = pygame.Rect(0, 0, self.settings.width, self.settings.height)
        self.render()

    def line_x(self, line: str) -> int:
        if not self.settings.centered:
            return 0
        return self.settings.width // 2 - measure_width(self.font, line) // 2

    def render(self) -> None:
        self.surface.fill(self.settings.background_color)
        for index, line in enumerate(self.buffer.lines):
            self.surface.draw_string(
                line,
                self.line_x(line),
                self.settings.font_size * (index + 1),
                self.settings.text_color,
            )

    def add_to_output(self, text: str) -> None:
        self.buffer.append(text)

    def set_output(self, text: str) -> None:
        self.buffer.set_output(text)

    def refresh(self) -> None:
        self.buffer.reveal_all()
        self.render()

    def capture(self, key: KeyEvent, delimiter: str) -> None:
        self.buffer.handle_key(key, delimiter)
        self.render()

    def simulate_type(self, count: int = 1) -> None:
        if self.buffer.is_reveal_complete():
            return
        self.buffer.advance_reveal(count)
        self.render()

    def stop_typing(self) -> bool:
        return self.buffer.is_reveal_complete()

    def start_capture(self) -> None:
        self.buffer.awaiting_delimiter = True

    def capture_finished(self) -> bool:
        return not self.buffer.awaiting_delimiter

    def update(self, *args: Any, **kwargs: Any) -> None:
        self.render()
