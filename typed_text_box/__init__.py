"""Typewriter-style text box widget for pygame and a scripted door adventure."""

from typed_text_box.buffer import (
    IndexOutOfRangeError,
    InvalidConfigError,
    TypedTextBuffer,
    split_lines,
)
from typed_text_box.keys import KeyEvent, KeyPoller
from typed_text_box.models import DemoConfig, TextBoxSettings
from typed_text_box.surface import TextFont, measure_width
from typed_text_box.textbox import TextBox

__all__ = [
    "DemoConfig",
    "IndexOutOfRangeError",
    "InvalidConfigError",
    "KeyEvent",
    "KeyPoller",
    "TextBox",
    "TextBoxSettings",
    "TextFont",
    "TypedTextBuffer",
    "measure_width",
    "split_lines",
]
