from __future__ import annotations

from typing import TYPE_CHECKING

from typed_text_box.keys import KeyEvent

if TYPE_CHECKING:
    from typed_text_box.models import TextBoxSettings


class InvalidConfigError(ValueError):
    pass


class IndexOutOfRangeError(IndexError):
    pass


def split_lines(text: str) -> list[str]:
    """Split on line breaks, dropping trailing empty segments.

    A text made only of line breaks (or empty) still yields one empty line so
    callers can always read a last line.
    """
    parts = text.split("\n")
    while parts and parts[-1] == "":
        parts.pop()
    return parts or [""]


def _common_prefix(left: str, right: str) -> str:
    limit = min(len(left), len(right))
    index = 0
    while index < limit and left[index] == right[index]:
        index += 1
    return left[:index]


class TypedTextBuffer:
    """Line-split text with a typewriter reveal and guarded keyboard editing.

    ``output`` holds everything appended so far, ``revealed`` is the prefix of it
    currently shown. Whenever the line count would overflow ``max_lines`` the
    oldest line is dropped from both in lock-step.
    """

    def __init__(self, settings: TextBoxSettings) -> None:
        if settings.font_size <= 0:
            raise InvalidConfigError(f"font_size must be positive, got {settings.font_size}")
        if settings.height <= 0:
            raise InvalidConfigError(f"height must be positive, got {settings.height}")
        max_lines = settings.height // settings.font_size
        if max_lines < 1:
            raise InvalidConfigError(
                f"height {settings.height} cannot fit one line of font_size {settings.font_size}"
            )
        self._max_lines = max_lines
        self._full = settings.initial_text
        self._revealed = settings.initial_text
        self._last_committed = ""
        self.awaiting_delimiter = False
        self._full_lines: list[str] = []
        self._lines: list[str] = []
        self._check_lines()

    @property
    def max_lines(self) -> int:
        return self._max_lines

    @property
    def output(self) -> str:
        return self._full

    @property
    def revealed(self) -> str:
        return self._revealed

    @property
    def last_committed(self) -> str:
        return self._last_committed

    @property
    def pending_input(self) -> str:
        """Text typed since the last commit, the only part backspace may erase."""
        return self._full[len(self._last_committed) :]

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def full_lines(self) -> list[str]:
        return list(self._full_lines)

    def append(self, text: str) -> None:
        self._full += text
        self.commit()
        self._check_lines()

    def commit(self) -> None:
        self._last_committed = self._full

    def set_output(self, text: str) -> None:
        self._revealed = _common_prefix(self._revealed, text)
        self._full = text
        self.commit()
        self._check_lines()

    def reveal_all(self) -> None:
        self._revealed = self._full
        self._check_lines()

    def advance_reveal(self, count: int = 1) -> None:
        if count < 1 or self.is_reveal_complete():
            return
        self._revealed = self._full[: len(self._revealed) + count]
        self._check_lines()

    def is_reveal_complete(self) -> bool:
        return self._revealed == self._full

    def handle_key(self, key: KeyEvent, delimiter: str) -> None:
        name = key.key
        if name is not None:
            if len(name) == 1:
                if key.shift_held and name.isdigit():
                    # Mirrors the original engine; upper() leaves digits unchanged.
                    self._full += name.upper()
                else:
                    self._full += name
            if name == "space":
                self._full += " "
            if name == "enter":
                self._full += "\n"
            if name == delimiter:
                self.awaiting_delimiter = False
            if name == "backspace" and len(self._full) > len(self._last_committed):
                self._full = self._full[:-1]
        self._revealed = self._full
        self._check_lines()

    def get_lines(self, start: int, end: int) -> list[str]:
        if start < 0 or start > end or end >= len(self._lines):
            raise IndexOutOfRangeError(
                f"line range [{start}, {end}] outside 0..{len(self._lines) - 1}"
            )
        return self._lines[start : end + 1]

    def get_last_lines(self, count: int) -> list[str]:
        if count <= 0:
            return []
        return self._lines[-count:]

    def get_last_line(self) -> str:
        return self._lines[-1]

    def _over_capacity(self) -> bool:
        count = len(split_lines(self._full))
        if count > self._max_lines:
            return True
        return count == self._max_lines and self._full.endswith("\n")

    def _drop_head_line(self) -> None:
        cut = self._full.index("\n") + 1
        self._full = self._full[cut:]
        self._revealed = self._revealed[cut:]
        self._last_committed = self._last_committed[cut:]

    def _check_lines(self) -> None:
        while self._over_capacity():
            self._drop_head_line()
        self._full_lines = split_lines(self._full)
        self._lines = split_lines(self._revealed)
