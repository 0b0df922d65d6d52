from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

import pygame

_NAMED_KEYS: dict[int, str] = {
    pygame.K_SPACE: "space",
    pygame.K_RETURN: "enter",
    pygame.K_KP_ENTER: "enter",
    pygame.K_BACKSPACE: "backspace",
    pygame.K_LCTRL: "control",
    pygame.K_RCTRL: "control",
    pygame.K_LSHIFT: "shift",
    pygame.K_RSHIFT: "shift",
    pygame.K_ESCAPE: "escape",
    pygame.K_TAB: "tab",
    pygame.K_UP: "up",
    pygame.K_DOWN: "down",
    pygame.K_LEFT: "left",
    pygame.K_RIGHT: "right",
}


KEY_NAMES = frozenset(_NAMED_KEYS.values())

_SHIFT_PREFIX = "shift+"


@dataclass(frozen=True, slots=True)
class KeyEvent:
    key: str | None = None
    shift_held: bool = False


NO_KEY = KeyEvent()


def key_event_from_pygame(event: pygame.event.Event) -> KeyEvent | None:
    if event.type != pygame.KEYDOWN:
        return None
    shift_held = bool(getattr(event, "mod", 0) & pygame.KMOD_SHIFT)
    named = _NAMED_KEYS.get(event.key)
    if named is not None:
        return KeyEvent(named, shift_held)
    text = getattr(event, "unicode", "")
    if len(text) == 1 and text.isprintable():
        return KeyEvent(text, shift_held)
    return KeyEvent(None, shift_held)


def keys_from_script(items: Iterable[str]) -> list[KeyEvent]:
    """Expand scripted key entries into one ``KeyEvent`` per keystroke.

    Entries naming a key (``"enter"``, ``"shift+5"``) stay single events; any
    other string is typed character by character.
    """
    events: list[KeyEvent] = []
    for item in items:
        shift_held = False
        name = item
        if item.lower().startswith(_SHIFT_PREFIX) and len(item) > len(_SHIFT_PREFIX):
            shift_held = True
            name = item[len(_SHIFT_PREFIX) :]
        if name.lower() in KEY_NAMES:
            events.append(KeyEvent(name.lower(), shift_held))
            continue
        for char in name:
            events.append(KeyEvent("space" if char == " " else char, shift_held))
    return events


class KeyPoller:
    """Queues key presses and hands out at most one per frame tick."""

    def __init__(self) -> None:
        self._pending: deque[KeyEvent] = deque()

    def feed(self, events: Iterable[pygame.event.Event]) -> None:
        for event in events:
            key_event = key_event_from_pygame(event)
            if key_event is not None and key_event.key is not None:
                self._pending.append(key_event)

    def push(self, key_event: KeyEvent) -> None:
        self._pending.append(key_event)

    def poll(self) -> KeyEvent:
        if not self._pending:
            return NO_KEY
        return self._pending.popleft()

    def pending(self) -> int:
        return len(self._pending)

    def clear(self) -> None:
        self._pending.clear()
