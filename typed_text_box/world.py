from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import pygame

from typed_text_box.adventure import AdventureState, DoorAdventure, EventSink
from typed_text_box.events import AdventureEvent, append_event
from typed_text_box.keys import NO_KEY, KeyEvent, KeyPoller
from typed_text_box.models import DemoConfig
from typed_text_box.surface import PygameSurface
from typed_text_box.textbox import SurfaceFactory, TextBox

DEFAULT_REPLAY_FRAMES = 100_000


@dataclass(slots=True)
class WorldResult:
    state: AdventureState
    outcome: str | None
    frames: int
    transcript: str
    lines: list[str] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.state is AdventureState.DONE


def event_file_sink(path: Path | None) -> EventSink | None:
    if path is None:
        return None

    def sink(event: AdventureEvent) -> None:
        append_event(path, event)

    return sink


def build_adventure(
    config: DemoConfig,
    on_event: EventSink | None = None,
    rng: random.Random | None = None,
    surface_factory: SurfaceFactory = PygameSurface,
) -> DoorAdventure:
    textbox = TextBox(config.textbox, surface_factory)
    return DoorAdventure(
        textbox,
        settings=config.adventure,
        script=config.script,
        rng=rng,
        on_event=on_event,
    )


def _result(adventure: DoorAdventure) -> WorldResult:
    return WorldResult(
        state=adventure.state,
        outcome=adventure.outcome,
        frames=adventure.frame,
        transcript=adventure.transcript,
        lines=adventure.textbox.buffer.lines,
    )


def _wants_quit(events: Iterable[pygame.event.Event]) -> bool:
    for event in events:
        if event.type == pygame.QUIT:
            return True
        if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            return True
    return False


def run_world(
    config: DemoConfig,
    events_path: Path | None = None,
    max_frames: int | None = None,
    rng: random.Random | None = None,
    hold_on_finish: bool = True,
) -> WorldResult:
    """Open a window and play the adventure until it ends or the window closes."""
    settings = config.adventure
    pygame.init()
    try:
        screen = pygame.display.set_mode((settings.world_width, settings.world_height))
        pygame.display.set_caption(settings.title)
        clock = pygame.time.Clock()

        adventure = build_adventure(config, on_event=event_file_sink(events_path), rng=rng)
        adventure.textbox.rect.center = (settings.world_width // 2, settings.world_height // 2)
        sprites = pygame.sprite.Group(adventure.textbox)
        poller = KeyPoller()
        adventure.start()

        while True:
            events = pygame.event.get()
            if _wants_quit(events):
                break
            if adventure.finished:
                if not hold_on_finish:
                    break
            else:
                poller.feed(events)
                adventure.step(poller.poll() if adventure.capturing else NO_KEY)

            screen.fill(config.textbox.background_color)
            sprites.draw(screen)
            pygame.display.flip()
            clock.tick(settings.fps)
            if max_frames is not None and adventure.frame >= max_frames:
                break
        return _result(adventure)
    finally:
        pygame.quit()


def replay_keys(
    config: DemoConfig,
    keys: Iterable[KeyEvent],
    max_frames: int = DEFAULT_REPLAY_FRAMES,
    rng: random.Random | None = None,
    on_event: EventSink | None = None,
    surface_factory: SurfaceFactory = PygameSurface,
) -> WorldResult:
    """Play the adventure headless, feeding one scripted key per capture tick."""
    adventure = build_adventure(
        config, on_event=on_event, rng=rng, surface_factory=surface_factory
    )
    poller = KeyPoller()
    for key in keys:
        poller.push(key)
    adventure.start()
    while not adventure.finished and adventure.frame < max_frames:
        if adventure.capturing and poller.pending() == 0:
            break
        adventure.step(poller.poll() if adventure.capturing else NO_KEY)
    return _result(adventure)
