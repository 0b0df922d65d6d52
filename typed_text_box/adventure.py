"""Scripted door adventure driving a ``TextBox`` one frame at a time.

Flow::

    INTRO -> AWAIT_NAME -> GREET -> AWAIT_REACTION -> RESOLVE -> REACTION
        -> AWAIT_DECISION -> VERDICT -> CLOSING -> DONE

A refused reaction skips straight from REACTION to DONE.
"""

from __future__ import annotations

import random
from collections.abc import Callable
from enum import Enum

from statemachine import State, StateMachine

from typed_text_box.events import AdventureEvent
from typed_text_box.interpolate import interpolate_text
from typed_text_box.keys import NO_KEY, KeyEvent
from typed_text_box.models import AdventureScript, AdventureSettings
from typed_text_box.textbox import TextBox

EventSink = Callable[[AdventureEvent], None]

DEFAULT_NAME = "stranger"


class AdventureState(str, Enum):
    INTRO = "intro"
    AWAIT_NAME = "await_name"
    GREET = "greet"
    AWAIT_REACTION = "await_reaction"
    RESOLVE = "resolve"
    REACTION = "reaction"
    AWAIT_DECISION = "await_decision"
    VERDICT = "verdict"
    CLOSING = "closing"
    DONE = "done"


_CAPTURE_STATES = {
    AdventureState.AWAIT_NAME,
    AdventureState.AWAIT_REACTION,
    AdventureState.AWAIT_DECISION,
}


class DoorFlow(StateMachine):
    """Allowed moves through the adventure; handlers decide when to fire them."""

    intro = State(AdventureState.INTRO.value, value=AdventureState.INTRO.value, initial=True)
    await_name = State(AdventureState.AWAIT_NAME.value, value=AdventureState.AWAIT_NAME.value)
    greet = State(AdventureState.GREET.value, value=AdventureState.GREET.value)
    await_reaction = State(
        AdventureState.AWAIT_REACTION.value, value=AdventureState.AWAIT_REACTION.value
    )
    resolve = State(AdventureState.RESOLVE.value, value=AdventureState.RESOLVE.value)
    reaction = State(AdventureState.REACTION.value, value=AdventureState.REACTION.value)
    await_decision = State(
        AdventureState.AWAIT_DECISION.value, value=AdventureState.AWAIT_DECISION.value
    )
    verdict = State(AdventureState.VERDICT.value, value=AdventureState.VERDICT.value)
    closing = State(AdventureState.CLOSING.value, value=AdventureState.CLOSING.value)
    done = State(AdventureState.DONE.value, value=AdventureState.DONE.value, final=True)

    intro_typed = intro.to(await_name)
    name_entered = await_name.to(greet)
    greeted = greet.to(await_reaction)
    reaction_entered = await_reaction.to(resolve)
    resolved = resolve.to(reaction)
    reaction_typed = reaction.to(await_decision)
    reaction_lost = reaction.to(done)
    decision_entered = await_decision.to(verdict)
    judged = verdict.to(closing)
    closing_typed = closing.to(done)


class DoorAdventure:
    def __init__(
        self,
        textbox: TextBox,
        settings: AdventureSettings | None = None,
        script: AdventureScript | None = None,
        rng: random.Random | None = None,
        on_event: EventSink | None = None,
    ) -> None:
        self.textbox = textbox
        self.settings = settings if settings is not None else AdventureSettings()
        self.script = script if script is not None else AdventureScript()
        self.rng = rng if rng is not None else random.Random(self.settings.seed)
        self.on_event = on_event
        self.flow = DoorFlow()
        self.frame = 0
        self.player_name = ""
        self.outcome: str | None = None
        self._animation_count = 0
        self._started = False
        self._handlers: dict[AdventureState, Callable[[KeyEvent], None]] = {
            AdventureState.INTRO: self._type_then("intro_typed"),
            AdventureState.AWAIT_NAME: self._capture_then(
                self.script.name_delimiter, "name_entered"
            ),
            AdventureState.GREET: self._greet,
            AdventureState.AWAIT_REACTION: self._capture_then(
                self.script.reaction_delimiter, "reaction_entered"
            ),
            AdventureState.RESOLVE: self._resolve,
            AdventureState.REACTION: self._reaction,
            AdventureState.AWAIT_DECISION: self._capture_then(
                self.script.decision_delimiter, "decision_entered"
            ),
            AdventureState.VERDICT: self._verdict,
            AdventureState.CLOSING: self._type_then("closing_typed"),
        }

    @property
    def state(self) -> AdventureState:
        return AdventureState(self.flow.current_state.value)

    @property
    def finished(self) -> bool:
        return self.state is AdventureState.DONE

    @property
    def transcript(self) -> str:
        return self.textbox.buffer.output

    @property
    def capturing(self) -> bool:
        return self.state in _CAPTURE_STATES

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self.textbox.add_to_output(self._text(self.script.welcome))
        self._emit("start", self.settings.title)

    def step(self, key: KeyEvent = NO_KEY) -> AdventureState:
        if not self._started:
            self.start()
        handler = self._handlers.get(self.state)
        if handler is not None:
            handler(key)
        self.frame += 1
        return self.state

    def _text(self, template: str) -> str:
        variables = {"name": self.player_name or DEFAULT_NAME, "title": self.settings.title}
        return interpolate_text(template, variables)

    def _emit(self, action: str, detail: str = "") -> None:
        if self.on_event is not None:
            self.on_event(AdventureEvent(self.state.value, self.frame, action, detail))

    def _transition(self, trigger: str, detail: str = "") -> None:
        self.flow.send(trigger)
        if self.capturing:
            self.textbox.start_capture()
        self._emit("enter", detail)

    def _animate(self) -> None:
        if self._animation_count != 0:
            self._animation_count -= 1
            return
        self.textbox.simulate_type(self.settings.chars_per_step)
        self._animation_count = self.settings.animation_frames

    def _type_then(self, trigger: str) -> Callable[[KeyEvent], None]:
        def handler(_: KeyEvent) -> None:
            if not self.textbox.stop_typing():
                self._animate()
            else:
                self._transition(trigger)

        return handler

    def _capture_then(self, delimiter: str, trigger: str) -> Callable[[KeyEvent], None]:
        def handler(key: KeyEvent) -> None:
            self.textbox.capture(key, delimiter)
            if self.textbox.capture_finished():
                self._transition(trigger, self.textbox.buffer.pending_input.strip())

        return handler

    def _greet(self, _: KeyEvent) -> None:
        self.player_name = self.textbox.buffer.pending_input.strip()
        self.textbox.add_to_output(self._text(self.script.greeting))
        self.textbox.refresh()
        self._transition("greeted", self.player_name or DEFAULT_NAME)

    def _resolve(self, _: KeyEvent) -> None:
        if not self.textbox.buffer.output.endswith("\n"):
            self.textbox.add_to_output("\n")
        if self.rng.randrange(2) == 1:
            self.textbox.add_to_output(self._text(self.script.advance))
            self._transition("resolved", "advance")
        else:
            self.textbox.add_to_output(self._text(self.script.refuse))
            self.outcome = "lost"
            self._transition("resolved", "refuse")

    def _reaction(self, _: KeyEvent) -> None:
        if not self.textbox.stop_typing():
            self._animate()
        elif self.outcome == "lost":
            self._transition("reaction_lost", self.outcome)
        else:
            self._transition("reaction_typed")

    def _verdict(self, _: KeyEvent) -> None:
        answer = self.textbox.buffer.pending_input
        if "yes" in answer.lower():
            self.textbox.add_to_output(self._text(self.script.enter_room))
            self.outcome = "lost"
        else:
            self.textbox.add_to_output(self._text(self.script.stay_out))
            self.outcome = "won"
        self._transition("judged", self.outcome)
