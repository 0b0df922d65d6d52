from __future__ import annotations

import pytest
from conftest import FakeSurface, FixedCoin

from statemachine.exceptions import TransitionNotAllowed

from typed_text_box.adventure import AdventureState, DoorAdventure, DoorFlow
from typed_text_box.events import AdventureEvent
from typed_text_box.keys import KeyEvent, keys_from_script
from typed_text_box.models import AdventureScript, AdventureSettings, TextBoxSettings
from typed_text_box.textbox import TextBox

FAST = AdventureSettings(animation_frames=0, chars_per_step=1000)


def _adventure(
    face: int = 1,
    settings: AdventureSettings = FAST,
    script: AdventureScript | None = None,
    events: list[AdventureEvent] | None = None,
) -> DoorAdventure:
    box = TextBox(TextBoxSettings(), FakeSurface)
    return DoorAdventure(
        box,
        settings=settings,
        script=script,
        rng=FixedCoin(face),  # type: ignore[arg-type]
        on_event=events.append if events is not None else None,
    )


def _step_until(adventure: DoorAdventure, state: AdventureState, limit: int = 500) -> None:
    for _ in range(limit):
        if adventure.state is state:
            return
        adventure.step()
    raise AssertionError(f"never reached {state}, stuck in {adventure.state}")


def _type(adventure: DoorAdventure, *items: str) -> None:
    for key in keys_from_script(items):
        adventure.step(key)


def test_intro_types_welcome_then_waits_for_name() -> None:
    adventure = _adventure()

    _step_until(adventure, AdventureState.AWAIT_NAME)

    assert adventure.textbox.buffer.lines[0] == "Welcome to the Door RPG!"
    assert adventure.textbox.stop_typing() is True
    assert adventure.capturing is True
    assert adventure.textbox.buffer.awaiting_delimiter is True


def test_typing_animation_waits_between_characters() -> None:
    adventure = _adventure(settings=AdventureSettings(animation_frames=2, chars_per_step=1))

    adventure.step()
    assert len(adventure.textbox.buffer.revealed) == 1
    adventure.step()
    adventure.step()
    assert len(adventure.textbox.buffer.revealed) == 1
    adventure.step()
    assert len(adventure.textbox.buffer.revealed) == 2


def test_keys_pressed_while_typing_are_ignored() -> None:
    adventure = _adventure(settings=AdventureSettings(animation_frames=5))

    adventure.step(KeyEvent("x"))
    adventure.step(KeyEvent("y"))

    assert "x" not in adventure.transcript
    assert adventure.state is AdventureState.INTRO


def test_name_is_used_in_greeting_and_revealed_at_once() -> None:
    adventure = _adventure()
    _step_until(adventure, AdventureState.AWAIT_NAME)

    _type(adventure, "Bob", "enter")
    assert adventure.state is AdventureState.GREET
    adventure.step()

    assert adventure.player_name == "Bob"
    assert adventure.state is AdventureState.AWAIT_REACTION
    assert "Hey Bob!" in adventure.transcript
    assert adventure.textbox.stop_typing() is True


def test_backspace_while_naming_only_edits_the_name() -> None:
    adventure = _adventure()
    _step_until(adventure, AdventureState.AWAIT_NAME)
    welcome = adventure.transcript

    _type(adventure, "Bx", "backspace", "backspace", "backspace", "Al", "enter")
    adventure.step()

    assert adventure.transcript.startswith(welcome + "Al\n")
    assert adventure.player_name == "Al"


def test_empty_name_falls_back_to_stranger() -> None:
    adventure = _adventure()
    _step_until(adventure, AdventureState.AWAIT_NAME)

    _type(adventure, "enter")
    adventure.step()

    assert "Hey stranger!" in adventure.transcript


def test_refused_reaction_ends_in_a_loss() -> None:
    adventure = _adventure(face=0)
    _step_until(adventure, AdventureState.AWAIT_NAME)
    _type(adventure, "Bob", "enter")
    adventure.step()

    _type(adventure, "please", "control")
    assert adventure.state is AdventureState.RESOLVE
    _step_until(adventure, AdventureState.DONE)

    assert adventure.outcome == "lost"
    assert adventure.transcript.endswith("The man refuses to move.\n You lose!")
    assert "please\nThe man refuses" in adventure.transcript


@pytest.mark.parametrize(
    ("answer", "outcome", "ending"),
    [
        ("yes", "lost", "You lose!"),
        ("YES please", "lost", "You lose!"),
        ("no", "won", "You win!"),
    ],
)
def test_decision_decides_the_ending(answer: str, outcome: str, ending: str) -> None:
    adventure = _adventure(face=1)
    _step_until(adventure, AdventureState.AWAIT_NAME)
    _type(adventure, "Bob", "enter")
    adventure.step()
    _type(adventure, "hello", "enter", "control")
    _step_until(adventure, AdventureState.AWAIT_DECISION)
    assert "The man moves aside," in adventure.transcript

    _type(adventure, answer, "enter")
    _step_until(adventure, AdventureState.DONE)

    assert adventure.outcome == outcome
    assert adventure.transcript.endswith(ending)
    assert adventure.finished is True


def test_question_text_does_not_count_as_an_answer() -> None:
    adventure = _adventure(face=1)
    _step_until(adventure, AdventureState.AWAIT_NAME)
    _type(adventure, "Bob", "enter")
    adventure.step()
    _type(adventure, "hi", "control")
    _step_until(adventure, AdventureState.AWAIT_DECISION)

    _type(adventure, "enter")
    _step_until(adventure, AdventureState.DONE)

    assert adventure.outcome == "won"


def test_done_state_is_stable() -> None:
    adventure = _adventure(face=0)
    _step_until(adventure, AdventureState.AWAIT_NAME)
    _type(adventure, "enter")
    adventure.step()
    _type(adventure, "control")
    _step_until(adventure, AdventureState.DONE)
    transcript = adventure.transcript

    adventure.step(KeyEvent("z"))

    assert adventure.state is AdventureState.DONE
    assert adventure.transcript == transcript


def test_transitions_are_reported_in_order() -> None:
    events: list[AdventureEvent] = []
    adventure = _adventure(face=0, events=events)
    _step_until(adventure, AdventureState.AWAIT_NAME)
    _type(adventure, "Bob", "enter")
    adventure.step()
    _type(adventure, "control")
    _step_until(adventure, AdventureState.DONE)

    assert events[0].action == "start"
    assert [event.state for event in events if event.action == "enter"] == [
        "await_name",
        "greet",
        "await_reaction",
        "resolve",
        "reaction",
        "done",
    ]
    greet = next(event for event in events if event.state == "greet")
    assert greet.detail == "Bob"


def test_custom_script_is_interpolated() -> None:
    script = AdventureScript(
        welcome="{{ title }}: who goes there?\n",
        greeting="Hail, {{ name }}.\nSpeak, then press control.\n",
    )
    adventure = _adventure(script=script, settings=FAST.model_copy(update={"title": "Gate"}))
    _step_until(adventure, AdventureState.AWAIT_NAME)
    _type(adventure, "Ann", "enter")
    adventure.step()

    assert adventure.transcript.startswith("Gate: who goes there?\nAnn\nHail, Ann.\n")


def test_flow_rejects_out_of_order_triggers() -> None:
    flow = DoorFlow()

    with pytest.raises(TransitionNotAllowed):
        flow.send("judged")

    flow.send("intro_typed")
    assert flow.current_state.value == AdventureState.AWAIT_NAME.value


def test_refused_reaction_skips_the_decision() -> None:
    adventure = _adventure(face=0)
    _step_until(adventure, AdventureState.AWAIT_NAME)
    _type(adventure, "Bob", "enter")
    adventure.step()
    _type(adventure, "control")
    _step_until(adventure, AdventureState.DONE)

    assert adventure.flow.current_state.final
    assert adventure.outcome == "lost"
