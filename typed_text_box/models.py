from __future__ import annotations

import re
from importlib.resources import files
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from typed_text_box.interpolate import template_tokens

_HEX_COLOR_PATTERN = re.compile(r"^#?([0-9A-Fa-f]{6})$")

SCRIPT_VARIABLES = {"name", "title"}


def _parse_color(value: Any) -> tuple[int, int, int]:
    if isinstance(value, str):
        match = _HEX_COLOR_PATTERN.match(value.strip())
        if not match:
            raise ValueError("Color must match '#RRGGBB'")
        digits = match.group(1)
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))
    if isinstance(value, (list, tuple)):
        if len(value) != 3:
            raise ValueError("Color must have exactly three channels")
        channels = tuple(int(channel) for channel in value)
        if any(channel < 0 or channel > 255 for channel in channels):
            raise ValueError("Color channels must be within 0..255")
        return (channels[0], channels[1], channels[2])
    raise ValueError("Color must be '#RRGGBB' or [r, g, b]")


class TextBoxSettings(BaseModel):
    width: int = 800
    height: int = 560
    background_color: tuple[int, int, int] = (0, 0, 0)
    text_color: tuple[int, int, int] = (255, 255, 255)
    font_family: str | None = "Times New Roman"
    font_size: int = 25
    centered: bool = False
    initial_text: str = ""

    @field_validator("background_color", "text_color", mode="before")
    @classmethod
    def validate_color(cls, value: Any) -> tuple[int, int, int]:
        return _parse_color(value)


class AdventureSettings(BaseModel):
    animation_frames: int = Field(default=6, ge=0)
    chars_per_step: int = Field(default=1, ge=1)
    fps: int = Field(default=60, ge=1)
    seed: int | None = None
    world_width: int = Field(default=800, gt=0)
    world_height: int = Field(default=560, gt=0)
    title: str = "Door RPG"


class AdventureScript(BaseModel):
    welcome: str = "Welcome to the Door RPG!\n Type your name and press Enter to begin:\n"
    greeting: str = (
        "Hey {{ name }}!\n You enter a room with a door.\n A man in front of it."
        "\nWhat do you say? Press control to finish.\n"
    )
    advance: str = (
        "The man moves aside,\n but tells you to be careful.\n"
        " Do you enter the room (Type yes/no)?\n"
    )
    refuse: str = "The man refuses to move.\n You lose!"
    enter_room: str = "You enter the room and get eaten by a lion. \nYou lose!"
    stay_out: str = "You took the advice and survived. \nYou win!"
    name_delimiter: str = "enter"
    reaction_delimiter: str = "control"
    decision_delimiter: str = "enter"

    @model_validator(mode="after")
    def validate_tokens(self) -> AdventureScript:
        for name in ("welcome", "greeting", "advance", "refuse", "enter_room", "stay_out"):
            unknown = set(template_tokens(getattr(self, name))) - SCRIPT_VARIABLES
            if unknown:
                listed = ", ".join(sorted(unknown))
                raise ValueError(f"{name} references unknown variables: {listed}")
        return self


class DemoConfig(BaseModel):
    textbox: TextBoxSettings = Field(default_factory=lambda: TextBoxSettings(centered=True))
    adventure: AdventureSettings = Field(default_factory=AdventureSettings)
    script: AdventureScript = Field(default_factory=AdventureScript)


def parse_config_data(data: dict[str, Any]) -> DemoConfig:
    return DemoConfig.model_validate(data)


def load_config(path: Path) -> DemoConfig:
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config at {path} must be a YAML object")
    return parse_config_data(raw)


def format_validation_error(exc: ValidationError) -> str:
    messages: list[str] = []
    for issue in exc.errors():
        loc = ".".join(str(part) for part in issue.get("loc", []))
        message = issue.get("msg", "validation error")
        messages.append(f"{loc}: {message}")
    return "\n".join(messages)


def list_template_names() -> list[str]:
    templates = files("typed_text_box") / "templates"
    return sorted(
        Path(entry.name).stem
        for entry in templates.iterdir()
        if entry.is_file() and entry.name.endswith(".yaml")
    )


def read_template(name: str) -> str:
    template = files("typed_text_box") / "templates" / f"{name}.yaml"
    if not template.is_file():
        raise FileNotFoundError(f"Template not found: {name}")
    return template.read_text(encoding="utf-8")


def load_template(name: str) -> DemoConfig:
    raw = yaml.safe_load(read_template(name))
    return parse_config_data(raw or {})
