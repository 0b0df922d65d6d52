from __future__ import annotations

import json
import re
from pathlib import Path

import click
import yaml
from pydantic import ValidationError

from typed_text_box.buffer import InvalidConfigError, TypedTextBuffer
from typed_text_box.events import read_events
from typed_text_box.interpolate import template_tokens
from typed_text_box.keys import keys_from_script
from typed_text_box.models import (
    DemoConfig,
    format_validation_error,
    list_template_names,
    load_config,
    load_template,
    read_template,
)
from typed_text_box.surface import TextFont, measure_width
from typed_text_box.world import WorldResult, event_file_sink, replay_keys, run_world


def _list_templates() -> list[str]:
    return list_template_names()


def _load_config_or_fail(config_path: Path | None, template: str | None) -> DemoConfig:
    if config_path is not None and template is not None:
        raise click.ClickException("Use either a config path or --template, not both")
    try:
        if config_path is not None:
            return load_config(config_path)
        if template is not None:
            if template not in _list_templates():
                raise click.ClickException(
                    f"Unknown template '{template}'. Use 'textbox-demo new --list-templates'."
                )
            return load_template(template)
    except ValidationError as exc:
        raise click.ClickException(format_validation_error(exc)) from exc
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    return DemoConfig()


def _apply_seed(config: DemoConfig, seed: int | None) -> DemoConfig:
    if seed is None:
        return config
    adventure = config.adventure.model_copy(update={"seed": seed})
    return config.model_copy(update={"adventure": adventure})


def _write_config_from_template(
    *,
    name: str,
    destination: Path,
    template: str,
    force: bool,
) -> tuple[Path, bool]:
    destination.mkdir(parents=True, exist_ok=True)
    output_path = destination / f"{name}.yaml"
    overwritten = output_path.exists()
    if overwritten and not force:
        raise click.ClickException(f"File already exists: {output_path}")

    content = read_template(template)
    content = re.sub(
        r'(?m)^(\s+)title:\s*".*"$',
        lambda match: f'{match.group(1)}title: "{name}"',
        content,
        count=1,
    )
    output_path.write_text(content, encoding="utf-8")
    return output_path, overwritten


def _emit_result(result: WorldResult, *, show_transcript: bool) -> None:
    if show_transcript:
        for line in result.transcript.splitlines():
            click.echo(line)
    click.echo(f"STATUS={'finished' if result.finished else 'stopped'}")
    click.echo(f"STATE={result.state.value}")
    click.echo(f"OUTCOME={result.outcome or 'none'}")
    click.echo(f"FRAMES={result.frames}")


@click.group(help="Typed text box demo: a typewriter text widget and a scripted door adventure.")
def app() -> None:
    pass


@app.command("play")
@click.argument("config_path", type=click.Path(exists=True, path_type=Path), required=False)
@click.option("template", "--template", type=str, default=None)
@click.option("seed", "--seed", type=int, default=None)
@click.option("events_path", "--events", type=click.Path(path_type=Path), default=None)
@click.option("max_frames", "--max-frames", type=click.IntRange(min=1), default=None)
@click.option(
    "hold_on_finish",
    "--hold/--no-hold",
    default=True,
    show_default=True,
    help="Keep the window open after the adventure ends.",
)
def play(
    config_path: Path | None,
    template: str | None,
    seed: int | None,
    events_path: Path | None,
    max_frames: int | None,
    hold_on_finish: bool,
) -> None:
    config = _apply_seed(_load_config_or_fail(config_path, template), seed)
    try:
        result = run_world(
            config,
            events_path=events_path,
            max_frames=max_frames,
            hold_on_finish=hold_on_finish,
        )
    except InvalidConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    _emit_result(result, show_transcript=False)
    if events_path is not None:
        click.echo(f"EVENTS={events_path}")


@app.command("replay")
@click.argument("keys_path", type=click.Path(exists=True, path_type=Path))
@click.option("config_path", "--config", type=click.Path(exists=True, path_type=Path))
@click.option("template", "--template", type=str, default=None)
@click.option("seed", "--seed", type=int, default=None)
@click.option("events_path", "--events", type=click.Path(path_type=Path), default=None)
def replay(
    keys_path: Path,
    config_path: Path | None,
    template: str | None,
    seed: int | None,
    events_path: Path | None,
) -> None:
    raw = yaml.safe_load(keys_path.read_text(encoding="utf-8"))
    if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
        raise click.ClickException(f"Key script at {keys_path} must be a YAML list of strings")
    config = _apply_seed(_load_config_or_fail(config_path, template), seed)
    try:
        result = replay_keys(
            config,
            keys_from_script(raw),
            on_event=event_file_sink(events_path),
        )
    except InvalidConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    _emit_result(result, show_transcript=True)
    if not result.finished:
        raise SystemExit(1)


@app.command("validate")
@click.argument("config_path", type=click.Path(exists=True, path_type=Path))
@click.option("show_json_schema", "--json-schema", is_flag=True, default=False)
@click.option("explain", "--explain", is_flag=True, default=False)
def validate(config_path: Path, show_json_schema: bool, explain: bool) -> None:
    if show_json_schema:
        click.echo(json.dumps(DemoConfig.model_json_schema(), indent=2, sort_keys=True))
        return

    loaded = _load_config_or_fail(config_path, None)
    box = loaded.textbox
    try:
        max_lines = TypedTextBuffer(box).max_lines
    except InvalidConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Valid config: {config_path}")
    if explain:
        click.echo(f"Title: {loaded.adventure.title}")
        click.echo(f"Box: {box.width}x{box.height} font_size={box.font_size}")
        click.echo(f"Max lines: {max_lines}")
        click.echo(f"Alignment: {'centered' if box.centered else 'left'}")
        for name, text in loaded.script.model_dump().items():
            tokens = template_tokens(text)
            if tokens:
                click.echo(f"- {name}: variables={', '.join(tokens)}")


@app.command("new")
@click.argument("name", type=str, required=False)
@click.option(
    "destination",
    "--destination",
    type=click.Path(path_type=Path),
    default=Path("configs"),
)
@click.option("template", "--template", type=str, default="door_rpg")
@click.option("list_templates", "--list-templates", is_flag=True, default=False)
@click.option("force", "--force", is_flag=True, default=False)
def new(
    name: str | None,
    destination: Path,
    template: str,
    list_templates: bool,
    force: bool,
) -> None:
    templates = _list_templates()
    if list_templates:
        click.echo("Available templates:")
        for template_name in templates:
            click.echo(f"- {template_name}")
        return

    if not name:
        raise click.ClickException("Name is required unless --list-templates is provided")
    if template not in templates:
        raise click.ClickException(
            f"Unknown template '{template}'. Use --list-templates to see valid options."
        )
    output_path, overwritten = _write_config_from_template(
        name=name,
        destination=destination,
        template=template,
        force=force,
    )
    click.echo(f"Created config: {output_path}")
    click.echo(f"Template: {template}")
    click.echo(f"Overwritten: {'yes' if overwritten else 'no'}")
    click.echo(f"Next: textbox-demo validate {output_path}")


@app.command("measure")
@click.argument("text", type=str)
@click.option("font_family", "--font-family", type=str, default=None)
@click.option("font_size", "--font-size", type=click.IntRange(min=1), default=25, show_default=True)
@click.option("box_width", "--box-width", type=click.IntRange(min=1), default=None)
def measure(text: str, font_family: str | None, font_size: int, box_width: int | None) -> None:
    width = measure_width(TextFont(font_family, font_size), text)
    click.echo(f"WIDTH={width}")
    if box_width is not None:
        click.echo(f"CENTERED_X={box_width // 2 - width // 2}")


@app.command("events")
@click.argument("events_path", type=click.Path(exists=True, path_type=Path))
@click.option("as_json", "--json", is_flag=True, default=False)
def events(events_path: Path, as_json: bool) -> None:
    try:
        recorded = read_events(events_path)
    except (ValueError, TypeError) as exc:
        raise click.ClickException(f"Unreadable event log {events_path}: {exc}") from exc

    if as_json:
        payload = {
            "events": [json.loads(event.to_json()) for event in recorded],
            "path": str(events_path.resolve()),
        }
        click.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    for event in recorded:
        detail = f" {event.detail}" if event.detail else ""
        click.echo(f"{event.frame:>6} {event.state:<15} {event.action}{detail}")
    final_state = recorded[-1].state if recorded else "none"
    click.echo(f"EVENTS={len(recorded)}")
    click.echo(f"FINAL_STATE={final_state}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
