from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path


@dataclass(slots=True)
class AdventureEvent:
    state: str
    frame: int
    action: str
    detail: str = ""

    def to_json(self) -> str:
        return json.dumps(asdict(self), sort_keys=True)


def append_event(path: Path, event: AdventureEvent) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(event.to_json())
        handle.write("\n")


def read_events(path: Path) -> list[AdventureEvent]:
    events: list[AdventureEvent] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        if line.strip():
            events.append(AdventureEvent(**json.loads(line)))
    return events
