"""Pointer event recording and replay.

Record real gesture sessions so they can be replayed through an engine:
- Reproducible tests for recognition thresholds
- Checking a settings change against a library of strokes
- Demo streams that play back deterministically

File format (JSON):
    {"version": 1, "page_url": "...", "event_count": N,
     "events": [{"kind": "down", "x": 0, "y": 0, "button": 2,
                 "timestamp": 0.0, "modifiers": [], "target": {...}}, ...]}
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Iterator, Optional

from mouse_gestures.engine import GestureEngine, PointerEvent, PointerTarget
from mouse_gestures.resolver import ActionRequest

logger = logging.getLogger("mouse_gestures.recorder")

EVENT_KINDS = ("down", "move", "up", "cancel")


@dataclass
class RecordedEvent:
    """A single pointer event in a recording."""
    kind: str  # "down", "move", "up", "cancel"
    x: float = 0.0
    y: float = 0.0
    button: int = 2
    timestamp: float = 0.0  # seconds from recording start
    modifiers: list[str] = field(default_factory=list)
    target: Optional[dict] = None

    def to_pointer_event(self) -> PointerEvent:
        target = None
        if self.target is not None:
            target = PointerTarget(
                element_id=self.target.get("element_id"),
                link_url=self.target.get("link_url"),
                editable=bool(self.target.get("editable", False)),
            )
        return PointerEvent(
            button=self.button,
            x=self.x,
            y=self.y,
            target=target,
            modifiers=frozenset(self.modifiers),
            timestamp=self.timestamp,
        )

    @classmethod
    def from_dict(cls, data: dict) -> RecordedEvent:
        return cls(
            kind=data["kind"],
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            button=int(data.get("button", 2)),
            timestamp=float(data.get("timestamp", 0.0)),
            modifiers=list(data.get("modifiers", [])),
            target=data.get("target"),
        )


class GestureRecorder:
    """Records pointer events to a file.

    Usage:
        recorder = GestureRecorder(page_url="https://example.com/")
        recorder.start()
        recorder.add("down", event)
        recorder.add("move", event)
        recorder.add("up", event)
        recorder.save("stroke.json")
    """

    def __init__(self, page_url: str = ""):
        self.page_url = page_url
        self._events: list[RecordedEvent] = []
        self._start_time: Optional[float] = None
        self._recording = False

    def start(self):
        self._events = []
        self._start_time = time.monotonic()
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of events captured."""
        self._recording = False
        return len(self._events)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def event_count(self) -> int:
        return len(self._events)

    def add(self, kind: str, event: Optional[PointerEvent] = None):
        if not self._recording:
            return
        if kind not in EVENT_KINDS:
            raise ValueError(f"unknown event kind: {kind!r}")

        if event is not None and event.timestamp is not None:
            timestamp = event.timestamp
        else:
            timestamp = time.monotonic() - self._start_time

        if event is None:
            self._events.append(RecordedEvent(kind=kind, timestamp=timestamp))
            return

        target = None
        if event.target is not None:
            target = asdict(event.target)
        self._events.append(RecordedEvent(
            kind=kind,
            x=event.x,
            y=event.y,
            button=event.button,
            timestamp=timestamp,
            modifiers=sorted(event.modifiers),
            target=target,
        ))

    def save(self, path: str | Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "version": 1,
            "page_url": self.page_url,
            "event_count": len(self._events),
            "events": [asdict(e) for e in self._events],
        }
        with open(path, "w") as f:
            json.dump(data, f)


class GesturePlayer:
    """Replays recorded pointer events through a ``GestureEngine``."""

    def __init__(self, events: list[RecordedEvent], page_url: str = ""):
        self._events = events
        self.page_url = page_url

    @classmethod
    def load(cls, path: str | Path) -> GesturePlayer:
        with open(path) as f:
            data = json.load(f)
        events = [RecordedEvent.from_dict(e) for e in data.get("events", [])]
        return cls(events, page_url=data.get("page_url", ""))

    @classmethod
    def from_points(
        cls,
        points: list[tuple[float, float]],
        page_url: str = "",
        button: int = 2,
        target: Optional[dict] = None,
        modifiers: Optional[list[str]] = None,
    ) -> GesturePlayer:
        """Build a down/move.../up stream from a plain point list."""
        if not points:
            return cls([], page_url=page_url)
        mods = list(modifiers or [])
        events = []
        for i, (x, y) in enumerate(points):
            kind = "down" if i == 0 else "move"
            events.append(RecordedEvent(kind, float(x), float(y), button, i * 0.01, mods, target))
        x, y = points[-1]
        events.append(RecordedEvent("up", float(x), float(y), button, len(points) * 0.01, mods, target))
        return cls(events, page_url=page_url)

    @property
    def event_count(self) -> int:
        return len(self._events)

    def events(self) -> Iterator[RecordedEvent]:
        yield from self._events

    def points(self) -> list[tuple[float, float]]:
        """Positions of the down and move events, in order."""
        return [(e.x, e.y) for e in self._events if e.kind in ("down", "move")]

    def replay(self, engine: GestureEngine) -> list[ActionRequest]:
        """Feed every event to ``engine``. Returns the emitted requests."""
        requests = []
        for recorded in self._events:
            event = recorded.to_pointer_event()
            if recorded.kind == "down":
                engine.pointer_down(event)
            elif recorded.kind == "move":
                engine.pointer_move(event)
            elif recorded.kind == "up":
                request = engine.pointer_up(event)
                if request is not None:
                    requests.append(request)
            elif recorded.kind == "cancel":
                engine.cancel()
            else:
                logger.warning("Skipping unknown event kind %r", recorded.kind)
        return requests
