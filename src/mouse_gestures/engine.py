"""Gesture session state machine.

Ties the pieces together for one page:

    pointer_down → site gate → TrajectorySampler
    pointer_move → sampler → PatternAccumulator (incremental)
    pointer_up   → normalize → ActionResolver → ActionRequest

States: IDLE → TRACKING → (CANCELLED | FINALIZING) → IDLE.

Configuration is copy-on-start. A session keeps the ``EngineConfig`` it was
started with; ``update_config()`` during a gesture is queued and applied once
the session ends, so a settings change never alters a gesture mid-stroke.

Usage:
    engine = GestureEngine(EngineConfig(), page_url="https://example.com/")
    engine.on_action(lambda req: print(req.action))
    engine.pointer_down(PointerEvent(button=2, x=0, y=0))
    engine.pointer_move(PointerEvent(button=2, x=40, y=0))
    request = engine.pointer_up(PointerEvent(button=2, x=40, y=0))
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Protocol

from mouse_gestures.config import EngineConfig
from mouse_gestures.patterns import GesturePattern, PatternAccumulator, normalize
from mouse_gestures.policy import Behavior, host_from_url, is_restricted_url, site_access
from mouse_gestures.resolver import ActionRequest
from mouse_gestures.sampler import PointerSample, TrajectorySampler
from mouse_gestures.trail import TrailScheduler

logger = logging.getLogger("mouse_gestures.engine")


@dataclass(frozen=True)
class PointerTarget:
    """What the host knows about the element under the pointer."""
    element_id: Any = None
    link_url: Optional[str] = None
    editable: bool = False


@dataclass
class PointerEvent:
    button: int
    x: float
    y: float
    target: Optional[PointerTarget] = None
    modifiers: frozenset[str] = frozenset()
    timestamp: Optional[float] = None


class SurfaceInspector(Protocol):
    """Capability queries the host answers about event targets."""

    def is_editable_surface(self, target: Any) -> bool: ...

    def link_url(self, target: Any) -> Optional[str]: ...


class TargetInspector:
    """Default inspector reading ``PointerTarget`` records."""

    def is_editable_surface(self, target: Any) -> bool:
        return bool(getattr(target, "editable", False))

    def link_url(self, target: Any) -> Optional[str]:
        return getattr(target, "link_url", None)


class SessionState(Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    CANCELLED = "cancelled"
    FINALIZING = "finalizing"


@dataclass
class GestureSession:
    """Runtime state of one pointer-down to pointer-up attempt."""
    config: EngineConfig
    sampler: TrajectorySampler
    accumulator: PatternAccumulator
    start_target: Any = None
    moved: bool = False
    started_at: float = 0.0

    @property
    def trajectory(self):
        return self.sampler.trajectory

    @property
    def pattern(self) -> GesturePattern:
        return self.accumulator.pattern


@dataclass
class Recognition:
    """Result of running a finished trajectory through the engine pipeline."""
    raw_pattern: GesturePattern
    pattern: GesturePattern
    request: Optional[ActionRequest] = None


def recognize(
    points: Iterable[tuple[float, float]],
    config: Optional[EngineConfig] = None,
    link_url: Optional[str] = None,
) -> Recognition:
    """Run a whole point list through sampling, accumulation and resolution.

    Gives the same answer as feeding the points one by one through a
    ``GestureEngine`` session. Used for previewing strokes.
    """
    config = config or EngineConfig()
    recognition = config.recognition
    sampler = TrajectorySampler(recognition.sample_min_px)
    acc = PatternAccumulator(recognition.min_segment_px, config.direction_classifier())
    first = None
    moved = False
    for i, (x, y) in enumerate(points):
        sample = PointerSample(float(x), float(y), float(i))
        if first is None:
            first = sample
        elif not moved and first.distance_to(sample) >= recognition.moved_px:
            moved = True
        if sampler.accept(sample):
            acc.feed(sample)

    raw = acc.pattern
    final = normalize(raw) if config.normalize_diagonals else raw
    # Without the moved flag the engine treats the stroke as a plain click
    request = config.action_resolver().resolve(final, link_url) if moved else None
    return Recognition(raw_pattern=raw, pattern=final, request=request)


class GestureEngine:
    """Owns the active configuration and at most one gesture session."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        page_url: str = "",
        inspector: Optional[SurfaceInspector] = None,
        trail: Optional[TrailScheduler] = None,
    ):
        self._config = config or EngineConfig()
        self._pending_config: Optional[EngineConfig] = None
        self.page_url = page_url
        self.inspector = inspector or TargetInspector()
        self.trail = trail or TrailScheduler(self._config.trail)

        self._state = SessionState.IDLE
        self._session: Optional[GestureSession] = None
        self._listeners: list[Callable[[ActionRequest], None]] = []
        self._suppress_context_menu = False
        self._total_gestures = 0

    # --- configuration ---

    @property
    def config(self) -> EngineConfig:
        return self._config

    def update_config(self, config: EngineConfig):
        """Apply a new config now, or after the running session ends."""
        if self._state == SessionState.TRACKING:
            logger.debug("Config update queued until the current gesture ends")
            self._pending_config = config
            return
        self._config = config
        self._pending_config = None

    @property
    def has_pending_config(self) -> bool:
        return self._pending_config is not None

    # --- listeners ---

    def on_action(self, callback: Callable[[ActionRequest], None]):
        """Register a callback for emitted action requests."""
        self._listeners.append(callback)

    # --- state ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Optional[GestureSession]:
        return self._session

    @property
    def host(self) -> str:
        return host_from_url(self.page_url)

    @property
    def total_gestures(self) -> int:
        return self._total_gestures

    def site_behavior(self) -> Behavior:
        if is_restricted_url(self.page_url):
            return Behavior.DISABLED
        return site_access(self.host, self._config.site)

    # --- pointer events ---

    def pointer_down(self, event: PointerEvent) -> bool:
        """Start a session if the event qualifies. Returns True if tracking."""
        if self._state == SessionState.TRACKING:
            return False

        config = self._config
        if event.button != config.trigger_button:
            return False

        behavior = self.site_behavior()
        if behavior == Behavior.DISABLED:
            logger.debug("Gestures disabled on %r", self.host)
            return False
        if behavior == Behavior.REQUIRE_MODIFIER and config.site.modifier_key not in event.modifiers:
            return False
        if self.inspector.is_editable_surface(event.target):
            return False

        now = self._timestamp(event)
        sampler = TrajectorySampler(config.recognition.sample_min_px)
        accumulator = PatternAccumulator(config.recognition.min_segment_px, config.direction_classifier())
        session = GestureSession(
            config=config,
            sampler=sampler,
            accumulator=accumulator,
            start_target=event.target,
            started_at=now,
        )
        first = PointerSample(event.x, event.y, now)
        sampler.accept(first)
        accumulator.feed(first)

        self._session = session
        self._state = SessionState.TRACKING
        self._suppress_context_menu = False
        self.trail.request(session.trajectory, config.trail)
        logger.debug("Gesture started at (%.0f, %.0f) on %s", event.x, event.y, self.host)
        return True

    def pointer_move(self, event: PointerEvent):
        if self._state != SessionState.TRACKING or self._session is None:
            return

        if self.inspector.is_editable_surface(event.target):
            self.cancel()
            return

        session = self._session
        recognition = session.config.recognition
        sample = PointerSample(event.x, event.y, self._timestamp(event))

        if not session.moved:
            first = session.trajectory.first
            if first is not None and first.distance_to(sample) >= recognition.moved_px:
                session.moved = True

        if session.sampler.accept(sample):
            token = session.accumulator.feed(sample)
            if token is not None:
                logger.debug("Token %s -> %s", token.value, session.pattern)

        self.trail.request(session.trajectory)

    def pointer_up(self, event: Optional[PointerEvent] = None) -> Optional[ActionRequest]:
        """Finish the session. Returns the emitted request, if any."""
        if self._state != SessionState.TRACKING or self._session is None:
            return None

        self._state = SessionState.FINALIZING
        session = self._session
        request = None

        if session.moved:
            self._suppress_context_menu = True
            raw = session.pattern
            pattern = normalize(raw) if session.config.normalize_diagonals else raw
            link_url = self.inspector.link_url(session.start_target)
            request = session.config.action_resolver().resolve(pattern, link_url)
            logger.debug("Gesture finished: %s -> %s", pattern or "(empty)",
                         request.action.value if request else "no action")

        self._end_session()

        if request is not None:
            request.context.setdefault("source", "pointer")
            self._total_gestures += 1
            self._emit(request)
        return request

    def cancel(self):
        """Abort the running session. Nothing is emitted."""
        if self._state != SessionState.TRACKING:
            return
        self._state = SessionState.CANCELLED
        logger.debug("Gesture cancelled")
        self._suppress_context_menu = False
        self._end_session()

    def consume_context_menu(self) -> bool:
        """True once after a gesture, so the host can swallow the context menu."""
        suppress = self._suppress_context_menu
        self._suppress_context_menu = False
        return suppress

    # --- internals ---

    def _end_session(self):
        self._session = None
        self.trail.clear()
        self._state = SessionState.IDLE
        if self._pending_config is not None:
            self._config = self._pending_config
            self._pending_config = None
            logger.debug("Applied queued config update")

    def _emit(self, request: ActionRequest):
        for callback in self._listeners:
            try:
                callback(request)
            except Exception as e:
                logger.error("Action listener failed for %s: %s", request.action.value, e)

    @staticmethod
    def _timestamp(event: PointerEvent) -> float:
        if event.timestamp is not None and math.isfinite(event.timestamp):
            return float(event.timestamp)
        return time.monotonic()
