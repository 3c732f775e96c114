"""Engine configuration: tolerant parsing, YAML files and change notification.

Every field is read independently. A missing or malformed value falls back to
its default and numbers are clamped into a safe range, so loading a config
never raises. Keys from the browser extension's storage format (camelCase
``minSegmentPx``, ``gestureMap``, ``prefs``, ``list``) are accepted too.

Usage:
    config = load_config("gestures.yml")
    store = ConfigStore("gestures.yml")
    store.subscribe(engine.update_config)
    store.update(normalize_diagonals=False)
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import yaml

from mouse_gestures.directions import DEFAULT_SPAN, DirectionClassifier
from mouse_gestures.patterns import is_pattern_key
from mouse_gestures.policy import (
    DEFAULT_POLICIES,
    Behavior,
    ListMode,
    SiteSettings,
    clean_domain_list,
    normalize_host,
)
from mouse_gestures.resolver import DEFAULT_ACTION_MAP, ActionName, ActionResolver, LinkOverride

logger = logging.getLogger("mouse_gestures.config")

SETTINGS_SCHEMA = 1
APP_NAME = "Mouse Gestures"

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def clamp_number(value, default: float, lo: float, hi: float) -> float:
    """Coerce ``value`` to a float in [lo, hi]; non-numbers give ``default``."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return min(hi, max(lo, number))


def _pick(data: Mapping, *keys, default=None):
    for key in keys:
        if key in data:
            return data[key]
    return default


def _as_mapping(value) -> Mapping:
    return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True)
class RecognitionConfig:
    """Thresholds, in pixels, for turning a trajectory into a pattern."""
    min_segment_px: float = 18.0
    jitter_px: float = 4.0
    sample_min_px: float = 6.0
    moved_px: float = 4.0

    RANGES = {
        "min_segment_px": (6.0, 60.0),
        "jitter_px": (0.0, 20.0),
        "sample_min_px": (0.0, 10.0),
        "moved_px": (1.0, 20.0),
    }

    @classmethod
    def from_dict(cls, data) -> RecognitionConfig:
        data = _as_mapping(data)
        defaults = cls()
        return cls(
            min_segment_px=clamp_number(
                _pick(data, "min_segment_px", "minSegmentPx"),
                defaults.min_segment_px, *cls.RANGES["min_segment_px"]),
            jitter_px=clamp_number(
                _pick(data, "jitter_px", "jitterPx"),
                defaults.jitter_px, *cls.RANGES["jitter_px"]),
            sample_min_px=clamp_number(
                _pick(data, "sample_min_px", "sampleMinPx"),
                defaults.sample_min_px, *cls.RANGES["sample_min_px"]),
            moved_px=clamp_number(
                _pick(data, "moved_px", "movedPx"),
                defaults.moved_px, *cls.RANGES["moved_px"]),
        )


@dataclass(frozen=True)
class ClassifierConfig:
    """Sector widths in degrees; diagonals get what is left over."""
    horizontal_span: float = DEFAULT_SPAN
    vertical_span: float = DEFAULT_SPAN

    @classmethod
    def from_dict(cls, data) -> ClassifierConfig:
        data = _as_mapping(data)
        return cls(
            horizontal_span=clamp_number(
                _pick(data, "horizontal_span", "horizontalSpan"), DEFAULT_SPAN, 0.0, 90.0),
            vertical_span=clamp_number(
                _pick(data, "vertical_span", "verticalSpan"), DEFAULT_SPAN, 0.0, 90.0),
        )


@dataclass(frozen=True)
class TrailStyle:
    line_width: float = 3.0
    color: str = "#00e5ff"
    alpha: float = 0.85

    @classmethod
    def from_dict(cls, data) -> TrailStyle:
        data = _as_mapping(data)
        defaults = cls()
        color = _pick(data, "color", "trail_color", "trailColor")
        if not (isinstance(color, str) and _COLOR_RE.match(color.strip())):
            color = defaults.color
        return cls(
            line_width=clamp_number(
                _pick(data, "line_width", "lineWidth"), defaults.line_width, 1.0, 18.0),
            color=color.strip(),
            alpha=clamp_number(
                _pick(data, "alpha", "trail_alpha", "trailAlpha"), defaults.alpha, 0.05, 1.0),
        )


def parse_action_map(data) -> dict[str, ActionName]:
    """Merge user mappings over the defaults.

    An empty action disables a default pattern. Bad keys and unknown action
    names are dropped.
    """
    merged = dict(DEFAULT_ACTION_MAP)
    for key, value in _as_mapping(data).items():
        if not is_pattern_key(key):
            logger.debug("Ignoring invalid pattern key %r", key)
            continue
        try:
            merged[key] = ActionName(value if value is not None else "")
        except ValueError:
            logger.debug("Ignoring unknown action %r for pattern %s", value, key)
    return merged


def parse_policies(data) -> dict[str, Behavior]:
    merged = dict(DEFAULT_POLICIES)
    for host, behavior in _as_mapping(data).items():
        host = normalize_host(host)
        if host:
            merged[host] = Behavior.parse(behavior)
    return merged


def parse_site_settings(data) -> SiteSettings:
    data = _as_mapping(data)
    enabled = data.get("enabled")
    mode = data.get("mode")
    domains = _pick(data, "domain_list", "domainList", "list", default=[])
    modifier = data.get("modifier_key")
    return SiteSettings(
        enabled=enabled if isinstance(enabled, bool) else True,
        mode=ListMode(mode) if mode in ("blacklist", "whitelist") else ListMode.BLACKLIST,
        domain_list=tuple(clean_domain_list(domains if isinstance(domains, (list, tuple)) else [])),
        policies=parse_policies(data.get("policies")),
        modifier_key=modifier.strip().lower() if isinstance(modifier, str) and modifier.strip() else "alt",
    )


@dataclass(frozen=True)
class EngineConfig:
    """Complete, immutable configuration snapshot used by one gesture session."""
    recognition: RecognitionConfig = field(default_factory=RecognitionConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    trail: TrailStyle = field(default_factory=TrailStyle)
    site: SiteSettings = field(default_factory=SiteSettings)
    action_map: Mapping[str, ActionName] = field(default_factory=lambda: dict(DEFAULT_ACTION_MAP))
    normalize_diagonals: bool = True
    link_override: LinkOverride = LinkOverride.ANY_FORWARD
    canonical_forward_pattern: str = "R"
    trigger_button: int = 2

    @classmethod
    def from_dict(cls, data) -> EngineConfig:
        data = _as_mapping(data)
        prefs = _as_mapping(data.get("prefs"))

        normalize = data.get("normalize_diagonals")
        override = data.get("link_override")
        override = getattr(override, "value", override)
        canonical = data.get("canonical_forward_pattern")
        button = data.get("trigger_button")

        return cls(
            recognition=RecognitionConfig.from_dict({**prefs, **_as_mapping(data.get("recognition"))}),
            classifier=ClassifierConfig.from_dict(data.get("classifier")),
            trail=TrailStyle.from_dict({**prefs, **_as_mapping(data.get("trail"))}),
            site=parse_site_settings(data),
            action_map=parse_action_map(_pick(data, "action_map", "gestureMap")),
            normalize_diagonals=normalize if isinstance(normalize, bool) else True,
            link_override=(
                LinkOverride(override)
                if override in [o.value for o in LinkOverride]
                else LinkOverride.ANY_FORWARD
            ),
            canonical_forward_pattern=canonical if is_pattern_key(canonical) else "R",
            trigger_button=(
                button if isinstance(button, int) and not isinstance(button, bool) and 0 <= button <= 4 else 2
            ),
        )

    def to_dict(self) -> dict:
        return {
            "enabled": self.site.enabled,
            "mode": self.site.mode.value,
            "domain_list": list(self.site.domain_list),
            "policies": {host: b.value for host, b in self.site.policies.items()},
            "modifier_key": self.site.modifier_key,
            "recognition": asdict(self.recognition),
            "classifier": asdict(self.classifier),
            "trail": asdict(self.trail),
            "action_map": {key: action.value for key, action in self.action_map.items()},
            "normalize_diagonals": self.normalize_diagonals,
            "link_override": self.link_override.value,
            "canonical_forward_pattern": self.canonical_forward_pattern,
            "trigger_button": self.trigger_button,
        }

    def with_changes(self, **changes) -> EngineConfig:
        """Return a re-validated copy with top-level settings replaced."""
        return EngineConfig.from_dict({**self.to_dict(), **changes})

    def direction_classifier(self) -> DirectionClassifier:
        return DirectionClassifier(
            jitter_px=self.recognition.jitter_px,
            horizontal_span=self.classifier.horizontal_span,
            vertical_span=self.classifier.vertical_span,
        )

    def action_resolver(self) -> ActionResolver:
        return ActionResolver(
            self.action_map,
            link_override=self.link_override,
            canonical_forward_pattern=self.canonical_forward_pattern,
        )


def load_config(path: str | Path) -> EngineConfig:
    """Load a YAML (or JSON) config file. Unreadable files give the defaults."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_bytes())
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("Could not read config %s: %s", path, e)
        return EngineConfig()
    return EngineConfig.from_dict(_unwrap_settings(data))


def save_config(config: EngineConfig, path: str | Path):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)


def export_settings(config: EngineConfig, path: str | Path) -> Path:
    """Write a JSON settings export with a small metadata header.

    Uses the browser extension's envelope (``meta``, ``cfg``, ``list``) so
    the file imports on either side.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "meta": {
            "app": APP_NAME,
            "schema": SETTINGS_SCHEMA,
            "exported_at": datetime.now(timezone.utc).isoformat(),
        },
        "cfg": config.to_dict(),
        "list": list(config.site.domain_list),
    }
    path.write_text(json.dumps(payload, indent=2))
    return path


def import_settings(path: str | Path) -> EngineConfig:
    """Read a settings export (or a bare config mapping)."""
    return load_config(path)


def _unwrap_settings(data) -> dict:
    data = dict(_as_mapping(data))
    if "meta" in data:
        inner = dict(_as_mapping(_pick(data, "config", "cfg")))
        if "list" in data and "domain_list" not in inner:
            inner["list"] = data["list"]
        return inner
    return data


class ConfigStore:
    """File-backed config holder that notifies subscribers on change."""

    def __init__(self, path: Optional[str | Path] = None):
        self.path = Path(path) if path else None
        self._subscribers: list[Callable[[EngineConfig], None]] = []
        if self.path and self.path.exists():
            self._config = load_config(self.path)
        else:
            self._config = EngineConfig()

    @property
    def config(self) -> EngineConfig:
        return self._config

    def subscribe(self, callback: Callable[[EngineConfig], None]):
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[EngineConfig], None]):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def set(self, config: EngineConfig):
        self._config = config
        if self.path:
            save_config(config, self.path)
        self._notify()

    def update(self, **changes: Any) -> EngineConfig:
        self.set(self._config.with_changes(**changes))
        return self._config

    def reload(self) -> EngineConfig:
        if self.path and self.path.exists():
            self._config = load_config(self.path)
            self._notify()
        return self._config

    def _notify(self):
        for callback in list(self._subscribers):
            try:
                callback(self._config)
            except Exception as e:
                logger.error("Config subscriber %r failed: %s", callback, e)

