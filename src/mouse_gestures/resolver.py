"""Pattern-to-action resolution.

Looks a finished pattern up in the user's action map and applies the link
override: a gesture that resolves to "forward" but started over a hyperlink
opens that link in a new tab instead.

Which patterns the override applies to is configurable (``LinkOverride``)
because the extension variants disagreed: some redirect any pattern mapped to
"forward", others only the single canonical forward stroke.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

from mouse_gestures.patterns import GesturePattern


class ActionName(str, Enum):
    NONE = ""
    BACK = "back"
    FORWARD = "forward"
    TOP = "top"
    BOTTOM = "bottom"
    RELOAD = "reload"
    NEW_TAB = "new_tab"
    CLOSE_TAB = "close_tab"


class LinkOverride(str, Enum):
    OFF = "off"
    ANY_FORWARD = "any_forward"  # every pattern that maps to forward
    CANONICAL = "canonical"      # only the canonical forward pattern


DEFAULT_ACTION_MAP: dict[str, ActionName] = {
    "L": ActionName.BACK,
    "R": ActionName.FORWARD,
    "U": ActionName.TOP,
    "D": ActionName.BOTTOM,
    "UR": ActionName.NEW_TAB,
    "DR": ActionName.CLOSE_TAB,
    "DL": ActionName.RELOAD,
}


@dataclass
class ActionRequest:
    """What the engine asks the host to do after a gesture."""
    action: ActionName
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def url(self) -> Optional[str]:
        return self.context.get("url")

    def to_dict(self) -> dict:
        return {"action": self.action.value, "context": dict(self.context)}


def safe_url(url) -> Optional[str]:
    """Return ``url`` if it is an absolute http(s) URL, else None."""
    if not url:
        return None
    try:
        parts = urlsplit(str(url))
    except ValueError:
        return None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return str(url)


class ActionResolver:
    """Resolves patterns against an action map."""

    def __init__(
        self,
        action_map: Optional[Mapping[str, ActionName]] = None,
        link_override: LinkOverride = LinkOverride.ANY_FORWARD,
        canonical_forward_pattern: str = "R",
    ):
        self.action_map = dict(DEFAULT_ACTION_MAP if action_map is None else action_map)
        self.link_override = link_override
        self.canonical_forward_pattern = canonical_forward_pattern

    def lookup(self, pattern: GesturePattern) -> ActionName:
        return ActionName(self.action_map.get(str(pattern), ActionName.NONE))

    def resolve(
        self, pattern: GesturePattern, link_url: Optional[str] = None
    ) -> Optional[ActionRequest]:
        """Resolve a pattern, returning None for "no action".

        Args:
            pattern: The final (possibly normalized) pattern.
            link_url: URL of the hyperlink the gesture started over, if any.
        """
        if not pattern:
            return None

        action = self.lookup(pattern)
        if action == ActionName.NONE:
            return None

        key = str(pattern)
        context: dict[str, Any] = {"pattern": key, "trigger": "gesture"}
        url = safe_url(link_url)

        if action == ActionName.FORWARD and url and self._override_applies(key):
            context.update(url=url, trigger="link_override")
            return ActionRequest(ActionName.NEW_TAB, context)

        if action == ActionName.NEW_TAB and url:
            context["url"] = url
        return ActionRequest(action, context)

    def _override_applies(self, key: str) -> bool:
        if self.link_override == LinkOverride.ANY_FORWARD:
            return True
        if self.link_override == LinkOverride.CANONICAL:
            return key == self.canonical_forward_pattern
        return False
