"""Per-site gating: may a gesture start on this page?

Two independent layers decide:

- the global switch plus blacklist/whitelist domain list, and
- per-site policies ("normal", "require_modifier", "disabled") looked up by
  host with parent-domain fallback.

Both must allow a gesture; a "require_modifier" policy additionally needs the
configured modifier key held when the gesture starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping
from urllib.parse import urlsplit

logger = logging.getLogger("mouse_gestures.policy")


class Behavior(str, Enum):
    NORMAL = "normal"
    REQUIRE_MODIFIER = "require_modifier"
    DISABLED = "disabled"

    @classmethod
    def parse(cls, value) -> Behavior:
        """Lenient parse; unknown values mean normal."""
        if isinstance(value, Mapping):
            value = value.get("behavior")
        if isinstance(value, Behavior):
            return value
        text = str(value or "").strip().lower()
        if text == "require_alt":
            return cls.REQUIRE_MODIFIER
        try:
            return cls(text)
        except ValueError:
            logger.debug("Unknown site behavior %r, using normal", value)
            return cls.NORMAL


class ListMode(str, Enum):
    BLACKLIST = "blacklist"
    WHITELIST = "whitelist"


DEFAULT_POLICIES: dict[str, Behavior] = {
    "github.com": Behavior.REQUIRE_MODIFIER,
    "gist.github.com": Behavior.REQUIRE_MODIFIER,
    "docs.google.com": Behavior.REQUIRE_MODIFIER,
    "drive.google.com": Behavior.REQUIRE_MODIFIER,
    "figma.com": Behavior.REQUIRE_MODIFIER,
}

RESTRICTED_PREFIXES = (
    "chrome://",
    "edge://",
    "about:",
    "chrome-extension://",
    "https://chrome.google.com/webstore",
    "https://chromewebstore.google.com",
)


def normalize_host(host) -> str:
    return str(host or "").strip().lower()


def is_valid_host(host) -> bool:
    host = normalize_host(host)
    return bool(host) and "://" not in host and "/" not in host


def clean_domain_list(entries: Iterable) -> list[str]:
    """Normalize, de-duplicate and drop entries with a scheme or path."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for entry in entries:
        host = normalize_host(entry)
        if not is_valid_host(host):
            if host:
                logger.debug("Dropping invalid domain list entry %r", entry)
            continue
        if host not in seen:
            seen.add(host)
            cleaned.append(host)
    return cleaned


def host_from_url(url) -> str:
    try:
        return normalize_host(urlsplit(str(url or "")).hostname)
    except ValueError:
        return ""


def is_restricted_url(url) -> bool:
    """Browser-internal pages where gestures never run."""
    url = str(url or "")
    return url.startswith(RESTRICTED_PREFIXES)


def host_matches_rule(host, rule) -> bool:
    """True when ``host`` is ``rule`` or one of its subdomains."""
    host, rule = normalize_host(host), normalize_host(rule)
    if not host or not rule:
        return False
    return host == rule or host.endswith("." + rule)


def evaluate_policy(host, policies: Mapping[str, Behavior]) -> Behavior:
    """Find the behavior for a host.

    Exact match first, then parent domains from most to least specific. The
    last label (the top-level domain) is never tried on its own.
    """
    host = normalize_host(host)
    if not host:
        return Behavior.NORMAL

    if host in policies:
        return policies[host]

    parts = host.split(".")
    for i in range(1, len(parts) - 1):
        candidate = ".".join(parts[i:])
        if candidate in policies:
            return policies[candidate]
    return Behavior.NORMAL


def list_allows(host, mode: ListMode, domain_list: Iterable[str]) -> bool:
    matched = any(host_matches_rule(host, rule) for rule in domain_list)
    if mode == ListMode.WHITELIST:
        return matched
    return not matched


@dataclass(frozen=True)
class SiteSettings:
    """Global enablement, domain list and per-site policies."""
    enabled: bool = True
    mode: ListMode = ListMode.BLACKLIST
    domain_list: tuple[str, ...] = ()
    policies: Mapping[str, Behavior] = field(default_factory=lambda: dict(DEFAULT_POLICIES))
    modifier_key: str = "alt"


def site_access(host, settings: SiteSettings) -> Behavior:
    """Combine both gating layers into a single behavior for ``host``."""
    if not settings.enabled:
        return Behavior.DISABLED

    behavior = evaluate_policy(host, settings.policies)
    if behavior == Behavior.DISABLED:
        return Behavior.DISABLED

    if not list_allows(host, settings.mode, settings.domain_list):
        return Behavior.DISABLED
    return behavior
