"""Action dispatch to host handlers.

The engine stops at an ``ActionRequest``; handlers registered here carry it
out (open a tab, go back, scroll). A failing handler is logged and skipped so
it cannot affect the next gesture.

Usage:
    dispatcher = ActionDispatcher()

    @dispatcher.handler("new_tab")
    def open_tab(request):
        browser.open(request.url or "about:blank")

    engine.on_action(dispatcher.dispatch)
"""

from __future__ import annotations

import logging
from typing import Callable

from mouse_gestures.resolver import ActionName, ActionRequest

logger = logging.getLogger("mouse_gestures.dispatch")

Handler = Callable[[ActionRequest], None]


class ActionDispatcher:
    """Routes action requests to handlers by action name."""

    def __init__(self):
        self._handlers: dict[str, list[Handler]] = {}

    def handler(self, action: ActionName | str = "*"):
        """Decorator to register a handler for one action, or "*" for all."""
        key = action.value if isinstance(action, ActionName) else str(action)

        def decorator(fn: Handler) -> Handler:
            self._handlers.setdefault(key, []).append(fn)
            return fn
        return decorator

    def register(self, action: ActionName | str, fn: Handler):
        self.handler(action)(fn)

    def dispatch(self, request: ActionRequest) -> int:
        """Run every matching handler. Returns how many succeeded."""
        handlers = self._handlers.get(request.action.value, []) + self._handlers.get("*", [])
        if not handlers:
            logger.debug("No handler for action %r", request.action.value)

        ok = 0
        for fn in handlers:
            try:
                fn(request)
                ok += 1
            except Exception as e:
                logger.error("Handler for %s failed: %s", request.action.value, e)
        return ok

    @property
    def actions(self) -> list[str]:
        return list(self._handlers.keys())
