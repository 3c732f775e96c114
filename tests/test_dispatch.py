"""Tests for action dispatch."""

from mouse_gestures.dispatch import ActionDispatcher
from mouse_gestures.resolver import ActionName, ActionRequest


class TestActionDispatcher:
    def test_handler_decorator(self):
        dispatcher = ActionDispatcher()
        calls = []

        @dispatcher.handler(ActionName.BACK)
        def go_back(request):
            calls.append(request.action)

        assert dispatcher.dispatch(ActionRequest(ActionName.BACK)) == 1
        assert calls == [ActionName.BACK]

    def test_routes_by_action(self):
        dispatcher = ActionDispatcher()
        calls = []
        dispatcher.register("back", lambda r: calls.append("back"))
        dispatcher.register("reload", lambda r: calls.append("reload"))
        dispatcher.dispatch(ActionRequest(ActionName.RELOAD))
        assert calls == ["reload"]

    def test_wildcard(self):
        dispatcher = ActionDispatcher()
        seen = []
        dispatcher.register("*", seen.append)
        dispatcher.dispatch(ActionRequest(ActionName.TOP))
        dispatcher.dispatch(ActionRequest(ActionName.BOTTOM))
        assert [r.action for r in seen] == [ActionName.TOP, ActionName.BOTTOM]

    def test_no_handler(self):
        assert ActionDispatcher().dispatch(ActionRequest(ActionName.CLOSE_TAB)) == 0

    def test_failing_handler_isolated(self):
        dispatcher = ActionDispatcher()
        calls = []

        @dispatcher.handler("new_tab")
        def broken(request):
            raise RuntimeError("no browser")

        @dispatcher.handler("new_tab")
        def working(request):
            calls.append(request.url)

        request = ActionRequest(ActionName.NEW_TAB, {"url": "https://example.com/"})
        assert dispatcher.dispatch(request) == 1
        assert calls == ["https://example.com/"]

    def test_actions(self):
        dispatcher = ActionDispatcher()
        dispatcher.register(ActionName.BACK, lambda r: None)
        dispatcher.register("*", lambda r: None)
        assert dispatcher.actions == ["back", "*"]
