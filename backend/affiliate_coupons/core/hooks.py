"""Synchronous extension points for coupon operations.

Actions are fire-and-forget notifications; filters let callbacks replace a
value before it is returned to the caller.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

# Fired with the new coupon ID after a coupon row is inserted.
COUPON_CREATED = "coupon_created"
# Filters (template_id, integration) -> template_id.
COUPON_TEMPLATE_ID = "coupon_template_id"
# Filters (url, integration) -> url.
COUPON_EDIT_URL = "coupon_edit_url"


class HookRegistry:
    """Registry of action and filter callbacks keyed by extension point name."""

    def __init__(self) -> None:
        self._actions: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self._filters: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    def add_action(self, name: str, callback: Callable[..., Any]) -> None:
        self._actions[name].append(callback)

    def add_filter(self, name: str, callback: Callable[..., Any]) -> None:
        self._filters[name].append(callback)

    def do_action(self, name: str, *args: Any) -> None:
        """Invoke every action callback for ``name`` in registration order.

        A failing callback is logged and skipped; it never aborts the
        operation that fired the action.
        """
        for callback in list(self._actions.get(name, [])):
            try:
                callback(*args)
            except Exception:
                logger.exception("Action callback %r failed for %s", callback, name)

    def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        """Pass ``value`` through every filter callback for ``name``."""
        for callback in list(self._filters.get(name, [])):
            value = callback(value, *args)
        return value

    def has_callbacks(self, name: str) -> bool:
        return bool(self._actions.get(name) or self._filters.get(name))

    def remove_all(self, name: str | None = None) -> None:
        """Remove callbacks for one extension point, or all of them."""
        if name is None:
            self._actions.clear()
            self._filters.clear()
            return
        self._actions.pop(name, None)
        self._filters.pop(name, None)


default_hooks = HookRegistry()
