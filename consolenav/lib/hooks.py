"""Action/filter hooks fired by the navigation manager.

Actions run callbacks for side effects after (or before) a navigation change,
filters let callbacks transform a value such as the shipped baseline or the
sidebar feed. Callbacks may be sync or async and run in priority order.

Usage:
    from consolenav.lib.hooks import hooks, action, filter, AFTER_NAVIGATION_RESET

    @action(AFTER_NAVIGATION_RESET)
    async def announce_reset(sections, pages):
        ...

    @filter(NAVIGATION_BASELINE, priority=20)
    def drop_sales(baseline):
        ...
        return baseline

    await hooks.do_action(AFTER_NAVIGATION_RESET, sections, pages)
    baseline = await hooks.apply_filters(NAVIGATION_BASELINE, baseline)
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

T = TypeVar("T")


@dataclass(order=True)
class HookHandler:
    """A registered hook handler with priority."""

    priority: int
    callback: Callable = field(compare=False)

    async def call(self, *args: Any, **kwargs: Any) -> Any:
        result = self.callback(*args, **kwargs)
        if asyncio.iscoroutine(result):
            return await result
        return result


class HookRegistry:
    """Registry of action and filter handlers keyed by hook name."""

    def __init__(self) -> None:
        self._actions: dict[str, list[HookHandler]] = defaultdict(list)
        self._filters: dict[str, list[HookHandler]] = defaultdict(list)

    def add_action(self, hook_name: str, callback: Callable[..., Any], priority: int = 10) -> None:
        """Register an action callback. Lower priorities run first."""
        self._actions[hook_name].append(HookHandler(priority=priority, callback=callback))
        self._actions[hook_name].sort()

    def add_filter(self, hook_name: str, callback: Callable[..., T], priority: int = 10) -> None:
        """Register a filter callback. Lower priorities run first."""
        self._filters[hook_name].append(HookHandler(priority=priority, callback=callback))
        self._filters[hook_name].sort()

    def remove_action(self, hook_name: str, callback: Callable[..., Any]) -> bool:
        return self._remove(self._actions, hook_name, callback)

    def remove_filter(self, hook_name: str, callback: Callable[..., Any]) -> bool:
        return self._remove(self._filters, hook_name, callback)

    @staticmethod
    def _remove(table: dict[str, list[HookHandler]], hook_name: str, callback: Callable) -> bool:
        handlers = table.get(hook_name, [])
        for i, handler in enumerate(handlers):
            if handler.callback is callback:
                handlers.pop(i)
                return True
        return False

    def has_action(self, hook_name: str) -> bool:
        return bool(self._actions.get(hook_name))

    def has_filter(self, hook_name: str) -> bool:
        return bool(self._filters.get(hook_name))

    async def do_action(self, hook_name: str, *args: Any, **kwargs: Any) -> None:
        """Run every action registered under ``hook_name``."""
        from consolenav.lib.observability import hook_span

        with hook_span("action", hook_name):
            for handler in list(self._actions.get(hook_name, [])):
                await handler.call(*args, **kwargs)

    async def apply_filters(self, hook_name: str, value: T, *args: Any, **kwargs: Any) -> T:
        """Pass ``value`` through every filter registered under ``hook_name``."""
        from consolenav.lib.observability import hook_span

        with hook_span("filter", hook_name):
            for handler in list(self._filters.get(hook_name, [])):
                value = await handler.call(value, *args, **kwargs)
            return value

    def clear(self) -> None:
        """Clear all registered hooks. Useful for testing."""
        self._actions.clear()
        self._filters.clear()


# Global singleton registry
hooks = HookRegistry()


def action(hook_name: str, priority: int = 10) -> Callable[[Callable], Callable]:
    """Decorator registering a function as an action handler on the global registry."""

    def decorator(func: Callable) -> Callable:
        hooks.add_action(hook_name, func, priority)
        return func

    return decorator


def filter(hook_name: str, priority: int = 10) -> Callable[[Callable], Callable]:
    """Decorator registering a function as a filter handler on the global registry."""

    def decorator(func: Callable) -> Callable:
        hooks.add_filter(hook_name, func, priority)
        return func

    return decorator


# Actions
AFTER_SECTION_SAVE = "after_section_save"
AFTER_PAGE_ENTRY_SAVE = "after_page_entry_save"
BEFORE_SECTION_DELETE = "before_section_delete"
AFTER_SECTION_DELETE = "after_section_delete"
BEFORE_PAGE_ENTRY_DELETE = "before_page_entry_delete"
AFTER_PAGE_ENTRY_DELETE = "after_page_entry_delete"
AFTER_NAVIGATION_REORDER = "after_navigation_reorder"
AFTER_NAVIGATION_RESET = "after_navigation_reset"

# Filters
NAVIGATION_BASELINE = "navigation_baseline"
SIDEBAR_ITEMS = "sidebar_items"

# Observability
LOGFIRE_CONFIGURED = "logfire_configured"
