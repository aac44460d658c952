"""Tracing for navigation store transactions and hook dispatch.

Backed by Pydantic Logfire when the ``logfire`` extra is installed and
``logfire.enabled`` is set. Otherwise every helper here does nothing, so
callers never need to check.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from consolenav.config import Settings

_logfire = None


def is_available() -> bool:
    return _logfire is not None


def configure(settings: Settings) -> None:
    """Set up logfire from the ``logfire`` settings section."""
    global _logfire

    options = settings.logfire
    if not options.enabled:
        return

    try:
        import logfire
    except ImportError:
        return

    kwargs: dict[str, Any] = {
        "service_name": options.service_name,
        "send_to_logfire": "if-token-present",
    }
    if options.environment:
        kwargs["environment"] = options.environment
    if options.sample_rate != 1.0:
        kwargs["trace_sample_rate"] = options.sample_rate
    if options.console:
        kwargs["console"] = logfire.ConsoleOptions()

    logfire.configure(**kwargs)
    _logfire = logfire


def instrument_app(app):
    if not is_available():
        return app
    return _logfire.instrument_asgi(app)


def instrument_sqlalchemy(engine) -> None:
    if is_available():
        _logfire.instrument_sqlalchemy(engine=engine)


@contextmanager
def span(name: str, **attrs: Any) -> Iterator[Any]:
    """A logfire span, or None when tracing is off."""
    if not is_available():
        yield None
        return
    with _logfire.span(name, **attrs) as current:
        yield current


def store_span(operation: str, keys: Iterable[str] = ()):
    """Span around one store transaction, tagged with the records it touches.

    Example: ``store_span("reorder_sections", ["overview", "content"])`` opens
    ``navigation.store:reorder_sections`` with ``record_keys`` and
    ``record_count`` attributes.
    """
    keys = sorted(keys)
    return span(
        f"navigation.store:{operation}",
        operation=operation,
        record_keys=keys,
        record_count=len(keys),
    )


def hook_span(kind: str, hook_name: str):
    """Span around one action or filter dispatch."""
    return span(f"hook.{kind}:{hook_name}", hook_name=hook_name)


def exception(msg: str, **kwargs: Any) -> bool:
    """Record an exception with its traceback; False when tracing is off."""
    if not is_available():
        return False
    _logfire.exception(msg, **kwargs)
    return True
