"""
Diagnostic sinks.

A sink receives every error the accessor reports. Anything with an
``error(value)`` method qualifies, including a structlog BoundLogger, so
``cache.use_logger(get_logger("radcache"))`` works without an adapter.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DiagnosticSink(Protocol):
    """Destination for operational errors."""

    def error(self, value: Any) -> Any:
        ...


class NullSink:
    """Sink that drops everything. Default for accessors with no logger."""

    def error(self, value: Any) -> None:
        return None

    def __repr__(self) -> str:
        return "NullSink()"


NULL_SINK = NullSink()


__all__ = ["DiagnosticSink", "NullSink", "NULL_SINK"]
