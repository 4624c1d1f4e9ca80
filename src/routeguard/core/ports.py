from __future__ import annotations

from typing import Any, Awaitable, Dict, Protocol, runtime_checkable


@runtime_checkable
class ParamAccessor(Protocol):
    """Extracts a named parameter from a request context."""

    def __call__(self, context: Any, name: str) -> Any: ...


@runtime_checkable
class MetricsSink(Protocol):
    """Counters and histograms for decisions. Implementations may be sync or async."""

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None | Awaitable[None]: ...

    def observe(
        self, name: str, value: float, labels: Dict[str, str] | None = None
    ) -> None | Awaitable[None]: ...


@runtime_checkable
class DecisionLogSink(Protocol):
    """Receives one payload per evaluation."""

    def log(self, payload: Dict[str, Any]) -> None | Awaitable[None]: ...


@runtime_checkable
class Responder(Protocol):
    """Host-side continuations for the two non-proceed outcomes.

    ``reject`` is called with the fixed ``FORBIDDEN`` status when the verdict is
    deny. ``fail`` is called with the exception a rule raised; it either returns
    a response or re-raises.
    """

    def reject(self, context: Any, status: int) -> Any: ...

    def fail(self, context: Any, exc: BaseException) -> Any: ...
