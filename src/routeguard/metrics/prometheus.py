from __future__ import annotations

from typing import Any, Dict, Optional

from routeguard.core.ports import MetricsSink

try:
    from prometheus_client import Counter, Histogram  # type: ignore
except Exception:  # pragma: no cover
    Counter = Histogram = None  # type: ignore


class PrometheusMetrics(MetricsSink):
    """Prometheus-based MetricsSink.

    Exposes:
      - routeguard_decisions_total{decision="allow|deny|error"}
      - routeguard_decision_seconds{decision=...} (Histogram)

    Pass a dedicated ``registry`` in tests to avoid duplicate registration in
    the process-wide default registry.
    """

    _counter: Optional[Any]
    _hist: Optional[Any]

    def __init__(self, registry: Any = None) -> None:
        self._counter = None
        self._hist = None

        if Counter is None or Histogram is None:  # pragma: no cover
            return

        kwargs: Dict[str, Any] = {}
        if registry is not None:
            kwargs["registry"] = registry
        self._counter = Counter(
            "routeguard_decisions_total",
            "Total routeguard authorization decisions by outcome.",
            labelnames=("decision",),
            **kwargs,
        )
        self._hist = Histogram(
            "routeguard_decision_seconds",
            "Rule set evaluation duration in seconds.",
            labelnames=("decision",),
            **kwargs,
        )

    # -- MetricsSink ------------------------------------------------------------

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        """Increment ``routeguard_decisions_total``; *name* is informational."""
        if self._counter is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._counter.labels(decision=decision).inc()  # type: ignore[call-arg]
        except Exception:  # pragma: no cover
            pass

    def observe(self, name: str, value: float, labels: Dict[str, str] | None = None) -> None:
        if self._hist is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._hist.labels(decision=decision).observe(float(value))  # type: ignore[call-arg]
        except Exception:  # pragma: no cover
            pass
