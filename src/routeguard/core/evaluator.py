from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple

from .decision import FORBIDDEN, Decision, apply_decision
from .errors import ConfigurationError, RuleEvaluationError, RuleTimeoutError
from .helpers import maybe_await, run_sync
from .ports import DecisionLogSink, MetricsSink, Responder
from .rules import Rule, describe

logger = logging.getLogger("routeguard.evaluator")

DECISIONS_TOTAL = "routeguard_decisions_total"
DECISION_SECONDS = "routeguard_decision_seconds"


async def _bounded(rule: Rule, pending: Awaitable[Any], timeout: float) -> Any:
    # Only expiry of this wait becomes RuleTimeoutError; anything the rule
    # raises itself, TimeoutError included, comes out of task.result() as is.
    task = asyncio.ensure_future(pending)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except asyncio.CancelledError:
        task.cancel()
        raise
    if not done:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise RuleTimeoutError(f"Rule {describe(rule)} did not complete within {timeout}s")
    return task.result()


async def _run_rule(rule: Rule, context: Any, timeout: Optional[float]) -> Decision:
    pending = maybe_await(rule(context))
    if timeout is None:
        decision = await pending
    else:
        decision = await _bounded(rule, pending, timeout)
    if not isinstance(decision, Decision):
        raise RuleEvaluationError(
            f"Rule {describe(rule)} returned {decision!r}, expected a Decision"
        )
    return decision


async def evaluate(
    rules: Iterable[Rule], context: Any, *, timeout: Optional[float] = None
) -> bool:
    """Fold *rules* over *context* in declaration order.

    Rules are awaited one at a time; a later decisive rule overrides an earlier
    one, so every rule runs even after a DENY. The first exception aborts the
    evaluation and propagates unchanged. An empty rule set yields ``False``.
    """
    authorized = False
    for rule in rules:
        decision = await _run_rule(rule, context, timeout)
        logger.debug("routeguard: %s -> %s", describe(rule), decision.value)
        authorized = apply_decision(authorized, decision)
    return authorized


def evaluate_sync(
    rules: Iterable[Rule], context: Any, *, timeout: Optional[float] = None
) -> bool:
    """Blocking variant of :func:`evaluate` for synchronous hosts."""
    return run_sync(lambda: evaluate(rules, context, timeout=timeout))


@dataclass(frozen=True)
class Rejection:
    """What the default responder hands back to the host on deny."""

    status: int = FORBIDDEN
    detail: str = "Forbidden"


class RaisingResponder:
    """Default continuations: return a :class:`Rejection`, re-raise failures."""

    def reject(self, context: Any, status: int) -> Rejection:
        return Rejection(status=status)

    def fail(self, context: Any, exc: BaseException) -> Any:
        raise exc


class AuthorizationMiddleware:
    """A rule set compiled into a ``(context, proceed)`` handler.

    On allow the result of ``proceed()`` is returned; on deny the responder's
    ``reject`` is called with :data:`FORBIDDEN`; if a rule raises, the
    responder's ``fail`` receives the exception. Exactly one of the three
    happens per call. Instances are what :func:`wrap` looks for when a route is
    registered.
    """

    def __init__(
        self,
        rules: Iterable[Rule],
        *,
        responder: Optional[Responder] = None,
        metrics: Optional[MetricsSink] = None,
        logger_sink: Optional[DecisionLogSink] = None,
        timeout: Optional[float] = None,
    ) -> None:
        frozen: Tuple[Rule, ...] = tuple(rules)
        for rule in frozen:
            if not callable(rule):
                raise ConfigurationError(f"Rule must be callable, got {rule!r}")
        self._rules = frozen
        self.responder: Responder = responder if responder is not None else RaisingResponder()
        self.metrics = metrics
        self.logger_sink = logger_sink
        self.timeout = timeout

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    def __repr__(self) -> str:
        names = ", ".join(describe(r) for r in self._rules)
        return f"AuthorizationMiddleware([{names}])"

    async def authorize(self, context: Any) -> bool:
        return await evaluate(self._rules, context, timeout=self.timeout)

    def authorize_sync(self, context: Any) -> bool:
        return evaluate_sync(self._rules, context, timeout=self.timeout)

    async def __call__(self, context: Any, proceed: Callable[[], Any]) -> Any:
        start = time.perf_counter()
        failure: Optional[Exception] = None
        allowed = False
        try:
            allowed = await self.authorize(context)
        except Exception as exc:
            failure = exc

        if failure is not None:
            logger.error("routeguard: rule evaluation failed: %r", failure, exc_info=failure)
            await self._record("error", start, error=failure)
            return await maybe_await(self.responder.fail(context, failure))

        if not allowed:
            logger.info("routeguard: access denied by %r", self)
            await self._record("deny", start)
            return await maybe_await(self.responder.reject(context, FORBIDDEN))

        await self._record("allow", start)
        return await maybe_await(proceed())

    # -- observability ---------------------------------------------------------

    async def _record(
        self, outcome: str, start: float, *, error: Optional[BaseException] = None
    ) -> None:
        elapsed = time.perf_counter() - start
        labels: Dict[str, str] = {"decision": outcome}
        if self.metrics is not None:
            try:
                await maybe_await(self.metrics.inc(DECISIONS_TOTAL, labels))
                await maybe_await(self.metrics.observe(DECISION_SECONDS, elapsed, labels))
            except Exception:
                # never fail a request from the metrics path
                logger.debug("routeguard: metrics sink failed", exc_info=True)
        if self.logger_sink is not None:
            payload: Dict[str, Any] = {
                "decision": outcome,
                "allowed": outcome == "allow",
                "rules": [describe(r) for r in self._rules],
                "duration_seconds": elapsed,
            }
            if error is not None:
                payload["error"] = repr(error)
            try:
                await maybe_await(self.logger_sink.log(payload))
            except Exception:
                logger.debug("routeguard: decision log sink failed", exc_info=True)
