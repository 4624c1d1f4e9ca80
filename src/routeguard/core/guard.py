from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from .config import GuardConfig
from .enforcer import HTTP_METHODS, GuardedRegistrar, wrap
from .evaluator import AuthorizationMiddleware
from .ports import DecisionLogSink, MetricsSink, Responder
from .rules import Predicate, Rule, anyone, grant, revoke, where, where_callback


class RouteGuard:
    """Configured entry point tying rules, middleware and registrar wrapping together.

    The configuration is fixed at construction and threaded into every
    ``where`` predicate and every middleware built here.

        guard = RouteGuard(GuardConfig(lookin="path_params"))
        is_owner = guard.where(lambda uid, owner: uid == owner, "user_id", current_owner)
        app = guard.wrap(registrar)
        app.get("/docs/{user_id}", guard.require(guard.grant(is_owner)), handler)
    """

    def __init__(
        self,
        config: Optional[GuardConfig] = None,
        *,
        responder: Optional[Responder] = None,
        metrics: Optional[MetricsSink] = None,
        logger_sink: Optional[DecisionLogSink] = None,
    ) -> None:
        self.config = config if config is not None else GuardConfig()
        self.responder = responder
        self.metrics = metrics
        self.logger_sink = logger_sink

    def require(self, *rules: Rule) -> AuthorizationMiddleware:
        return AuthorizationMiddleware(
            rules,
            responder=self.responder,
            metrics=self.metrics,
            logger_sink=self.logger_sink,
            timeout=self.config.rule_timeout,
        )

    __call__ = require

    grant = staticmethod(grant)
    revoke = staticmethod(revoke)
    anyone = staticmethod(anyone)

    def where(self, fn: Callable[..., Any], *specs: Any) -> Predicate:
        return where(fn, *specs, config=self.config)

    def where_callback(self, fn: Callable[..., Any], *specs: Any) -> Predicate:
        return where_callback(fn, *specs, config=self.config)

    def wrap(
        self,
        registrar: Any,
        *,
        verbs: Sequence[str] = HTTP_METHODS,
        group_method: Optional[str] = "namespace",
    ) -> GuardedRegistrar:
        return wrap(registrar, verbs=verbs, group_method=group_method)
