from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from . import adapters, core, metrics
from .core import (
    DEFAULT_CONFIG,
    FORBIDDEN,
    HTTP_METHODS,
    AuthorizationMiddleware,
    ByDerivation,
    ByKey,
    ConfigurationError,
    Decision,
    GuardConfig,
    GuardedRegistrar,
    RaisingResponder,
    Rejection,
    RouteGuard,
    RouteGuardError,
    RuleEvaluationError,
    RuleTimeoutError,
    anyone,
    evaluate,
    evaluate_sync,
    grant,
    revoke,
    where,
    where_callback,
    wrap,
)
from .logging import DecisionLogger


def _detect_version() -> str:
    try:
        if version is None:
            return "0.1.0"
        return version("routeguard")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _detect_version()

__all__ = [
    "DEFAULT_CONFIG",
    "FORBIDDEN",
    "HTTP_METHODS",
    "AuthorizationMiddleware",
    "ByDerivation",
    "ByKey",
    "ConfigurationError",
    "Decision",
    "DecisionLogger",
    "GuardConfig",
    "GuardedRegistrar",
    "RaisingResponder",
    "Rejection",
    "RouteGuard",
    "RouteGuardError",
    "RuleEvaluationError",
    "RuleTimeoutError",
    "anyone",
    "evaluate",
    "evaluate_sync",
    "grant",
    "revoke",
    "where",
    "where_callback",
    "wrap",
    "adapters",
    "core",
    "metrics",
    "__version__",
]
