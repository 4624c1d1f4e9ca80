from .config import DEFAULT_CONFIG, GuardConfig
from .decision import FORBIDDEN, Decision, fold_decisions
from .enforcer import HTTP_METHODS, GuardedRegistrar, has_authorization, wrap
from .errors import ConfigurationError, RouteGuardError, RuleEvaluationError, RuleTimeoutError
from .evaluator import (
    AuthorizationMiddleware,
    RaisingResponder,
    Rejection,
    evaluate,
    evaluate_sync,
)
from .guard import RouteGuard
from .params import ByDerivation, ByKey
from .rules import Predicate, Rule, anyone, grant, revoke, where, where_callback

__all__ = [
    "DEFAULT_CONFIG",
    "GuardConfig",
    "FORBIDDEN",
    "Decision",
    "fold_decisions",
    "HTTP_METHODS",
    "GuardedRegistrar",
    "has_authorization",
    "wrap",
    "ConfigurationError",
    "RouteGuardError",
    "RuleEvaluationError",
    "RuleTimeoutError",
    "AuthorizationMiddleware",
    "RaisingResponder",
    "Rejection",
    "evaluate",
    "evaluate_sync",
    "RouteGuard",
    "ByDerivation",
    "ByKey",
    "Predicate",
    "Rule",
    "anyone",
    "grant",
    "revoke",
    "where",
    "where_callback",
]
