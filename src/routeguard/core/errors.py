from __future__ import annotations


class RouteGuardError(Exception):
    """Base class for every error raised by routeguard."""


class ConfigurationError(RouteGuardError):
    """Raised at construction or registration time.

    Typical causes:
      - a route registered without any :class:`AuthorizationMiddleware`
      - a non-callable predicate passed to ``where``/``grant``/``revoke``
      - a parameter specifier that is neither a key nor a function
      - an unparsable environment setting

    It is meant to stop application startup, not a single request.
    """


class RuleEvaluationError(RouteGuardError):
    """A rule failed while a request was being evaluated.

    Exceptions raised by user predicates are propagated as they are; this class
    only covers failures that do not already carry an exception (an error value
    passed to a completion callback, a rule returning something that is not a
    :class:`Decision`, a missing parameter bag).
    """


class RuleTimeoutError(RuleEvaluationError):
    """A rule did not complete within the configured ``rule_timeout``."""
