from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from .config import DEFAULT_CONFIG, GuardConfig
from .decision import Decision
from .errors import ConfigurationError, RuleEvaluationError
from .helpers import maybe_await
from .params import accessor_for, resolve, to_param_spec

logger = logging.getLogger("routeguard.rules")

Rule = Callable[[Any], Awaitable[Decision]]
# Returns bool or an awaitable resolving to bool; only ``True`` counts as a hit.
Predicate = Callable[[Any], Any]


def describe(fn: Any) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)


def _require_callable(fn: Any, where_: str) -> None:
    if not callable(fn):
        raise ConfigurationError(f"Non function passed to {where_}: {fn!r}")


def grant(predicate: Predicate) -> Rule:
    """ALLOW when *predicate* resolves to ``True``, otherwise ABSTAIN."""
    _require_callable(predicate, "grant")

    async def _grant(context: Any) -> Decision:
        result = await maybe_await(predicate(context))
        return Decision.ALLOW if result is True else Decision.ABSTAIN

    _grant.__qualname__ = f"grant({describe(predicate)})"
    return _grant


def revoke(predicate: Predicate) -> Rule:
    """DENY when *predicate* resolves to ``True``, otherwise ABSTAIN."""
    _require_callable(predicate, "revoke")

    async def _revoke(context: Any) -> Decision:
        result = await maybe_await(predicate(context))
        return Decision.DENY if result is True else Decision.ABSTAIN

    _revoke.__qualname__ = f"revoke({describe(predicate)})"
    return _revoke


async def anyone(context: Any) -> Decision:
    """Constant ALLOW; a default-allow baseline that later rules may override."""
    return Decision.ALLOW


def where(fn: Callable[..., Any], *specs: Any, config: GuardConfig = DEFAULT_CONFIG) -> Predicate:
    """Adapt ``fn(*values)`` into a request predicate.

    Each spec is a parameter name (resolved through the configured accessor) or
    a function called with the request context. ``fn`` receives the resolved
    values in specifier order and may return a bool or an awaitable bool.

    >>> is_owner = where(lambda user, owner: user == owner, "user_id", lambda r: r.owner)
    >>> rule = grant(is_owner)
    """
    _require_callable(fn, "where")
    params = tuple(to_param_spec(s) for s in specs)
    accessor = accessor_for(config)

    async def _predicate(context: Any) -> Any:
        values = [resolve(p, context, accessor) for p in params]
        return await maybe_await(fn(*values))

    _predicate.__qualname__ = f"where({describe(fn)})"
    return _predicate


def where_callback(
    fn: Callable[..., Any], *specs: Any, config: GuardConfig = DEFAULT_CONFIG
) -> Predicate:
    """Like :func:`where`, for functions reporting through ``done(err, result)``.

    ``fn`` is called with the resolved values followed by the completion
    callback. The callback may be invoked from any thread. A non-None ``err``
    fails the predicate: exceptions are raised as they are, other values are
    wrapped in :class:`RuleEvaluationError`.
    """
    _require_callable(fn, "where_callback")
    params = tuple(to_param_spec(s) for s in specs)
    accessor = accessor_for(config)
    name = describe(fn)

    async def _predicate(context: Any) -> Any:
        values = [resolve(p, context, accessor) for p in params]
        loop = asyncio.get_running_loop()
        fut: asyncio.Future[Any] = loop.create_future()

        def _settle(err: Any, result: Any) -> None:
            if fut.cancelled():
                logger.warning(
                    "routeguard: completion callback of %s arrived after the rule was cancelled "
                    "(timed out); result ignored",
                    name,
                )
                return
            if fut.done():
                logger.warning("routeguard: completion callback of %s called more than once", name)
                return
            if err is None:
                fut.set_result(result)
            elif isinstance(err, BaseException):
                fut.set_exception(err)
            else:
                fut.set_exception(RuleEvaluationError(f"{name} failed: {err!r}"))

        def done(err: Any = None, result: Any = None) -> None:
            loop.call_soon_threadsafe(_settle, err, result)

        fn(*values, done)
        return await fut

    _predicate.__qualname__ = f"where_callback({name})"
    return _predicate
