from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator, Sequence

from .errors import ConfigurationError
from .evaluator import AuthorizationMiddleware

logger = logging.getLogger("routeguard.enforcer")

# Route-registration verbs a host registrar may expose.
HTTP_METHODS: tuple[str, ...] = (
    "get",
    "post",
    "put",
    "delete",
    "patch",
    "head",
    "options",
    "trace",
    "connect",
    "all",
)


def flatten_handlers(handlers: Iterable[Any]) -> Iterator[Any]:
    for h in handlers:
        if isinstance(h, (list, tuple)):
            yield from flatten_handlers(h)
        else:
            yield h


def has_authorization(handlers: Iterable[Any]) -> bool:
    return any(isinstance(h, AuthorizationMiddleware) for h in flatten_handlers(handlers))


class GuardedRegistrar:
    """Shadow of a host registrar that refuses unprotected routes.

    Only verbs the wrapped registrar actually implements are exposed. The
    grouping method, when present, is the host's own bound method.
    """

    def __init__(
        self,
        registrar: Any,
        *,
        verbs: Sequence[str] = HTTP_METHODS,
        group_method: str | None = "namespace",
    ) -> None:
        self._registrar = registrar
        self._verbs: tuple[str, ...] = tuple(v for v in verbs if callable(getattr(registrar, v, None)))
        for verb in self._verbs:
            setattr(self, verb, self._guarded(verb, getattr(registrar, verb)))
        if group_method and callable(getattr(registrar, group_method, None)):
            setattr(self, group_method, getattr(registrar, group_method))

    @property
    def verbs(self) -> tuple[str, ...]:
        return self._verbs

    def _guarded(self, verb: str, original: Callable[..., Any]) -> Callable[..., Any]:
        def _register(path: Any, *handlers: Any, **kwargs: Any) -> Any:
            if not has_authorization(handlers):
                raise ConfigurationError(
                    f"route does not have an authorization middleware: {verb} {path}"
                )
            logger.debug("routeguard: registering protected route %s %s", verb, path)
            return original(path, *handlers, **kwargs)

        _register.__name__ = verb
        _register.__qualname__ = f"GuardedRegistrar.{verb}"
        return _register


def wrap(
    registrar: Any,
    *,
    verbs: Sequence[str] = HTTP_METHODS,
    group_method: str | None = "namespace",
) -> GuardedRegistrar:
    """Return a registrar whose verb methods require an :class:`AuthorizationMiddleware`."""
    return GuardedRegistrar(registrar, verbs=verbs, group_method=group_method)
