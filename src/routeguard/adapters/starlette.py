from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Optional

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route, Router

from ..core.decision import FORBIDDEN
from ..core.enforcer import flatten_handlers
from ..core.errors import ConfigurationError
from ..core.evaluator import Rejection
from ..core.helpers import maybe_await

logger = logging.getLogger("routeguard.adapters.starlette")

Endpoint = Callable[[Request], Any]
# Chain handlers are called as ``handler(request, proceed)``.
Handler = Callable[[Request, Callable[[], Any]], Any]


def forbidden_response(detail: str = "Forbidden", status_code: int = FORBIDDEN) -> JSONResponse:
    return JSONResponse({"detail": detail}, status_code=status_code)


def _coerce_response(result: Any) -> Any:
    # Middleware built without a Starlette responder hands back a Rejection.
    if isinstance(result, Rejection):
        return forbidden_response(result.detail, result.status)
    return result


class StarletteResponder:
    """Responder answering denials with a JSON 403 and re-raising failures.

    Re-raising lets Starlette's ``ServerErrorMiddleware``/exception handlers
    deal with rule failures the same way as any other endpoint error.
    """

    def reject(self, context: Request, status: int) -> Response:
        return forbidden_response(status_code=status)

    def fail(self, context: Request, exc: BaseException) -> Any:
        raise exc


def protect(endpoint: Endpoint, *handlers: Handler) -> Callable[[Request], Any]:
    """Build a Starlette endpoint running *handlers* in order before *endpoint*.

    Each handler decides whether to call ``proceed()``; an
    :class:`AuthorizationMiddleware` only proceeds when the request is allowed.
    Sync endpoints run in the threadpool.
    """
    chain = tuple(flatten_handlers(handlers))
    is_async = inspect.iscoroutinefunction(endpoint)

    async def _call(request: Request, index: int) -> Any:
        if index == len(chain):
            if is_async:
                return await endpoint(request)
            return await run_in_threadpool(endpoint, request)
        handler = chain[index]
        result = await maybe_await(handler(request, lambda: _call(request, index + 1)))
        return _coerce_response(result)

    async def _endpoint(request: Request) -> Any:
        return await _call(request, 0)

    _endpoint.__name__ = getattr(endpoint, "__name__", "endpoint")
    return _endpoint


class StarletteRegistrar:
    """Verb-style route registration over a Starlette :class:`Router`.

    ``get(path, *handlers, endpoint)`` registers a route whose last positional
    argument is the endpoint and whose preceding arguments are chain handlers.
    Meant to be wrapped by :func:`routeguard.wrap`::

        registrar = StarletteRegistrar()
        app = guard.wrap(registrar)
        app.get("/docs/{doc_id}", guard.require(guard.anyone), read_doc)
        starlette_app = Starlette(routes=registrar.router.routes)
    """

    def __init__(self, router: Optional[Router] = None) -> None:
        self.router = router if router is not None else Router()
        self._prefix = ""

    @property
    def prefix(self) -> str:
        return self._prefix

    def route(self, method: str, path: str, *handlers: Any, name: Optional[str] = None) -> Route:
        flat = list(flatten_handlers(handlers))
        if not flat:
            raise ConfigurationError(f"route has no endpoint: {method} {path}")
        *chain, endpoint = flat
        methods = None if method == "all" else [method.upper()]
        route = Route(self._prefix + path, protect(endpoint, *chain), methods=methods, name=name)
        self.router.routes.append(route)
        logger.debug("routeguard: added starlette route %s %s", method.upper(), route.path)
        return route

    def get(self, path: str, *handlers: Any, **kwargs: Any) -> Route:
        return self.route("get", path, *handlers, **kwargs)

    def post(self, path: str, *handlers: Any, **kwargs: Any) -> Route:
        return self.route("post", path, *handlers, **kwargs)

    def put(self, path: str, *handlers: Any, **kwargs: Any) -> Route:
        return self.route("put", path, *handlers, **kwargs)

    def delete(self, path: str, *handlers: Any, **kwargs: Any) -> Route:
        return self.route("delete", path, *handlers, **kwargs)

    def patch(self, path: str, *handlers: Any, **kwargs: Any) -> Route:
        return self.route("patch", path, *handlers, **kwargs)

    def head(self, path: str, *handlers: Any, **kwargs: Any) -> Route:
        return self.route("head", path, *handlers, **kwargs)

    def options(self, path: str, *handlers: Any, **kwargs: Any) -> Route:
        return self.route("options", path, *handlers, **kwargs)

    def all(self, path: str, *handlers: Any, **kwargs: Any) -> Route:
        return self.route("all", path, *handlers, **kwargs)

    def namespace(self, prefix: str, fn: Callable[[], Any]) -> None:
        """Register routes added while ``fn()`` runs under *prefix*.

        ``fn`` registers through whatever object it closes over, so routes
        added through a guarded registrar stay guarded inside the group.
        """
        outer = self._prefix
        self._prefix = outer + prefix
        try:
            fn()
        finally:
            self._prefix = outer
