from __future__ import annotations

import logging
import logging.config
import os

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse

from routeguard import DecisionLogger, GuardConfig, RouteGuard
from routeguard.adapters.starlette import StarletteRegistrar, StarletteResponder

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {"default": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"}},
    "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "default"}},
    "root": {"level": "INFO", "handlers": ["console"]},
}
if os.getenv("ROUTEGUARD_LOG_JSON") == "1":
    LOGGING["formatters"]["default"] = {
        "class": "pythonjsonlogger.jsonlogger.JsonFormatter",
        "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
    }
logging.config.dictConfig(LOGGING)

OWNERS = {"1": "alice", "2": "bob"}


def current_user(request: Request) -> str:
    return request.headers.get("x-user", "anonymous")


guard = RouteGuard(
    GuardConfig.from_env(),
    responder=StarletteResponder(),
    logger_sink=DecisionLogger(as_json=True),
)

is_owner = guard.where(lambda doc_id, user: OWNERS.get(doc_id) == user, "doc_id", current_user)
is_anonymous = guard.where(lambda user: user == "anonymous", current_user)

registrar = StarletteRegistrar()
routes = guard.wrap(registrar)


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"ok": True})


async def get_doc(request: Request) -> JSONResponse:
    return JSONResponse({"id": request.path_params["doc_id"], "owner": OWNERS.get(request.path_params["doc_id"])})


def api() -> None:
    routes.get("/health", guard.require(guard.anyone), health)
    # Owners read their own documents; anonymous callers are always refused.
    routes.get(
        "/docs/{doc_id}",
        guard.require(guard.grant(is_owner), guard.revoke(is_anonymous)),
        get_doc,
    )


routes.namespace("/api", api)

app = Starlette(routes=registrar.router.routes)

# Run: uvicorn examples.starlette_demo.app:app --reload
