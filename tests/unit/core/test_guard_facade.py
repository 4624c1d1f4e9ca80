import asyncio
from types import SimpleNamespace

import pytest

from routeguard.core.config import GuardConfig
from routeguard.core.decision import Decision
from routeguard.core.errors import ConfigurationError, RuleTimeoutError
from routeguard.core.evaluator import AuthorizationMiddleware
from routeguard.core.guard import RouteGuard


class Registrar:
    def __init__(self):
        self.routes = []

    def get(self, path, *handlers):
        self.routes.append(path)


@pytest.mark.asyncio
async def test_where_uses_bound_config():
    guard = RouteGuard(GuardConfig(lookin="session"))
    is_admin = guard.where(lambda role: role == "admin", "role")
    mw = guard.require(guard.grant(is_admin))

    admin = SimpleNamespace(session={"role": "admin"})
    guest = SimpleNamespace(session={"role": "guest"})
    assert await mw.authorize(admin) is True
    assert await mw.authorize(guest) is False


@pytest.mark.asyncio
async def test_calling_the_guard_builds_middleware():
    guard = RouteGuard()
    mw = guard(guard.anyone, guard.revoke(lambda ctx: ctx["banned"]))
    assert isinstance(mw, AuthorizationMiddleware)
    assert await mw.authorize({"banned": False}) is True
    assert await mw.authorize({"banned": True}) is False
    assert await guard.anyone(None) is Decision.ALLOW


@pytest.mark.asyncio
async def test_where_callback_through_guard():
    guard = RouteGuard()

    def lookup(user, done):
        done(None, user == "alice")

    mw = guard.require(guard.grant(guard.where_callback(lookup, "user")))
    assert await mw.authorize({"user": "alice"}) is True


@pytest.mark.asyncio
async def test_rule_timeout_from_config_reaches_middleware():
    guard = RouteGuard(GuardConfig(rule_timeout=0.01))

    async def slow(_ctx):
        await asyncio.sleep(5)
        return Decision.ALLOW

    with pytest.raises(RuleTimeoutError):
        await guard.require(slow).authorize({})


def test_wrap_through_guard():
    guard = RouteGuard()
    reg = Registrar()
    app = guard.wrap(reg)
    app.get("/ok", guard.require(guard.anyone))
    with pytest.raises(ConfigurationError):
        app.get("/nope", lambda ctx, proceed: proceed())
    assert reg.routes == ["/ok"]
