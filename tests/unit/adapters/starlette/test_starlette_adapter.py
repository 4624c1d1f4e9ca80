import pytest

starlette = pytest.importorskip("starlette")
pytest.importorskip("httpx")

from starlette.applications import Starlette  # noqa: E402
from starlette.responses import JSONResponse, PlainTextResponse  # noqa: E402
from starlette.routing import Route  # noqa: E402
from starlette.testclient import TestClient  # noqa: E402

from routeguard.adapters.starlette import (  # noqa: E402
    StarletteRegistrar,
    StarletteResponder,
    protect,
)
from routeguard.core.config import GuardConfig  # noqa: E402
from routeguard.core.errors import ConfigurationError  # noqa: E402
from routeguard.core.guard import RouteGuard  # noqa: E402


class LookupFailed(Exception):
    pass


def _guard():
    return RouteGuard(GuardConfig(), responder=StarletteResponder())


def _app(registrar):
    return Starlette(routes=registrar.router.routes)


def test_allow_deny_and_override_through_http():
    guard = _guard()
    registrar = StarletteRegistrar()
    app = guard.wrap(registrar)

    is_owner = guard.where(lambda user, owner: user == owner, "user", lambda req: req.headers.get("x-user"))
    is_banned = guard.where(lambda user: user == "mallory", "user")

    async def read_doc(request):
        return JSONResponse({"doc": request.path_params["user"]})

    def public(request):
        return PlainTextResponse("public")

    app.get("/docs/{user}", guard.require(guard.grant(is_owner), guard.revoke(is_banned)), read_doc)
    app.get("/public", guard.require(guard.anyone), public)

    client = TestClient(_app(registrar))

    ok = client.get("/docs/alice", headers={"x-user": "alice"})
    assert ok.status_code == 200 and ok.json() == {"doc": "alice"}

    other = client.get("/docs/alice", headers={"x-user": "bob"})
    assert other.status_code == 403 and other.json() == {"detail": "Forbidden"}

    banned = client.get("/docs/mallory", headers={"x-user": "mallory"})
    assert banned.status_code == 403

    assert client.get("/public").text == "public"


def test_rule_failure_goes_to_starlette_error_path():
    guard = _guard()
    registrar = StarletteRegistrar()

    def lookup(_ctx):
        raise LookupFailed("directory down")

    async def endpoint(request):
        return PlainTextResponse("never")

    guard.wrap(registrar).get("/x", guard.require(guard.grant(lookup)), endpoint)

    async def on_lookup_failed(request, exc):
        return PlainTextResponse("lookup failed", status_code=503)

    app = Starlette(routes=registrar.router.routes, exception_handlers={LookupFailed: on_lookup_failed})
    r = TestClient(app).get("/x")
    assert r.status_code == 503 and r.text == "lookup failed"


def test_unprotected_registration_fails_before_any_request():
    guard = _guard()
    registrar = StarletteRegistrar()
    with pytest.raises(ConfigurationError):
        guard.wrap(registrar).post("/open", lambda request: PlainTextResponse("x"))
    assert registrar.router.routes == []


def test_namespace_prefixes_and_stays_guarded():
    guard = _guard()
    registrar = StarletteRegistrar()
    app = guard.wrap(registrar)

    async def ping(request):
        return PlainTextResponse("pong")

    def api():
        app.get("/ping", guard.require(guard.anyone), ping)
        with pytest.raises(ConfigurationError):
            app.get("/open", ping)

    app.namespace("/api", api)
    assert [r.path for r in registrar.router.routes] == ["/api/ping"]
    assert registrar.prefix == ""
    assert TestClient(_app(registrar)).get("/api/ping").text == "pong"


def test_default_responder_rejection_is_coerced_to_403():
    guard = RouteGuard()
    registrar = StarletteRegistrar()

    async def endpoint(request):
        return PlainTextResponse("never")

    guard.wrap(registrar).get("/deny", guard.require(), endpoint)
    r = TestClient(_app(registrar)).get("/deny")
    assert r.status_code == 403 and r.json() == {"detail": "Forbidden"}


def test_protect_runs_chain_in_order():
    seen = []

    async def tag(request, proceed):
        seen.append("tag")
        return await proceed()

    def endpoint(request):
        seen.append("endpoint")
        return PlainTextResponse("done")

    guard = RouteGuard(responder=StarletteResponder())
    app = Starlette()
    app.router.routes.append(
        Route("/p", protect(endpoint, tag, guard.require(guard.anyone)))
    )
    assert TestClient(app).get("/p").text == "done"
    assert seen == ["tag", "endpoint"]


def test_route_without_endpoint_is_rejected():
    with pytest.raises(ConfigurationError):
        StarletteRegistrar().get("/nothing")


def test_lookin_reads_request_attribute_bags():
    guard = RouteGuard(GuardConfig(lookin="query_params"), responder=StarletteResponder())
    registrar = StarletteRegistrar()
    has_token = guard.where(lambda token: token == "s3cret", "token")

    async def endpoint(request):
        return PlainTextResponse("in")

    guard.wrap(registrar).get("/q", guard.require(guard.grant(has_token)), endpoint)
    client = TestClient(_app(registrar))
    assert client.get("/q", params={"token": "s3cret"}).status_code == 200
    assert client.get("/q", params={"token": "nope"}).status_code == 403
    assert client.get("/q").status_code == 403


def _load_demo(monkeypatch):
    import importlib.util
    import pathlib

    monkeypatch.delenv("ROUTEGUARD_LOOKIN", raising=False)
    monkeypatch.delenv("ROUTEGUARD_RULE_TIMEOUT", raising=False)
    path = pathlib.Path(__file__).parents[4] / "examples" / "starlette_demo" / "app.py"
    spec = importlib.util.spec_from_file_location("routeguard_starlette_demo", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_demo_app_only_lets_owners_read_their_documents(monkeypatch):
    demo = _load_demo(monkeypatch)
    client = TestClient(demo.app)

    owner = client.get("/api/docs/1", headers={"x-user": "alice"})
    assert owner.status_code == 200 and owner.json() == {"id": "1", "owner": "alice"}

    assert client.get("/api/docs/1", headers={"x-user": "bob"}).status_code == 403
    assert client.get("/api/docs/1").status_code == 403
    assert client.get("/api/health").json() == {"ok": True}
