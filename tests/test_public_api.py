import importlib


def test_public_api_imports():
    names = [
        "RouteGuard",
        "GuardConfig",
        "AuthorizationMiddleware",
        "Decision",
        "FORBIDDEN",
        "grant",
        "revoke",
        "anyone",
        "where",
        "where_callback",
        "wrap",
        "evaluate",
        "evaluate_sync",
        "ConfigurationError",
        "RuleEvaluationError",
        "DecisionLogger",
        "core",
        "adapters",
        "metrics",
        "__version__",
    ]
    mod = importlib.import_module("routeguard")
    for n in names:
        assert hasattr(mod, n), f"Missing public import: routeguard.{n}"


def test_all_lists_only_existing_names():
    mod = importlib.import_module("routeguard")
    for n in mod.__all__:
        assert hasattr(mod, n), n
