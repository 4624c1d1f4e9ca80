from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Union

from .config import GuardConfig
from .errors import ConfigurationError, RuleEvaluationError
from .ports import ParamAccessor

# Bags consulted, in order, when no ``lookin`` is configured.
GENERIC_BAGS = ("path_params", "query_params", "params")

_MISSING = object()


@dataclass(frozen=True)
class ByKey:
    """Resolve a named parameter through the configured accessor."""

    name: str


@dataclass(frozen=True)
class ByDerivation:
    """Resolve by calling ``fn(context)`` synchronously."""

    fn: Callable[[Any], Any]


ParamSpec = Union[ByKey, ByDerivation]


def to_param_spec(spec: Any) -> ParamSpec:
    """Normalise a user-facing specifier (``str`` or callable) into a ParamSpec."""
    if isinstance(spec, (ByKey, ByDerivation)):
        return spec
    if isinstance(spec, str):
        return ByKey(spec)
    if callable(spec):
        return ByDerivation(spec)
    raise ConfigurationError(f"Expected parameter name or function, got {spec!r}")


def _lookup(bag: Any, name: str) -> Any:
    if isinstance(bag, Mapping):
        return bag.get(name)
    return getattr(bag, name, None)


def generic_param(context: Any, name: str) -> Any:
    """Look *name* up in the usual request bags; first non-None hit wins.

    A plain mapping without any of the bags is treated as the bag itself.
    Request objects that are also mappings (Starlette's) are searched through
    their bags only.
    """
    has_bag = False
    for bag_name in GENERIC_BAGS:
        bag = getattr(context, bag_name, None)
        if bag is None:
            continue
        has_bag = True
        value = _lookup(bag, name)
        if value is not None:
            return value
    if not has_bag and isinstance(context, Mapping):
        return context.get(name)
    return None


def bag_param(lookin: str) -> ParamAccessor:
    """Accessor reading parameters from the single bag named *lookin*."""

    def _accessor(context: Any, name: str) -> Any:
        # Attributes first: request objects may also be mappings over raw data.
        bag: Any = _MISSING if isinstance(context, dict) else getattr(context, lookin, _MISSING)
        if bag is _MISSING and isinstance(context, Mapping):
            bag = context.get(lookin, _MISSING)
        if bag is _MISSING or bag is None:
            raise RuleEvaluationError(f"Request context has no {lookin!r} to read {name!r} from")
        return _lookup(bag, name)

    return _accessor


def accessor_for(config: GuardConfig) -> ParamAccessor:
    if config.accessor is not None:
        return config.accessor
    if config.lookin is not None:
        return bag_param(config.lookin)
    return generic_param


def resolve(spec: ParamSpec, context: Any, accessor: ParamAccessor) -> Any:
    match spec:
        case ByKey(name=name):
            return accessor(context, name)
        case ByDerivation(fn=fn):
            return fn(context)
    raise ConfigurationError(f"Unknown parameter specifier {spec!r}")  # pragma: no cover
