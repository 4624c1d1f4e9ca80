from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError
from .ports import ParamAccessor

ENV_LOOKIN = "ROUTEGUARD_LOOKIN"
ENV_RULE_TIMEOUT = "ROUTEGUARD_RULE_TIMEOUT"


@dataclass(frozen=True)
class GuardConfig:
    """Immutable settings bound once to a :class:`RouteGuard`.

    lookin:       name of the context bag parameters are read from
                  (e.g. ``"path_params"``); ``None`` selects the generic accessor.
    accessor:     custom ``(context, name) -> value`` callable; overrides ``lookin``.
    rule_timeout: per-rule time limit in seconds; ``None`` means unbounded.
    """

    lookin: Optional[str] = None
    accessor: Optional[ParamAccessor] = None
    rule_timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if self.lookin is not None and (not isinstance(self.lookin, str) or not self.lookin):
            raise ConfigurationError(f"lookin must be a non-empty string, got {self.lookin!r}")
        if self.accessor is not None and not callable(self.accessor):
            raise ConfigurationError(f"accessor must be callable, got {self.accessor!r}")
        if self.rule_timeout is not None:
            t = self.rule_timeout
            if isinstance(t, bool) or not isinstance(t, (int, float)) or not math.isfinite(t) or t <= 0:
                raise ConfigurationError(
                    f"rule_timeout must be a positive finite number of seconds, got {t!r}"
                )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GuardConfig":
        env = os.environ if environ is None else environ
        lookin = env.get(ENV_LOOKIN) or None
        raw_timeout = env.get(ENV_RULE_TIMEOUT)
        timeout: Optional[float] = None
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"{ENV_RULE_TIMEOUT} must be a number of seconds, got {raw_timeout!r}"
                ) from e
        return cls(lookin=lookin, rule_timeout=timeout)


DEFAULT_CONFIG = GuardConfig()
