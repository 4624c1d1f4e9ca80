from __future__ import annotations

import json
import logging
import random
from typing import Any, Dict

from ..core.ports import DecisionLogSink


class DecisionLogger(DecisionLogSink):
    """Audit sink writing one record per evaluation to the ``routeguard.audit`` logger.

    Denials and failures are always logged; ``sample_rate`` only thins out
    allow records.
    """

    def __init__(
        self,
        *,
        sample_rate: float = 1.0,
        level: int = logging.INFO,
        as_json: bool = False,
        logger_name: str = "routeguard.audit",
    ) -> None:
        self.sample_rate = min(max(float(sample_rate), 0.0), 1.0)
        self.level = level
        self.as_json = as_json
        self.logger = logging.getLogger(logger_name)

    def _sampled_out(self, payload: Dict[str, Any]) -> bool:
        if payload.get("decision") != "allow":
            return False
        return self.sample_rate < 1.0 and random.random() >= self.sample_rate

    def log(self, payload: Dict[str, Any]) -> None:
        if self._sampled_out(payload):
            return
        if self.as_json:
            msg = json.dumps(payload, default=str, sort_keys=True)
        else:
            msg = (
                f"decision={payload.get('decision')} rules={len(payload.get('rules') or [])} "
                f"duration={payload.get('duration_seconds', 0.0):.6f}s"
            )
            if "error" in payload:
                msg += f" error={payload['error']}"
        self.logger.log(self.level, msg)
