from __future__ import annotations

from enum import Enum
from typing import Iterable

# Fixed rejection signal handed to Responder.reject.
FORBIDDEN = 403


class Decision(str, Enum):
    """Outcome of a single rule."""

    ALLOW = "allow"
    DENY = "deny"
    ABSTAIN = "abstain"


def apply_decision(authorized: bool, decision: Decision) -> bool:
    """Fold one decision into the running verdict (last decisive wins)."""
    if decision is Decision.ALLOW:
        return True
    if decision is Decision.DENY:
        return False
    return authorized


def fold_decisions(decisions: Iterable[Decision]) -> bool:
    authorized = False
    for d in decisions:
        authorized = apply_decision(authorized, d)
    return authorized
