# app/core/policy.py
"""
Role x resource x action access table.

Lookups that are not in the table are denied. ALLOW_OWN_ONLY means the caller
may act only on records it owns (or, for students, records addressed to it);
services use the decision both to gate a mutation and to scope list queries.
"""
from enum import Enum
from typing import Optional

from app.core.errors import AuthorizationError
from app.schemas.context import UserContext


class Decision(str, Enum):
    ALLOW_FULL = "allow_full"
    ALLOW_OWN_ONLY = "allow_own_only"
    DENY = "deny"


FULL = Decision.ALLOW_FULL
OWN = Decision.ALLOW_OWN_ONLY
DENY = Decision.DENY

RESOURCES = ("schedule", "assignment", "attendance", "note")
ACTIONS = (
    "list", "read", "create", "update", "delete",
    "submit", "grade", "download", "mark", "stats", "interact",
)

_NOTE_RULES = {
    "list": FULL, "read": FULL, "download": FULL, "interact": FULL,
    "create": OWN, "update": OWN, "delete": OWN,
}

POLICY: dict[tuple[str, str, str], Decision] = {}


def _register(role: str, resource: str, rules: dict[str, Decision]) -> None:
    for action, decision in rules.items():
        POLICY[(role, resource, action)] = decision


# admins may do everything except hand in work of their own
for _resource in RESOURCES:
    _register("admin", _resource, {action: FULL for action in ACTIONS})
POLICY[("admin", "assignment", "submit")] = DENY

_register("teacher", "schedule", {
    "list": OWN, "read": OWN, "stats": OWN,
    "create": OWN, "update": OWN, "delete": OWN,
})
_register("teacher", "assignment", {
    "list": OWN, "read": OWN, "stats": OWN, "create": OWN,
    "update": OWN, "delete": OWN, "grade": OWN, "download": OWN,
})
_register("teacher", "attendance", {"mark": OWN, "read": FULL, "stats": OWN})
_register("teacher", "note", _NOTE_RULES)

_register("student", "schedule", {"list": FULL, "read": FULL, "stats": FULL})
_register("student", "assignment", {
    "list": OWN, "read": OWN, "stats": OWN, "submit": OWN, "download": OWN,
})
_register("student", "attendance", {"read": OWN, "stats": OWN})
_register("student", "note", _NOTE_RULES)


def evaluate(role: str, resource: str, action: str) -> Decision:
    return POLICY.get((role, resource, action), DENY)


def authorize(
    user: UserContext,
    resource: str,
    action: str,
    owner_id: Optional[str] = None,
    message: Optional[str] = None,
) -> Decision:
    """Raise AuthorizationError unless `user` may perform `action`.

    When `owner_id` is given and the decision is ALLOW_OWN_ONLY, the caller
    must be that owner.
    """
    decision = evaluate(user.role, resource, action)
    if decision is DENY:
        raise AuthorizationError(message)
    if decision is OWN and owner_id is not None and str(owner_id) != user.user_id:
        raise AuthorizationError(message)
    return decision
