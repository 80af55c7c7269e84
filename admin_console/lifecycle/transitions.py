from __future__ import annotations

from typing import Any

# actions offered per status, in display order; unknown statuses offer none
STATUS_ACTIONS: dict[str, dict[str, tuple[str, ...]]] = {
    "properties": {
        "pending": ("approve", "reject"),
        "active": ("deactivate", "archive", "markSold", "markRented"),
        "inactive": ("activate", "markPending"),
        "rejected": ("markPending", "activate"),
        "archived": ("activate",),
        "sold": ("activate",),
        "rented": ("activate",),
    },
    "users": {
        "pending": ("approve", "activate"),
        "active": ("suspend", "ban"),
        "inactive": ("activate", "suspend"),
        "suspended": ("reinstate",),
        "banned": ("reinstate",),
        "deleted": ("reinstate",),
    },
    "subscriptions": {
        "active": ("cancel", "renew"),
        "pending": ("activate", "cancel"),
        "inactive": ("activate", "cancel"),
        "cancelled": ("renew",),
        "expired": ("renew",),
    },
    "kyc": {
        "pending": ("approve", "reject"),
        "approved": ("reject", "expire"),
        "rejected": ("approve", "markPending"),
        "expired": ("markPending",),
    },
}

# action -> subtypes that allow it; actions not listed here ignore the subtype
SUBTYPE_REQUIREMENTS: dict[str, dict[str, frozenset[str]]] = {
    "properties": {
        "markSold": frozenset({"sale"}),
        "markRented": frozenset({"rent", "shortlet"}),
    },
}


def ordered_actions(collection: str, status: Any, subtype: Any = None) -> tuple[str, ...]:
    if not isinstance(status, str):
        return ()
    candidates = STATUS_ACTIONS.get(collection, {}).get(status, ())
    requirements = SUBTYPE_REQUIREMENTS.get(collection, {})
    allowed: list[str] = []
    for action in candidates:
        required_subtypes = requirements.get(action)
        if required_subtypes is not None and subtype not in required_subtypes:
            continue
        allowed.append(action)
    return tuple(allowed)


def legal_actions(collection: str, status: Any, subtype: Any = None) -> frozenset[str]:
    return frozenset(ordered_actions(collection, status, subtype))


def is_legal(collection: str, status: Any, action: str, subtype: Any = None) -> bool:
    return action in legal_actions(collection, status, subtype)
