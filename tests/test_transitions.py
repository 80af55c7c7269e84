from __future__ import annotations

import pytest

from admin_console.lifecycle.actions import describe
from admin_console.lifecycle.transitions import STATUS_ACTIONS, is_legal, legal_actions, ordered_actions
from admin_console.schemas.kyc import KYC_STATUSES
from admin_console.schemas.properties import LISTING_TYPES, PROPERTY_STATUSES
from admin_console.schemas.subscriptions import BILLING_CYCLES, SUBSCRIPTION_STATUSES
from admin_console.schemas.users import USER_STATUSES

STATUSES_BY_COLLECTION = {
    "properties": (PROPERTY_STATUSES, LISTING_TYPES),
    "subscriptions": (SUBSCRIPTION_STATUSES, BILLING_CYCLES),
    "users": (USER_STATUSES, ("admin", "landlord", "tenant")),
    "kyc": (KYC_STATUSES, ("national_id", "passport")),
}


@pytest.mark.parametrize("collection", sorted(STATUSES_BY_COLLECTION))
def test_every_known_status_has_a_defined_action_set(collection: str) -> None:
    statuses, subtypes = STATUSES_BY_COLLECTION[collection]
    for status in statuses:
        for subtype in (*subtypes, None, "unexpected"):
            actions = legal_actions(collection, status, subtype)
            assert isinstance(actions, frozenset)
            for action in actions:
                # every proposed action must be describable
                assert describe(collection, action).name == action


def test_table_covers_exactly_the_schema_statuses() -> None:
    assert set(STATUS_ACTIONS["properties"]) == set(PROPERTY_STATUSES)
    assert set(STATUS_ACTIONS["subscriptions"]) == set(SUBSCRIPTION_STATUSES)
    assert set(STATUS_ACTIONS["users"]) == set(USER_STATUSES)
    assert set(STATUS_ACTIONS["kyc"]) == set(KYC_STATUSES)


@pytest.mark.parametrize("status", ["unknown_status", "", None, 42, "PENDING"])
def test_unknown_status_fails_closed(status) -> None:
    for collection in STATUSES_BY_COLLECTION:
        assert legal_actions(collection, status, "sale") == frozenset()


def test_unknown_collection_has_no_actions() -> None:
    assert legal_actions("bookings", "pending") == frozenset()


def test_property_policy() -> None:
    assert legal_actions("properties", "pending", "sale") == {"approve", "reject"}
    assert legal_actions("properties", "inactive", "rent") == {"activate", "markPending"}
    assert legal_actions("properties", "rejected", "rent") == {"markPending", "activate"}
    assert legal_actions("properties", "archived", "sale") == {"activate"}
    assert legal_actions("properties", "sold", "sale") == {"activate"}
    assert legal_actions("properties", "rented", "shortlet") == {"activate"}


def test_active_property_actions_depend_on_listing_type() -> None:
    assert legal_actions("properties", "active", "sale") == {"deactivate", "archive", "markSold"}
    assert legal_actions("properties", "active", "rent") == {"deactivate", "archive", "markRented"}
    assert legal_actions("properties", "active", "shortlet") == {"deactivate", "archive", "markRented"}
    assert legal_actions("properties", "active", None) == {"deactivate", "archive"}


def test_ordered_actions_keep_display_order() -> None:
    assert ordered_actions("properties", "rejected") == ("markPending", "activate")
    assert ordered_actions("users", "pending") == ("approve", "activate")


def test_other_collections() -> None:
    assert legal_actions("users", "active") == {"suspend", "ban"}
    assert legal_actions("users", "banned") == {"reinstate"}
    assert legal_actions("subscriptions", "active", "monthly") == {"cancel", "renew"}
    assert legal_actions("subscriptions", "expired") == {"renew"}
    assert legal_actions("kyc", "pending") == {"approve", "reject"}
    assert legal_actions("kyc", "expired") == {"markPending"}


def test_feature_toggle_is_not_a_status_transition() -> None:
    for statuses in STATUS_ACTIONS["properties"].values():
        assert "setFeatured" not in statuses


def test_is_legal() -> None:
    assert is_legal("properties", "pending", "approve")
    assert not is_legal("properties", "pending", "markSold", "sale")
    assert not is_legal("properties", "active", "markSold", "rent")
