from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

PayloadStyle = Literal["status", "user_action", "kyc_status", "subscription_status", "cancel", "renew"]

FEATURE_ACTION = "setFeatured"


class ActionInputError(ValueError):
    """Raised when operator input for an action fails validation."""


class UnknownActionError(LookupError):
    """Raised when an action is not registered for a collection."""


@dataclass(slots=True, frozen=True)
class ActionInput:
    reason: str | None = None
    notes: str | None = None
    billing_cycle: str | None = None

    @classmethod
    def coerce(cls, value: ActionInput | dict[str, Any] | None) -> ActionInput:
        if value is None:
            return cls()
        if isinstance(value, ActionInput):
            return value
        return cls(
            reason=value.get("reason"),
            notes=value.get("notes"),
            billing_cycle=value.get("billing_cycle") or value.get("billingCycle"),
        )


@dataclass(slots=True, frozen=True)
class ActionSpec:
    """What one console action does: the status it proposes, the operator
    input it needs and the request the admin service expects for it.
    """

    collection: str
    name: str
    label: str
    target_status: str
    method: str
    path_suffix: str
    payload_style: PayloadStyle
    requires_input: bool = False
    min_reason_length: int = 0
    reason_error: str | None = None
    default_notes: str | None = None
    success_message: str | None = None

    @property
    def reason_required(self) -> bool:
        return self.min_reason_length > 0

    def validate(self, value: ActionInput | dict[str, Any] | None = None) -> ActionInput:
        raw = ActionInput.coerce(value)
        reason = _clean_text(raw.reason)
        notes = _clean_text(raw.notes)
        if self.reason_required and len(reason or "") < self.min_reason_length:
            raise ActionInputError(
                self.reason_error or f"A reason of at least {self.min_reason_length} characters is required."
            )
        return ActionInput(reason=reason, notes=notes, billing_cycle=_clean_text(raw.billing_cycle))

    def build_payload(self, value: ActionInput | dict[str, Any] | None = None) -> dict[str, Any]:
        cleaned = self.validate(value)
        notes = cleaned.notes or self.default_notes
        if self.payload_style == "status":
            return _compact(
                {
                    "status": self.target_status,
                    "rejectionReason": cleaned.reason,
                    "moderationNotes": notes,
                }
            )
        if self.payload_style == "kyc_status":
            return _compact(
                {
                    "status": self.target_status,
                    "rejectionReason": cleaned.reason,
                    "verificationNotes": notes,
                }
            )
        if self.payload_style == "user_action":
            return _compact({"action": self.name, "reason": cleaned.reason})
        if self.payload_style == "cancel":
            # the service expects the key even when no reason was given
            return {"cancellationReason": cleaned.reason}
        if self.payload_style == "renew":
            return _compact({"billingCycle": cleaned.billing_cycle})
        return {"status": self.target_status}

    def default_success_message(self) -> str:
        return self.success_message or f"Status updated to {self.target_status}"


@dataclass(slots=True)
class ActionRegistry:
    specs: dict[tuple[str, str], ActionSpec] = field(default_factory=dict)

    def register(self, spec: ActionSpec) -> None:
        self.specs[(spec.collection, spec.name)] = spec

    def describe(self, collection: str, action: str) -> ActionSpec:
        spec = self.specs.get((collection, action))
        if spec is None:
            raise UnknownActionError(f"unknown action for {collection}: {action}")
        return spec


def feature_payload(featured: bool, featured_until: datetime | str | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"featured": bool(featured)}
    if featured and featured_until is not None:
        payload["featuredUntil"] = (
            featured_until.isoformat() if isinstance(featured_until, datetime) else featured_until
        )
    return payload


def feature_success_message(featured: bool) -> str:
    return "Property featured successfully" if featured else "Property unfeatured successfully"


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    stripped = str(value).strip()
    return stripped or None


def _compact(payload: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def _property(name: str, label: str, target: str, **kwargs: Any) -> ActionSpec:
    return ActionSpec(
        collection="properties",
        name=name,
        label=label,
        target_status=target,
        method="PUT",
        path_suffix="status",
        payload_style="status",
        success_message=kwargs.pop("success_message", f"Property status updated to {target}"),
        **kwargs,
    )


def _user(name: str, label: str, target: str, message: str, **kwargs: Any) -> ActionSpec:
    return ActionSpec(
        collection="users",
        name=name,
        label=label,
        target_status=target,
        method="PUT",
        path_suffix="status",
        payload_style="user_action",
        success_message=message,
        **kwargs,
    )


def _kyc(name: str, label: str, target: str, **kwargs: Any) -> ActionSpec:
    return ActionSpec(
        collection="kyc",
        name=name,
        label=label,
        target_status=target,
        method="PUT",
        path_suffix="",
        payload_style="kyc_status",
        success_message=f"Document status updated to {target}",
        **kwargs,
    )


def build_default_registry() -> ActionRegistry:
    registry = ActionRegistry()
    for spec in (
        _property("approve", "Approve", "active"),
        _property(
            "reject",
            "Reject",
            "rejected",
            requires_input=True,
            min_reason_length=3,
            reason_error="A short explanation (min. 3 characters) is required.",
        ),
        _property("activate", "Activate", "active"),
        _property("deactivate", "Deactivate", "inactive", requires_input=True),
        _property("archive", "Archive", "archived", requires_input=True),
        _property("markSold", "Mark sold", "sold"),
        _property("markRented", "Mark rented", "rented"),
        _property("markPending", "Send to review", "pending", default_notes="Returned to pending by admin"),
        _user("approve", "Approve", "active", "User approved and activated."),
        _user("activate", "Activate", "active", "User activated successfully."),
        _user("suspend", "Suspend", "suspended", "User suspended.", requires_input=True),
        _user("ban", "Ban", "banned", "User banned.", requires_input=True),
        _user("reinstate", "Reinstate", "active", "User reinstated."),
        ActionSpec(
            collection="subscriptions",
            name="activate",
            label="Activate",
            target_status="active",
            method="PUT",
            path_suffix="",
            payload_style="subscription_status",
            success_message="Subscription updated successfully",
        ),
        ActionSpec(
            collection="subscriptions",
            name="cancel",
            label="Cancel subscription",
            target_status="cancelled",
            method="POST",
            path_suffix="cancel",
            payload_style="cancel",
            requires_input=True,
            success_message="Subscription cancelled successfully",
        ),
        ActionSpec(
            collection="subscriptions",
            name="renew",
            label="Renew subscription",
            target_status="active",
            method="POST",
            path_suffix="renew",
            payload_style="renew",
            success_message="Subscription renewed successfully",
        ),
        _kyc("approve", "Approve", "approved"),
        _kyc(
            "reject",
            "Reject",
            "rejected",
            requires_input=True,
            min_reason_length=1,
            reason_error="Please provide a rejection reason when rejecting a document.",
        ),
        _kyc("expire", "Mark expired", "expired"),
        _kyc("markPending", "Send to review", "pending"),
    ):
        registry.register(spec)
    return registry


DEFAULT_REGISTRY = build_default_registry()


def describe(collection: str, action: str) -> ActionSpec:
    return DEFAULT_REGISTRY.describe(collection, action)
