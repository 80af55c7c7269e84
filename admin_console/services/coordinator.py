from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from admin_console.core.telemetry import mutation_span
from admin_console.lifecycle.actions import (
    DEFAULT_REGISTRY,
    FEATURE_ACTION,
    ActionInput,
    ActionInputError,
    ActionRegistry,
    UnknownActionError,
    feature_payload,
    feature_success_message,
)
from admin_console.lifecycle.transitions import is_legal
from admin_console.schemas.common import MutationResult
from admin_console.services.admin_client import AdminClient, AdminServiceError, extract_error_message
from admin_console.services.cache import QueryCache
from admin_console.services.feedback import FeedbackChannel

logger = logging.getLogger(__name__)

OutcomeKind = Literal["success", "error", "invalid", "rejected"]

ALREADY_PENDING_MESSAGE = "Another action is already in progress for this item."


@dataclass(slots=True, frozen=True)
class PendingAction:
    entity_id: str
    action: str


@dataclass(slots=True, frozen=True)
class MutationOutcome:
    kind: OutcomeKind
    collection: str
    entity_id: str
    action: str
    message: str
    data: dict[str, Any] | None = None
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.kind == "success"


class PendingActions:
    """Pending markers keyed by (collection, entity id).

    Check-and-set happens without awaiting, so it is atomic on the event loop.
    """

    def __init__(self) -> None:
        self._pending: dict[tuple[str, str], PendingAction] = {}

    def try_acquire(self, collection: str, entity_id: str, action: str) -> bool:
        key = (collection, entity_id)
        if key in self._pending:
            return False
        self._pending[key] = PendingAction(entity_id=entity_id, action=action)
        return True

    def release(self, collection: str, entity_id: str) -> None:
        self._pending.pop((collection, entity_id), None)

    def get(self, collection: str, entity_id: str) -> PendingAction | None:
        return self._pending.get((collection, entity_id))

    def is_pending(self, collection: str, entity_id: str) -> bool:
        return (collection, entity_id) in self._pending

    def snapshot(self, collection: str) -> dict[str, PendingAction]:
        return {entity_id: marker for (owner, entity_id), marker in self._pending.items() if owner == collection}


class MutationCoordinator:
    """Runs every status or feature change for the console.

    One pending marker per entity refuses a second request while the first
    is in flight. Caches are invalidated only after the service confirms a
    change. The marker is cleared however the request ends.
    """

    def __init__(
        self,
        client: AdminClient,
        cache: QueryCache,
        *,
        registry: ActionRegistry = DEFAULT_REGISTRY,
        pending: PendingActions | None = None,
        feedback: FeedbackChannel | None = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.registry = registry
        self.pending = pending if pending is not None else PendingActions()
        self.feedback = feedback if feedback is not None else FeedbackChannel()

    async def dispatch(
        self,
        collection: str,
        entity_id: str,
        action: str,
        value: ActionInput | dict[str, Any] | None = None,
        *,
        current_status: str | None = None,
        subtype: str | None = None,
        feedback: FeedbackChannel | None = None,
    ) -> MutationOutcome:
        try:
            spec = self.registry.describe(collection, action)
        except UnknownActionError as exc:
            return MutationOutcome("invalid", collection, entity_id, action, str(exc))

        if current_status is not None and not is_legal(collection, current_status, action, subtype):
            return MutationOutcome(
                "invalid",
                collection,
                entity_id,
                action,
                f"{spec.label} is not available while the status is {current_status}.",
            )

        try:
            payload = spec.build_payload(value)
        except ActionInputError as exc:
            return MutationOutcome("invalid", collection, entity_id, action, str(exc))

        return await self._run(
            collection,
            entity_id,
            action,
            lambda: self.client.mutate(
                collection,
                entity_id,
                method=spec.method,
                path_suffix=spec.path_suffix,
                payload=payload,
            ),
            default_message=spec.default_success_message(),
            feedback=feedback or self.feedback,
        )

    async def set_featured(
        self,
        collection: str,
        entity_id: str,
        featured: bool,
        *,
        featured_until: datetime | str | None = None,
        feedback: FeedbackChannel | None = None,
    ) -> MutationOutcome:
        if collection != "properties":
            return MutationOutcome("invalid", collection, entity_id, FEATURE_ACTION, "Only properties can be featured.")
        payload = feature_payload(featured, featured_until)
        return await self._run(
            collection,
            entity_id,
            FEATURE_ACTION,
            lambda: self.client.mutate(
                collection,
                entity_id,
                method="PUT",
                path_suffix="feature",
                payload=payload,
            ),
            default_message=feature_success_message(featured),
            feedback=feedback or self.feedback,
        )

    async def _run(
        self,
        collection: str,
        entity_id: str,
        action: str,
        request: Callable[[], Awaitable[MutationResult]],
        *,
        default_message: str,
        feedback: FeedbackChannel,
    ) -> MutationOutcome:
        if not self.pending.try_acquire(collection, entity_id, action):
            in_flight = self.pending.get(collection, entity_id)
            logger.warning(
                "mutation refused collection=%s entity_id=%s action=%s pending_action=%s",
                collection,
                entity_id,
                action,
                in_flight.action if in_flight else None,
            )
            return MutationOutcome("rejected", collection, entity_id, action, ALREADY_PENDING_MESSAGE)

        with mutation_span(collection, entity_id, action) as span:
            try:
                try:
                    result = await request()
                except AdminServiceError as exc:
                    message = extract_error_message(exc)
                    span.set_attribute("mutation.outcome", "error")
                    logger.warning(
                        "mutation failed collection=%s entity_id=%s action=%s status_code=%s error=%s",
                        collection,
                        entity_id,
                        action,
                        exc.status_code,
                        message,
                    )
                    feedback.error(message)
                    return MutationOutcome(
                        "error", collection, entity_id, action, message, status_code=exc.status_code
                    )

                self.cache.invalidate_entity(collection, entity_id)
                message = result.message or default_message
                span.set_attribute("mutation.outcome", "success")
                logger.info(
                    "mutation succeeded collection=%s entity_id=%s action=%s",
                    collection,
                    entity_id,
                    action,
                )
                feedback.success(message)
                return MutationOutcome("success", collection, entity_id, action, message, data=result.data)
            finally:
                self.pending.release(collection, entity_id)
