from __future__ import annotations

import asyncio
import logging
from typing import Literal

from admin_console.lifecycle.actions import (
    DEFAULT_REGISTRY,
    ActionInput,
    ActionInputError,
    ActionRegistry,
    ActionSpec,
    UnknownActionError,
)
from admin_console.schemas.common import EntityBase
from admin_console.services.coordinator import MutationCoordinator, MutationOutcome
from admin_console.services.feedback import FeedbackChannel

logger = logging.getLogger(__name__)

GateState = Literal["closed", "awaiting_input", "submitting"]


class ModerationGate:
    """Collects the operator text some actions need before they are dispatched.

    The dialog stays in ``submitting`` until the mutation settles. A failed
    mutation puts it back in ``awaiting_input`` with the error and the typed
    text kept, so the operator can retry or cancel.
    """

    def __init__(
        self,
        coordinator: MutationCoordinator,
        collection: str,
        *,
        feedback: FeedbackChannel | None = None,
        registry: ActionRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self.coordinator = coordinator
        self.collection = collection
        self.feedback = feedback
        self.registry = registry
        self.state: GateState = "closed"
        self.spec: ActionSpec | None = None
        self.entity: EntityBase | None = None
        self.error: str | None = None
        self.reason: str | None = None
        self.notes: str | None = None

    @property
    def is_open(self) -> bool:
        return self.state != "closed"

    async def request(self, entity: EntityBase, action: str) -> MutationOutcome | None:
        """Start an action; returns the outcome when it ran without a dialog."""
        try:
            spec = self.registry.describe(self.collection, action)
        except UnknownActionError as exc:
            return MutationOutcome("invalid", self.collection, entity.id, action, str(exc))
        if not spec.requires_input:
            return await self._dispatch(entity, spec, ActionInput())

        if self.state == "submitting":
            logger.info("gate busy; ignoring action=%s entity_id=%s", action, entity.id)
            return None
        self.state = "awaiting_input"
        self.spec = spec
        self.entity = entity
        self.error = None
        self.reason = None
        self.notes = None
        return None

    async def submit(
        self,
        reason: str | None = None,
        notes: str | None = None,
        *,
        billing_cycle: str | None = None,
    ) -> MutationOutcome | None:
        if self.state != "awaiting_input" or self.spec is None or self.entity is None:
            return None

        self.reason = reason
        self.notes = notes
        value = ActionInput(reason=reason, notes=notes, billing_cycle=billing_cycle)
        try:
            self.spec.validate(value)
        except ActionInputError as exc:
            self.error = str(exc)
            return None

        self.state = "submitting"
        self.error = None
        try:
            outcome = await self._dispatch(self.entity, self.spec, value)
        except asyncio.CancelledError:
            self.state = "awaiting_input"
            raise

        if outcome.ok:
            self._reset()
        else:
            self.state = "awaiting_input"
            self.error = outcome.message
        return outcome

    def cancel(self) -> bool:
        if self.state == "submitting":
            return False
        self._reset()
        return True

    async def _dispatch(self, entity: EntityBase, spec: ActionSpec, value: ActionInput) -> MutationOutcome:
        return await self.coordinator.dispatch(
            self.collection,
            entity.id,
            spec.name,
            value,
            current_status=entity.status,
            subtype=entity.subtype,
            feedback=self.feedback,
        )

    def _reset(self) -> None:
        self.state = "closed"
        self.spec = None
        self.entity = None
        self.error = None
        self.reason = None
        self.notes = None
