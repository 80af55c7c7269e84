from __future__ import annotations

import logging
from typing import Any

import httpx

from admin_console.core.config import Settings
from admin_console.formatting import pagination_summary
from admin_console.lifecycle.query import FilterState, build_params
from admin_console.lifecycle.transitions import ordered_actions
from admin_console.schemas.common import EntityBase, ListPage
from admin_console.services.admin_client import RESOURCES, AdminClient
from admin_console.services.cache import OVERVIEW_KEY, CacheStore, QueryCache, detail_key, list_key
from admin_console.services.coordinator import MutationCoordinator, MutationOutcome
from admin_console.services.feedback import DEFAULT_FEEDBACK_TIMEOUT_SECONDS, FeedbackChannel
from admin_console.services.gate import ModerationGate

logger = logging.getLogger(__name__)

ENTITY_NOUNS: dict[str, str] = {
    "properties": "properties",
    "subscriptions": "subscriptions",
    "users": "users",
    "kyc": "documents",
}


class ListScreen:
    """State behind one collection view: filters, the cached page, the
    selected entity, a moderation dialog and a feedback line.

    Screens opened from the same ``Console`` share one coordinator, so an
    entity pending on one screen is pending on all of them.
    """

    def __init__(
        self,
        collection: str,
        coordinator: MutationCoordinator,
        *,
        page_size: int = 10,
        feedback_timeout_seconds: float = DEFAULT_FEEDBACK_TIMEOUT_SECONDS,
    ) -> None:
        if collection not in RESOURCES:
            raise LookupError(f"unknown collection: {collection}")
        self.collection = collection
        self.coordinator = coordinator
        self.filters = FilterState(page_size=page_size)
        self.feedback = FeedbackChannel(feedback_timeout_seconds)
        self.gate = ModerationGate(coordinator, collection, feedback=self.feedback)
        self.selected_id: str | None = None
        self.overview_shown = False

    async def __aenter__(self) -> ListScreen:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    @property
    def client(self) -> AdminClient:
        return self.coordinator.client

    @property
    def cache(self) -> QueryCache:
        return self.coordinator.cache

    @property
    def params(self) -> dict[str, Any]:
        return build_params(self.collection, self.filters)

    def set_filters(self, **changes: Any) -> FilterState:
        self.filters = self.filters.with_filters(**changes)
        return self.filters

    def set_page(self, page: int) -> FilterState:
        self.filters = self.filters.with_page(page)
        return self.filters

    def reset_filters(self) -> FilterState:
        self.filters = self.filters.reset()
        return self.filters

    async def load(self) -> ListPage[Any]:
        params = self.params
        return await self.cache.fetch(
            list_key(self.collection, params),
            lambda: self.client.list(self.collection, params),
        )

    async def detail(self, entity_id: str) -> EntityBase:
        self.selected_id = entity_id
        return await self.cache.fetch(
            detail_key(self.collection, entity_id),
            lambda: self.client.get(self.collection, entity_id),
        )

    def deselect(self) -> None:
        self.selected_id = None

    async def overview(self) -> dict[str, Any]:
        if self.collection != "kyc":
            raise LookupError(f"no moderation overview on the {self.collection} screen")
        self.overview_shown = True
        return await self.cache.fetch(OVERVIEW_KEY, self.client.overview)

    async def refresh(self) -> ListPage[Any]:
        page = await self.load()
        if self.selected_id is not None:
            await self.detail(self.selected_id)
        if self.overview_shown:
            await self.overview()
        return page

    def is_pending(self, entity_id: str) -> bool:
        return self.coordinator.pending.is_pending(self.collection, entity_id)

    def available_actions(self, entity: EntityBase) -> tuple[str, ...]:
        if self.is_pending(entity.id):
            return ()
        return ordered_actions(self.collection, entity.status, entity.subtype)

    async def act(self, entity: EntityBase, action: str) -> MutationOutcome | None:
        outcome = await self.gate.request(entity, action)
        await self._after(outcome)
        return outcome

    async def submit_dialog(
        self,
        reason: str | None = None,
        notes: str | None = None,
        *,
        billing_cycle: str | None = None,
    ) -> MutationOutcome | None:
        outcome = await self.gate.submit(reason, notes, billing_cycle=billing_cycle)
        await self._after(outcome)
        return outcome

    async def toggle_featured(self, entity: EntityBase) -> MutationOutcome:
        featured = not bool(getattr(entity, "featured", False))
        outcome = await self.coordinator.set_featured(
            self.collection,
            entity.id,
            featured,
            feedback=self.feedback,
        )
        await self._after(outcome)
        return outcome

    def summary_line(self, page: ListPage[Any]) -> str:
        return pagination_summary(
            page.pagination,
            item_count=len(page.items),
            noun=ENTITY_NOUNS.get(self.collection, "items"),
        )

    def close(self) -> None:
        self.gate.cancel()
        self.feedback.close()

    async def _after(self, outcome: MutationOutcome | None) -> None:
        if outcome is None or not outcome.ok:
            return
        try:
            await self.refresh()
        except Exception:
            # the caches are already invalidated; the next read retries
            logger.exception("refresh after mutation failed collection=%s", self.collection)


class Console:
    """Shared client, cache and coordinator for every screen of one session."""

    def __init__(
        self,
        client: AdminClient,
        *,
        store: CacheStore | None = None,
        page_size: int = 10,
        feedback_timeout_seconds: float = DEFAULT_FEEDBACK_TIMEOUT_SECONDS,
    ) -> None:
        self.cache = QueryCache(store)
        self.coordinator = MutationCoordinator(client, self.cache)
        self.page_size = page_size
        self.feedback_timeout_seconds = feedback_timeout_seconds

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        http_client: httpx.AsyncClient | None = None,
        store: CacheStore | None = None,
    ) -> Console:
        return cls(
            AdminClient.from_settings(settings, client=http_client),
            store=store,
            page_size=settings.default_page_size,
            feedback_timeout_seconds=settings.feedback_timeout_seconds,
        )

    def screen(self, collection: str) -> ListScreen:
        return ListScreen(
            collection,
            self.coordinator,
            page_size=self.page_size,
            feedback_timeout_seconds=self.feedback_timeout_seconds,
        )
