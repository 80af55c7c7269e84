from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx

from admin_console.schemas.properties import Property
from admin_console.schemas.subscriptions import Subscription
from admin_console.services.admin_client import AdminClient
from admin_console.services.cache import QueryCache
from admin_console.services.coordinator import MutationCoordinator
from admin_console.services.feedback import FeedbackChannel
from admin_console.services.gate import ModerationGate


class ScriptedService:
    def __init__(self, *responses: tuple[int, dict[str, Any]]) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str, Any]] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.path, json.loads(request.content)))
        status_code, body = self.responses.pop(0) if self.responses else (200, {"success": True})
        return httpx.Response(status_code, json=body)


def _gate(http: httpx.AsyncClient, collection: str) -> ModerationGate:
    coordinator = MutationCoordinator(AdminClient("http://admin.test", client=http), QueryCache())
    return ModerationGate(coordinator, collection, feedback=FeedbackChannel(4.0))


PENDING_SALE = Property(id="prop-1", status="pending", listing_type="sale")


def test_direct_action_skips_the_dialog() -> None:
    service = ScriptedService()

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(service)) as http:
            gate = _gate(http, "properties")
            outcome = await gate.request(PENDING_SALE, "approve")
            return gate, outcome

    gate, outcome = asyncio.run(run())
    assert outcome is not None and outcome.ok
    assert gate.state == "closed"
    assert service.calls == [("PUT", "/admin/dashboard/properties/prop-1/status", {"status": "active"})]


def test_unknown_action_is_invalid_without_request() -> None:
    service = ScriptedService()

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(service)) as http:
            gate = _gate(http, "properties")
            outcome = await gate.request(PENDING_SALE, "explode")
            return gate, outcome

    gate, outcome = asyncio.run(run())
    assert outcome is not None
    assert outcome.kind == "invalid"
    assert outcome.entity_id == "prop-1"
    assert outcome.action == "explode"
    assert gate.state == "closed"
    assert service.calls == []


def test_short_reason_keeps_dialog_open_without_request() -> None:
    service = ScriptedService()

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(service)) as http:
            gate = _gate(http, "properties")
            opened = await gate.request(PENDING_SALE, "reject")
            states = [gate.state]
            result = await gate.submit("ab")
            states.append(gate.state)
            return gate, opened, result, states

    gate, opened, result, states = asyncio.run(run())
    assert opened is None
    assert result is None
    assert states == ["awaiting_input", "awaiting_input"]
    assert gate.error == "A short explanation (min. 3 characters) is required."
    assert gate.reason == "ab"
    assert service.calls == []


def test_valid_reason_submits_and_closes() -> None:
    service = ScriptedService()

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(service)) as http:
            gate = _gate(http, "properties")
            await gate.request(PENDING_SALE, "reject")
            outcome = await gate.submit("  blurry photos ", "check again next week")
            return gate, outcome

    gate, outcome = asyncio.run(run())
    assert outcome is not None and outcome.ok
    assert gate.state == "closed"
    assert gate.spec is None
    assert service.calls == [
        (
            "PUT",
            "/admin/dashboard/properties/prop-1/status",
            {"status": "rejected", "rejectionReason": "blurry photos", "moderationNotes": "check again next week"},
        )
    ]


def test_failure_reopens_dialog_with_error_and_input() -> None:
    service = ScriptedService((409, {"success": False, "message": "Listing changed meanwhile"}))

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(service)) as http:
            gate = _gate(http, "properties")
            await gate.request(PENDING_SALE, "reject")
            failed = await gate.submit("wrong price")
            snapshot = (gate.state, gate.error, gate.reason)
            retried = await gate.submit("wrong price")
            return gate, failed, snapshot, retried

    gate, failed, snapshot, retried = asyncio.run(run())
    assert failed is not None and failed.kind == "error"
    assert snapshot == ("awaiting_input", "Listing changed meanwhile", "wrong price")
    assert retried is not None and retried.ok
    assert gate.state == "closed"
    assert len(service.calls) == 2


def test_cancel_is_refused_while_submitting() -> None:
    async def run():
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            await release.wait()
            return httpx.Response(200, json={"success": True})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            gate = _gate(http, "properties")
            await gate.request(PENDING_SALE, "reject")
            submit = asyncio.ensure_future(gate.submit("duplicate listing"))
            while gate.state != "submitting":
                await asyncio.sleep(0)
            refused = gate.cancel()
            ignored = await gate.request(PENDING_SALE, "reject")
            release.set()
            outcome = await submit
            return refused, ignored, outcome, gate.cancel(), gate.state

    refused, ignored, outcome, accepted, state = asyncio.run(run())
    assert refused is False
    assert ignored is None
    assert outcome is not None and outcome.ok
    assert accepted is True
    assert state == "closed"


def test_cancel_discards_input() -> None:
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(ScriptedService())) as http:
            gate = _gate(http, "properties")
            await gate.request(PENDING_SALE, "reject")
            await gate.submit("x")
            cancelled = gate.cancel()
            return gate, cancelled

    gate, cancelled = asyncio.run(run())
    assert cancelled is True
    assert (gate.state, gate.error, gate.reason, gate.entity) == ("closed", None, None, None)


def test_subscription_cancel_without_reason_sends_null() -> None:
    service = ScriptedService((200, {"success": True, "message": "Subscription cancelled"}))
    subscription = Subscription(id="sub-1", status="active", billing_cycle="monthly")

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(service)) as http:
            gate = _gate(http, "subscriptions")
            await gate.request(subscription, "cancel")
            return await gate.submit("   ")

    outcome = asyncio.run(run())
    assert outcome is not None and outcome.ok
    assert service.calls == [("POST", "/admin/dashboard/subscriptions/sub-1/cancel", {"cancellationReason": None})]
