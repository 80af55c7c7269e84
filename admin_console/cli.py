from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import Any

import httpx

from admin_console.core.config import Settings, get_settings
from admin_console.core.telemetry import (
    configure_console_logging,
    setup_console_telemetry,
    shutdown_console_telemetry,
)
from admin_console.formatting import format_currency, page_label, status_label
from admin_console.lifecycle.actions import describe
from admin_console.navigation import DEFAULT_MENU, NavGroup, walk
from admin_console.schemas.common import EntityBase
from admin_console.screens import Console, ListScreen
from admin_console.services.admin_client import RESOURCES, AdminServiceError, extract_error_message

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="admin-console", description="Rental marketplace admin console.")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")
    commands = parser.add_subparsers(dest="command", required=True)

    list_parser = commands.add_parser("list", help="List a collection")
    list_parser.add_argument("collection", choices=sorted(RESOURCES))
    list_parser.add_argument("--status")
    list_parser.add_argument("--subtype", help="listing type, billing cycle, role or document type")
    list_parser.add_argument("--search", default="")
    list_parser.add_argument("--featured-only", action="store_true")
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--page-size", type=int)

    show_parser = commands.add_parser("show", help="Show one entity")
    show_parser.add_argument("collection", choices=sorted(RESOURCES))
    show_parser.add_argument("entity_id")

    actions_parser = commands.add_parser("actions", help="List the actions available for an entity")
    actions_parser.add_argument("collection", choices=sorted(RESOURCES))
    actions_parser.add_argument("entity_id")

    act_parser = commands.add_parser("act", help="Run an action on an entity")
    act_parser.add_argument("collection", choices=sorted(RESOURCES))
    act_parser.add_argument("entity_id")
    act_parser.add_argument("action")
    act_parser.add_argument("--reason")
    act_parser.add_argument("--notes")
    act_parser.add_argument("--billing-cycle", choices=["monthly", "yearly", "custom"])

    feature_parser = commands.add_parser("feature", help="Feature or unfeature a property")
    feature_parser.add_argument("entity_id")
    toggle = feature_parser.add_mutually_exclusive_group(required=True)
    toggle.add_argument("--on", dest="featured", action="store_true")
    toggle.add_argument("--off", dest="featured", action="store_false")

    commands.add_parser("menu", help="Print the console navigation")
    return parser


async def run_command(
    args: argparse.Namespace,
    settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> int:
    if args.command == "menu":
        for depth, node in walk(DEFAULT_MENU):
            suffix = "" if isinstance(node, NavGroup) else f"  {node.path}"
            print(f"{'  ' * depth}{node.title}{suffix}")
        return EXIT_OK

    console = Console.from_settings(settings, http_client=http_client)
    collection = getattr(args, "collection", "properties")
    async with console.screen(collection) as screen:
        try:
            if args.command == "list":
                return await _list(screen, args)
            if args.command == "show":
                entity = await screen.detail(args.entity_id)
                _print_entity(entity)
                return EXIT_OK
            if args.command == "actions":
                entity = await screen.detail(args.entity_id)
                for action in screen.available_actions(entity):
                    spec = describe(collection, action)
                    marker = " (input)" if spec.requires_input else ""
                    print(f"{action}\t{spec.label}{marker}")
                return EXIT_OK
            if args.command == "act":
                return await _act(screen, args)
            if args.command == "feature":
                entity = await screen.detail(args.entity_id)
                if bool(getattr(entity, "featured", False)) == args.featured:
                    print("Nothing to change.")
                    return EXIT_OK
                outcome = await screen.toggle_featured(entity)
                print(outcome.message)
                return EXIT_OK if outcome.ok else EXIT_FAILED
        except AdminServiceError as exc:
            print(f"error: {extract_error_message(exc)}", file=sys.stderr)
            return EXIT_FAILED
    return EXIT_INVALID


async def _list(screen: ListScreen, args: argparse.Namespace) -> int:
    changes: dict[str, Any] = {
        "status": args.status,
        "subtype": args.subtype,
        "search": args.search,
        "featured_only": args.featured_only,
    }
    if args.page_size:
        changes["page_size"] = args.page_size
    screen.set_filters(**changes)
    screen.set_page(args.page)
    page = await screen.load()
    for entity in page.items:
        actions = ", ".join(screen.available_actions(entity)) or "-"
        print(f"{entity.id}\t{status_label(entity.status)}\t{_title(entity)}\t[{actions}]")
    print(screen.summary_line(page))
    print(page_label(page.pagination))
    return EXIT_OK


async def _act(screen: ListScreen, args: argparse.Namespace) -> int:
    entity = await screen.detail(args.entity_id)
    if args.action not in screen.available_actions(entity):
        print(
            f"error: {args.action} is not available for status {entity.status}",
            file=sys.stderr,
        )
        return EXIT_INVALID

    outcome = await screen.act(entity, args.action)
    if outcome is None and screen.gate.is_open:
        outcome = await screen.submit_dialog(args.reason, args.notes, billing_cycle=args.billing_cycle)
        if outcome is None:
            print(f"error: {screen.gate.error}", file=sys.stderr)
            screen.gate.cancel()
            return EXIT_INVALID
    if outcome is None:
        return EXIT_INVALID

    stream = sys.stdout if outcome.ok else sys.stderr
    print(outcome.message, file=stream)
    if outcome.ok:
        return EXIT_OK
    return EXIT_INVALID if outcome.kind == "invalid" else EXIT_FAILED


def _title(entity: EntityBase) -> str:
    for attribute in ("title", "plan_name", "display_name", "document_type"):
        value = getattr(entity, attribute, None)
        if value:
            return str(value)
    return ""


def _print_entity(entity: EntityBase) -> None:
    print(f"id: {entity.id}")
    print(f"status: {status_label(entity.status)}")
    if entity.subtype:
        print(f"type: {entity.subtype}")
    title = _title(entity)
    if title:
        print(f"title: {title}")
    price = getattr(entity, "price", None) or getattr(entity, "monthly_price", None)
    if price is not None:
        print(f"price: {format_currency(price, getattr(entity, 'currency', 'NGN'))}")
    for attribute in ("featured", "auto_renew", "rejection_reason", "moderation_notes", "cancellation_reason"):
        value = getattr(entity, attribute, None)
        if value not in (None, ""):
            print(f"{attribute}: {value}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_console_logging(logging.DEBUG if args.verbose else logging.WARNING)
    telemetry_runtime = setup_console_telemetry(settings)
    try:
        return asyncio.run(run_command(args, settings))
    finally:
        shutdown_console_telemetry(telemetry_runtime)


if __name__ == "__main__":
    sys.exit(main())
