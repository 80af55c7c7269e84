from __future__ import annotations

import pytest
from pydantic import ValidationError

from admin_console.formatting import format_currency, page_label, pagination_summary, status_label
from admin_console.navigation import DEFAULT_MENU, NavGroup, NavLeaf, leaf_paths, parse_menu, walk
from admin_console.schemas.common import PaginationMeta


def test_default_menu_covers_console_screens() -> None:
    paths = leaf_paths(DEFAULT_MENU)
    assert {"/properties", "/moderation", "/subscriptions"} <= set(paths)
    groups = [node.title for _, node in walk(DEFAULT_MENU) if isinstance(node, NavGroup)]
    assert groups == ["Users", "Billing"]


def test_walk_reports_depth() -> None:
    menu = parse_menu(
        [
            {"kind": "group", "title": "Outer", "children": [
                {"kind": "group", "title": "Inner", "children": [{"kind": "leaf", "title": "Deep", "path": "/deep"}]},
            ]},
        ]
    )
    assert [(depth, node.title) for depth, node in walk(menu)] == [(0, "Outer"), (1, "Inner"), (2, "Deep")]
    assert isinstance(menu[0].children[0].children[0], NavLeaf)


def test_parse_menu_rejects_unknown_kind() -> None:
    with pytest.raises(ValidationError):
        parse_menu([{"kind": "divider", "title": "---"}])


def test_pagination_summary() -> None:
    meta = PaginationMeta.approximate(page=2, page_size=10, item_count=4)
    assert pagination_summary(meta, item_count=4, noun="properties") == "Showing 11-14 of 14 properties"
    assert page_label(meta) == "Page 2 of 2"

    empty = PaginationMeta.approximate(page=1, page_size=10, item_count=0)
    assert pagination_summary(empty, item_count=0, noun="documents") == "No documents to display"
    assert empty.total_pages == 1


def test_format_currency() -> None:
    assert format_currency(1500000) == "NGN 1,500,000"
    assert format_currency("2500.4", "USD") == "USD 2,500"
    assert format_currency("n/a") == "NGN n/a"


def test_status_label() -> None:
    assert status_label("mark_pending") == "Mark pending"
    assert status_label(None) == "Unknown"
