from __future__ import annotations

from typing import Any

from admin_console.schemas.common import PaginationMeta


def format_currency(value: Any, currency: str = "NGN") -> str:
    if value is None or value == "":
        return "-"
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return f"{currency} {value}"
    return f"{currency} {amount:,.0f}"


def pagination_summary(pagination: PaginationMeta, *, item_count: int, noun: str = "items") -> str:
    total = pagination.total_items
    if total == 0 or item_count == 0:
        return f"No {noun} to display"
    start = (pagination.current_page - 1) * pagination.items_per_page + 1
    end = min(start + item_count - 1, total)
    return f"Showing {start}-{end} of {total} {noun}"


def page_label(pagination: PaginationMeta) -> str:
    return f"Page {pagination.current_page} of {pagination.total_pages}"


def status_label(status: str | None) -> str:
    if not status:
        return "Unknown"
    return status.replace("_", " ").capitalize()
