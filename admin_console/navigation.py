from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class NavLeaf(BaseModel):
    kind: Literal["leaf"] = "leaf"
    title: str
    path: str


class NavGroup(BaseModel):
    kind: Literal["group"] = "group"
    title: str
    children: list[NavNode] = Field(default_factory=list)


NavNode = Annotated[Union[NavLeaf, NavGroup], Field(discriminator="kind")]

NavGroup.model_rebuild()

_MENU_ADAPTER = TypeAdapter(list[NavNode])

DEFAULT_MENU: list[NavLeaf | NavGroup] = _MENU_ADAPTER.validate_python(
    [
        {"kind": "leaf", "title": "Overview", "path": "/dashboard"},
        {"kind": "leaf", "title": "Properties", "path": "/properties"},
        {"kind": "leaf", "title": "Moderation", "path": "/moderation"},
        {
            "kind": "group",
            "title": "Users",
            "children": [
                {"kind": "leaf", "title": "Vendors", "path": "/users/vendors"},
                {"kind": "leaf", "title": "Customers", "path": "/users/customers"},
            ],
        },
        {
            "kind": "group",
            "title": "Billing",
            "children": [
                {"kind": "leaf", "title": "Subscriptions", "path": "/subscriptions"},
                {"kind": "leaf", "title": "Plans", "path": "/plans"},
                {"kind": "leaf", "title": "Transactions", "path": "/transactions"},
            ],
        },
        {"kind": "leaf", "title": "Settings", "path": "/settings"},
    ]
)


def parse_menu(raw: list[dict]) -> list[NavLeaf | NavGroup]:
    return _MENU_ADAPTER.validate_python(raw)


def walk(nodes: list[NavLeaf | NavGroup], depth: int = 0) -> Iterator[tuple[int, NavLeaf | NavGroup]]:
    for node in nodes:
        yield depth, node
        if isinstance(node, NavGroup):
            yield from walk(node.children, depth + 1)


def leaf_paths(nodes: list[NavLeaf | NavGroup]) -> list[str]:
    return [node.path for _, node in walk(nodes) if isinstance(node, NavLeaf)]
