"""Pure helpers for presenting and rearranging the category menu.

Items are plain mappings shaped like the menu API's JSON (``id``,
``parentId``, ``menuOrder``, ``menuLevel``, ``name``, ``showInMenu``...), so the
same functions serve the server-side tree endpoint and the client-side editor.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional

MenuItem = Mapping[str, Any]


def menu_sort_key(item: MenuItem) -> tuple[int, int, str]:
    """Ordering used everywhere the menu is displayed."""
    return (int(item.get("menuOrder", 0)), int(item.get("menuLevel", 0)), str(item.get("name", "")))


def _children_by_parent(items: Iterable[MenuItem]) -> dict[Optional[str], list[dict[str, Any]]]:
    grouped: dict[Optional[str], list[dict[str, Any]]] = {}
    for item in items:
        grouped.setdefault(item.get("parentId"), []).append(dict(item))
    for siblings in grouped.values():
        siblings.sort(key=menu_sort_key)
    return grouped


def build_hierarchy(items: Sequence[MenuItem], *, include_orphans: bool = False) -> list[dict[str, Any]]:
    """Nest a flat category list by ``parentId``.

    Each returned node is a copy of the input item with a ``children`` list.
    Items whose parent is not part of ``items`` are dropped unless
    ``include_orphans`` is set, in which case they are promoted to the top
    level. Items caught in a parent cycle are never reachable from a root and
    are therefore left out.
    """

    known_ids = {item["id"] for item in items}
    grouped = _children_by_parent(items)

    roots = list(grouped.get(None, []))
    if include_orphans:
        for parent_id, siblings in grouped.items():
            if parent_id is not None and parent_id not in known_ids:
                roots.extend(siblings)
        roots.sort(key=menu_sort_key)

    visited: set[str] = set()

    def attach(node: dict[str, Any]) -> dict[str, Any]:
        visited.add(node["id"])
        node["children"] = [
            attach(child) for child in grouped.get(node["id"], []) if child["id"] not in visited
        ]
        return node

    return [attach(root) for root in roots if root["id"] not in visited]


def flatten_hierarchy(nodes: Sequence[Mapping[str, Any]], depth: int = 0) -> list[tuple[dict[str, Any], int]]:
    """Depth-first walk of a nested tree returning ``(item, depth)`` pairs."""

    result: list[tuple[dict[str, Any], int]] = []
    for node in nodes:
        item = {key: value for key, value in node.items() if key != "children"}
        result.append((item, depth))
        result.extend(flatten_hierarchy(node.get("children") or [], depth + 1))
    return result


@dataclass(frozen=True)
class DisplayRow:
    """A single rendered row of the menu editor."""

    item: dict[str, Any]
    depth: int
    indent: int
    has_children: bool
    expanded: bool


def display_rows(
    items: Sequence[MenuItem],
    *,
    collapsed: Iterable[str] = (),
    max_indent: int = 1,
) -> list[DisplayRow]:
    """Rows for the editor: parents followed by their (collapsible) children.

    Only ``max_indent`` levels of indentation are rendered; deeper descendants
    share the last indentation level.
    """

    collapsed_ids = set(collapsed)
    rows: list[DisplayRow] = []

    def walk(nodes: Sequence[Mapping[str, Any]], depth: int) -> None:
        for node in nodes:
            children = node.get("children") or []
            expanded = node["id"] not in collapsed_ids
            item = {key: value for key, value in node.items() if key != "children"}
            rows.append(
                DisplayRow(
                    item=item,
                    depth=depth,
                    indent=min(depth, max_indent),
                    has_children=bool(children),
                    expanded=expanded,
                )
            )
            if children and expanded:
                walk(children, depth + 1)

    walk(build_hierarchy(items, include_orphans=True), 0)
    return rows


def filter_items(items: Sequence[MenuItem], term: str) -> list[MenuItem]:
    """Case-insensitive search over name, description and slug."""

    needle = term.strip().lower()
    if not needle:
        return list(items)
    return [
        item
        for item in items
        if needle in str(item.get("name") or "").lower()
        or needle in str(item.get("description") or "").lower()
        or needle in str(item.get("slug") or "").lower()
    ]


def move_item(items: Sequence[MenuItem], source_index: int, destination_index: int) -> list[MenuItem]:
    """Return a copy of ``items`` with one entry moved, like a drag-and-drop splice."""

    if not 0 <= source_index < len(items):
        raise IndexError(f"source index {source_index} out of range")
    if not 0 <= destination_index < len(items):
        raise IndexError(f"destination index {destination_index} out of range")

    reordered = list(items)
    moved = reordered.pop(source_index)
    reordered.insert(destination_index, moved)
    return reordered


def build_reorder_payload(items: Sequence[MenuItem]) -> list[dict[str, Any]]:
    """Renumber ``items`` 0..N-1 in their current order for the reorder endpoint."""

    return [
        {
            "id": item["id"],
            "menuOrder": index,
            "level": int(item.get("menuLevel", 0)),
            "parentId": item.get("parentId"),
            "showInMenu": bool(item.get("showInMenu", True)),
        }
        for index, item in enumerate(items)
    ]


def would_create_cycle(
    parent_of: Mapping[str, Optional[str]],
    category_id: str,
    new_parent_id: Optional[str],
) -> bool:
    """Check whether pointing ``category_id`` at ``new_parent_id`` closes a loop.

    Walks up the parent chain from the prospective parent. A chain that loops
    without reaching ``category_id`` is already corrupt and is reported as a
    cycle as well.
    """

    if new_parent_id is None:
        return False

    visited: set[str] = set()
    current: Optional[str] = new_parent_id
    while current is not None:
        if current == category_id or current in visited:
            return True
        visited.add(current)
        current = parent_of.get(current)
    return False


__all__ = [
    "DisplayRow",
    "build_hierarchy",
    "build_reorder_payload",
    "display_rows",
    "filter_items",
    "flatten_hierarchy",
    "menu_sort_key",
    "move_item",
    "would_create_cycle",
]
