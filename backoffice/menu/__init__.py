"""Menu hierarchy helpers shared by the API and the editor client."""

from .tree import (
    DisplayRow,
    build_hierarchy,
    build_reorder_payload,
    display_rows,
    filter_items,
    flatten_hierarchy,
    menu_sort_key,
    move_item,
    would_create_cycle,
)

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
