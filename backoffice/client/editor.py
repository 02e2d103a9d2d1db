"""Stateful menu editor driving the menu API.

The editor keeps a local copy of the menu, applies drag-and-drop and toggle
changes optimistically, and always refetches the canonical list once the
server has answered, successfully or not.
"""

from __future__ import annotations

import enum
import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from backoffice.client.api import MenuApiClient, MenuApiError
from backoffice.menu.tree import (
    DisplayRow,
    build_reorder_payload,
    display_rows,
    filter_items,
    menu_sort_key,
    move_item,
)

logger = logging.getLogger(__name__)


class DragState(str, enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    OPTIMISTIC = "optimistic"
    CONFIRMED = "confirmed"
    REVERTED = "reverted"


class EditorBusyError(RuntimeError):
    """Raised when a change is submitted while another one is still saving."""


@dataclass(frozen=True)
class Alert:
    id: int
    level: str
    message: str


class MenuEditor:
    """Client-side controller for the menu management screen."""

    def __init__(self, api: MenuApiClient, *, show_all: bool = True, max_indent: int = 1) -> None:
        self.api = api
        self.show_all = show_all
        self.max_indent = max_indent
        self.items: List[Dict[str, Any]] = []
        self.search_term = ""
        self.collapsed: set[str] = set()
        self.alerts: List[Alert] = []
        self.drag_states: Dict[str, DragState] = {}
        self._alert_ids = itertools.count(1)
        self._save_lock = threading.Lock()

    # -- reading -----------------------------------------------------------

    @property
    def saving(self) -> bool:
        return self._save_lock.locked()

    @property
    def visible_items(self) -> List[Dict[str, Any]]:
        return filter_items(self.items, self.search_term)

    def refresh(self) -> List[Dict[str, Any]]:
        """Replace the local state with the server's menu."""
        self.items = sorted(self.api.get_menu_items(show_all=self.show_all), key=menu_sort_key)
        return self.items

    def rows(self) -> List[DisplayRow]:
        return display_rows(self.visible_items, collapsed=self.collapsed, max_indent=self.max_indent)

    def set_search(self, term: str) -> None:
        self.search_term = term

    def toggle_collapsed(self, item_id: str) -> bool:
        """Flip a parent's expanded state; returns ``True`` when now expanded."""
        if item_id in self.collapsed:
            self.collapsed.discard(item_id)
            return True
        self.collapsed.add(item_id)
        return False

    def state_of(self, item_id: str) -> DragState:
        return self.drag_states.get(item_id, DragState.IDLE)

    # -- alerts ------------------------------------------------------------

    def _alert(self, level: str, message: str) -> Alert:
        alert = Alert(id=next(self._alert_ids), level=level, message=message)
        self.alerts.append(alert)
        return alert

    def dismiss_alert(self, alert_id: int) -> None:
        self.alerts = [alert for alert in self.alerts if alert.id != alert_id]

    # -- drag and drop -----------------------------------------------------

    def _ensure_idle(self) -> None:
        if self.saving:
            raise EditorBusyError("A menu change is still being saved")

    def begin_drag(self, item_id: str) -> None:
        self._ensure_idle()
        self.drag_states[item_id] = DragState.DRAGGING

    def cancel_drag(self, item_id: str) -> None:
        self.drag_states[item_id] = DragState.IDLE

    def drop(self, source_index: int, destination_index: int) -> bool:
        """Move a rendered row and persist the new order.

        Indexes refer to :meth:`rows`, i.e. what the operator sees: children
        listed under their parent, collapsed subtrees hidden, search applied.
        Only the rendered rows are renumbered and submitted.
        """

        view = [row.item for row in self.rows()]
        item_id = view[source_index]["id"]
        if source_index == destination_index:
            self.drag_states[item_id] = DragState.IDLE
            return False

        payload = build_reorder_payload(move_item(view, source_index, destination_index))
        new_orders = {entry["id"]: entry["menuOrder"] for entry in payload}

        def optimistic() -> None:
            self.items = sorted(
                (
                    {**item, "menuOrder": new_orders[item["id"]]} if item["id"] in new_orders else item
                    for item in self.items
                ),
                key=menu_sort_key,
            )

        return self._submit(
            lambda: self.api.reorder(payload),
            item_id=item_id,
            optimistic=optimistic,
            success_message="Menu order updated successfully",
        )

    # -- single item actions -------------------------------------------------

    def toggle_visibility(self, item_id: str) -> bool:
        current = next((item for item in self.items if item["id"] == item_id), None)
        if current is None:
            raise KeyError(item_id)
        show = not current.get("showInMenu", True)

        def optimistic() -> None:
            self.items = [
                {**item, "showInMenu": show} if item["id"] == item_id else item for item in self.items
            ]

        return self._submit(
            lambda: self.api.toggle_visibility(item_id, show),
            item_id=item_id,
            optimistic=optimistic,
            success_message=f"Category {'shown in' if show else 'hidden from'} menu",
        )

    def update_item(self, item_id: str, changes: Dict[str, Any]) -> bool:
        return self._submit(
            lambda: self.api.update_item(item_id, changes),
            item_id=item_id,
            success_message="Menu item updated successfully",
        )

    def delete_item(self, item_id: str) -> bool:
        return self._submit(
            lambda: self.api.delete_item(item_id),
            item_id=item_id,
            success_message="Menu item deleted successfully",
        )

    def add_item(self, item: Dict[str, Any]) -> bool:
        return self._submit(
            lambda: self.api.add_item(item),
            success_message="Menu item created successfully",
        )

    def sync_categories(self, level_policy: Optional[str] = None) -> bool:
        return self._submit(
            lambda: self.api.sync_categories(level_policy),
            success_message="Menu synchronised with categories",
        )

    # -- submission --------------------------------------------------------

    def _submit(
        self,
        call: Callable[[], Any],
        *,
        success_message: str,
        item_id: Optional[str] = None,
        optimistic: Optional[Callable[[], None]] = None,
    ) -> bool:
        if not self._save_lock.acquire(blocking=False):
            raise EditorBusyError("A menu change is still being saved")

        snapshot = list(self.items)
        try:
            if optimistic is not None:
                optimistic()
                if item_id is not None:
                    self.drag_states[item_id] = DragState.OPTIMISTIC
            try:
                call()
            except MenuApiError as exc:
                logger.warning("Menu change rejected (%s): %s", exc.status_code, exc.message)
                self.items = snapshot
                if item_id is not None:
                    self.drag_states[item_id] = DragState.REVERTED
                self._alert("error", exc.message)
                self._refetch_quietly()
                return False
            except Exception:
                logger.exception("Menu change failed unexpectedly; restoring previous state")
                self.items = snapshot
                if item_id is not None:
                    self.drag_states[item_id] = DragState.REVERTED
                raise

            if item_id is not None:
                self.drag_states[item_id] = DragState.CONFIRMED
            self._alert("success", success_message)
            self._refetch_quietly()
            return True
        finally:
            self._save_lock.release()

    def _refetch_quietly(self) -> None:
        try:
            self.refresh()
        except MenuApiError as exc:
            self._alert("error", f"Could not reload the menu: {exc.message}")


__all__ = ["Alert", "DragState", "EditorBusyError", "MenuEditor"]
