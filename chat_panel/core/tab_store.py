"""In-memory UI state store holding every live conversation tab.

The store is the single owner of tab state.  Every mutation runs to
completion synchronously and is then published to subscribers as a
``StoreEvent`` so a frontend can re-render whatever changed.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from typing import Any, Callable

from ..log import logger
from .constants import MAX_TABS
from .models import (
    ChatItem,
    ChatItemType,
    CustomForm,
    Notification,
    NotificationType,
    TabState,
)

StoreListener = Callable[["StoreEvent"], None]

_TAB_FIELDS = frozenset(f.name for f in fields(TabState)) - {"tab_id"}


@dataclass
class StoreEvent:
    """A single change published by the store."""

    kind: str  # tab_added, tab_removed, tab_selected, tab_updated, notification, overlay_*
    tab_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class Overlay:
    overlay_id: str
    kind: str
    data: Any = None


def generate_tab_id() -> str:
    return uuid.uuid4().hex


class TabStore:
    """Tab registry plus the notification and overlay surfaces of the panel."""

    def __init__(self, max_tabs: int = MAX_TABS) -> None:
        self.max_tabs = max_tabs
        self._tabs: dict[str, TabState] = {}
        self._selected_tab_id: str | None = None
        self._listeners: list[StoreListener] = []
        self.notifications: list[Notification] = []
        self.overlays: dict[str, Overlay] = {}

    # -- subscription ---------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register *listener* for store events; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, kind: str, tab_id: str | None = None, **data: Any) -> None:
        event = StoreEvent(kind=kind, tab_id=tab_id, data=data)
        for listener in list(self._listeners):
            listener(event)

    # -- tab lifecycle --------------------------------------------------------

    @property
    def tab_count(self) -> int:
        return len(self._tabs)

    def has_capacity(self) -> bool:
        return len(self._tabs) < self.max_tabs

    def add_tab(
        self,
        initial: dict[str, Any] | None = None,
        tab_id: str | None = None,
        select: bool = True,
    ) -> str | None:
        """Register a new tab seeded with *initial* fields.

        Returns the new tab id, or ``None`` when the live-tab cap is reached.
        Nothing is modified in the ``None`` case.
        """
        if not self.has_capacity():
            logger.debug("tab cap of %d reached, refusing new tab", self.max_tabs)
            return None
        tab_id = tab_id or generate_tab_id()
        if tab_id in self._tabs:
            raise ValueError(f"Tab already exists: {tab_id}")
        tab = TabState(tab_id=tab_id)
        self._tabs[tab_id] = tab
        self._apply(tab, initial or {})
        self._publish("tab_added", tab_id)
        if select or self._selected_tab_id is None:
            self.select_tab(tab_id)
        return tab_id

    def remove_tab(self, tab_id: str) -> None:
        """Drop a tab; a neighbour becomes selected if it was the selected one."""
        if tab_id not in self._tabs:
            return
        order = list(self._tabs)
        index = order.index(tab_id)
        del self._tabs[tab_id]
        self._publish("tab_removed", tab_id)
        if self._selected_tab_id == tab_id:
            self._selected_tab_id = None
            remaining = list(self._tabs)
            if remaining:
                self.select_tab(remaining[min(index, len(remaining) - 1)])

    def select_tab(self, tab_id: str) -> None:
        if tab_id not in self._tabs:
            raise KeyError(tab_id)
        self._selected_tab_id = tab_id
        self._publish("tab_selected", tab_id)

    def get_selected_tab_id(self) -> str | None:
        return self._selected_tab_id

    def get_tab(self, tab_id: str) -> TabState | None:
        return self._tabs.get(tab_id)

    def get_all_tabs(self) -> dict[str, TabState]:
        return dict(self._tabs)

    def __contains__(self, tab_id: object) -> bool:
        return tab_id in self._tabs

    # -- tab mutation -----------------------------------------------------------

    def _require(self, tab_id: str) -> TabState:
        tab = self._tabs.get(tab_id)
        if tab is None:
            raise KeyError(tab_id)
        return tab

    @staticmethod
    def _apply(tab: TabState, changes: dict[str, Any]) -> None:
        unknown = set(changes) - _TAB_FIELDS
        if unknown:
            raise ValueError(f"Unknown tab fields: {sorted(unknown)}")
        for key, value in changes.items():
            setattr(tab, key, value)

    def update_store(self, tab_id: str, **changes: Any) -> None:
        """Overwrite top-level tab fields."""
        tab = self._require(tab_id)
        self._apply(tab, changes)
        self._publish("tab_updated", tab_id, fields=sorted(changes))

    def add_chat_item(self, tab_id: str, item: ChatItem) -> None:
        tab = self._require(tab_id)
        tab.chat_items.append(item)
        self._publish("tab_updated", tab_id, fields=["chat_items"])

    def find_stream_item(self, tab_id: str, stream_id: str) -> ChatItem | None:
        """Return the chat item owned by *stream_id*, newest first."""
        tab = self._require(tab_id)
        for item in reversed(tab.chat_items):
            if item.stream_id == stream_id:
                return item
        return None

    def update_chat_answer(self, tab_id: str, stream_id: str, **content: Any) -> bool:
        """Rewrite content fields of the item belonging to *stream_id* in place."""
        item = self.find_stream_item(tab_id, stream_id)
        if item is None:
            return False
        for key, value in content.items():
            setattr(item, key, value)
        self._publish("tab_updated", tab_id, fields=["chat_items"], stream_id=stream_id)
        return True

    def end_message_stream(self, tab_id: str, message_id: str) -> None:
        """Mark the stream carrying *message_id* as terminal.

        The streaming item becomes a plain answer so it can never be targeted
        by a later partial update.
        """
        tab = self._require(tab_id)
        stream_id = tab.active_stream_id
        if stream_id is not None:
            item = self.find_stream_item(tab_id, stream_id)
            if item is not None:
                item.type = ChatItemType.ANSWER
        self._publish("stream_ended", tab_id, message_id=message_id, stream_id=stream_id)

    def add_to_user_prompt(self, tab_id: str, text: str, kind: str = "text") -> None:
        """Append *text* to the tab's prompt input, fencing it when it is code."""
        tab = self._require(tab_id)
        if kind == "code":
            text = f"\n```\n{text}\n```\n"
        tab.prompt_input_text += text
        self._publish("tab_updated", tab_id, fields=["prompt_input_text"])

    def show_custom_form(self, tab_id: str, form: CustomForm) -> None:
        tab = self._require(tab_id)
        tab.custom_form = form
        self._publish("tab_updated", tab_id, fields=["custom_form"])

    def close_custom_form(self, tab_id: str) -> None:
        tab = self._tabs.get(tab_id)
        if tab is None or tab.custom_form is None:
            return
        tab.custom_form = None
        self._publish("tab_updated", tab_id, fields=["custom_form"])

    # -- notices and overlays -------------------------------------------------

    def notify(
        self,
        content: str,
        type: NotificationType = NotificationType.INFO,
        title: str | None = None,
    ) -> Notification:
        """Record a non-blocking notice for the user."""
        notification = Notification(type=type, content=content, title=title)
        self.notifications.append(notification)
        logger.debug("notify [%s] %s", type.value, content)
        self._publish("notification", None, type=type.value, content=content, title=title)
        return notification

    def open_overlay(self, kind: str, data: Any = None) -> str:
        overlay_id = uuid.uuid4().hex
        self.overlays[overlay_id] = Overlay(overlay_id=overlay_id, kind=kind, data=data)
        self._publish("overlay_opened", None, overlay_id=overlay_id, kind=kind)
        return overlay_id

    def update_overlay(self, overlay_id: str, data: Any) -> None:
        overlay = self.overlays.get(overlay_id)
        if overlay is None:
            raise KeyError(overlay_id)
        overlay.data = data
        self._publish("overlay_updated", None, overlay_id=overlay_id, kind=overlay.kind)

    def close_overlay(self, overlay_id: str) -> None:
        overlay = self.overlays.pop(overlay_id, None)
        if overlay is not None:
            self._publish("overlay_closed", None, overlay_id=overlay_id, kind=overlay.kind)
