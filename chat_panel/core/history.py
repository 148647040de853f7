"""Conversation history overlay.

Only one history overlay exists at a time.  After a successful delete the
list is fetched again rather than edited locally, so the overlay shows
stale entries until the refreshed list arrives.
"""

from __future__ import annotations

from typing import Any

from .constants import UI_TEXTS
from .messenger import Messenger
from .models import ConversationItemGroup, NotificationType, to_dict
from .tab_store import TabStore

HISTORY_OVERLAY = "history"


class ChatHistoryList:
    """Controller for the singleton history overlay."""

    def __init__(self, store: TabStore, messenger: Messenger) -> None:
        self._store = store
        self._messenger = messenger
        self._overlay_id: str | None = None

    @property
    def is_open(self) -> bool:
        return self._overlay_id is not None and self._overlay_id in self._store.overlays

    def show(self, groups: list[ConversationItemGroup], header: dict[str, Any] | None = None) -> None:
        """Render *groups*, replacing the contents of an already open overlay."""
        data = {
            "title": UI_TEXTS["history_title"],
            "search_placeholder": UI_TEXTS["history_search_placeholder"],
            "header": header,
            "groups": to_dict(groups),
        }
        if self.is_open:
            self._store.update_overlay(self._overlay_id, data)
        else:
            self._overlay_id = self._store.open_overlay(HISTORY_OVERLAY, data)

    def close(self) -> None:
        if self._overlay_id is not None:
            self._store.close_overlay(self._overlay_id)
            self._overlay_id = None

    def on_item_action(self, item_id: str, action: str | None = None) -> None:
        self._messenger.on_conversation_click(item_id, action)

    def on_search(self, search: str) -> None:
        self._messenger.on_list_conversations(filter={"search": search} if search else None)

    def on_click_result(self, success: bool, action: str | None = None) -> None:
        """React to the backend's answer for an open or delete request."""
        if not success:
            self._store.notify(
                f"Failed to {action or 'open'} the history",
                type=NotificationType.ERROR,
            )
            return
        if not action:
            self.close()
            return
        if action == "delete":
            self._messenger.on_list_conversations()
