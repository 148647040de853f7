"""Merge streamed backend results into the tab that asked for them.

Each tab is either idle or streaming.  A tab is streaming while it has an
``active_stream_id``; partial results rewrite the chat item owned by that
stream in place and the final result closes it.  Results are addressed by
tab id (and optionally stream id), so answers for different tabs can
interleave freely.
"""

from __future__ import annotations

from typing import Any

from ..log import logger
from .constants import AUTH_FOLLOW_UP_TYPES, DEFAULT_FOLLOW_UP_TEXT, UI_TEXTS
from .models import (
    ChatItem,
    ChatItemType,
    ChatResult,
    ContextList,
    FileDetails,
    FileListHeader,
    FollowUp,
    LineRange,
    TabState,
)
from .tab_store import TabStore


def line_range_label(line_range: LineRange) -> str:
    """``line A - line B``, or an empty label when a bound is unknown (-1)."""
    if line_range.first == -1 or line_range.second == -1:
        return ""
    return f"line {line_range.first} - line {line_range.second}"


def build_file_list_header(context_list: ContextList) -> FileListHeader:
    details = {
        path: FileDetails(
            label=", ".join(line_range_label(r) for r in ranges),
            description=path,
            clickable=True,
        )
        for path, ranges in context_list.details.items()
    }
    return FileListHeader(
        file_paths=list(context_list.file_paths),
        details=details,
        root_folder_title=UI_TEXTS["context_root_title"],
    )


def is_auth_follow_up(result: ChatResult) -> bool:
    options = result.follow_up.options if result.follow_up else []
    return bool(options) and options[0].type in AUTH_FOLLOW_UP_TYPES


class StreamingResponseMerger:
    """Applies ``add_chat_response`` calls to the tab store."""

    def __init__(self, store: TabStore) -> None:
        self._store = store

    def _target_stream(self, tab: TabState, stream_id: str | None) -> str | None:
        active = tab.active_stream_id
        if active is None:
            logger.debug("dropping result for idle tab %s", tab.tab_id)
            return None
        if stream_id is not None and stream_id != active:
            logger.debug("dropping result for stale stream %s in tab %s", stream_id, tab.tab_id)
            return None
        return active

    @staticmethod
    def _content(result: ChatResult) -> dict[str, Any]:
        content: dict[str, Any] = {}
        if result.context_list is not None:
            content["header"] = build_file_list_header(result.context_list)
        for key in ("body", "message_id", "follow_up", "related_content", "can_be_voted"):
            value = getattr(result, key)
            if value is not None:
                content[key] = value
        return content

    def add_chat_response(
        self,
        result: ChatResult,
        tab_id: str,
        is_partial: bool,
        stream_id: str | None = None,
    ) -> None:
        tab = self._store.get_tab(tab_id)
        if tab is None:
            logger.debug("dropping result for unknown tab %s", tab_id)
            return

        if is_partial:
            target = self._target_stream(tab, stream_id)
            content = self._content(result)
            if target is not None and content:
                self._store.update_chat_answer(tab_id, target, **content)
            return

        if result.is_empty():
            return

        if result.body == "" and is_auth_follow_up(result):
            # Input stays enabled so the user can retry after authenticating
            self._store.add_chat_item(
                tab_id, ChatItem(type=ChatItemType.SYSTEM_PROMPT, **self._content(result))
            )
            return

        if stream_id is not None and stream_id != tab.active_stream_id:
            logger.debug("dropping final result for stale stream %s in tab %s", stream_id, tab_id)
            return

        target = self._target_stream(tab, stream_id)
        if target is not None:
            content = self._content(result)
            if result.follow_up is not None:
                content["follow_up"] = FollowUp(
                    text=result.follow_up.text or DEFAULT_FOLLOW_UP_TEXT,
                    options=result.follow_up.options,
                )
            self._store.update_chat_answer(tab_id, target, **content)
            self._store.end_message_stream(tab_id, result.message_id or "")

        self._store.update_store(
            tab_id,
            active_stream_id=None,
            loading_chat=False,
            prompt_input_disabled=False,
        )
