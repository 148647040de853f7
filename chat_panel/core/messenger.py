"""Outbound messages from the panel to the backend channel.

Each method builds one ``{"command": ..., "params": ...}`` message and
hands it to the ``send`` callable supplied by the transport.  The messenger
never waits on the transport.
"""

from __future__ import annotations

from typing import Any, Callable

from ..log import logger
from .models import ChatPrompt, FollowUpOption, TriggerType, to_dict

SendFn = Callable[[dict[str, Any]], None]


class Messenger:
    """Thin, stateless encoder for every outbound backend message."""

    def __init__(self, send: SendFn) -> None:
        self._send = send

    def _post(self, command: str, **params: Any) -> None:
        logger.debug("outbound %s", command)
        self._send({"command": command, "params": params})

    # -- lifecycle --------------------------------------------------------------

    def on_ui_ready(self) -> None:
        self._post("ui_ready")

    def on_tab_add(self, tab_id: str) -> None:
        self._post("tab_add", tab_id=tab_id)

    def on_tab_remove(self, tab_id: str) -> None:
        self._post("tab_remove", tab_id=tab_id)

    def on_tab_change(self, tab_id: str) -> None:
        self._post("tab_change", tab_id=tab_id)

    def on_focus_state_changed(self, focused: bool) -> None:
        self._post("focus_state_changed", focused=focused)

    # -- prompts ----------------------------------------------------------------

    def on_chat_prompt(
        self,
        tab_id: str,
        prompt: ChatPrompt,
        trigger_type: TriggerType | None = None,
        request: dict[str, Any] | None = None,
    ) -> None:
        self._post(
            "chat_prompt",
            tab_id=tab_id,
            prompt=to_dict(prompt),
            trigger_type=trigger_type.value if trigger_type else None,
            request=request,
        )

    def on_quick_action_command(self, tab_id: str, quick_action: str, prompt: str | None) -> None:
        self._post("quick_action_command", tab_id=tab_id, quick_action=quick_action, prompt=prompt)

    def on_follow_up_clicked(
        self, tab_id: str, message_id: str | None, follow_up: FollowUpOption
    ) -> None:
        self._post(
            "follow_up_click",
            tab_id=tab_id,
            message_id=message_id,
            follow_up=to_dict(follow_up),
        )

    def on_auth_follow_up_clicked(
        self, tab_id: str, message_id: str | None, auth_follow_up_type: str
    ) -> None:
        self._post(
            "auth_follow_up_click",
            tab_id=tab_id,
            message_id=message_id,
            auth_follow_up_type=auth_follow_up_type,
        )

    def on_send_to_prompt(self, tab_id: str, selection: str, trigger_type: TriggerType | None) -> None:
        self._post(
            "send_to_prompt",
            tab_id=tab_id,
            selection=selection,
            trigger_type=trigger_type.value if trigger_type else None,
        )

    # -- code and telemetry -----------------------------------------------------

    def on_insert_to_cursor_position(self, **params: Any) -> None:
        self._post("insert_to_cursor_position", **params)

    def on_copy_code_to_clipboard(self, **params: Any) -> None:
        self._post("copy_to_clipboard", **params)

    def on_vote(self, tab_id: str, message_id: str, vote: str, event_id: str | None = None) -> None:
        self._post("vote", tab_id=tab_id, message_id=message_id, vote=vote, event_id=event_id)

    def on_send_feedback(
        self, tab_id: str, feedback_payload: dict[str, Any], event_id: str | None = None
    ) -> None:
        self._post("send_feedback", tab_id=tab_id, feedback_payload=feedback_payload, event_id=event_id)

    def on_link_click(self, tab_id: str, message_id: str, link: str, event_id: str | None = None) -> None:
        self._post("link_click", tab_id=tab_id, message_id=message_id, link=link, event_id=event_id)

    def on_source_link_click(
        self, tab_id: str, message_id: str, link: str, event_id: str | None = None
    ) -> None:
        self._post(
            "source_link_click", tab_id=tab_id, message_id=message_id, link=link, event_id=event_id
        )

    def on_info_link_click(self, tab_id: str, link: str, event_id: str | None = None) -> None:
        self._post("info_link_click", tab_id=tab_id, link=link, event_id=event_id)

    def on_file_click(self, tab_id: str, file_path: str) -> None:
        self._post("file_click", tab_id=tab_id, file_path=file_path)

    # -- panel features ---------------------------------------------------------

    def on_create_prompt(self, prompt_name: str) -> None:
        self._post("create_prompt", prompt_name=prompt_name)

    def on_disclaimer_acknowledged(self) -> None:
        self._post("disclaimer_acknowledged")

    def on_list_conversations(self, filter: dict[str, Any] | None = None) -> None:
        if filter:
            self._post("list_conversations", filter=filter)
        else:
            self._post("list_conversations")

    def on_conversation_click(self, item_id: str, action: str | None = None) -> None:
        self._post("conversation_click", id=item_id, action=action)

    def on_error(self, tab_id: str, title: str, message: str) -> None:
        self._post("error", tab_id=tab_id, title=title, message=message)

    def on_open_tab(self, request_id: str, result: dict[str, Any]) -> None:
        self._post("open_tab_result", request_id=request_id, result=result)
