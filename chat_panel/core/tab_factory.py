"""Seed data for newly created tabs."""

from __future__ import annotations

from typing import Any

from .constants import (
    DEFAULT_QUICK_ACTIONS,
    DISCLAIMER_ACKNOWLEDGE_BUTTON_ID,
    DISCLAIMER_TEXT,
    UI_TEXTS,
)
from .models import ChatItem, ChatItemType, ChatMessage


def disclaimer_card() -> ChatItem:
    """Sticky notice shown above the prompt input until acknowledged."""
    return ChatItem(
        type=ChatItemType.ANSWER,
        body=DISCLAIMER_TEXT,
        message_id=DISCLAIMER_ACKNOWLEDGE_BUTTON_ID,
    )


def welcome_message() -> ChatItem:
    return ChatItem(type=ChatItemType.ANSWER, body=UI_TEXTS["welcome"])


def chat_message_to_item(message: ChatMessage) -> ChatItem:
    """Convert a stored conversation message into a rendered chat item."""
    item_type = ChatItemType.PROMPT if message.type == "prompt" else ChatItemType.ANSWER
    return ChatItem(
        type=item_type,
        body=message.body,
        message_id=message.message_id,
        follow_up=message.follow_up,
        related_content=message.related_content,
        can_be_voted=message.can_be_voted,
    )


class TabFactory:
    """Builds the initial field set of a tab."""

    def __init__(
        self,
        quick_action_commands: list[dict[str, Any]] | None = None,
        show_welcome: bool = True,
    ) -> None:
        self.quick_action_commands = (
            quick_action_commands
            if quick_action_commands is not None
            else [dict(cmd) for cmd in DEFAULT_QUICK_ACTIONS]
        )
        self.show_welcome = show_welcome

    def get_default_tab_data(self) -> dict[str, Any]:
        return {"quick_action_commands": [dict(cmd) for cmd in self.quick_action_commands]}

    def create_tab(
        self,
        need_welcome_messages: bool,
        show_disclaimer: bool,
        chat_messages: list[ChatMessage] | None = None,
    ) -> dict[str, Any]:
        """Return the seed fields for a tab.

        Seed messages, when given, replace the welcome message.
        """
        if chat_messages:
            items = [chat_message_to_item(m) for m in chat_messages]
        elif need_welcome_messages and self.show_welcome:
            items = [welcome_message()]
        else:
            items = []
        seed = self.get_default_tab_data()
        seed["chat_items"] = items
        if show_disclaimer:
            seed["prompt_input_sticky_card"] = disclaimer_card()
        return seed
