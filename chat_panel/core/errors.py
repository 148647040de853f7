"""Exceptions raised by the panel core."""

from __future__ import annotations


class ChatPanelError(Exception):
    """Base class for chat panel errors."""


class UnhandledTabBarButtonError(ChatPanelError):
    """A tab bar button id reached the router that no handler knows.

    This signals a contract violation between the UI and the router and is
    never caught inside the core.
    """

    def __init__(self, button_id: str) -> None:
        super().__init__(f"Unhandled tab bar button id: {button_id}")
        self.button_id = button_id
