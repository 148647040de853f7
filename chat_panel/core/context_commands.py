"""Translate backend context-command trees into the panel's command schema."""

from __future__ import annotations

from dataclasses import replace
from enum import Enum

from .models import ContextCommand, ContextCommandGroup


class UiIcon(str, Enum):
    """Icons the panel knows how to draw."""

    AT = "at"
    BLOCK = "block"
    CODE_BLOCK = "code-block"
    COMMENT = "comment"
    FILE = "file"
    FOLDER = "folder"
    HELP = "help"
    LIST_ADD = "list-add"
    MAGIC = "magic"
    SEARCH = "search"
    TRASH = "trash"


def to_ui_icon(icon: object) -> UiIcon | None:
    """Map an abstract icon identifier to a ``UiIcon``; unknown icons map to ``None``."""
    if icon is None:
        return None
    if isinstance(icon, UiIcon):
        return icon
    try:
        return UiIcon(str(icon))
    except ValueError:
        return None


def to_context_commands(commands: list[ContextCommand]) -> list[ContextCommand]:
    """Return translated copies of *commands*; the input is left untouched."""
    return [
        replace(
            command,
            icon=to_ui_icon(command.icon),
            route=list(command.route) if command.route is not None else None,
            children=(
                to_context_command_groups(command.children)
                if command.children is not None
                else None
            ),
        )
        for command in commands
    ]


def to_context_command_groups(groups: list[ContextCommandGroup]) -> list[ContextCommandGroup]:
    return [replace(group, commands=to_context_commands(group.commands)) for group in groups]
