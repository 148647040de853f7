"""Process-wide panel state shared by every handler."""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import ContextCommandGroup, CursorState, TextDocumentIdentifier


@dataclass
class PanelSession:
    """State that outlives any single tab.

    Handlers read and write this object explicitly instead of closing over
    module globals.
    """

    disclaimer_active: bool = True
    context_command_groups: list[ContextCommandGroup] | None = None
    initial_tab_id: str | None = None
    # Editor the host last reported as active
    active_document: TextDocumentIdentifier | None = None
    active_cursor_state: list[CursorState] = field(default_factory=list)
    customization_id: str | None = None
    profile_id: str | None = None
