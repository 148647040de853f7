"""UI-originated events understood by the router.

The set is closed: the router keeps one handler per class below, and
``parse_ui_event`` is the only place that turns a wire frame into one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .models import ChatPrompt, CursorState, FollowUpOption, TextDocumentIdentifier


@dataclass
class DomEvent:
    """Mouse or keyboard event whose default behaviour a handler may suppress."""

    key: str | None = None
    default_prevented: bool = False
    propagation_stopped: bool = False
    immediate_propagation_stopped: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def stop_immediate_propagation(self) -> None:
        self.immediate_propagation_stopped = True


@dataclass
class UiEvent:
    """Base class for all UI events."""


# -- lifecycle ---------------------------------------------------------------------


@dataclass
class Ready(UiEvent):
    pass


@dataclass
class TabAdded(UiEvent):
    tab_id: str | None = None


@dataclass
class TabRemoved(UiEvent):
    tab_id: str


@dataclass
class TabChanged(UiEvent):
    tab_id: str


@dataclass
class FocusStateChanged(UiEvent):
    focused: bool


@dataclass
class ResetStore(UiEvent):
    tab_id: str


# -- prompts -------------------------------------------------------------------------


@dataclass
class ChatPromptSubmitted(UiEvent):
    tab_id: str
    prompt: ChatPrompt
    event_id: str | None = None
    text_document: TextDocumentIdentifier | None = None
    cursor_state: list[CursorState] | None = None


@dataclass
class FollowUpClicked(UiEvent):
    tab_id: str
    message_id: str | None
    follow_up: FollowUpOption
    event_id: str | None = None


# -- code blocks and telemetry -----------------------------------------------------------


@dataclass
class CodeInsertedToCursor(UiEvent):
    tab_id: str
    message_id: str
    code: str
    type: str | None = None
    reference_tracker_information: list[dict[str, Any]] | None = None
    event_id: str | None = None
    code_block_index: int | None = None
    total_code_blocks: int | None = None


@dataclass
class CodeCopiedToClipboard(CodeInsertedToCursor):
    pass


@dataclass
class Voted(UiEvent):
    tab_id: str
    message_id: str
    vote: str  # "upvote" or "downvote"
    event_id: str | None = None


@dataclass
class FeedbackSent(UiEvent):
    tab_id: str
    feedback_payload: dict[str, Any]
    event_id: str | None = None


@dataclass
class LinkClicked(UiEvent):
    tab_id: str
    message_id: str
    link: str
    mouse_event: DomEvent | None = None
    event_id: str | None = None


@dataclass
class SourceLinkClicked(LinkClicked):
    pass


@dataclass
class InfoLinkClicked(UiEvent):
    tab_id: str
    link: str
    mouse_event: DomEvent | None = None
    event_id: str | None = None


@dataclass
class FileClicked(UiEvent):
    tab_id: str
    file_path: str


# -- panel features ------------------------------------------------------------------------


@dataclass
class InBodyButtonClicked(UiEvent):
    tab_id: str
    message_id: str | None
    action_id: str
    event_id: str | None = None


@dataclass
class ContextSelected(UiEvent):
    tab_id: str
    context_item_id: str | None
    command: str = ""


@dataclass
class CustomFormAction(UiEvent):
    tab_id: str
    action_id: str
    form_item_values: dict[str, str] = field(default_factory=dict)


@dataclass
class FormTextualItemKeyPress(UiEvent):
    tab_id: str
    item_id: str
    key_event: DomEvent
    form_data: dict[str, str] = field(default_factory=dict)


@dataclass
class TabBarButtonClicked(UiEvent):
    tab_id: str
    button_id: str


@dataclass
class ConversationItemClicked(UiEvent):
    item_id: str
    action: str | None = None  # None opens the conversation, "delete" removes it


@dataclass
class HistorySearchChanged(UiEvent):
    search: str


# -- wire decoding ---------------------------------------------------------------------------


def _dom_event(data: Any) -> DomEvent | None:
    if data is None:
        return None
    return DomEvent(key=data.get("key"))


def _cursor_states(data: Any) -> list[CursorState] | None:
    if not data:
        return None
    return [CursorState.from_dict(c) for c in data]


def _text_document(data: Any) -> TextDocumentIdentifier | None:
    if not data:
        return None
    return TextDocumentIdentifier(uri=data["uri"])


def parse_ui_event(frame: dict[str, Any]) -> UiEvent:
    """Decode a ``{"event": name, ...}`` frame; raises ``ValueError`` when unknown."""
    name = frame.get("event", "")
    f = frame
    builders: dict[str, Any] = {
        "ready": lambda: Ready(),
        "tab_add": lambda: TabAdded(tab_id=f.get("tab_id")),
        "tab_remove": lambda: TabRemoved(tab_id=f["tab_id"]),
        "tab_change": lambda: TabChanged(tab_id=f["tab_id"]),
        "focus_state_changed": lambda: FocusStateChanged(focused=bool(f.get("focused"))),
        "reset_store": lambda: ResetStore(tab_id=f["tab_id"]),
        "chat_prompt": lambda: ChatPromptSubmitted(
            tab_id=f["tab_id"],
            prompt=ChatPrompt.from_dict(f.get("prompt") or {}),
            event_id=f.get("event_id"),
            text_document=_text_document(f.get("text_document")),
            cursor_state=_cursor_states(f.get("cursor_state")),
        ),
        "follow_up_click": lambda: FollowUpClicked(
            tab_id=f["tab_id"],
            message_id=f.get("message_id"),
            follow_up=FollowUpOption.from_dict(f.get("follow_up") or {}),
            event_id=f.get("event_id"),
        ),
        "code_insert_to_cursor": lambda: CodeInsertedToCursor(
            tab_id=f["tab_id"],
            message_id=f["message_id"],
            code=f.get("code", ""),
            type=f.get("type"),
            reference_tracker_information=f.get("reference_tracker_information"),
            event_id=f.get("event_id"),
            code_block_index=f.get("code_block_index"),
            total_code_blocks=f.get("total_code_blocks"),
        ),
        "copy_code_to_clipboard": lambda: CodeCopiedToClipboard(
            tab_id=f["tab_id"],
            message_id=f["message_id"],
            code=f.get("code", ""),
            type=f.get("type"),
            reference_tracker_information=f.get("reference_tracker_information"),
            event_id=f.get("event_id"),
            code_block_index=f.get("code_block_index"),
            total_code_blocks=f.get("total_code_blocks"),
        ),
        "vote": lambda: Voted(
            tab_id=f["tab_id"], message_id=f["message_id"], vote=f["vote"],
            event_id=f.get("event_id"),
        ),
        "send_feedback": lambda: FeedbackSent(
            tab_id=f["tab_id"], feedback_payload=f.get("feedback_payload") or {},
            event_id=f.get("event_id"),
        ),
        "link_click": lambda: LinkClicked(
            tab_id=f["tab_id"], message_id=f["message_id"], link=f["link"],
            mouse_event=_dom_event(f.get("mouse_event")), event_id=f.get("event_id"),
        ),
        "source_link_click": lambda: SourceLinkClicked(
            tab_id=f["tab_id"], message_id=f["message_id"], link=f["link"],
            mouse_event=_dom_event(f.get("mouse_event")), event_id=f.get("event_id"),
        ),
        "info_link_click": lambda: InfoLinkClicked(
            tab_id=f["tab_id"], link=f["link"],
            mouse_event=_dom_event(f.get("mouse_event")), event_id=f.get("event_id"),
        ),
        "file_click": lambda: FileClicked(tab_id=f["tab_id"], file_path=f["file_path"]),
        "in_body_button_click": lambda: InBodyButtonClicked(
            tab_id=f["tab_id"], message_id=f.get("message_id"), action_id=f["action_id"],
            event_id=f.get("event_id"),
        ),
        "context_selected": lambda: ContextSelected(
            tab_id=f["tab_id"], context_item_id=f.get("context_item_id"),
            command=f.get("command", ""),
        ),
        "custom_form_action": lambda: CustomFormAction(
            tab_id=f["tab_id"], action_id=f["action_id"],
            form_item_values=f.get("form_item_values") or {},
        ),
        "form_key_press": lambda: FormTextualItemKeyPress(
            tab_id=f["tab_id"], item_id=f["item_id"],
            key_event=_dom_event(f.get("key_event") or {}) or DomEvent(),
            form_data=f.get("form_data") or {},
        ),
        "tab_bar_button_click": lambda: TabBarButtonClicked(
            tab_id=f["tab_id"], button_id=f["button_id"],
        ),
        "conversation_item_click": lambda: ConversationItemClicked(
            item_id=f["item_id"], action=f.get("action"),
        ),
        "history_search": lambda: HistorySearchChanged(search=f.get("search", "")),
    }
    builder = builders.get(name)
    if builder is None:
        raise ValueError(f"Unknown UI event: {name!r}")
    try:
        return builder()
    except KeyError as exc:
        raise ValueError(f"UI event {name!r} is missing field {exc}") from exc
    except (TypeError, AttributeError) as exc:
        raise ValueError(f"UI event {name!r} is malformed: {exc}") from exc
