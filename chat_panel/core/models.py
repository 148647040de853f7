"""Data models shared by the panel store, router and context builder."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class ChatItemType(str, Enum):
    PROMPT = "prompt"
    ANSWER = "answer"
    ANSWER_STREAM = "answer-stream"
    SYSTEM_PROMPT = "system-prompt"


class NotificationType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class TriggerType(str, Enum):
    """How the user started a prompt."""

    CLICK = "click"
    HOTKEYS = "hotkeys"
    CONTEXT_MENU = "contextMenu"


class ChatTriggerType(str, Enum):
    MANUAL = "MANUAL"
    DIAGNOSTIC = "DIAGNOSTIC"
    INLINE_CHAT = "INLINE_CHAT"


class UserIntent(str, Enum):
    """Coarse intent attached to an outbound prompt."""

    EXPLAIN_CODE_SELECTION = "EXPLAIN_CODE_SELECTION"
    SUGGEST_ALTERNATE_IMPLEMENTATION = "SUGGEST_ALTERNATE_IMPLEMENTATION"
    APPLY_COMMON_BEST_PRACTICES = "APPLY_COMMON_BEST_PRACTICES"
    IMPROVE_CODE = "IMPROVE_CODE"


def to_dict(obj: Any) -> Any:
    """Convert a model (or list of models) into JSON-ready data."""
    if isinstance(obj, list):
        return [to_dict(o) for o in obj]
    if obj is None:
        return None
    return asdict(obj)


# -- Chat items ----------------------------------------------------------------


@dataclass
class FollowUpOption:
    pill_text: str = ""
    prompt: str | None = None
    type: str | None = None
    description: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FollowUpOption:
        return cls(
            pill_text=str(data.get("pill_text", "")),
            prompt=data.get("prompt"),
            type=data.get("type"),
            description=data.get("description"),
        )


@dataclass
class FollowUp:
    text: str | None = None
    options: list[FollowUpOption] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FollowUp:
        return cls(
            text=data.get("text"),
            options=[FollowUpOption.from_dict(o) for o in data.get("options") or []],
        )


@dataclass
class SourceLink:
    title: str
    url: str
    body: str | None = None


@dataclass
class RelatedContent:
    title: str | None = None
    content: list[SourceLink] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RelatedContent:
        return cls(
            title=data.get("title"),
            content=[
                SourceLink(title=c.get("title", ""), url=c.get("url", ""), body=c.get("body"))
                for c in data.get("content") or []
            ],
        )


@dataclass
class FileDetails:
    label: str = ""
    description: str = ""
    clickable: bool = True


@dataclass
class FileListHeader:
    """Collapsed file-tree header listing the files used as context."""

    file_paths: list[str] = field(default_factory=list)
    details: dict[str, FileDetails] = field(default_factory=dict)
    file_tree_title: str = ""
    root_folder_title: str = "Context"
    flat_list: bool = True
    collapsed: bool = True
    hide_file_count: bool = True


@dataclass
class ChatItem:
    """One rendered conversation entry."""

    type: ChatItemType
    body: str | None = None
    header: FileListHeader | None = None
    follow_up: FollowUp | None = None
    related_content: RelatedContent | None = None
    message_id: str | None = None
    can_be_voted: bool | None = None
    stream_id: str | None = None


@dataclass
class ChatMessage:
    """A stored conversation message used to seed a restored tab."""

    type: str = "answer"  # "prompt" or "answer"
    body: str = ""
    message_id: str | None = None
    follow_up: FollowUp | None = None
    related_content: RelatedContent | None = None
    can_be_voted: bool | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatMessage:
        follow_up = data.get("follow_up")
        related = data.get("related_content")
        return cls(
            type=data.get("type", "answer"),
            body=data.get("body") or "",
            message_id=data.get("message_id"),
            follow_up=FollowUp.from_dict(follow_up) if follow_up else None,
            related_content=RelatedContent.from_dict(related) if related else None,
            can_be_voted=data.get("can_be_voted"),
        )


# -- Backend results -------------------------------------------------------------


@dataclass
class LineRange:
    first: int
    second: int


@dataclass
class ContextList:
    file_paths: list[str] = field(default_factory=list)
    # file path -> inclusive line ranges; -1 marks an unknown bound
    details: dict[str, list[LineRange]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContextList:
        details: dict[str, list[LineRange]] = {}
        for path, info in (data.get("details") or {}).items():
            ranges = (info or {}).get("line_ranges") or []
            details[path] = [LineRange(int(r["first"]), int(r["second"])) for r in ranges]
        return cls(file_paths=list(data.get("file_paths") or []), details=details)


@dataclass
class ChatResult:
    """A full or partial answer produced by the backend."""

    body: str | None = None
    message_id: str | None = None
    follow_up: FollowUp | None = None
    related_content: RelatedContent | None = None
    can_be_voted: bool | None = None
    context_list: ContextList | None = None
    type: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatResult:
        follow_up = data.get("follow_up")
        related = data.get("related_content")
        context_list = data.get("context_list")
        return cls(
            body=data.get("body"),
            message_id=data.get("message_id"),
            follow_up=FollowUp.from_dict(follow_up) if follow_up is not None else None,
            related_content=RelatedContent.from_dict(related) if related is not None else None,
            can_be_voted=data.get("can_be_voted"),
            context_list=(
                ContextList.from_dict(context_list) if context_list is not None else None
            ),
            type=data.get("type"),
        )

    def is_empty(self) -> bool:
        """True when no field was provided at all."""
        return all(value is None for value in asdict(self).values())


# -- Prompts and cursor state ------------------------------------------------------


@dataclass
class ChatPrompt:
    prompt: str | None = None
    escaped_prompt: str | None = None
    command: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatPrompt:
        return cls(
            prompt=data.get("prompt"),
            escaped_prompt=data.get("escaped_prompt"),
            command=data.get("command"),
        )


@dataclass
class Position:
    line: int = 0
    character: int = 0


@dataclass
class Range:
    start: Position
    end: Position


@dataclass
class CursorState:
    """Either a caret position or a selected range."""

    position: Position | None = None
    range: Range | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CursorState:
        if "range" in data and data["range"] is not None:
            rng = data["range"]
            return cls(
                range=Range(
                    start=Position(**rng["start"]),
                    end=Position(**rng["end"]),
                )
            )
        return cls(position=Position(**data.get("position", {})))

    def as_range(self) -> Range:
        if self.range is not None:
            return self.range
        pos = self.position or Position()
        return Range(start=Position(pos.line, pos.character), end=Position(pos.line, pos.character))


@dataclass
class TextDocumentIdentifier:
    uri: str


@dataclass
class ChatParams:
    """Everything the context builder needs to describe one prompt."""

    prompt: ChatPrompt
    tab_id: str = ""
    text_document: TextDocumentIdentifier | None = None
    cursor_state: list[CursorState] | None = None


@dataclass
class TextDocument:
    uri: str
    language_id: str
    text: str
    version: int = 0

    @property
    def lines(self) -> list[str]:
        """Lines including their terminators."""
        return self.text.splitlines(keepends=True) or [""]


@dataclass
class DocumentContext:
    cursor_state: CursorState
    text: str
    programming_language: str | None
    relative_file_path: str
    has_code_snippet: bool
    total_editor_characters: int


@dataclass
class TriggerContext:
    """Transient snapshot attached to one outbound prompt."""

    cursor_state: CursorState | None = None
    text: str | None = None
    programming_language: str | None = None
    relative_file_path: str | None = None
    has_code_snippet: bool = False
    total_editor_characters: int | None = None
    user_intent: UserIntent | None = None
    trigger_type: TriggerType | None = None


# -- Commands and history ----------------------------------------------------------


@dataclass
class ContextCommand:
    command: str
    id: str | None = None
    description: str | None = None
    placeholder: str | None = None
    icon: Any = None
    route: list[str] | None = None
    children: list[ContextCommandGroup] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContextCommand:
        children = data.get("children")
        return cls(
            command=data["command"],
            id=data.get("id"),
            description=data.get("description"),
            placeholder=data.get("placeholder"),
            icon=data.get("icon"),
            route=data.get("route"),
            children=(
                [ContextCommandGroup.from_dict(c) for c in children]
                if children is not None
                else None
            ),
        )


@dataclass
class ContextCommandGroup:
    group_name: str | None = None
    commands: list[ContextCommand] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContextCommandGroup:
        return cls(
            group_name=data.get("group_name"),
            commands=[ContextCommand.from_dict(c) for c in data.get("commands") or []],
        )


@dataclass
class ConversationItem:
    id: str
    description: str | None = None
    icon: str | None = None


@dataclass
class ConversationItemGroup:
    group_name: str | None = None
    icon: str | None = None
    items: list[ConversationItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversationItemGroup:
        return cls(
            group_name=data.get("group_name"),
            icon=data.get("icon"),
            items=[
                ConversationItem(id=i["id"], description=i.get("description"), icon=i.get("icon"))
                for i in data.get("items") or []
            ],
        )


# -- Store records -------------------------------------------------------------------


@dataclass
class Notification:
    type: NotificationType
    content: str
    title: str | None = None


@dataclass
class CustomForm:
    title: str
    items: list[dict[str, Any]] = field(default_factory=list)
    buttons: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class TabState:
    """Observable state of one conversation tab."""

    tab_id: str
    chat_items: list[ChatItem] = field(default_factory=list)
    loading_chat: bool = False
    prompt_input_disabled: bool = False
    prompt_input_sticky_card: ChatItem | None = None
    prompt_input_text: str = ""
    quick_action_commands: list[dict[str, Any]] = field(default_factory=list)
    context_commands: list[ContextCommandGroup] | None = None
    # Stream id of the answer currently receiving partial updates
    active_stream_id: str | None = None
    custom_form: CustomForm | None = None
