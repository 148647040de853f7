"""Assembled panel controller and the API the host calls into."""

from __future__ import annotations

from typing import Any

from ..log import logger
from .constants import UI_TEXTS
from .context_commands import to_context_command_groups
from .events import UiEvent
from .history import ChatHistoryList
from .messenger import Messenger, SendFn
from .models import (
    ChatItem,
    ChatItemType,
    ChatMessage,
    ChatPrompt,
    ChatResult,
    ContextCommandGroup,
    ConversationItemGroup,
    CursorState,
    NotificationType,
    TabState,
    TextDocumentIdentifier,
    TriggerType,
)
from .router import EventRouter, Interceptor
from .session import PanelSession
from .streaming import StreamingResponseMerger
from .tab_factory import TabFactory
from .tab_store import TabStore
from .trigger_context import TriggerContextBuilder
from .workspace import Workspace


class ChatClient:
    """Owns the tab store and wires the router, merger and history list to it.

    The host talks to the panel through the public methods below; UI events
    go through ``dispatch``.  Outbound backend messages leave through *send*.
    """

    def __init__(
        self,
        send: SendFn,
        disclaimer_acknowledged: bool = False,
        workspace: Workspace | None = None,
        tab_factory: TabFactory | None = None,
        store: TabStore | None = None,
        customization_id: str | None = None,
        profile_id: str | None = None,
    ) -> None:
        self.store = store or TabStore()
        self.messenger = Messenger(send)
        self.session = PanelSession(
            disclaimer_active=not disclaimer_acknowledged,
            customization_id=customization_id,
            profile_id=profile_id,
        )
        self.tab_factory = tab_factory or TabFactory()
        self.history = ChatHistoryList(self.store, self.messenger)
        self.merger = StreamingResponseMerger(self.store)
        self.router = EventRouter(
            self.store,
            self.messenger,
            self.session,
            self.tab_factory,
            self.history,
            request_builder=TriggerContextBuilder(workspace) if workspace is not None else None,
        )
        self.session.initial_tab_id = self.store.add_tab(
            self.tab_factory.create_tab(True, self.session.disclaimer_active)
        )

    # -- UI side ------------------------------------------------------------------

    async def dispatch(self, event: UiEvent) -> Any:
        return await self.router.dispatch(event)

    def use(self, interceptor: Interceptor) -> None:
        self.router.use(interceptor)

    # -- tabs ---------------------------------------------------------------------

    def get_tab(self, tab_id: str | None = None) -> TabState | None:
        tab_id = tab_id or self.store.get_selected_tab_id()
        return self.store.get_tab(tab_id) if tab_id else None

    def create_tab(
        self,
        need_welcome_messages: bool = False,
        chat_messages: list[ChatMessage] | None = None,
    ) -> str | None:
        """Open a new selected tab, or notify and return ``None`` at the cap."""
        tab_id = self.store.add_tab(
            self.tab_factory.create_tab(
                need_welcome_messages, self.session.disclaimer_active, chat_messages
            )
        )
        if tab_id is None:
            self.store.notify(UI_TEXTS["no_more_tabs_tooltip"], type=NotificationType.WARNING)
            return None
        if self.session.context_command_groups is not None:
            self.store.update_store(tab_id, context_commands=self.session.context_command_groups)
        return tab_id

    def get_or_create_tab_id(self) -> str | None:
        return self.store.get_selected_tab_id() or self.create_tab()

    # -- inbound API --------------------------------------------------------------

    def add_chat_response(
        self,
        result: ChatResult,
        tab_id: str,
        is_partial: bool,
        stream_id: str | None = None,
    ) -> None:
        self.merger.add_chat_response(result, tab_id, is_partial, stream_id)

    def send_to_prompt(self, selection: str, trigger_type: TriggerType | None = None) -> None:
        """Push an editor selection into the prompt input of the current tab."""
        tab_id = self.get_or_create_tab_id()
        if not tab_id:
            return
        self.store.add_to_user_prompt(tab_id, selection, "code")
        self.messenger.on_send_to_prompt(tab_id, selection, trigger_type)

    async def send_generic_command(
        self,
        generic_command: str,
        selection: str,
        trigger_type: TriggerType | None = None,
    ) -> None:
        """Ask about *selection*; a busy tab sends the question to a new tab."""
        tab_id = self.get_or_create_tab_id()
        if not tab_id:
            return
        tab = self.store.get_tab(tab_id)
        if tab is not None and tab.loading_chat:
            tab_id = self.create_tab()
            if not tab_id:
                return
        body = f"{generic_command} the following part of my code:\n~~~~\n{selection}\n~~~~\n"
        await self.router.handle_chat_prompt(
            tab_id, ChatPrompt(prompt=body, escaped_prompt=body), trigger_type
        )

    def show_error(self, title: str, message: str, tab_id: str | None = None) -> None:
        """Show an error answer and release the tab from its loading state."""
        target = tab_id if tab_id and tab_id in self.store else self.get_or_create_tab_id()
        if not target:
            return
        if self.store.get_tab(target).active_stream_id is not None:
            self.store.end_message_stream(target, "")
        self.store.update_store(
            target,
            active_stream_id=None,
            loading_chat=False,
            prompt_input_disabled=False,
        )
        self.store.add_chat_item(
            target, ChatItem(type=ChatItemType.ANSWER, body=f"**{title}** \n{message}")
        )
        self.messenger.on_error(target, title, message)

    def open_tab(
        self,
        request_id: str,
        tab_id: str | None = None,
        chat_messages: list[ChatMessage] | None = None,
    ) -> None:
        """Select an existing tab or open one seeded with *chat_messages*."""
        if tab_id:
            if tab_id != self.store.get_selected_tab_id() and tab_id in self.store:
                self.store.select_tab(tab_id)
            self.messenger.on_open_tab(request_id, {"tab_id": tab_id})
            return
        new_tab_id = self.create_tab(
            need_welcome_messages=not chat_messages, chat_messages=chat_messages
        )
        if new_tab_id:
            self.messenger.on_open_tab(request_id, {"tab_id": new_tab_id})
        else:
            self.messenger.on_open_tab(
                request_id,
                {"type": "InvalidRequest", "message": UI_TEXTS["no_more_tabs_error"]},
            )

    def send_context_commands(self, groups: list[ContextCommandGroup]) -> None:
        """Replace the global context commands and push them to every tab."""
        self.session.context_command_groups = to_context_command_groups(groups)
        for tab_id in self.store.get_all_tabs():
            self.store.update_store(tab_id, context_commands=self.session.context_command_groups)

    def list_conversations(
        self, groups: list[ConversationItemGroup], header: dict[str, Any] | None = None
    ) -> None:
        self.history.show(groups, header)

    def conversation_clicked(self, success: bool, action: str | None = None) -> None:
        self.history.on_click_result(success, action)

    def set_active_editor(
        self, uri: str | None, cursor_state: list[CursorState] | None = None
    ) -> None:
        """Remember the document prompts should be anchored to by default."""
        self.session.active_document = TextDocumentIdentifier(uri=uri) if uri else None
        self.session.active_cursor_state = list(cursor_state or [])
        logger.debug("active editor set to %s", uri)
