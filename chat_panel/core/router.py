"""Route UI events to store mutations and outbound backend messages.

Every ``UiEvent`` class has exactly one handler in the dispatch table.
Handlers apply their store mutations synchronously, then pass the
outbound message to the ``Messenger``; only the prompt path awaits anything
(the document lookup of the trigger context builder).

Interceptors registered with ``use()`` see each event first.  An
interceptor that returns a truthy value has handled the event and the
default handler is skipped.
"""

from __future__ import annotations

import inspect
import uuid
from typing import Any, Callable

from ..log import logger
from .constants import (
    AUTH_FOLLOW_UP_TYPES,
    CLEAR_COMMAND,
    CREATE_PROMPT_CANCEL_BUTTON_ID,
    CREATE_PROMPT_ITEM_ID,
    CREATE_PROMPT_SUBMIT_BUTTON_ID,
    DEFAULT_HELP_PROMPT,
    DISCLAIMER_ACKNOWLEDGE_BUTTON_ID,
    HELP_COMMAND,
    HISTORY_TAB_BAR_BUTTON_ID,
    PROMPT_NAME_FIELD_ID,
    UI_TEXTS,
)
from .errors import UnhandledTabBarButtonError
from .events import (
    ChatPromptSubmitted,
    CodeCopiedToClipboard,
    CodeInsertedToCursor,
    ContextSelected,
    ConversationItemClicked,
    CustomFormAction,
    DomEvent,
    FeedbackSent,
    FileClicked,
    FocusStateChanged,
    FollowUpClicked,
    FormTextualItemKeyPress,
    HistorySearchChanged,
    InBodyButtonClicked,
    InfoLinkClicked,
    LinkClicked,
    Ready,
    ResetStore,
    SourceLinkClicked,
    TabAdded,
    TabBarButtonClicked,
    TabChanged,
    TabRemoved,
    UiEvent,
    Voted,
)
from .history import ChatHistoryList
from .messenger import Messenger
from .models import (
    ChatItem,
    ChatItemType,
    ChatParams,
    ChatPrompt,
    ChatTriggerType,
    CursorState,
    CustomForm,
    NotificationType,
    TextDocumentIdentifier,
    TriggerType,
)
from .session import PanelSession
from .tab_factory import TabFactory, disclaimer_card
from .tab_store import TabStore
from .trigger_context import TriggerContextBuilder, build_request_payload

Interceptor = Callable[[UiEvent], Any]


def _suppress_default(event: DomEvent | None) -> None:
    if event is None:
        return
    event.prevent_default()
    event.stop_propagation()
    event.stop_immediate_propagation()


class EventRouter:
    """Dispatch table from UI events to handlers."""

    def __init__(
        self,
        store: TabStore,
        messenger: Messenger,
        session: PanelSession,
        tab_factory: TabFactory,
        history: ChatHistoryList,
        request_builder: TriggerContextBuilder | None = None,
    ) -> None:
        self._store = store
        self._messenger = messenger
        self._session = session
        self._tab_factory = tab_factory
        self._history = history
        self._request_builder = request_builder
        self._interceptors: list[Interceptor] = []
        self._handlers: dict[type[UiEvent], Callable[[Any], Any]] = {
            Ready: self._on_ready,
            TabAdded: self._on_tab_add,
            TabRemoved: self._on_tab_remove,
            TabChanged: self._on_tab_change,
            FocusStateChanged: self._on_focus_state_changed,
            ResetStore: self._on_reset_store,
            ChatPromptSubmitted: self._on_chat_prompt,
            FollowUpClicked: self._on_follow_up_clicked,
            CodeInsertedToCursor: self._on_code_insert_to_cursor,
            CodeCopiedToClipboard: self._on_copy_code_to_clipboard,
            Voted: self._on_vote,
            FeedbackSent: self._on_send_feedback,
            LinkClicked: self._on_link_click,
            SourceLinkClicked: self._on_source_link_click,
            InfoLinkClicked: self._on_info_link_click,
            FileClicked: self._on_file_click,
            InBodyButtonClicked: self._on_in_body_button_clicked,
            ContextSelected: self._on_context_selected,
            CustomFormAction: self._on_custom_form_action,
            FormTextualItemKeyPress: self._on_form_key_press,
            TabBarButtonClicked: self._on_tab_bar_button_click,
            ConversationItemClicked: self._on_conversation_item_click,
            HistorySearchChanged: self._on_history_search,
        }

    def use(self, interceptor: Interceptor) -> None:
        """Add an interceptor that runs before default handling."""
        self._interceptors.append(interceptor)

    async def dispatch(self, event: UiEvent) -> Any:
        """Run *event* through the interceptors and its handler.

        Returns the handler's result (``ContextSelected`` and
        ``FormTextualItemKeyPress`` handlers return a bool for the UI).
        """
        for interceptor in self._interceptors:
            if interceptor(event):
                logger.debug("%s handled by interceptor", type(event).__name__)
                return None
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"No handler for UI event {type(event).__name__}")
        result = handler(event)
        if inspect.isawaitable(result):
            result = await result
        return result

    # -- prompt path --------------------------------------------------------------

    async def handle_chat_prompt(
        self,
        tab_id: str,
        prompt: ChatPrompt,
        trigger_type: TriggerType | None = None,
        text_document: TextDocumentIdentifier | None = None,
        cursor_state: list[CursorState] | None = None,
    ) -> None:
        """Submit a prompt from *tab_id*.

        ``/clear`` is handled locally with no network call.  Other quick
        action commands are passed through; free text goes out as a chat
        prompt with the trigger context payload.
        """
        user_prompt = prompt.escaped_prompt
        if prompt.command:
            if prompt.command == CLEAR_COMMAND:
                self._clear_tab(tab_id)
                return
            if prompt.command == HELP_COMMAND:
                user_prompt = DEFAULT_HELP_PROMPT
            self._messenger.on_quick_action_command(tab_id, prompt.command, user_prompt)
            self._start_stream(tab_id, user_prompt)
            return

        self._start_stream(tab_id, user_prompt)
        await self._send_chat_prompt(tab_id, prompt, trigger_type, text_document, cursor_state)

    def _start_stream(self, tab_id: str, user_prompt: str | None) -> str:
        stream_id = uuid.uuid4().hex
        self._store.add_chat_item(tab_id, ChatItem(type=ChatItemType.PROMPT, body=user_prompt))
        self._store.update_store(tab_id, loading_chat=True, prompt_input_disabled=True)
        self._store.add_chat_item(
            tab_id, ChatItem(type=ChatItemType.ANSWER_STREAM, stream_id=stream_id)
        )
        self._store.update_store(tab_id, active_stream_id=stream_id)
        return stream_id

    def _clear_tab(self, tab_id: str) -> None:
        """Empty the tab; an open stream is discarded with it."""
        self._store.update_store(
            tab_id,
            chat_items=[],
            active_stream_id=None,
            loading_chat=False,
            prompt_input_disabled=False,
        )

    async def _send_chat_prompt(
        self,
        tab_id: str,
        prompt: ChatPrompt,
        trigger_type: TriggerType | None,
        text_document: TextDocumentIdentifier | None,
        cursor_state: list[CursorState] | None,
    ) -> None:
        request = None
        if self._request_builder is not None:
            # The active editor cursor only applies to the active editor document
            if text_document is None:
                text_document = self._session.active_document
                cursor_state = cursor_state or self._session.active_cursor_state
            params = ChatParams(
                prompt=prompt,
                tab_id=tab_id,
                text_document=text_document,
                cursor_state=cursor_state or None,
            )
            trigger_context = await self._request_builder.build_trigger_context(
                params, trigger_type
            )
            request = build_request_payload(
                params,
                trigger_context,
                ChatTriggerType.MANUAL,
                customization_id=self._session.customization_id,
                profile_id=self._session.profile_id,
            )
        self._messenger.on_chat_prompt(tab_id, prompt, trigger_type, request)

    async def _on_chat_prompt(self, event: ChatPromptSubmitted) -> None:
        await self.handle_chat_prompt(
            event.tab_id,
            event.prompt,
            TriggerType.CLICK,
            event.text_document,
            event.cursor_state,
        )

    async def _on_follow_up_clicked(self, event: FollowUpClicked) -> None:
        follow_up = event.follow_up
        if follow_up.type is not None and follow_up.type in AUTH_FOLLOW_UP_TYPES:
            self._messenger.on_auth_follow_up_clicked(event.tab_id, event.message_id, follow_up.type)
            self._store.update_store(event.tab_id, prompt_input_disabled=False)
            return
        text = follow_up.prompt or follow_up.pill_text
        await self.handle_chat_prompt(
            event.tab_id, ChatPrompt(prompt=text, escaped_prompt=text), TriggerType.CLICK
        )
        self._messenger.on_follow_up_clicked(event.tab_id, event.message_id, follow_up)

    # -- lifecycle ----------------------------------------------------------------

    def _on_ready(self, event: Ready) -> None:
        self._messenger.on_ui_ready()
        if self._session.initial_tab_id is not None:
            self._messenger.on_tab_add(self._session.initial_tab_id)

    def _on_tab_add(self, event: TabAdded) -> str | None:
        tab_id = event.tab_id
        if tab_id is None or tab_id not in self._store:
            tab_id = self._store.add_tab(
                self._tab_factory.create_tab(True, False), tab_id=tab_id
            )
            if tab_id is None:
                self._store.notify(UI_TEXTS["no_more_tabs_tooltip"], type=NotificationType.WARNING)
                return None
        defaults: dict[str, Any] = dict(self._tab_factory.get_default_tab_data())
        defaults["context_commands"] = self._session.context_command_groups
        if self._session.disclaimer_active:
            defaults["prompt_input_sticky_card"] = disclaimer_card()
        self._store.update_store(tab_id, **defaults)
        self._messenger.on_tab_add(tab_id)
        return tab_id

    def _on_tab_remove(self, event: TabRemoved) -> None:
        self._store.remove_tab(event.tab_id)
        self._messenger.on_tab_remove(event.tab_id)

    def _on_tab_change(self, event: TabChanged) -> None:
        if event.tab_id in self._store:
            self._store.select_tab(event.tab_id)
        self._messenger.on_tab_change(event.tab_id)

    def _on_focus_state_changed(self, event: FocusStateChanged) -> None:
        self._messenger.on_focus_state_changed(event.focused)

    def _on_reset_store(self, event: ResetStore) -> None:
        pass

    # -- pass-through telemetry ---------------------------------------------------------

    @staticmethod
    def _code_params(event: CodeInsertedToCursor) -> dict[str, Any]:
        return {
            "tab_id": event.tab_id,
            "message_id": event.message_id,
            "code": event.code,
            "type": event.type,
            "reference_tracker_information": event.reference_tracker_information,
            "event_id": event.event_id,
            "code_block_index": event.code_block_index,
            "total_code_blocks": event.total_code_blocks,
        }

    def _on_code_insert_to_cursor(self, event: CodeInsertedToCursor) -> None:
        self._messenger.on_insert_to_cursor_position(**self._code_params(event))

    def _on_copy_code_to_clipboard(self, event: CodeCopiedToClipboard) -> None:
        self._messenger.on_copy_code_to_clipboard(**self._code_params(event))

    def _on_vote(self, event: Voted) -> None:
        self._messenger.on_vote(event.tab_id, event.message_id, event.vote, event.event_id)

    def _on_send_feedback(self, event: FeedbackSent) -> None:
        self._messenger.on_send_feedback(event.tab_id, event.feedback_payload, event.event_id)
        self._store.notify(
            UI_TEXTS["feedback_sent_content"],
            type=NotificationType.INFO,
            title=UI_TEXTS["feedback_sent_title"],
        )

    def _on_link_click(self, event: LinkClicked) -> None:
        _suppress_default(event.mouse_event)
        self._messenger.on_link_click(event.tab_id, event.message_id, event.link, event.event_id)

    def _on_source_link_click(self, event: SourceLinkClicked) -> None:
        _suppress_default(event.mouse_event)
        self._messenger.on_source_link_click(
            event.tab_id, event.message_id, event.link, event.event_id
        )

    def _on_info_link_click(self, event: InfoLinkClicked) -> None:
        _suppress_default(event.mouse_event)
        self._messenger.on_info_link_click(event.tab_id, event.link, event.event_id)

    def _on_file_click(self, event: FileClicked) -> None:
        self._messenger.on_file_click(event.tab_id, event.file_path)

    # -- disclaimer, saved prompts, tab bar -------------------------------------------------

    def _on_in_body_button_clicked(self, event: InBodyButtonClicked) -> None:
        if event.action_id != DISCLAIMER_ACKNOWLEDGE_BUTTON_ID:
            return
        if not self._session.disclaimer_active:
            return
        self._session.disclaimer_active = False
        self._messenger.on_disclaimer_acknowledged()
        for tab_id in self._store.get_all_tabs():
            self._store.update_store(tab_id, prompt_input_sticky_card=None)

    def _on_context_selected(self, event: ContextSelected) -> bool:
        """Return False to stop the UI from inserting the selected item."""
        if event.context_item_id != CREATE_PROMPT_ITEM_ID:
            return True
        self._store.show_custom_form(
            event.tab_id,
            CustomForm(
                title=UI_TEXTS["create_prompt_title"],
                items=[
                    {
                        "id": PROMPT_NAME_FIELD_ID,
                        "type": "textinput",
                        "mandatory": True,
                        "auto_focus": True,
                        "title": UI_TEXTS["prompt_name_title"],
                        "placeholder": UI_TEXTS["prompt_name_placeholder"],
                        "description": UI_TEXTS["prompt_name_description"],
                    }
                ],
                buttons=[
                    {"id": CREATE_PROMPT_CANCEL_BUTTON_ID, "text": UI_TEXTS["cancel"], "status": "clear"},
                    {"id": CREATE_PROMPT_SUBMIT_BUTTON_ID, "text": UI_TEXTS["create"], "status": "main"},
                ],
            ),
        )
        return False

    def _on_custom_form_action(self, event: CustomFormAction) -> None:
        if event.action_id == CREATE_PROMPT_SUBMIT_BUTTON_ID:
            self._messenger.on_create_prompt(event.form_item_values.get(PROMPT_NAME_FIELD_ID, ""))
            self._store.close_custom_form(event.tab_id)
        elif event.action_id == CREATE_PROMPT_CANCEL_BUTTON_ID:
            self._store.close_custom_form(event.tab_id)

    def _on_form_key_press(self, event: FormTextualItemKeyPress) -> bool:
        if event.item_id != PROMPT_NAME_FIELD_ID or event.key_event.key != "Enter":
            return False
        event.key_event.prevent_default()
        self._messenger.on_create_prompt(event.form_data.get(PROMPT_NAME_FIELD_ID, ""))
        self._store.close_custom_form(event.tab_id)
        return True

    def _on_tab_bar_button_click(self, event: TabBarButtonClicked) -> None:
        if event.button_id == HISTORY_TAB_BAR_BUTTON_ID:
            self._messenger.on_list_conversations()
            return
        raise UnhandledTabBarButtonError(event.button_id)

    def _on_conversation_item_click(self, event: ConversationItemClicked) -> None:
        self._history.on_item_action(event.item_id, event.action)

    def _on_history_search(self, event: HistorySearchChanged) -> None:
        self._history.on_search(event.search)
