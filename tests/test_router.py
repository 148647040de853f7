"""Tests for chat_panel.core.router -- UI events to store and backend messages."""

from __future__ import annotations

import pytest

from chat_panel.core.client import ChatClient
from chat_panel.core.constants import (
    CREATE_PROMPT_CANCEL_BUTTON_ID,
    CREATE_PROMPT_ITEM_ID,
    CREATE_PROMPT_SUBMIT_BUTTON_ID,
    DEFAULT_HELP_PROMPT,
    DISCLAIMER_ACKNOWLEDGE_BUTTON_ID,
    HISTORY_TAB_BAR_BUTTON_ID,
    PROMPT_NAME_FIELD_ID,
)
from chat_panel.core.errors import UnhandledTabBarButtonError
from chat_panel.core.events import (
    ChatPromptSubmitted,
    CodeCopiedToClipboard,
    CodeInsertedToCursor,
    ContextSelected,
    CustomFormAction,
    DomEvent,
    FeedbackSent,
    FileClicked,
    FocusStateChanged,
    FollowUpClicked,
    FormTextualItemKeyPress,
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
    Voted,
)
from chat_panel.core.models import (
    ChatItemType,
    ChatPrompt,
    ChatResult,
    FollowUpOption,
    NotificationType,
)
from chat_panel.core.tab_store import TabStore


@pytest.fixture
def tab_id(client):
    return client.session.initial_tab_id


def _prompt(text: str, command: str | None = None) -> ChatPrompt:
    return ChatPrompt(prompt=text, escaped_prompt=text, command=command)


# -- Lifecycle ---------------------------------------------------------------------


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_ready_announces_initial_tab(self, client, sent, tab_id):
        await client.dispatch(Ready())
        assert sent == [
            {"command": "ui_ready", "params": {}},
            {"command": "tab_add", "params": {"tab_id": tab_id}},
        ]

    @pytest.mark.asyncio
    async def test_tab_add_registers_new_tab(self, client, sent):
        result = await client.dispatch(TabAdded(tab_id="t2"))
        assert result == "t2"
        tab = client.store.get_tab("t2")
        assert tab is not None
        assert tab.quick_action_commands
        assert client.store.get_selected_tab_id() == "t2"
        assert sent[-1] == {"command": "tab_add", "params": {"tab_id": "t2"}}

    @pytest.mark.asyncio
    async def test_tab_add_without_id_generates_one(self, client):
        result = await client.dispatch(TabAdded())
        assert result in client.store

    @pytest.mark.asyncio
    async def test_tab_add_at_cap_warns(self, sent):
        client = ChatClient(sent.append, disclaimer_acknowledged=True, store=TabStore(max_tabs=1))
        result = await client.dispatch(TabAdded(tab_id="extra"))
        assert result is None
        assert "extra" not in client.store
        assert client.store.notifications[-1].type == NotificationType.WARNING
        assert sent == []

    @pytest.mark.asyncio
    async def test_tab_remove(self, client, sent, tab_id):
        await client.dispatch(TabRemoved(tab_id=tab_id))
        assert tab_id not in client.store
        assert sent[-1] == {"command": "tab_remove", "params": {"tab_id": tab_id}}

    @pytest.mark.asyncio
    async def test_tab_change_selects(self, client, sent, tab_id):
        other = client.create_tab()
        await client.dispatch(TabChanged(tab_id=tab_id))
        assert client.store.get_selected_tab_id() == tab_id
        assert other != tab_id
        assert sent[-1]["command"] == "tab_change"

    @pytest.mark.asyncio
    async def test_focus_state(self, client, sent):
        await client.dispatch(FocusStateChanged(focused=True))
        assert sent == [{"command": "focus_state_changed", "params": {"focused": True}}]

    @pytest.mark.asyncio
    async def test_reset_store_is_a_no_op(self, client, sent, tab_id):
        before = list(client.store.get_tab(tab_id).chat_items)
        await client.dispatch(ResetStore(tab_id=tab_id))
        assert client.store.get_tab(tab_id).chat_items == before
        assert sent == []


# -- Prompt path ----------------------------------------------------------------------


class TestChatPrompt:
    @pytest.mark.asyncio
    async def test_free_text_opens_stream(self, client, sent, tab_id):
        await client.dispatch(ChatPromptSubmitted(tab_id=tab_id, prompt=_prompt("hello")))

        tab = client.store.get_tab(tab_id)
        assert [i.type for i in tab.chat_items[-2:]] == [
            ChatItemType.PROMPT,
            ChatItemType.ANSWER_STREAM,
        ]
        assert tab.chat_items[-2].body == "hello"
        assert tab.loading_chat and tab.prompt_input_disabled
        assert tab.active_stream_id == tab.chat_items[-1].stream_id

        assert sent[-1]["command"] == "chat_prompt"
        params = sent[-1]["params"]
        assert params["tab_id"] == tab_id
        assert params["prompt"]["prompt"] == "hello"
        assert params["trigger_type"] == "click"
        assert params["request"] is None

    @pytest.mark.asyncio
    async def test_full_round_trip(self, client, tab_id):
        await client.dispatch(ChatPromptSubmitted(tab_id=tab_id, prompt=_prompt("hello")))
        client.add_chat_response(ChatResult(body="Hi"), tab_id, True)
        client.add_chat_response(ChatResult(body="Hi there", message_id="m1"), tab_id, False)

        tab = client.store.get_tab(tab_id)
        assert tab.chat_items[-1].type == ChatItemType.ANSWER
        assert tab.chat_items[-1].body == "Hi there"
        assert not tab.loading_chat and not tab.prompt_input_disabled

    @pytest.mark.asyncio
    async def test_clear_empties_tab_without_network(self, client, sent, tab_id):
        await client.dispatch(ChatPromptSubmitted(tab_id=tab_id, prompt=_prompt("hello")))
        sent.clear()

        await client.dispatch(ChatPromptSubmitted(tab_id=tab_id, prompt=_prompt("", "/clear")))

        tab = client.store.get_tab(tab_id)
        assert tab.chat_items == []
        assert tab.active_stream_id is None
        assert not tab.loading_chat and not tab.prompt_input_disabled
        assert sent == []

    @pytest.mark.asyncio
    async def test_stray_updates_after_clear_are_dropped(self, client, tab_id):
        await client.dispatch(ChatPromptSubmitted(tab_id=tab_id, prompt=_prompt("hello")))
        await client.dispatch(ChatPromptSubmitted(tab_id=tab_id, prompt=_prompt("", "/clear")))

        client.add_chat_response(ChatResult(body="late"), tab_id, True)
        client.add_chat_response(ChatResult(body="later"), tab_id, False)

        assert client.store.get_tab(tab_id).chat_items == []

    @pytest.mark.asyncio
    async def test_help_uses_default_prompt(self, client, sent, tab_id):
        await client.dispatch(ChatPromptSubmitted(tab_id=tab_id, prompt=_prompt("", "/help")))

        assert sent[-1] == {
            "command": "quick_action_command",
            "params": {"tab_id": tab_id, "quick_action": "/help", "prompt": DEFAULT_HELP_PROMPT},
        }
        tab = client.store.get_tab(tab_id)
        assert tab.chat_items[-2].body == DEFAULT_HELP_PROMPT
        assert tab.chat_items[-1].type == ChatItemType.ANSWER_STREAM

    @pytest.mark.asyncio
    async def test_other_command_passed_through(self, client, sent, tab_id):
        await client.dispatch(
            ChatPromptSubmitted(tab_id=tab_id, prompt=_prompt("/dev build it", "/dev"))
        )
        assert sent[-1]["command"] == "quick_action_command"
        assert sent[-1]["params"]["quick_action"] == "/dev"
        assert sent[-1]["params"]["prompt"] == "/dev build it"
        assert [m["command"] for m in sent].count("chat_prompt") == 0


class TestFollowUps:
    @pytest.mark.asyncio
    async def test_plain_follow_up_sends_prompt_then_click(self, client, commands, tab_id):
        option = FollowUpOption(pill_text="More", prompt="Tell me more")
        await client.dispatch(FollowUpClicked(tab_id=tab_id, message_id="m1", follow_up=option))

        assert commands()[-2:] == ["chat_prompt", "follow_up_click"]
        tab = client.store.get_tab(tab_id)
        assert tab.chat_items[-2].body == "Tell me more"

    @pytest.mark.asyncio
    async def test_pill_text_used_without_prompt(self, client, tab_id):
        option = FollowUpOption(pill_text="Show an example")
        await client.dispatch(FollowUpClicked(tab_id=tab_id, message_id="m1", follow_up=option))
        assert client.store.get_tab(tab_id).chat_items[-2].body == "Show an example"

    @pytest.mark.asyncio
    async def test_auth_follow_up(self, client, sent, tab_id):
        client.store.update_store(tab_id, prompt_input_disabled=True)
        option = FollowUpOption(pill_text="Sign in", type="re-auth")
        await client.dispatch(FollowUpClicked(tab_id=tab_id, message_id="m1", follow_up=option))

        assert sent == [
            {
                "command": "auth_follow_up_click",
                "params": {"tab_id": tab_id, "message_id": "m1", "auth_follow_up_type": "re-auth"},
            }
        ]
        assert client.store.get_tab(tab_id).prompt_input_disabled is False


# -- Interceptors ---------------------------------------------------------------------


class TestInterceptors:
    @pytest.mark.asyncio
    async def test_truthy_interceptor_short_circuits(self, client, sent):
        seen = []

        def interceptor(event):
            seen.append(event)
            return True

        client.use(interceptor)
        assert await client.dispatch(FocusStateChanged(focused=False)) is None
        assert len(seen) == 1
        assert sent == []

    @pytest.mark.asyncio
    async def test_falsy_interceptor_passes_through(self, client, sent):
        client.use(lambda event: None)
        await client.dispatch(FocusStateChanged(focused=False))
        assert sent[-1]["command"] == "focus_state_changed"


# -- Telemetry pass-through --------------------------------------------------------------


class TestPassThrough:
    @pytest.mark.asyncio
    async def test_insert_and_copy(self, client, sent, tab_id):
        await client.dispatch(CodeInsertedToCursor(tab_id=tab_id, message_id="m1", code="x"))
        await client.dispatch(CodeCopiedToClipboard(tab_id=tab_id, message_id="m1", code="y"))
        assert [m["command"] for m in sent] == ["insert_to_cursor_position", "copy_to_clipboard"]
        assert sent[0]["params"]["code"] == "x"
        assert sent[1]["params"]["code"] == "y"

    @pytest.mark.asyncio
    async def test_vote(self, client, sent, tab_id):
        await client.dispatch(Voted(tab_id=tab_id, message_id="m1", vote="upvote"))
        assert sent[-1]["params"]["vote"] == "upvote"

    @pytest.mark.asyncio
    async def test_feedback_notifies(self, client, sent, tab_id):
        await client.dispatch(FeedbackSent(tab_id=tab_id, feedback_payload={"comment": "ok"}))
        assert sent[-1]["command"] == "send_feedback"
        assert client.store.notifications[-1].type == NotificationType.INFO

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "event_cls,command",
        [(LinkClicked, "link_click"), (SourceLinkClicked, "source_link_click")],
    )
    async def test_link_clicks_suppress_default(self, client, sent, tab_id, event_cls, command):
        mouse = DomEvent()
        await client.dispatch(
            event_cls(tab_id=tab_id, message_id="m1", link="https://x", mouse_event=mouse)
        )
        assert mouse.default_prevented
        assert mouse.propagation_stopped
        assert mouse.immediate_propagation_stopped
        assert sent[-1]["command"] == command

    @pytest.mark.asyncio
    async def test_info_link_click(self, client, sent, tab_id):
        mouse = DomEvent()
        await client.dispatch(InfoLinkClicked(tab_id=tab_id, link="https://x", mouse_event=mouse))
        assert mouse.default_prevented
        assert sent[-1]["command"] == "info_link_click"

    @pytest.mark.asyncio
    async def test_file_click(self, client, sent, tab_id):
        await client.dispatch(FileClicked(tab_id=tab_id, file_path="src/a.py"))
        assert sent[-1] == {
            "command": "file_click",
            "params": {"tab_id": tab_id, "file_path": "src/a.py"},
        }


# -- Disclaimer ---------------------------------------------------------------------------


class TestDisclaimer:
    @pytest.fixture
    def client(self, sent):
        return ChatClient(sent.append, disclaimer_acknowledged=False)

    def test_initial_tab_carries_card(self, client, tab_id):
        card = client.store.get_tab(tab_id).prompt_input_sticky_card
        assert card is not None
        assert card.message_id == DISCLAIMER_ACKNOWLEDGE_BUTTON_ID

    @pytest.mark.asyncio
    async def test_acknowledge_is_idempotent(self, client, commands, tab_id):
        second = client.create_tab()
        event = InBodyButtonClicked(
            tab_id=tab_id, message_id=None, action_id=DISCLAIMER_ACKNOWLEDGE_BUTTON_ID
        )
        await client.dispatch(event)
        await client.dispatch(event)

        assert commands().count("disclaimer_acknowledged") == 1
        for tid in (tab_id, second):
            assert client.store.get_tab(tid).prompt_input_sticky_card is None

    @pytest.mark.asyncio
    async def test_new_tabs_after_acknowledge_have_no_card(self, client, tab_id):
        await client.dispatch(
            InBodyButtonClicked(
                tab_id=tab_id, message_id=None, action_id=DISCLAIMER_ACKNOWLEDGE_BUTTON_ID
            )
        )
        new_tab = client.create_tab()
        added = await client.dispatch(TabAdded(tab_id="t9"))
        assert client.store.get_tab(new_tab).prompt_input_sticky_card is None
        assert client.store.get_tab(added).prompt_input_sticky_card is None

    @pytest.mark.asyncio
    async def test_other_buttons_ignored(self, client, sent, tab_id):
        await client.dispatch(InBodyButtonClicked(tab_id=tab_id, message_id="m", action_id="x"))
        assert sent == []
        assert client.store.get_tab(tab_id).prompt_input_sticky_card is not None


# -- Saved prompts --------------------------------------------------------------------------


class TestSavedPrompts:
    @pytest.mark.asyncio
    async def test_create_item_opens_form(self, client, tab_id):
        result = await client.dispatch(
            ContextSelected(tab_id=tab_id, context_item_id=CREATE_PROMPT_ITEM_ID)
        )
        assert result is False
        form = client.store.get_tab(tab_id).custom_form
        assert form is not None
        assert form.items[0]["id"] == PROMPT_NAME_FIELD_ID

    @pytest.mark.asyncio
    async def test_other_items_are_inserted(self, client, tab_id):
        result = await client.dispatch(
            ContextSelected(tab_id=tab_id, context_item_id="@workspace", command="@workspace")
        )
        assert result is True
        assert client.store.get_tab(tab_id).custom_form is None

    @pytest.mark.asyncio
    async def test_submit_sends_create_prompt(self, client, sent, tab_id):
        await client.dispatch(ContextSelected(tab_id=tab_id, context_item_id=CREATE_PROMPT_ITEM_ID))
        await client.dispatch(
            CustomFormAction(
                tab_id=tab_id,
                action_id=CREATE_PROMPT_SUBMIT_BUTTON_ID,
                form_item_values={PROMPT_NAME_FIELD_ID: "review"},
            )
        )
        assert sent[-1] == {"command": "create_prompt", "params": {"prompt_name": "review"}}
        assert client.store.get_tab(tab_id).custom_form is None

    @pytest.mark.asyncio
    async def test_cancel_closes_form(self, client, sent, tab_id):
        await client.dispatch(ContextSelected(tab_id=tab_id, context_item_id=CREATE_PROMPT_ITEM_ID))
        await client.dispatch(
            CustomFormAction(tab_id=tab_id, action_id=CREATE_PROMPT_CANCEL_BUTTON_ID)
        )
        assert sent == []
        assert client.store.get_tab(tab_id).custom_form is None

    @pytest.mark.asyncio
    async def test_enter_in_name_field_submits(self, client, sent, tab_id):
        await client.dispatch(ContextSelected(tab_id=tab_id, context_item_id=CREATE_PROMPT_ITEM_ID))
        key = DomEvent(key="Enter")
        result = await client.dispatch(
            FormTextualItemKeyPress(
                tab_id=tab_id,
                item_id=PROMPT_NAME_FIELD_ID,
                key_event=key,
                form_data={PROMPT_NAME_FIELD_ID: "tests"},
            )
        )
        assert result is True
        assert key.default_prevented
        assert sent[-1] == {"command": "create_prompt", "params": {"prompt_name": "tests"}}
        assert client.store.get_tab(tab_id).custom_form is None

    @pytest.mark.asyncio
    async def test_other_keys_ignored(self, client, sent, tab_id):
        key = DomEvent(key="a")
        result = await client.dispatch(
            FormTextualItemKeyPress(tab_id=tab_id, item_id=PROMPT_NAME_FIELD_ID, key_event=key)
        )
        assert result is False
        assert not key.default_prevented
        assert sent == []


# -- Tab bar ------------------------------------------------------------------------------------


class TestTabBar:
    @pytest.mark.asyncio
    async def test_history_button_lists_conversations(self, client, sent, tab_id):
        await client.dispatch(
            TabBarButtonClicked(tab_id=tab_id, button_id=HISTORY_TAB_BAR_BUTTON_ID)
        )
        assert sent == [{"command": "list_conversations", "params": {}}]

    @pytest.mark.asyncio
    async def test_unknown_button_raises(self, client, tab_id):
        with pytest.raises(UnhandledTabBarButtonError) as exc_info:
            await client.dispatch(TabBarButtonClicked(tab_id=tab_id, button_id="mystery"))
        assert exc_info.value.button_id == "mystery"
