"""Tests for chat_panel.core.events -- decoding UI frames."""

from __future__ import annotations

import pytest

from chat_panel.core.events import (
    ChatPromptSubmitted,
    CodeCopiedToClipboard,
    FollowUpClicked,
    FormTextualItemKeyPress,
    LinkClicked,
    Ready,
    TabAdded,
    parse_ui_event,
)
from chat_panel.core.models import Position


class TestParseUiEvent:
    def test_ready(self):
        assert parse_ui_event({"event": "ready"}) == Ready()

    def test_tab_add_optional_id(self):
        assert parse_ui_event({"event": "tab_add"}) == TabAdded(tab_id=None)
        assert parse_ui_event({"event": "tab_add", "tab_id": "t1"}) == TabAdded(tab_id="t1")

    def test_chat_prompt(self):
        event = parse_ui_event(
            {
                "event": "chat_prompt",
                "tab_id": "t1",
                "prompt": {"prompt": "hi", "escaped_prompt": "hi"},
                "text_document": {"uri": "file:///a.py"},
                "cursor_state": [
                    {"range": {"start": {"line": 1, "character": 0}, "end": {"line": 2, "character": 3}}}
                ],
            }
        )
        assert isinstance(event, ChatPromptSubmitted)
        assert event.prompt.escaped_prompt == "hi"
        assert event.text_document.uri == "file:///a.py"
        assert event.cursor_state[0].range.end == Position(2, 3)

    def test_follow_up(self):
        event = parse_ui_event(
            {
                "event": "follow_up_click",
                "tab_id": "t1",
                "message_id": "m1",
                "follow_up": {"pill_text": "More", "type": "re-auth"},
            }
        )
        assert isinstance(event, FollowUpClicked)
        assert event.follow_up.type == "re-auth"

    def test_copy_code(self):
        event = parse_ui_event(
            {"event": "copy_code_to_clipboard", "tab_id": "t1", "message_id": "m1", "code": "x"}
        )
        assert isinstance(event, CodeCopiedToClipboard)

    def test_link_click_carries_mouse_event(self):
        event = parse_ui_event(
            {
                "event": "link_click",
                "tab_id": "t1",
                "message_id": "m1",
                "link": "https://example.com",
                "mouse_event": {},
            }
        )
        assert isinstance(event, LinkClicked)
        assert event.mouse_event is not None
        assert not event.mouse_event.default_prevented

    def test_key_press(self):
        event = parse_ui_event(
            {
                "event": "form_key_press",
                "tab_id": "t1",
                "item_id": "prompt-name",
                "key_event": {"key": "Enter"},
                "form_data": {"prompt-name": "x"},
            }
        )
        assert isinstance(event, FormTextualItemKeyPress)
        assert event.key_event.key == "Enter"

    def test_unknown_event(self):
        with pytest.raises(ValueError, match="Unknown UI event"):
            parse_ui_event({"event": "explode"})

    def test_missing_field(self):
        with pytest.raises(ValueError, match="missing field"):
            parse_ui_event({"event": "tab_remove"})

    def test_malformed_cursor_state(self):
        with pytest.raises(ValueError, match="malformed"):
            parse_ui_event(
                {
                    "event": "chat_prompt",
                    "tab_id": "t1",
                    "cursor_state": [{"position": {"ln": 1}}],
                }
            )
