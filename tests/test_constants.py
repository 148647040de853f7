"""Tests for chat_panel.core.constants."""

from __future__ import annotations

from chat_panel.core.constants import UI_TEXTS


class TestUiTexts:
    def test_only_labels_the_panel_shows(self):
        assert set(UI_TEXTS) == {
            "feedback_sent_title",
            "feedback_sent_content",
            "no_more_tabs_tooltip",
            "no_more_tabs_error",
            "welcome",
            "context_root_title",
            "history_title",
            "history_search_placeholder",
            "create_prompt_title",
            "prompt_name_title",
            "prompt_name_placeholder",
            "prompt_name_description",
            "cancel",
            "create",
        }

    def test_labels_are_non_empty(self):
        assert all(isinstance(v, str) and v for v in UI_TEXTS.values())
