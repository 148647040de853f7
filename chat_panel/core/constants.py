"""Module-level constants for the chat panel core."""

from __future__ import annotations

# Live tab cap enforced by the tab store
MAX_TABS = 10

# Character budget for the document window attached to a prompt
MAX_CONTEXT_CHARS = 9000

DEFAULT_HELP_PROMPT = "What can the assistant help me with?"

DEFAULT_FOLLOW_UP_TEXT = "Suggested follow up questions:"

# Quick action commands understood by the client itself
CLEAR_COMMAND = "/clear"
HELP_COMMAND = "/help"

DEFAULT_QUICK_ACTIONS: tuple[dict[str, str], ...] = (
    {"command": HELP_COMMAND, "description": "Learn more about the assistant"},
    {"command": CLEAR_COMMAND, "description": "Clear this session"},
)

# Disclaimer card
DISCLAIMER_ACKNOWLEDGE_BUTTON_ID = "disclaimer-acknowledge"
DISCLAIMER_TEXT = (
    "Responses are generated by an AI model and may be inaccurate. "
    "Review generated code before using it."
)

# "Create saved prompt" context command and its form
CREATE_PROMPT_ITEM_ID = "create-saved-prompt"
CREATE_PROMPT_CANCEL_BUTTON_ID = "cancel-create-prompt"
CREATE_PROMPT_SUBMIT_BUTTON_ID = "submit-create-prompt"
PROMPT_NAME_FIELD_ID = "prompt-name"

# Tab bar
HISTORY_TAB_BAR_BUTTON_ID = "history_sheet"

# Auth follow-up option types that the host knows how to act on
AUTH_FOLLOW_UP_TYPES: frozenset[str] = frozenset(
    {"full-auth", "re-auth", "missing_scopes", "use-supported-auth"}
)

# Static UI labels
UI_TEXTS: dict[str, str] = {
    "feedback_sent_title": "Your feedback is sent",
    "feedback_sent_content": "Thanks for your feedback.",
    "no_more_tabs_tooltip": "You can only open ten conversation tabs at a time.",
    "no_more_tabs_error": "No more tabs available",
    "welcome": (
        "Hi, I'm your coding assistant. Ask me a question about your code, "
        "or type `/` for quick actions."
    ),
    "context_root_title": "Context",
    "history_title": "Chat history",
    "history_search_placeholder": "Search...",
    "create_prompt_title": "Create a saved prompt",
    "prompt_name_title": "Prompt name",
    "prompt_name_placeholder": "Enter prompt name",
    "prompt_name_description": "Use this prompt by typing '@' followed by the prompt name.",
    "cancel": "Cancel",
    "create": "Create",
}
