"""Trigger context and outbound request payload for a prompt.

A ``TriggerContext`` is built once per outbound prompt from the referenced
document (if any) and a coarse intent guessed from the prompt text, then
folded into the ``conversation_state`` payload and discarded.
"""

from __future__ import annotations

import re
from dataclasses import asdict
from typing import Any

from ..log import logger
from .document_context import DocumentContextExtractor
from .models import (
    ChatParams,
    ChatTriggerType,
    CursorState,
    DocumentContext,
    Position,
    TriggerContext,
    TriggerType,
    UserIntent,
)
from .workspace import Workspace

# Checked in order; the first prefix match wins
_INTENT_PATTERNS: tuple[tuple[re.Pattern[str], UserIntent], ...] = (
    (re.compile(r"^explain", re.IGNORECASE), UserIntent.EXPLAIN_CODE_SELECTION),
    (re.compile(r"^refactor", re.IGNORECASE), UserIntent.SUGGEST_ALTERNATE_IMPLEMENTATION),
    (re.compile(r"^fix", re.IGNORECASE), UserIntent.APPLY_COMMON_BEST_PRACTICES),
    (re.compile(r"^optimize", re.IGNORECASE), UserIntent.IMPROVE_CODE),
)

DEFAULT_CURSOR_STATE = CursorState(position=Position(line=0, character=0))


def guess_intent_from_prompt(prompt: str | None) -> UserIntent | None:
    """Classify a prompt by its leading verb, or return ``None``."""
    if prompt is None:
        return None
    for pattern, intent in _INTENT_PATTERNS:
        if pattern.match(prompt):
            return intent
    return None


class TriggerContextBuilder:
    """Builds trigger contexts and request payloads for outbound prompts."""

    def __init__(self, workspace: Workspace, extractor: DocumentContextExtractor | None = None) -> None:
        self._workspace = workspace
        self._extractor = extractor or DocumentContextExtractor(
            relative_path=workspace.relative_path
        )

    async def build_trigger_context(
        self, params: ChatParams, trigger_type: TriggerType | None = None
    ) -> TriggerContext:
        document_context = await self.extract_document_context(params)
        context = TriggerContext(
            user_intent=guess_intent_from_prompt(params.prompt.prompt),
            trigger_type=trigger_type,
        )
        if document_context is not None:
            context.cursor_state = document_context.cursor_state
            context.text = document_context.text
            context.programming_language = document_context.programming_language
            context.relative_file_path = document_context.relative_file_path
            context.has_code_snippet = document_context.has_code_snippet
            context.total_editor_characters = document_context.total_editor_characters
        return context

    async def extract_document_context(self, params: ChatParams) -> DocumentContext | None:
        """Window of the referenced document, or ``None`` when there is none.

        A found document without cursor state still yields a window anchored
        at the top of the file so the user can ask about the file as a whole.
        """
        if params.text_document is None or not params.text_document.uri:
            return None
        document = await self._workspace.get_text_document(params.text_document.uri)
        if document is None:
            logger.debug(
                "no document for %s, sending prompt without editor state",
                params.text_document.uri,
            )
            return None
        cursor_state = params.cursor_state[0] if params.cursor_state else DEFAULT_CURSOR_STATE
        return self._extractor.extract_document_context(document, cursor_state)


def build_request_payload(
    params: ChatParams,
    trigger_context: TriggerContext,
    chat_trigger_type: ChatTriggerType,
    customization_id: str | None = None,
    profile_id: str | None = None,
    tools: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Assemble the ``conversation_state`` message for the backend."""
    tools = tools if tools is not None else []
    prompt = params.prompt
    message_context: dict[str, Any] = {"tools": tools}
    if trigger_context.cursor_state is not None and trigger_context.relative_file_path:
        message_context = {
            "editor_state": {
                "cursor_state": asdict(trigger_context.cursor_state),
                "document": {
                    "text": trigger_context.text,
                    "programming_language": trigger_context.programming_language,
                    "relative_file_path": trigger_context.relative_file_path,
                },
            },
            "tools": tools,
        }
    intent = trigger_context.user_intent
    return {
        "conversation_state": {
            "chat_trigger_type": chat_trigger_type.value,
            "current_message": {
                "user_input_message": {
                    "content": (
                        prompt.escaped_prompt
                        if prompt.escaped_prompt is not None
                        else prompt.prompt
                    ),
                    "user_input_message_context": message_context,
                    "user_intent": intent.value if intent else None,
                    "origin": "IDE",
                },
            },
            "customization_id": customization_id,
        },
        "profile_id": profile_id,
    }
