"""Shared test fixtures for the chat-panel test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from chat_panel.core.client import ChatClient
from chat_panel.core.messenger import Messenger
from chat_panel.core.models import ChatItem, ChatItemType
from chat_panel.core.tab_store import TabStore


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for file-based tests."""
    return tmp_path


@pytest.fixture
def sent():
    """Outbound backend messages, in the order they were sent."""
    return []


@pytest.fixture
def messenger(sent):
    return Messenger(sent.append)


@pytest.fixture
def store():
    return TabStore()


@pytest.fixture
def client(sent):
    """ChatClient with the disclaimer already acknowledged and no workspace."""
    return ChatClient(sent.append, disclaimer_acknowledged=True)


@pytest.fixture
def commands(sent):
    """Command names of the captured outbound messages (live view)."""

    def names() -> list[str]:
        return [m["command"] for m in sent]

    return names


def _open_stream(store: TabStore, tab_id: str, stream_id: str = "s1") -> None:
    store.add_chat_item(tab_id, ChatItem(type=ChatItemType.PROMPT, body="question"))
    store.add_chat_item(tab_id, ChatItem(type=ChatItemType.ANSWER_STREAM, stream_id=stream_id))
    store.update_store(
        tab_id, loading_chat=True, prompt_input_disabled=True, active_stream_id=stream_id
    )


@pytest.fixture
def open_stream():
    """Put a tab into the streaming state the router leaves it in."""
    return _open_stream
