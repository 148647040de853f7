"""PanelBridge: one ChatClient bound to one websocket connection."""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Any

from chat_panel.core.client import ChatClient
from chat_panel.core.errors import ChatPanelError
from chat_panel.core.events import parse_ui_event
from chat_panel.core.models import (
    ChatMessage,
    ChatResult,
    ContextCommandGroup,
    ConversationItemGroup,
    CursorState,
    TriggerType,
    to_dict,
)
from chat_panel.core.tab_factory import TabFactory
from chat_panel.core.tab_store import StoreEvent
from chat_panel.core.workspace import FileSystemWorkspace
from chat_panel.preferences import Preferences, save_disclaimer_acknowledged

logger = logging.getLogger(__name__)


def _trigger_type(value: Any) -> TriggerType | None:
    return TriggerType(value) if value else None


class PanelBridge:
    """Translate websocket frames to ChatClient calls and back.

    Frames on the ``ui`` channel are UI events, frames on the ``host``
    channel are inbound API calls.  Outbound backend messages and store
    changes are queued and written by a single writer task so the order
    the client produced them in is the order the peer sees.
    """

    def __init__(
        self,
        websocket: Any,
        prefs: Preferences | None = None,
        prefs_path: Path | None = None,
    ) -> None:
        self.bridge_id = uuid.uuid4().hex
        self._ws = websocket
        self._prefs = prefs or Preferences()
        self._prefs_path = prefs_path
        self._outbox: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()
        self._writer: asyncio.Task[None] | None = None
        self.workspace = FileSystemWorkspace(
            [Path(f) for f in self._prefs.server.workspace_folders]
        )
        self.client = ChatClient(
            self._send_backend,
            disclaimer_acknowledged=self._prefs.disclaimer.acknowledged,
            workspace=self.workspace,
            tab_factory=TabFactory(show_welcome=self._prefs.tabs.show_welcome),
            customization_id=self._prefs.request.customization_id or None,
            profile_id=self._prefs.request.profile_id or None,
        )
        self._unsubscribe = self.client.store.subscribe(self._on_store_event)
        self._host_methods = {
            "add_chat_response": self._host_add_chat_response,
            "send_to_prompt": self._host_send_to_prompt,
            "send_generic_command": self._host_send_generic_command,
            "show_error": self._host_show_error,
            "open_tab": self._host_open_tab,
            "send_context_commands": self._host_send_context_commands,
            "list_conversations": self._host_list_conversations,
            "conversation_clicked": self._host_conversation_clicked,
            "set_active_editor": self._host_set_active_editor,
            "open_document": self._host_open_document,
            "close_document": self._host_close_document,
        }

    # ------------------------------------------------------------------
    # Outgoing frames
    # ------------------------------------------------------------------

    def _enqueue(self, frame: dict[str, Any]) -> None:
        self._outbox.put_nowait(frame)

    def _send_backend(self, message: dict[str, Any]) -> None:
        if message["command"] == "disclaimer_acknowledged":
            # Shared across connections so later panels start without the card
            self._prefs.disclaimer.acknowledged = True
            if self._prefs_path is not None:
                save_disclaimer_acknowledged(True, self._prefs_path)
        self._enqueue({"channel": "backend", **message})

    def _on_store_event(self, event: StoreEvent) -> None:
        frame: dict[str, Any] = {
            "channel": "store",
            "kind": event.kind,
            "tab_id": event.tab_id,
            "data": event.data,
        }
        if event.kind in ("tab_added", "tab_updated") and event.tab_id:
            frame["tab"] = to_dict(self.client.store.get_tab(event.tab_id))
        elif event.kind in ("overlay_opened", "overlay_updated"):
            overlay = self.client.store.overlays.get(event.data["overlay_id"])
            frame["overlay"] = overlay.data if overlay else None
        self._enqueue(frame)

    async def _write_loop(self) -> None:
        while True:
            frame = await self._outbox.get()
            if frame is None:
                return
            try:
                await self._ws.send_json(frame)
            except Exception:
                logger.debug("WebSocket send failed", exc_info=True)

    async def start(self) -> None:
        """Start the writer and announce the connection."""
        self._writer = asyncio.create_task(self._write_loop())
        self._enqueue(
            {
                "type": "connected",
                "status": "ready",
                "initial_tab_id": self.client.session.initial_tab_id,
            }
        )

    async def stop(self) -> None:
        self._unsubscribe()
        if self._writer is not None:
            self._outbox.put_nowait(None)
            await self._writer
            self._writer = None

    def snapshot(self) -> dict[str, Any]:
        store = self.client.store
        return {
            "id": self.bridge_id,
            "selected_tab_id": store.get_selected_tab_id(),
            "tabs": {tab_id: to_dict(tab) for tab_id, tab in store.get_all_tabs().items()},
        }

    # ------------------------------------------------------------------
    # Incoming frames
    # ------------------------------------------------------------------

    async def handle_frame(self, frame: dict[str, Any]) -> None:
        channel = frame.get("channel", "")
        if frame.get("type") == "ping":
            self._enqueue({"type": "pong"})
        elif channel == "ui":
            await self._handle_ui_frame(frame)
        elif channel == "host":
            await self._handle_host_frame(frame)
        else:
            logger.debug("Unknown WebSocket frame: %s", frame)

    async def _handle_ui_frame(self, frame: dict[str, Any]) -> None:
        try:
            event = parse_ui_event(frame)
        except ValueError as exc:
            logger.warning("Ignoring UI frame: %s", exc)
            return
        try:
            result = await self.client.dispatch(event)
        except ChatPanelError as exc:
            logger.error("%s handler failed: %s", frame.get("event"), exc)
            self._enqueue(
                {"channel": "ui", "type": "error", "event": frame.get("event"), "message": str(exc)}
            )
            return
        except KeyError as exc:
            logger.warning("%s names an unknown tab: %s", frame.get("event"), exc)
            self._enqueue(
                {
                    "channel": "ui",
                    "type": "error",
                    "event": frame.get("event"),
                    "message": f"Unknown tab: {exc}",
                }
            )
            return
        dom_event = getattr(event, "mouse_event", None) or getattr(event, "key_event", None)
        self._enqueue(
            {
                "channel": "ui",
                "type": "event_result",
                "event": frame.get("event"),
                "result": result,
                "default_prevented": bool(dom_event and dom_event.default_prevented),
            }
        )

    async def _handle_host_frame(self, frame: dict[str, Any]) -> None:
        method = self._host_methods.get(frame.get("method", ""))
        if method is None:
            logger.warning("Ignoring unknown host method: %s", frame.get("method"))
            return
        params = frame.get("params") or {}
        try:
            result = method(params)
            if asyncio.iscoroutine(result):
                await result
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Malformed %s call: %s", frame.get("method"), exc)

    # -- host methods -------------------------------------------------------

    def _host_add_chat_response(self, params: dict[str, Any]) -> None:
        self.client.add_chat_response(
            ChatResult.from_dict(params.get("result") or {}),
            params["tab_id"],
            bool(params.get("is_partial")),
            params.get("stream_id"),
        )

    def _host_send_to_prompt(self, params: dict[str, Any]) -> None:
        self.client.send_to_prompt(params["selection"], _trigger_type(params.get("trigger_type")))

    async def _host_send_generic_command(self, params: dict[str, Any]) -> None:
        await self.client.send_generic_command(
            params["generic_command"],
            params["selection"],
            _trigger_type(params.get("trigger_type")),
        )

    def _host_show_error(self, params: dict[str, Any]) -> None:
        self.client.show_error(params["title"], params["message"], params.get("tab_id"))

    def _host_open_tab(self, params: dict[str, Any]) -> None:
        messages = (
            ((params.get("new_tab_options") or {}).get("data") or {}).get("messages")
        )
        self.client.open_tab(
            params["request_id"],
            tab_id=params.get("tab_id"),
            chat_messages=[ChatMessage.from_dict(m) for m in messages] if messages else None,
        )

    def _host_send_context_commands(self, params: dict[str, Any]) -> None:
        self.client.send_context_commands(
            [ContextCommandGroup.from_dict(g) for g in params.get("context_command_groups") or []]
        )

    def _host_list_conversations(self, params: dict[str, Any]) -> None:
        self.client.list_conversations(
            [ConversationItemGroup.from_dict(g) for g in params.get("list") or []],
            params.get("header"),
        )

    def _host_conversation_clicked(self, params: dict[str, Any]) -> None:
        self.client.conversation_clicked(bool(params.get("success")), params.get("action"))

    def _host_set_active_editor(self, params: dict[str, Any]) -> None:
        cursor_state = [CursorState.from_dict(c) for c in params.get("cursor_state") or []]
        self.client.set_active_editor(params.get("uri"), cursor_state)

    def _host_open_document(self, params: dict[str, Any]) -> None:
        self.workspace.open_document(params["uri"], params["text"], params.get("language_id"))

    def _host_close_document(self, params: dict[str, Any]) -> None:
        self.workspace.close_document(params["uri"])
