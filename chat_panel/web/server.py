"""FastAPI server exposing the chat panel over a websocket."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from chat_panel import __version__
from chat_panel.preferences import Preferences

from .bridge import PanelBridge

logger = logging.getLogger(__name__)


def create_app(prefs: Preferences | None = None, prefs_path: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Each websocket connection gets its own panel.  ``prefs_path`` is where a
    disclaimer acknowledgement is persisted; without it nothing is written.
    """
    app = FastAPI(title="Chat Panel")
    prefs = prefs or Preferences()
    bridges: dict[str, PanelBridge] = {}

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "ok", "version": __version__}

    @app.get("/api/tabs")
    async def list_tabs() -> dict:
        """Snapshot the tabs of every connected panel."""
        return {"panels": [bridge.snapshot() for bridge in bridges.values()]}

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket) -> None:
        """Bidirectional WebSocket carrying UI, host, backend and store frames."""
        await ws.accept()
        bridge = PanelBridge(ws, prefs=prefs, prefs_path=prefs_path)
        bridges[bridge.bridge_id] = bridge

        try:
            await bridge.start()
            while True:
                data = await ws.receive_json()
                if not isinstance(data, dict):
                    logger.debug("Ignoring non-object WebSocket frame: %r", data)
                    continue
                await bridge.handle_frame(data)

        except WebSocketDisconnect:
            logger.info("WebSocket client disconnected")
        except Exception:
            logger.exception("WebSocket error")
        finally:
            bridges.pop(bridge.bridge_id, None)
            await bridge.stop()

    return app
