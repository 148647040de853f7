"""Websocket frontend for the chat panel."""

from __future__ import annotations

from pathlib import Path


def main(
    host: str | None = None,
    port: int | None = None,
    prefs_path: Path | None = None,
    workspace_folders: list[str] | None = None,
) -> None:
    """Launch the web server."""
    import uvicorn

    from chat_panel.preferences import PREFS_PATH, load_preferences

    from .server import create_app

    prefs_path = prefs_path or PREFS_PATH
    prefs = load_preferences(prefs_path)
    if workspace_folders:
        prefs.server.workspace_folders = list(workspace_folders)
    app = create_app(prefs=prefs, prefs_path=prefs_path)
    uvicorn.run(
        app,
        host=host or prefs.server.host,
        port=port or prefs.server.port,
        log_level="info",
    )
