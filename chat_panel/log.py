"""Package logger for chat-panel-client."""

from __future__ import annotations

import logging

logger = logging.getLogger("chat_panel")


def configure_logging(level: str = "INFO") -> None:
    """Route package logs through a rich console handler."""
    from rich.logging import RichHandler

    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper())
