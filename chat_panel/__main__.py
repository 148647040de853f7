"""Entry point for the chat panel CLI."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from . import __version__
from .log import configure_logging, logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chat panel websocket server")
    parser.add_argument(
        "--version",
        "-V",
        action="version",
        version=f"chat-panel {__version__}",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Interface to bind (default: from preferences, 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Web server port (default: from preferences, 8765)",
    )
    parser.add_argument(
        "--prefs",
        type=Path,
        default=None,
        help="Preferences file (default: ~/.chat-panel/preferences.yaml)",
    )
    parser.add_argument(
        "--workspace",
        "-w",
        action="append",
        default=[],
        metavar="FOLDER",
        help="Workspace folder used for relative file paths (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging level (default: INFO)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run the chat panel server."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        from chat_panel.web import main as web_main

        web_main(
            host=args.host,
            port=args.port,
            prefs_path=args.prefs,
            workspace_folders=args.workspace,
        )
    except ImportError as exc:
        print(
            f"Web dependencies not installed: {exc}\n"
            "Install with:  pip install fastapi uvicorn",
            file=sys.stderr,
        )
        sys.exit(1)
    except (KeyboardInterrupt, SystemExit):
        pass
    except Exception:
        logger.debug("Fatal error in chat-panel", exc_info=True)
        import traceback

        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
