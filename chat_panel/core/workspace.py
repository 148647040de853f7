"""Text-lookup provider for documents referenced by prompts."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

from ..log import logger
from .models import TextDocument

# File extension -> editor language id
LANGUAGE_IDS: dict[str, str] = {
    ".py": "python",
    ".js": "javascript",
    ".ts": "typescript",
    ".jsx": "javascriptreact",
    ".tsx": "typescriptreact",
    ".rs": "rust",
    ".go": "go",
    ".java": "java",
    ".kt": "kotlin",
    ".c": "c",
    ".cpp": "cpp",
    ".h": "c",
    ".cs": "csharp",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".scala": "scala",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
    ".toml": "toml",
    ".md": "markdown",
    ".sh": "shellscript",
    ".bash": "shellscript",
    ".sql": "sql",
    ".tf": "terraform",
    ".css": "css",
    ".html": "html",
    ".xml": "xml",
    ".txt": "plaintext",
}


def uri_to_path(uri: str) -> Path:
    """Turn a ``file://`` URI (or a bare path) into a filesystem path."""
    parsed = urlparse(uri)
    if parsed.scheme in ("", "file"):
        return Path(unquote(parsed.path if parsed.scheme else uri))
    raise ValueError(f"Unsupported document URI: {uri}")


def language_id_for(path: str | Path) -> str:
    return LANGUAGE_IDS.get(Path(path).suffix.lower(), "plaintext")


class Workspace(Protocol):
    """Where the context builder looks documents up."""

    async def get_text_document(self, uri: str) -> TextDocument | None: ...

    def relative_path(self, uri: str) -> str: ...


class FileSystemWorkspace:
    """Open-document overlay on top of the local filesystem.

    Documents pushed by the host with ``open_document`` win over the file
    contents on disk, matching what the user currently sees in the editor.
    """

    def __init__(self, folders: list[Path] | None = None) -> None:
        self.folders = [Path(f).expanduser().resolve() for f in folders or []]
        self._open: dict[str, TextDocument] = {}

    def open_document(self, uri: str, text: str, language_id: str | None = None) -> TextDocument:
        previous = self._open.get(uri)
        document = TextDocument(
            uri=uri,
            language_id=language_id or language_id_for(uri_to_path(uri)),
            text=text,
            version=previous.version + 1 if previous else 0,
        )
        self._open[uri] = document
        return document

    def close_document(self, uri: str) -> None:
        self._open.pop(uri, None)

    async def get_text_document(self, uri: str) -> TextDocument | None:
        if uri in self._open:
            return self._open[uri]
        try:
            path = uri_to_path(uri)
            text = await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
        except (OSError, ValueError):
            logger.debug("document lookup failed for %s", uri, exc_info=True)
            return None
        return TextDocument(uri=uri, language_id=language_id_for(path), text=text)

    def relative_path(self, uri: str) -> str:
        """Path of *uri* relative to the first workspace folder containing it."""
        try:
            path = uri_to_path(uri)
        except ValueError:
            return uri
        for folder in self.folders:
            try:
                return path.resolve().relative_to(folder).as_posix()
            except ValueError:
                continue
        return path.name
