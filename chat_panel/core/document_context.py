"""Bounded text window around the user's cursor or selection."""

from __future__ import annotations

from typing import Callable

from .constants import MAX_CONTEXT_CHARS
from .models import CursorState, DocumentContext, Position, Range, TextDocument

# Language ids the backend understands; anything else is sent without a language
SUPPORTED_LANGUAGES: frozenset[str] = frozenset(
    {
        "c",
        "cpp",
        "csharp",
        "go",
        "java",
        "javascript",
        "javascriptreact",
        "json",
        "kotlin",
        "markdown",
        "php",
        "python",
        "ruby",
        "rust",
        "scala",
        "shellscript",
        "sql",
        "swift",
        "terraform",
        "toml",
        "typescript",
        "typescriptreact",
        "yaml",
    }
)


def _line_length(line: str) -> int:
    return len(line.rstrip("\r\n"))


class DocumentContextExtractor:
    """Cuts a window of whole lines out of a document.

    The selected lines are kept whole when they fit the character budget,
    then lines above and below are added alternately until the next line on
    a side no longer fits.  A selection larger than the budget is truncated
    to the budget, starting at the selection start.
    """

    def __init__(
        self,
        character_limit: int = MAX_CONTEXT_CHARS,
        relative_path: Callable[[str], str] | None = None,
    ) -> None:
        self.character_limit = character_limit
        self._relative_path = relative_path

    @staticmethod
    def clamp_range(document: TextDocument, rng: Range) -> Range:
        lines = document.lines
        last = len(lines) - 1

        def clamp(pos: Position) -> Position:
            line = max(0, min(pos.line, last))
            character = max(0, min(pos.character, _line_length(lines[line])))
            return Position(line, character)

        start, end = clamp(rng.start), clamp(rng.end)
        if (end.line, end.character) < (start.line, start.character):
            start, end = end, start
        return Range(start=start, end=end)

    def get_window(self, document: TextDocument, rng: Range) -> tuple[str, Range]:
        """Return the window text and *rng* re-based onto it."""
        lines = document.lines
        first, last = rng.start.line, rng.end.line
        used = sum(len(line) for line in lines[first : last + 1])

        if used > self.character_limit:
            offset = sum(len(line) for line in lines[:first]) + rng.start.character
            text = document.text[offset : offset + self.character_limit]
            text_lines = text.splitlines() or [""]
            end = Position(len(text_lines) - 1, len(text_lines[-1]))
            return text, Range(start=Position(0, 0), end=end)

        above, below = first - 1, last + 1
        while above >= 0 or below < len(lines):
            if above >= 0 and used + len(lines[above]) <= self.character_limit:
                used += len(lines[above])
                first = above
                above -= 1
            else:
                above = -1
            if below < len(lines) and used + len(lines[below]) <= self.character_limit:
                used += len(lines[below])
                last = below
                below += 1
            else:
                below = len(lines)

        text = "".join(lines[first : last + 1])
        rebased = Range(
            start=Position(rng.start.line - first, rng.start.character),
            end=Position(rng.end.line - first, rng.end.character),
        )
        return text, rebased

    def extract_document_context(
        self, document: TextDocument, cursor_state: CursorState
    ) -> DocumentContext:
        rng = self.clamp_range(document, cursor_state.as_range())
        text, rebased = self.get_window(document, rng)
        language = document.language_id if document.language_id in SUPPORTED_LANGUAGES else None
        relative_path = (
            self._relative_path(document.uri) if self._relative_path else document.uri
        )
        return DocumentContext(
            cursor_state=CursorState(range=rebased),
            text=text,
            programming_language=language,
            relative_file_path=relative_path,
            has_code_snippet=bool(text.strip()),
            total_editor_characters=len(document.text),
        )
