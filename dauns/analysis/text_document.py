"""Minimal text-buffer view over raw file content.

Scanners only need full text, offset-to-position mapping and line access,
so the same scanning code runs on editor buffers and on plain strings.
"""

from bisect import bisect_right
from typing import NamedTuple, Protocol


class Position(NamedTuple):
    """0-based line/character position."""

    line: int
    character: int


class TextDocument(Protocol):
    """Capabilities the scanners require from any document-like input."""

    file_name: str

    @property
    def line_count(self) -> int: ...

    def get_text(self) -> str: ...

    def position_at(self, offset: int) -> Position: ...

    def line_at(self, line: int) -> str: ...


class StringDocument:
    """TextDocument implementation over a plain string and a file path."""

    def __init__(self, content: str, file_name: str = ""):
        self.file_name = file_name
        self._content = content
        self._line_starts = [0]
        for index, char in enumerate(content):
            if char == "\n":
                self._line_starts.append(index + 1)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def get_text(self) -> str:
        return self._content

    def position_at(self, offset: int) -> Position:
        """Map a character offset to a position, clamping to the text bounds."""
        offset = max(0, min(offset, len(self._content)))
        line = bisect_right(self._line_starts, offset) - 1
        return Position(line, offset - self._line_starts[line])

    def offset_at(self, position: Position) -> int:
        line = max(0, min(position.line, self.line_count - 1))
        return min(self._line_starts[line] + position.character, len(self._content))

    def line_at(self, line: int) -> str:
        """Return the text of a 0-based line without its newline ('' if out of range)."""
        if line < 0 or line >= self.line_count:
            return ""
        start = self._line_starts[line]
        end = (
            self._line_starts[line + 1] - 1
            if line + 1 < self.line_count
            else len(self._content)
        )
        return self._content[start:end]
