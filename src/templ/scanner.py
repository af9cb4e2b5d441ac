"""Position-tracking input for the template parser."""

from __future__ import annotations

from templ.position import Position


class SourceInput:
    """A cursor over template source that knows where it is.

    ``index`` counts UTF-8 bytes from the start of the text, ``line`` is
    1-based and ``col`` counts characters from the start of the line.
    """

    def __init__(self, text: str):
        self.text = text
        self._offset = 0  # in characters
        self.index = 0
        self.line = 1
        self.col = 0

    def position(self) -> Position:
        return Position(index=self.index, line=self.line, col=self.col)

    def at_end(self) -> bool:
        return self._offset >= len(self.text)

    def peek(self, n: int = 1) -> str:
        return self.text[self._offset : self._offset + n]

    def startswith(self, s: str) -> bool:
        return self.text.startswith(s, self._offset)

    def advance(self, n: int = 1) -> str:
        """Consume up to ``n`` characters and return them."""
        chunk = self.text[self._offset : self._offset + n]
        for ch in chunk:
            self.index += len(ch.encode("utf-8"))
            if ch == "\n":
                self.line += 1
                self.col = 0
            else:
                self.col += 1
        self._offset += len(chunk)
        return chunk

    def skip_whitespace(self) -> str:
        """Consume and return any whitespace at the cursor."""
        end = self._offset
        while end < len(self.text) and self.text[end].isspace():
            end += 1
        return self.advance(end - self._offset)

    def read_until(self, s: str) -> str | None:
        """Consume text up to (not including) ``s``.

        Returns None, consuming nothing, when ``s`` does not occur.
        """
        end = self.text.find(s, self._offset)
        if end < 0:
            return None
        return self.advance(end - self._offset)

    def peek_until(self, s: str) -> str | None:
        """Text from the cursor up to ``s``, without consuming it."""
        end = self.text.find(s, self._offset)
        if end < 0:
            return None
        return self.text[self._offset : end]

    def read_while(self, predicate) -> str:
        end = self._offset
        while end < len(self.text) and predicate(self.text[end]):
            end += 1
        return self.advance(end - self._offset)
