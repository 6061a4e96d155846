import logging
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

IDENTIFIER = "identifier"
STRING = "string"
NUMBER = "number"
SYMBOL = "symbol"

_IDENTIFIER_CHARS = "-_$"
_QUOTES = "\"'"
_INLINE_WHITESPACE = " \t"

# Marks an empty token cache; a cached ``None`` means "end of line".
_NOTHING = object()


class Token(NamedTuple):
    kind: str
    text: str
    start: int

    def is_symbol(self, *symbols: str) -> bool:
        return self.kind == SYMBOL and self.text in symbols


class Indent(NamedTuple):
    """Leading whitespace of a line plus the blank lines skipped to reach it."""

    count: int
    blank_lines: int


class Tokenizer:
    """
    Pull-based tokenizer over Spells source.

    Tokens never include a newline: reaching the end of the current line yields
    ``None`` until the indentation of the next line is read with
    ``consume_indent``/``peek_indent``. One token and one indentation reading can
    be held as lookahead; reading a token drops a held indentation.
    """

    def __init__(self, source: str):
        self.source: str = source.replace("\r\n", "\n")
        self.pos: int = 0
        self._line_start: bool = True
        self._held_token = _NOTHING
        self._held_indent: Optional[Indent] = None

    @property
    def line_number(self) -> int:
        """1-based line of the current reading position."""
        return self.source.count("\n", 0, self.pos) + 1

    # --- Indentation ---

    def consume_indent(self) -> Indent:
        """
        Skips to the first non-whitespace character of the next non-blank line,
        returning its indentation. Reaching the end of input reads as indentation 0.
        """
        if self._held_indent is not None:
            indent = self._held_indent
            self._held_indent = None
            return indent

        if self._held_token is None:
            self._held_token = _NOTHING

        source = self.source
        if not self._line_start:
            # Finish the current line; its own newline is not a blank line
            self._skip_inline_whitespace()
            if self.pos < len(source) and source[self.pos] == "\n":
                self.pos += 1
            self._line_start = True

        blank_lines = 0
        while True:
            count = 0
            while self.pos < len(source) and source[self.pos] in _INLINE_WHITESPACE:
                self.pos += 1
                count += 1
            if self.pos >= len(source):
                self._line_start = False
                return Indent(0, blank_lines)
            if source[self.pos] == "\n":
                self.pos += 1
                blank_lines += 1
                continue
            self._line_start = False
            return Indent(count, blank_lines)

    def peek_indent(self) -> Indent:
        if self._held_indent is None:
            self._held_indent = self.consume_indent()
        return self._held_indent

    # --- Tokens ---

    def peek(self) -> Optional[Token]:
        """Returns the next token on the current line without consuming it."""
        self._held_indent = None
        if self._held_token is _NOTHING:
            self._held_token = self._read_token()
        return self._held_token

    def consume(self) -> Optional[Token]:
        """Returns the next token on the current line, or ``None`` at its end."""
        token = self.peek()
        if token is not None:
            self._held_token = _NOTHING
        return token

    def peek_ignore_newline(self) -> Optional[Token]:
        """Like ``peek``, but moves over line breaks. Only ``None`` at end of input."""
        self._held_indent = None
        if self._held_token is _NOTHING or self._held_token is None:
            self._held_token = self._read_token_ignore_newline()
        return self._held_token

    def consume_ignore_newline(self) -> Optional[Token]:
        token = self.peek_ignore_newline()
        if token is not None:
            self._held_token = _NOTHING
        return token

    def consume_line(self) -> str:
        """
        Returns the rest of the current line verbatim (starting at a peeked
        token, if one is held), not including the newline.
        """
        self._held_indent = None
        start = self.pos
        if isinstance(self._held_token, Token):
            start = self._held_token.start
        self._held_token = _NOTHING

        end = self.source.find("\n", self.pos)
        if end == -1:
            end = len(self.source)
        self.pos = end
        self._line_start = False
        return self.source[start:end]

    # --- Helper Methods ---

    def _skip_inline_whitespace(self):
        source = self.source
        while self.pos < len(source) and source[self.pos] in _INLINE_WHITESPACE:
            self.pos += 1

    def _read_token_ignore_newline(self) -> Optional[Token]:
        while True:
            token = self._read_token()
            if token is not None:
                return token
            if self.pos >= len(self.source):
                return None
            # Newline: step over it and keep reading
            self.pos += 1
            self._line_start = True

    def _read_token(self) -> Optional[Token]:
        source = self.source
        self._skip_inline_whitespace()
        if self.pos >= len(source) or source[self.pos] == "\n":
            return None

        start = self.pos
        char = source[start]
        end = start + 1
        if char.isalpha() or char in "_$":
            kind = IDENTIFIER
            while end < len(source) and (source[end].isalnum() or source[end] in _IDENTIFIER_CHARS):
                end += 1
        elif char in _QUOTES:
            kind = STRING
            end = self._find_string_end(start)
        elif char.isdigit():
            kind = NUMBER
            while end < len(source) and (source[end].isdigit() or source[end] == "."):
                end += 1
        else:
            kind = SYMBOL

        self.pos = end
        self._line_start = False
        self._skip_inline_whitespace()
        return Token(kind, source[start:end], start)

    def _find_string_end(self, start: int) -> int:
        """Index just past the closing quote; ``\\`` escapes the next character."""
        source = self.source
        quote = source[start]
        i = start + 1
        while i < len(source):
            char = source[i]
            if char == "\\":
                i += 2
                continue
            if char == quote:
                return i + 1
            i += 1
        logger.warning(
            "Unterminated string starting on line %d; reading to end of input.",
            source.count("\n", 0, start) + 1,
        )
        return len(source)
