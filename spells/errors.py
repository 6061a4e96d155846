from typing import Optional


class CompileError(ValueError):
    """
    Raised when Spells source cannot be compiled.

    Every compile error renders as a one-line diagnostic, e.g.
    ``Spells ParseError (Line 4): Unterminated attribute list.``
    """

    kind: str = "CompileError"

    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        super().__init__(self.diagnostic())

    def diagnostic(self) -> str:
        """Returns the error as a human-readable, single-line string."""
        message = " ".join(self.message.split())
        if self.line is None:
            return f"Spells {self.kind}: {message}"
        return f"Spells {self.kind} (Line {self.line}): {message}"


class IndentError(CompileError):
    """The document, or a nested block, starts at an unexpected indentation."""

    kind = "IndentationError"


class ParseError(CompileError):
    """Any other malformed construct."""

    kind = "ParseError"
