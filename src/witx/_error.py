"""Error classes and source positions"""

__all__ = ["ParseError", "Span"]

from dataclasses import dataclass


@dataclass(frozen=True)
class Span:
    """Source position of a token.

    Attributes:
        offset: (int) Character offset from the start of the source (0-indexed)
        line: (int) Line number (1-indexed)
        column: (int) Column number (1-indexed)
        filename: (str | None) Source file path, when parsed from a file
    """
    offset: int
    line: int
    column: int
    filename: str | None = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class ParseError(Exception):
    """Exception raised for syntax errors.

    Args:
        message: (str) Error description
        span: (Span | None) Position of the token that caused the error

    Attributes:
        message: (str) Error description
        span: (Span | None) Position of the token that caused the error
    """

    def __init__(self, message, span=None):
        self.message = message
        self.span = span
        super().__init__(message)

    def __str__(self):
        if self.span is None:
            return self.message
        return f"{self.span}: {self.message}"

    def render(self, source):
        """Format the error with the offending source line and a caret.

        Args:
            source: (str) The source text that failed to parse

        Returns:
            (str) Multi-line error report
        """
        lines = [f"error: {self}"]
        if self.span is None:
            return lines[0]
        source_lines = source.splitlines()
        line_idx = self.span.line - 1
        if 0 <= line_idx < len(source_lines):
            source_line = source_lines[line_idx].rstrip()
            spaces = " " * (self.span.column - 1)
            lines.append(f"  | {source_line}")
            lines.append(f"  | {spaces}^")
        return "\n".join(lines)
