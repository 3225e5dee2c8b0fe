"""Errors raised by the analysis services."""


class EmptyTextError(ValueError):
    """Raised when an analysis is requested for empty or whitespace-only text."""

    def __init__(self, message: str = "Text is required") -> None:
        super().__init__(message)


def require_text(text: str) -> str:
    """Return *text* unchanged, or raise EmptyTextError if it has no content."""
    if not text or not text.strip():
        raise EmptyTextError()
    return text
