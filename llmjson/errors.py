"""Extraction error types."""

PREVIEW_CHARS = 120


def _preview(text) -> str:
    if not isinstance(text, str):
        return repr(text)
    if len(text) <= PREVIEW_CHARS:
        return text
    return text[:PREVIEW_CHARS] + "..."


class JsonExtractionError(ValueError):
    """Base class for failures surfaced by parse_from_llm()."""

    kind = "extraction_error"

    def __init__(self, message: str, text: str | None = None):
        super().__init__(message)
        self.text_preview = _preview(text) if text is not None else None


class NoJsonFoundError(JsonExtractionError):
    """Raised when no bracketed region could be located in the text."""

    kind = "no_json_found"


class ParseFailedError(JsonExtractionError):
    """
    Raised when a bracketed region was located but never yielded valid JSON.

    `attempts` counts the candidates tried (1 in parse mode). The last
    underlying error is chained as __cause__.
    """

    kind = "parse_failed"

    def __init__(self, message: str, text: str | None = None, attempts: int = 1):
        super().__init__(message, text)
        self.attempts = attempts


class RepairError(Exception):
    """Raised by a repairer that cannot recover its input."""
