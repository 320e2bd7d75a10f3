"""
Span Scanner — Locate balanced {...} regions inside raw LLM text.

Scanning is string-aware: a quote toggles an in-string flag and a
backslash consumes the next character. The toggle does not understand
JSON string grammar, so a raw quote inside a string value desynchronises
the flag for the rest of the scan. Repair fallbacks rely on candidates
having exactly this shape.
"""

from dataclasses import dataclass

OPEN_BRACE = "{"
CLOSE_BRACE = "}"
QUOTE = '"'
BACKSLASH = "\\"


@dataclass(frozen=True)
class Span:
    """Offsets of a candidate region; `end` is exclusive."""

    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Empty span: start={self.start} end={self.end}")

    def extract(self, text: str) -> str:
        return text[self.start:self.end]


def _bounds(text: str, stop: int | None) -> int:
    return len(text) if stop is None else min(stop, len(text))


def find_span_at(text: str, start: int, stop: int | None = None,
                 string_aware: bool = True) -> Span | None:
    """
    Return the balanced span opening at `start`, or None.

    `text[start]` must be an opening brace. With string_aware=False quotes
    and backslashes are ignored and only braces are counted.
    """
    limit = _bounds(text, stop)
    if start < 0 or start >= limit or text[start] != OPEN_BRACE:
        return None

    depth = 0
    in_string = False
    escape_next = False

    for i in range(start, limit):
        char = text[i]

        if string_aware:
            if escape_next:
                escape_next = False
                continue
            if char == BACKSLASH:
                escape_next = True
                continue
            if char == QUOTE:
                in_string = not in_string
                continue
            if in_string:
                continue

        if char == OPEN_BRACE:
            depth += 1
        elif char == CLOSE_BRACE:
            depth -= 1
            if depth == 0:
                return Span(start, i + 1)

    return None


def find_first_span(text: str, start: int = 0, stop: int | None = None,
                    string_aware: bool = True) -> Span | None:
    """Scan from the first opening brace in [start, stop) and return its span."""
    limit = _bounds(text, stop)
    first = text.find(OPEN_BRACE, start, limit)
    if first == -1:
        return None
    return find_span_at(text, first, limit, string_aware=string_aware)


def find_all_spans(text: str, start: int = 0, stop: int | None = None) -> list[Span]:
    """
    Return every completed span in [start, stop), ordered by start offset.

    Each opening brace is scanned independently, so nested and overlapping
    spans are all reported.
    """
    limit = _bounds(text, stop)
    spans = []
    i = text.find(OPEN_BRACE, start, limit)
    while i != -1:
        span = find_span_at(text, i, limit)
        if span is not None:
            spans.append(span)
        i = text.find(OPEN_BRACE, i + 1, limit)
    return spans


def outer_region(text: str) -> Span | None:
    """Span from the first '{' to the last '}' inclusive, or None."""
    start = text.find(OPEN_BRACE)
    end = text.rfind(CLOSE_BRACE)
    if start == -1 or end == -1 or end < start:
        return None
    return Span(start, end + 1)
