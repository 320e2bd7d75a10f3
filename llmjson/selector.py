"""
Candidate Selector — Turn located spans into a parsed JSON value.

Two strategies:
1. Strict: first span only, strict parse, no repair.
2. Repair: every span in document order (strict parse, then repair and
   parse), then a bracket-only first span as last resort.

Each attempt produces a ParseAttempt; only exhaustion raises.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from llmjson.errors import NoJsonFoundError, ParseFailedError, RepairError
from llmjson.repair import Repairer, repair_json_text
from llmjson.scanner import Span, find_all_spans, find_first_span, outer_region

logger = logging.getLogger(__name__)


def _reject_constant(name: str):
    raise ValueError(f"Non-standard JSON constant: {name}")


def strict_loads(text: str) -> Any:
    """json.loads without NaN/Infinity. Duplicate keys keep the last value."""
    return json.loads(text, parse_constant=_reject_constant)


@dataclass(frozen=True)
class ParseAttempt:
    value: Any = None
    error: Exception | None = None
    repaired: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def attempt_strict(candidate: str) -> ParseAttempt:
    try:
        return ParseAttempt(value=strict_loads(candidate))
    except (ValueError, TypeError, RecursionError) as e:
        return ParseAttempt(error=e)


def attempt_with_repair(candidate: str, repairer: Repairer) -> ParseAttempt:
    """Strict parse, then repair and strict parse again."""
    first = attempt_strict(candidate)
    if first.ok:
        return first

    try:
        repaired = repairer(candidate)
    except (RepairError, ValueError) as e:
        logger.debug("Repair failed for candidate of %d chars: %s", len(candidate), e)
        return ParseAttempt(error=e)

    second = attempt_strict(repaired)
    if second.ok:
        return ParseAttempt(value=second.value, repaired=True)
    logger.debug("Repaired candidate still invalid: %s", second.error)
    return second


def select_strict(text: str) -> Any:
    """
    Parse the first balanced object in `text` without any repair.

    Raises NoJsonFoundError if there is no complete {...} span, or
    ParseFailedError if that span is not valid JSON.
    """
    span = find_first_span(text)
    if span is None:
        raise NoJsonFoundError("No JSON found in the string.", text)

    attempt = attempt_strict(span.extract(text))
    if not attempt.ok:
        raise ParseFailedError(
            f"Failed to parse JSON: {attempt.error}", text,
        ) from attempt.error
    return attempt.value


def select_with_repair(text: str, repairer: Repairer | None = None) -> Any:
    """
    Return the first candidate in document order that parses, repairing
    candidates that fail a strict parse.

    Raises NoJsonFoundError when no candidate region exists, and
    ParseFailedError when every candidate and the fallback failed.
    """
    repairer = repairer or repair_json_text

    region = outer_region(text)
    if region is None:
        raise NoJsonFoundError("No JSON found in the string.", text)

    spans = find_all_spans(text, region.start, region.end)
    logger.debug("Found %d candidate spans in region %d:%d",
                 len(spans), region.start, region.end)

    tried: set[Span] = set()
    last_error: Exception | None = None

    for span in spans:
        tried.add(span)
        attempt = attempt_with_repair(span.extract(text), repairer)
        if attempt.ok:
            logger.debug("Candidate %d:%d parsed (repaired=%s)",
                         span.start, span.end, attempt.repaired)
            return attempt.value
        last_error = attempt.error

    fallback = find_first_span(text, region.start, region.end, string_aware=False)
    if fallback is not None and fallback not in tried:
        tried.add(fallback)
        attempt = attempt_with_repair(fallback.extract(text), repairer)
        if attempt.ok:
            logger.debug("Bracket-only fallback %d:%d parsed (repaired=%s)",
                         fallback.start, fallback.end, attempt.repaired)
            return attempt.value
        last_error = attempt.error

    if not tried:
        raise NoJsonFoundError("No JSON found in the string.", text)

    raise ParseFailedError(
        f"No valid JSON found in the string after {len(tried)} candidate(s).",
        text,
        attempts=len(tried),
    ) from last_error
