"""
Output Parser — Extract structured JSON from LLM responses.

Two modes:
- "parse": first balanced {...} object, strict JSON only.
- "repair": every candidate object in order, with syntax repair as a
  fallback, then root-key reconciliation against an optional schema.

Handles preamble/trailing prose, code fences, concatenated objects,
unquoted keys, trailing commas and misnamed wrapper keys.
"""

import logging
from typing import Any

from llmjson.errors import JsonExtractionError
from llmjson.reconciler import Decision, NoOp, apply_decision, decide
from llmjson.repair import Repairer
from llmjson.scanner import outer_region
from llmjson.selector import select_strict, select_with_repair, strict_loads

logger = logging.getLogger(__name__)

PARSE = "parse"
REPAIR = "repair"
MODES = (PARSE, REPAIR)


def extract(text: str, mode: str = PARSE, schema=None,
            repairer: Repairer | None = None) -> tuple[Any, Decision]:
    """
    Parse the JSON object embedded in an LLM response and report the
    reconciliation decision applied to it (NoOp outside repair mode).

    Args:
        text: Raw model output.
        mode: "parse" (strict, no repair) or "repair".
        schema: pydantic model class, JSON Schema dict or ShapeDescriptor
            with a single root key. Only used in repair mode.
        repairer: Replacement for the default json_repair-backed repairer.

    Raises:
        NoJsonFoundError: no {...} region in the text.
        ParseFailedError: a region was found but never parsed.
        ValueError: unknown mode.
    """
    if mode not in MODES:
        raise ValueError(f"Unknown mode '{mode}'. Choose from: {', '.join(MODES)}")
    if not isinstance(text, str):
        raise TypeError(f"Expected str input, got {type(text).__name__}")

    if mode == PARSE:
        return select_strict(text), NoOp()

    result = select_with_repair(text, repairer)
    if schema is None:
        return result, NoOp()

    decision = decide(result, schema)
    return apply_decision(result, decision), decision


def parse_from_llm(text: str, mode: str = PARSE, schema=None,
                   repairer: Repairer | None = None) -> Any:
    """Parse the JSON object embedded in an LLM response. See extract()."""
    value, _ = extract(text, mode=mode, schema=schema, repairer=repairer)
    return value


def parse_as(text: str, model, repairer: Repairer | None = None):
    """
    Repair-mode parse reconciled against `model`, validated into an instance.

    pydantic's ValidationError propagates if the reshaped value still does
    not fit the model.
    """
    data = parse_from_llm(text, mode=REPAIR, schema=model, repairer=repairer)
    return model.model_validate(data)


def parse_json_response_or_raw(text: str, mode: str = REPAIR, schema=None) -> Any:
    """
    Parse JSON from an LLM response, falling back to a raw text wrapper.

    Returns the parsed value, or
    {"raw_response": text, "parse_error": True, "error": <kind>}
    if no valid JSON could be extracted.
    """
    try:
        return parse_from_llm(text, mode=mode, schema=schema)
    except JsonExtractionError as e:
        logger.warning("Could not extract JSON (%s): %s", e.kind, e)
        return {"raw_response": text, "parse_error": True, "error": e.kind}


def has_possible_json(text: str) -> bool:
    """Cheap pre-filter: a '{' appears before some later '}'."""
    if not isinstance(text, str):
        return False
    return outer_region(text) is not None


def is_json_string(text: str) -> bool:
    """True if the whole text is strictly valid JSON."""
    if not isinstance(text, str):
        return False
    try:
        strict_loads(text)
    except (ValueError, TypeError, RecursionError):
        return False
    return True
