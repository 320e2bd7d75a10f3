"""
Syntax Repair Adapter — best-effort near-JSON to JSON conversion.

The selector only needs a callable that maps candidate text to text worth
a second strict parse. The default is backed by the json-repair library;
tests and callers can inject any other callable.
"""

import logging
from typing import Callable

from json_repair import repair_json

from llmjson.errors import RepairError

logger = logging.getLogger(__name__)

Repairer = Callable[[str], str]


def repair_json_text(text: str) -> str:
    """
    Repair near-JSON (unquoted keys, trailing commas, stray quotes,
    missing closers) with json_repair.

    Raises RepairError when the input is unrecoverable. The output is not
    guaranteed to mean what the model intended.
    """
    try:
        repaired = repair_json(text, ensure_ascii=False)
    except Exception as e:
        raise RepairError(f"json_repair failed: {e}") from e

    # json_repair signals "nothing salvageable" with an empty result
    if not isinstance(repaired, str) or repaired.strip() in ("", '""'):
        raise RepairError("json_repair returned an empty result")

    logger.debug("Repaired %d chars into %d chars", len(text), len(repaired))
    return repaired
