"""
Schema Reconciler — Fix a missing or misnamed root key.

Models asked for {"character": {...}} often answer with the bare
{"name": ..., "age": ...} object, or with {"person": {...}}. Against a
schema with exactly one top-level key, the reconciler either wraps the
value under that key or renames the value's single key. It only acts on
structural evidence (key sets and object/array category) and never
touches nested fields.
"""

import logging
from dataclasses import dataclass
from typing import Any

from llmjson.schemas import ARRAY, OBJECT, FieldShape, ShapeDescriptor, describe_shape

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoOp:
    pass


@dataclass(frozen=True)
class Wrap:
    root_key: str


@dataclass(frozen=True)
class Rename:
    old_key: str
    new_key: str


Decision = NoOp | Wrap | Rename


def _expected_root(shape: ShapeDescriptor) -> tuple[str, FieldShape] | None:
    root_key = shape.root_key
    if root_key is None:
        return None
    root = shape.fields[root_key]
    if not root.has_child_keys:
        return None
    return root_key, root


def _matches_root(value: Any, root: FieldShape) -> bool:
    """Does `value` have the structure declared for the root field?"""
    if root.kind == OBJECT:
        return root.matches(value)
    if root.kind == ARRAY:
        return (
            isinstance(value, list)
            and len(value) > 0
            and root.matches(value[0])
        )
    return False


def decide(value: Any, schema) -> Decision:
    """
    Decide how `value` should be reshaped to fit `schema`.

    1. value already has the root key             -> NoOp
    2. value itself is the root's content         -> Wrap
    3. value's only key holds the root's content  -> Rename
    4. anything else                              -> NoOp
    """
    expected = _expected_root(describe_shape(schema))
    if expected is None:
        return NoOp()
    root_key, root = expected

    if isinstance(value, dict) and root_key in value:
        return NoOp()

    if _matches_root(value, root):
        return Wrap(root_key)

    if isinstance(value, dict) and len(value) == 1:
        only_key, inner = next(iter(value.items()))
        if _matches_root(inner, root):
            return Rename(only_key, root_key)

    return NoOp()


def apply_decision(value: Any, decision: Decision) -> Any:
    """Return the reshaped value. The input is never mutated."""
    if isinstance(decision, Wrap):
        logger.info("Wrapped parsed value under missing root key '%s'", decision.root_key)
        return {decision.root_key: value}
    if isinstance(decision, Rename):
        logger.info("Renamed root key '%s' to '%s'", decision.old_key, decision.new_key)
        return {decision.new_key: value[decision.old_key]}
    return value


def reconcile(value: Any, schema) -> Any:
    """Wrap or rename the root key of `value` to match a single-root schema."""
    return apply_decision(value, decide(value, schema))
