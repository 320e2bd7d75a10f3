"""
Shape Descriptors — The structural view of a schema used for reconciliation.

Only key names and the object/array category of each top-level field are
kept. Accepted schema sources:
- pydantic BaseModel subclasses (field aliases win over attribute names)
- JSON Schema dicts, e.g. the output of Model.model_json_schema()
"""

import collections.abc
from dataclasses import dataclass, field
from types import NoneType, UnionType
from typing import Annotated, Any, Union, get_args, get_origin

from pydantic import BaseModel, RootModel

OBJECT = "object"
ARRAY = "array"
OTHER = "other"

MAX_REF_HOPS = 32
_TYPE_NAMES = {dict: "an object", list: "an array"}

_SEQUENCE_ORIGINS = {list, collections.abc.Sequence, collections.abc.MutableSequence}


@dataclass(frozen=True)
class FieldShape:
    """
    Structural shape of one field.

    For OBJECT fields `keys` are the child keys; for ARRAY fields they are
    the keys of the element object (empty when elements are not objects).
    """

    kind: str = OTHER
    keys: tuple[str, ...] = ()
    required: frozenset[str] = frozenset()

    @property
    def has_child_keys(self) -> bool:
        return self.kind in (OBJECT, ARRAY) and bool(self.keys)

    def matches(self, obj: Any) -> bool:
        """
        True if `obj` is a non-empty dict with every required key and no
        undeclared key. With no required keys at all, every declared key must
        be present.
        """
        if not isinstance(obj, dict) or not obj or not self.keys:
            return False
        present = set(obj)
        if not self.required:
            return present == set(self.keys)
        return self.required <= present and present <= set(self.keys)


@dataclass(frozen=True)
class ShapeDescriptor:
    is_object: bool
    fields: dict[str, FieldShape] = field(default_factory=dict)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self.fields)

    @property
    def root_key(self) -> str | None:
        """The single top-level key, or None if there isn't exactly one."""
        if self.is_object and len(self.fields) == 1:
            return next(iter(self.fields))
        return None


# --- pydantic models ---

def _is_model(tp) -> bool:
    # parametrised aliases like list[X] pass isinstance(..., type) on 3.10
    return get_origin(tp) is None and isinstance(tp, type) and issubclass(tp, BaseModel)


def _unwrap(annotation):
    """Strip Annotated[...] and Optional[...] down to the underlying type."""
    origin = get_origin(annotation)
    if origin is Annotated:
        return _unwrap(get_args(annotation)[0])
    if origin in (Union, UnionType):
        args = [a for a in get_args(annotation) if a is not NoneType]
        if len(args) == 1:
            return _unwrap(args[0])
    return annotation


def _model_keys(model: type[BaseModel]) -> tuple[tuple[str, ...], frozenset[str]]:
    keys = []
    required = set()
    for name, info in model.model_fields.items():
        key = info.alias or name
        keys.append(key)
        if info.is_required():
            required.add(key)
    return tuple(keys), frozenset(required)


def _field_from_annotation(annotation) -> FieldShape:
    tp = _unwrap(annotation)

    if _is_model(tp) and not issubclass(tp, RootModel):
        keys, required = _model_keys(tp)
        return FieldShape(OBJECT, keys, required)

    origin = get_origin(tp)
    if origin in _SEQUENCE_ORIGINS or tp is list:
        args = get_args(tp)
        element = _unwrap(args[0]) if args else None
        if _is_model(element) and not issubclass(element, RootModel):
            keys, required = _model_keys(element)
            return FieldShape(ARRAY, keys, required)
        return FieldShape(ARRAY)

    if origin is dict or tp is dict:
        return FieldShape(OBJECT)

    return FieldShape(OTHER)


def _from_model(model: type[BaseModel]) -> ShapeDescriptor:
    if issubclass(model, RootModel):
        return ShapeDescriptor(is_object=False)
    fields = {}
    for name, info in model.model_fields.items():
        fields[info.alias or name] = _field_from_annotation(info.annotation)
    return ShapeDescriptor(is_object=True, fields=fields)


# --- JSON Schema dicts ---

def _expect(value, expected: type, what: str):
    if not isinstance(value, expected):
        raise ValueError(
            f"JSON Schema {what} must be {_TYPE_NAMES[expected]}, got {type(value).__name__}"
        )
    return value


def _resolve(node: dict, defs: dict, hops: int = 0) -> dict:
    """Follow $ref and single-option anyOf/oneOf/allOf wrappers."""
    if hops > MAX_REF_HOPS:
        raise ValueError("JSON Schema $ref chain too deep")
    _expect(node, dict, "node")

    ref = node.get("$ref")
    if isinstance(ref, str):
        name = ref.rsplit("/", 1)[-1]
        if name not in defs:
            raise ValueError(f"Unresolvable $ref: {ref}")
        return _resolve(defs[name], defs, hops + 1)

    for combinator in ("anyOf", "oneOf", "allOf"):
        options = node.get(combinator)
        if isinstance(options, list):
            non_null = [o for o in options if isinstance(o, dict) and o.get("type") != "null"]
            if len(non_null) == 1:
                return _resolve(non_null[0], defs, hops + 1)

    return node


def _is_object_schema(node: dict) -> bool:
    return node.get("type") == "object" or "properties" in node


def _object_keys(node: dict) -> tuple[tuple[str, ...], frozenset[str]]:
    keys = tuple(_expect(node.get("properties", {}), dict, "'properties'"))
    required = _expect(node.get("required", []), list, "'required'")
    if not all(isinstance(k, str) for k in required):
        raise ValueError("JSON Schema 'required' must list property names")
    required = frozenset(required) & frozenset(keys)
    return keys, required


def _field_from_json_schema(node: dict, defs: dict) -> FieldShape:
    node = _resolve(node, defs)

    if _is_object_schema(node):
        keys, required = _object_keys(node)
        return FieldShape(OBJECT, keys, required)

    if node.get("type") == "array":
        items = node.get("items")
        if isinstance(items, dict):
            items = _resolve(items, defs)
            if _is_object_schema(items):
                keys, required = _object_keys(items)
                return FieldShape(ARRAY, keys, required)
        return FieldShape(ARRAY)

    return FieldShape(OTHER)


def _from_json_schema(schema: dict) -> ShapeDescriptor:
    defs = {
        **_expect(schema.get("definitions", {}), dict, "'definitions'"),
        **_expect(schema.get("$defs", {}), dict, "'$defs'"),
    }
    root = _resolve(schema, defs)
    if not _is_object_schema(root):
        return ShapeDescriptor(is_object=False)

    fields = {}
    for key, sub in _expect(root.get("properties", {}), dict, "'properties'").items():
        fields[key] = _field_from_json_schema(sub if isinstance(sub, dict) else {}, defs)
    return ShapeDescriptor(is_object=True, fields=fields)


def describe_shape(schema) -> ShapeDescriptor:
    """
    Build a ShapeDescriptor from a pydantic model class, a JSON Schema dict,
    or an existing descriptor.

    Raises TypeError for any other schema type and ValueError for a JSON
    Schema that cannot be described: unresolvable $refs, or keywords such
    as properties, required and $defs holding the wrong JSON type.
    """
    if isinstance(schema, ShapeDescriptor):
        return schema
    if _is_model(schema):
        return _from_model(schema)
    if isinstance(schema, dict):
        return _from_json_schema(schema)
    raise TypeError(
        f"Unsupported schema type {type(schema).__name__}; expected a pydantic "
        "model class, a JSON Schema dict or a ShapeDescriptor"
    )
