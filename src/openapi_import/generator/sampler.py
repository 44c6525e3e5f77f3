"""Synthesize example values from JSON Schema fragments.

:func:`synthesize` builds a structurally plausible sample for a schema that
carries no explicit example.  It is meant for previews and request
templates, not for validation: the output is lossy but deterministic -- the
same schema always produces the same sample (date formats aside, which use
the injected clock).

Value precedence per node, first applicable rule wins:

1. ``const``
2. first ``enum`` member
3. ``default``
4. ``example``
5. type-directed synthesis (see :func:`schema_kind`)

Recursion stops at ``max_depth`` and yields ``None`` past it, which keeps
schemas that were expanded through a cycle from blowing up.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from openapi_import.models import SchemaKind

MAX_DEPTH = 8

NIL_UUID = "00000000-0000-0000-0000-000000000000"
PLACEHOLDER_EMAIL = "user@example.com"

_PRIMITIVE_TYPES = frozenset({"string", "integer", "number", "boolean"})

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def schema_type(schema: Any) -> Optional[str]:
    """Return the declared or inferred type of *schema*.

    OpenAPI 3.1 type lists (``["string", "null"]``) yield their first
    non-null entry.  Without a declared type, ``properties`` implies
    ``object`` and ``items`` implies ``array``.
    """
    if not isinstance(schema, dict):
        return None

    declared = schema.get("type")
    if isinstance(declared, list):
        declared = next((t for t in declared if t != "null"), None)
    if declared:
        return str(declared)
    if schema.get("properties") is not None:
        return "object"
    if schema.get("items") is not None:
        return "array"
    return None


def schema_kind(schema: Any) -> SchemaKind:
    """Classify *schema* into one of the :class:`~openapi_import.models.SchemaKind` variants.

    A determinable type always wins over combinators, mirroring the
    synthesis order.  A leftover ``$ref`` (an unresolved pointer or a
    circular sentinel) is ``REFERENCE``.
    """
    if not isinstance(schema, dict):
        return SchemaKind.UNKNOWN

    kind = schema_type(schema)
    if kind == "object":
        return SchemaKind.OBJECT
    if kind == "array":
        return SchemaKind.ARRAY
    if kind in _PRIMITIVE_TYPES:
        return SchemaKind.PRIMITIVE
    if any(_first(schema.get(key)) is not None for key in ("anyOf", "oneOf", "allOf")):
        return SchemaKind.COMBINATOR
    if "$ref" in schema:
        return SchemaKind.REFERENCE
    return SchemaKind.UNKNOWN


def synthesize(
    schema: Any,
    depth: int = 0,
    *,
    max_depth: int = MAX_DEPTH,
    clock: Optional[Clock] = None,
) -> Any:
    """Produce a sample value for *schema*.

    Args:
        schema: A (preferably dereferenced) schema fragment.
        depth: Current recursion depth; callers normally leave it at 0.
        max_depth: Depth beyond which ``None`` is returned.
        clock: Source of "now" for ``date`` and ``date-time`` strings.

    Returns:
        A plain value tree (dicts, lists, primitives).  ``None`` for anything
        that cannot be sampled.

    Example::

        >>> synthesize({"type": "object", "properties": {"a": {"type": "integer"}}})
        {'a': 0}
    """
    if not isinstance(schema, dict) or not schema or depth > max_depth:
        return None

    if "const" in schema:
        return schema["const"]
    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return enum[0]
    if "default" in schema:
        return schema["default"]
    if "example" in schema:
        return schema["example"]

    def _child(sub: Any) -> Any:
        return synthesize(sub, depth + 1, max_depth=max_depth, clock=clock)

    kind = schema_kind(schema)

    if kind is SchemaKind.OBJECT:
        properties = schema.get("properties")
        if not isinstance(properties, dict):
            return {}
        return {str(name): _child(sub) for name, sub in properties.items()}

    if kind is SchemaKind.ARRAY:
        return [_child(schema.get("items") or {})]

    if kind is SchemaKind.PRIMITIVE:
        return _sample_primitive(schema_type(schema), schema.get("format"), clock or _utcnow)

    if kind is SchemaKind.COMBINATOR:
        for key in ("anyOf", "oneOf"):
            first = _first(schema.get(key))
            if first is not None:
                return _child(first)
        combined: Any = {}
        for branch in schema["allOf"]:
            value = _child(branch)
            if isinstance(combined, dict) and isinstance(value, dict):
                combined = {**combined, **value}
            elif combined is None:
                combined = value
        return combined

    # REFERENCE and UNKNOWN carry nothing to sample.
    return None


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def _sample_primitive(kind: Optional[str], fmt: Any, clock: Clock) -> Any:
    if kind in ("integer", "number"):
        return 0
    if kind == "boolean":
        return False

    if fmt == "date-time":
        return clock().astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    if fmt == "date":
        return clock().astimezone(timezone.utc).date().isoformat()
    if fmt == "uuid":
        return NIL_UUID
    if fmt == "email":
        return PLACEHOLDER_EMAIL
    return "string"


def sample_to_text(schema: Any, *, max_depth: int = MAX_DEPTH) -> str:
    """Synthesize *schema* and render it for a single table cell.

    Containers become compact JSON, ``None`` becomes an empty string, and
    booleans are spelled the JSON way.
    """
    return to_cell_text(synthesize(schema, max_depth=max_depth))


def to_cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list, bool)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)


def flatten_schema_to_rows(
    base_name: str,
    schema: Any,
    max_depth: int = 3,
    depth: int = 0,
) -> list[tuple[str, str]]:
    """Flatten an object schema's properties into ``(key, value)`` rows.

    Nested object properties are expanded in place (by their own name, not a
    dotted path) up to *max_depth* levels; other properties become one row
    with an empty value for the user to fill.  An object without properties
    still yields one row named *base_name*.  Arrays and primitives yield a
    single row holding their sample.
    """
    if schema_kind(schema) is SchemaKind.OBJECT and isinstance(schema.get("properties"), dict):
        rows: list[tuple[str, str]] = []
        for key, sub in schema["properties"].items():
            key = str(key)
            if schema_kind(sub) is SchemaKind.OBJECT and depth < max_depth:
                rows.extend(flatten_schema_to_rows(key, sub, max_depth, depth + 1))
            else:
                rows.append((key, ""))
        return rows or [(base_name, "")]

    return [(base_name, sample_to_text(schema))]
