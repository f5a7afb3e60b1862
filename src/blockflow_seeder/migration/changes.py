"""Decide whether a persisted block definition is out of date.

Both sides are compared as already-resolved plain values; locale resolution
happens before anything here is called.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any, Protocol

NO_SPECIFIC_CHANGES = "no specific changes"


class ComparableDefinition(Protocol):
    """Fields shared by a persisted record and a resolved spec."""

    @property
    def version(self) -> int: ...

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def category(self) -> Any: ...

    @property
    def subcategory(self) -> str | None: ...

    @property
    def code(self) -> str: ...

    @property
    def config_schema(self) -> str | bytes | None: ...


def _is_absent(raw: str | bytes | None) -> bool:
    return raw is None or not raw.strip()


def _same_value(a: Any, b: Any) -> bool:
    # bool is an int subclass, so true/1 and false/0 must be told apart first.
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(_same_value(a[k], b[k]) for k in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(_same_value(x, y) for x, y in zip(a, b))
    return bool(a == b)


def json_equal(a: str | bytes | None, b: str | bytes | None) -> bool:
    """Compare two JSON documents structurally.

    Both absent (None or blank) is equal, exactly one absent is not. Key order
    and whitespace are ignored. `true` and `1` differ, `1` and `1.0` do not.
    Malformed JSON on either side compares as not equal so that the
    definition gets re-migrated rather than skipped.
    """

    if _is_absent(a) and _is_absent(b):
        return True
    if _is_absent(a) or _is_absent(b):
        return False

    try:
        parsed_a = json.loads(a)  # type: ignore[arg-type]
        parsed_b = json.loads(b)  # type: ignore[arg-type]
    except (json.JSONDecodeError, UnicodeDecodeError):
        return False

    return _same_value(parsed_a, parsed_b)


def _subcategory_equal(a: str | None, b: str | None) -> bool:
    return (a or None) == (b or None)


def _category_value(category: Any) -> Any:
    return getattr(category, "value", category)


# Order here is the order fields are reported in by describe_changes.
_FIELD_CHECKS: tuple[tuple[str, Callable[[ComparableDefinition, ComparableDefinition], bool]], ...] = (
    ("version", lambda e, s: e.version == s.version),
    ("name", lambda e, s: e.name == s.name),
    ("description", lambda e, s: e.description == s.description),
    ("category", lambda e, s: _category_value(e.category) == _category_value(s.category)),
    ("subcategory", lambda e, s: _subcategory_equal(e.subcategory, s.subcategory)),
    ("code", lambda e, s: e.code == s.code),
    ("config_schema", lambda e, s: json_equal(e.config_schema, s.config_schema)),
)


def changed_fields(existing: ComparableDefinition, spec: ComparableDefinition) -> list[str]:
    return [name for name, same in _FIELD_CHECKS if not same(existing, spec)]


def has_changes(existing: ComparableDefinition, spec: ComparableDefinition) -> bool:
    return any(not same(existing, spec) for _, same in _FIELD_CHECKS)


def describe_changes(existing: ComparableDefinition, spec: ComparableDefinition) -> str:
    """Comma-separated names of the fields `has_changes` would flag.

    Used for audit logging before an update is applied.
    """

    fields = changed_fields(existing, spec)
    if not fields:
        return NO_SPECIFIC_CHANGES
    return ", ".join(fields)
