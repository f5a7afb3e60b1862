"""Sanity checks on block specs before they are migrated."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field

from blockflow_seeder.blocks.models import BlockDefinitionSpec
from blockflow_seeder.i18n import SUPPORTED_LOCALES


@dataclass(frozen=True, slots=True)
class BlockValidationError:
    slug: str
    field: str
    message: str

    def __str__(self) -> str:
        return f"[{self.slug}.{self.field}] {self.message}"


@dataclass(frozen=True, slots=True)
class BlockValidationSummary:
    total: int
    valid: int
    invalid: int
    errors: list[BlockValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _schema_error(raw: str | None) -> str | None:
    if raw is None or not raw.strip():
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        return f"invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})"
    if parsed is not None and not isinstance(parsed, dict):
        return "schema must be a JSON object"
    return None


def validate_block_spec(spec: BlockDefinitionSpec) -> list[BlockValidationError]:
    """Return every problem found in `spec`; an empty list means it is valid."""

    errors: list[BlockValidationError] = []

    if not spec.slug.strip():
        errors.append(BlockValidationError(spec.slug, "slug", "slug is required"))
    if spec.name.is_empty():
        errors.append(BlockValidationError(spec.slug, "name", "name is required"))
    if spec.version < 1:
        errors.append(BlockValidationError(spec.slug, "version", "version must be >= 1"))

    for locale in SUPPORTED_LOCALES:
        problem = _schema_error(getattr(spec.config_schema, locale))
        if problem is not None:
            errors.append(
                BlockValidationError(spec.slug, f"config_schema.{locale}", problem)
            )

    return errors


def validate_block_specs(specs: Iterable[BlockDefinitionSpec]) -> BlockValidationSummary:
    total = 0
    invalid = 0
    errors: list[BlockValidationError] = []
    for spec in specs:
        total += 1
        spec_errors = validate_block_spec(spec)
        if spec_errors:
            invalid += 1
            errors.extend(spec_errors)
    return BlockValidationSummary(total=total, valid=total - invalid, invalid=invalid, errors=errors)
