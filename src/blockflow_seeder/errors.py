"""Errors raised while loading, validating and migrating seeds.

Every error is fatal to the current run: callers stop issuing writes and
report it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from blockflow_seeder.migration.results import MigrationResult


class SeedError(Exception):
    """Base class for all seeder errors."""


@dataclass(eq=False)
class CycleDetected(SeedError):
    """Block definitions that can never be ordered parent-before-child.

    Covers true cycles, self-references and parents missing from the input.
    """

    slugs: tuple[str, ...]
    detail: str = ""

    def __str__(self) -> str:
        message = f"Unorderable block inheritance: {', '.join(self.slugs)}"
        return f"{message} ({self.detail})" if self.detail else message


@dataclass(eq=False)
class ValidationFailed(SeedError):
    """A structural violation in a workflow template."""

    field: str
    message: str
    template_slug: str | None = None

    def __str__(self) -> str:
        if self.template_slug:
            return f"{self.template_slug}: {self.field}: {self.message}"
        return f"{self.field}: {self.message}"

    def for_template(self, slug: str) -> ValidationFailed:
        return replace(self, template_slug=slug)


@dataclass(eq=False)
class PersistenceFailed(SeedError):
    """A store call failed; the original error is chained as `__cause__`."""

    slug: str
    operation: str
    temp_id: str | None = None

    def __str__(self) -> str:
        target = f"{self.slug} ({self.temp_id})" if self.temp_id else self.slug
        message = f"Failed to {self.operation} {target}"
        if self.__cause__ is not None:
            message = f"{message}: {self.__cause__}"
        return message


@dataclass(eq=False)
class MigrationTimedOut(SeedError):
    """The run hit its deadline; `applied` writes stay committed."""

    timeout_seconds: float
    applied: tuple[str, ...]
    remaining: tuple[str, ...]
    result: MigrationResult | None = None

    def __str__(self) -> str:
        return (
            f"Migration timed out after {self.timeout_seconds:g}s "
            f"({len(self.applied)} processed, {len(self.remaining)} remaining)"
        )


@dataclass(eq=False)
class DuplicateSlug(SeedError):
    slug: str
    kind: str = "block definition"

    def __str__(self) -> str:
        return f"Duplicate {self.kind} slug: {self.slug!r}"


@dataclass(eq=False)
class SeedLoadError(SeedError):
    """A seed file could not be parsed into specs."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"
