"""Outcome objects shared by the block and template migrators."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class MigrationResult:
    """Slugs in the order they were processed."""

    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.created) + len(self.updated) + len(self.unchanged)

    def processed(self) -> tuple[str, ...]:
        return (*self.created, *self.updated, *self.unchanged)

    def to_json(self) -> dict[str, object]:
        return {
            "created": list(self.created),
            "updated": list(self.updated),
            "unchanged": list(self.unchanged),
        }


@dataclass(frozen=True, slots=True)
class UpdateInfo:
    slug: str
    old_version: int
    new_version: int
    reason: str

    def to_json(self) -> dict[str, object]:
        return {
            "slug": self.slug,
            "old_version": self.old_version,
            "new_version": self.new_version,
            "reason": self.reason,
        }


@dataclass
class DryRunResult:
    to_create: list[str] = field(default_factory=list)
    to_update: list[UpdateInfo] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def has_pending_writes(self) -> bool:
        return bool(self.to_create or self.to_update)

    def to_json(self) -> dict[str, object]:
        return {
            "to_create": list(self.to_create),
            "to_update": [u.to_json() for u in self.to_update],
            "unchanged": list(self.unchanged),
        }
