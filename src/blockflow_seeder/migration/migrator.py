"""Upsert block definitions into a store, parents first.

The in-code specs are authoritative. A run sorts every spec before touching
the store, then walks the sorted list once: missing definitions are created,
out-of-date ones updated, the rest skipped. Re-running against an up-to-date
store issues no writes.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import Protocol, TypeVar

from blockflow_seeder.blocks.models import (
    BlockDefinitionRecord,
    BlockDefinitionSpec,
    BlockVersionSnapshot,
    ResolvedBlockDefinition,
    resolve_block,
)
from blockflow_seeder.blocks.registry import BlockRegistry
from blockflow_seeder.errors import MigrationTimedOut, PersistenceFailed, SeedError
from blockflow_seeder.i18n import DEFAULT_LOCALE
from blockflow_seeder.migration.changes import describe_changes, has_changes
from blockflow_seeder.migration.results import DryRunResult, MigrationResult, UpdateInfo
from blockflow_seeder.migration.topology import topological_sort

logger = logging.getLogger(__name__)

T = TypeVar("T")

INITIAL_SNAPSHOT_REASON = "Initial seed"
UPDATE_SNAPSHOT_REASON = "Migration update"


class BlockDefinitionRepository(Protocol):
    def get_by_slug(self, slug: str) -> BlockDefinitionRecord | None: ...

    def create(self, record: BlockDefinitionRecord) -> str: ...

    def update(self, record_id: str, fields: dict[str, object]) -> None: ...


class BlockVersionRepository(Protocol):
    def create(self, snapshot: BlockVersionSnapshot) -> str: ...


def _persist(slug: str, operation: str, call: Callable[[], T]) -> T:
    try:
        return call()
    except SeedError:
        raise
    except Exception as e:
        raise PersistenceFailed(slug=slug, operation=operation) from e


def _update_fields(resolved: ResolvedBlockDefinition, parent_id: str | None) -> dict[str, object]:
    return {
        "version": resolved.version,
        "name": resolved.name,
        "description": resolved.description,
        "category": resolved.category,
        "subcategory": resolved.subcategory,
        "code": resolved.code,
        "config_schema": resolved.config_schema,
        "enabled": resolved.enabled,
        "parent_id": parent_id,
    }


class Migrator:
    """Apply block definition specs to a `BlockDefinitionRepository`.

    When `versions` is given, a snapshot is recorded after each create and
    before each update that changes the version number.
    """

    def __init__(
        self,
        *,
        blocks: BlockDefinitionRepository,
        versions: BlockVersionRepository | None = None,
        locale: str = DEFAULT_LOCALE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._blocks = blocks
        self._versions = versions
        self._locale = locale
        self._clock = clock

    def _sorted(
        self, specs: BlockRegistry | Iterable[BlockDefinitionSpec]
    ) -> list[ResolvedBlockDefinition]:
        if isinstance(specs, BlockRegistry):
            specs = specs.get_all()
        resolved = [resolve_block(spec, self._locale) for spec in specs]
        return topological_sort(resolved)

    def migrate(
        self,
        specs: BlockRegistry | Iterable[BlockDefinitionSpec],
        *,
        timeout_seconds: float | None = None,
    ) -> MigrationResult:
        """Create or update every definition in `specs`.

        Raises:
            CycleDetected: before any write if the specs cannot be ordered.
            PersistenceFailed: on the first store error; later definitions are
                not processed.
            MigrationTimedOut: if `timeout_seconds` elapses between two
                definitions. Writes already made stay in place.
        """

        ordered = self._sorted(specs)
        deadline = None if timeout_seconds is None else self._clock() + timeout_seconds

        logger.info(
            "Starting block migration",
            extra={"definitions": len(ordered), "locale": self._locale},
        )

        result = MigrationResult()
        ids_by_slug: dict[str, str] = {}
        for index, resolved in enumerate(ordered):
            if deadline is not None and self._clock() >= deadline:
                assert timeout_seconds is not None
                raise MigrationTimedOut(
                    timeout_seconds=timeout_seconds,
                    applied=result.processed(),
                    remaining=tuple(r.slug for r in ordered[index:]),
                    result=result,
                )
            self._apply(resolved, ids_by_slug, result)

        logger.info(
            "Block migration completed",
            extra={
                "created_count": len(result.created),
                "updated_count": len(result.updated),
                "unchanged_count": len(result.unchanged),
            },
        )
        return result

    def _apply(
        self,
        resolved: ResolvedBlockDefinition,
        ids_by_slug: dict[str, str],
        result: MigrationResult,
    ) -> None:
        slug = resolved.slug
        # Sorting guarantees the parent was handled earlier in this run.
        parent_id = ids_by_slug[resolved.parent_slug] if resolved.parent_slug else None

        existing = _persist(slug, "look up", lambda: self._blocks.get_by_slug(slug))

        if existing is None:
            record = resolved.to_record(parent_id=parent_id)
            record_id = _persist(slug, "create", lambda: self._blocks.create(record))
            ids_by_slug[slug] = record_id
            logger.info(
                "Created block definition",
                extra={"slug": slug, "version": resolved.version, "id": record_id},
            )
            self._snapshot_initial(record.model_copy(update={"id": record_id}))
            result.created.append(slug)
            return

        if existing.id is None:
            raise PersistenceFailed(slug=slug, operation="look up") from ValueError(
                "stored record has no id"
            )
        existing_id = existing.id
        ids_by_slug[slug] = existing_id

        if not has_changes(existing, resolved):
            logger.debug("Block definition unchanged", extra={"slug": slug})
            result.unchanged.append(slug)
            return

        logger.info(
            "Updating block definition",
            extra={
                "slug": slug,
                "old_version": existing.version,
                "new_version": resolved.version,
                "changes": describe_changes(existing, resolved),
            },
        )
        if self._versions is not None and existing.version != resolved.version:
            snapshot = BlockVersionSnapshot(
                block_id=existing_id,
                slug=slug,
                version=existing.version,
                reason=UPDATE_SNAPSHOT_REASON,
                record=existing,
            )
            versions = self._versions
            _persist(slug, "snapshot", lambda: versions.create(snapshot))

        fields = _update_fields(resolved, parent_id)
        _persist(slug, "update", lambda: self._blocks.update(existing_id, fields))
        result.updated.append(slug)

    def _snapshot_initial(self, record: BlockDefinitionRecord) -> None:
        if self._versions is None or record.id is None:
            return
        snapshot = BlockVersionSnapshot(
            block_id=record.id,
            slug=record.slug,
            version=record.version,
            reason=INITIAL_SNAPSHOT_REASON,
            record=record,
        )
        try:
            self._versions.create(snapshot)
        except Exception:
            # The definition itself is in place; a missing first snapshot is recoverable.
            logger.warning(
                "Failed to record initial version snapshot",
                exc_info=True,
                extra={"slug": record.slug},
            )

    def dry_run(self, specs: BlockRegistry | Iterable[BlockDefinitionSpec]) -> DryRunResult:
        """Report what `migrate` would do without writing anything."""

        result = DryRunResult()
        for resolved in self._sorted(specs):
            slug = resolved.slug
            existing = _persist(slug, "look up", lambda: self._blocks.get_by_slug(slug))
            if existing is None:
                result.to_create.append(slug)
            elif has_changes(existing, resolved):
                result.to_update.append(
                    UpdateInfo(
                        slug=slug,
                        old_version=existing.version,
                        new_version=resolved.version,
                        reason=describe_changes(existing, resolved),
                    )
                )
            else:
                result.unchanged.append(slug)
        return result
