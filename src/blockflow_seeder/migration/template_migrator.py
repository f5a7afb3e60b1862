"""Upsert workflow templates and rebuild their step/group/edge graphs.

Every template is validated before the first write. A changed template has
its graph cleared and recreated, so stored ids for steps, groups and edges are
not stable across updates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Protocol, TypeVar

from blockflow_seeder.errors import PersistenceFailed, SeedError
from blockflow_seeder.migration.results import DryRunResult, MigrationResult, UpdateInfo
from blockflow_seeder.workflows.models import BlockGroup, Edge, Endpoint, Step, StepRef, WorkflowTemplate
from blockflow_seeder.workflows.records import WorkflowTemplateRecord
from blockflow_seeder.workflows.registry import TemplateRegistry
from blockflow_seeder.workflows.validator import validate_template

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TemplateRepository(Protocol):
    def get_by_slug(self, slug: str) -> WorkflowTemplateRecord | None: ...

    def create_template(self, template: WorkflowTemplate) -> str: ...

    def update_template(self, template_id: str, fields: dict[str, object]) -> None: ...

    def clear_graph(self, template_id: str) -> None: ...

    def create_group(
        self, template_id: str, group: BlockGroup, *, parent_id: str | None
    ) -> str: ...

    def create_step(self, template_id: str, step: Step, *, group_id: str | None) -> str: ...

    def create_edge(
        self, template_id: str, edge: Edge, *, source_id: str, target_id: str
    ) -> str: ...


def template_changes(existing: WorkflowTemplateRecord, template: WorkflowTemplate) -> list[str]:
    fields: list[str] = []
    if existing.version != template.version:
        fields.append("version")
    if existing.name != template.name:
        fields.append("name")
    if existing.description != template.description:
        fields.append("description")
    return fields


class TemplateMigrator:
    def __init__(self, *, templates: TemplateRepository) -> None:
        self._templates = templates

    @staticmethod
    def _as_list(templates: TemplateRegistry | Iterable[WorkflowTemplate]) -> list[WorkflowTemplate]:
        if isinstance(templates, TemplateRegistry):
            return templates.get_all()
        return list(templates)

    @staticmethod
    def validate_all(templates: Iterable[WorkflowTemplate]) -> None:
        """Raise the first violation of the first invalid template."""

        for template in templates:
            violation = validate_template(template)
            if violation is not None:
                raise violation.for_template(template.slug)

    def _persist(
        self, slug: str, operation: str, call: Callable[[], T], *, temp_id: str | None = None
    ) -> T:
        try:
            return call()
        except SeedError:
            raise
        except Exception as e:
            raise PersistenceFailed(slug=slug, operation=operation, temp_id=temp_id) from e

    def migrate(self, templates: TemplateRegistry | Iterable[WorkflowTemplate]) -> MigrationResult:
        """Create or update every template.

        Raises:
            ValidationFailed: tagged with the template slug, before any write.
            PersistenceFailed: on the first store error.
        """

        items = self._as_list(templates)
        self.validate_all(items)

        result = MigrationResult()
        for template in items:
            slug = template.slug
            existing = self._persist(slug, "look up", lambda: self._templates.get_by_slug(slug))

            if existing is None:
                template_id = self._persist(
                    slug, "create", lambda: self._templates.create_template(template)
                )
                self._write_graph(template_id, template)
                logger.info(
                    "Created workflow template",
                    extra={"slug": slug, "version": template.version, "id": template_id},
                )
                result.created.append(slug)
                continue

            changes = template_changes(existing, template)
            if not changes:
                logger.debug("Workflow template unchanged", extra={"slug": slug})
                result.unchanged.append(slug)
                continue

            logger.info(
                "Updating workflow template",
                extra={
                    "slug": slug,
                    "old_version": existing.version,
                    "new_version": template.version,
                    "changes": ", ".join(changes),
                },
            )
            template_id = existing.id
            fields: dict[str, object] = {
                "version": template.version,
                "name": template.name,
                "description": template.description,
            }
            self._persist(
                slug, "update", lambda: self._templates.update_template(template_id, fields)
            )
            self._persist(slug, "clear graph", lambda: self._templates.clear_graph(template_id))
            self._write_graph(template_id, template)
            result.updated.append(slug)

        logger.info(
            "Template migration completed",
            extra={
                "created_count": len(result.created),
                "updated_count": len(result.updated),
                "unchanged_count": len(result.unchanged),
            },
        )
        return result

    def _write_graph(self, template_id: str, template: WorkflowTemplate) -> None:
        slug = template.slug
        repo = self._templates

        group_ids: dict[str, str] = {}
        for group in template.groups_parent_first():
            parent_id = group_ids[group.parent_temp_id] if group.parent_temp_id else None
            group_ids[group.temp_id] = self._persist(
                slug,
                "create block group",
                lambda: repo.create_group(template_id, group, parent_id=parent_id),
                temp_id=group.temp_id,
            )

        step_ids: dict[str, str] = {}
        for step in template.steps:
            group_id = group_ids[step.block_group_temp_id] if step.block_group_temp_id else None
            step_ids[step.temp_id] = self._persist(
                slug,
                "create step",
                lambda: repo.create_step(template_id, step, group_id=group_id),
                temp_id=step.temp_id,
            )

        def _resolve(endpoint: Endpoint | None) -> str:
            # Validation guarantees every endpoint is present and declared.
            assert endpoint is not None
            if isinstance(endpoint, StepRef):
                return step_ids[endpoint.temp_id]
            return group_ids[endpoint.temp_id]

        for index, edge in enumerate(template.edges):
            source_id = _resolve(edge.source)
            target_id = _resolve(edge.target)
            self._persist(
                slug,
                "create edge",
                lambda: repo.create_edge(
                    template_id, edge, source_id=source_id, target_id=target_id
                ),
                temp_id=f"edges[{index}]",
            )

    def dry_run(self, templates: TemplateRegistry | Iterable[WorkflowTemplate]) -> DryRunResult:
        items = self._as_list(templates)
        self.validate_all(items)

        result = DryRunResult()
        for template in items:
            slug = template.slug
            existing = self._persist(slug, "look up", lambda: self._templates.get_by_slug(slug))
            if existing is None:
                result.to_create.append(slug)
                continue
            changes = template_changes(existing, template)
            if changes:
                result.to_update.append(
                    UpdateInfo(
                        slug=slug,
                        old_version=existing.version,
                        new_version=template.version,
                        reason=", ".join(changes),
                    )
                )
            else:
                result.unchanged.append(slug)
        return result
