"""JSON file store for workflow templates and their graphs."""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from blockflow_seeder.storage.block_store import load_records, save_records
from blockflow_seeder.workflows.models import BlockGroup, Edge, Endpoint, Step, StepRef, WorkflowTemplate
from blockflow_seeder.workflows.records import (
    BlockGroupRecord,
    EdgeRecord,
    StepRecord,
    WorkflowTemplateRecord,
)


def _utc_iso_now() -> str:
    return datetime.now(tz=UTC).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def _endpoint_columns(endpoint: Endpoint | None, side: str, resolved_id: str) -> dict[str, str]:
    if isinstance(endpoint, StepRef):
        return {f"{side}_step_id": resolved_id}
    return {f"{side}_group_id": resolved_id}


@dataclass
class JsonTemplateStore:
    path: Path

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def _mutate(self, template_id: str, change: Callable[[WorkflowTemplateRecord], None]) -> None:
        with self._lock:
            records = load_records(self.path, WorkflowTemplateRecord)
            for record in records:
                if record.id == template_id:
                    change(record)
                    record.updated_at = _utc_iso_now()
                    save_records(self.path, records)
                    return
            raise KeyError(template_id)

    def list(self) -> list[WorkflowTemplateRecord]:
        with self._lock:
            return load_records(self.path, WorkflowTemplateRecord)

    def get_by_slug(self, slug: str) -> WorkflowTemplateRecord | None:
        with self._lock:
            for record in load_records(self.path, WorkflowTemplateRecord):
                if record.slug == slug:
                    return record
            return None

    def create_template(self, template: WorkflowTemplate) -> str:
        with self._lock:
            records = load_records(self.path, WorkflowTemplateRecord)
            if any(r.slug == template.slug for r in records):
                raise ValueError(f"workflow template already exists: {template.slug}")
            now = _utc_iso_now()
            record = WorkflowTemplateRecord(
                id=template.id or _new_id(),
                slug=template.slug,
                name=template.name,
                description=template.description,
                version=template.version,
                created_at=now,
                updated_at=now,
            )
            records.append(record)
            save_records(self.path, records)
            return record.id

    def update_template(self, template_id: str, fields: dict[str, object]) -> None:
        allowed = {"name", "description", "version"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"cannot update template fields: {', '.join(sorted(unknown))}")

        def _apply(record: WorkflowTemplateRecord) -> None:
            for key, value in fields.items():
                setattr(record, key, value)

        self._mutate(template_id, _apply)

    def clear_graph(self, template_id: str) -> None:
        def _clear(record: WorkflowTemplateRecord) -> None:
            record.edges.clear()
            record.steps.clear()
            record.block_groups.clear()

        self._mutate(template_id, _clear)

    def create_group(self, template_id: str, group: BlockGroup, *, parent_id: str | None) -> str:
        group_record = BlockGroupRecord(
            id=_new_id(),
            temp_id=group.temp_id,
            type=group.type.value,
            name=group.name,
            config=group.config,
            parent_id=parent_id,
        )
        self._mutate(template_id, lambda r: r.block_groups.append(group_record))
        return group_record.id

    def create_step(self, template_id: str, step: Step, *, group_id: str | None) -> str:
        step_record = StepRecord(
            id=_new_id(),
            temp_id=step.temp_id,
            name=step.name,
            type=step.type,
            config=step.config,
            group_id=group_id,
            block_slug=step.block_slug,
            trigger_type=step.trigger_type,
            trigger_config=step.trigger_config,
        )
        self._mutate(template_id, lambda r: r.steps.append(step_record))
        return step_record.id

    def create_edge(self, template_id: str, edge: Edge, *, source_id: str, target_id: str) -> str:
        edge_record = EdgeRecord(
            id=_new_id(),
            source_port=edge.source_port,
            target_port=edge.target_port,
            condition=edge.condition,
            **_endpoint_columns(edge.source, "source", source_id),
            **_endpoint_columns(edge.target, "target", target_id),
        )
        self._mutate(template_id, lambda r: r.edges.append(edge_record))
        return edge_record.id
