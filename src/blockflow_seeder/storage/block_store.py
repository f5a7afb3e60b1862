"""JSON file stores for block definitions and their version snapshots.

Each store keeps its whole collection in one JSON array and rewrites the file
on every change. That is plenty for seed data; a real deployment plugs a
database-backed repository into the migrator instead.
"""

from __future__ import annotations

import json
import threading
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel

from blockflow_seeder.blocks.models import BlockDefinitionRecord, BlockVersionSnapshot

ModelT = TypeVar("ModelT", bound=BaseModel)


def _utc_iso_now() -> str:
    return datetime.now(tz=UTC).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def load_records(path: Path, model: type[ModelT]) -> list[ModelT]:
    if not path.exists():
        return []
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a JSON array")
    return [model.model_validate(item) for item in raw]


def save_records(path: Path, records: list[ModelT]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [r.model_dump(mode="json") for r in records]
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


@dataclass
class JsonBlockDefinitionStore:
    path: Path

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def list(self) -> list[BlockDefinitionRecord]:
        with self._lock:
            return load_records(self.path, BlockDefinitionRecord)

    def get_by_slug(self, slug: str) -> BlockDefinitionRecord | None:
        with self._lock:
            for record in load_records(self.path, BlockDefinitionRecord):
                if record.slug == slug:
                    return record
            return None

    def create(self, record: BlockDefinitionRecord) -> str:
        with self._lock:
            records = load_records(self.path, BlockDefinitionRecord)
            if any(r.slug == record.slug for r in records):
                raise ValueError(f"block definition already exists: {record.slug}")
            now = _utc_iso_now()
            stored = record.model_copy(
                update={"id": record.id or _new_id(), "created_at": now, "updated_at": now}
            )
            records.append(stored)
            save_records(self.path, records)
            assert stored.id is not None
            return stored.id

    def update(self, record_id: str, fields: dict[str, object]) -> None:
        with self._lock:
            records = load_records(self.path, BlockDefinitionRecord)
            for idx, record in enumerate(records):
                if record.id != record_id:
                    continue
                merged = {
                    **record.model_dump(),
                    **fields,
                    "id": record.id,
                    "updated_at": _utc_iso_now(),
                }
                records[idx] = BlockDefinitionRecord.model_validate(merged)
                save_records(self.path, records)
                return
            raise KeyError(record_id)


@dataclass
class JsonBlockVersionStore:
    path: Path

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def create(self, snapshot: BlockVersionSnapshot) -> str:
        with self._lock:
            snapshots = load_records(self.path, BlockVersionSnapshot)
            stored = snapshot.model_copy(
                update={"id": snapshot.id or _new_id(), "created_at": _utc_iso_now()}
            )
            snapshots.append(stored)
            save_records(self.path, snapshots)
            assert stored.id is not None
            return stored.id

    def list_for_block(self, block_id: str) -> list[BlockVersionSnapshot]:
        with self._lock:
            return [
                s for s in load_records(self.path, BlockVersionSnapshot) if s.block_id == block_id
            ]
