"""Unit tests for the JSON file stores."""

from __future__ import annotations

from pathlib import Path

import pytest

from blockflow_seeder.blocks.models import BlockCategory, BlockDefinitionRecord
from blockflow_seeder.storage import JsonBlockDefinitionStore, JsonTemplateStore
from blockflow_seeder.workflows.models import WorkflowTemplate


def _record(slug: str) -> BlockDefinitionRecord:
    return BlockDefinitionRecord(slug=slug, version=1, category=BlockCategory.UTILITY)


def test_create_assigns_id_and_timestamps(block_store: JsonBlockDefinitionStore) -> None:
    record_id = block_store.create(_record("log"))

    stored = block_store.get_by_slug("log")
    assert stored is not None
    assert stored.id == record_id
    assert stored.created_at is not None
    assert stored.created_at == stored.updated_at


def test_create_rejects_duplicate_slug(block_store: JsonBlockDefinitionStore) -> None:
    block_store.create(_record("log"))

    with pytest.raises(ValueError, match="already exists"):
        block_store.create(_record("log"))


def test_update_merges_and_validates_fields(block_store: JsonBlockDefinitionStore) -> None:
    record_id = block_store.create(_record("log"))

    block_store.update(record_id, {"version": 2, "category": "data", "subcategory": None})

    stored = block_store.get_by_slug("log")
    assert stored is not None
    assert stored.version == 2
    assert stored.category is BlockCategory.DATA
    assert stored.id == record_id


def test_update_unknown_id_raises_key_error(block_store: JsonBlockDefinitionStore) -> None:
    with pytest.raises(KeyError):
        block_store.update("missing", {"version": 2})


def test_missing_file_reads_as_empty(tmp_path: Path) -> None:
    store = JsonBlockDefinitionStore(tmp_path / "nowhere" / "blocks.json")

    assert store.list() == []
    assert store.get_by_slug("x") is None


def test_corrupt_file_is_an_error_not_an_empty_store(tmp_path: Path) -> None:
    path = tmp_path / "blocks.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError):
        JsonBlockDefinitionStore(path).list()


def test_template_graph_lifecycle(template_store: JsonTemplateStore) -> None:
    template = WorkflowTemplate.from_json(
        {
            "id": "00000000-0000-0000-0000-000000000001",
            "slug": "fixed-id",
            "name": "Fixed",
            "steps": [{"temp_id": "start", "name": "Start", "type": "start"}],
        }
    )

    template_id = template_store.create_template(template)
    step_id = template_store.create_step(template_id, template.steps[0], group_id=None)

    assert template_id == "00000000-0000-0000-0000-000000000001"
    stored = template_store.get_by_slug("fixed-id")
    assert stored is not None
    assert [s.id for s in stored.steps] == [step_id]

    template_store.update_template(template_id, {"name": "Renamed"})
    template_store.clear_graph(template_id)

    stored = template_store.get_by_slug("fixed-id")
    assert stored is not None
    assert stored.name == "Renamed"
    assert stored.steps == []


def test_template_store_rejects_unknown_fields(template_store: JsonTemplateStore) -> None:
    template_id = template_store.create_template(WorkflowTemplate(slug="t", name="T"))

    with pytest.raises(ValueError, match="slug"):
        template_store.update_template(template_id, {"slug": "other"})


def test_template_store_unknown_id(template_store: JsonTemplateStore) -> None:
    with pytest.raises(KeyError):
        template_store.clear_graph("missing")
