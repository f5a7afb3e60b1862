"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from blockflow_seeder.blocks.models import BlockDefinitionSpec
from blockflow_seeder.storage import JsonBlockDefinitionStore, JsonBlockVersionStore, JsonTemplateStore
from blockflow_seeder.workflows.models import WorkflowTemplate

HTTP_CHAIN = ["http", "rest-api", "bearer-api", "github-api", "github_create_issue"]


@pytest.fixture
def make_spec() -> Callable[..., BlockDefinitionSpec]:
    """Build a block spec with sensible defaults; keyword args override fields."""

    def _make(slug: str, **overrides: Any) -> BlockDefinitionSpec:
        data: dict[str, Any] = {
            "slug": slug,
            "version": 1,
            "name": {"en": f"{slug} (en)", "ja": f"{slug} (ja)"},
            "description": f"{slug} description",
            "category": "integration",
            "code": f"return '{slug}';",
            "config_schema": '{"type": "object"}',
        }
        data.update(overrides)
        return BlockDefinitionSpec.model_validate(data)

    return _make


@pytest.fixture
def http_chain(make_spec: Callable[..., BlockDefinitionSpec]) -> list[BlockDefinitionSpec]:
    """The HTTP inheritance chain, deliberately listed child-first."""

    specs = []
    for index, slug in enumerate(HTTP_CHAIN):
        parent = HTTP_CHAIN[index - 1] if index > 0 else None
        specs.append(make_spec(slug, parent_slug=parent))
    return list(reversed(specs))


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    path = tmp_path / "seed_state"
    path.mkdir()
    return path


@pytest.fixture
def block_store(state_dir: Path) -> JsonBlockDefinitionStore:
    return JsonBlockDefinitionStore(state_dir / "block_definitions.json")


@pytest.fixture
def version_store(state_dir: Path) -> JsonBlockVersionStore:
    return JsonBlockVersionStore(state_dir / "block_versions.json")


@pytest.fixture
def template_store(state_dir: Path) -> JsonTemplateStore:
    return JsonTemplateStore(state_dir / "workflow_templates.json")


@pytest.fixture
def make_template() -> Callable[..., WorkflowTemplate]:
    """Build a template from seed-shaped data; keyword args override top-level keys."""

    def _make(**overrides: Any) -> WorkflowTemplate:
        data: dict[str, Any] = {
            "slug": "sample",
            "name": "Sample",
            "version": 1,
            "steps": [{"temp_id": "start", "name": "Start", "type": "start"}],
            "edges": [],
        }
        data.update(overrides)
        return WorkflowTemplate.from_json(data)

    return _make
