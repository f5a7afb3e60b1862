"""Unit tests for YAML seed loading and the built-in seeds."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from blockflow_seeder.blocks.loader import build_block_registry, load_block_specs
from blockflow_seeder.blocks.validation import validate_block_specs
from blockflow_seeder.errors import DuplicateSlug, SeedLoadError
from blockflow_seeder.migration.topology import topological_sort
from blockflow_seeder.workflows.loader import build_template_registry, load_templates
from blockflow_seeder.workflows.models import BlockGroupType, GroupRef, StepRef
from blockflow_seeder.workflows.validator import validate_template


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_block_documents_are_loaded_recursively_and_sorted(tmp_path: Path) -> None:
    _write(
        tmp_path / "nested" / "more.yml",
        "slug: zeta\ncategory: data\nname: Zeta\n",
    )
    _write(
        tmp_path / "blocks.yaml",
        "\n".join(
            [
                "slug: beta",
                "category: logic",
                "name: {en: Beta, ja: ベータ}",
                "code: |",
                "  return 1;",
                "",
                "---",
                "# no slug, skipped",
                "name: Orphan",
                "---",
                "slug: alpha",
                "category: ai",
                "name: Alpha",
                "subcategory: ''",
                "config_schema:",
                "  type: object",
                "  properties: {prompt: {type: string}}",
                "---",
                "",
            ]
        ),
    )
    _write(tmp_path / "notes.txt", "slug: ignored\n")

    specs = load_block_specs(tmp_path)

    assert [s.slug for s in specs] == ["alpha", "beta", "zeta"]
    alpha, beta, _ = specs
    assert alpha.subcategory is None
    assert json.loads(alpha.config_schema.en or "") == {
        "type": "object",
        "properties": {"prompt": {"type": "string"}},
    }
    assert alpha.config_schema.ja == alpha.config_schema.en
    assert beta.name.ja == "ベータ"
    assert beta.code == "return 1;"


def test_per_locale_config_schema(tmp_path: Path) -> None:
    _write(
        tmp_path / "b.yaml",
        "slug: b\ncategory: ai\nconfig_schema:\n  en: {title: Prompt}\n  ja: {title: プロンプト}\n",
    )

    (spec,) = load_block_specs(tmp_path)

    assert json.loads(spec.config_schema.en or "") == {"title": "Prompt"}
    assert json.loads(spec.config_schema.ja or "") == {"title": "プロンプト"}


def test_invalid_block_document_names_the_file(tmp_path: Path) -> None:
    path = _write(tmp_path / "bad.yaml", "slug: bad\ncategory: not-a-category\n")

    with pytest.raises(SeedLoadError) as excinfo:
        load_block_specs(tmp_path)

    assert excinfo.value.path == path
    assert "bad" in excinfo.value.message


def test_malformed_yaml_is_a_load_error(tmp_path: Path) -> None:
    _write(tmp_path / "broken.yaml", "slug: [unterminated\n")

    with pytest.raises(SeedLoadError, match="invalid YAML"):
        load_block_specs(tmp_path)


def test_missing_directory_contributes_nothing(tmp_path: Path) -> None:
    assert load_block_specs(tmp_path / "does-not-exist") == []


def test_extra_directory_cannot_shadow_builtin_block(tmp_path: Path) -> None:
    _write(tmp_path / "http.yaml", "slug: http\ncategory: integration\nname: Mine\n")

    with pytest.raises(DuplicateSlug):
        build_block_registry([tmp_path])

    assert build_block_registry([tmp_path], include_builtin=False).count() == 1


def test_builtin_blocks_are_valid_and_orderable() -> None:
    registry = build_block_registry()
    specs = registry.get_all()

    summary = validate_block_specs(specs)
    assert summary.ok, [str(e) for e in summary.errors]

    ordered = [s.slug for s in topological_sort(specs)]
    chain = ["http", "rest-api", "bearer-api", "github-api", "github_create_issue"]
    positions = [ordered.index(slug) for slug in chain]
    assert positions == sorted(positions)
    assert len(registry) > len(chain)


def test_template_document_is_parsed(tmp_path: Path) -> None:
    _write(
        tmp_path / "t.yaml",
        "\n".join(
            [
                "slug: t",
                "name: T",
                "version: 3",
                "block_groups:",
                "  - {temp_id: loop, type: while, config: {max_iterations: 5}}",
                "steps:",
                "  - {temp_id: start, name: Start, type: start}",
                "  - {temp_id: body, name: Body, type: log, block_group_temp_id: loop}",
                "edges:",
                "  - {source_temp_id: start, target_group_temp_id: loop, condition: ok}",
                "",
            ]
        ),
    )

    (template,) = load_templates(tmp_path)

    assert template.version == 3
    assert template.block_groups[0].type is BlockGroupType.WHILE
    assert template.steps[1].block_group_temp_id == "loop"
    edge = template.edges[0]
    assert edge.source == StepRef("start")
    assert edge.target == GroupRef("loop")
    assert edge.source_port == "output" and edge.target_port == "input"
    assert edge.condition == "ok"


def test_unknown_group_type_is_a_load_error(tmp_path: Path) -> None:
    _write(
        tmp_path / "t.yaml",
        "slug: t\nname: T\nblock_groups:\n  - {temp_id: g, type: sometimes}\n",
    )

    with pytest.raises(SeedLoadError, match="invalid block group type"):
        load_templates(tmp_path)


def test_builtin_templates_are_valid() -> None:
    registry = build_template_registry()

    assert len(registry) >= 1
    for template in registry.get_all():
        assert validate_template(template) is None, template.slug
    triage = registry.get_by_slug("issue-batch-triage")
    assert triage is not None
    assert [g.type for g in triage.block_groups] == [BlockGroupType.FOREACH]
