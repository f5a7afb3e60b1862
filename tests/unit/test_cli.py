"""Unit tests for the CLI entrypoint and its exit codes."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from blockflow_seeder.main import main


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ["LOG_LEVEL", "SEED_DEFAULT_LOCALE", "SEED_BLOCKS_DIR", "SEED_TEMPLATES_DIR"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SEED_STATE_PATH", str(tmp_path / "state"))
    monkeypatch.setenv("SEED_INCLUDE_BUILTIN", "true")
    monkeypatch.chdir(tmp_path)


def _extra_blocks(tmp_path: Path, text: str, monkeypatch: pytest.MonkeyPatch) -> None:
    blocks_dir = tmp_path / "blocks"
    blocks_dir.mkdir()
    (blocks_dir / "extra.yaml").write_text(text, encoding="utf-8")
    monkeypatch.setenv("SEED_BLOCKS_DIR", str(blocks_dir))
    monkeypatch.setenv("SEED_INCLUDE_BUILTIN", "false")


def test_validate_builtin_seeds(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["validate"]) == 0

    out = capsys.readouterr().out
    assert "0 invalid" in out
    assert "Workflow templates: 1 checked" in out


def test_migrate_then_dry_run_is_clean(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["migrate"]) == 0

    blocks = json.loads((tmp_path / "state" / "block_definitions.json").read_text("utf-8"))
    assert "github_create_issue" in {b["slug"] for b in blocks}
    assert (tmp_path / "state" / "workflow_templates.json").exists()
    capsys.readouterr()

    assert main(["migrate", "--dry-run"]) == 0

    out = capsys.readouterr().out
    assert "Block definitions: 0 to create, 0 to update" in out
    assert "Workflow templates: 0 to create, 0 to update" in out


def test_blocks_only_skips_templates(tmp_path: Path) -> None:
    assert main(["migrate", "--blocks-only"]) == 0

    assert (tmp_path / "state" / "block_definitions.json").exists()
    assert not (tmp_path / "state" / "workflow_templates.json").exists()


def test_scope_flags_are_mutually_exclusive() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["migrate", "--blocks-only", "--templates-only"])

    assert excinfo.value.code == 2


def test_cycle_exits_with_3(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _extra_blocks(
        tmp_path,
        "slug: a\ncategory: logic\nname: A\nparent_slug: b\n"
        "---\n"
        "slug: b\ncategory: logic\nname: B\nparent_slug: a\n",
        monkeypatch,
    )

    assert main(["migrate", "--blocks-only"]) == 3
    assert not (tmp_path / "state" / "block_definitions.json").exists()


def test_invalid_block_spec_exits_with_2(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _extra_blocks(tmp_path, "slug: nameless\ncategory: logic\n", monkeypatch)

    assert main(["migrate"]) == 2
    assert "[nameless.name] name is required" in capsys.readouterr().err


def test_invalid_template_exits_with_2(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    templates_dir = tmp_path / "templates"
    templates_dir.mkdir()
    (templates_dir / "broken.yaml").write_text(
        "slug: broken\nname: Broken\nsteps:\n  - {temp_id: a, name: A, type: log}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("SEED_TEMPLATES_DIR", str(templates_dir))

    assert main(["validate"]) == 2
    assert "broken: steps: workflow must have a start step" in capsys.readouterr().err

    assert main(["migrate", "--templates-only"]) == 2
    assert not (tmp_path / "state" / "workflow_templates.json").exists()


def test_store_failure_exits_with_4(tmp_path: Path) -> None:
    state = tmp_path / "state"
    state.mkdir()
    (state / "block_definitions.json").write_text("{corrupt", encoding="utf-8")

    assert main(["migrate", "--blocks-only"]) == 4


def test_configuration_error_exits_with_2(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("SEED_DEFAULT_LOCALE", "xx")

    assert main(["validate"]) == 2
    assert "Configuration error" in capsys.readouterr().err
