"""Load workflow templates from YAML seed files.

Each document is one template with `steps`, `edges` and optional
`block_groups`. Edges name their endpoints with `source_temp_id` or
`source_group_temp_id` (never both), and likewise for the target.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from blockflow_seeder.errors import SeedLoadError
from blockflow_seeder.seed_files import BUILTIN_SEEDS_DIR, discover_seed_files, load_documents
from blockflow_seeder.workflows.models import WorkflowTemplate
from blockflow_seeder.workflows.registry import TemplateRegistry

logger = logging.getLogger(__name__)

BUILTIN_TEMPLATES_DIR = BUILTIN_SEEDS_DIR / "templates"


def load_template_file(path: Path) -> list[WorkflowTemplate]:
    templates: list[WorkflowTemplate] = []
    for document in load_documents(path):
        slug = str(document.get("slug") or "").strip()
        if not slug:
            continue
        try:
            templates.append(WorkflowTemplate.from_json(document))
        except ValueError as e:
            raise SeedLoadError(path, f"template {slug!r}: {e}") from e
    return templates


def load_templates(directory: Path) -> list[WorkflowTemplate]:
    templates: list[WorkflowTemplate] = []
    for path in discover_seed_files(directory):
        templates.extend(load_template_file(path))
    logger.debug(
        "Template seed files loaded",
        extra={"directory": str(directory), "count": len(templates)},
    )
    return sorted(templates, key=lambda t: t.slug)


def build_template_registry(
    directories: Iterable[Path] = (), *, include_builtin: bool = True
) -> TemplateRegistry:
    registry = TemplateRegistry()
    sources = [BUILTIN_TEMPLATES_DIR] if include_builtin else []
    sources.extend(directories)
    for directory in sources:
        for template in load_templates(directory):
            registry.register(template)
    return registry
