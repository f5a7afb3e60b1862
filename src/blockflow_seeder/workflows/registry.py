"""In-code collection of workflow templates."""

from __future__ import annotations

from collections.abc import Iterable

from blockflow_seeder.errors import DuplicateSlug
from blockflow_seeder.workflows.models import WorkflowTemplate


class TemplateRegistry:
    def __init__(self, templates: Iterable[WorkflowTemplate] = ()) -> None:
        self._templates: dict[str, WorkflowTemplate] = {}
        for template in templates:
            self.register(template)

    def register(self, template: WorkflowTemplate) -> None:
        if template.slug in self._templates:
            raise DuplicateSlug(template.slug, kind="workflow template")
        self._templates[template.slug] = template

    def get_all(self) -> list[WorkflowTemplate]:
        return sorted(self._templates.values(), key=lambda t: t.slug)

    def get_by_slug(self, slug: str) -> WorkflowTemplate | None:
        return self._templates.get(slug)

    def __len__(self) -> int:
        return len(self._templates)
