"""Workflow templates: graph model, structural validation and seed loading."""

from blockflow_seeder.workflows.models import (
    BlockGroup,
    BlockGroupType,
    Edge,
    GroupRef,
    Step,
    StepRef,
    WorkflowTemplate,
)
from blockflow_seeder.workflows.registry import TemplateRegistry
from blockflow_seeder.workflows.validator import iter_violations, validate_template

__all__ = [
    "BlockGroup",
    "BlockGroupType",
    "Edge",
    "GroupRef",
    "Step",
    "StepRef",
    "TemplateRegistry",
    "WorkflowTemplate",
    "iter_violations",
    "validate_template",
]
