"""Persisted representation of workflow templates.

Records reference each other by store-assigned ids; tempIds are kept only so a
stored graph can be traced back to its seed.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class BlockGroupRecord(BaseModel):
    id: str
    temp_id: str
    type: str
    name: str = ""
    config: dict[str, object] = Field(default_factory=dict)
    parent_id: str | None = None


class StepRecord(BaseModel):
    id: str
    temp_id: str
    name: str
    type: str
    config: dict[str, object] = Field(default_factory=dict)
    group_id: str | None = None
    block_slug: str | None = None
    trigger_type: str | None = None
    trigger_config: dict[str, object] | None = None


class EdgeRecord(BaseModel):
    id: str
    source_step_id: str | None = None
    source_group_id: str | None = None
    target_step_id: str | None = None
    target_group_id: str | None = None
    source_port: str = "output"
    target_port: str = "input"
    condition: str | None = None


class WorkflowTemplateRecord(BaseModel):
    id: str
    slug: str
    name: str
    description: str = ""
    version: int = 1
    created_at: str | None = None
    updated_at: str | None = None

    block_groups: list[BlockGroupRecord] = Field(default_factory=list)
    steps: list[StepRecord] = Field(default_factory=list)
    edges: list[EdgeRecord] = Field(default_factory=list)
