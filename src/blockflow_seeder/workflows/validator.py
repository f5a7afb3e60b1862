"""Structural checks on a workflow template before it is persisted.

Checks run in a fixed order and `validate_template` reports only the first
violation. `iter_violations` yields every violation in the same order, for
reports that want the full list.
"""

from __future__ import annotations

from collections.abc import Iterator

from blockflow_seeder.errors import CycleDetected, ValidationFailed
from blockflow_seeder.workflows.models import Edge, Endpoint, GroupRef, StepRef, WorkflowTemplate


def _duplicates(temp_ids: list[str]) -> list[str]:
    seen: set[str] = set()
    dupes: list[str] = []
    for temp_id in temp_ids:
        if temp_id in seen and temp_id not in dupes:
            dupes.append(temp_id)
        seen.add(temp_id)
    return dupes


def _endpoint_violation(
    endpoint: Endpoint | None,
    side: str,
    index: int,
    step_ids: set[str],
    group_ids: set[str],
) -> ValidationFailed | None:
    if endpoint is None:
        return ValidationFailed(
            "edges", f"edge {index} must have a {side} step or a {side} group"
        )
    if isinstance(endpoint, StepRef) and endpoint.temp_id not in step_ids:
        return ValidationFailed(
            f"edges.{side}_temp_id", f"invalid {side}_temp_id: {endpoint.temp_id}"
        )
    if isinstance(endpoint, GroupRef) and endpoint.temp_id not in group_ids:
        return ValidationFailed(
            f"edges.{side}_group_temp_id",
            f"invalid {side}_group_temp_id: {endpoint.temp_id}",
        )
    return None


def _edge_violations(
    edges: tuple[Edge, ...], side: str, step_ids: set[str], group_ids: set[str]
) -> Iterator[ValidationFailed]:
    for index, edge in enumerate(edges):
        endpoint = edge.source if side == "source" else edge.target
        violation = _endpoint_violation(endpoint, side, index, step_ids, group_ids)
        if violation is not None:
            yield violation


def iter_violations(template: WorkflowTemplate) -> Iterator[ValidationFailed]:
    if not template.slug.strip():
        yield ValidationFailed("slug", "slug is required")
    if not template.name.strip():
        yield ValidationFailed("name", "name is required")

    if not template.steps:
        yield ValidationFailed("steps", "at least one step is required")

    step_temp_ids = [s.temp_id for s in template.steps]
    if any(not t.strip() for t in step_temp_ids):
        yield ValidationFailed("steps.temp_id", "temp_id is required for all steps")
    for dupe in _duplicates(step_temp_ids):
        yield ValidationFailed("steps.temp_id", f"duplicate temp_id: {dupe}")

    start_steps = [s.temp_id for s in template.steps if s.is_start]
    if not start_steps:
        yield ValidationFailed("steps", "workflow must have a start step")
    elif len(start_steps) > 1:
        yield ValidationFailed(
            "steps", f"workflow must have exactly one start step, found: {', '.join(start_steps)}"
        )

    group_temp_ids = [g.temp_id for g in template.block_groups]
    if any(not t.strip() for t in group_temp_ids):
        yield ValidationFailed(
            "block_groups.temp_id", "temp_id is required for all block groups"
        )
    for dupe in _duplicates(group_temp_ids):
        yield ValidationFailed("block_groups.temp_id", f"duplicate temp_id: {dupe}")

    step_ids = set(step_temp_ids)
    group_ids = set(group_temp_ids)
    for shared in sorted(step_ids & group_ids):
        yield ValidationFailed(
            "block_groups.temp_id", f"temp_id is also used by a step: {shared}"
        )

    yield from _edge_violations(template.edges, "source", step_ids, group_ids)
    yield from _edge_violations(template.edges, "target", step_ids, group_ids)

    for step in template.steps:
        if step.block_group_temp_id is not None and step.block_group_temp_id not in group_ids:
            yield ValidationFailed(
                "steps.block_group_temp_id",
                f"step {step.temp_id} references undeclared group: {step.block_group_temp_id}",
            )

    nesting_ok = True
    for group in template.block_groups:
        parent = group.parent_temp_id
        if parent is None:
            continue
        if parent == group.temp_id:
            nesting_ok = False
            yield ValidationFailed(
                "block_groups.parent_temp_id", f"group {group.temp_id} cannot contain itself"
            )
        elif parent not in group_ids:
            nesting_ok = False
            yield ValidationFailed(
                "block_groups.parent_temp_id",
                f"group {group.temp_id} references undeclared parent group: {parent}",
            )

    if nesting_ok and not _duplicates(group_temp_ids):
        try:
            template.groups_parent_first()
        except CycleDetected as e:
            yield ValidationFailed(
                "block_groups.parent_temp_id",
                f"circular group nesting: {', '.join(e.slugs)}",
            )


def validate_template(template: WorkflowTemplate) -> ValidationFailed | None:
    """Return the first structural violation in `template`, or None if valid."""

    return next(iter_violations(template), None)
