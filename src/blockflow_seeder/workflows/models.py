"""Workflow template graph: steps, control-flow groups and the edges between them.

Step and group tempIds are caller-assigned, request-scoped identifiers. They
are only meaningful inside one template and are replaced by store-assigned ids
when the template is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from blockflow_seeder.migration.topology import topological_sort

START_STEP_TYPE = "start"


class BlockGroupType(str, Enum):
    PARALLEL = "parallel"
    TRY_CATCH = "try_catch"
    FOREACH = "foreach"
    WHILE = "while"


@dataclass(frozen=True, slots=True)
class StepRef:
    temp_id: str


@dataclass(frozen=True, slots=True)
class GroupRef:
    temp_id: str


Endpoint = StepRef | GroupRef


def _str_or_none(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _temp_id_or_none(value: object) -> str | None:
    # YAML reads `temp_id: 1` as an int; declarations and references must agree.
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _mapping(value: object) -> dict[str, object]:
    return dict(value) if isinstance(value, dict) else {}


@dataclass(frozen=True, slots=True)
class Step:
    temp_id: str
    name: str
    type: str
    config: dict[str, object] = field(default_factory=dict)
    block_group_temp_id: str | None = None
    block_slug: str | None = None
    # Only meaningful for the start step.
    trigger_type: str | None = None
    trigger_config: dict[str, object] | None = None

    @property
    def is_start(self) -> bool:
        return self.type == START_STEP_TYPE

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "temp_id": self.temp_id,
            "name": self.name,
            "type": self.type,
            "config": self.config,
        }
        if self.block_group_temp_id is not None:
            out["block_group_temp_id"] = self.block_group_temp_id
        if self.block_slug is not None:
            out["block_slug"] = self.block_slug
        if self.trigger_type is not None:
            out["trigger_type"] = self.trigger_type
        if self.trigger_config is not None:
            out["trigger_config"] = self.trigger_config
        return out

    @staticmethod
    def from_json(obj: dict[str, object]) -> Step:
        trigger_config = obj.get("trigger_config")
        return Step(
            temp_id=_temp_id_or_none(obj.get("temp_id")) or "",
            name=str(obj.get("name") or ""),
            type=str(obj.get("type") or ""),
            config=_mapping(obj.get("config")),
            block_group_temp_id=_temp_id_or_none(obj.get("block_group_temp_id")),
            block_slug=_str_or_none(obj.get("block_slug")),
            trigger_type=_str_or_none(obj.get("trigger_type")),
            trigger_config=_mapping(trigger_config) if trigger_config is not None else None,
        )


@dataclass(frozen=True, slots=True)
class BlockGroup:
    temp_id: str
    type: BlockGroupType
    name: str = ""
    config: dict[str, object] = field(default_factory=dict)
    parent_temp_id: str | None = None

    # Lets topological_sort order nested groups parent-first.
    @property
    def slug(self) -> str:
        return self.temp_id

    @property
    def parent_slug(self) -> str | None:
        return self.parent_temp_id

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "temp_id": self.temp_id,
            "type": self.type.value,
            "name": self.name,
            "config": self.config,
        }
        if self.parent_temp_id is not None:
            out["parent_temp_id"] = self.parent_temp_id
        return out

    @staticmethod
    def from_json(obj: dict[str, object]) -> BlockGroup:
        raw_type = obj.get("type")
        try:
            group_type = BlockGroupType(raw_type)
        except ValueError:
            allowed = ", ".join(t.value for t in BlockGroupType)
            raise ValueError(
                f"invalid block group type {raw_type!r} (expected one of: {allowed})"
            ) from None
        return BlockGroup(
            temp_id=_temp_id_or_none(obj.get("temp_id")) or "",
            type=group_type,
            name=str(obj.get("name") or ""),
            config=_mapping(obj.get("config")),
            parent_temp_id=_temp_id_or_none(obj.get("parent_temp_id")),
        )


def _endpoint_from_json(obj: dict[str, object], side: str) -> Endpoint | None:
    step = _temp_id_or_none(obj.get(f"{side}_temp_id"))
    group = _temp_id_or_none(obj.get(f"{side}_group_temp_id"))
    if step is not None and group is not None:
        raise ValueError(
            f"edge {side} names both {side}_temp_id={step!r} and {side}_group_temp_id={group!r}"
        )
    if step is not None:
        return StepRef(step)
    if group is not None:
        return GroupRef(group)
    return None


def _endpoint_to_json(endpoint: Endpoint | None, side: str) -> dict[str, object]:
    if isinstance(endpoint, StepRef):
        return {f"{side}_temp_id": endpoint.temp_id}
    if isinstance(endpoint, GroupRef):
        return {f"{side}_group_temp_id": endpoint.temp_id}
    return {}


@dataclass(frozen=True, slots=True)
class Edge:
    """A connection between two steps and/or groups.

    An endpoint is `None` only when the raw input named neither a step nor a
    group; the validator rejects such edges.
    """

    source: Endpoint | None
    target: Endpoint | None
    source_port: str = "output"
    target_port: str = "input"
    condition: str | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            **_endpoint_to_json(self.source, "source"),
            **_endpoint_to_json(self.target, "target"),
            "source_port": self.source_port,
            "target_port": self.target_port,
        }
        if self.condition is not None:
            out["condition"] = self.condition
        return out

    @staticmethod
    def from_json(obj: dict[str, object]) -> Edge:
        return Edge(
            source=_endpoint_from_json(obj, "source"),
            target=_endpoint_from_json(obj, "target"),
            source_port=str(obj.get("source_port") or "output"),
            target_port=str(obj.get("target_port") or "input"),
            condition=_str_or_none(obj.get("condition")),
        )


@dataclass(frozen=True, slots=True)
class WorkflowTemplate:
    slug: str
    name: str
    version: int = 1
    id: str | None = None
    description: str = ""
    steps: tuple[Step, ...] = ()
    edges: tuple[Edge, ...] = ()
    block_groups: tuple[BlockGroup, ...] = ()

    def groups_parent_first(self) -> list[BlockGroup]:
        """Block groups ordered so an enclosing group precedes nested ones.

        Raises CycleDetected for unresolvable nesting; validated templates
        never do.
        """

        return topological_sort(list(self.block_groups))

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "slug": self.slug,
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "steps": [s.to_json() for s in self.steps],
            "edges": [e.to_json() for e in self.edges],
            "block_groups": [g.to_json() for g in self.block_groups],
        }
        if self.id is not None:
            out["id"] = self.id
        return out

    @staticmethod
    def from_json(obj: dict[str, object]) -> WorkflowTemplate:
        """Build a template from seed data.

        Raises:
            ValueError: for shapes that cannot be represented at all (an edge
                endpoint naming both a step and a group, an unknown group type,
                a non-integer version). Structural problems are left to the
                validator.
        """

        def _items(key: str) -> list[dict[str, object]]:
            raw = obj.get(key) or []
            if not isinstance(raw, list) or not all(isinstance(i, dict) for i in raw):
                raise ValueError(f"{key} must be a list of mappings")
            return raw

        version_raw = obj.get("version", 1)
        if isinstance(version_raw, bool) or not isinstance(version_raw, int):
            raise ValueError(f"version must be an integer, got {version_raw!r}")

        return WorkflowTemplate(
            slug=str(obj.get("slug") or ""),
            name=str(obj.get("name") or ""),
            version=version_raw,
            id=_str_or_none(obj.get("id")),
            description=str(obj.get("description") or ""),
            steps=tuple(Step.from_json(s) for s in _items("steps")),
            edges=tuple(Edge.from_json(e) for e in _items("edges")),
            block_groups=tuple(BlockGroup.from_json(g) for g in _items("block_groups")),
        )
