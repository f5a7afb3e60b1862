"""Parent-before-child ordering of block definitions.

Definitions live in a flat list and refer to each other by index through a
`slug -> index` map, so no node ever holds a reference to another node.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from typing import Protocol, TypeVar

from blockflow_seeder.errors import CycleDetected, DuplicateSlug


class InheritanceNode(Protocol):
    @property
    def slug(self) -> str: ...

    @property
    def parent_slug(self) -> str | None: ...


NodeT = TypeVar("NodeT", bound=InheritanceNode)


def _on_cycle(start: int, nodes: Sequence[InheritanceNode], index_by_slug: dict[str, int]) -> bool:
    current = start
    for _ in range(len(nodes)):
        parent_slug = nodes[current].parent_slug
        if not parent_slug or parent_slug not in index_by_slug:
            return False
        current = index_by_slug[parent_slug]
        if current == start:
            return True
    return False


def _describe_unresolved(
    nodes: Sequence[InheritanceNode], unresolved: list[int], index_by_slug: dict[str, int]
) -> str:
    reasons: list[str] = []
    cycle_members: list[str] = []
    for i in unresolved:
        node = nodes[i]
        if node.parent_slug == node.slug:
            reasons.append(f"{node.slug} inherits from itself")
        elif node.parent_slug not in index_by_slug:
            reasons.append(f"{node.slug} inherits from missing {node.parent_slug}")
        elif _on_cycle(i, nodes, index_by_slug):
            cycle_members.append(node.slug)
        else:
            reasons.append(f"{node.slug} waits on unresolved {node.parent_slug}")
    if cycle_members:
        reasons.insert(0, f"circular inheritance among {', '.join(cycle_members)}")
    return "; ".join(reasons)


def topological_sort(nodes: Sequence[NodeT]) -> list[NodeT]:
    """Order `nodes` so every parent precedes its children.

    Nodes that do not depend on each other keep their input order. A parent
    that is absent from `nodes` can never be satisfied, so it is reported the
    same way as a cycle.

    Raises:
        CycleDetected: naming every slug that could not be ordered. No partial
            order is returned.
        DuplicateSlug: if two nodes share a slug.
    """

    index_by_slug: dict[str, int] = {}
    for i, node in enumerate(nodes):
        if node.slug in index_by_slug:
            raise DuplicateSlug(node.slug)
        index_by_slug[node.slug] = i

    children: list[list[int]] = [[] for _ in nodes]
    pending_parent = [False] * len(nodes)
    for i, node in enumerate(nodes):
        if not node.parent_slug:
            continue
        # Self-references and missing parents are never released below.
        pending_parent[i] = True
        parent = index_by_slug.get(node.parent_slug)
        if parent is not None and parent != i:
            children[parent].append(i)

    ready = deque(i for i in range(len(nodes)) if not pending_parent[i])
    order: list[int] = []
    while ready:
        current = ready.popleft()
        order.append(current)
        for child in children[current]:
            pending_parent[child] = False
            ready.append(child)

    if len(order) != len(nodes):
        emitted = set(order)
        unresolved = [i for i in range(len(nodes)) if i not in emitted]
        raise CycleDetected(
            slugs=tuple(nodes[i].slug for i in unresolved),
            detail=_describe_unresolved(nodes, unresolved, index_by_slug),
        )

    return [nodes[i] for i in order]
