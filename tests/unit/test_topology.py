"""Unit tests for parent-before-child ordering."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from blockflow_seeder.blocks.models import BlockDefinitionSpec
from blockflow_seeder.errors import CycleDetected, DuplicateSlug
from blockflow_seeder.migration.topology import topological_sort

HTTP_CHAIN = ["http", "rest-api", "bearer-api", "github-api", "github_create_issue"]


def _positions(ordered: list[BlockDefinitionSpec]) -> dict[str, int]:
    return {spec.slug: i for i, spec in enumerate(ordered)}


def test_http_chain_sorts_to_exact_order(http_chain: list[BlockDefinitionSpec]) -> None:
    ordered = topological_sort(http_chain)

    assert [s.slug for s in ordered] == HTTP_CHAIN


def test_forest_keeps_every_node_and_puts_parents_first(
    make_spec: Callable[..., BlockDefinitionSpec],
) -> None:
    specs = [
        make_spec("leaf-a", parent_slug="mid"),
        make_spec("standalone"),
        make_spec("mid", parent_slug="root"),
        make_spec("leaf-b", parent_slug="root"),
        make_spec("root"),
        make_spec("other-root"),
        make_spec("other-child", parent_slug="other-root"),
    ]

    ordered = topological_sort(specs)
    pos = _positions(ordered)

    assert len(ordered) == len(specs)
    for spec in specs:
        if spec.parent_slug:
            assert pos[spec.parent_slug] < pos[spec.slug]


def test_independent_nodes_keep_input_order(make_spec: Callable[..., BlockDefinitionSpec]) -> None:
    specs = [make_spec("c"), make_spec("a"), make_spec("b")]

    assert [s.slug for s in topological_sort(specs)] == ["c", "a", "b"]


def test_empty_input_sorts_to_empty() -> None:
    assert topological_sort([]) == []


def test_three_node_cycle_is_rejected(make_spec: Callable[..., BlockDefinitionSpec]) -> None:
    specs = [
        make_spec("a", parent_slug="c"),
        make_spec("b", parent_slug="a"),
        make_spec("c", parent_slug="b"),
        make_spec("free"),
    ]

    with pytest.raises(CycleDetected) as excinfo:
        topological_sort(specs)

    assert set(excinfo.value.slugs) == {"a", "b", "c"}
    assert "circular inheritance" in str(excinfo.value)


def test_self_reference_is_rejected(make_spec: Callable[..., BlockDefinitionSpec]) -> None:
    with pytest.raises(CycleDetected) as excinfo:
        topological_sort([make_spec("loop", parent_slug="loop")])

    assert excinfo.value.slugs == ("loop",)
    assert "loop inherits from itself" in str(excinfo.value)


def test_missing_parent_is_reported_like_a_cycle(
    make_spec: Callable[..., BlockDefinitionSpec],
) -> None:
    specs = [make_spec("child", parent_slug="ghost"), make_spec("grandchild", parent_slug="child")]

    with pytest.raises(CycleDetected) as excinfo:
        topological_sort(specs)

    assert set(excinfo.value.slugs) == {"child", "grandchild"}
    assert "child inherits from missing ghost" in excinfo.value.detail
    assert "grandchild waits on unresolved child" in excinfo.value.detail


def test_duplicate_slug_is_rejected(make_spec: Callable[..., BlockDefinitionSpec]) -> None:
    with pytest.raises(DuplicateSlug):
        topological_sort([make_spec("dup"), make_spec("dup")])
