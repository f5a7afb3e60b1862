"""In-code collection of block definition specs."""

from __future__ import annotations

from collections.abc import Iterable

from blockflow_seeder.blocks.models import BlockDefinitionSpec
from blockflow_seeder.errors import DuplicateSlug


class BlockRegistry:
    """Holds block specs keyed by slug.

    `get_all` returns specs sorted by slug so that anything iterating the
    registry (dry runs, validation reports) is stable between runs.
    """

    def __init__(self, specs: Iterable[BlockDefinitionSpec] = ()) -> None:
        self._specs: dict[str, BlockDefinitionSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: BlockDefinitionSpec) -> None:
        if spec.slug in self._specs:
            raise DuplicateSlug(spec.slug)
        self._specs[spec.slug] = spec

    def get_all(self) -> list[BlockDefinitionSpec]:
        return sorted(self._specs.values(), key=lambda s: s.slug)

    def get_by_slug(self, slug: str) -> BlockDefinitionSpec | None:
        return self._specs.get(slug)

    def count(self) -> int:
        return len(self._specs)

    def __len__(self) -> int:
        return len(self._specs)
