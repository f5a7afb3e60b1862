"""Block definition specs, their registry and seed loading."""

from blockflow_seeder.blocks.models import (
    BlockCategory,
    BlockDefinitionRecord,
    BlockDefinitionSpec,
    BlockVersionSnapshot,
    ResolvedBlockDefinition,
    resolve_block,
)
from blockflow_seeder.blocks.registry import BlockRegistry

__all__ = [
    "BlockCategory",
    "BlockDefinitionRecord",
    "BlockDefinitionSpec",
    "BlockRegistry",
    "BlockVersionSnapshot",
    "ResolvedBlockDefinition",
    "resolve_block",
]
