"""Block definition specs (in-code) and records (persisted)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from blockflow_seeder.i18n import LocalizedSchema, LocalizedText, resolve_schema, resolve_text


class BlockCategory(str, Enum):
    AI = "ai"
    LOGIC = "logic"
    INTEGRATION = "integration"
    DATA = "data"
    CONTROL = "control"
    UTILITY = "utility"
    GROUP = "group"


class BlockDefinitionSpec(BaseModel):
    """Authoritative definition of a block, as written in seed files.

    Specs are immutable for a given code revision. `parent_slug` names another
    spec in the same set; the relation must form a forest.
    """

    slug: str
    version: int = 1
    name: LocalizedText = Field(default_factory=LocalizedText)
    description: LocalizedText = Field(default_factory=LocalizedText)
    category: BlockCategory
    subcategory: str | None = None
    code: str = ""
    config_schema: LocalizedSchema = Field(default_factory=LocalizedSchema)
    enabled: bool = True
    parent_slug: str | None = None

    @field_validator("subcategory", "parent_slug", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class BlockDefinitionRecord(BaseModel):
    """Persisted representation of a block definition.

    Text and schema fields hold the locale-resolved value. `id` is assigned by
    the store on create; `parent_id` is the parent's assigned id.
    """

    id: str | None = None
    slug: str
    version: int
    name: str = ""
    description: str = ""
    category: BlockCategory
    subcategory: str | None = None
    code: str = ""
    config_schema: str | None = None
    enabled: bool = True
    parent_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class BlockVersionSnapshot(BaseModel):
    """A copy of a persisted record taken before it is changed."""

    id: str | None = None
    block_id: str
    slug: str
    version: int
    reason: str
    record: BlockDefinitionRecord
    created_at: str | None = None


@dataclass(frozen=True, slots=True)
class ResolvedBlockDefinition:
    """A spec with its localized fields resolved to single strings.

    This is the shape change detection compares against a record.
    """

    slug: str
    version: int
    name: str
    description: str
    category: BlockCategory
    subcategory: str | None
    code: str
    config_schema: str | None
    enabled: bool
    parent_slug: str | None = None

    def to_record(self, *, parent_id: str | None) -> BlockDefinitionRecord:
        return BlockDefinitionRecord(
            slug=self.slug,
            version=self.version,
            name=self.name,
            description=self.description,
            category=self.category,
            subcategory=self.subcategory,
            code=self.code,
            config_schema=self.config_schema,
            enabled=self.enabled,
            parent_id=parent_id,
        )


def resolve_block(spec: BlockDefinitionSpec, locale: str) -> ResolvedBlockDefinition:
    return ResolvedBlockDefinition(
        slug=spec.slug,
        version=spec.version,
        name=resolve_text(spec.name, locale),
        description=resolve_text(spec.description, locale),
        category=spec.category,
        subcategory=spec.subcategory,
        code=spec.code,
        config_schema=resolve_schema(spec.config_schema, locale),
        enabled=spec.enabled,
        parent_slug=spec.parent_slug,
    )
