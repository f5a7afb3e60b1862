"""Load block definition specs from YAML seed files.

A document looks like::

    slug: bearer-api
    version: 1
    name: {en: Bearer API, ja: Bearer API}
    description: REST call with a bearer token
    category: integration
    parent_slug: rest-api
    config_schema:
      type: object
      properties: {token: {type: string}}
    code: |
      return ctx.http.request(config);

Text fields take a plain string or an `{en, ja}` mapping. `config_schema` takes
a schema mapping (used for every locale), raw JSON text, or an `{en, ja}`
mapping of those.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from blockflow_seeder.blocks.models import BlockDefinitionSpec
from blockflow_seeder.blocks.registry import BlockRegistry
from blockflow_seeder.errors import SeedLoadError
from blockflow_seeder.i18n import SUPPORTED_LOCALES
from blockflow_seeder.seed_files import (
    BUILTIN_SEEDS_DIR,
    discover_seed_files,
    load_documents,
    to_json_text,
)

logger = logging.getLogger(__name__)

BUILTIN_BLOCKS_DIR = BUILTIN_SEEDS_DIR / "blocks"


def _is_per_locale(value: Any) -> bool:
    return isinstance(value, dict) and bool(value) and set(value) <= set(SUPPORTED_LOCALES)


def _convert_config_schema(value: Any) -> dict[str, str | None] | None:
    if value is None:
        return None
    if _is_per_locale(value):
        return {locale: to_json_text(value.get(locale)) for locale in SUPPORTED_LOCALES}
    text = to_json_text(value)
    return {locale: text for locale in SUPPORTED_LOCALES}


def parse_block_document(document: dict[str, Any]) -> BlockDefinitionSpec:
    data = dict(document)
    if "config_schema" in data:
        data["config_schema"] = _convert_config_schema(data["config_schema"])
    if isinstance(data.get("code"), str):
        data["code"] = data["code"].strip()
    return BlockDefinitionSpec.model_validate(data)


def load_block_file(path: Path) -> list[BlockDefinitionSpec]:
    specs: list[BlockDefinitionSpec] = []
    for document in load_documents(path):
        if not str(document.get("slug") or "").strip():
            continue
        try:
            specs.append(parse_block_document(document))
        except ValidationError as e:
            raise SeedLoadError(path, f"block {document.get('slug')!r}: {e}") from e
    return specs


def load_block_specs(directory: Path) -> list[BlockDefinitionSpec]:
    """Load all block specs under `directory`, sorted by slug."""

    specs: list[BlockDefinitionSpec] = []
    for path in discover_seed_files(directory):
        specs.extend(load_block_file(path))
    logger.debug(
        "Block seed files loaded", extra={"directory": str(directory), "count": len(specs)}
    )
    return sorted(specs, key=lambda s: s.slug)


def build_block_registry(
    directories: Iterable[Path] = (), *, include_builtin: bool = True
) -> BlockRegistry:
    """Collect specs from the built-in seeds and any extra directories.

    A slug defined twice across directories is an error rather than an
    override, so a typo cannot silently shadow a built-in block.
    """

    registry = BlockRegistry()
    sources = [BUILTIN_BLOCKS_DIR] if include_builtin else []
    sources.extend(directories)
    for directory in sources:
        for spec in load_block_specs(directory):
            registry.register(spec)
    return registry
