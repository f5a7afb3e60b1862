"""Discovery and parsing of YAML seed files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from blockflow_seeder.errors import SeedLoadError

BUILTIN_SEEDS_DIR = Path(__file__).parent / "seeds"

_YAML_SUFFIXES = {".yaml", ".yml"}


def discover_seed_files(directory: Path) -> list[Path]:
    """Return YAML files below `directory` (recursively) in a stable order.

    A missing directory is not an error: it simply contributes no seeds.
    """

    if not directory.exists():
        return []

    candidates = [
        p for p in directory.rglob("*") if p.is_file() and p.suffix.lower() in _YAML_SUFFIXES
    ]
    return sorted(candidates, key=lambda p: p.as_posix())


def load_documents(path: Path) -> list[dict[str, Any]]:
    """Parse every YAML document in `path`.

    Empty documents (e.g. a trailing `---`) are skipped; any other
    non-mapping document is rejected.
    """

    try:
        raw_documents = list(yaml.safe_load_all(path.read_text(encoding="utf-8")))
    except yaml.YAMLError as e:
        raise SeedLoadError(path, f"invalid YAML: {e}") from e

    documents: list[dict[str, Any]] = []
    for index, document in enumerate(raw_documents):
        if document is None:
            continue
        if not isinstance(document, dict):
            raise SeedLoadError(path, f"document {index} is not a mapping")
        documents.append(document)
    return documents


def to_json_text(value: Any) -> str | None:
    """Serialise a YAML value to JSON text; strings are assumed to be JSON already."""

    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)
