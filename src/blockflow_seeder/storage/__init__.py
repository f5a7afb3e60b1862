"""File-backed stores implementing the migrator repositories."""

from blockflow_seeder.storage.block_store import JsonBlockDefinitionStore, JsonBlockVersionStore
from blockflow_seeder.storage.template_store import JsonTemplateStore

__all__ = ["JsonBlockDefinitionStore", "JsonBlockVersionStore", "JsonTemplateStore"]
