"""Blockflow seeder.

Migrates the in-code catalogue of block definitions and workflow templates
into a store:
- block definitions are ordered parent-before-child and upserted
- workflow templates are validated, then created or rebuilt
- configuration is loaded from `.env`, logs are structured JSON
"""

__version__ = "0.1.0"

from blockflow_seeder.config import SeederSettings

__all__ = ["__version__", "SeederSettings"]
