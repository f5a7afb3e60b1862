"""Configuration for the seeder.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing is required: with no configuration the seeder migrates the built-in
seeds into JSON stores under `./seed_state`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from blockflow_seeder.i18n import DEFAULT_LOCALE, SUPPORTED_LOCALES


class SeederSettings(BaseSettings):
    """Settings for a seeding run.

    Environment variables:
    - LOG_LEVEL             (optional)
    - SEED_DEFAULT_LOCALE   (optional, one of SUPPORTED_LOCALES)
    - SEED_STATE_PATH       (optional)
    - SEED_BLOCKS_DIR       (optional)
    - SEED_TEMPLATES_DIR    (optional)
    - SEED_INCLUDE_BUILTIN  (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `SeederSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level for the seeder's own loggers",
    )

    default_locale: str = Field(
        default=DEFAULT_LOCALE,
        validation_alias="SEED_DEFAULT_LOCALE",
        description="Locale used to resolve localized text before it is persisted",
    )

    state_path: Path = Field(
        default=Path("seed_state"),
        validation_alias="SEED_STATE_PATH",
        description="Directory holding the JSON stores for definitions and templates",
    )

    blocks_dir: Path | None = Field(
        default=None,
        validation_alias="SEED_BLOCKS_DIR",
        description="Extra directory of block definition YAML files",
    )

    templates_dir: Path | None = Field(
        default=None,
        validation_alias="SEED_TEMPLATES_DIR",
        description="Extra directory of workflow template YAML files",
    )

    include_builtin: bool = Field(
        default=True,
        validation_alias="SEED_INCLUDE_BUILTIN",
        description="Load the seeds shipped with the package in addition to the extra dirs",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL is not a logging level: {value!r}")
        return normalized

    @field_validator("default_locale")
    @classmethod
    def _supported_locale(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in SUPPORTED_LOCALES:
            raise ValueError(
                f"SEED_DEFAULT_LOCALE must be one of {', '.join(SUPPORTED_LOCALES)}"
            )
        return normalized

    @property
    def blocks_state_file(self) -> Path:
        """Path where migrated block definitions are persisted."""

        return self.state_path / "block_definitions.json"

    @property
    def block_versions_state_file(self) -> Path:
        """Path where block version snapshots are persisted."""

        return self.state_path / "block_versions.json"

    @property
    def templates_state_file(self) -> Path:
        """Path where migrated workflow templates are persisted."""

        return self.state_path / "workflow_templates.json"
