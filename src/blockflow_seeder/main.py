"""CLI entrypoint for seeding block definitions and workflow templates."""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from blockflow_seeder import __version__
from blockflow_seeder.blocks.loader import build_block_registry
from blockflow_seeder.blocks.registry import BlockRegistry
from blockflow_seeder.blocks.validation import validate_block_specs
from blockflow_seeder.config import SeederSettings
from blockflow_seeder.errors import (
    CycleDetected,
    DuplicateSlug,
    MigrationTimedOut,
    PersistenceFailed,
    SeedLoadError,
    ValidationFailed,
)
from blockflow_seeder.logging import configure_logging
from blockflow_seeder.migration.migrator import Migrator
from blockflow_seeder.migration.results import DryRunResult, MigrationResult
from blockflow_seeder.migration.template_migrator import TemplateMigrator
from blockflow_seeder.migration.topology import topological_sort
from blockflow_seeder.storage import JsonBlockDefinitionStore, JsonBlockVersionStore, JsonTemplateStore
from blockflow_seeder.workflows.loader import build_template_registry
from blockflow_seeder.workflows.registry import TemplateRegistry
from blockflow_seeder.workflows.validator import iter_violations

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blockflow-seeder",
        description="Seed block definitions and workflow templates into a store",
    )
    parser.add_argument(
        "--version", action="version", version=f"blockflow-seeder {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "validate",
        help="Load every seed and report problems without touching the store",
    )

    migrate = subparsers.add_parser("migrate", help="Create or update seeds in the store")
    migrate.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be created or updated without writing",
    )
    migrate.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level regardless of LOG_LEVEL",
    )
    scope = migrate.add_mutually_exclusive_group()
    scope.add_argument("--blocks-only", action="store_true", help="Skip workflow templates")
    scope.add_argument("--templates-only", action="store_true", help="Skip block definitions")
    migrate.add_argument(
        "--timeout-seconds",
        type=float,
        default=0.0,
        help="Stop block migration after this many seconds (0 means no timeout)",
    )

    return parser


def _load_registries(settings: SeederSettings) -> tuple[BlockRegistry, TemplateRegistry]:
    blocks = build_block_registry(
        [settings.blocks_dir] if settings.blocks_dir else [],
        include_builtin=settings.include_builtin,
    )
    templates = build_template_registry(
        [settings.templates_dir] if settings.templates_dir else [],
        include_builtin=settings.include_builtin,
    )
    logger.info(
        "Seeds loaded",
        extra={"block_definitions": len(blocks), "workflow_templates": len(templates)},
    )
    return blocks, templates


def _check_block_specs(blocks: BlockRegistry) -> bool:
    summary = validate_block_specs(blocks.get_all())
    for error in summary.errors:
        print(str(error), file=sys.stderr)
    print(
        f"Block definitions: {summary.total} total, {summary.valid} valid, {summary.invalid} invalid"
    )
    return summary.ok


def _print_dry_run(kind: str, result: DryRunResult) -> None:
    print(
        f"{kind}: {len(result.to_create)} to create, {len(result.to_update)} to update, "
        f"{len(result.unchanged)} unchanged"
    )
    for slug in result.to_create:
        print(f"  + {slug}")
    for info in result.to_update:
        print(f"  ~ {info.slug} (v{info.old_version} -> v{info.new_version}: {info.reason})")


def _print_result(kind: str, result: MigrationResult) -> None:
    print(
        f"{kind}: {len(result.created)} created, {len(result.updated)} updated, "
        f"{len(result.unchanged)} unchanged"
    )


def _run_validate(settings: SeederSettings) -> int:
    blocks, templates = _load_registries(settings)

    ok = _check_block_specs(blocks)
    # Surfaces CycleDetected to the caller.
    topological_sort(blocks.get_all())

    for template in templates.get_all():
        for violation in iter_violations(template):
            ok = False
            print(str(violation.for_template(template.slug)), file=sys.stderr)
    print(f"Workflow templates: {len(templates)} checked")

    return 0 if ok else 2


def _run_migrate(settings: SeederSettings, args: argparse.Namespace) -> int:
    blocks, templates = _load_registries(settings)

    if not args.templates_only:
        if not _check_block_specs(blocks):
            return 2

        migrator = Migrator(
            blocks=JsonBlockDefinitionStore(settings.blocks_state_file),
            versions=JsonBlockVersionStore(settings.block_versions_state_file),
            locale=settings.default_locale,
        )
        if args.dry_run:
            _print_dry_run("Block definitions", migrator.dry_run(blocks))
        else:
            timeout = args.timeout_seconds if args.timeout_seconds > 0 else None
            _print_result("Block definitions", migrator.migrate(blocks, timeout_seconds=timeout))

    if not args.blocks_only:
        template_migrator = TemplateMigrator(
            templates=JsonTemplateStore(settings.templates_state_file)
        )
        if args.dry_run:
            _print_dry_run("Workflow templates", template_migrator.dry_run(templates))
        else:
            _print_result("Workflow templates", template_migrator.migrate(templates))

    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = SeederSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    verbose = getattr(args, "verbose", False)
    configure_logging("DEBUG" if verbose else settings.log_level)

    try:
        if args.command == "validate":
            return _run_validate(settings)

        if args.command == "migrate":
            return _run_migrate(settings, args)

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except (SeedLoadError, DuplicateSlug, ValidationFailed) as e:
        logger.error(str(e))
        print(str(e), file=sys.stderr)
        return 2

    except CycleDetected as e:
        logger.error(str(e), extra={"slugs": list(e.slugs)})
        print(str(e), file=sys.stderr)
        return 3

    except PersistenceFailed as e:
        logger.error(str(e), extra={"slug": e.slug, "operation": e.operation})
        print(str(e), file=sys.stderr)
        return 4

    except MigrationTimedOut as e:
        logger.error(str(e), extra={"remaining": list(e.remaining)})
        print(str(e), file=sys.stderr)
        return 5

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
