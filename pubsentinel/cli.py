"""CLI entry point: pubsentinel.

Subcommands:
    pubsentinel analyze [--json]                 # Classify declared dependencies
    pubsentinel apply [--interactive|--dry-run]  # Fix what analyze reports
    pubsentinel restore                          # Put the manifest backup back
    pubsentinel group [--apply] [--offline]      # Group dependencies by category
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from pubsentinel.categorization import (
    CategoryApiClient,
    CategoryCache,
    GroupingService,
    PackageCategorizer,
    load_group_overrides,
)
from pubsentinel.categorization.models import GroupedDependencies
from pubsentinel.core.config import GROUP_OVERRIDES_FILE, category_api_url
from pubsentinel.core.logging import setup_logging
from pubsentinel.engines.classifier import AnalysisResult, DependencyAnalyzer, DependencySection
from pubsentinel.engines.manifest_editor import read_manifest_text, write_manifest_text
from pubsentinel.exceptions import ManifestNotFoundError, PubSentinelError
from pubsentinel.services.apply_service import ApplyService, preview_changes
from pubsentinel.services.backup_service import BackupService

EXIT_OK = 0
EXIT_ISSUES = 1
EXIT_NOT_FOUND = 2


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option(
    "--project",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Project root containing pubspec.yaml",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool, project: Path) -> None:
    """PubSentinel: find unused, misplaced and duplicated pub dependencies."""
    setup_logging("DEBUG" if verbose else None)
    ctx.obj = {"project": project}


def _analyze(ctx: click.Context) -> tuple[DependencyAnalyzer, AnalysisResult]:
    analyzer = DependencyAnalyzer(ctx.obj["project"])
    try:
        return analyzer, analyzer.analyze()
    except ManifestNotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_NOT_FOUND)
    except PubSentinelError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(EXIT_ISSUES)


# ── analyze ──


@main.command("analyze")
@click.option("--json", "as_json", is_flag=True, help="Emit the analysis as JSON")
@click.pass_context
def analyze(ctx: click.Context, as_json: bool) -> None:
    """Classify every declared dependency; exit 1 if anything needs fixing."""
    _, result = _analyze(ctx)

    if as_json:
        click.echo(json.dumps(_result_to_json(result), indent=2))
    else:
        _print_report(result)

    sys.exit(EXIT_ISSUES if result.has_issues else EXIT_OK)


def _result_to_json(result: AnalysisResult) -> dict:
    return {
        "total": result.total_scanned,
        "has_issues": result.has_issues,
        "dependencies": [
            {
                "name": dep.name,
                "version": dep.version,
                "section": dep.section.value,
                "status": dep.status.value,
                "usage": dep.usage_description,
                "recommendation": dep.recommendation,
            }
            for dep in result.dependencies
        ],
        "duplicates": [
            {
                "name": dup.name,
                "dependencies_version": dup.dependencies_version,
                "dev_dependencies_version": dup.dev_dependencies_version,
                "recommended_section": dup.recommended_section.value,
                "recommendation": dup.recommendation_message,
            }
            for dup in result.duplicates
        ],
    }


def _print_report(result: AnalysisResult) -> None:
    for section in DependencySection:
        deps = result.for_section(section)
        if not deps:
            continue
        click.echo(f"{section.display_name}:")
        for dep in deps:
            click.echo(
                f"  {dep.name:30s} {dep.version:15s} {dep.status.display_name:10s} "
                f"{dep.recommendation}"
            )
        click.echo("")

    if result.duplicates:
        click.echo("Duplicates:")
        for dup in result.duplicates:
            conflict = (
                f" (versions: {dup.dependencies_version} vs {dup.dev_dependencies_version})"
                if dup.has_version_conflict
                else ""
            )
            click.echo(f"  {dup.name}{conflict}: {dup.recommendation_message}")
        click.echo("")

    click.echo(
        f"Summary: {result.total_scanned} scanned, "
        f"{len(result.used_dependencies)} used, "
        f"{len(result.test_only_dependencies)} test only, "
        f"{len(result.unused_dependencies)} unused, "
        f"{len(result.duplicates)} duplicated"
    )
    if not result.has_issues:
        click.echo("No issues found.")


# ── apply ──


@main.command("apply")
@click.option("--interactive", "-i", is_flag=True, help="Confirm each change")
@click.option("--dry-run", is_flag=True, help="Only show what would change")
@click.pass_context
def apply(ctx: click.Context, interactive: bool, dry_run: bool) -> None:
    """Remove, move and de-duplicate dependencies in pubspec.yaml."""
    analyzer, result = _analyze(ctx)

    if dry_run:
        previews = preview_changes(result)
        if not previews:
            click.echo("Nothing to change.")
        for line in previews:
            click.echo(f"  {line}")
        return

    service = ApplyService(analyzer.manifest_path)
    if interactive:
        outcome = service.apply_interactive(
            result, lambda question: click.confirm(question, default=False)
        )
    else:
        outcome = service.apply_fixes(result)

    if not outcome.success:
        click.echo(f"Error: {outcome.error}", err=True)
        sys.exit(EXIT_ISSUES)
    if not outcome.has_changes:
        click.echo("Nothing to change.")
        return

    for line in outcome.changes:
        click.echo(f"  {line}")
    click.echo(f"\nApplied {outcome.change_count} change(s).")
    if outcome.backup_created:
        click.echo(f"Backup saved to {service.backup_service.backup_path.name}")


# ── restore ──


@main.command("restore")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def restore(ctx: click.Context, yes: bool) -> None:
    """Restore pubspec.yaml from its backup."""
    analyzer = DependencyAnalyzer(ctx.obj["project"])
    backups = BackupService(analyzer.manifest_path)

    info = backups.get_backup_info()
    if info is None:
        click.echo(f"No backup found at {backups.backup_path}", err=True)
        sys.exit(EXIT_NOT_FOUND)

    click.echo(
        f"Backup: {info.path.name} ({info.formatted_size}, {info.formatted_last_modified()})"
    )
    if not yes and not click.confirm("Restore it over the current manifest?", default=False):
        click.echo("Aborted.")
        return

    if not backups.restore_from_backup():
        click.echo("Error: failed to restore backup", err=True)
        sys.exit(EXIT_ISSUES)
    click.echo("Manifest restored.")


# ── group ──


@main.command("group")
@click.option("--apply", "apply_changes", is_flag=True, help="Rewrite pubspec.yaml")
@click.option(
    "--overrides",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Category overrides file (default: <project>/{GROUP_OVERRIDES_FILE})",
)
@click.option("--offline", is_flag=True, help="Skip the remote category service")
@click.pass_context
def group(
    ctx: click.Context, apply_changes: bool, overrides: Path | None, offline: bool
) -> None:
    """Group dependencies under category comment headers."""
    analyzer, result = _analyze(ctx)
    overrides_path = overrides or ctx.obj["project"] / GROUP_OVERRIDES_FILE
    manifest_text = read_manifest_text(analyzer.manifest_path)

    service, grouped, grouped_dev = asyncio.run(
        _group(result, load_group_overrides(overrides_path), offline)
    )

    if not apply_changes:
        click.echo(service.generate_preview(grouped, grouped_dev, manifest_text), nl=False)
        return

    backups = BackupService(analyzer.manifest_path)
    if not backups.create_backup():
        click.echo("Error: failed to create backup", err=True)
        sys.exit(EXIT_ISSUES)
    try:
        write_manifest_text(
            analyzer.manifest_path,
            service.generate_grouped_manifest(manifest_text, grouped, grouped_dev),
        )
    except PubSentinelError as exc:
        backups.restore_from_backup()
        click.echo(f"Error: {exc} - backup restored", err=True)
        sys.exit(EXIT_ISSUES)
    click.echo(
        f"Grouped {grouped.total_packages + grouped_dev.total_packages} package(s); "
        f"backup saved to {backups.backup_path.name}"
    )


async def _group(
    result: AnalysisResult, overrides: dict[str, str] | None, offline: bool
) -> tuple[GroupingService, GroupedDependencies, GroupedDependencies]:
    api_url = None if offline else category_api_url()
    api_client = CategoryApiClient(api_url) if api_url else None
    categorizer = PackageCategorizer(CategoryCache(), api_client)
    categorizer.initialize()
    service = GroupingService(categorizer, overrides)
    try:
        return (
            service,
            await service.group_dependencies(result.for_section(DependencySection.DEPENDENCIES)),
            await service.group_dependencies(
                result.for_section(DependencySection.DEV_DEPENDENCIES)
            ),
        )
    finally:
        if api_client is not None:
            await api_client.close()


if __name__ == "__main__":
    main()
