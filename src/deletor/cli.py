"""CLI interface for Deletor."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import click

from deletor.core.cache import CacheManager
from deletor.core.engine import DeletorEngine
from deletor.core.force_delete import get_force_deleter
from deletor.core.tracker import Tracker
from deletor.core.walker import DeletorError
from deletor.models.clean_result import CleanResult
from deletor.models.file_filter import FileFilter
from deletor.settings import Rules, Settings
from deletor.utils import expand_tilde, format_size, split_list


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


_FILTER_OPTIONS = [
    click.argument("directory", required=False),
    click.option("-e", "--ext", "extensions", default=None, help="File extensions to match (comma-separated)"),
    click.option("--exclude", default=None, help="Exclude paths/names starting with these (comma-separated)"),
    click.option("--min-size", default=None, help="Minimum file size (e.g. 10kb, 1.5mb)"),
    click.option("--max-size", default=None, help="Maximum file size (e.g. 1gb)"),
    click.option("--older", default=None, help="Only files older than this (e.g. 7days)"),
    click.option("--newer", default=None, help="Only files newer than this (e.g. 2hours)"),
    click.option("--subdirs", is_flag=True, help="Include subdirectories"),
    click.option("--rules", "use_rules", is_flag=True, help="Use saved rules for unspecified options"),
]


def filter_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the shared filter options to a command."""
    for decorator in reversed(_FILTER_OPTIONS):
        func = decorator(func)
    return func


def _resolve(
    directory: str | None,
    extensions: str | None,
    exclude: str | None,
    min_size: str | None,
    max_size: str | None,
    older: str | None,
    newer: str | None,
    subdirs: bool,
    use_rules: bool,
) -> tuple[str, FileFilter, bool, Rules]:
    """Merge command-line options with saved rules and build the filter."""
    rules = Settings().rules if use_rules else Rules()
    if directory is not None:
        rules.path = directory
    if extensions is not None:
        rules.extensions = split_list(extensions)
    if exclude is not None:
        rules.exclude = split_list(exclude)
    if min_size is not None:
        rules.min_size = min_size
    if max_size is not None:
        rules.max_size = max_size
    if older is not None:
        rules.older_than = older
    if newer is not None:
        rules.newer_than = newer
    if subdirs:
        rules.subdirs = True

    try:
        file_filter = rules.to_filter()
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    return expand_tilde(rules.path or "."), file_filter, rules.subdirs, rules


def _print_files(matches: dict[str, str]) -> None:
    width = max((len(size) for size in matches.values()), default=0)
    for path, size in sorted(matches.items()):
        click.echo(f"  {click.style(size.rjust(width), fg='yellow')}  {path}")


def _print_clean(result: CleanResult, noun: str) -> None:
    if result.errors:
        click.echo(
            f"  {click.style('!', fg='yellow')} removed {result.files_removed:,} {noun}"
            f" ({format_size(result.freed_bytes)}), {len(result.errors)} could not be removed"
        )
        for error in result.errors:
            click.echo(f"      {click.style(error, fg='bright_black')}")
    else:
        click.echo(
            f"  {click.style('✓', fg='green')} removed {result.files_removed:,} {noun}"
            f" ({click.style(format_size(result.freed_bytes), fg='green', bold=True)})"
        )


def _clean_as_dict(result: CleanResult) -> dict[str, Any]:
    return {
        "operation": result.operation,
        "target": result.target,
        "freed_bytes": result.freed_bytes,
        "files_removed": result.files_removed,
        "removed": result.removed,
        "errors": result.errors,
    }


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """Deletor — find and remove files by size, type and age."""
    _setup_logging(verbose)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@filter_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(as_json: bool, **options: Any) -> None:
    """List files matching the filters (preview only, never deletes)."""
    directory, file_filter, recursive, _rules = _resolve(**options)
    engine = DeletorEngine(file_filter)

    try:
        report = engine.scan(directory, recursive=recursive)
    except DeletorError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_json:
        data = {
            "root": report.root,
            "total_bytes": report.total_bytes,
            "files": [{"path": e.path, "size_bytes": e.size_bytes} for e in report.entries],
            "skipped": [{"path": s.path, "reason": s.reason} for s in report.skipped],
        }
        click.echo(json.dumps(data, indent=2))
        return

    if not report.matches:
        click.echo("No matching files found.")
        return

    _print_files(report.matches)
    click.echo(
        f"\n{len(report.matches):,} files, "
        f"{click.style(format_size(report.total_bytes), fg='green', bold=True)}\n"
    )


# ── delete ───────────────────────────────────────────────────────────────

@main.command()
@filter_options
@click.option("--prune-empty", is_flag=True, help="Also remove empty subdirectories")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be deleted without doing it")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def delete(prune_empty: bool, yes: bool, dry_run: bool, as_json: bool, **options: Any) -> None:
    """Delete files matching the filters."""
    directory, file_filter, recursive, rules = _resolve(**options)
    prune_empty = prune_empty or rules.prune_empty
    engine = DeletorEngine(file_filter, force_deleter=get_force_deleter())
    tracker = Tracker()

    try:
        report = engine.scan(directory, recursive=recursive)
    except DeletorError as exc:
        raise click.ClickException(str(exc)) from exc

    results: list[CleanResult] = []

    if not report.matches:
        if not as_json:
            click.echo("No matching files found.")
    elif dry_run:
        if as_json:
            click.echo(json.dumps({"status": "dry_run", "would_free_bytes": report.total_bytes,
                                   "files": report.paths}, indent=2))
            return
        _print_files(report.matches)
        click.echo(f"\n{format_size(report.total_bytes)} would be cleared (dry run — nothing deleted)")
        return
    else:
        if not as_json:
            _print_files(report.matches)
            click.echo(f"\n{click.style(format_size(report.total_bytes), bold=True)} will be cleared.")
        if yes or as_json or click.confirm("Delete these files?", default=False):
            result = engine.clean(directory)
            results.append(result)
            if not as_json:
                _print_clean(result, "files")
        elif not as_json:
            click.echo("Aborted.")

    if prune_empty and not dry_run:
        empty = engine.find_empty_dirs(directory)
        if empty and not as_json:
            click.echo("\nEmpty directories:")
            for path in empty:
                click.echo(f"  {path}")
        if empty and (yes or as_json or click.confirm("Delete these empty folders?", default=False)):
            result = engine.prune(directory)
            results.append(result)
            if not as_json:
                _print_clean(result, "directories")
        elif not empty and not as_json:
            click.echo("No empty directories found.")

    tracker.record(*results)
    tracker.save_session()

    if as_json:
        click.echo(json.dumps({"status": "cleaned", "results": [_clean_as_dict(r) for r in results]}, indent=2))


# ── prune ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("directory", default=".")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def prune(directory: str, yes: bool) -> None:
    """Remove empty subdirectories, deepest first."""
    directory = expand_tilde(directory)
    engine = DeletorEngine(FileFilter())

    try:
        empty = engine.find_empty_dirs(directory)
    except DeletorError as exc:
        raise click.ClickException(str(exc)) from exc

    if not empty:
        click.echo("No empty directories found.")
        return

    for path in empty:
        click.echo(f"  {path}")
    if not yes and not click.confirm(f"\nDelete these {len(empty)} empty folders?", default=False):
        click.echo("Aborted.")
        return

    result = engine.prune(directory)
    _print_clean(result, "directories")
    tracker = Tracker()
    tracker.record(result)
    tracker.save_session()


# ── cache ────────────────────────────────────────────────────────────────

@main.group()
def cache() -> None:
    """OS temp and cache directories."""


@cache.command("scan")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def cache_scan(as_json: bool) -> None:
    """Show the size of every known cache location."""
    manager = CacheManager()
    results = sorted(manager.scan_all(), key=lambda r: r.path)

    if as_json:
        data = [
            {"path": r.path, "file_count": r.file_count, "size_bytes": r.size_bytes, "error": r.error}
            for r in results
        ]
        click.echo(json.dumps(data, indent=2))
        return

    if not results:
        click.echo(f"No cache locations known for {manager.os_name}.")
        return

    for result in results:
        if result.error:
            click.echo(f"  {click.style('✗', fg='red')} {result.path:45s} — {result.error}")
        else:
            click.echo(
                f"  {click.style('✓', fg='green')} {result.path:45s} — "
                f"{click.style(format_size(result.size_bytes), fg='green', bold=True)} ({result.file_count:,} items)"
            )
    total = sum(r.size_bytes for r in results)
    click.echo(f"\nTotal: {click.style(format_size(total), fg='green', bold=True)}\n")


@cache.command("clean")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def cache_clean(yes: bool) -> None:
    """Remove every file in the known cache locations."""
    manager = CacheManager()
    if not manager.locations:
        click.echo(f"No cache locations known for {manager.os_name}.")
        return

    for location in manager.locations:
        click.echo(f"  {location.path}")
    if not yes and not click.confirm("\nClear these cache locations?", default=False):
        click.echo("Aborted.")
        return

    result = manager.clear_cache()
    _print_clean(result, "files")
    tracker = Tracker()
    tracker.record(result)
    tracker.save_session()


# ── stats ────────────────────────────────────────────────────────────────

@main.command()
@click.option("--period", "-p", default="all", type=click.Choice(["today", "week", "month", "all"]))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats(period: str, as_json: bool) -> None:
    """Show space freed statistics."""
    data = Tracker().get_stats(period)

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    click.echo(f"\nStatistics ({period})\n")
    click.echo(f"  Bytes freed:    {click.style(format_size(data['bytes_freed']), fg='green', bold=True)}")
    click.echo(f"  Entries removed: {data['files_removed']:,}")
    click.echo(f"  Sessions:       {data['session_count']}")
    click.echo(f"  Lifetime total: {click.style(format_size(data['lifetime_bytes_freed']), fg='cyan', bold=True)}")

    if data["per_operation"]:
        click.echo("\n  Per operation:")
        for op, totals in sorted(data["per_operation"].items()):
            click.echo(f"    {op:10s} {format_size(totals['bytes_freed']):>10s}  ({totals['files_removed']:,} entries)")
    click.echo()


# ── rules ────────────────────────────────────────────────────────────────

@main.group()
def rules() -> None:
    """Saved default filters used with --rules."""


@rules.command("show")
def rules_show() -> None:
    """Print the saved rules."""
    settings = Settings()
    for name, value in vars(settings.rules).items():
        click.echo(f"  {name:12s} {value!r}")


@rules.command("set")
@click.argument("name")
@click.argument("value")
def rules_set(name: str, value: str) -> None:
    """Save one rule, e.g. ``deletor rules set min_size 10mb``."""
    settings = Settings()
    try:
        stored = settings.set_rule(name, value)
    except KeyError:
        raise click.BadParameter(f"unknown rule '{name}'", param_hint="NAME") from None
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="VALUE") from exc
    click.echo(f"{name} = {stored!r}")
