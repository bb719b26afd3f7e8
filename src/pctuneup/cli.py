"""CLI interface for PC TuneUp."""

from __future__ import annotations

import json
import logging
import time

import click

from pctuneup.core.browsers import close_browsers, running_browsers
from pctuneup.core.catalog import CategoryCatalog, build_catalog
from pctuneup.core.cleaner import CleanEngine
from pctuneup.core.scanner import ScanEngine
from pctuneup.core.system import SystemActions, default_system_actions
from pctuneup.models.clean_result import CleanOutcome
from pctuneup.models.scan_result import ScanResult
from pctuneup.utils import format_bytes, format_elapsed

# Sizes above this are highlighted in scan output.
_LARGE_SIZE = 100_000_000


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_engines() -> tuple[ScanEngine, CleanEngine]:
    catalog = build_catalog()
    system = default_system_actions()
    return ScanEngine(catalog, system), CleanEngine(catalog, system)


def _size_label(result: ScanResult) -> str:
    if result.size_bytes <= 0:
        return click.style("Available", fg="cyan")
    color = "red" if result.size_bytes > _LARGE_SIZE else "yellow"
    return click.style(format_bytes(result.size_bytes), fg=color, bold=True)


def _print_results(results: list[ScanResult]) -> None:
    for result in results:
        category = result.category
        click.echo(f"  {category.icon} {category.name:30s} — {_size_label(result)}")
        click.echo(f"     {click.style(category.description, fg='bright_black')}")


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """PC TuneUp — reclaim disk space on Windows."""
    _setup_logging(verbose)


# ── list ─────────────────────────────────────────────────────────────────

@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(as_json: bool) -> None:
    """List the cleanup categories."""
    catalog = build_catalog()

    if as_json:
        data = [
            {
                "id": c.id,
                "name": c.name,
                "description": c.description,
                "always_report": c.always_report,
            }
            for c in catalog
        ]
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    for category in catalog:
        click.echo(f"  {click.style(category.id, fg='cyan', bold=True):32s} {category.icon} {category.name}")
        click.echo(f"    {category.description}")


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(as_json: bool) -> None:
    """Scan for reclaimable space (preview only, never deletes)."""
    scanner, _ = _build_engines()

    def on_progress(category_id: str, status: str) -> None:
        if as_json:
            return
        category = scanner.catalog.get(category_id)
        name = category.name if category else category_id
        if status == "scanning":
            click.echo(f"Scanning {name}...")
        elif status == "error":
            click.echo(f"  {click.style('✗', fg='red')} {name:30s} — error during scan")

    started = time.monotonic()
    results = scanner.scan_all(on_progress=on_progress)
    elapsed = time.monotonic() - started

    if as_json:
        data = [{"id": r.category_id, "name": r.name, "size_bytes": r.size_bytes} for r in results]
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
        return

    click.echo()
    _print_results(results)

    total = sum(r.size_bytes for r in results)
    if total > 0:
        click.echo(f"\nTotal reclaimable: {click.style(format_bytes(total), fg='green', bold=True)}")
    else:
        click.echo(f"\n{click.style('System is clean!', fg='green', bold=True)}")
    click.echo(f"Scan complete. Found {len(results)} items to clean in {format_elapsed(elapsed)}.\n")


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("category_ids", nargs=-1)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without doing it")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--close-browsers/--keep-browsers",
    "close_choice",
    default=None,
    help="Close running browsers before cleaning their caches (asks when not given)",
)
def clean(
    category_ids: tuple[str, ...],
    yes: bool,
    dry_run: bool,
    as_json: bool,
    close_choice: bool | None,
) -> None:
    """Scan, then clean the selected categories."""
    scanner, cleaner = _build_engines()

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning...\n")

    results = scanner.scan_all()
    if category_ids:
        unknown = [cid for cid in category_ids if cid not in scanner.catalog]
        for cid in unknown:
            click.echo(f"Unknown category '{cid}', skipping.", err=True)
        results = [r for r in results if r.category_id in category_ids]

    if not results:
        if as_json:
            click.echo(json.dumps({"status": "nothing_to_clean", "results": []}))
        else:
            click.echo("Nothing to clean.")
        return

    if not as_json:
        _print_results(results)
        total = sum(r.size_bytes for r in results)
        click.echo(f"\nTotal: {click.style(format_bytes(total), fg='green', bold=True)}\n")

    if dry_run:
        if as_json:
            data = [{"id": r.category_id, "would_free_bytes": r.size_bytes} for r in results]
            click.echo(json.dumps({"status": "dry_run", "results": data}, indent=2))
        else:
            click.echo("(dry run — nothing was deleted)")
        return

    # Confirm
    if not yes and not as_json:
        choice = click.prompt("Clean all? [y/N/select]", default="n", show_default=False)
        match choice.lower():
            case "y" | "yes":
                pass
            case "select":
                selected = _interactive_select(results)
                if not selected:
                    click.echo("Nothing selected.")
                    return
                results = [r for r in results if r.category_id in selected]
            case _:
                click.echo("Aborted.")
                return

    ids = [r.category_id for r in results]
    if not _handle_running_browsers(ids, cleaner.catalog, cleaner.system, close_choice, quiet=as_json):
        click.echo("Aborted.")
        return

    if not as_json:
        if not cleaner.system.is_elevated():
            click.echo(
                click.style("Not running as administrator: some system files may be skipped.\n", fg="yellow")
            )
        click.echo(f"{click.style('🧹', bold=True)} Cleaning...")

    def log_sink(message: str) -> None:
        if not as_json:
            click.echo(message)

    def on_progress(category_id: str, status: str) -> None:
        if as_json or status != "cleaning":
            return
        category = cleaner.catalog.get(category_id)
        click.echo(f"\n▶ Cleaning {category.name if category else category_id}...")

    def on_result(outcome: CleanOutcome) -> None:
        if as_json:
            return
        category = cleaner.catalog.get(outcome.category_id)
        if outcome.errors:
            return  # already reported through log_sink
        if outcome.freed_bytes > 0 or (category and category.always_report):
            click.echo(f"   {click.style('✓', fg='green')} Cleaned {format_bytes(outcome.freed_bytes)}")
        else:
            click.echo(f"   {click.style('⚠', fg='yellow')} Could not clean (files may be in use)")

    report = cleaner.clean_selected(ids, on_progress=on_progress, on_result=on_result, log_sink=log_sink)

    if as_json:
        data = [
            {
                "id": o.category_id,
                "freed_bytes": o.freed_bytes,
                "skipped": o.skipped,
                "errors": o.errors,
            }
            for o in report.outcomes
        ]
        click.echo(json.dumps({"status": "cleaned", "results": data}, indent=2))
        return

    click.echo(f"\n{'=' * 40}")
    click.echo(f"✅ Total space recovered: {click.style(format_bytes(report.total_freed), fg='green', bold=True)}")
    if report.failed:
        click.echo(f"⚠ {report.failed} items could not be fully cleaned (close apps and retry)")
    click.echo()


def _handle_running_browsers(
    category_ids: list[str],
    catalog: CategoryCatalog,
    system: SystemActions,
    close_choice: bool | None,
    quiet: bool = False,
) -> bool:
    """Offer to close browsers whose caches are about to be cleaned.

    Returns False when the user cancels the whole clean.
    """
    running = running_browsers(category_ids, catalog, system)
    if not running or close_choice is False:
        return True

    if close_choice is None:
        if quiet:
            return True
        names = "\n".join(f"  • {b.label}" for b in running)
        click.echo(
            "The following browsers are running and their cache cannot be fully cleaned:\n\n"
            f"{names}\n"
        )
        answer = click.prompt(
            "Close them automatically? [y/N/cancel]", default="n", show_default=False
        )
        match answer.lower():
            case "y" | "yes":
                pass
            case "c" | "cancel":
                return False
            case _:
                return True

    if not quiet:
        click.echo("Closing browsers...")
    close_browsers(running, system)
    if not quiet:
        click.echo("Browsers closed.\n")
    return True


def _interactive_select(results: list[ScanResult]) -> set[str]:
    """Let the user pick which categories to clean."""
    click.echo("\nSelect categories to clean (enter numbers, comma-separated):\n")
    for i, r in enumerate(results, 1):
        size = format_bytes(r.size_bytes) if r.size_bytes > 0 else "Available"
        click.echo(f"  [{i}] {r.name:30s} — {size}")
    click.echo()
    raw = click.prompt("Selection", default="")
    if not raw.strip():
        return set()
    selected: set[str] = set()
    for part in raw.split(","):
        part = part.strip()
        if part.isdigit():
            idx = int(part) - 1
            if 0 <= idx < len(results):
                selected.add(results[idx].category_id)
    return selected
