from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from salon_import.config import get_settings
from salon_import.integrations.blind_index import make_blind_index
from salon_import.integrations.container import build_container
from salon_import.integrations.excel_reader import write_template
from salon_import.integrations.in_memory import seed_reference_data
from salon_import.models.enums import JobStatus
from salon_import.models.internal import ImportJob

app = typer.Typer(help="Customer history import CLI.")
console = Console()


def _ensure_src_on_path() -> None:
    """Allow running `python cli/main.py` without installation."""
    repo_root = Path(__file__).resolve().parents[2]
    src_dir = repo_root / "src"
    if src_dir.exists():
        sys.path.insert(0, str(src_dir))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_seed(path: Path) -> dict:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        console.print(f"[red]Could not read seed file[/red] {path}: {exc}")
        raise typer.Exit(code=2) from exc
    if not isinstance(payload, dict):
        console.print(f"[red]Seed file must hold a JSON object:[/red] {path}")
        raise typer.Exit(code=2)
    return payload


def _print_report(job: ImportJob) -> None:
    colour = "green" if job.status is JobStatus.COMPLETED else "red"
    console.print(f"[{colour}]{job.status.value}[/{colour}] {job.report_message or ''}")
    console.print(
        f"groups: {job.progress.total}  processed: {job.progress.processed}  failed: {job.progress.failed}"
    )
    if not job.error_log:
        return
    table = Table(title="Failed invoice groups")
    table.add_column("Group")
    table.add_column("Rows", justify="right")
    table.add_column("Reason")
    for entry in job.error_log:
        table.add_row(entry.group_key, str(len(entry.raw_group_data)), entry.message)
    console.print(table)


@app.command()
def template(
    out: Path = typer.Argument(..., help="Where to write the .xlsx template."),
    examples: bool = typer.Option(True, help="Include two example rows."),
) -> None:
    """Write the history import template workbook."""

    path = write_template(out, with_examples=examples)
    console.print(f"[green]Wrote template[/green] {path}")


@app.command()
def run(
    sheet: Path = typer.Argument(..., help="History spreadsheet (.xlsx)."),
    tenant: str = typer.Option(..., "--tenant", help="Tenant id the history belongs to."),
    seed: Path = typer.Option(
        ..., "--seed", help="JSON file with services, products, staff and customers."
    ),
    verbose: bool = False,
) -> None:
    """
    Import one spreadsheet against seeded reference data and print the report.

    The source file is left in place. Exits with code 1 when the job fails.
    """

    _configure_logging(verbose)
    if not sheet.exists():
        console.print(f"[red]File not found:[/red] {sheet}")
        raise typer.Exit(code=2)

    settings = get_settings().model_copy(update={"delete_source_after_import": False})
    blind_index = make_blind_index(settings.blind_index_key)
    try:
        catalog, customers = seed_reference_data(
            _load_seed(seed), tenant_id=tenant, blind_index=blind_index
        )
    except ValueError as exc:
        console.print(f"[red]Invalid seed data:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    container = build_container(settings=settings, catalog=catalog, customers=customers)

    async def _run() -> ImportJob | None:
        job = await container.service.create_job(
            tenant_id=tenant,
            source_path=str(sheet),
            original_filename=sheet.name,
        )
        return await container.orchestrator.run(job.job_id)

    console.print(f"[cyan]Importing[/cyan] {sheet} for tenant {tenant}")
    job = asyncio.run(_run())
    if job is None:
        raise typer.Exit(code=1)
    _print_report(job)
    if job.status is JobStatus.FAILED:
        raise typer.Exit(code=1)


def main() -> None:
    _ensure_src_on_path()
    app()


if __name__ == "__main__":
    main()
