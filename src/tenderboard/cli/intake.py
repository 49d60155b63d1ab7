"""
Intake commands - create tenders from a summary sheet, scan pages, probe links.
"""
from typing import Optional

import click
from rich.panel import Panel
from rich.progress import Progress
from rich.table import Table

from tenderboard.board import save_tender
from tenderboard.cli.console import console
from tenderboard.cli.helpers import load_document, short_id
from tenderboard.discovery import (
    PROBE_BATCH_SIZE,
    extract_links_from_pdf,
    probe_links_in_batches,
    unique_relevant_links,
)
from tenderboard.errors import TenderBoardError
from tenderboard.intake import IntakeDraft, TenderIntake
from tenderboard.services import LLMSettings, TenderAnalyst


def _show_draft(draft: IntakeDraft) -> None:
    table = Table(title="Draft", header_style="bold blue", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Name", draft.name or "[warning]-[/]")
    table.add_row("Budget", draft.budget or "-")
    table.add_row("Scoring", draft.scoring_system or "-")
    table.add_row("Tender page", draft.tender_page_url or "-")
    table.add_row("PCAP", (draft.admin_file.name if draft.admin_file else "-") +
                  (f"  [url]{draft.admin_url}[/]" if draft.admin_url else ""))
    table.add_row("PPT", (draft.tech_file.name if draft.tech_file else "-") +
                  (f"  [url]{draft.tech_url}[/]" if draft.tech_url else ""))
    console.print(table)
    if draft.warning:
        console.print(f"[warning]{draft.warning}[/]")


@click.command('intake')
@click.argument('summary', type=click.Path(exists=True, dir_okay=False))
@click.option('--name', help='Tender name (overrides the extracted one)')
@click.option('--budget', help='Budget text')
@click.option('--scoring', help='Scoring system summary')
@click.option('--page-url', help='Tender platform page URL')
@click.option('--admin-file', type=click.Path(exists=True, dir_okay=False), help='Local PCAP file')
@click.option('--tech-file', type=click.Path(exists=True, dir_okay=False), help='Local PPT file')
@click.option('--no-llm', is_flag=True, help='Skip LLM metadata extraction')
@click.option('--dry-run', is_flag=True, help='Show the draft without saving it')
def intake_command(summary: str, name: Optional[str], budget: Optional[str], scoring: Optional[str],
                   page_url: Optional[str], admin_file: Optional[str], tech_file: Optional[str],
                   no_llm: bool, dry_run: bool):
    """Create a tender from its summary sheet, auto-discovering PCAP/PPT."""
    draft = IntakeDraft(
        tender_page_url=page_url or "",
        admin_file=load_document(admin_file),
        tech_file=load_document(tech_file),
    )

    analyst = None if no_llm else TenderAnalyst(LLMSettings.from_env())

    with Progress(console=console, transient=True) as progress:
        task = progress.add_task("Probing links", total=None)

        def on_progress(processed: int, total: int) -> None:
            progress.update(task, completed=processed, total=total)

        intake = TenderIntake(
            analyst,
            on_log=lambda msg: console.print(f"[muted]{msg}[/]"),
            on_progress=on_progress,
        )
        try:
            intake.populate_from_summary(load_document(summary), draft)
        except TenderBoardError as e:
            console.print(Panel(str(e), title="Analysis error", style="error"))
            return

    # Explicit options win over extracted values
    if name:
        draft.name = name
    if budget:
        draft.budget = budget
    if scoring:
        draft.scoring_system = scoring

    _show_draft(draft)

    if not draft.name:
        console.print("[error]No tender name extracted - pass --name[/]")
        return
    if dry_run:
        console.print("\n[muted]Dry run - nothing saved[/]")
        return

    record = draft.to_record()
    save_tender(record)
    console.print(f"\n[success]Saved tender {short_id(record.id)}[/] ({record.status.value})")


@click.command('scan')
@click.argument('url')
def scan_command(url: str):
    """Scrape a tender page and download its PCAP/PPT."""
    intake = TenderIntake(on_log=lambda msg: console.print(f"[muted]{msg}[/]"))
    with console.status("Scanning page..."):
        draft = intake.scan_page(url)
    _show_draft(draft)


@click.command('probe')
@click.argument('summary', type=click.Path(exists=True, dir_okay=False))
@click.option('--batch-size', default=PROBE_BATCH_SIZE, show_default=True, type=click.IntRange(min=1),
              help='Concurrent downloads per batch')
@click.option('--save-dir', type=click.Path(file_okay=False), help='Write found documents here')
def probe_command(summary: str, batch_size: int, save_dir: Optional[str]):
    """Probe the links embedded in a summary PDF for PCAP/PPT."""
    links = extract_links_from_pdf(load_document(summary))
    candidates = unique_relevant_links(links)
    console.print(f"[info]{len(links)} links in PDF, {len(candidates)} worth probing[/]")
    if not candidates:
        return

    with Progress(console=console, transient=True) as progress:
        task = progress.add_task("Probing", total=len(candidates))
        results = probe_links_in_batches(
            candidates,
            on_progress=lambda done, total: progress.update(task, completed=done),
            batch_size=batch_size,
        )

    console.print(f"[muted]Probed {results.probed}/{results.total}[/]")
    for label, f in (("PCAP", results.admin), ("PPT", results.tech)):
        if f is None:
            console.print(f"  [warning]{label}: not found[/]")
            continue
        console.print(f"  [success]{label}:[/] {f.name} ({f.size:,} bytes)")
        if save_dir:
            console.print(f"    [muted]-> {f.save(save_dir)}[/]")
