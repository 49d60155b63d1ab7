"""
Board commands - view tenders, move them through the workflow, analyse them.
"""
from typing import Optional

import click
from rich.panel import Panel
from rich.table import Table

from tenderboard.board import (
    BOARD_COLUMNS,
    DEFAULT_RULES,
    analysis_request,
    apply_analysis,
    group_by_status,
    list_tenders,
    load_rules,
    save_rules,
    save_tender,
    set_status,
)
from tenderboard.board.records import FILE_SLOTS, TenderRecord, WorkflowStatus
from tenderboard.cli.console import STATUS_LABELS, console, status_style
from tenderboard.cli.helpers import load_document, resolve_tender, short_id, slot_summary
from tenderboard.errors import TenderBoardError
from tenderboard.services import LLMSettings, TenderAnalyst, build_analysis_system_prompt
from tenderboard.services.schemas import AnalysisResult
from tenderboard.storage import init_schema


@click.command('init-db')
def init_db_command():
    """Create the database schema."""
    init_schema()
    console.print("[success]Schema ready[/]")


@click.command('board')
@click.option('--archive', is_flag=True, help='Show archived tenders instead of the board')
def board_command(archive: bool):
    """Show tenders grouped by workflow status."""
    by_status = group_by_status(list_tenders())
    columns = (WorkflowStatus.ARCHIVED,) if archive else BOARD_COLUMNS

    for status in columns:
        records = by_status[status]
        table = Table(title=f"{STATUS_LABELS[status]} ({len(records)})",
                      title_style=status_style(status), header_style="bold blue")
        table.add_column("ID", style="bold")
        table.add_column("Name")
        table.add_column("Budget")
        table.add_column("PCAP")
        table.add_column("PPT")
        table.add_column("Decision")

        for r in records:
            table.add_row(
                short_id(r.id),
                r.name,
                r.budget or '-',
                slot_summary(r, 'admin'),
                slot_summary(r, 'tech'),
                r.analysis.decision.value if r.analysis else '-',
            )
        console.print(table)


def _report_panel(report: AnalysisResult) -> Panel:
    s = report.scoring
    criteria = "\n".join(
        f"  - {c.label}: {c.weight:g} ({c.category.value})" for c in s.sub_criteria
    ) or "  -"
    deliverables = "\n".join(f"  - {d}" for d in report.scope.deliverables) or "  -"
    body = (
        f"[bold]{report.decision.value}[/] - {report.summary_reasoning}\n\n"
        f"[highlight]Economic[/]\n  Budget: {report.economic.budget}\n"
        f"  Model: {report.economic.model}\n  Basis: {report.economic.basis}\n\n"
        f"[highlight]Scope[/]\n  {report.scope.objective}\n{deliverables}\n\n"
        f"[highlight]Resources[/]\n  Duration: {report.resources.duration}\n"
        f"  Team: {report.resources.team}\n  Dedication: {report.resources.dedication}\n\n"
        f"[highlight]Solvency[/]\n  Certifications: {report.solvency.certifications}\n"
        f"  Specific: {report.solvency.specific_solvency}\n  Penalties: {report.solvency.penalties}\n\n"
        f"[highlight]Strategy[/]\n  {report.strategy.angle}\n\n"
        f"[highlight]Scoring[/]  price {s.price_weight:g} / formula {s.formula_weight:g} / "
        f"value {s.value_weight:g}\n  {s.details}\n{criteria}"
    )
    return Panel(body, title="Feasibility report")


def _show_record(record: TenderRecord) -> None:
    console.print(Panel(
        f"[bold]{record.name}[/]\n"
        f"ID: {record.id}\n"
        f"Status: [{status_style(record.status)}]{STATUS_LABELS[record.status]}[/]\n"
        f"Budget: {record.budget or '-'}\n"
        f"Scoring: {record.scoring_system or '-'}\n"
        f"Page: {record.tender_page_url or '-'}\n"
        f"PCAP: {slot_summary(record, 'admin')}" + (f"  [url]{record.admin_url}[/]" if record.admin_url else "") + "\n"
        f"PPT: {slot_summary(record, 'tech')}" + (f"  [url]{record.tech_url}[/]" if record.tech_url else ""),
        title="Tender"
    ))
    if record.analysis:
        console.print(_report_panel(record.analysis))


@click.command('show')
@click.argument('tender_id')
@click.option('--save-dir', type=click.Path(file_okay=False), help='Write the stored documents here')
def show_command(tender_id: str, save_dir: Optional[str]):
    """Show a tender and its analysis report."""
    record = resolve_tender(tender_id, with_files=bool(save_dir))
    _show_record(record)

    if save_dir:
        files = record.files()
        if not files:
            console.print("[warning]No stored documents[/]")
        for slot, f in files.items():
            console.print(f"  [success]{slot}:[/] {f.save(save_dir)}")


@click.command('attach')
@click.argument('tender_id')
@click.argument('slot', type=click.Choice(FILE_SLOTS))
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
def attach_command(tender_id: str, slot: str, path: str):
    """Upload a local document into a tender slot (summary, admin or tech)."""
    record = resolve_tender(tender_id)
    f = load_document(path)
    record.attach_file(slot, f)
    save_tender(record)
    console.print(f"[success]{short_id(record.id)}: {slot} <- {f.name}[/] ({f.size:,} bytes)")


@click.command('status')
@click.argument('tender_id')
@click.argument('status', type=click.Choice([s.value for s in WorkflowStatus], case_sensitive=False))
def status_command(tender_id: str, status: str):
    """Move a tender to another workflow status."""
    record = resolve_tender(tender_id)
    set_status(record, WorkflowStatus(status.upper()))
    save_tender(record)
    console.print(f"[success]{short_id(record.id)} -> {STATUS_LABELS[record.status]}[/]")


@click.command('analyze')
@click.argument('tender_id')
def analyze_command(tender_id: str):
    """Run the feasibility analysis and move the tender by its decision."""
    record = resolve_tender(tender_id)
    rules = load_rules(DEFAULT_RULES)
    analyst = TenderAnalyst(LLMSettings.from_env())

    try:
        with console.status(f"Analysing {record.name}..."):
            report = analyst.analyze(analysis_request(record, rules))
    except TenderBoardError as e:
        # Record stays untouched
        console.print(Panel(f"Error analysing the tender. Try again.\n{e}", style="error"))
        return

    apply_analysis(record, report)
    save_tender(record)
    console.print(_report_panel(report))
    console.print(f"[success]{short_id(record.id)} -> {STATUS_LABELS[record.status]}[/]")


@click.command('rules')
@click.option('--set', 'new_rules', help='Replace the business rules text')
@click.option('--file', 'rules_file', type=click.File('r', encoding='utf-8'), help='Read rules from a file')
@click.option('--show-prompt', is_flag=True, help='Print the full analysis system prompt')
def rules_command(new_rules: Optional[str], rules_file, show_prompt: bool):
    """Show or update the business rules used by the analysis."""
    if rules_file is not None:
        new_rules = rules_file.read()
    if new_rules is not None:
        save_rules(new_rules.strip())
        console.print("[success]Rules saved[/]")
        return
    rules = load_rules(DEFAULT_RULES)
    if show_prompt:
        console.print(Panel(build_analysis_system_prompt(rules), title="Analysis system prompt"))
        return
    console.print(Panel(rules, title="Business rules"))
