"""
TenderBoard CLI

Commands:
    init-db   Create the database schema
    intake    Create a tender from a summary sheet (auto-discovers PCAP/PPT)
    scan      Scrape a tender page for its documents
    probe     Probe the links embedded in a summary PDF
    board     Show tenders by workflow status
    show      Show one tender and its report (--save-dir writes its documents)
    attach    Upload a local document into a tender slot
    status    Move a tender to another status
    analyze   Run the feasibility analysis
    rules     Show or update business rules
"""
import logging

import click

from tenderboard.cli.board import (
    analyze_command,
    attach_command,
    board_command,
    init_db_command,
    rules_command,
    show_command,
    status_command,
)
from tenderboard.cli.intake import intake_command, probe_command, scan_command


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
def cli(verbose: bool):
    """TenderBoard - tender intake and triage"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


cli.add_command(init_db_command)
cli.add_command(intake_command)
cli.add_command(scan_command)
cli.add_command(probe_command)
cli.add_command(board_command)
cli.add_command(show_command)
cli.add_command(attach_command)
cli.add_command(status_command)
cli.add_command(analyze_command)
cli.add_command(rules_command)


if __name__ == '__main__':
    cli()
