"""
Shared helpers for TenderBoard CLI commands.
"""
from typing import Optional

import click

from tenderboard.board import find_tender_id, get_tender
from tenderboard.board.records import TenderRecord
from tenderboard.documents import DocumentFile


def load_document(path: Optional[str]) -> Optional[DocumentFile]:
    """Read a local file given on the command line (None passes through)."""
    if not path:
        return None
    return DocumentFile.from_path(path)


def resolve_tender(tender_id: str, with_files: bool = True) -> TenderRecord:
    """Look a record up by full or abbreviated ID."""
    full_id = find_tender_id(tender_id)
    if full_id is None:
        raise click.ClickException(f"No single tender matches '{tender_id}'")
    return get_tender(full_id, with_files=with_files)


def short_id(tender_id: str) -> str:
    return tender_id[:8]


def slot_summary(record: TenderRecord, slot: str) -> str:
    """One-line description of an admin/tech slot for tables."""
    state = record.document_state(slot)
    f = getattr(record, f"{slot}_file")
    if state == 'file+url':
        return f"{f.name} (+url)"
    if state == 'file':
        return f.name
    if state == 'url':
        return "link only"
    return "-"
