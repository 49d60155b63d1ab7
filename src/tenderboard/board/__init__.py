"""Tender board: records, workflow and persistence"""
from .records import TenderRecord, WorkflowStatus, new_tender, migrate_legacy_status, FILE_SLOTS
from .workflow import (
    set_status,
    apply_analysis,
    analysis_request,
    group_by_status,
    BOARD_COLUMNS,
    DEFAULT_RULES,
)
from .repository import (
    save_tender,
    load_tender,
    get_tender,
    list_tenders,
    find_tender_id,
    load_rules,
    save_rules,
)
