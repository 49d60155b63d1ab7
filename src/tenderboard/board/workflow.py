"""Workflow moves: manual status changes and report-driven decisions"""
from typing import Dict, Iterable, List

from .records import TenderRecord, WorkflowStatus
from ..services.schemas import AnalysisRequest, AnalysisResult, Decision

DECISION_STATUS = {
    Decision.KEEP: WorkflowStatus.IN_PROGRESS,
    Decision.DISCARD: WorkflowStatus.REJECTED,
    Decision.REVIEW: WorkflowStatus.IN_DOUBT,
}

# Board column order; ARCHIVED has its own view
BOARD_COLUMNS = (
    WorkflowStatus.PENDING,
    WorkflowStatus.IN_DOUBT,
    WorkflowStatus.IN_PROGRESS,
    WorkflowStatus.REJECTED,
)

DEFAULT_RULES = (
    "1. Verificar requisitos de solvencia técnica: ¿Se exigen certificaciones específicas "
    "(ISO 9001, 14001, ENS, etc) o Clasificación Empresarial?\n"
    "2. Si piden certificaciones obligatorias, es un criterio para descartar el pliego si no se poseen."
)


def set_status(record: TenderRecord, status: WorkflowStatus) -> TenderRecord:
    """Any status can follow any other; there is no enforced state machine."""
    record.status = WorkflowStatus(status)
    return record


def apply_analysis(record: TenderRecord, analysis: AnalysisResult) -> TenderRecord:
    """Attach a report and move the record according to its decision."""
    record.analysis = analysis
    record.status = DECISION_STATUS.get(analysis.decision, WorkflowStatus.PENDING)
    return record


def analysis_request(record: TenderRecord, rules: str) -> AnalysisRequest:
    """Build the service request for a record (summary/admin/tech files when present)."""
    return AnalysisRequest(
        name=record.name,
        rules=rules,
        budget=record.budget,
        scoring_system=record.scoring_system,
        source_url=record.tender_page_url,
        summary_file=record.summary_file,
        admin_file=record.admin_file,
        tech_file=record.tech_file,
    )


def group_by_status(records: Iterable[TenderRecord]) -> Dict[WorkflowStatus, List[TenderRecord]]:
    """Group records into one list per status, preserving input order."""
    by_status: Dict[WorkflowStatus, List[TenderRecord]] = {s: [] for s in WorkflowStatus}
    for r in records:
        by_status[r.status].append(r)
    return by_status
