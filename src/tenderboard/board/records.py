"""Tender record dataclasses"""
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from ..documents import DocumentFile
from ..services.schemas import AnalysisResult

# Document slots a record can hold a file for
FILE_SLOTS = ('summary', 'admin', 'tech')


class WorkflowStatus(str, Enum):
    PENDING = 'PENDING'
    IN_PROGRESS = 'IN_PROGRESS'  # En trámite
    IN_DOUBT = 'IN_DOUBT'        # En duda
    REJECTED = 'REJECTED'        # Descartado
    ARCHIVED = 'ARCHIVED'        # Archivado


# Statuses renamed since earlier releases: stored value -> current status
LEGACY_STATUSES = {
    'APPROVED': WorkflowStatus.IN_PROGRESS,
}


def migrate_legacy_status(value: str) -> WorkflowStatus:
    """Map a stored status string to a WorkflowStatus (unknown -> PENDING)."""
    if value in LEGACY_STATUSES:
        return LEGACY_STATUSES[value]
    try:
        return WorkflowStatus(value)
    except ValueError:
        return WorkflowStatus.PENDING


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class TenderRecord:
    """One procurement opportunity tracked on the board.

    Each document slot (admin/tech) may have a URL, a downloaded file, both
    or neither.
    """
    id: str
    name: str
    budget: str = ""
    scoring_system: str = ""
    tender_page_url: str = ""
    admin_url: str = ""
    admin_file: Optional[DocumentFile] = None
    tech_url: str = ""
    tech_file: Optional[DocumentFile] = None
    summary_file: Optional[DocumentFile] = None
    status: WorkflowStatus = WorkflowStatus.PENDING
    analysis: Optional[AnalysisResult] = None
    created_at: int = field(default_factory=_now_ms)  # epoch ms

    def files(self) -> Dict[str, DocumentFile]:
        """Attached files keyed by slot."""
        slots = {'summary': self.summary_file, 'admin': self.admin_file, 'tech': self.tech_file}
        return {slot: f for slot, f in slots.items() if f is not None}

    def attach_file(self, slot: str, file: Optional[DocumentFile]) -> None:
        if slot not in FILE_SLOTS:
            raise ValueError(f"Unknown file slot: {slot}")
        setattr(self, f"{slot}_file", file)

    def document_state(self, slot: str) -> str:
        """Describe an admin/tech slot: 'file+url', 'file', 'url' or 'missing'."""
        has_file = getattr(self, f"{slot}_file") is not None
        has_url = bool(getattr(self, f"{slot}_url"))
        if has_file and has_url:
            return 'file+url'
        if has_file:
            return 'file'
        if has_url:
            return 'url'
        return 'missing'

    def to_dict(self) -> dict:
        """JSON-able form. File contents are stored separately; only metadata here."""
        return {
            'id': self.id,
            'name': self.name,
            'budget': self.budget,
            'scoringSystem': self.scoring_system,
            'tenderPageUrl': self.tender_page_url,
            'adminUrl': self.admin_url,
            'techUrl': self.tech_url,
            'files': {
                slot: {'name': f.name, 'contentType': f.content_type, 'size': f.size}
                for slot, f in self.files().items()
            },
            'status': self.status.value,
            'aiAnalysis': self.analysis.to_dict() if self.analysis else None,
            'createdAt': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict, files: Optional[Dict[str, DocumentFile]] = None) -> 'TenderRecord':
        # Handle older records without newer fields
        files = files or {}
        analysis = data.get('aiAnalysis')
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            budget=data.get('budget') or '',
            scoring_system=data.get('scoringSystem') or '',
            tender_page_url=data.get('tenderPageUrl') or '',
            admin_url=data.get('adminUrl') or '',
            admin_file=files.get('admin'),
            tech_url=data.get('techUrl') or '',
            tech_file=files.get('tech'),
            summary_file=files.get('summary'),
            status=migrate_legacy_status(data.get('status', 'PENDING')),
            analysis=AnalysisResult.from_dict(analysis) if analysis else None,
            created_at=data.get('createdAt') or _now_ms(),
        )


def new_tender(
    name: str,
    budget: str = "",
    scoring_system: str = "",
    tender_page_url: str = "",
    admin_url: str = "",
    admin_file: Optional[DocumentFile] = None,
    tech_url: str = "",
    tech_file: Optional[DocumentFile] = None,
    summary_file: Optional[DocumentFile] = None,
) -> TenderRecord:
    """Create a PENDING record from a submitted form. Name is required."""
    if not name or not name.strip():
        raise ValueError("A tender needs a name")
    return TenderRecord(
        id=str(uuid.uuid4()),
        name=name.strip(),
        budget=budget,
        scoring_system=scoring_system,
        tender_page_url=tender_page_url,
        admin_url=admin_url,
        admin_file=admin_file,
        tech_url=tech_url,
        tech_file=tech_file,
        summary_file=summary_file,
        status=WorkflowStatus.PENDING,
    )
