"""
Shared Rich console and theme for the TenderBoard CLI.
"""
from rich.console import Console
from rich.theme import Theme

from tenderboard.board.records import WorkflowStatus

custom_theme = Theme({
    "info": "blue",
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
    "highlight": "bold blue",
    "muted": "dim",
    "url": "underline blue",
    "count": "blue",
    "table.header": "bold blue",
    "status.pending": "white",
    "status.in_progress": "green",
    "status.in_doubt": "yellow",
    "status.rejected": "red",
    "status.archived": "dim",
})

console = Console(theme=custom_theme, highlight=False)

STATUS_LABELS = {
    WorkflowStatus.PENDING: "Pending",
    WorkflowStatus.IN_PROGRESS: "In progress",
    WorkflowStatus.IN_DOUBT: "In doubt",
    WorkflowStatus.REJECTED: "Rejected",
    WorkflowStatus.ARCHIVED: "Archived",
}


def status_style(status: WorkflowStatus) -> str:
    return f"status.{status.value.lower()}"

