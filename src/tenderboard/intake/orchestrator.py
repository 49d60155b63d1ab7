"""
Auto-population of a new tender from its summary sheet.

Sequence for a dropped summary PDF:
1. In parallel: LLM metadata extraction and PDF link-annotation extraction
2. Probe the embedded links in batches for the PCAP/PPT documents
3. If the LLM found no tender page, take the first platform link from the PDF
4. If a document is still missing, scrape the tender page and download
   whatever it points to

Discovery steps never fail the intake - at worst the draft has no documents
and the user uploads them by hand. Extraction service errors do propagate.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..board.records import TenderRecord, new_tender
from ..discovery import (
    download_file_from_url,
    extract_links_from_pdf,
    probe_links_in_batches,
    scrape_docs_from_web,
)
from ..discovery.prober import ProgressCallback
from ..documents import DocumentFile
from ..services.schemas import TenderMetadata

logger = logging.getLogger(__name__)

# Substrings of official contracting-platform URLs
TENDER_PLATFORM_HINTS = ('contratacion', 'placsp')

ADMIN_PREFIX = 'PCAP'
TECH_PREFIX = 'PPT'

BLOCKED_MESSAGE = "Anti-bot block. Download manually."
NOT_FOUND_MESSAGE = "No documents found."


@dataclass
class IntakeDraft:
    """Form state for a tender that has not been submitted yet."""
    name: str = ""
    budget: str = ""
    scoring_system: str = ""
    tender_page_url: str = ""
    admin_url: str = ""
    admin_file: Optional[DocumentFile] = None
    tech_url: str = ""
    tech_file: Optional[DocumentFile] = None
    summary_file: Optional[DocumentFile] = None
    discovered_links: List[str] = field(default_factory=list)
    log: List[str] = field(default_factory=list)
    warning: str = ""

    @property
    def missing_documents(self) -> bool:
        return self.admin_file is None or self.tech_file is None

    def apply_metadata(self, metadata: TenderMetadata) -> None:
        """Copy non-empty extracted fields onto the draft."""
        if metadata.name:
            self.name = metadata.name
        if metadata.budget:
            self.budget = metadata.budget
        if metadata.scoring_system:
            self.scoring_system = metadata.scoring_system
        if metadata.admin_url and not self.admin_url:
            self.admin_url = metadata.admin_url
        if metadata.tech_url and not self.tech_url:
            self.tech_url = metadata.tech_url

    def to_record(self) -> TenderRecord:
        """Submit the draft as a new PENDING record."""
        return new_tender(
            name=self.name,
            budget=self.budget,
            scoring_system=self.scoring_system,
            tender_page_url=self.tender_page_url,
            admin_url=self.admin_url,
            admin_file=self.admin_file,
            tech_url=self.tech_url,
            tech_file=self.tech_file,
            summary_file=self.summary_file,
        )


@dataclass
class ScrapeOutcome:
    downloaded: int = 0
    attempted: int = 0
    scrape_success: bool = False
    blocked: bool = False


def find_tender_page_link(links: List[str]) -> str:
    """First link that looks like an official contracting-platform page."""
    for link in links:
        lower = link.lower()
        if any(hint in lower for hint in TENDER_PLATFORM_HINTS):
            return link
    return ""


class TenderIntake:
    """
    Runs the acquisition pipeline for one draft.

    Usage:
        intake = TenderIntake(analyst, on_log=console.print)
        draft = intake.populate_from_summary(DocumentFile.from_path("hoja.pdf"))
        record = draft.to_record()

    `analyst` is anything with extract_metadata(file) -> TenderMetadata; pass
    None to skip LLM extraction.
    """

    def __init__(
        self,
        analyst=None,
        downloader: Callable[[str, str], Optional[DocumentFile]] = download_file_from_url,
        scraper=scrape_docs_from_web,
        on_log: Optional[Callable[[str], None]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.analyst = analyst
        self.downloader = downloader
        self.scraper = scraper
        self.on_log = on_log
        self.on_progress = on_progress

    def _log(self, draft: IntakeDraft, message: str) -> None:
        draft.log.append(message)
        logger.info(message)
        if self.on_log:
            self.on_log(message)

    def _extract_metadata(self, file: DocumentFile) -> TenderMetadata:
        if self.analyst is None:
            return TenderMetadata.empty()
        return self.analyst.extract_metadata(file)

    def populate_from_summary(self, summary_file: DocumentFile, draft: Optional[IntakeDraft] = None) -> IntakeDraft:
        """Fill a draft from a summary sheet (see module docstring for the steps)."""
        draft = draft or IntakeDraft()
        draft.summary_file = summary_file
        draft.warning = ""
        self._log(draft, "> Starting analysis engine...")

        with ThreadPoolExecutor(max_workers=2) as executor:
            metadata_future = executor.submit(self._extract_metadata, summary_file)
            links_future = executor.submit(extract_links_from_pdf, summary_file)

            links = links_future.result()
            self._log(draft, f"> PDF scanned: {len(links)} links")
            # Extraction errors propagate from here
            metadata = metadata_future.result()

        draft.discovered_links = links
        draft.apply_metadata(metadata)
        if metadata.name:
            self._log(draft, "> Title extracted")

        if links:
            self._log(draft, "> Probing links (parallel batches)...")
            results = probe_links_in_batches(
                links, on_progress=self.on_progress, downloader=self.downloader
            )
            if results.admin and draft.admin_file is None:
                draft.admin_file = results.admin
                self._log(draft, "  [OK] Administrative document detected")
            if results.tech and draft.tech_file is None:
                draft.tech_file = results.tech
                self._log(draft, "  [OK] Technical document detected")

        page_url = metadata.tender_page_url or find_tender_page_link(links)
        if page_url:
            draft.tender_page_url = page_url

        if draft.tender_page_url and draft.missing_documents:
            self.process_url_for_docs(draft.tender_page_url, draft)

        self._log(draft, "> Done.")
        return draft

    def process_url_for_docs(self, url: str, draft: IntakeDraft) -> ScrapeOutcome:
        """Scrape a tender page and download the documents it points to.

        Only slots without a file are downloaded; found URLs are always
        recorded on the draft.
        """
        outcome = ScrapeOutcome()
        if not url:
            return outcome

        self._log(draft, "> Analysing official page...")
        scraped = self.scraper(url)

        if scraped.admin_url:
            draft.admin_url = scraped.admin_url
            if draft.admin_file is None:
                self._log(draft, "> Downloading PCAP...")
                outcome.attempted += 1
                f = self.downloader(scraped.admin_url, ADMIN_PREFIX)
                if f:
                    draft.admin_file = f
                    outcome.downloaded += 1
                    self._log(draft, "  [OK] PCAP downloaded")

        if scraped.tech_url:
            draft.tech_url = scraped.tech_url
            if draft.tech_file is None:
                self._log(draft, "> Downloading PPT...")
                outcome.attempted += 1
                f = self.downloader(scraped.tech_url, TECH_PREFIX)
                if f:
                    draft.tech_file = f
                    outcome.downloaded += 1
                    self._log(draft, "  [OK] PPT downloaded")

        found_urls = bool(scraped.admin_url or scraped.tech_url)
        outcome.scrape_success = outcome.downloaded > 0 or found_urls
        if outcome.attempted and outcome.downloaded == 0:
            outcome.blocked = True
            draft.warning = BLOCKED_MESSAGE

        return outcome

    def scan_page(self, url: str, draft: Optional[IntakeDraft] = None) -> IntakeDraft:
        """Manual scan of a tender page for an existing draft."""
        draft = draft or IntakeDraft()
        draft.tender_page_url = url
        draft.warning = ""
        self._log(draft, "> Starting manual scan...")

        outcome = self.process_url_for_docs(url, draft)
        if draft.admin_file is None and draft.tech_file is None and not outcome.scrape_success:
            draft.warning = NOT_FOUND_MESSAGE
        else:
            self._log(draft, "> Scan finished.")
        return draft
