"""Probe candidate links in small concurrent batches.

Each candidate is downloaded and classified by filename. Batches run one
after another; inside a batch every URL is fetched concurrently and the
batch is fully joined before results are assigned to the admin/tech slots.
That keeps at most PROBE_BATCH_SIZE relay requests in flight and makes the
early-exit check deterministic: once both slots are filled after a batch,
no further batch is issued.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from .classifier import FileKind, classify_file
from .downloader import download_file_from_url
from .relevance import is_relevant_link, unique_relevant_links
from ..documents import DocumentFile

logger = logging.getLogger(__name__)

# Relays start refusing or timing out when hit with many parallel requests
PROBE_BATCH_SIZE = 4
PROBE_PREFIX = 'doc'

ProgressCallback = Callable[[int, int], None]
Downloader = Callable[[str, str], Optional[DocumentFile]]


@dataclass
class ClassifiedFile:
    """A downloaded file and its filename classification."""
    file: DocumentFile
    kind: FileKind
    url: str = ""


@dataclass
class ProbeBatchResult:
    """Files found by a probing run. Each slot is filled at most once."""
    admin: Optional[DocumentFile] = None
    tech: Optional[DocumentFile] = None
    probed: int = 0
    total: int = 0

    @property
    def complete(self) -> bool:
        return self.admin is not None and self.tech is not None

    def assign(self, found: ClassifiedFile) -> Optional[str]:
        """
        Put a classified file into its slot. Returns the slot name or None.

        ADMIN/TECH go to their own slot only if empty. UNKNOWN fills admin
        first, then tech.
        """
        if found.kind == FileKind.ADMIN:
            if self.admin is None:
                self.admin = found.file
                return 'admin'
        elif found.kind == FileKind.TECH:
            if self.tech is None:
                self.tech = found.file
                return 'tech'
        elif self.admin is None:
            self.admin = found.file
            return 'admin'
        elif self.tech is None:
            self.tech = found.file
            return 'tech'
        return None


def probe_and_download_link(url: str, downloader: Downloader = download_file_from_url) -> Optional[ClassifiedFile]:
    """Download one candidate and classify it by its resolved filename."""
    if not is_relevant_link(url):
        return None

    file = downloader(url, PROBE_PREFIX)
    if file is None:
        return None
    return ClassifiedFile(file=file, kind=classify_file(file), url=url)


def _probe_safely(url: str, downloader: Downloader) -> Optional[ClassifiedFile]:
    """One batch member. A failure never takes its siblings down."""
    try:
        return probe_and_download_link(url, downloader)
    except Exception as e:
        logger.debug(f"Probe failed for {url}: {e}")
        return None


def _batches(items: List[str], size: int) -> Iterable[List[str]]:
    for i in range(0, len(items), size):
        yield items[i:i + size]


def probe_links_in_batches(
    links: Iterable[str],
    on_progress: Optional[ProgressCallback] = None,
    batch_size: int = PROBE_BATCH_SIZE,
    downloader: Downloader = download_file_from_url,
) -> ProbeBatchResult:
    """
    Find the admin and tech documents among candidate links.

    Args:
        links: Candidate URLs (duplicates and irrelevant links are dropped)
        on_progress: Called after each batch with (processed, total)
        batch_size: Max concurrent downloads
        downloader: (url, prefix) -> DocumentFile | None

    Returns:
        ProbeBatchResult with whichever slots could be filled
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    candidates = unique_relevant_links(links)
    results = ProbeBatchResult(total=len(candidates))
    if not candidates:
        return results

    logger.info(f"Probing {len(candidates)} links in batches of {batch_size}")

    with ThreadPoolExecutor(max_workers=batch_size) as executor:
        for batch in _batches(candidates, batch_size):
            if results.complete:
                break

            # map() yields in submission order once every member has settled
            found = list(executor.map(lambda u: _probe_safely(u, downloader), batch))

            for item in found:
                if item is None:
                    continue
                slot = results.assign(item)
                if slot:
                    logger.info(f"{item.kind.value} document for {slot} slot: {item.file.name} ({item.url})")

            results.probed = min(results.probed + len(batch), results.total)
            if on_progress:
                on_progress(results.probed, results.total)

    return results
