"""Download a single document URL through public CORS relays.

Tender platforms rarely serve documents to scripted clients directly, so every
download goes through a relay that re-issues the request server-side. Relays
are unreliable: the first is tried, the second is a pure fallback.

Each attempt has a hard deadline. Anti-bot interstitials and error pages are
often served with a 200 status, so small or HTML payloads are inspected and
rejected. Every failure degrades to None - callers only ever see "a file" or
"nothing".
"""
import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote, unquote

import requests

from ..documents import DocumentFile
from ..utils.fallible import fallible
from ..utils.text import sanitize_filename

logger = logging.getLogger(__name__)

# Relay templates, tried in order. {url} is the percent-encoded target.
PROXY_RELAYS = (
    'https://corsproxy.io/?{url}',
    'https://api.allorigins.win/raw?url={url}',
)

DOWNLOAD_TIMEOUT = 10          # seconds, whole attempt (connect + headers + body)
MIN_DOCUMENT_BYTES = 2000      # smaller payloads are inspected for error markers
ERROR_PAGE_MARKERS = ('<html', 'Error', 'Denied')
CHUNK_SIZE = 64 * 1024

_DISPOSITION_FILENAME = re.compile(
    r"""filename\*?=(?:UTF-8'')?['"]?([^'";]+)['"]?""", re.IGNORECASE
)


@dataclass
class FetchResult:
    """Payload of one successful relay attempt."""
    content: bytes
    content_type: str
    filename: str = ""


def proxied_url(url: str, relay: str) -> str:
    """Wrap a target URL into a relay URL (encodeURIComponent semantics)."""
    return relay.format(url=quote(url, safe="-_.!~*'()"))


def looks_like_error_page(content: bytes, content_type: str) -> bool:
    """
    Detect interstitial/error pages masquerading as documents.

    HTML content types are always rejected. Small bodies of any type are
    decoded and checked for markup or "Error"/"Denied" text.
    """
    is_html = 'text/html' in content_type.lower()
    if is_html or len(content) < MIN_DOCUMENT_BYTES:
        text = content.decode('utf-8', errors='ignore')
        if any(marker in text for marker in ERROR_PAGE_MARKERS):
            return True
    return is_html


def filename_from_disposition(disposition: Optional[str]) -> str:
    """Extract filename from a Content-Disposition header ('' if absent)."""
    if not disposition or 'filename' not in disposition.lower():
        return ""
    match = _DISPOSITION_FILENAME.search(disposition)
    if not match:
        return ""
    return sanitize_filename(unquote(match.group(1).strip()))


def extension_for(content_type: str) -> str:
    """Pick a file extension from a content type (PDF unless zip/word)."""
    ct = content_type.lower()
    if 'application/pdf' in ct:
        return '.pdf'
    if 'zip' in ct:
        return '.zip'
    if 'word' in ct:
        return '.docx'
    return '.pdf'


def _read_body(response, deadline: float) -> bytes:
    """Read a streamed body, aborting once the wall-clock deadline passes."""
    chunks = []
    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        if time.monotonic() > deadline:
            raise requests.Timeout(f"body not received within {DOWNLOAD_TIMEOUT}s")
        if chunk:
            chunks.append(chunk)
    return b''.join(chunks)


def _fetch(fetch_url: str, http, deadline: float) -> Optional[FetchResult]:
    """Blocking part of an attempt, run on the worker thread."""
    remaining = max(deadline - time.monotonic(), 0.1)
    response = http.get(fetch_url, stream=True, timeout=remaining)
    try:
        if not response.ok:
            logger.debug(f"Relay returned HTTP {response.status_code}: {fetch_url}")
            return None

        content = _read_body(response, deadline)
        content_type = response.headers.get('Content-Type', '') or ''

        if looks_like_error_page(content, content_type):
            logger.debug(f"Rejected error/interstitial page ({len(content)} bytes): {fetch_url}")
            return None

        return FetchResult(
            content=content,
            content_type=content_type,
            filename=filename_from_disposition(response.headers.get('Content-Disposition')),
        )
    finally:
        response.close()


@fallible(message="Relay attempt failed")
def _try_download(fetch_url: str, session=None) -> Optional[FetchResult]:
    """
    One relay attempt, abandoned once DOWNLOAD_TIMEOUT seconds have passed.

    Socket timeouts apply per read, so a relay that trickles its body would
    never trip them. The attempt runs on a daemon worker and the caller only
    waits for the deadline. A worker still blocked after that is abandoned:
    it closes its own response once the read returns. Closing it from here
    would wait on the lock held by the blocked read.
    """
    http = session or requests
    deadline = time.monotonic() + DOWNLOAD_TIMEOUT
    state: dict = {}

    def run():
        try:
            state['result'] = _fetch(fetch_url, http, deadline)
        except Exception as e:
            state['error'] = e

    worker = threading.Thread(target=run, name='relay-attempt', daemon=True)
    worker.start()
    worker.join(DOWNLOAD_TIMEOUT)

    if worker.is_alive():
        raise requests.Timeout(f"attempt exceeded {DOWNLOAD_TIMEOUT}s: {fetch_url}")

    if 'error' in state:
        raise state['error']
    return state.get('result')


@fallible(message="Download failed")
def download_file_from_url(url: str, default_prefix: str, session=None) -> Optional[DocumentFile]:
    """
    Download a document, trying each relay in turn.

    Args:
        url: Absolute http(s) document URL
        default_prefix: Filename prefix when the server suggests none ("PCAP", "doc")
        session: Optional requests.Session (anything with a requests-style get())

    Returns:
        DocumentFile, or None if every attempt failed
    """
    if not url or not url.startswith('http'):
        return None

    result = None
    for relay in PROXY_RELAYS:
        result = _try_download(proxied_url(url, relay), session=session)
        if result:
            break

    if not result:
        logger.debug(f"No relay could fetch {url}")
        return None

    filename = result.filename
    if not filename:
        filename = f"{default_prefix}_{int(time.time() * 1000)}{extension_for(result.content_type)}"
    elif '.' not in filename:
        filename += extension_for(result.content_type)

    return DocumentFile(name=filename, content_type=result.content_type, content=result.content)
