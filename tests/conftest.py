"""Pytest configuration and shared fakes for the TenderBoard test suite."""
import io
from typing import Callable, Dict, List, Optional, Union

import pytest
from requests.structures import CaseInsensitiveDict


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (may require network access)"
    )


class FakeResponse:
    """Just enough of requests.Response for the discovery code."""

    def __init__(self, content: bytes = b"", status_code: int = 200,
                 headers: Optional[Dict[str, str]] = None):
        self.content = content
        self.status_code = status_code
        self.headers = CaseInsensitiveDict(headers or {})
        self.closed = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def text(self) -> str:
        return self.content.decode('utf-8', errors='ignore')

    def iter_content(self, chunk_size: int = 1024):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i:i + chunk_size]

    def raise_for_status(self):
        if not self.ok:
            import requests
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def close(self):
        self.closed = True


Handler = Callable[[str], Union[FakeResponse, Exception]]


class FakeSession:
    """Records get() calls and answers them from a handler function."""

    def __init__(self, handler: Handler):
        self.handler = handler
        self.calls: List[dict] = []

    def get(self, url, **kwargs):
        self.calls.append({'url': url, **kwargs})
        result = self.handler(url)
        if isinstance(result, Exception):
            raise result
        return result


def pdf_response(size: int = 3000, **headers) -> FakeResponse:
    body = b"%PDF-1.4\n" + b"0" * (size - 9)
    return FakeResponse(body, headers={'Content-Type': 'application/pdf', **headers})


def make_pdf(links_per_page: List[List[str]]) -> bytes:
    """Build a PDF with one blank page per entry, each carrying URI link annotations."""
    from pypdf import PdfWriter
    from pypdf.annotations import Link

    writer = PdfWriter()
    for page_number, links in enumerate(links_per_page):
        writer.add_blank_page(width=595, height=842)
        for i, url in enumerate(links):
            y = 700 - i * 40
            writer.add_annotation(page_number=page_number,
                                  annotation=Link(rect=(50, y, 300, y + 20), url=url))
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def fake_session():
    """Factory fixture: fake_session(handler) -> FakeSession."""
    return FakeSession
