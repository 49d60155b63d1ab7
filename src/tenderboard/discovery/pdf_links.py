"""Collect outbound hyperlinks embedded in a PDF's link annotations.

Summary sheets ("Hoja Resumen") published by Spanish contracting platforms
usually link straight to the PCAP/PPT documents and to the tender page. The
links live in /Link annotations with a /URI action, not in the text layer.
"""
import io
import logging
from typing import List, Union

from pypdf import PdfReader

from ..documents import DocumentFile
from ..utils.fallible import fallible

logger = logging.getLogger(__name__)


def _annotation_uri(annotation) -> str:
    """Return the URI of a /Link annotation, or '' for anything else."""
    annot = annotation.get_object()
    if annot.get('/Subtype') != '/Link':
        return ""
    action = annot.get('/A')
    if action is None:
        return ""
    uri = action.get_object().get('/URI')
    if uri is None:
        return ""
    uri = uri.get_object()
    if isinstance(uri, bytes):
        uri = uri.decode('latin-1')
    return str(uri).strip()


@fallible(factory=list, level=logging.WARNING, message="Failed to extract links from PDF")
def extract_links_from_pdf(source: Union[DocumentFile, bytes]) -> List[str]:
    """
    Return the unique URLs referenced by link annotations on every page.

    Order is not significant. Malformed PDFs yield an empty list.
    """
    data = source.content if isinstance(source, DocumentFile) else source
    reader = PdfReader(io.BytesIO(data))
    links = set()

    for page_number, page in enumerate(reader.pages, start=1):
        annotations = page.get('/Annots')
        if annotations is None:
            continue
        for annotation in annotations.get_object():
            uri = _annotation_uri(annotation)
            if uri:
                links.add(uri)
        logger.debug(f"Page {page_number}: {len(links)} unique links so far")

    return list(links)
