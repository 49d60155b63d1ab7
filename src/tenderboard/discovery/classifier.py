"""Keyword classification of tender documents.

Spanish public-procurement tenders ship two companion documents:
- ADMIN: Pliego de Cláusulas Administrativas Particulares (PCAP)
- TECH:  Pliego de Prescripciones Técnicas (PPT)

Classification is a plain substring check on normalised text (lowercase,
accents stripped). Two flavours share the taxonomy:
- filename: used on downloaded files, returns a single FileKind
- link context: used on scraped anchors, returns independent admin/tech flags

Admin is always checked before tech.
"""
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..utils.text import normalize_text, contains_any

# Filename taxonomy
ADMIN_FILENAME_KEYWORDS = ('pcap', 'admin', 'clausula', 'juridico', 'caratula')
TECH_FILENAME_KEYWORDS = ('ppt', 'tecnic', 'prescrip', 'memoria', 'proyecto')

# Link-context taxonomy: anchors carry more prose ("Bases", "Anexo I"),
# so the admin side is wider than for filenames
ADMIN_LINK_KEYWORDS = ('pcap', 'clausulas', 'administrativ', 'caratula', 'bases', 'anexo')
TECH_LINK_KEYWORDS = ('ppt', 'prescripciones', 'tecnic', 'memoria', 'proyecto')


class FileKind(str, Enum):
    ADMIN = 'ADMIN'
    TECH = 'TECH'
    UNKNOWN = 'UNKNOWN'


@dataclass(frozen=True)
class LinkClassification:
    """Result of link-context classification. Both flags may be set."""
    is_admin: bool
    is_tech: bool


def classify_filename(filename: str) -> FileKind:
    """Classify a file by its base name.

    >>> classify_filename("PCAP_2024.pdf")
    <FileKind.ADMIN: 'ADMIN'>
    """
    name = normalize_text(os.path.basename(filename or ''))

    if contains_any(name, ADMIN_FILENAME_KEYWORDS):
        return FileKind.ADMIN
    if contains_any(name, TECH_FILENAME_KEYWORDS):
        return FileKind.TECH
    return FileKind.UNKNOWN


def classify_file(file) -> FileKind:
    """Classify any object with a `name` attribute (DocumentFile)."""
    return classify_filename(file.name)


def link_context_text(
    text: Optional[str] = None,
    title: Optional[str] = None,
    aria_label: Optional[str] = None,
    element_id: Optional[str] = None,
    class_name: Optional[str] = None,
    href: Optional[str] = None,
) -> str:
    """Build the normalised search string for an anchor."""
    parts = [text, title, aria_label, element_id, class_name, href]
    return normalize_text(' '.join(p or '' for p in parts))


def classify_link_context(
    text: Optional[str] = None,
    title: Optional[str] = None,
    aria_label: Optional[str] = None,
    element_id: Optional[str] = None,
    class_name: Optional[str] = None,
    href: Optional[str] = None,
) -> LinkClassification:
    """Classify an anchor from its text, attributes and raw href."""
    combined = link_context_text(text, title, aria_label, element_id, class_name, href)
    return LinkClassification(
        is_admin=contains_any(combined, ADMIN_LINK_KEYWORDS),
        is_tech=contains_any(combined, TECH_LINK_KEYWORDS),
    )
