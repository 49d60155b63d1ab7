"""Scrape a tender page for its administrative and technical documents"""
import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from .classifier import classify_link_context
from .downloader import PROXY_RELAYS, proxied_url
from ..utils.fallible import fallible

logger = logging.getLogger(__name__)

PAGE_TIMEOUT = 30
FILE_EXTENSIONS = ('.pdf', '.zip')
SKIPPED_HREFS = ('#', '/')


@dataclass
class ScrapedLinks:
    """Best guesses for the two companion documents of one tender page."""
    admin_url: Optional[str] = None
    tech_url: Optional[str] = None

    def __bool__(self) -> bool:
        return bool(self.admin_url or self.tech_url)


def _attr(link, name: str) -> str:
    """Attribute as a string (bs4 returns lists for multi-valued attrs like class)."""
    value = link.get(name)
    if isinstance(value, list):
        return ' '.join(value)
    return value or ''


def _resolve_url(href: str, page_url: str) -> str:
    if href.startswith('http'):
        return href
    try:
        return urljoin(page_url, href)
    except ValueError:
        return href


def find_document_links(html: str, page_url: str) -> ScrapedLinks:
    """
    Pick admin/tech document URLs out of a page's anchors.

    First anchor matching each category wins. If a category is still empty
    after the scan, the generic .pdf/.zip links fill it positionally: the
    first generic link goes to admin, the second to tech.
    """
    soup = BeautifulSoup(html, 'html.parser')
    found = ScrapedLinks()
    potential_files: List[str] = []

    for link in soup.find_all('a'):
        href = link.get('href')
        if not href or href.startswith('javascript') or href in SKIPPED_HREFS:
            continue

        full_url = _resolve_url(href, page_url)
        cls = classify_link_context(
            text=link.get_text(),
            title=_attr(link, 'title'),
            aria_label=_attr(link, 'aria-label'),
            element_id=_attr(link, 'id'),
            class_name=_attr(link, 'class'),
            href=href,
        )

        if full_url.lower().endswith(FILE_EXTENSIONS):
            potential_files.append(full_url)

        if not found.admin_url and cls.is_admin:
            found.admin_url = full_url
        if not found.tech_url and cls.is_tech:
            found.tech_url = full_url

    # Last resort: positional guess from generic file links
    if not found.admin_url and len(potential_files) > 0:
        found.admin_url = potential_files[0]
    if not found.tech_url and len(potential_files) > 1:
        found.tech_url = potential_files[1]

    logger.debug(f"Scraped {page_url}: admin={found.admin_url} tech={found.tech_url} "
                 f"({len(potential_files)} generic file links)")
    return found


@fallible(factory=ScrapedLinks, level=logging.WARNING, message="Scraping failed")
def scrape_docs_from_web(page_url: str, session=None) -> ScrapedLinks:
    """
    Fetch a tender page through the first relay and guess its document URLs.

    Never raises: any fetch or parse failure returns an empty ScrapedLinks.
    """
    if not page_url or not page_url.startswith('http'):
        return ScrapedLinks()

    http = session or requests
    response = http.get(proxied_url(page_url, PROXY_RELAYS[0]), timeout=PAGE_TIMEOUT)
    response.raise_for_status()

    return find_document_links(response.text, page_url)
