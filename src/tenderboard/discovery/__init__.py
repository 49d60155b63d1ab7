"""Document discovery: link extraction, scraping, classification and download"""
from .relevance import is_relevant_link, unique_relevant_links
from .classifier import (
    FileKind,
    LinkClassification,
    classify_filename,
    classify_file,
    classify_link_context,
)
from .downloader import download_file_from_url, PROXY_RELAYS, DOWNLOAD_TIMEOUT
from .pdf_links import extract_links_from_pdf
from .scraper import scrape_docs_from_web, find_document_links, ScrapedLinks
from .prober import (
    probe_links_in_batches,
    probe_and_download_link,
    ProbeBatchResult,
    ClassifiedFile,
    PROBE_BATCH_SIZE,
)
