"""Test the summary-sheet intake pipeline with fake collaborators."""
import threading
from unittest.mock import MagicMock

import pytest

from conftest import make_pdf
from tenderboard.discovery.scraper import ScrapedLinks
from tenderboard.documents import DocumentFile
from tenderboard.errors import ServiceCallError
from tenderboard.intake.orchestrator import (
    BLOCKED_MESSAGE,
    NOT_FOUND_MESSAGE,
    IntakeDraft,
    TenderIntake,
    find_tender_page_link,
)
from tenderboard.services.schemas import TenderMetadata

PAGE = "https://contrataciondelestado.es/licitacion/42"


def _file(name):
    return DocumentFile(name=name, content_type="application/pdf", content=b"%PDF" + b"0" * 3000)


def _summary(links):
    return DocumentFile(name="resumen.pdf", content_type="application/pdf", content=make_pdf([links]))


class FakeDownloader:

    def __init__(self, files):
        self.files = files
        self.requested = []
        self._lock = threading.Lock()

    def __call__(self, url, prefix):
        with self._lock:
            self.requested.append((url, prefix))
        return self.files.get(url)


def analyst_returning(**fields):
    analyst = MagicMock()
    analyst.extract_metadata.return_value = TenderMetadata(**{'name': '', **fields})
    return analyst


class TestFindTenderPageLink:

    def test_first_platform_link(self):
        links = ["https://a.es/x.pdf", "https://www.PLACSP.es/p/1", PAGE]
        assert find_tender_page_link(links) == "https://www.PLACSP.es/p/1"

    def test_none(self):
        assert find_tender_page_link(["https://a.es/x.pdf"]) == ""


class TestIntakeDraft:

    def test_apply_metadata_keeps_existing_urls(self):
        draft = IntakeDraft(admin_url="https://manual.es/pcap.pdf")
        draft.apply_metadata(TenderMetadata(name="X", admin_url="https://llm.es/pcap.pdf",
                                            tech_url="https://llm.es/ppt.pdf"))
        assert draft.name == "X"
        assert draft.admin_url == "https://manual.es/pcap.pdf"
        assert draft.tech_url == "https://llm.es/ppt.pdf"

    def test_empty_metadata_changes_nothing(self):
        draft = IntakeDraft(name="Manual", budget="1 €")
        draft.apply_metadata(TenderMetadata.empty())
        assert draft.name == "Manual"
        assert draft.budget == "1 €"

    def test_to_record(self):
        record = IntakeDraft(name="X", admin_file=_file("PCAP.pdf")).to_record()
        assert record.status.value == "PENDING"
        assert record.admin_file.name == "PCAP.pdf"


class TestPopulateFromSummary:

    def test_probing_fills_both_slots(self):
        links = ["https://docs.es/1", "https://docs.es/2", PAGE]
        downloader = FakeDownloader({links[0]: _file("PCAP.pdf"), links[1]: _file("PPT.pdf")})
        scraper = MagicMock()
        analyst = analyst_returning(name="Servicio de soporte", budget="150.000 €")

        draft = TenderIntake(analyst, downloader=downloader, scraper=scraper).populate_from_summary(
            _summary(links))

        assert draft.name == "Servicio de soporte"
        assert draft.admin_file.name == "PCAP.pdf"
        assert draft.tech_file.name == "PPT.pdf"
        assert draft.tender_page_url == PAGE
        assert sorted(draft.discovered_links) == sorted(links)
        scraper.assert_not_called()
        assert draft.log[0] == "> Starting analysis engine..."
        assert draft.log[-1] == "> Done."

    def test_llm_page_url_preferred(self):
        analyst = analyst_returning(name="X", tender_page_url="https://placsp.es/llm")
        scraper = MagicMock(return_value=ScrapedLinks())
        draft = TenderIntake(analyst, downloader=FakeDownloader({}), scraper=scraper).populate_from_summary(
            _summary([PAGE]))
        assert draft.tender_page_url == "https://placsp.es/llm"
        scraper.assert_called_once_with("https://placsp.es/llm")

    def test_scrape_fallback_downloads_missing_slot(self):
        downloader = FakeDownloader({
            "https://docs.es/1": _file("PCAP.pdf"),
            "https://contrataciondelestado.es/ppt.pdf": _file("doc_1.pdf"),
        })
        scraper = MagicMock(return_value=ScrapedLinks(
            admin_url="https://contrataciondelestado.es/pcap.pdf",
            tech_url="https://contrataciondelestado.es/ppt.pdf",
        ))
        intake = TenderIntake(analyst_returning(name="X"), downloader=downloader, scraper=scraper)

        draft = intake.populate_from_summary(_summary(["https://docs.es/1", PAGE]))

        assert draft.admin_file.name == "PCAP.pdf"
        assert draft.tech_file.name == "doc_1.pdf"
        assert draft.admin_url == "https://contrataciondelestado.es/pcap.pdf"
        assert ("https://contrataciondelestado.es/ppt.pdf", "PPT") in downloader.requested
        assert ("https://contrataciondelestado.es/pcap.pdf", "PCAP") not in downloader.requested

    def test_without_analyst(self):
        draft = TenderIntake(None, downloader=FakeDownloader({}), scraper=MagicMock(
            return_value=ScrapedLinks())).populate_from_summary(_summary([]))
        assert draft.name == ""
        assert draft.summary_file.name == "resumen.pdf"
        assert draft.tender_page_url == ""

    def test_extraction_errors_propagate(self):
        analyst = MagicMock()
        analyst.extract_metadata.side_effect = ServiceCallError("down")
        intake = TenderIntake(analyst, downloader=FakeDownloader({}), scraper=MagicMock())
        with pytest.raises(ServiceCallError):
            intake.populate_from_summary(_summary([]))

    def test_log_callback(self):
        messages = []
        TenderIntake(None, downloader=FakeDownloader({}), scraper=MagicMock(),
                     on_log=messages.append).populate_from_summary(_summary([]))
        assert "> PDF scanned: 0 links" in messages


class TestScanPage:

    def test_blocked_when_urls_found_but_downloads_fail(self):
        scraper = MagicMock(return_value=ScrapedLinks(admin_url="https://p.es/pcap.pdf"))
        draft = TenderIntake(downloader=FakeDownloader({}), scraper=scraper).scan_page(PAGE)
        assert draft.admin_url == "https://p.es/pcap.pdf"
        assert draft.admin_file is None
        assert draft.warning == BLOCKED_MESSAGE

    def test_nothing_found(self):
        draft = TenderIntake(downloader=FakeDownloader({}),
                             scraper=MagicMock(return_value=ScrapedLinks())).scan_page(PAGE)
        assert draft.warning == NOT_FOUND_MESSAGE
        assert draft.tender_page_url == PAGE

    def test_downloads_into_existing_draft(self):
        downloader = FakeDownloader({"https://p.es/ppt.pdf": _file("PPT.pdf")})
        scraper = MagicMock(return_value=ScrapedLinks(tech_url="https://p.es/ppt.pdf"))
        draft = IntakeDraft(name="X", admin_file=_file("PCAP.pdf"))

        result = TenderIntake(downloader=downloader, scraper=scraper).scan_page(PAGE, draft)

        assert result is draft
        assert draft.tech_file.name == "PPT.pdf"
        assert draft.warning == ""
        assert draft.log[-1] == "> Scan finished."

    def test_existing_files_are_not_replaced(self):
        downloader = FakeDownloader({})
        scraper = MagicMock(return_value=ScrapedLinks(admin_url="https://p.es/a.pdf",
                                                      tech_url="https://p.es/b.pdf"))
        draft = IntakeDraft(admin_file=_file("PCAP.pdf"), tech_file=_file("PPT.pdf"))

        TenderIntake(downloader=downloader, scraper=scraper).scan_page(PAGE, draft)

        assert downloader.requested == []
        assert draft.warning == ""
        assert draft.admin_url == "https://p.es/a.pdf"
