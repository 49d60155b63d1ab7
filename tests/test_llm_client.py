"""Test the LiteLLM-backed analyst with a fake completion function."""
import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from tenderboard.documents import DocumentFile
from tenderboard.errors import ConfigurationError, ServiceCallError, ServiceResponseError
from tenderboard.services.llm_client import (
    TenderAnalyst,
    build_analysis_system_prompt,
    file_part,
    parse_json_text,
)
from tenderboard.services.schemas import AnalysisRequest, Decision
from tenderboard.services.settings import LLMSettings

SUMMARY = DocumentFile(name="resumen.pdf", content_type="application/pdf", content=b"%PDF-1.4")


def reply(text, usage=None):
    message = SimpleNamespace(content=text)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=usage)


def analyst_with(text, **settings):
    completion = MagicMock(return_value=reply(text))
    settings.setdefault('api_key', 'test-key')
    return TenderAnalyst(LLMSettings(**settings), completion=completion), completion


class TestSettings:

    def test_model_id(self):
        assert LLMSettings().model_id == "gemini/gemini-2.5-flash"
        assert LLMSettings(provider="openai", model="gpt-4o").model_id == "gpt-4o"

    def test_from_env(self, monkeypatch):
        monkeypatch.delenv('LLM_API_KEY', raising=False)
        monkeypatch.setenv('API_KEY', 'fallback-key')
        monkeypatch.setenv('LLM_MODEL', 'gemini-2.5-pro')
        monkeypatch.setenv('LLM_TIMEOUT', '30')
        settings = LLMSettings.from_env()
        assert settings.api_key == 'fallback-key'
        assert settings.model == 'gemini-2.5-pro'
        assert settings.timeout == 30

    def test_require_api_key(self):
        with pytest.raises(ConfigurationError):
            LLMSettings(api_key="").require_api_key()


class TestHelpers:

    def test_file_part_is_data_url(self):
        part = file_part(SUMMARY)
        assert part["type"] == "file"
        assert part["file"]["file_data"] == "data:application/pdf;base64,JVBERi0xLjQ="

    def test_parse_json_text_strips_fences(self):
        assert parse_json_text('```json\n{"name": "X"}\n```') == {"name": "X"}
        assert parse_json_text('{"a": 1}') == {"a": 1}

    @pytest.mark.parametrize("text", ["", "   ", None, "not json", "[1, 2]"])
    def test_parse_json_text_rejects(self, text):
        with pytest.raises(ServiceResponseError):
            parse_json_text(text)

    def test_rules_embedded_in_system_prompt(self):
        prompt = build_analysis_system_prompt("Descartar si piden ISO 27001")
        assert "Descartar si piden ISO 27001" in prompt
        assert '"decision": "KEEP | DISCARD | REVIEW"' in prompt


class TestTenderAnalyst:

    def test_missing_key_checked_before_call(self):
        completion = MagicMock()
        analyst = TenderAnalyst(LLMSettings(api_key=""), completion=completion)
        with pytest.raises(ConfigurationError):
            analyst.extract_metadata(SUMMARY)
        completion.assert_not_called()

    def test_key_not_needed_to_construct(self):
        TenderAnalyst(LLMSettings(api_key=""))

    def test_extract_metadata(self):
        payload = {"name": "Servicio de soporte", "budget": "150.000 €",
                   "scoringSystem": "Precio 60%", "tenderPageUrl": "https://contrataciondelestado.es/x",
                   "adminUrl": "", "techUrl": ""}
        analyst, completion = analyst_with(json.dumps(payload))

        meta = analyst.extract_metadata(SUMMARY)

        assert meta.name == "Servicio de soporte"
        assert meta.tender_page_url == "https://contrataciondelestado.es/x"
        kwargs = completion.call_args.kwargs
        assert kwargs["model"] == "gemini/gemini-2.5-flash"
        assert kwargs["api_key"] == "test-key"
        assert kwargs["response_format"] == {"type": "json_object"}
        content = kwargs["messages"][0]["content"]
        assert content[0]["type"] == "file"

    def test_empty_metadata_reply(self):
        analyst, _ = analyst_with("")
        assert analyst.extract_metadata(SUMMARY).name == ""

    def test_service_error_wrapped(self):
        completion = MagicMock(side_effect=RuntimeError("quota exceeded"))
        analyst = TenderAnalyst(LLMSettings(api_key="k"), completion=completion)
        with pytest.raises(ServiceCallError):
            analyst.extract_metadata(SUMMARY)

    def test_unexpected_response_structure(self):
        completion = MagicMock(return_value=SimpleNamespace(choices=[], usage=None))
        analyst = TenderAnalyst(LLMSettings(api_key="k"), completion=completion)
        with pytest.raises(ServiceResponseError):
            analyst.extract_metadata(SUMMARY)

    def test_analyze(self):
        analyst, completion = analyst_with(json.dumps({"decision": "DISCARD",
                                                       "summaryReasoning": "Exige ENS alto"}))
        admin = DocumentFile(name="PCAP.pdf", content_type="application/pdf", content=b"a")
        request = AnalysisRequest(name="Soporte", rules="Sin ENS", summary_file=SUMMARY, admin_file=admin)

        result = analyst.analyze(request)

        assert result.decision == Decision.DISCARD
        messages = completion.call_args.kwargs["messages"]
        assert messages[0]["role"] == "system"
        assert "Sin ENS" in messages[0]["content"]
        texts = [p["text"] for p in messages[1]["content"] if p["type"] == "text"]
        assert texts[1:] == ["--- DOCUMENTO 1: HOJA RESUMEN ---",
                             "--- DOCUMENTO 2: PLIEGO ADMINISTRATIVO (PCAP) ---"]
        assert sum(1 for p in messages[1]["content"] if p["type"] == "file") == 2

    def test_analyze_invalid_decision(self):
        analyst, _ = analyst_with('{"decision": "PERHAPS"}')
        with pytest.raises(ServiceResponseError):
            analyst.analyze(AnalysisRequest(name="X", rules=""))
