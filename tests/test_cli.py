"""Test CLI commands with storage and lookups patched out."""
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from tenderboard.board.records import new_tender
from tenderboard.cli.main import cli
from tenderboard.discovery.prober import PROBE_BATCH_SIZE
from tenderboard.documents import DocumentFile


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def record():
    return new_tender(
        "Servicio de soporte",
        admin_file=DocumentFile("PCAP.pdf", "application/pdf", b"%PDF-admin"),
        tech_file=DocumentFile("PPT.pdf", "application/pdf", b"%PDF-tech"),
    )


class TestShowCommand:

    def test_save_dir_writes_stored_documents(self, runner, record, tmp_path):
        with patch('tenderboard.cli.board.resolve_tender', return_value=record) as resolve:
            result = runner.invoke(cli, ['show', record.id[:8], '--save-dir', str(tmp_path / 'docs')])

        assert result.exit_code == 0, result.output
        resolve.assert_called_once_with(record.id[:8], with_files=True)
        assert (tmp_path / 'docs' / 'PCAP.pdf').read_bytes() == b"%PDF-admin"
        assert (tmp_path / 'docs' / 'PPT.pdf').read_bytes() == b"%PDF-tech"

    def test_without_save_dir_skips_file_contents(self, runner, record):
        with patch('tenderboard.cli.board.resolve_tender', return_value=record) as resolve:
            result = runner.invoke(cli, ['show', record.id])

        assert result.exit_code == 0, result.output
        resolve.assert_called_once_with(record.id, with_files=False)
        assert "Servicio de soporte" in result.output

    def test_save_dir_with_no_documents(self, runner, tmp_path):
        bare = new_tender("Sin documentos")
        with patch('tenderboard.cli.board.resolve_tender', return_value=bare):
            result = runner.invoke(cli, ['show', bare.id, '--save-dir', str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "No stored documents" in result.output
        assert list(tmp_path.iterdir()) == []


class TestAttachCommand:

    def test_uploads_into_slot(self, runner, tmp_path):
        target = new_tender("Servicio de soporte")
        local = tmp_path / "hoja_resumen.pdf"
        local.write_bytes(b"%PDF-summary")

        with patch('tenderboard.cli.board.resolve_tender', return_value=target), \
                patch('tenderboard.cli.board.save_tender') as save:
            result = runner.invoke(cli, ['attach', target.id, 'summary', str(local)])

        assert result.exit_code == 0, result.output
        save.assert_called_once_with(target)
        assert target.summary_file.name == "hoja_resumen.pdf"
        assert target.summary_file.content == b"%PDF-summary"
        assert target.summary_file.content_type == "application/pdf"

    def test_unknown_slot_rejected(self, runner, tmp_path):
        local = tmp_path / "x.pdf"
        local.write_bytes(b"%PDF")
        with patch('tenderboard.cli.board.save_tender') as save:
            result = runner.invoke(cli, ['attach', 'abc', 'budget', str(local)])
        assert result.exit_code == 2
        save.assert_not_called()


class TestRulesCommand:

    def test_show_prompt_embeds_saved_rules(self, runner):
        with patch('tenderboard.cli.board.load_rules', return_value="Sin ISO 27001"):
            result = runner.invoke(cli, ['rules', '--show-prompt'])

        assert result.exit_code == 0, result.output
        assert "Sin ISO 27001" in result.output
        assert "DECISIÓN FINAL:" in result.output

    def test_plain_rules(self, runner):
        with patch('tenderboard.cli.board.load_rules', return_value="Sin ISO 27001"):
            result = runner.invoke(cli, ['rules'])
        assert "Sin ISO 27001" in result.output
        assert "DECISIÓN FINAL:" not in result.output

    def test_set_rules(self, runner):
        with patch('tenderboard.cli.board.save_rules') as save:
            result = runner.invoke(cli, ['rules', '--set', '  Descartar si piden ENS  '])
        assert result.exit_code == 0, result.output
        save.assert_called_once_with("Descartar si piden ENS")


class TestProbeCommand:

    def test_default_batch_size_comes_from_prober(self, runner, tmp_path):
        summary = tmp_path / "hoja.pdf"
        summary.write_bytes(b"%PDF")

        with patch('tenderboard.cli.intake.extract_links_from_pdf', return_value=["https://a.es/1.pdf"]), \
                patch('tenderboard.cli.intake.probe_links_in_batches') as probe:
            probe.return_value.probed = 1
            probe.return_value.total = 1
            probe.return_value.admin = None
            probe.return_value.tech = None
            result = runner.invoke(cli, ['probe', str(summary)])

        assert result.exit_code == 0, result.output
        assert probe.call_args.kwargs['batch_size'] == PROBE_BATCH_SIZE == 4

    def test_zero_batch_size_rejected(self, runner, tmp_path):
        summary = tmp_path / "hoja.pdf"
        summary.write_bytes(b"%PDF")
        with patch('tenderboard.cli.intake.probe_links_in_batches') as probe:
            result = runner.invoke(cli, ['probe', str(summary), '--batch-size', '0'])
        assert result.exit_code == 2
        probe.assert_not_called()
