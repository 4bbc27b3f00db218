"""Tests for document loading."""

from unittest.mock import MagicMock, patch

from finchat.client.cli_helpers import encode_image_file, format_search_result
from finchat.client.loaders import extract_text_from_pdf, load_document_text
from finchat.service.database import RetrievedChunk


class TestLoadDocumentText:
    def test_text_file(self, tmp_path):
        doc = tmp_path / "rates.md"
        doc.write_text("ငွေလဲနှုန်း reference rate", encoding="utf-8")
        assert load_document_text(doc) == "ငွေလဲနှုန်း reference rate"

    @patch("finchat.client.loaders.fitz.open")
    def test_pdf_pages_concatenated(self, mock_open, tmp_path):
        pages = [MagicMock(), MagicMock()]
        pages[0].get_text.return_value = "Page one. "
        pages[1].get_text.return_value = "Page two."
        doc = MagicMock()
        doc.__iter__.return_value = iter(pages)
        mock_open.return_value = doc

        text = extract_text_from_pdf(tmp_path / "report.pdf")

        assert text == "Page one. Page two."
        doc.close.assert_called_once()

    @patch("finchat.client.loaders.extract_text_from_pdf", return_value="pdf text")
    def test_pdf_suffix_dispatch(self, mock_extract, tmp_path):
        pdf = tmp_path / "REPORT.PDF"
        assert load_document_text(pdf) == "pdf text"
        mock_extract.assert_called_once_with(pdf)


class TestCliHelpers:
    def test_format_search_result_truncates(self):
        chunk = RetrievedChunk(
            text="x" * 300, score=0.87654, metadata={"source": "cbm.txt", "chunk_index": 2}
        )
        output = format_search_result(1, chunk)

        assert output.startswith("1. [cbm.txt - chunk #2] (score: 0.8765)")
        assert "x" * 200 + "..." in output

    def test_format_search_result_without_metadata(self):
        output = format_search_result(3, RetrievedChunk(text="short", score=0.5))
        assert "[unknown - chunk #?]" in output

    def test_encode_image_file(self, tmp_path):
        image = tmp_path / "chart.png"
        image.write_bytes(b"\x89PNG\r\n\x1a\n")
        assert encode_image_file(image) == "data:image/png;base64,iVBORw0KGgo="

    def test_encode_unknown_type_defaults_to_jpeg(self, tmp_path):
        image = tmp_path / "chart"
        image.write_bytes(b"\xff\xd8\xff")
        assert encode_image_file(image).startswith("data:image/jpeg;base64,")
