"""Tests for the PyMuPDF-backed PdfCodec. Skipped without the pdf extra."""

from __future__ import annotations

import pytest

fitz = pytest.importorskip("fitz")

from interdoc.codecs.pdf import PdfCodec  # noqa: E402
from interdoc.config.models import InterdocConfig, PdfCodecConfig  # noqa: E402
from interdoc.document.models import Document, Paragraph, ParagraphStyle, Run  # noqa: E402
from interdoc.errors import MalformedInputError  # noqa: E402


@pytest.fixture
def codec():
    return PdfCodec()


def _sample() -> Document:
    return Document(
        (
            Paragraph((Run("Report"),), ParagraphStyle.heading1),
            Paragraph((Run("Some "), Run("bold", bold=True), Run(" text."))),
            Paragraph((Run("More body text."),)),
        )
    )


class TestExport:
    def test_produces_pdf(self, codec):
        data = codec.export_document(_sample())
        assert data.startswith(b"%PDF")

    def test_text_is_extractable(self, codec):
        with fitz.open(stream=codec.export_document(_sample()), filetype="pdf") as pdf:
            text = "".join(page.get_text() for page in pdf)
        assert "Report" in text
        assert "More body text." in text

    def test_empty_document(self, codec):
        with fitz.open(stream=codec.export_document(Document()), filetype="pdf") as pdf:
            assert pdf.page_count >= 1

    def test_every_document_exports(self, codec, any_document):
        assert codec.export_document(any_document).startswith(b"%PDF")

    def test_long_document_spans_pages(self):
        codec = PdfCodec(page_size="letter")
        doc = Document(tuple(Paragraph((Run(f"Paragraph {i}"),)) for i in range(200)))
        with fitz.open(stream=codec.export_document(doc), filetype="pdf") as pdf:
            assert pdf.page_count > 1


class TestImport:
    def test_text_and_heading_recovered(self, codec):
        doc = codec.import_document(codec.export_document(_sample()))
        texts = [p.text.strip() for p in doc.paragraphs]
        assert "Report" in texts
        assert "More body text." in texts
        heading = doc.paragraphs[texts.index("Report")]
        assert heading.style is ParagraphStyle.heading1

    def test_bold_recovered(self, codec):
        doc = codec.import_document(codec.export_document(_sample()))
        bold = [r.text for r in doc.iter_runs() if r.bold]
        assert any("bold" in text for text in bold)

    def test_not_a_pdf(self, codec):
        with pytest.raises(MalformedInputError):
            codec.import_document(b"definitely not a pdf")


def test_from_config():
    config = InterdocConfig(pdf=PdfCodecConfig(page_size="letter", margin=36, font_size=12))
    codec = PdfCodec.from_config(config)
    assert (codec.page_size, codec.margin, codec.font_size) == ("letter", 36, 12)
