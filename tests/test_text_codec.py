"""Tests for PlainTextCodec."""

from __future__ import annotations

import pytest

from interdoc.codecs.text import PlainTextCodec
from interdoc.config.models import InterdocConfig, TextCodecConfig
from interdoc.document.models import Document, Paragraph, ParagraphStyle, Run
from interdoc.errors import MalformedInputError


@pytest.fixture
def codec():
    return PlainTextCodec()


class TestImport:
    def test_lines_become_paragraphs(self, codec):
        doc = codec.import_document(b"Hello\nWorld")
        assert doc == Document((Paragraph((Run("Hello"),)), Paragraph((Run("World"),))))

    def test_blank_lines_preserved_as_empty_paragraphs(self, codec):
        doc = codec.import_document(b"line1\n\nline2")
        assert [p.runs for p in doc.paragraphs] == [(Run("line1"),), (), (Run("line2"),)]

    def test_trailing_newline_does_not_add_paragraph(self, codec):
        assert len(codec.import_document(b"a\nb\n").paragraphs) == 2

    def test_empty_input_is_empty_document(self, codec):
        assert codec.import_document(b"") == Document()

    def test_single_newline_is_one_empty_paragraph(self, codec):
        assert codec.import_document(b"\n") == Document((Paragraph(),))

    def test_crlf_and_cr_line_endings(self, codec):
        doc = codec.import_document(b"a\r\nb\rc")
        assert [p.text for p in doc.paragraphs] == ["a", "b", "c"]

    def test_utf8_bom_stripped(self, codec):
        doc = codec.import_document("\ufeffcafé".encode("utf-8"))
        assert doc.paragraphs[0].text == "café"

    def test_invalid_utf8_is_malformed(self, codec):
        with pytest.raises(MalformedInputError) as exc_info:
            codec.import_document(b"ok\n\xff\xfe")
        assert exc_info.value.offset == 3

    def test_configured_encoding(self):
        codec = PlainTextCodec(encoding="latin-1")
        assert codec.import_document(b"caf\xe9").paragraphs[0].text == "café"

    def test_whitespace_kept_verbatim(self, codec):
        assert codec.import_document(b"  a\tb  ").paragraphs[0].text == "  a\tb  "


class TestExport:
    def test_formatting_and_styles_dropped(self, codec):
        doc = Document(
            (
                Paragraph((Run("Title", bold=True),), ParagraphStyle.heading1),
                Paragraph((Run("x", italic=True), Run("y"))),
            )
        )
        assert codec.export_document(doc) == b"Title\nxy\n"

    def test_empty_document_exports_nothing(self, codec):
        assert codec.export_document(Document()) == b""

    def test_empty_paragraph_exports_blank_line(self, codec):
        assert codec.export_document(Document((Paragraph(),))) == b"\n"

    def test_crlf_line_ending(self):
        codec = PlainTextCodec(line_ending="crlf")
        doc = Document((Paragraph((Run("a\nb"),)), Paragraph((Run("c"),))))
        assert codec.export_document(doc) == b"a\r\nb\r\nc\r\n"

    def test_unencodable_chars_replaced(self):
        codec = PlainTextCodec(encoding="ascii")
        doc = Document((Paragraph((Run("café"),)),))
        assert codec.export_document(doc) == b"caf?\n"

    def test_unknown_line_ending_rejected(self):
        with pytest.raises(ValueError):
            PlainTextCodec(line_ending="cr")


class TestRoundTrip:
    def test_export_is_idempotent(self, codec, any_document):
        first = codec.export_document(any_document)
        assert codec.export_document(codec.import_document(first)) == first

    def test_unformatted_documents_round_trip(self, codec):
        doc = Document((Paragraph((Run("one"),)), Paragraph(), Paragraph((Run("two"),))))
        assert codec.import_document(codec.export_document(doc)) == doc


def test_from_config():
    config = InterdocConfig(text=TextCodecConfig(encoding="utf-16", line_ending="crlf"))
    codec = PlainTextCodec.from_config(config)
    assert codec.encoding == "utf-16"
    assert codec.newline == "\r\n"
