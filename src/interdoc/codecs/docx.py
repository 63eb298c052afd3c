"""DOCX codec backed by python-docx."""

from __future__ import annotations

import io
import re
import zipfile

import docx
from docx.opc.exceptions import PackageNotFoundError
from lxml import etree

from interdoc.codecs.base import Codec, RunBuilder, normalize_newlines, normalize_runs
from interdoc.document.models import Document, Paragraph, ParagraphStyle
from interdoc.errors import MalformedInputError

_HEADING_RE = re.compile(r"heading\s*([1-6])$", re.IGNORECASE)
# Characters XML 1.0 cannot carry; tab, newline and carriage return are allowed.
_XML_INVALID_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")
_SURROGATE_RE = re.compile(r"[\ud800-\udfff]")


def _xml_safe(text: str) -> str:
    """Drop control characters and replace lone surrogates with U+FFFD."""
    return _SURROGATE_RE.sub("\ufffd", _XML_INVALID_RE.sub("", text))


def _paragraph_style(paragraph) -> ParagraphStyle:
    style = paragraph.style
    # Walk the base-style chain so custom styles derived from headings still count.
    while style is not None:
        m = _HEADING_RE.match(style.name or "")
        if m:
            return ParagraphStyle.heading(int(m.group(1)))
        style = style.base_style
    return ParagraphStyle.normal


class DocxCodec(Codec):
    """Word documents: heading styles, bold, italic, underline and line breaks.

    Tables, images, fields and section layout are not read. Run properties
    inherited from character styles are not resolved; only direct formatting
    on the run counts.
    """

    name = "docx"
    extensions = frozenset({"docx"})
    canonical_extension = "docx"

    def import_document(self, data: bytes) -> Document:
        try:
            source = docx.Document(io.BytesIO(data))
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError, etree.XMLSyntaxError) as e:
            raise MalformedInputError(f"Not a readable DOCX package: {e}") from e

        paragraphs: list[Paragraph] = []
        for para in source.paragraphs:
            builder = RunBuilder()
            for run in para.runs:
                builder.add(
                    normalize_newlines(run.text),
                    bool(run.bold),
                    bool(run.italic),
                    bool(run.underline),
                )
            paragraphs.append(Paragraph(builder.take(), _paragraph_style(para)))
        return Document(tuple(paragraphs))

    def export_document(self, document: Document) -> bytes:
        out = docx.Document()
        for paragraph in document.iter_blocks():
            level = paragraph.style.heading_level
            para = out.add_paragraph(style=f"Heading {level}" if level else None)
            for run in normalize_runs(paragraph.runs):
                r = para.add_run(_xml_safe(normalize_newlines(run.text)))
                # Leave unset flags as None so the paragraph style decides.
                if run.bold:
                    r.bold = True
                if run.italic:
                    r.italic = True
                if run.underline:
                    r.underline = True

        buffer = io.BytesIO()
        out.save(buffer)
        return buffer.getvalue()
