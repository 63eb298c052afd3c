"""PDF codec backed by PyMuPDF.

Installed with the ``pdf`` extra and registered through the
``interdoc.codecs`` entry point group, so the core never imports it directly.
Export lays the HTML rendering of the document out over as many pages as it
needs. Import reads text blocks back: each block becomes a paragraph, bold and
italic come from the span font flags, and blocks set larger than the body text
become headings ranked by size.
"""

from __future__ import annotations

import io
import logging
from collections import Counter
from typing import TYPE_CHECKING

import fitz  # PyMuPDF

from interdoc.codecs.base import Codec, RunBuilder
from interdoc.codecs.html import HtmlCodec
from interdoc.document.models import Document, Paragraph, ParagraphStyle
from interdoc.errors import MalformedInputError

if TYPE_CHECKING:
    from interdoc.config.models import InterdocConfig

logger = logging.getLogger(__name__)

_FLAG_ITALIC = 2
_FLAG_BOLD = 16
# A block counts as a heading when its text is this much larger than the body.
_HEADING_RATIO = 1.15

_Span = tuple[str, bool, bool, float]


class PdfCodec(Codec):
    """Lossy PDF codec: text, emphasis and heading levels survive, underline does not."""

    name = "pdf"
    extensions = frozenset({"pdf"})
    canonical_extension = "pdf"

    def __init__(self, page_size: str = "a4", margin: float = 56.0, font_size: float = 11.0) -> None:
        self.page_size = page_size
        self.margin = margin
        self.font_size = font_size

    @classmethod
    def from_config(cls, config: InterdocConfig) -> PdfCodec:
        return cls(page_size=config.pdf.page_size, margin=config.pdf.margin, font_size=config.pdf.font_size)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_document(self, document: Document) -> bytes:
        css = (
            f"body {{font-family: sans-serif; font-size: {self.font_size}pt;}}"
            " p {margin: 0 0 6pt 0;}"
        )
        story = fitz.Story(html=HtmlCodec().render(document), user_css=css)
        mediabox = fitz.paper_rect(self.page_size)
        where = mediabox + (self.margin, self.margin, -self.margin, -self.margin)

        buffer = io.BytesIO()
        writer = fitz.DocumentWriter(buffer)
        more = True
        while more:
            device = writer.begin_page(mediabox)
            more, _ = story.place(where)
            story.draw(device)
            writer.end_page()
        writer.close()
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def import_document(self, data: bytes) -> Document:
        try:
            pdf = fitz.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            raise MalformedInputError(f"Not a readable PDF: {e}") from e

        try:
            if pdf.needs_pass:
                raise MalformedInputError("PDF is encrypted")
            blocks = [spans for page in pdf for spans in self._page_blocks(page)]
        finally:
            pdf.close()

        logger.debug("Read %d text blocks from PDF", len(blocks))
        return Document(tuple(self._to_paragraphs(blocks)))

    @staticmethod
    def _page_blocks(page) -> list[list[_Span]]:
        blocks: list[list[_Span]] = []
        for block in page.get_text("dict")["blocks"]:
            if block.get("type") != 0:
                continue
            spans: list[_Span] = []
            for line in block["lines"]:
                line_spans = [
                    (s["text"], bool(s["flags"] & _FLAG_BOLD), bool(s["flags"] & _FLAG_ITALIC), s["size"])
                    for s in line["spans"]
                    if s["text"]
                ]
                if not line_spans:
                    continue
                # Lines wrapped by the layout rejoin with a single space.
                if spans and not spans[-1][0].endswith((" ", "-")):
                    last = spans[-1]
                    spans.append((" ", last[1], last[2], last[3]))
                spans.extend(line_spans)
            if any(text.strip() for text, *_ in spans):
                blocks.append(spans)
        return blocks

    @staticmethod
    def _to_paragraphs(blocks: list[list[_Span]]) -> list[Paragraph]:
        sizes: Counter[float] = Counter()
        for spans in blocks:
            for text, _, _, size in spans:
                sizes[round(size, 1)] += len(text)
        if not sizes:
            return []
        body_size = sizes.most_common(1)[0][0]

        def block_size(spans: list[_Span]) -> float:
            return min(round(size, 1) for text, _, _, size in spans if text.strip())

        heading_sizes = sorted(
            {block_size(s) for s in blocks if block_size(s) > body_size * _HEADING_RATIO},
            reverse=True,
        )

        paragraphs: list[Paragraph] = []
        for spans in blocks:
            size = block_size(spans)
            style = ParagraphStyle.normal
            if size in heading_sizes:
                style = ParagraphStyle.heading(min(heading_sizes.index(size) + 1, 6))
            # Headings render bold by default; that weight belongs to the style.
            all_bold = all(bold for text, bold, _, _ in spans if text.strip())
            builder = RunBuilder()
            for text, bold, italic, _ in spans:
                builder.add(text, bold and not (style is not ParagraphStyle.normal and all_bold), italic)
            paragraphs.append(Paragraph(builder.take(), style))
        return paragraphs
