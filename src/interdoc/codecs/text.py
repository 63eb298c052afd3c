"""Plain text codec: one paragraph per line."""

from __future__ import annotations

from typing import TYPE_CHECKING

from interdoc.codecs.base import Codec, decode_text, normalize_newlines
from interdoc.document.models import Document, Paragraph, Run

if TYPE_CHECKING:
    from interdoc.config.models import InterdocConfig

_LINE_ENDINGS = {"lf": "\n", "crlf": "\r\n"}


class PlainTextCodec(Codec):
    """Lines become unformatted paragraphs; blank lines become empty paragraphs.

    Formatting and heading styles are dropped on export.
    """

    name = "txt"
    extensions = frozenset({"txt", "text"})
    canonical_extension = "txt"

    def __init__(self, encoding: str = "utf-8", line_ending: str = "lf") -> None:
        if line_ending not in _LINE_ENDINGS:
            raise ValueError(f"Unknown line ending: {line_ending!r}")
        self.encoding = encoding
        self.newline = _LINE_ENDINGS[line_ending]

    @classmethod
    def from_config(cls, config: InterdocConfig) -> PlainTextCodec:
        return cls(encoding=config.text.encoding, line_ending=config.text.line_ending)

    def import_document(self, data: bytes) -> Document:
        text = normalize_newlines(decode_text(data, self.encoding))
        if not text:
            return Document()

        lines = text.split("\n")
        # A final newline terminates the last line rather than opening a new one.
        if lines[-1] == "":
            lines.pop()

        return Document(
            tuple(Paragraph((Run(line),) if line else ()) for line in lines)
        )

    def export_document(self, document: Document) -> bytes:
        out: list[str] = []
        for paragraph in document.iter_blocks():
            text = normalize_newlines(paragraph.text)
            out.append(text.replace("\n", self.newline) + self.newline)
        return "".join(out).encode(self.encoding, errors="replace")
