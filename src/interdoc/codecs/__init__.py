"""Format codecs. The PDF codec is loaded as a plugin and not imported here."""

from interdoc.codecs.base import Codec, normalize_runs
from interdoc.codecs.docx import DocxCodec
from interdoc.codecs.html import HtmlCodec
from interdoc.codecs.markup import MarkupCodec
from interdoc.codecs.rtf import RtfCodec
from interdoc.codecs.text import PlainTextCodec

__all__ = [
    "Codec",
    "DocxCodec",
    "HtmlCodec",
    "MarkupCodec",
    "PlainTextCodec",
    "RtfCodec",
    "normalize_runs",
]
