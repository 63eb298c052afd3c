"""Interdoc - a format-neutral document model with pluggable import/export codecs."""

from interdoc.codecs import Codec, DocxCodec, HtmlCodec, MarkupCodec, PlainTextCodec, RtfCodec
from interdoc.config import InterdocConfig, load_config
from interdoc.converter import ConversionResult, ConversionStatus, DocumentConverter, convert
from interdoc.document import Document, Paragraph, ParagraphStyle, Run
from interdoc.errors import (
    ConversionError,
    ErrorKind,
    InterdocError,
    InvalidFilenameError,
    MalformedInputError,
    UnsupportedFormatError,
)
from interdoc.registry import CodecRegistry, Format, build_registry, default_registry

__version__ = "0.1.0"

__all__ = [
    "Codec",
    "CodecRegistry",
    "ConversionError",
    "ConversionResult",
    "ConversionStatus",
    "Document",
    "DocumentConverter",
    "DocxCodec",
    "ErrorKind",
    "Format",
    "HtmlCodec",
    "InterdocConfig",
    "InterdocError",
    "InvalidFilenameError",
    "MalformedInputError",
    "MarkupCodec",
    "Paragraph",
    "ParagraphStyle",
    "PlainTextCodec",
    "RtfCodec",
    "Run",
    "UnsupportedFormatError",
    "build_registry",
    "convert",
    "default_registry",
    "load_config",
]
