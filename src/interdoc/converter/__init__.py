"""Conversion orchestration: codec resolution, import, export, rename."""

from interdoc.converter.converter import DocumentConverter, convert, split_extension
from interdoc.converter.models import (
    ConversionFailure,
    ConversionRequest,
    ConversionResult,
    ConversionStage,
    ConversionStatus,
)

__all__ = [
    "ConversionFailure",
    "ConversionRequest",
    "ConversionResult",
    "ConversionStage",
    "ConversionStatus",
    "DocumentConverter",
    "convert",
    "split_extension",
]
