"""Codec lookup by source extension and target format."""

from interdoc.registry.registry import (
    BUILTIN_CODECS,
    FORMAT_CODECS,
    FORMAT_EXTENSIONS,
    CodecRegistry,
    Format,
    build_registry,
    default_registry,
)

__all__ = [
    "BUILTIN_CODECS",
    "CodecRegistry",
    "FORMAT_CODECS",
    "FORMAT_EXTENSIONS",
    "Format",
    "build_registry",
    "default_registry",
]
