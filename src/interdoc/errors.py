"""Error taxonomy shared by codecs, the registry and the converter."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories reported in a failed ConversionResult."""

    invalid_filename = "invalid_filename"
    unsupported_format = "unsupported_format"
    malformed_input = "malformed_input"
    conversion_error = "conversion_error"


class InterdocError(Exception):
    """Base class for every error raised by interdoc."""

    kind: ErrorKind = ErrorKind.conversion_error


class InvalidFilenameError(InterdocError):
    """File name is missing or has no usable extension."""

    kind = ErrorKind.invalid_filename


class UnsupportedFormatError(InterdocError):
    """No codec is registered for a source extension or target format."""

    kind = ErrorKind.unsupported_format


class MalformedInputError(InterdocError):
    """Input bytes do not parse as the codec's format.

    Carries the position of the problem when the codec knows it: ``line`` and
    ``column`` are 1-based, ``offset`` is a 0-based byte offset.
    """

    kind = ErrorKind.malformed_input

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
        offset: int | None = None,
    ) -> None:
        self.line = line
        self.column = column
        self.offset = offset
        self.reason = message
        super().__init__(message + self._position())

    def _position(self) -> str:
        if self.line is not None and self.column is not None:
            return f" (line {self.line}, column {self.column})"
        if self.line is not None:
            return f" (line {self.line})"
        if self.offset is not None:
            return f" (byte offset {self.offset})"
        return ""


class ConversionError(InterdocError):
    """Unexpected fault inside a codec's import or export."""

    kind = ErrorKind.conversion_error

    def __init__(self, codec: str, operation: str, cause: Exception) -> None:
        self.codec = codec
        self.operation = operation
        super().__init__(f"{codec} {operation} failed: {cause}")
        self.__cause__ = cause


class CodecPluginError(InterdocError):
    """A codec plugin that is required could not be loaded."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"Codec plugin '{name}' could not be loaded: {reason}")
