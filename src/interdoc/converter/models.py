"""Request and result types for the conversion orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, model_validator

from interdoc.errors import ErrorKind
from interdoc.registry.registry import Format


class ConversionStage(str, Enum):
    idle = "idle"
    validating = "validating"
    reading = "reading"
    converting = "converting"
    writing = "writing"
    done = "done"
    failed = "failed"


class ConversionStatus(str, Enum):
    converted = "converted"
    skipped = "skipped"
    failed = "failed"


@dataclass(frozen=True)
class ConversionRequest:
    """One conversion call's input. Validated by the converter, not here."""

    file_name: str
    data: bytes
    target: Format | str


class ConversionFailure(BaseModel):
    kind: ErrorKind
    message: str
    stage: ConversionStage


class ConversionResult(BaseModel):
    """Outcome of a conversion: converted bytes, a skip, or a typed failure.

    Only a converted result carries bytes; a skip or failure never carries
    partial output.
    """

    status: ConversionStatus
    file_name: str | None = None
    data: bytes | None = None
    reason: str | None = None
    failure: ConversionFailure | None = None

    @model_validator(mode="after")
    def check_variant(self) -> ConversionResult:
        if self.status is ConversionStatus.converted:
            if not self.file_name or self.data is None:
                raise ValueError("converted result needs file_name and data")
            if self.failure is not None:
                raise ValueError("converted result cannot carry a failure")
        elif self.status is ConversionStatus.skipped:
            if self.data is not None or self.failure is not None:
                raise ValueError("skipped result carries neither data nor failure")
        else:
            if self.failure is None:
                raise ValueError("failed result needs a failure")
            if self.data is not None:
                raise ValueError("failed result cannot carry data")
        return self

    @classmethod
    def converted(cls, file_name: str, data: bytes) -> ConversionResult:
        return cls(status=ConversionStatus.converted, file_name=file_name, data=data)

    @classmethod
    def skipped(cls, reason: str) -> ConversionResult:
        return cls(status=ConversionStatus.skipped, reason=reason)

    @classmethod
    def failed(cls, kind: ErrorKind, message: str, stage: ConversionStage) -> ConversionResult:
        return cls(
            status=ConversionStatus.failed,
            failure=ConversionFailure(kind=kind, message=message, stage=stage),
        )

    @property
    def is_converted(self) -> bool:
        return self.status is ConversionStatus.converted

    @property
    def is_skipped(self) -> bool:
        return self.status is ConversionStatus.skipped

    @property
    def is_failed(self) -> bool:
        return self.status is ConversionStatus.failed
