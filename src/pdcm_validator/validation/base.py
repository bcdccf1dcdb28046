"""Core data structures of the validation pipeline.

The loader produces a ``ProcessedFile``; the engine turns it into one
``SheetValidationResult`` per sheet; the report builder wraps those into a
``ValidationReport``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ValidationResultStatus(str, Enum):
    """Status of a sheet or of a whole report."""

    VALID = "valid"
    INVALID = "invalid"
    NOT_PROCESSED = "not_processed"


@dataclass(frozen=True)
class SheetData:
    """Rows of one sheet with comment rows removed.

    Attributes:
        rows: Retained rows, each mapping column name to raw cell value
        line_number_offset: Added to a zero-based row index to get the line in
            the original sheet (1 header line + 1-based lines + removed comments)
    """

    rows: list[dict[str, Any]]
    line_number_offset: int


@dataclass(frozen=True)
class ProcessedFile:
    """A loaded workbook.

    Attributes:
        file_name: Original file name
        sheets: Sheet name to sheet data, in workbook order
    """

    file_name: str
    sheets: dict[str, SheetData]

    @property
    def sheet_names(self) -> list[str]:
        return list(self.sheets)


@dataclass(frozen=True)
class ValidationError:
    """A validation error in the shape exposed to users.

    Attributes:
        error_type: Error category (e.g. "Missing required field")
        index: Line in the original sheet
        field_name: Column (or comma-joined columns for composite keys)
        info: Diagnostic details, including the field's declared ``format``
        message: Human-readable description
    """

    error_type: str
    index: int
    field_name: str
    info: dict[str, Any]
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "errorType": self.error_type,
            "index": self.index,
            "fieldName": self.field_name,
            "info": self.info,
            "message": self.message,
        }


@dataclass
class SheetValidationResult:
    """Validation outcome of one sheet."""

    sheet_name: str
    status: ValidationResultStatus
    result: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.status == ValidationResultStatus.VALID

    def to_dict(self) -> dict[str, Any]:
        return {
            "sheetName": self.sheet_name,
            "status": self.status.value,
            "result": [e.to_dict() for e in self.result],
        }


@dataclass
class ValidationReport:
    """Validation results for a whole workbook.

    Attributes:
        date: When the report was built
        file_name: Original file name
        status: ``invalid`` if any sheet is invalid, else ``valid``
        dictionary_name: Name of the dictionary used
        dictionary_version: Version of the dictionary used
        sheets_validation_results: One result per sheet, in workbook order
        model_score: Completeness percentage per model id, if computed
    """

    date: datetime
    file_name: str
    status: ValidationResultStatus
    dictionary_name: str
    dictionary_version: str
    sheets_validation_results: list[SheetValidationResult] = field(default_factory=list)
    model_score: dict[str, float] | None = None

    @property
    def is_valid(self) -> bool:
        return self.status == ValidationResultStatus.VALID

    @property
    def error_count(self) -> int:
        """Total number of errors across sheets."""
        return sum(len(r.result) for r in self.sheets_validation_results)

    def get_sheet_result(self, sheet_name: str) -> SheetValidationResult | None:
        for result in self.sheets_validation_results:
            if result.sheet_name == sheet_name:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-serializable report shape."""
        data: dict[str, Any] = {
            "date": self.date.isoformat(),
            "fileName": self.file_name,
            "status": self.status.value,
            "dictionaryName": self.dictionary_name,
            "dictionaryVersion": self.dictionary_version,
            "sheetsValidationResults": [r.to_dict() for r in self.sheets_validation_results],
        }
        if self.model_score is not None:
            data["modelScore"] = self.model_score
        return data
