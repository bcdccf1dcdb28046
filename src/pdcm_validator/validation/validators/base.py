"""Contract between the validation engine and schema validators.

A schema validator receives every retained row of one sheet and returns raw
errors. Raw errors are an open record: validators may attach extra keys,
which the engine ignores.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from pdcm_validator.dictionary.models import Dictionary, FieldDefinition

_KNOWN_KEYS = {
    "errorType": "error_type",
    "error_type": "error_type",
    "index": "index",
    "fieldName": "field_name",
    "field_name": "field_name",
    "info": "info",
    "message": "message",
}


@dataclass
class RawValidationError:
    """An error as reported by a schema validator.

    Attributes:
        error_type: Validator error tag (e.g. "MISSING_REQUIRED_FIELD")
        index: Zero-based index of the row within the rows passed in
        field_name: Column name, or comma-joined column names for composite keys
        info: Validator-specific details
        message: Validator message
        extra: Any other keys the validator reported
    """

    error_type: str
    index: int
    field_name: str
    info: dict[str, Any] = field(default_factory=dict)
    message: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RawValidationError:
        """Build from a mapping using either camelCase or snake_case keys."""
        known: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in _KNOWN_KEYS:
                known[_KNOWN_KEYS[key]] = value
            else:
                extra[key] = value
        return cls(
            error_type=str(known.get("error_type", "")),
            index=int(known.get("index", 0)),
            field_name=str(known.get("field_name", "")),
            info=dict(known.get("info") or {}),
            message=str(known.get("message") or ""),
            extra=extra,
        )


@dataclass
class SchemaValidationResult:
    """Errors found in one batch of rows."""

    validation_errors: list[RawValidationError] = field(default_factory=list)


class SchemaValidator(Protocol):
    """Validates a batch of rows against one schema of a dictionary."""

    def process_records(
        self,
        dictionary: Dictionary,
        schema_name: str,
        rows: list[dict[str, Any]],
    ) -> SchemaValidationResult:
        """Validate ``rows`` against ``schema_name``; indices are relative to ``rows``."""
        ...


class FieldRule(ABC):
    """A check applied to every present value of a field.

    Subclasses implement ``applies_to`` and ``check``. ``check`` returns an
    error for a single value or None.
    """

    @property
    @abstractmethod
    def error_type(self) -> str:
        """Error tag reported by this rule."""

    @abstractmethod
    def applies_to(self, field: FieldDefinition) -> bool:
        """Return True if the field declares what this rule checks."""

    @abstractmethod
    def check(self, value: str, field: FieldDefinition, index: int) -> RawValidationError | None:
        """Check one value of ``field`` found in row ``index``."""
