"""Schema validator implementing the Lectern dictionary restrictions.

Checks, per batch of rows:
- Columns that the schema does not declare
- Required fields that are missing or blank
- Value type (integer, number, boolean)
- Regular expression, code list and numeric range restrictions
- ``unique`` fields and the schema's composite ``uniqueKey``

Array fields (``isArray``) hold comma-separated values; every item is checked.
Foreign keys relate rows of different sheets and are not checked here.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Any

from pdcm_validator.dictionary.models import Dictionary, FieldDefinition, SchemaDefinition, ValueType
from pdcm_validator.validation.validators.base import FieldRule, RawValidationError, SchemaValidationResult

logger = logging.getLogger(__name__)

ARRAY_SEPARATOR = ","
BOOLEAN_VALUES = {"true", "false"}


def _as_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else str(value)


def is_missing(value: Any) -> bool:
    """Return True for absent or blank values."""
    return value is None or _as_text(value) == ""


def split_values(value: Any, field: FieldDefinition) -> list[str]:
    """Split an array value into items; scalar fields give a single item."""
    text = _as_text(value)
    if not field.is_array:
        return [text]
    return [item.strip() for item in text.split(ARRAY_SEPARATOR) if item.strip()]


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


class ValueTypeRule(FieldRule):
    """Values of integer, number and boolean fields must convert to that type."""

    error_type = "INVALID_FIELD_VALUE_TYPE"

    def applies_to(self, field: FieldDefinition) -> bool:
        return field.value_type != ValueType.STRING

    def check(self, value: str, field: FieldDefinition, index: int) -> RawValidationError | None:
        if _matches_type(value, field.value_type):
            return None
        return RawValidationError(
            error_type=self.error_type,
            index=index,
            field_name=field.name,
            info={"value": [value], "valueType": field.value_type.value},
            message=f"The value is not permissible for this field, it must be of type {field.value_type.value}.",
        )


def _matches_type(value: str, value_type: ValueType) -> bool:
    if value_type == ValueType.BOOLEAN:
        return value.lower() in BOOLEAN_VALUES
    try:
        number = float(value)
    except ValueError:
        return False
    if value_type == ValueType.INTEGER:
        return number.is_integer()
    return True


class RegexRule(FieldRule):
    """Values must match the field's regular expression."""

    error_type = "INVALID_BY_REGEX"

    def applies_to(self, field: FieldDefinition) -> bool:
        return bool(field.restrictions.regex)

    def check(self, value: str, field: FieldDefinition, index: int) -> RawValidationError | None:
        regex = field.restrictions.regex or ""
        if _compile(regex).search(value):
            return None
        examples = field.meta.get("examples")
        message = f'The value is not a permissible for this field, it must meet the regular expression: "{regex}".'
        if examples:
            message += f" Examples: {examples}"
        return RawValidationError(
            error_type=self.error_type,
            index=index,
            field_name=field.name,
            info={"value": [value], "regex": regex, "examples": examples},
            message=message,
        )


class CodeListRule(FieldRule):
    """Values must be one of the field's permitted values (case-insensitive)."""

    error_type = "INVALID_ENUM_VALUE"

    def applies_to(self, field: FieldDefinition) -> bool:
        return bool(field.restrictions.code_list)

    def check(self, value: str, field: FieldDefinition, index: int) -> RawValidationError | None:
        allowed = {_as_text(code).lower() for code in field.restrictions.code_list or []}
        if value.lower() in allowed:
            return None
        return RawValidationError(
            error_type=self.error_type,
            index=index,
            field_name=field.name,
            info={"value": [value]},
            message="The value is not permissible for this field.",
        )


class RangeRule(FieldRule):
    """Numeric values must fall within the field's range."""

    error_type = "INVALID_BY_RANGE"

    def applies_to(self, field: FieldDefinition) -> bool:
        return bool(field.restrictions.range)

    def check(self, value: str, field: FieldDefinition, index: int) -> RawValidationError | None:
        try:
            number = float(value)
        except ValueError:
            # Reported by ValueTypeRule
            return None
        bounds = field.restrictions.range or {}
        problem = _range_problem(number, bounds)
        if problem is None:
            return None
        return RawValidationError(
            error_type=self.error_type,
            index=index,
            field_name=field.name,
            info={"value": [value], **bounds},
            message=f"Value is out of permissible range, it must be {problem}.",
        )


def _range_problem(number: float, bounds: dict[str, float]) -> str | None:
    if "min" in bounds and number < bounds["min"]:
        return f">= {bounds['min']}"
    if "max" in bounds and number > bounds["max"]:
        return f"<= {bounds['max']}"
    if "exclusiveMin" in bounds and number <= bounds["exclusiveMin"]:
        return f"> {bounds['exclusiveMin']}"
    if "exclusiveMax" in bounds and number >= bounds["exclusiveMax"]:
        return f"< {bounds['exclusiveMax']}"
    return None


DEFAULT_RULES: list[FieldRule] = [ValueTypeRule(), RegexRule(), CodeListRule(), RangeRule()]


class LecternSchemaValidator:
    """Validates rows against a schema's field restrictions.

    Example:
        >>> validator = LecternSchemaValidator()
        >>> result = validator.process_records(dictionary, "patient", rows)
        >>> for error in result.validation_errors:
        ...     print(error.index, error.error_type, error.field_name)
    """

    def __init__(self, rules: list[FieldRule] | None = None):
        self.rules = rules if rules is not None else DEFAULT_RULES

    def process_records(
        self,
        dictionary: Dictionary,
        schema_name: str,
        rows: list[dict[str, Any]],
    ) -> SchemaValidationResult:
        """Validate all ``rows`` of one sheet.

        Raises:
            ValueError: If the dictionary has no schema called ``schema_name``
        """
        schema = dictionary.get_schema(schema_name)
        if schema is None:
            raise ValueError(f"Schema {schema_name} not found in dictionary {dictionary.name}")

        errors: list[RawValidationError] = []
        for index, row in enumerate(rows):
            errors.extend(self.validate_row(schema, row, index))
        errors.extend(check_unique_fields(schema, rows))
        errors.extend(check_unique_key(schema, rows))

        logger.debug(f"{schema_name}: {len(rows)} rows, {len(errors)} errors")
        return SchemaValidationResult(validation_errors=errors)

    def validate_row(self, schema: SchemaDefinition, row: dict[str, Any], index: int) -> list[RawValidationError]:
        """Errors confined to a single row."""
        errors: list[RawValidationError] = []
        declared = set(schema.field_names)

        for column in row:
            if column not in declared:
                errors.append(
                    RawValidationError(
                        error_type="UNRECOGNIZED_FIELD",
                        index=index,
                        field_name=column,
                        info={},
                        message=f"{column} is not an allowed field for this schema.",
                    )
                )

        for field in schema.fields:
            value = row.get(field.name)
            if is_missing(value):
                if field.restrictions.required:
                    errors.append(
                        RawValidationError(
                            error_type="MISSING_REQUIRED_FIELD",
                            index=index,
                            field_name=field.name,
                            info={},
                            message=f"{field.name} is a required field.",
                        )
                    )
                continue

            for rule in self.rules:
                if not rule.applies_to(field):
                    continue
                for item in split_values(value, field):
                    error = rule.check(item, field, index)
                    if error is not None:
                        errors.append(error)
        return errors


def check_unique_fields(schema: SchemaDefinition, rows: list[dict[str, Any]]) -> list[RawValidationError]:
    """Report every repeated value of a ``unique`` field after its first occurrence."""
    errors: list[RawValidationError] = []
    for field in schema.fields:
        if not field.restrictions.unique:
            continue
        seen: set[str] = set()
        for index, row in enumerate(rows):
            value = row.get(field.name)
            if is_missing(value):
                continue
            text = _as_text(value)
            if text in seen:
                errors.append(
                    RawValidationError(
                        error_type="INVALID_BY_UNIQUE",
                        index=index,
                        field_name=field.name,
                        info={"value": [text]},
                        message=f"Value for {field.name} must be unique.",
                    )
                )
            seen.add(text)
    return errors


def check_unique_key(schema: SchemaDefinition, rows: list[dict[str, Any]]) -> list[RawValidationError]:
    """Report every repeated combination of the schema's ``uniqueKey`` fields."""
    key_fields = schema.restrictions.unique_key
    if not key_fields:
        return []

    key_name = ", ".join(key_fields)
    errors: list[RawValidationError] = []
    seen: set[tuple[str, ...]] = set()
    for index, row in enumerate(rows):
        key = tuple("" if is_missing(row.get(f)) else _as_text(row.get(f)) for f in key_fields)
        if key in seen:
            errors.append(
                RawValidationError(
                    error_type="INVALID_BY_UNIQUE_KEY",
                    index=index,
                    field_name=key_name,
                    info={"value": dict(zip(key_fields, key, strict=True)), "uniqueKeyFields": key_fields},
                    message=f"Key {key_name} must be unique.",
                )
            )
        seen.add(key)
    return errors
