"""User-facing names and messages for schema validation error types."""

from __future__ import annotations

UNRECOGNIZED_FIELD = "UNRECOGNIZED_FIELD"

# Raw error type -> category shown to users
ERROR_TYPES: dict[str, str] = {
    "MISSING_REQUIRED_FIELD": "Missing required field",
    "INVALID_BY_REGEX": "Invalid format",
    "INVALID_ENUM_VALUE": "Value error",
    UNRECOGNIZED_FIELD: "Unrecognized field",
    "INVALID_BY_FOREIGN_KEY": "Foreign key violation",
    "INVALID_BY_UNIQUE_KEY": "Unique key violation",
    "INVALID_BY_UNIQUE": "Value must be unique",
}

# Category -> message replacing the validator's own message
ERROR_MESSAGES: dict[str, str] = {
    "Missing required field": "A required field is missing from the input data.",
    "Invalid format": "The field's value does not comply with the defined regular expression pattern.",
    "Value error": "The provided value/data does not match any of the allowed values.",
    "Unrecognized field": "The submitted data has a field which is not in the schema.",
}


def map_error_type(error_type: str) -> str:
    """Category for a raw error type; unknown types are returned unchanged."""
    return ERROR_TYPES.get(error_type, error_type)


def map_error_message(error_type: str, message: str) -> str:
    """Message for a raw error, falling back to the validator's message."""
    return ERROR_MESSAGES.get(map_error_type(error_type), message)
