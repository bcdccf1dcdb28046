"""Schema validators for the validation framework."""

from pdcm_validator.validation.validators.base import (
    FieldRule,
    RawValidationError,
    SchemaValidationResult,
    SchemaValidator,
)
from pdcm_validator.validation.validators.lectern import LecternSchemaValidator

__all__ = [
    "FieldRule",
    "LecternSchemaValidator",
    "RawValidationError",
    "SchemaValidationResult",
    "SchemaValidator",
]
