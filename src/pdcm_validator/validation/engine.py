"""Validation engine orchestrating workbook validation.

This module provides the main entry points:
- ValidatorService.validate_excel_file(): Validate a whole workbook
- ValidatorService.validate_sheets(): Validate every sheet of a loaded workbook
- ValidatorService.process_sheet(): Validate a single sheet

Raw errors from the schema validator are translated here into
``ValidationError``: indices are moved to original sheet lines, error types
and messages are remapped, and ``info`` gets the field's declared format.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, BinaryIO

from pdcm_validator.dictionary.lookup import get_field_definition
from pdcm_validator.dictionary.models import Dictionary
from pdcm_validator.dictionary.service import DictionarySnapshot
from pdcm_validator.exceptions import AppError, BadRequestException
from pdcm_validator.validation.base import (
    ProcessedFile,
    SheetData,
    SheetValidationResult,
    ValidationError,
    ValidationReport,
    ValidationResultStatus,
)
from pdcm_validator.validation.loader import load_workbook
from pdcm_validator.validation.messages import UNRECOGNIZED_FIELD, map_error_message, map_error_type
from pdcm_validator.validation.reconciler import check_sheets_have_schemas
from pdcm_validator.validation.report import build_report
from pdcm_validator.validation.scoring import score_report
from pdcm_validator.validation.validators.base import RawValidationError, SchemaValidator
from pdcm_validator.validation.validators.lectern import LecternSchemaValidator

logger = logging.getLogger(__name__)

COMPOSITE_KEY_SEPARATOR = ","


def _raw_errors(result: Any) -> list[RawValidationError]:
    """Read the raw error list from a validator result (object or mapping)."""
    if isinstance(result, Mapping):
        errors = result.get("validationErrors", result.get("validation_errors", []))
    else:
        errors = getattr(result, "validation_errors", [])
    return [e if isinstance(e, RawValidationError) else RawValidationError.from_mapping(e) for e in errors or []]


def translate_error(
    raw: RawValidationError,
    schema_name: str,
    line_number_offset: int,
    dictionary: Dictionary,
) -> ValidationError:
    """Turn a raw validator error into the public error shape.

    Raises:
        ConfigurationException: If the error's field is not in the dictionary
    """
    info = dict(raw.info)
    if COMPOSITE_KEY_SEPARATOR not in raw.field_name and raw.error_type != UNRECOGNIZED_FIELD:
        field = get_field_definition(dictionary, schema_name, raw.field_name)
        if field.format is not None:
            info["format"] = field.format

    return ValidationError(
        error_type=map_error_type(raw.error_type),
        index=raw.index + line_number_offset,
        field_name=raw.field_name,
        info=info,
        message=map_error_message(raw.error_type, raw.message),
    )


class ValidatorService:
    """Validates workbooks against a dictionary.

    Example:
        >>> service = ValidatorService()
        >>> report = service.validate_excel_file(Path("submission.xlsx"), snapshot)
        >>> print(report.status)
    """

    def __init__(self, schema_validator: SchemaValidator | None = None, max_workers: int = 1):
        """Initialize the service.

        Args:
            schema_validator: Validator applied to each sheet (Lectern rules by default)
            max_workers: Sheets validated in parallel; 1 validates them one after another
        """
        self.schema_validator = schema_validator or LecternSchemaValidator()
        self.max_workers = max(1, max_workers)

    def process_sheet(self, sheet_name: str, sheet_data: SheetData, dictionary: Dictionary) -> SheetValidationResult:
        """Validate the rows of one sheet.

        The schema is the sheet name.

        Raises:
            BadRequestException: If the schema validator fails on this sheet
            ConfigurationException: If an error names a field missing from the dictionary
        """
        schema_name = sheet_name
        try:
            result = self.schema_validator.process_records(dictionary, schema_name, sheet_data.rows)
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Schema validator failed on sheet {sheet_name}: {e}")
            raise BadRequestException(str(e)) from e

        raw_errors = _raw_errors(result)
        status = ValidationResultStatus.INVALID if raw_errors else ValidationResultStatus.VALID
        errors = [translate_error(raw, schema_name, sheet_data.line_number_offset, dictionary) for raw in raw_errors]

        logger.info(f"Validated {sheet_name}: {len(sheet_data.rows)} rows, {len(errors)} errors")
        return SheetValidationResult(sheet_name=sheet_name, status=status, result=errors)

    def validate_sheets(self, processed_file: ProcessedFile, dictionary: Dictionary) -> list[SheetValidationResult]:
        """Validate every sheet; results follow workbook order."""
        items = list(processed_file.sheets.items())
        if self.max_workers == 1 or len(items) < 2:
            return [self.process_sheet(name, data, dictionary) for name, data in items]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self.process_sheet, name, data, dictionary) for name, data in items]
            return [future.result() for future in futures]

    def validate_processed_file(
        self,
        processed_file: ProcessedFile,
        snapshot: DictionarySnapshot,
        compute_score: bool = True,
    ) -> ValidationReport:
        """Reconcile, validate and score an already loaded workbook.

        Raises:
            BadRequestException: If a sheet has no schema or a validator fails
            ConfigurationException: If the dictionary lacks a referenced field
        """
        dictionary = snapshot.dictionary
        check_sheets_have_schemas(processed_file, dictionary)

        sheet_results = self.validate_sheets(processed_file, dictionary)
        report = build_report(processed_file.file_name, snapshot, sheet_results)

        if compute_score:
            report.model_score = score_report(report, dictionary, processed_file)

        logger.info(f"{processed_file.file_name}: {report.status.value} ({report.error_count} errors)")
        return report

    def validate_excel_file(
        self,
        source: bytes | str | Path | BinaryIO,
        snapshot: DictionarySnapshot,
        file_name: str | None = None,
        compute_score: bool = True,
    ) -> ValidationReport:
        """Read an Excel file and validate its content against the dictionary.

        Args:
            source: Workbook bytes, path or binary file object
            snapshot: Dictionary to validate against
            file_name: Name to report (defaults to the path's name)
            compute_score: Whether to compute model completeness scores

        Returns:
            The validation report

        Raises:
            WorkbookFormatError: If the file cannot be parsed as a workbook
            BadRequestException: For sheets without schema or validator failures
            ConfigurationException: If the dictionary lacks a referenced field
        """
        logger.info("Validating excel file")
        processed_file = load_workbook(source, file_name)
        return self.validate_processed_file(processed_file, snapshot, compute_score=compute_score)
