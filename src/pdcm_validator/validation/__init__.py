"""Workbook validation framework.

This package validates Excel workbooks against a data dictionary: every
sheet is checked against the schema of the same name and the errors are
collected into a report, optionally with a completeness score per model.

Main entry points:
    - ValidatorService.validate_excel_file(): Validate a workbook
    - load_workbook(): Read a workbook into sheets of rows
    - compute_model_scores(): Completeness percentage per model

Example:
    from pdcm_validator.validation import ValidatorService, print_validation_report

    report = ValidatorService().validate_excel_file(Path("submission.xlsx"), snapshot)
    print_validation_report(report)
"""

from pdcm_validator.validation.base import (
    ProcessedFile,
    SheetData,
    SheetValidationResult,
    ValidationError,
    ValidationReport,
    ValidationResultStatus,
)
from pdcm_validator.validation.engine import ValidatorService, translate_error
from pdcm_validator.validation.loader import is_comment_row, load_workbook, remove_comments
from pdcm_validator.validation.reconciler import check_sheets_have_schemas, find_sheets_without_schema
from pdcm_validator.validation.report import (
    build_report,
    export_validation_report,
    print_validation_report,
)
from pdcm_validator.validation.scoring import compute_model_scores, score_report

__all__ = [
    "ProcessedFile",
    "SheetData",
    "SheetValidationResult",
    "ValidationError",
    "ValidationReport",
    "ValidationResultStatus",
    "ValidatorService",
    "build_report",
    "check_sheets_have_schemas",
    "compute_model_scores",
    "export_validation_report",
    "find_sheets_without_schema",
    "is_comment_row",
    "load_workbook",
    "print_validation_report",
    "remove_comments",
    "score_report",
    "translate_error",
]
