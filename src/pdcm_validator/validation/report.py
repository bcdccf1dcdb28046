"""Building, printing and exporting validation reports."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from pdcm_validator.dictionary.service import DictionarySnapshot
from pdcm_validator.validation.base import SheetValidationResult, ValidationReport, ValidationResultStatus

logger = logging.getLogger(__name__)


def unified_status(sheet_results: list[SheetValidationResult]) -> ValidationResultStatus:
    """``invalid`` if any sheet is not valid, otherwise ``valid``."""
    if any(r.status != ValidationResultStatus.VALID for r in sheet_results):
        return ValidationResultStatus.INVALID
    return ValidationResultStatus.VALID


def build_report(
    file_name: str,
    snapshot: DictionarySnapshot,
    sheet_results: list[SheetValidationResult],
    model_score: dict[str, float] | None = None,
) -> ValidationReport:
    """Assemble the report for a validated workbook."""
    return ValidationReport(
        date=datetime.now(timezone.utc),
        file_name=file_name,
        status=unified_status(sheet_results),
        dictionary_name=snapshot.name,
        dictionary_version=snapshot.version,
        sheets_validation_results=list(sheet_results),
        model_score=model_score,
    )


def print_validation_report(report: ValidationReport, verbose: bool = False) -> None:
    """Print human-readable validation report.

    Args:
        report: ValidationReport to print
        verbose: If True, list every error instead of counts per sheet
    """
    print("\nVALIDATION REPORT")
    print("=" * 60)
    print(f"File:       {report.file_name}")
    print(f"Dictionary: {report.dictionary_name} {report.dictionary_version}")
    print(f"Status:     {report.status.value.upper()}")
    print(f"Errors:     {report.error_count}")
    print()

    for sheet in report.sheets_validation_results:
        print(f"{sheet.sheet_name}: {sheet.status.value} ({len(sheet.result)} errors)")
        if verbose:
            for error in sheet.result:
                print(f"  line {error.index} [{error.error_type}] {error.field_name}: {error.message}")

    if report.model_score:
        print()
        print("Completeness by model:")
        for model_id, score in sorted(report.model_score.items()):
            print(f"  {model_id}: {score}")


def export_validation_report(report: ValidationReport, path: Path) -> None:
    """Export validation report to JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2, default=str)

    logger.info(f"Exported validation report to {path}")
