"""Checks that every sheet of a workbook has a schema in the dictionary.

Schemas without a sheet are fine: a submission does not have to cover every
schema of the dictionary.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pdcm_validator.dictionary.models import Dictionary
from pdcm_validator.exceptions import BadRequestException
from pdcm_validator.validation.base import ProcessedFile

logger = logging.getLogger(__name__)


def find_sheets_without_schema(sheet_names: Iterable[str], schema_names: Iterable[str]) -> list[str]:
    """Return the sheet names that are not schema names, sorted."""
    return sorted(set(sheet_names) - set(schema_names))


def check_sheets_have_schemas(processed_file: ProcessedFile, dictionary: Dictionary) -> None:
    """Reject a workbook containing sheets the dictionary does not describe.

    Raises:
        BadRequestException: Naming every sheet without a schema
    """
    missing = find_sheets_without_schema(processed_file.sheet_names, dictionary.schema_names)
    if missing:
        logger.warning(f"{processed_file.file_name}: sheets without schema: {missing}")
        raise BadRequestException(f"Sheets: [{', '.join(missing)}] not found in the dictionary")
