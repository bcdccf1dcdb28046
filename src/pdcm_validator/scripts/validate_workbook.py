#!/usr/bin/env python3
"""Validate an Excel workbook against a PDCM data dictionary.

The dictionary is fetched from a Lectern service (``--lectern-url`` or the
LECTERN_URL environment variable) or read from a local JSON file
(``--dictionary-file``).

Usage:
    uv run pdcm-validate submission.xlsx
    uv run pdcm-validate submission.xlsx --dictionary-file dictionary.json --verbose
    uv run pdcm-validate submission.xlsx --output report.json --no-score

Exit status: 0 when the report was produced (valid or invalid), 2 for a bad
submission (wrong file type, sheets without schema), 1 for critical errors
such as an unreachable dictionary service or a file that is not a workbook.
"""

from __future__ import annotations

import json
import logging
import mimetypes
import sys
from pathlib import Path

import click

from pdcm_validator.clients.lectern import LecternClient
from pdcm_validator.config import Settings
from pdcm_validator.dictionary.service import DictionaryService, DictionarySnapshot, FileDictionaryProvider
from pdcm_validator.exceptions import error_payload, is_operational
from pdcm_validator.request import validate_upload
from pdcm_validator.validation import (
    ValidatorService,
    export_validation_report,
    print_validation_report,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

EXIT_CRITICAL_ERROR = 1
EXIT_BAD_REQUEST = 2

# mimetypes does not know .xlsx on every platform
mimetypes.add_type("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", ".xlsx")
mimetypes.add_type("application/vnd.ms-excel", ".xls")


def _fail(error: Exception) -> None:
    """Report ``error`` on stderr and stop with the matching exit status."""
    payload = error_payload(error)
    click.echo(json.dumps(payload), err=True)
    if is_operational(error):
        sys.exit(EXIT_BAD_REQUEST)
    logger.critical("Application encountered a critical error. Exiting")
    sys.exit(EXIT_CRITICAL_ERROR)


def _fetch_snapshot(url: str, timeout: float, name: str, version: str) -> DictionarySnapshot:
    """Load the dictionary from Lectern, closing the client session afterwards."""
    with LecternClient(url, timeout=timeout) as client:
        return DictionaryService(client).load_validation_dictionary(name, version)


@click.command()
@click.argument("workbook", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--lectern-url", default=None, help="Lectern service URL (default: LECTERN_URL)")
@click.option(
    "--dictionary-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the dictionary from a JSON file instead of Lectern",
)
@click.option("--dictionary-name", default=None, help="Dictionary name (default: DICTIONARY_NAME)")
@click.option("--dictionary-version", default=None, help="Dictionary version (default: DICTIONARY_VERSION)")
@click.option("--no-score", is_flag=True, help="Skip model completeness scores")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Export report to JSON file",
)
@click.option("--workers", type=click.IntRange(min=1), default=1, help="Sheets validated in parallel")
@click.option("--verbose", "-v", is_flag=True, help="List every error")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(
    workbook: Path,
    lectern_url: str | None,
    dictionary_file: Path | None,
    dictionary_name: str | None,
    dictionary_version: str | None,
    no_score: bool,
    output: Path | None,
    workers: int,
    verbose: bool,
    debug: bool,
) -> None:
    """Validate WORKBOOK against the configured data dictionary."""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)

    settings = Settings.from_env()
    name = dictionary_name or settings.dictionary_name
    version = dictionary_version or settings.dictionary_version

    try:
        if dictionary_file is not None:
            snapshot = DictionaryService(FileDictionaryProvider(dictionary_file)).load_validation_dictionary(name, version)
        else:
            snapshot = _fetch_snapshot(lectern_url or settings.lectern_url, settings.http_timeout, name, version)

        content_type, _ = mimetypes.guess_type(workbook.name)
        content = validate_upload(workbook.name, content_type, workbook.read_bytes())

        service = ValidatorService(max_workers=workers)
        report = service.validate_excel_file(content, snapshot, file_name=workbook.name, compute_score=not no_score)
    except Exception as e:
        _fail(e)
        return

    print_validation_report(report, verbose=verbose)

    if output is not None:
        export_validation_report(report, output)
        click.echo(f"\nExported report to {output}")


if __name__ == "__main__":
    main()
