"""Pytest configuration for pdcm-validator tests.

This file is automatically loaded by pytest and sets up test fixtures
and configuration that are shared across all test modules.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from io import BytesIO
from typing import Any

import pandas as pd
import pytest
import xlwt
from dotenv import load_dotenv

from pdcm_validator.dictionary.models import Dictionary
from pdcm_validator.dictionary.service import DictionarySnapshot

# Load .env file so tests can reach a local Lectern when running integration tests
load_dotenv()

DICTIONARY_NAME = "CancerModels_Dictionary"
DICTIONARY_VERSION = "1.0"


def dictionary_document() -> dict[str, Any]:
    """A small dictionary with a patient, a sample and a model schema."""
    return {
        "name": DICTIONARY_NAME,
        "version": DICTIONARY_VERSION,
        "schemas": [
            {
                "name": "patient",
                "fields": [
                    {
                        "name": "patient_id",
                        "valueType": "string",
                        "meta": {"format": "ALPHANUMERIC", "field_weight": 10, "weight_for_model_type": "both"},
                        "restrictions": {"required": True, "regex": "^[a-zA-Z0-9_.-]+$"},
                    },
                    {
                        "name": "sex",
                        "valueType": "string",
                        "meta": {"format": "TEXT", "field_weight": 5, "weight_for_model_type": "both"},
                        "restrictions": {"codeList": ["Male", "Female", "Not provided", "Not collected"]},
                    },
                    {
                        "name": "age",
                        "valueType": "integer",
                        "meta": {"format": "NUMERIC"},
                        "restrictions": {"range": {"min": 0, "max": 120}},
                    },
                ],
                "restrictions": {"uniqueKey": ["patient_id"]},
            },
            {
                "name": "patient_sample",
                "fields": [
                    {
                        "name": "patient_id",
                        "meta": {"format": "ALPHANUMERIC"},
                        "restrictions": {"required": True},
                    },
                    {
                        "name": "sample_id",
                        "meta": {"format": "ALPHANUMERIC"},
                        "restrictions": {"required": True, "unique": True},
                    },
                    {
                        "name": "model_id",
                        "meta": {"format": "ALPHANUMERIC"},
                        "restrictions": {"required": True},
                    },
                    {
                        "name": "tumour_type",
                        "meta": {"format": "TEXT", "field_weight": 5, "weight_for_model_type": "pdx"},
                    },
                ],
                "restrictions": {"uniqueKey": ["patient_id", "sample_id"]},
            },
            {
                "name": "cell_model",
                "fields": [
                    {"name": "model_id", "meta": {"format": "ALPHANUMERIC"}, "restrictions": {"required": True}},
                    {
                        "name": "culture_method",
                        "meta": {"format": "TEXT", "field_weight": 5, "weight_for_model_type": "invitro"},
                    },
                ],
            },
        ],
    }


@pytest.fixture
def dictionary_doc() -> dict[str, Any]:
    return dictionary_document()


@pytest.fixture
def dictionary_file(tmp_path, dictionary_doc: dict[str, Any]):
    path = tmp_path / "dictionary.json"
    path.write_text(json.dumps(dictionary_doc), encoding="utf-8")
    return path


@pytest.fixture
def dictionary() -> Dictionary:
    return Dictionary.model_validate(dictionary_document())


@pytest.fixture
def snapshot(dictionary: Dictionary) -> DictionarySnapshot:
    return DictionarySnapshot(dictionary=dictionary, name=DICTIONARY_NAME, version=DICTIONARY_VERSION)


def build_workbook(sheets: dict[str, list[dict[str, Any]]]) -> bytes:
    """Write sheets of row dicts to xlsx bytes, keeping sheet order."""
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()


@pytest.fixture
def make_workbook() -> Callable[[dict[str, list[dict[str, Any]]]], bytes]:
    return build_workbook


def build_xls_workbook(
    sheets: dict[str, list[list[Any]]],
    styles: dict[tuple[str, int, int], str] | None = None,
) -> bytes:
    """Write sheets of cell lines to legacy .xls bytes.

    ``styles`` maps (sheet, row, column) to a number format for that cell.
    """
    styles = styles or {}
    workbook = xlwt.Workbook()
    for sheet_name, lines in sheets.items():
        sheet = workbook.add_sheet(sheet_name)
        for r, line in enumerate(lines):
            for c, value in enumerate(line):
                if value is None:
                    continue
                number_format = styles.get((sheet_name, r, c))
                if number_format is None:
                    sheet.write(r, c, value)
                else:
                    sheet.write(r, c, value, xlwt.easyxf(num_format_str=number_format))
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_xls_workbook() -> Callable[..., bytes]:
    return build_xls_workbook
