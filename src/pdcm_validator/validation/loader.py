"""Spreadsheet loader.

Reads every sheet of an Excel workbook (``.xlsx`` through openpyxl, ``.xls``
through xlrd) into a list of row mappings, drops comment rows and records how
many were dropped so error indices can be mapped back to lines of the
original sheet.

Cells are read in their displayed form: a date formatted ``yyyy-mm-dd`` is
the text ``2023-01-05``, a number formatted ``0.00`` is ``12.50``, the way a
curator sees the sheet in Excel.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO

import openpyxl
import pandas as pd
import xlrd

from pdcm_validator.exceptions import WorkbookFormatError
from pdcm_validator.validation.base import ProcessedFile, SheetData

logger = logging.getLogger(__name__)

# Column that carries inline directives; a value starting with "#" marks a comment row
COMMENT_COLUMN = "Field"
COMMENT_PREFIX = "#"

# Header line + move from zero-based index to 1-based line numbers
HEADER_LINE_OFFSET = 2

XLSX_SIGNATURE = b"PK\x03\x04"
XLS_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

GENERAL_FORMAT = "General"

# openpyxl reports built-in format 14 (locale short date) as "mm-dd-yy"
BUILTIN_DISPLAY_FORMATS = {"mm-dd-yy": "m/d/yy"}

_FORMAT_DECORATION = re.compile(r"\[[^\]]*\]|_.|\*.")
_FIXED_FORMAT = re.compile(r"(#,##)?0(?:\.(0+))?")
_DATE_TOKEN = re.compile(r'yyyy|yy|mmmmm|mmmm|mmm|mm|m|dddd|ddd|dd|d|hh|h|ss|s|am/pm|a/p|"[^"]*"|\\.|.', re.IGNORECASE)
_HOUR_TOKENS = {"h", "hh"}
_SECOND_TOKENS = {"s", "ss"}


def is_comment_row(row: dict[str, Any]) -> bool:
    """Return True if ``row`` is a comment row."""
    value = row.get(COMMENT_COLUMN)
    return isinstance(value, str) and value.startswith(COMMENT_PREFIX)


def remove_comments(rows: list[dict[str, Any]]) -> tuple[list[dict[str, Any]], int]:
    """Drop comment rows.

    Returns:
        Tuple of (retained rows in original order, number of rows removed)
    """
    retained: list[dict[str, Any]] = []
    removed = 0
    for row in rows:
        if is_comment_row(row):
            removed += 1
        else:
            retained.append(row)
    return retained, removed


def display_value(value: Any, number_format: str | None = GENERAL_FORMAT) -> str | None:
    """Render a cell value as Excel displays it.

    Args:
        value: Cell value as returned by openpyxl or xlrd
        number_format: The cell's number format code

    Returns:
        Displayed text, or None for an empty cell
    """
    if value is None:
        return None
    fmt = _first_section(number_format or GENERAL_FORMAT)
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime | date | time):
        return _format_datetime(value, BUILTIN_DISPLAY_FORMATS.get(fmt, fmt))
    if isinstance(value, int | float):
        return _format_number(value, fmt)
    return str(value)


def _first_section(number_format: str) -> str:
    # Only the positive-number section applies to the values we render
    return _FORMAT_DECORATION.sub("", number_format.split(";")[0]).strip()


def _format_general(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    return f"{value:.15g}"


def _format_number(value: int | float, fmt: str) -> str:
    percent = fmt.endswith("%")
    match = _FIXED_FORMAT.fullmatch(fmt.rstrip("%"))
    if match is None:
        return _format_general(value)
    number = value * 100 if percent else value
    separator = "," if match.group(1) else ""
    decimals = len(match.group(2) or "")
    text = f"{number:{separator}.{decimals}f}"
    return f"{text}%" if percent else text


def _format_datetime(value: datetime | date | time, fmt: str) -> str:
    if isinstance(value, time):
        value = datetime.combine(date(1899, 12, 31), value)
    elif not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)

    tokens = _DATE_TOKEN.findall(fmt)
    if not any(_is_date_part(t) for t in tokens):
        return value.date().isoformat() if value.time() == time() else value.isoformat(sep=" ")

    twelve_hour = any(t.lower() in ("am/pm", "a/p") for t in tokens)
    parts: list[str] = []
    for i, token in enumerate(tokens):
        parts.append(_render_token(token, i, tokens, value, twelve_hour))
    return "".join(parts)


def _is_date_part(token: str) -> bool:
    return token[0].lower() in "ymdhs"


def _is_minute(index: int, tokens: list[str]) -> bool:
    """An ``m``/``mm`` right after an hour or right before a second means minutes."""
    for token in reversed(tokens[:index]):
        if _is_date_part(token):
            if token.lower() in _HOUR_TOKENS:
                return True
            break
    for token in tokens[index + 1 :]:
        if _is_date_part(token):
            return token.lower() in _SECOND_TOKENS
    return False


def _render_token(token: str, index: int, tokens: list[str], value: datetime, twelve_hour: bool) -> str:
    lower = token.lower()
    hour = (value.hour % 12 or 12) if twelve_hour else value.hour
    if lower == "yyyy":
        return f"{value.year:04d}"
    if lower == "yy":
        return f"{value.year % 100:02d}"
    if lower in ("m", "mm") and _is_minute(index, tokens):
        return f"{value.minute:02d}" if lower == "mm" else str(value.minute)
    if lower == "mmmmm":
        return value.strftime("%B")[0]
    if lower == "mmmm":
        return value.strftime("%B")
    if lower == "mmm":
        return value.strftime("%b")
    if lower == "mm":
        return f"{value.month:02d}"
    if lower == "m":
        return str(value.month)
    if lower == "dddd":
        return value.strftime("%A")
    if lower == "ddd":
        return value.strftime("%a")
    if lower == "dd":
        return f"{value.day:02d}"
    if lower == "d":
        return str(value.day)
    if lower == "hh":
        return f"{hour:02d}"
    if lower == "h":
        return str(hour)
    if lower == "ss":
        return f"{value.second:02d}"
    if lower == "s":
        return str(value.second)
    if lower == "am/pm":
        return "AM" if value.hour < 12 else "PM"
    if lower == "a/p":
        return "A" if value.hour < 12 else "P"
    if token.startswith('"'):
        return token.strip('"')
    if token.startswith("\\"):
        return token[1:]
    return token


def _read_xlsx(content: bytes) -> dict[str, list[list[str | None]]]:
    workbook = openpyxl.load_workbook(BytesIO(content), data_only=True)
    try:
        grids: dict[str, list[list[str | None]]] = {}
        for sheet in workbook.worksheets:
            grids[sheet.title] = [
                [display_value(cell.value, cell.number_format) for cell in row] for row in sheet.iter_rows()
            ]
        return grids
    finally:
        workbook.close()


def _xls_cell_value(cell: xlrd.sheet.Cell, book: xlrd.book.Book) -> str | None:
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if cell.ctype == xlrd.XL_CELL_TEXT:
        return cell.value
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return display_value(bool(cell.value))
    if cell.ctype == xlrd.XL_CELL_ERROR:
        return xlrd.error_text_from_code.get(cell.value, "#ERR")

    format_key = book.xf_list[cell.xf_index].format_key
    number_format = book.format_map[format_key].format_str if format_key in book.format_map else GENERAL_FORMAT
    if cell.ctype == xlrd.XL_CELL_DATE:
        return display_value(xlrd.xldate_as_datetime(cell.value, book.datemode), number_format)
    return display_value(cell.value, number_format)


def _read_xls(content: bytes) -> dict[str, list[list[str | None]]]:
    book = xlrd.open_workbook(file_contents=content, formatting_info=True)
    try:
        grids: dict[str, list[list[str | None]]] = {}
        for sheet in book.sheets():
            grids[sheet.name] = [
                [_xls_cell_value(sheet.cell(r, c), book) for c in range(sheet.ncols)] for r in range(sheet.nrows)
            ]
        return grids
    finally:
        book.release_resources()


def _header_names(header: list[str | None], width: int) -> list[str]:
    """Column names from the header line; blank and repeated names get pandas-style names."""
    names: list[str] = []
    seen: dict[str, int] = {}
    for i in range(width):
        name = header[i] if i < len(header) else None
        name = name.strip() if name and name.strip() else f"Unnamed: {i}"
        if name in seen:
            seen[name] += 1
            name = f"{name}.{seen[name]}"
        else:
            seen[name] = 0
        names.append(name)
    return names


def _grid_to_frame(grid: list[list[str | None]]) -> pd.DataFrame:
    """Frame of a sheet's displayed values, first line as header."""
    if not grid:
        return pd.DataFrame()
    width = max(len(line) for line in grid)
    columns = _header_names(grid[0], width)
    data = [line + [None] * (width - len(line)) for line in grid[1:]]
    return pd.DataFrame(data, columns=columns, dtype=object)


def _frame_to_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert a sheet frame to row mappings, leaving out empty cells."""
    rows: list[dict[str, Any]] = []
    for record in df.to_dict(orient="records"):
        row = {str(col): value for col, value in record.items() if not _is_blank(value)}
        if row:
            rows.append(row)
    return rows


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return isinstance(value, str) and value == ""


def build_sheet_data(rows: list[dict[str, Any]]) -> SheetData:
    """Build the sheet data for already-parsed rows."""
    retained, removed = remove_comments(rows)
    return SheetData(rows=retained, line_number_offset=removed + HEADER_LINE_OFFSET)


def _read_content(source: bytes | str | Path | BinaryIO) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, str | Path):
        return Path(source).read_bytes()
    return source.read()


def load_workbook(source: bytes | str | Path | BinaryIO, file_name: str | None = None) -> ProcessedFile:
    """Read an Excel workbook into a ``ProcessedFile``.

    Args:
        source: Workbook bytes, a path, or a binary file object
        file_name: Name to report; defaults to the path's name when ``source`` is a path

    Returns:
        ProcessedFile with one SheetData per sheet, in workbook order

    Raises:
        WorkbookFormatError: If ``source`` cannot be parsed as an xlsx or xls workbook
    """
    if file_name is None:
        file_name = Path(source).name if isinstance(source, str | Path) else "workbook.xlsx"

    try:
        content = _read_content(source)
        if content.startswith(XLSX_SIGNATURE):
            grids = _read_xlsx(content)
        elif content.startswith(XLS_SIGNATURE):
            grids = _read_xls(content)
        else:
            raise ValueError("not an xlsx or xls file")
    except Exception as e:
        logger.error(f"Could not read workbook {file_name}: {e}")
        raise WorkbookFormatError(f"File {file_name} could not be read as an Excel workbook: {e}") from e

    sheets: dict[str, SheetData] = {}
    for sheet_name, grid in grids.items():
        sheets[str(sheet_name)] = build_sheet_data(_frame_to_rows(_grid_to_frame(grid)))

    logger.info(f"Loaded {file_name}: {len(sheets)} sheets")
    return ProcessedFile(file_name=file_name, sheets=sheets)
