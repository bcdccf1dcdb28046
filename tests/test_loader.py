"""Tests for the spreadsheet loader."""

from datetime import date, datetime, time
from io import BytesIO

import openpyxl
import pytest

from pdcm_validator.exceptions import WorkbookFormatError, error_payload, is_operational
from pdcm_validator.validation.loader import (
    build_sheet_data,
    display_value,
    is_comment_row,
    load_workbook,
    remove_comments,
)


def _formatted_xlsx(cells: list[tuple[str, object, str]]) -> bytes:
    """One-sheet xlsx with a header line and one data line of formatted cells."""
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "patient"
    for column, (header, value, number_format) in enumerate(cells, start=1):
        sheet.cell(row=1, column=column, value=header)
        cell = sheet.cell(row=2, column=column, value=value)
        cell.number_format = number_format
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestCommentRows:
    """Tests for comment row detection and removal."""

    def test_field_starting_with_hash_is_comment(self) -> None:
        """Test that a Field value starting with # marks a comment row."""
        assert is_comment_row({"Field": "# Comment 1", "id": "example id"})

    def test_row_without_field_column_is_not_comment(self) -> None:
        """Test that # in another column does not make a comment row."""
        assert not is_comment_row({"id": "#not-a-comment"})

    def test_field_not_starting_with_hash_is_not_comment(self) -> None:
        """Test that # later in the Field value does not make a comment row."""
        assert not is_comment_row({"Field": "value # trailing"})

    def test_remove_comments_keeps_order_and_counts(self) -> None:
        """Test that removal keeps row order and counts removed rows."""
        rows = [{"Field": "# a"}, {"id": "1"}, {"Field": "# b"}, {"id": "2"}]
        retained, removed = remove_comments(rows)

        assert retained == [{"id": "1"}, {"id": "2"}]
        assert removed == 2

    def test_only_comments_gives_empty_rows_and_offset_4(self) -> None:
        """Test that a sheet of two comment rows has no rows and offset 4."""
        sheet = build_sheet_data([{"Field": "# Comment 1"}, {"Field": "# Comment 2"}])

        assert sheet.rows == []
        assert sheet.line_number_offset == 4

    def test_one_comment_gives_offset_3(self) -> None:
        """Test that one comment row gives offset 3."""
        sheet = build_sheet_data([{"Field": "# Comment 1", "id": "example id"}, {"id": "id1"}])

        assert sheet.rows == [{"id": "id1"}]
        assert sheet.line_number_offset == 3

    @pytest.mark.parametrize("comments", [0, 1, 5])
    def test_offset_is_two_plus_comments(self, comments: int) -> None:
        """Test that the offset is two plus the number of comment rows."""
        rows = [{"Field": f"# c{i}"} for i in range(comments)] + [{"id": "x"}]
        assert build_sheet_data(rows).line_number_offset == 2 + comments


class TestDisplayValue:
    """Tests for rendering cell values the way Excel shows them."""

    @pytest.mark.parametrize(
        ("value", "number_format", "expected"),
        [
            (date(2023, 1, 5), "yyyy-mm-dd", "2023-01-05"),
            (datetime(2023, 1, 5), "YYYY-MM-DD", "2023-01-05"),
            (datetime(2023, 1, 5), "mm-dd-yy", "1/5/23"),
            (datetime(2023, 1, 5), "d-mmm-yy", "5-Jan-23"),
            (datetime(2023, 1, 5, 14, 7, 9), "yyyy-mm-dd hh:mm:ss", "2023-01-05 14:07:09"),
            (datetime(2023, 1, 5, 14, 7), "h:mm AM/PM", "2:07 PM"),
            (time(9, 30), "hh:mm", "09:30"),
            (datetime(2023, 1, 5), "General", "2023-01-05"),
        ],
    )
    def test_dates(self, value: object, number_format: str, expected: str) -> None:
        """Test that dates and times follow their number format."""
        assert display_value(value, number_format) == expected

    @pytest.mark.parametrize(
        ("value", "number_format", "expected"),
        [
            (45, "General", "45"),
            (45.0, "General", "45"),
            (0.1 + 0.2, "General", "0.3"),
            (12.5, "0.00", "12.50"),
            (1234567.891, "#,##0.00", "1,234,567.89"),
            (0.256, "0%", "26%"),
            (3.0, "0", "3"),
        ],
    )
    def test_numbers(self, value: float, number_format: str, expected: str) -> None:
        """Test that numbers follow their number format."""
        assert display_value(value, number_format) == expected

    def test_booleans_and_text(self) -> None:
        """Test that booleans show as TRUE/FALSE and text is unchanged."""
        assert display_value(True) == "TRUE"
        assert display_value(False) == "FALSE"
        assert display_value("P1") == "P1"
        assert display_value(None) is None


class TestLoadWorkbook:
    """Tests for reading workbook content."""

    def test_sheets_in_workbook_order(self, make_workbook) -> None:
        """Test that sheets come back in workbook order."""
        content = make_workbook(
            {
                "patient_sample": [{"patient_id": "P1"}],
                "patient": [{"patient_id": "P1"}],
                "cell_model": [{"model_id": "M1"}],
            }
        )

        processed = load_workbook(content, "upload.xlsx")

        assert processed.file_name == "upload.xlsx"
        assert processed.sheet_names == ["patient_sample", "patient", "cell_model"]

    def test_empty_cells_are_left_out(self, make_workbook) -> None:
        """Test that empty cells do not appear in row mappings."""
        content = make_workbook({"patient": [{"patient_id": "P1", "sex": "Male"}, {"patient_id": "P2"}]})

        sheet = load_workbook(content).sheets["patient"]

        assert sheet.rows == [{"patient_id": "P1", "sex": "Male"}, {"patient_id": "P2"}]
        assert sheet.line_number_offset == 2

    def test_comment_rows_removed(self, make_workbook) -> None:
        """Test that comment rows are dropped and counted in the offset."""
        content = make_workbook(
            {
                "patient": [
                    {"Field": "# description of the columns"},
                    {"Field": "# example row", "patient_id": "EX"},
                    {"patient_id": "P1"},
                ]
            }
        )

        sheet = load_workbook(content).sheets["patient"]

        assert sheet.rows == [{"patient_id": "P1"}]
        assert sheet.line_number_offset == 4

    def test_values_read_as_text(self, make_workbook) -> None:
        """Test that text cells keep their text."""
        content = make_workbook({"patient": [{"patient_id": "P1", "age": "45"}]})

        row = load_workbook(content).sheets["patient"].rows[0]

        assert row["age"] == "45"

    def test_date_cell_read_as_displayed(self) -> None:
        """Test that a date cell is read as the date the sheet shows."""
        content = _formatted_xlsx(
            [
                ("collection_date", date(2023, 1, 5), "yyyy-mm-dd"),
                ("age", 45, "General"),
                ("ratio", 12.5, "0.00"),
            ]
        )

        row = load_workbook(content).sheets["patient"].rows[0]

        assert row == {"collection_date": "2023-01-05", "age": "45", "ratio": "12.50"}

    def test_xls_workbook(self, make_xls_workbook) -> None:
        """Test that a legacy .xls workbook is read like an xlsx one."""
        content = make_xls_workbook(
            {
                "patient": [
                    ["Field", "patient_id", "age", "collection_date"],
                    ["# curator notes", None, None, None],
                    [None, "P1", 45, date(2023, 1, 5)],
                ],
                "cell_model": [["model_id"], ["M1"]],
            },
            styles={("patient", 2, 3): "yyyy-mm-dd"},
        )

        processed = load_workbook(content, "submission.xls")

        assert processed.sheet_names == ["patient", "cell_model"]
        patient = processed.sheets["patient"]
        assert patient.rows == [{"patient_id": "P1", "age": "45", "collection_date": "2023-01-05"}]
        assert patient.line_number_offset == 3
        assert processed.sheets["cell_model"].rows == [{"model_id": "M1"}]

    def test_file_name_from_path(self, make_workbook, tmp_path) -> None:
        """Test that the reported name defaults to the file's name."""
        path = tmp_path / "submission.xlsx"
        path.write_bytes(make_workbook({"patient": [{"patient_id": "P1"}]}))

        processed = load_workbook(path)

        assert processed.file_name == "submission.xlsx"

    @pytest.mark.parametrize(
        "content",
        [b"this is not a workbook", b"PK\x03\x04 truncated zip", b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1 broken ole"],
    )
    def test_not_a_workbook_raises(self, content: bytes) -> None:
        """Test that unparseable content raises WorkbookFormatError."""
        with pytest.raises(WorkbookFormatError, match="could not be read as an Excel workbook"):
            load_workbook(content, "broken.xlsx")

    def test_format_error_is_critical(self) -> None:
        """Test that a parse failure is handled as a non-operational error."""
        with pytest.raises(WorkbookFormatError) as exc_info:
            load_workbook(b"this is not a workbook", "broken.xlsx")

        assert not is_operational(exc_info.value)
        assert error_payload(exc_info.value)["name"] == "Internal server error"
