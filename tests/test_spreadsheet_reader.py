"""Tests for reading uploaded spreadsheets into rows."""

import io
from typing import Any, List
from unittest.mock import MagicMock, patch

import pytest
from openpyxl import Workbook

from app.exceptions import SpreadsheetReadError
from app.services.spreadsheet_reader import read_rows

HEADERS = ["Subject Code", "Subject", "Unit", " Question ", "Image Url"]


def xlsx_bytes(rows: List[List[Any]], extra_sheet: bool = False) -> bytes:
    """Build an in-memory workbook whose first sheet holds ``rows``."""
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    if extra_sheet:
        other = workbook.create_sheet("Other")
        other.append(["Question"])
        other.append(["From the second sheet"])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestExcel:

    def test_read_rows(self) -> None:
        content = xlsx_bytes([
            HEADERS,
            ["CS201", "Data Structures", 1, "What is a heap?\nA. tree\nB. list", None],
            ["CS201", "Data Structures", 2, "A stack is ___", "https://example.com/s.png"],
        ])

        rows = read_rows(content, "bank.xlsx")

        assert rows == [
            {
                "Subject Code": "CS201",
                "Subject": "Data Structures",
                "Unit": 1,
                " Question ": "What is a heap?\nA. tree\nB. list",
                "Image Url": None,
            },
            {
                "Subject Code": "CS201",
                "Subject": "Data Structures",
                "Unit": 2,
                " Question ": "A stack is ___",
                "Image Url": "https://example.com/s.png",
            },
        ]

    def test_integral_floats_become_int(self) -> None:
        content = xlsx_bytes([["Unit", "Question"], [3.0, "q"], [2.5, "r"]])

        rows = read_rows(content, "bank.xlsx")

        assert rows[0]["Unit"] == 3
        assert isinstance(rows[0]["Unit"], int)
        assert rows[1]["Unit"] == 2.5

    def test_skips_empty_rows_and_blank_headers(self) -> None:
        content = xlsx_bytes([
            ["Question", None, "Unit"],
            ["q1", "orphan", 1],
            [None, None, None],
            ["   ", None, None],
            ["q2", None, 2],
        ])

        rows = read_rows(content, "bank.xlsx")

        assert rows == [{"Question": "q1", "Unit": 1}, {"Question": "q2", "Unit": 2}]

    def test_uses_first_sheet_only(self) -> None:
        content = xlsx_bytes([["Question"], ["From the first sheet"]], extra_sheet=True)

        rows = read_rows(content, "bank.xlsx")

        assert rows == [{"Question": "From the first sheet"}]

    def test_header_only(self) -> None:
        assert read_rows(xlsx_bytes([HEADERS]), "bank.xlsx") == []

    def test_corrupt_workbook(self) -> None:
        with pytest.raises(SpreadsheetReadError, match="Could not read spreadsheet"):
            read_rows(b"PK\x03\x04 definitely not a workbook", "bank.xlsx")


class TestLegacyExcel:

    @staticmethod
    def mock_book(table: List[List[Any]]) -> MagicMock:
        sheet = MagicMock()
        sheet.nrows = len(table)
        sheet.row_values.side_effect = lambda index: table[index]
        book = MagicMock()
        book.sheet_by_index.return_value = sheet
        return book

    def test_read_rows(self) -> None:
        book = self.mock_book([
            ["Subject", "Unit", "Question", "Image Url"],
            ["Maths", 1.0, "Pi is ___", ""],
            ["", "", "", ""],
            ["Maths", 2.0, "Which is prime?\nA. 4\nB. 7", "https://example.com/p.png"],
        ])

        with patch("app.services.spreadsheet_reader.xlrd.open_workbook", return_value=book) as open_workbook:
            rows = read_rows(b"\xd0\xcf\x11\xe0legacy", "bank.XLS")

        assert rows == [
            {"Subject": "Maths", "Unit": 1, "Question": "Pi is ___", "Image Url": None},
            {
                "Subject": "Maths",
                "Unit": 2,
                "Question": "Which is prime?\nA. 4\nB. 7",
                "Image Url": "https://example.com/p.png",
            },
        ]
        open_workbook.assert_called_once_with(file_contents=b"\xd0\xcf\x11\xe0legacy")
        book.sheet_by_index.assert_called_once_with(0)
        book.release_resources.assert_called_once()

    def test_corrupt_workbook(self) -> None:
        with pytest.raises(SpreadsheetReadError, match="Could not read spreadsheet"):
            read_rows(b"not a legacy workbook", "bank.xls")


class TestCsv:

    def test_read_rows(self) -> None:
        content = (
            "\ufeffSubject,Unit,Question\n"
            'Maths,1,"Which is prime?\nA. 4\nB. 7"\n'
            "Maths,unit two,Pi is ___\n"
        ).encode("utf-8")

        rows = read_rows(content, "bank.CSV")

        assert rows == [
            {"Subject": "Maths", "Unit": 1, "Question": "Which is prime?\nA. 4\nB. 7"},
            {"Subject": "Maths", "Unit": "unit two", "Question": "Pi is ___"},
        ]

    def test_short_rows_are_padded(self) -> None:
        rows = read_rows(b"Question,Unit,Image Url\nq1,2\n", "bank.csv")

        assert rows == [{"Question": "q1", "Unit": 2, "Image Url": None}]

    def test_empty_file(self) -> None:
        assert read_rows(b"", "bank.csv") == []

    def test_invalid_utf8(self) -> None:
        with pytest.raises(SpreadsheetReadError, match="not valid UTF-8"):
            read_rows(b"Question\n\xff\xfe\xfa", "bank.csv")


@pytest.mark.parametrize("filename", ["bank.ods", "bank.pdf", "bank"])
def test_unsupported_extension(filename: str) -> None:
    with pytest.raises(SpreadsheetReadError, match="Unsupported file type"):
        read_rows(b"anything", filename)
