"""
Tests for the spreadsheet reader used by the import wizard.

Workbooks are written to tmp_path with pandas/openpyxl and read back.
"""

from datetime import datetime

import pandas as pd
import pytest

from asset_import_hub.io.readers import ExcelReader, ExcelReadError, read_sheet


def _write_rows(path, rows, sheet_name="Sheet1"):
    pd.DataFrame(rows).to_excel(
        path, sheet_name=sheet_name, index=False, header=False, engine="openpyxl"
    )
    return path


@pytest.fixture
def asset_workbook(tmp_path):
    """Workbook with a title row, a blank row, then headers and data."""
    rows = [
        ["Asset register export", None, None, None],
        [None, None, None, None],
        ["Equipment ID", "Facility", None, "Installed"],
        ["P-101", "North", "ignored", datetime(2021, 3, 4)],
        [None, None, None, None],
        ["P-102", " South ", None, None],
    ]
    return _write_rows(tmp_path / "assets.xlsx", rows)


class TestExcelReader:
    """ExcelReader behaviour on well-formed and broken workbooks."""

    def test_init_defaults(self):
        reader = ExcelReader()

        assert reader.header_scan_rows == 10
        assert reader.sample_rows == 10

    def test_invalid_init(self):
        with pytest.raises(ValueError):
            ExcelReader(header_scan_rows=0)

    def test_first_non_empty_row_is_header(self, tmp_path):
        rows = [
            [None, None],
            ["Equipment ID", "Weight"],
            ["P-101", 12.5],
            ["P-102", 8],
        ]
        path = _write_rows(tmp_path / "simple.xlsx", rows)

        sheet = ExcelReader().read_sheet(path)

        assert sheet.headers == ["Equipment ID", "Weight"]
        assert sheet.header_row == 1
        assert sheet.rows == [["P-101", 12.5], ["P-102", 8]]

    def test_title_row_counts_as_header(self, asset_workbook):
        sheet = ExcelReader().read_sheet(asset_workbook)

        assert sheet.headers == ["Asset register export"]

    def test_blank_header_columns_dropped_and_values_cleaned(self, tmp_path):
        rows = [
            ["Equipment ID", None, "Installed"],
            ["P-101", "x", datetime(2021, 3, 4)],
            [None, None, None],
            [" P-102 ", None, None],
        ]
        path = _write_rows(tmp_path / "gaps.xlsx", rows)

        sheet = ExcelReader().read_sheet(path)

        assert sheet.headers == ["Equipment ID", "Installed"]
        assert sheet.rows == [["P-101", datetime(2021, 3, 4)], ["P-102", None]]

    def test_sample_rows_limited(self, tmp_path):
        rows = [["Tag"]] + [[f"P-{i}"] for i in range(25)]
        path = _write_rows(tmp_path / "many.xlsx", rows)

        sheet = ExcelReader(sample_rows=5).read_sheet(path)

        assert len(sheet.rows) == 25
        assert sheet.sample_rows == [["P-0"], ["P-1"], ["P-2"], ["P-3"], ["P-4"]]

    def test_numeric_headers_become_strings(self, tmp_path):
        path = _write_rows(tmp_path / "years.xlsx", [[2023, 2024], [1, 2]])

        assert ExcelReader().read_sheet(path).headers == ["2023", "2024"]

    def test_named_sheet(self, tmp_path):
        path = tmp_path / "multi.xlsx"
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            pd.DataFrame([["A"], ["1"]]).to_excel(
                writer, sheet_name="Summary", index=False, header=False
            )
            pd.DataFrame([["Tag"], ["P-1"]]).to_excel(
                writer, sheet_name="Assets", index=False, header=False
            )

        sheet = read_sheet(path, sheet="Assets")

        assert sheet.headers == ["Tag"]
        assert ExcelReader().get_sheet_names(path) == ["Summary", "Assets"]

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ExcelReader().read_sheet(tmp_path / "missing.xlsx")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.xlsx"
        path.write_bytes(b"")

        with pytest.raises(ExcelReadError, match="empty"):
            ExcelReader().read_sheet(path)

    def test_corrupted_file(self, tmp_path):
        path = tmp_path / "corrupt.xlsx"
        path.write_bytes(b"this is not a zip archive")

        with pytest.raises(ExcelReadError):
            ExcelReader().read_sheet(path)

    def test_missing_sheet(self, asset_workbook):
        with pytest.raises(ExcelReadError):
            ExcelReader().read_sheet(asset_workbook, sheet="NoSuchSheet")

    def test_no_header_within_scan_range(self, tmp_path):
        rows = [[None]] * 3 + [["Tag"], ["P-1"]]
        path = _write_rows(tmp_path / "late.xlsx", rows)

        with pytest.raises(ExcelReadError, match="No header row"):
            ExcelReader(header_scan_rows=2).read_sheet(path)
