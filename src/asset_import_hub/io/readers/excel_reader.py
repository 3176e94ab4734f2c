"""
Spreadsheet reading for the import wizard.

Reads one sheet with pandas (openpyxl engine), locates the header row, and
returns headers plus cleaned data rows ready for column mapping. Header cells
are kept exactly as typed (only surrounding whitespace is removed) so that
confirmed mappings and history lookups see the user's own spelling.
"""

import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)


class ExcelReadError(Exception):
    """Raised when Excel file reading fails."""

    pass


@dataclass
class SheetData:
    """Headers and data rows of one sheet; rows are aligned with headers."""

    headers: List[str]
    rows: List[List[Any]] = field(default_factory=list)
    sample_rows: List[List[Any]] = field(default_factory=list)
    header_row: int = 0


def _clean_cell(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return value
    # numpy scalars to native Python types
    if hasattr(value, "item") and not isinstance(value, pd.Timestamp):
        return value.item()
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, str):
        return value.strip()
    return value


def _header_text(value: Any) -> str:
    cleaned = _clean_cell(value)
    if cleaned is None:
        return ""
    if isinstance(cleaned, float) and cleaned.is_integer():
        cleaned = int(cleaned)
    return str(cleaned).replace("\n", " ").replace("\t", " ").strip()


class ExcelReader:
    """
    Excel sheet reader with header detection.

    Args:
        header_scan_rows: How many leading rows may hold the header row
        sample_rows: How many data rows to expose as ``SheetData.sample_rows``
    """

    def __init__(self, header_scan_rows: int = 10, sample_rows: int = 10):
        if header_scan_rows < 1:
            raise ValueError("header_scan_rows must be at least 1")
        if sample_rows < 0:
            raise ValueError("sample_rows must not be negative")
        self.header_scan_rows = header_scan_rows
        self.sample_rows = sample_rows

    def read_sheet(
        self, file_path: Union[str, Path], sheet: Union[str, int] = 0
    ) -> SheetData:
        """
        Read a sheet and split it into headers and rows.

        The header row is the first of the leading ``header_scan_rows`` rows
        with any non-empty cell. Columns whose header cell is empty are dropped,
        as are rows that are entirely empty.

        Raises:
            FileNotFoundError: If the file does not exist
            ExcelReadError: If the file is empty, corrupt, lacks the sheet, or
                has no header row within the scan range
        """
        df = self._read_raw(file_path, sheet)

        header_index = self._find_header_row(df)
        if header_index is None:
            raise ExcelReadError(
                f"No header row found in the first {self.header_scan_rows} rows "
                f"of sheet '{sheet}' in {file_path}"
            )

        raw_headers = [_header_text(v) for v in df.iloc[header_index].tolist()]
        keep = [i for i, header in enumerate(raw_headers) if header]
        headers = [raw_headers[i] for i in keep]

        rows: List[List[Any]] = []
        for values in df.iloc[header_index + 1 :].itertuples(index=False, name=None):
            row = [_clean_cell(values[i]) for i in keep]
            if all(v is None or v == "" for v in row):
                continue
            rows.append(row)

        dropped = len(raw_headers) - len(headers)
        logger.info(
            "Read sheet '%s' from %s: %d columns, %d rows (header row %d, %d blank header columns dropped)",
            sheet,
            file_path,
            len(headers),
            len(rows),
            header_index + 1,
            dropped,
        )
        return SheetData(
            headers=headers,
            rows=rows,
            sample_rows=rows[: self.sample_rows],
            header_row=header_index,
        )

    def get_sheet_names(self, file_path: Union[str, Path]) -> List[Union[str, int]]:
        """
        Get list of sheet names from Excel file.

        Raises:
            ExcelReadError: If file cannot be read
            FileNotFoundError: If file does not exist
        """
        if not Path(file_path).exists():
            raise FileNotFoundError(f"Excel file not found: {file_path}")

        try:
            with pd.ExcelFile(file_path, engine="openpyxl") as excel_file:
                return list(excel_file.sheet_names)
        except Exception as e:
            raise ExcelReadError(f"Cannot read sheet names from {file_path}: {e}")

    def _find_header_row(self, df: pd.DataFrame) -> Optional[int]:
        for index in range(min(self.header_scan_rows, len(df))):
            if any(_header_text(v) for v in df.iloc[index].tolist()):
                return index
        return None

    def _read_raw(self, file_path: Union[str, Path], sheet: Union[str, int]) -> pd.DataFrame:
        file_path_obj = Path(file_path)

        if not file_path_obj.exists():
            raise FileNotFoundError(f"Excel file not found: {file_path}")

        if file_path_obj.stat().st_size == 0:
            raise ExcelReadError(f"Excel file is empty: {file_path}")

        try:
            logger.debug("Reading Excel file: %s (sheet: %s)", file_path, sheet)
            return pd.read_excel(
                file_path_obj,
                sheet_name=sheet,
                engine="openpyxl",
                header=None,
                dtype=object,
            )
        except FileNotFoundError:
            raise
        except zipfile.BadZipFile:
            raise ExcelReadError(
                f"Failed to parse Excel file {file_path}: corrupted or invalid format"
            )
        except ValueError as e:
            msg = str(e)
            sheet_err_signals = (
                "Worksheet",
                "does not exist",
                "is not a valid worksheet name",
                "is invalid",
                "worksheets less than",
                "out of range",
            )
            if any(s in msg for s in sheet_err_signals):
                raise ExcelReadError(f"Sheet '{sheet}' not found in {file_path}")
            raise ExcelReadError(f"Invalid Excel file or parameters for {file_path}: {e}")
        except Exception as e:
            raise ExcelReadError(f"Unexpected error reading Excel file {file_path}: {e}")


def read_sheet(
    file_path: Union[str, Path],
    sheet: Union[str, int] = 0,
    header_scan_rows: int = 10,
    sample_rows: int = 10,
) -> SheetData:
    """Convenience wrapper around ``ExcelReader(...).read_sheet(...)``."""
    reader = ExcelReader(header_scan_rows=header_scan_rows, sample_rows=sample_rows)
    return reader.read_sheet(file_path, sheet=sheet)
