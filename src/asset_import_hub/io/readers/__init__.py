from asset_import_hub.io.readers.excel_reader import (
    ExcelReadError,
    ExcelReader,
    SheetData,
    read_sheet,
)

__all__ = ["ExcelReadError", "ExcelReader", "SheetData", "read_sheet"]
