"""Spreadsheet input/output adapters."""
