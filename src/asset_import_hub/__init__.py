"""
Asset Import Hub - spreadsheet import/export core for asset-management data.

Discovers addressable fields from form metadata, proposes column mappings for
uploaded spreadsheets, and moves values in and out of nested records.
"""

__version__ = "0.1.0"
