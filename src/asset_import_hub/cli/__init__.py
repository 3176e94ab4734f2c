"""Command-line interface for Asset Import Hub."""
