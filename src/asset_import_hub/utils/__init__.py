"""Shared utilities: header normalization, value parsing, similarity, logging."""
