"""Utility functions for margeff."""

from .formatting import format_estimate_table, format_pvalue, format_summary_header

__all__ = [
    "format_estimate_table",
    "format_pvalue",
    "format_summary_header",
]
