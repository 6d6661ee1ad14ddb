"""
sftime Utilities

This package provides table description helpers.
"""

from .info import (
    get_table_info,
    format_table_summary,
)

__all__ = [
    "get_table_info",
    "format_table_summary",
]
