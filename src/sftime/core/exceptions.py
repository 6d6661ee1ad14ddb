"""
sftime Custom Exception Classes

This module defines all custom exception classes for better error handling
and more informative error messages.
"""

from typing import Optional, Sequence

# ============================================================================
# Base Exception
# ============================================================================

class SftimeError(Exception):
    """Base exception class for all sftime related errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        full_message = f"{message}\nDetails: {details}" if details else message
        super().__init__(full_message)

# ============================================================================
# Schema Errors
# ============================================================================

class SchemaError(SftimeError):
    """
    Requested time or geometry column is missing or holds the wrong value type.

    Attributes:
        column: Name of the expected or invalid column
        reason: What is wrong with it
        available: Columns present in the table, when known
    """

    def __init__(self, column: str, reason: str, available: Optional[Sequence[str]] = None):
        super().__init__(
            f"Invalid column '{column}': {reason}",
            f"Available columns: {', '.join(str(c) for c in available)}" if available is not None else None
        )
        self.column = column
        self.reason = reason
        self.available = list(available) if available is not None else None

# ============================================================================
# Conversion Errors
# ============================================================================

class ConversionError(SftimeError):
    """Source or target format cannot be meaningfully mapped."""

    def __init__(self, source_format: str, reason: str):
        super().__init__(f"Cannot convert {source_format}", reason)
        self.source_format = source_format
        self.reason = reason

# ============================================================================
# Parameter Errors
# ============================================================================

class ParameterError(SftimeError):
    """Parameter validation errors."""

    def __init__(self, parameter: str, value: str, reason: str):
        super().__init__(f"Invalid parameter '{parameter}': {value}", reason)
        self.parameter = parameter
        self.value = value

# ============================================================================
# Warnings
# ============================================================================

class MetadataLossWarning(UserWarning):
    """The active time column designation was dropped by a conversion."""

# ============================================================================
# Utility Functions
# ============================================================================

def check_column_exists(column: str, available: Sequence[str], role: str = "column") -> None:
    """
    Check that a column is present in a table.

    Args:
        column: Column name to look for
        available: Columns present in the table
        role: Role of the column, used in the error message ("time column", ...)

    Raises:
        SchemaError: If the column is missing
    """
    if column not in available:
        raise SchemaError(column, f"{role} not found in table", available)
