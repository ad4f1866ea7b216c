"""
Data utility functions for type conversions and null handling.

This module provides utility functions for cleaning loosely-typed values
coming from CSV exports and backend rows.
"""

import unicodedata
import pandas as pd
from typing import Any, Iterable, List, Optional


def safe_float_conversion(value: Any) -> Optional[float]:
    """
    Safely convert a value to float, handling nulls and thousands separators.

    Args:
        value: Value to convert to float

    Returns:
        Float value or None if conversion fails
    """
    if is_null_or_empty(value) or isinstance(value, bool):
        return None

    try:
        if isinstance(value, str):
            value = value.strip().replace(',', '').lstrip('₹').strip()
        return float(value)
    except (ValueError, TypeError):
        return None


def safe_string_conversion(value: Any) -> str:
    """
    Safely convert a value to string, handling nulls and cleaning whitespace.

    Args:
        value: Value to convert to string

    Returns:
        Cleaned string value or empty string if null
    """
    if value is None or _is_scalar_na(value):
        return ""

    return str(value).strip()


def optional_string(value: Any) -> Optional[str]:
    """Like safe_string_conversion but returns None for empty values."""
    cleaned = safe_string_conversion(value)
    return cleaned or None


def is_null_or_empty(value: Any) -> bool:
    """
    Check if a value is null, empty, or contains only whitespace.

    Args:
        value: Value to check

    Returns:
        True if value is null/empty, False otherwise
    """
    if value is None or _is_scalar_na(value):
        return True

    if isinstance(value, str):
        return not value.strip()

    return False


def _is_scalar_na(value: Any) -> bool:
    # pd.isna returns an array for list-like input
    if not pd.api.types.is_scalar(value):
        return False
    return bool(pd.isna(value))


def village_key(value: str) -> str:
    """Key used to de-duplicate villages: the lower-cased name."""
    return value.lower()


def sort_key(value: str):
    """
    Locale-aware ordering key for place names.

    Compares case- and accent-insensitively first and falls back to the raw
    string so distinct spellings keep a stable order.
    """
    decomposed = unicodedata.normalize('NFKD', value)
    base = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), value)


def unique_sorted(values: Iterable[str]) -> List[str]:
    """Distinct non-empty values in locale-aware order."""
    return sorted({v for v in values if v}, key=sort_key)


def contains_ignore_case(haystack: str, needle: str) -> bool:
    """Case-insensitive substring test."""
    return needle.lower() in haystack.lower()
