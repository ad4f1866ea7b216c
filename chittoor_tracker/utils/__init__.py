"""
Utility functions and helpers.
"""

from .data_utils import (
    safe_float_conversion,
    safe_string_conversion,
    optional_string,
    is_null_or_empty,
    village_key,
    sort_key,
    unique_sorted,
    contains_ignore_case
)

__all__ = [
    'safe_float_conversion',
    'safe_string_conversion',
    'optional_string',
    'is_null_or_empty',
    'village_key',
    'sort_key',
    'unique_sorted',
    'contains_ignore_case'
]
