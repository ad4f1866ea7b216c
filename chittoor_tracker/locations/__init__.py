"""
Village/mandal reconciliation and cascading selection.
"""

from .reconciler import (
    LocationMapping,
    LocationReconciler,
    LocationSession,
    parse_location_blob,
    normalize_remote_rows
)
from .selector import LocationSelector, OTHER_OPTION
from .suggestions import VillageSuggester

__all__ = [
    'LocationMapping',
    'LocationReconciler',
    'LocationSession',
    'parse_location_blob',
    'normalize_remote_rows',
    'LocationSelector',
    'OTHER_OPTION',
    'VillageSuggester'
]
