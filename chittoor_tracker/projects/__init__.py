"""
Project records: validation, storage, realtime feed and raw-row schema.
"""

from .feed import ChangeEvent, ChangeType, ProjectDetailState, ProjectFeed, count_statuses
from .schema import FieldAlias, RAW_PROJECT_SCHEMA, derive_approval_status, resolve_record, to_project_record
from .service import ImageUpload, ProjectService
from .validation import ProjectForm, ProjectFormValidator, cost_for_capacity

__all__ = [
    'ChangeEvent',
    'ChangeType',
    'ProjectDetailState',
    'ProjectFeed',
    'count_statuses',
    'FieldAlias',
    'RAW_PROJECT_SCHEMA',
    'derive_approval_status',
    'resolve_record',
    'to_project_record',
    'ImageUpload',
    'ProjectService',
    'ProjectForm',
    'ProjectFormValidator',
    'cost_for_capacity'
]
