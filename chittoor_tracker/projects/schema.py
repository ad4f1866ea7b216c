"""
Canonical field resolution for loosely-typed project rows.

Rows pulled from older tables and CRM exports use different column names for
the same information ("status", "crm_status", "approval_status", ...). The
schema below lists, for each canonical field, the aliases to try in priority
order and the converter applied to the first non-empty value found.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models import ApprovalStatus, ProjectRecord
from ..utils.data_utils import (
    is_null_or_empty, optional_string, safe_float_conversion, safe_string_conversion
)


@dataclass(frozen=True)
class FieldAlias:
    """A canonical field, its aliases in priority order, and its converter."""

    canonical: str
    aliases: Tuple[str, ...]
    converter: Callable[[Any], Any] = optional_string

    def resolve(self, raw: Dict[str, Any]) -> Any:
        """Converted value of the first alias present and non-empty, else None."""
        for alias in self.aliases:
            if alias in raw and not is_null_or_empty(raw[alias]):
                value = self.converter(raw[alias])
                if value is not None:
                    return value
        return None


APPROVED_WORDS = {'approved', 'approve', 'accepted', 'accept', 'sanctioned', 'yes', 'true', 'done'}
REJECTED_WORDS = {'rejected', 'reject', 'declined', 'decline', 'denied', 'cancelled', 'canceled', 'no', 'false'}


def parse_status_hint(value: Any) -> Optional[ApprovalStatus]:
    """Map a textual or boolean status hint to an ApprovalStatus; None if unrecognised."""
    if isinstance(value, bool):
        return ApprovalStatus.APPROVED if value else ApprovalStatus.REJECTED
    if isinstance(value, ApprovalStatus):
        return value

    text = safe_string_conversion(value).lower().replace('_', ' ').strip()
    if not text:
        return None
    if text in APPROVED_WORDS:
        return ApprovalStatus.APPROVED
    if text in REJECTED_WORDS:
        return ApprovalStatus.REJECTED
    if text in {'pending', 'waiting', 'in review', 'under review', 'submitted', 'new'}:
        return ApprovalStatus.PENDING
    return None


RAW_PROJECT_SCHEMA: List[FieldAlias] = [
    FieldAlias('id', ('id', 'project_id', 'uuid')),
    FieldAlias('project_name', ('project_name', 'projectName', 'name', 'customer_name', 'title')),
    FieldAlias('created_at', ('created_at', 'createdAt', 'inserted_at', 'created')),
    FieldAlias('date', ('date', 'project_date', 'installation_date')),
    FieldAlias('village', ('village', 'village_name', 'Village')),
    FieldAlias('mandal', ('mandal', 'mandal_name', 'Mandal')),
    FieldAlias('location', ('location', 'address', 'site_location')),
    FieldAlias('capacity_kw', ('capacity_kw', 'capacity', 'kw', 'system_size'), safe_float_conversion),
    FieldAlias('project_cost', ('project_cost', 'cost', 'total_cost'), safe_float_conversion),
    FieldAlias('payment_amount', ('payment_amount', 'payment', 'amount_paid'), safe_float_conversion),
    FieldAlias('customer_mobile_number', ('customer_mobile_number', 'mobile', 'phone', 'customer_phone')),
    FieldAlias('approval_status', ('approval_status', 'crm_status', 'status', 'approval', 'is_approved'),
               parse_status_hint),
    FieldAlias('approval_updated_at', ('approval_updated_at', 'status_updated_at', 'updated_at')),
]

_APPROVAL_ALIAS = next(a for a in RAW_PROJECT_SCHEMA if a.canonical == 'approval_status')


def resolve_record(raw: Dict[str, Any],
                   schema: Optional[List[FieldAlias]] = None) -> Dict[str, Any]:
    """
    Resolve every canonical field of ``raw`` once.

    Args:
        raw: A loosely-typed row
        schema: Field aliases to apply; RAW_PROJECT_SCHEMA by default

    Returns:
        Canonical field name to converted value (None when no alias matched)
    """
    schema = RAW_PROJECT_SCHEMA if schema is None else schema
    return {alias.canonical: alias.resolve(raw) for alias in schema}


def derive_approval_status(raw: Dict[str, Any]) -> ApprovalStatus:
    """Approval status of a loosely-typed row; pending when nothing recognisable is found."""
    status = _APPROVAL_ALIAS.resolve(raw)
    return status if status is not None else ApprovalStatus.PENDING


def to_project_record(raw: Dict[str, Any]) -> ProjectRecord:
    """Build a ProjectRecord from a loosely-typed row via the alias schema."""
    resolved = resolve_record(raw)
    resolved['approval_status'] = resolved['approval_status'] or ApprovalStatus.PENDING
    return ProjectRecord.from_row(
        {key: value for key, value in resolved.items() if value is not None}
    )
