"""
Data models for the Chittoor project tracker.

This module defines the core data structures: village/mandal location records
and project records mirrored from the projects table.
"""

from dataclasses import dataclass, field, fields, asdict, replace
from enum import Enum
from typing import Optional, List, Dict, Any

from .utils.data_utils import (
    safe_string_conversion, optional_string, safe_float_conversion,
    is_null_or_empty
)


class ApprovalStatus(str, Enum):
    """Approval state maintained by the CRM and mirrored read-only."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SiteVisitStatus(str, Enum):
    """Progress of the site survey visit."""

    PLANNED = "Planned"
    VISITED = "Visited"
    PENDING = "Pending"
    COMPLETED = "Completed"


class SubsidyScope(str, Enum):
    """Party responsible for claiming the subsidy."""

    AXISO = "Axiso"
    CUSTOMER = "Customer"


# Capacity presets offered by the form, in kW, with their project cost in rupees
CAPACITY_COSTS: Dict[int, int] = {
    2: 148000,
    3: 205000,
}

# Fields owned by the CRM; this package never writes them
CRM_MANAGED_FIELDS = ('approval_status', 'approval_updated_at')


@dataclass(frozen=True)
class LocationRecord:
    """A village and the mandal it belongs to."""

    village: str
    mandal: str

    def __post_init__(self):
        village = safe_string_conversion(self.village)
        mandal = safe_string_conversion(self.mandal)
        if not village or not mandal:
            raise ValueError("Village and mandal must both be non-empty")
        # Frozen dataclass: assign the trimmed values through object.__setattr__
        object.__setattr__(self, 'village', village)
        object.__setattr__(self, 'mandal', mandal)

    @property
    def key(self) -> str:
        """Case-insensitive identity of the record within a mapping."""
        return self.village.lower()

    @classmethod
    def from_values(cls, village: Any, mandal: Any) -> Optional['LocationRecord']:
        """Build a record, or return None when either side is empty after trim."""
        if is_null_or_empty(village) or is_null_or_empty(mandal):
            return None
        return cls(village=str(village), mandal=str(mandal))


def _enum_or_none(enum_cls, value):
    if is_null_or_empty(value):
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        return None


def parse_approval_status(value: Any) -> ApprovalStatus:
    """Parse a stored approval status, treating unknown values as pending."""
    if isinstance(value, ApprovalStatus):
        return value
    text = safe_string_conversion(value).lower()
    try:
        return ApprovalStatus(text)
    except ValueError:
        return ApprovalStatus.PENDING


@dataclass
class ProjectRecord:
    """Represents a row of the projects table."""

    id: str
    project_name: str
    created_at: Optional[str] = None
    date: Optional[str] = None
    capacity_kw: Optional[float] = None
    location: Optional[str] = None
    village: Optional[str] = None
    mandal: Optional[str] = None
    power_bill_number: Optional[str] = None
    project_cost: Optional[float] = None
    site_visit_status: Optional[SiteVisitStatus] = None
    payment_amount: Optional[float] = None
    banking_ref_id: Optional[str] = None
    service_number: Optional[str] = None
    service_status: Optional[str] = None
    biller_name: Optional[str] = None
    customer_mobile_number: Optional[str] = None
    site_visitor_name: Optional[str] = None
    subsidy_scope: Optional[SubsidyScope] = None
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    approval_updated_at: Optional[str] = None
    images: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Clean loosely-typed values after initialization."""
        self.id = safe_string_conversion(self.id)
        self.project_name = safe_string_conversion(self.project_name)

        for name in ('created_at', 'date', 'location', 'village', 'mandal',
                     'power_bill_number', 'banking_ref_id', 'service_number',
                     'service_status', 'biller_name', 'customer_mobile_number',
                     'site_visitor_name', 'approval_updated_at'):
            setattr(self, name, optional_string(getattr(self, name)))

        self.capacity_kw = safe_float_conversion(self.capacity_kw)
        self.project_cost = safe_float_conversion(self.project_cost)
        self.payment_amount = safe_float_conversion(self.payment_amount)

        self.site_visit_status = _enum_or_none(SiteVisitStatus, self.site_visit_status)
        self.subsidy_scope = _enum_or_none(SubsidyScope, self.subsidy_scope)
        self.approval_status = parse_approval_status(self.approval_status)

        if not isinstance(self.images, list):
            self.images = []
        self.images = [str(url) for url in self.images if not is_null_or_empty(url)]

    @classmethod
    def field_names(cls) -> List[str]:
        """Names of all record fields in declaration order."""
        return [f.name for f in fields(cls)]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'ProjectRecord':
        """
        Build a record from a backend row, ignoring unknown columns.

        Args:
            row: Mapping of column name to value

        Returns:
            ProjectRecord instance
        """
        known = set(cls.field_names())
        values = {key: value for key, value in row.items() if key in known}
        values.setdefault('id', '')
        values.setdefault('project_name', '')
        return cls(**values)

    def merged(self, changes: Dict[str, Any]) -> 'ProjectRecord':
        """Return a copy with the known fields of ``changes`` applied."""
        known = set(self.field_names())
        updates = {key: value for key, value in changes.items() if key in known}
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the record to a plain dictionary with enum values unwrapped."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        return data

    @property
    def display_location(self) -> Optional[str]:
        """Location shown in lists: explicit location, else village/mandal."""
        if self.location:
            return self.location
        parts = [part for part in (self.village, self.mandal) if part]
        return ", ".join(parts) if parts else None
