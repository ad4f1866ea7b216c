"""
Validation of project form values.

The form posts loosely-typed values (strings from inputs and selects); this
module checks them against the project rules and produces the cleaned
payload written to the projects table.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..exceptions import ValidationError
from ..models import CAPACITY_COSTS, SiteVisitStatus, SubsidyScope
from ..utils.data_utils import safe_string_conversion, safe_float_conversion, is_null_or_empty


MOBILE_PATTERN = re.compile(r'^[0-9]{10,15}$')

# Text fields that are stored as given (trimmed), empty meaning null
OPTIONAL_TEXT_FIELDS = [
    'village', 'mandal', 'power_bill_number', 'banking_ref_id',
    'service_number', 'service_status', 'biller_name'
]


@dataclass
class ProjectForm:
    """Cleaned project form values."""

    project_name: str
    customer_mobile_number: str
    site_visitor_name: str
    subsidy_scope: SubsidyScope = SubsidyScope.AXISO
    site_visit_status: SiteVisitStatus = SiteVisitStatus.PLANNED
    date: Optional[str] = None
    capacity_kw: Optional[int] = None
    project_cost: Optional[float] = None
    payment_amount: Optional[float] = None
    extras: Dict[str, Optional[str]] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        """Row values for insert/update; CRM-managed fields are never included."""
        payload = {
            'project_name': self.project_name,
            'date': self.date,
            'capacity_kw': self.capacity_kw,
            'project_cost': self.project_cost,
            'site_visit_status': self.site_visit_status.value,
            'payment_amount': self.payment_amount,
            'customer_mobile_number': self.customer_mobile_number,
            'site_visitor_name': self.site_visitor_name,
            'subsidy_scope': self.subsidy_scope.value,
        }
        payload.update(self.extras)
        return payload


def cost_for_capacity(capacity_kw: Optional[int]) -> Optional[int]:
    """Preset project cost for a capacity, or None for other capacities."""
    if capacity_kw is None:
        return None
    return CAPACITY_COSTS.get(capacity_kw)


def _to_iso_date(value: str) -> str:
    # Date inputs post YYYY-MM-DD; stored as a UTC midnight timestamp
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        parsed = datetime.strptime(value, "%d-%m-%Y")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


class ProjectFormValidator:
    """Checks raw form values and builds a ProjectForm."""

    def validate(self, values: Dict[str, Any]) -> ProjectForm:
        """
        Validate raw form values.

        Args:
            values: Field name to raw value, as posted by the form

        Returns:
            ProjectForm with cleaned values

        Raises:
            ValidationError: With one message per invalid field
        """
        errors: Dict[str, str] = {}

        project_name = safe_string_conversion(values.get('project_name'))
        if len(project_name) < 2:
            errors['project_name'] = "Required"

        mobile = safe_string_conversion(values.get('customer_mobile_number'))
        if not MOBILE_PATTERN.match(mobile):
            errors['customer_mobile_number'] = "Enter a valid mobile number"

        visitor = safe_string_conversion(values.get('site_visitor_name'))
        if len(visitor) < 2:
            errors['site_visitor_name'] = "Visitor name is required"

        subsidy_scope = self._enum_field(values, 'subsidy_scope', SubsidyScope,
                                         SubsidyScope.AXISO, errors)
        site_visit_status = self._enum_field(values, 'site_visit_status', SiteVisitStatus,
                                             SiteVisitStatus.PLANNED, errors)

        capacity_kw = None
        raw_capacity = values.get('capacity_kw')
        if not is_null_or_empty(raw_capacity):
            capacity = safe_float_conversion(raw_capacity)
            if capacity is None or capacity not in CAPACITY_COSTS:
                errors['capacity_kw'] = f"Capacity must be one of {sorted(CAPACITY_COSTS)} kW"
            else:
                capacity_kw = int(capacity)

        project_cost = self._amount_field(values, 'project_cost', errors)
        if project_cost is None and 'project_cost' not in errors:
            preset = cost_for_capacity(capacity_kw)
            project_cost = float(preset) if preset is not None else None

        payment_amount = self._amount_field(values, 'payment_amount', errors)

        date = None
        raw_date = safe_string_conversion(values.get('date'))
        if raw_date:
            try:
                date = _to_iso_date(raw_date)
            except ValueError:
                errors['date'] = "Invalid date"

        if errors:
            raise ValidationError(
                f"Project form has {len(errors)} invalid field(s): {', '.join(sorted(errors))}",
                field_errors=errors
            )

        extras = {}
        for name in OPTIONAL_TEXT_FIELDS:
            if name in values:
                extras[name] = safe_string_conversion(values.get(name)) or None

        return ProjectForm(
            project_name=project_name,
            customer_mobile_number=mobile,
            site_visitor_name=visitor,
            subsidy_scope=subsidy_scope,
            site_visit_status=site_visit_status,
            date=date,
            capacity_kw=capacity_kw,
            project_cost=project_cost,
            payment_amount=payment_amount,
            extras=extras
        )

    def _enum_field(self, values, name, enum_cls, default, errors):
        raw = values.get(name)
        if is_null_or_empty(raw):
            return default
        if isinstance(raw, enum_cls):
            return raw
        try:
            return enum_cls(safe_string_conversion(raw))
        except ValueError:
            errors[name] = f"Must be one of: {', '.join(e.value for e in enum_cls)}"
            return default

    def _amount_field(self, values, name, errors) -> Optional[float]:
        raw = values.get(name)
        if is_null_or_empty(raw):
            return None
        amount = safe_float_conversion(raw)
        if amount is None:
            errors[name] = "Must be a number"
            return None
        if amount < 0:
            errors[name] = "Must be at least 0"
            return None
        return amount
