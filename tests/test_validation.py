"""
Tests for project form validation.
"""

import pytest

from chittoor_tracker.exceptions import ValidationError
from chittoor_tracker.models import SiteVisitStatus, SubsidyScope
from chittoor_tracker.projects.validation import ProjectFormValidator, cost_for_capacity


def valid_values(**overrides):
    values = {
        "project_name": "Reddy House",
        "customer_mobile_number": "9876543210",
        "site_visitor_name": "Ravi",
    }
    values.update(overrides)
    return values


@pytest.fixture
def validator():
    return ProjectFormValidator()


def test_minimal_form_uses_defaults(validator):
    form = validator.validate(valid_values())

    assert form.subsidy_scope == SubsidyScope.AXISO
    assert form.site_visit_status == SiteVisitStatus.PLANNED
    assert form.capacity_kw is None
    assert form.project_cost is None


def test_capacity_prefills_cost(validator):
    form = validator.validate(valid_values(capacity_kw="2"))

    assert form.capacity_kw == 2
    assert form.project_cost == 148000.0
    assert cost_for_capacity(3) == 205000


def test_explicit_cost_is_kept(validator):
    form = validator.validate(valid_values(capacity_kw=3, project_cost="199000"))

    assert form.project_cost == 199000.0


def test_values_are_trimmed_and_date_converted(validator):
    form = validator.validate(valid_values(
        customer_mobile_number=" 919876543210 ",
        site_visitor_name="  Lakshmi ",
        date="2024-03-05",
        village=" Kothapalli ",
        biller_name="",
    ))

    payload = form.to_payload()
    assert payload["customer_mobile_number"] == "919876543210"
    assert payload["site_visitor_name"] == "Lakshmi"
    assert payload["date"] == "2024-03-05T00:00:00Z"
    assert payload["village"] == "Kothapalli"
    assert payload["biller_name"] is None
    assert "approval_status" not in payload


def test_all_field_errors_reported_together(validator):
    with pytest.raises(ValidationError) as exc_info:
        validator.validate({
            "project_name": "A",
            "customer_mobile_number": "98765",
            "site_visitor_name": "",
            "capacity_kw": "5",
            "project_cost": "-1",
            "payment_amount": "lots",
            "site_visit_status": "Abandoned",
            "subsidy_scope": "Government",
            "date": "yesterday",
        })

    errors = exc_info.value.field_errors
    assert errors["project_name"] == "Required"
    assert errors["customer_mobile_number"] == "Enter a valid mobile number"
    assert errors["site_visitor_name"] == "Visitor name is required"
    assert errors["project_cost"] == "Must be at least 0"
    assert errors["payment_amount"] == "Must be a number"
    assert errors["date"] == "Invalid date"
    assert set(errors) >= {"capacity_kw", "site_visit_status", "subsidy_scope"}


def test_enum_values_accepted(validator):
    form = validator.validate(valid_values(site_visit_status="Completed",
                                           subsidy_scope=SubsidyScope.CUSTOMER))

    assert form.site_visit_status == SiteVisitStatus.COMPLETED
    assert form.to_payload()["subsidy_scope"] == "Customer"
