"""Tests for the authorization facade, including the end-to-end scenarios."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from hr_authz.core.facade import Authorizer
from hr_authz.core.requirements import AllOf, AnyOf, Single
from hr_authz.core.roles import Role
from hr_authz.core.scope import ScopeResolver
from hr_authz.core.subject import Subject

REQUIREMENTS = [
    Single("leave.apply"),
    Single("employee.update_any"),
    AnyOf(["leave.approve_team", "leave.approve_any"]),
    AllOf(["leave.apply"]),
    AnyOf([]),
]


def test_scenario_a_hr_manager_in_and_out_of_scope(authorizer):
    subject = Subject.build("HRManager", assigned_departments=["D1"])
    assert authorizer.authorize(subject, Single("leave.approve_team"), {"department_id": "D1"}) is True
    assert authorizer.authorize(subject, Single("leave.approve_team"), {"department_id": "D2"}) is False


@pytest.mark.parametrize("resource", [None, {"department_id": "D1"}, {"title": "no department"}])
def test_scenario_b_employee_cannot_update_any(authorizer, resource):
    subject = Subject.build("Employee", assigned_departments=["D1"])
    assert authorizer.authorize(subject, Single("employee.update_any"), resource) is False


def test_scenario_c_super_admin_ignores_scope(authorizer):
    subject = Subject.build("SuperAdmin", assigned_departments=[])
    assert authorizer.authorize(subject, Single("leave.approve_team"), {"department_id": "D9"}) is True


def test_scenario_d_any_of_with_second_permission_only(authorizer, catalog):
    requirement = AnyOf(["leave.approve_team", "leave.approve_any"])
    assert "leave.approve_team" not in catalog.permissions_for(Role.HR_ADMINISTRATOR)
    subject = Subject.build("HRAdministrator")
    assert authorizer.authorize(subject, requirement) is True


@pytest.mark.parametrize("requirement", REQUIREMENTS)
@pytest.mark.parametrize("resource", [None, {"department_id": "D1"}])
def test_no_subject_or_unauthenticated_always_denies(authorizer, requirement, resource):
    assert authorizer.authorize(None, requirement, resource) is False
    for role in Role:
        subject = Subject.build(role, is_authenticated=False, assigned_departments=["D1"])
        assert authorizer.authorize(subject, requirement, resource) is False


def test_permission_failure_short_circuits_scope(catalog):
    scope = MagicMock(wraps=ScopeResolver(catalog))
    authorizer = Authorizer(catalog, scope=scope)
    subject = Subject.build("HRManager", assigned_departments=["D1"])

    # Out-of-scope department and a permission the role lacks.
    assert authorizer.authorize(subject, Single("payroll.process"), {"department_id": "D2"}) is False
    # In-scope department, same missing permission.
    assert authorizer.authorize(subject, Single("payroll.process"), {"department_id": "D1"}) is False
    scope.can_access.assert_not_called()

    assert authorizer.authorize(subject, Single("leave.approve_team"), {"department_id": "D1"}) is True
    scope.can_access.assert_called_once_with(subject, "D1")


def test_unauthenticated_skips_engine_and_scope(catalog):
    engine = MagicMock()
    scope = MagicMock()
    authorizer = Authorizer(catalog, engine=engine, scope=scope)
    assert authorizer.authorize(Subject.anonymous(), Single("leave.apply"), {"department_id": "D1"}) is False
    engine.evaluate.assert_not_called()
    scope.can_access.assert_not_called()


def test_resource_without_department_uses_permission_only(authorizer):
    subject = Subject.build("HRManager", assigned_departments=[])
    assert authorizer.authorize(subject, Single("leave.approve_team"), {"title": "policy"}) is True
    assert authorizer.authorize(subject, Single("leave.approve_team")) is True


def test_resource_with_malformed_department_fails_closed(authorizer):
    manager = Subject.build("HRManager", assigned_departments=["D1"])
    for resource in ({"department_id": None}, {"department_id": {"name": "D1"}}, SimpleNamespace(department_id="")):
        assert authorizer.authorize(manager, Single("leave.approve_team"), resource) is False

    admin = Subject.build("SuperAdmin")
    assert authorizer.authorize(admin, Single("leave.approve_team"), {"department_id": None}) is True


def test_embedded_and_bare_department_forms(authorizer):
    subject = Subject.build("HRManager", assigned_departments=[{"_id": "D1"}])
    requirement = Single("employee.update_any")
    assert authorizer.authorize(subject, requirement, {"department": {"_id": "D1", "name": "IT"}})
    assert authorizer.authorize(subject, requirement, SimpleNamespace(department_id="D1"))
    assert authorizer.authorize(subject, requirement, "D1")
    assert not authorizer.authorize(subject, requirement, "D2")


def test_filter_authorized_keeps_order(authorizer):
    subject = Subject.build("HRManager", assigned_departments=["D1", "D3"])
    rows = [{"id": 1, "department_id": "D1"}, {"id": 2, "department_id": "D2"}, {"id": 3, "department_id": "D3"}]
    kept = authorizer.filter_authorized(subject, Single("leave.view_team"), rows)
    assert [r["id"] for r in kept] == [1, 3]


def test_decisions_follow_new_subject(authorizer):
    requirement = Single("leave.approve_team")
    before = Subject.build("HRManager", assigned_departments=["D1"])
    after = Subject.build("HRManager", assigned_departments=["D2"])
    assert authorizer.authorize(before, requirement, "D2") is False
    assert authorizer.authorize(after, requirement, "D2") is True


def test_directly_constructed_subject_with_raw_role_denies(authorizer):
    subject = Subject(role="NotARole", is_authenticated=True)
    assert authorizer.authorize(subject, Single("leave.approve_team")) is False
    assert authorizer.authorize(subject, Single("leave.approve_team"), {"department_id": "D1"}) is False


def test_directly_constructed_subject_with_int_departments_matches(authorizer):
    subject = Subject(role=Role.HR_MANAGER, is_authenticated=True, assigned_departments=frozenset({7}))
    assert authorizer.authorize(subject, Single("leave.approve_team"), {"department_id": 7}) is True
    assert authorizer.authorize(subject, Single("leave.approve_team"), {"department_id": "7"}) is True
    assert authorizer.authorize(subject, Single("leave.approve_team"), {"department_id": 8}) is False
