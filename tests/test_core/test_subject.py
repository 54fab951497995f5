"""Tests for Subject construction."""

import dataclasses
from types import SimpleNamespace

import pytest

from hr_authz.core.roles import Role
from hr_authz.core.subject import Subject


def test_build_normalizes_departments_once():
    subject = Subject.build(
        "HR_Manager",
        assigned_departments=[" D1 ", {"_id": "D2"}, SimpleNamespace(id=3), None, {"name": "x"}],
        user_id=12,
    )
    assert subject.role is Role.HR_MANAGER
    assert subject.assigned_departments == frozenset({"D1", "D2", "3"})
    assert subject.user_id == "12"
    assert subject.is_authenticated is True


def test_build_keeps_unknown_roles_unknown():
    assert Subject.build("Payroll Officer").role is Role.UNKNOWN


def test_anonymous():
    subject = Subject.anonymous()
    assert subject.is_authenticated is False
    assert subject.role is Role.UNKNOWN
    assert subject.assigned_departments == frozenset()


def test_subject_is_immutable():
    subject = Subject.build("Employee")
    with pytest.raises(dataclasses.FrozenInstanceError):
        subject.role = Role.SUPER_ADMIN  # type: ignore[misc]


def test_direct_construction_parses_role():
    assert Subject(role="hr manager", is_authenticated=True).role is Role.HR_MANAGER
    assert Subject(role="NotARole", is_authenticated=True).role is Role.UNKNOWN
    assert Subject(role=None, is_authenticated=True).role is Role.UNKNOWN  # type: ignore[arg-type]


def test_direct_construction_normalizes_departments():
    subject = Subject(
        role=Role.HR_MANAGER,
        is_authenticated=1,  # type: ignore[arg-type]
        assigned_departments=frozenset({7, " D2 ", ""}),
        user_id=9,  # type: ignore[arg-type]
    )
    assert subject.assigned_departments == frozenset({"7", "D2"})
    assert subject.is_authenticated is True
    assert subject.user_id == "9"


def test_direct_construction_accepts_none_departments():
    subject = Subject(role=Role.EMPLOYEE, is_authenticated=True, assigned_departments=None)  # type: ignore[arg-type]
    assert subject.assigned_departments == frozenset()
