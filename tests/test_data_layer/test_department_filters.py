"""
Tests for transparent department scoping of ORM queries.

The listener reads the authorization context from ``Session.info["authz"]``.
"""
from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import select

import hr_authz.db.filters  # noqa: F401  (register the listener)
from hr_authz.core import Subject
from hr_authz.models.hr import Employee, LeaveRequest
from hr_authz.models.security import Department
from hr_authz.security.context import AuthzContext


@pytest.fixture
def seeded(db_session):
    for dept_id in ("IT", "FIN"):
        db_session.add(Department(id=dept_id, name=dept_id))
    db_session.flush()

    employees = [
        Employee(employee_id="E-1", first_name="A", last_name="B", email="a@b.com", department_id="IT"),
        Employee(employee_id="E-2", first_name="C", last_name="D", email="c@d.com", department_id="FIN"),
        Employee(employee_id="E-3", first_name="E", last_name="F", email="e@f.com", department_id="IT"),
    ]
    db_session.add_all(employees)
    db_session.flush()

    db_session.add_all(
        [
            LeaveRequest(
                employee_id=employees[0].id,
                department_id="IT",
                start_date=date(2026, 1, 5),
                end_date=date(2026, 1, 6),
            ),
            LeaveRequest(
                employee_id=employees[1].id,
                department_id="FIN",
                start_date=date(2026, 2, 5),
                end_date=date(2026, 2, 6),
            ),
        ]
    )
    db_session.commit()
    return db_session


def _scope(session, visible, department_scoped=True):
    session.info["authz"] = AuthzContext(
        subject=Subject.build("HRManager", assigned_departments=visible or []),
        department_scoped=department_scoped,
        visible_departments=None if visible is None else frozenset(visible),
    )


def _employee_codes(session):
    return [e.employee_id for e in session.scalars(select(Employee).order_by(Employee.id)).all()]


def test_no_context_is_not_narrowed(seeded):
    assert _employee_codes(seeded) == ["E-1", "E-2", "E-3"]


def test_scoped_context_narrows_employees_and_leave(seeded):
    _scope(seeded, ["IT"])

    assert _employee_codes(seeded) == ["E-1", "E-3"]
    leave = seeded.scalars(select(LeaveRequest)).all()
    assert [r.department_id for r in leave] == ["IT"]


def test_unrestricted_context_is_not_narrowed(seeded):
    _scope(seeded, None)
    assert _employee_codes(seeded) == ["E-1", "E-2", "E-3"]


def test_context_without_departments_sees_nothing(seeded):
    _scope(seeded, [])
    assert _employee_codes(seeded) == []


def test_route_not_department_scoped_is_not_narrowed(seeded):
    _scope(seeded, ["IT"], department_scoped=False)
    assert _employee_codes(seeded) == ["E-1", "E-2", "E-3"]
