from __future__ import annotations

from datetime import date

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, sessionmaker

from hr_authz.db.base import Base
from hr_authz.models.hr import Employee, LeaveRequest
from hr_authz.models.security import Department, User


def init_db(engine: Engine, session_factory: sessionmaker[Session], seed: bool = True) -> None:
    """
    Create tables and, optionally, seed demo data.

    The seed is small and deterministic so the scoping rules can be tried
    without any setup.
    """

    Base.metadata.create_all(bind=engine)
    if not seed:
        return

    with session_factory() as db:
        if not _already_seeded(db):
            _seed(db)


def _already_seeded(db: Session) -> bool:
    return db.scalar(select(Department.id).limit(1)) is not None


def _seed(db: Session) -> None:
    departments = {
        "HR": Department(id="HR", name="Human Resources", description="People operations"),
        "IT": Department(id="IT", name="Information Technology", description="Internal systems"),
        "FIN": Department(id="FIN", name="Finance", description="Accounts and payroll"),
    }
    db.add_all(departments.values())

    # Ids 1..5 in insertion order; role strings are stored the way the admin
    # screens write them, not in canonical form.
    users = [
        User(username="alice_admin", email="alice@hr.example", role="SuperAdmin"),
        User(username="hana_hradmin", email="hana@hr.example", role="HR Administrator"),
        User(username="mona_hrmgr", email="mona@hr.example", role="HR_Manager"),
        User(username="ed_it", email="ed@hr.example", role="Employee"),
        User(username="nils_hrmgr", email="nils@hr.example", role="HRManager"),
    ]
    users[2].assigned_departments.append(departments["IT"])
    db.add_all(users)
    db.flush()

    staff = [
        ("IT-001", "Ed", "Okafor", "IT", users[3].id, "Backend Developer", date(2022, 3, 14)),
        ("IT-002", "Priya", "Raman", "IT", None, "Support Engineer", date(2024, 1, 8)),
        ("FIN-001", "Lars", "Holm", "FIN", None, "Payroll Specialist", date(2020, 11, 2)),
    ]
    employees = [
        Employee(
            employee_id=code,
            first_name=first,
            last_name=last,
            email=f"{first.lower()}.{last.lower()}@hr.example",
            department_id=dept_id,
            user_id=user_id,
            position=position,
            hire_date=hired,
        )
        for code, first, last, dept_id, user_id, position, hired in staff
    ]
    db.add_all(employees)
    db.flush()

    db.add_all(
        [
            LeaveRequest(
                employee_id=employees[0].id,
                department_id="IT",
                start_date=date(2026, 7, 1),
                end_date=date(2026, 7, 3),
                reason="Family trip",
            ),
            LeaveRequest(
                employee_id=employees[2].id,
                department_id="FIN",
                start_date=date(2026, 8, 10),
                end_date=date(2026, 8, 11),
                reason="Medical appointment",
            ),
        ]
    )
    db.commit()
