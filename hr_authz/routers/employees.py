from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from hr_authz.core import PermissionCatalog, Subject
from hr_authz.db.session import get_db
from hr_authz.models.hr import Employee
from hr_authz.schemas.hr import EmployeeOut
from hr_authz.schemas.security import SubjectOut
from hr_authz.security.dependencies import get_catalog, get_subject

router = APIRouter(tags=["employees"])


@router.get("/me", response_model=SubjectOut)
def me(
    subject: Subject = Depends(get_subject),
    catalog: PermissionCatalog = Depends(get_catalog),
) -> SubjectOut:
    return SubjectOut(
        user_id=subject.user_id,
        role=subject.role.value,
        role_display_name=catalog.display_name(subject.role),
        is_authenticated=subject.is_authenticated,
        assigned_departments=sorted(subject.assigned_departments),
        permissions=sorted(catalog.permissions_for(subject.role)),
    )


@router.get("/employees", response_model=list[EmployeeOut])
def list_employees(department_id: str | None = None, db: Session = Depends(get_db)) -> list[Employee]:
    # Department scoping is applied by hr_authz/db/filters.py.
    stmt = select(Employee).order_by(Employee.id)
    if department_id is not None:
        stmt = stmt.where(Employee.department_id == department_id)
    return list(db.scalars(stmt).all())


@router.get("/employees/{id}", response_model=EmployeeOut)
def get_employee(id: int, db: Session = Depends(get_db)) -> Employee:
    employee = db.scalars(select(Employee).where(Employee.id == id)).first()
    if employee is None:
        # Rows outside the caller's departments are indistinguishable from
        # missing ones.
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return employee
