from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from hr_authz.core import AnyOf, PermissionCatalog
from hr_authz.db.session import get_db
from hr_authz.models.hr import Employee, LeaveRequest
from hr_authz.models.security import Department, User
from hr_authz.schemas.hr import EmployeeOut, LeaveRequestOut
from hr_authz.schemas.security import DepartmentOut, UserOut
from hr_authz.security.decorators import department_scoped, requires
from hr_authz.security.dependencies import get_catalog, require_permission, require_roles

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)) -> list[User]:
    stmt = select(User).options(selectinload(User.assigned_departments)).order_by(User.id)
    return list(db.scalars(stmt).all())


@router.get("/departments/{department_id}", response_model=DepartmentOut)
@department_scoped("department_id")
def get_department(department_id: str, db: Session = Depends(get_db)) -> Department:
    # Scope only: the target department must be one the caller reaches.
    department = db.get(Department, department_id)
    if department is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    return department


@router.get("/departments/{department_id}/employees", response_model=list[EmployeeOut])
@requires(AnyOf(["employee.view_team", "employee.view_all"]))
@department_scoped("department_id")
def department_employees(department_id: str, db: Session = Depends(get_db)) -> list[Employee]:
    # No route rule needed: the decorators carry the requirement.
    stmt = select(Employee).where(Employee.department_id == department_id).order_by(Employee.id)
    return list(db.scalars(stmt).all())


@router.get("/roles", dependencies=[Depends(require_roles("SuperAdmin"))])
def list_roles(catalog: PermissionCatalog = Depends(get_catalog)) -> list[dict]:
    return [
        {
            "role": role.value,
            "display_name": catalog.display_name(role),
            "description": catalog.description(role),
            "scope": catalog.scope_of(role).value,
            "permissions": sorted(catalog.permissions_for(role)),
        }
        for role in catalog.roles
    ]


@router.get(
    "/departments/{department_id}/leave-requests",
    response_model=list[LeaveRequestOut],
    dependencies=[Depends(require_permission(AnyOf(["leave.view_team", "leave.view_all"]), "department_id"))],
)
def department_leave_requests(department_id: str, db: Session = Depends(get_db)) -> list[LeaveRequest]:
    stmt = select(LeaveRequest).where(LeaveRequest.department_id == department_id).order_by(LeaveRequest.id)
    return list(db.scalars(stmt).all())
