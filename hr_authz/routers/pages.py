from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from hr_authz.core import AnyOf, Authorizer, Gate, Single, Subject
from hr_authz.security.decorators import public
from hr_authz.security.dependencies import get_authorizer, guard_page

router = APIRouter(prefix="/pages", tags=["pages"])
entry_router = APIRouter(tags=["pages"])

# Dashboard widgets and the permission each one needs.
_WIDGETS = (
    ("my_attendance", Single("attendance.view_own")),
    ("team_attendance", AnyOf(["attendance.view_team", "attendance.view_all"])),
    ("pending_leave_approvals", AnyOf(["leave.approve_team", "leave.approve_any"])),
    ("payroll_run", Single("payroll.process")),
    ("audit_log", Single("system.view_audit_logs")),
)


@entry_router.get("/login")
@public()
def login_page(request: Request) -> dict:
    return {"page": "login", "next": request.query_params.get("next")}


@entry_router.get("/unauthorized")
@public()
def unauthorized_page() -> dict:
    return {"page": "unauthorized"}


@router.get("/dashboard")
def dashboard(
    subject: Subject = Depends(guard_page()),
    authorizer: Authorizer = Depends(get_authorizer),
) -> dict:
    widgets = []
    for name, requirement in _WIDGETS:
        rendered = Gate(authorizer, requirement, granted=name).render(subject)
        if rendered is not None:
            widgets.append(rendered)
    return {"page": "dashboard", "widgets": widgets}


@router.get("/settings")
def settings_page(subject: Subject = Depends(guard_page(["SuperAdmin", "HRAdministrator"]))) -> dict:
    return {"page": "settings", "role": subject.role.value}
