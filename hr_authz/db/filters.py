from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import Session, with_loader_criteria


@event.listens_for(Session, "do_orm_execute")
def _apply_department_scope(execute_state) -> None:
    """
    Transparent department scoping.

    When the route is department-scoped, queries against department-tagged
    models only return rows in the departments the subject may see:
        db.scalars(select(Employee)).all()
    An unrestricted subject is not narrowed; a subject with no reach sees
    nothing.
    """

    if not execute_state.is_select:
        return

    authz = execute_state.session.info.get("authz")
    if authz is None or not authz.department_scoped:
        return

    visible = authz.visible_departments
    if visible is None:
        return

    # Local import to avoid cycles.
    from hr_authz.models.hr import Employee, LeaveRequest  # noqa: WPS433 (local import)

    dept_ids = sorted(visible)
    execute_state.statement = execute_state.statement.options(
        with_loader_criteria(Employee, lambda cls: cls.department_id.in_(dept_ids), include_aliases=True),
        with_loader_criteria(LeaveRequest, lambda cls: cls.department_id.in_(dept_ids), include_aliases=True),
    )
