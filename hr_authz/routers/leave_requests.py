from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from hr_authz.core import AnyOf, Authorizer, Subject
from hr_authz.db.session import get_db
from hr_authz.models.hr import LeaveRequest
from hr_authz.schemas.hr import LeaveRequestOut
from hr_authz.security.dependencies import get_authorizer, get_subject

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leave-requests", tags=["leave_requests"])

APPROVE_LEAVE = AnyOf(["leave.approve_team", "leave.approve_any"])


@router.get("", response_model=list[LeaveRequestOut])
def list_leave_requests(
    department_id: str | None = None,
    status_filter: str | None = None,
    db: Session = Depends(get_db),
) -> list[LeaveRequest]:
    stmt = select(LeaveRequest).order_by(LeaveRequest.id)
    if department_id is not None:
        stmt = stmt.where(LeaveRequest.department_id == department_id)
    if status_filter is not None:
        stmt = stmt.where(LeaveRequest.status == status_filter)
    return list(db.scalars(stmt).all())


@router.post("/{id}/approve", response_model=LeaveRequestOut)
def approve_leave_request(
    id: int,
    db: Session = Depends(get_db),
    subject: Subject = Depends(get_subject),
    authorizer: Authorizer = Depends(get_authorizer),
) -> LeaveRequest:
    leave = db.scalars(select(LeaveRequest).where(LeaveRequest.id == id)).first()
    if leave is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Leave request not found")

    # The route rule checked the permission; this adds the row's department.
    if not authorizer.authorize(subject, APPROVE_LEAVE, leave):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Leave request is outside your departments")

    if leave.status != "pending":
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Leave request already {leave.status}")

    leave.status = "approved"
    leave.decided_by = int(subject.user_id) if subject.user_id is not None else None
    db.commit()
    db.refresh(leave)
    logger.info("Leave request approved id=%s by user_id=%s", leave.id, subject.user_id)
    return leave
