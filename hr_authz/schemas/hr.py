from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: str
    first_name: str
    last_name: str
    email: str
    department_id: str
    position: str | None
    hire_date: date | None
    created_at: datetime


class LeaveRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    department_id: str
    start_date: date
    end_date: date
    reason: str | None
    status: str
    decided_by: int | None
