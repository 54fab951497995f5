from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str
    is_active: bool
    assigned_departments: list[DepartmentOut]


class SubjectOut(BaseModel):
    """What the caller is, as the authorization core sees it."""

    user_id: str | None
    role: str
    role_display_name: str
    is_authenticated: bool
    assigned_departments: list[str]
    permissions: list[str]
