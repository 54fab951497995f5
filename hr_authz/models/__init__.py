from hr_authz.models.hr import Employee, LeaveRequest
from hr_authz.models.security import Department, User

__all__ = ["Department", "Employee", "LeaveRequest", "User"]
