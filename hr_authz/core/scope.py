"""
Department scope resolution.

Roles fall into three groups, as designated by the catalog:

- unrestricted (SuperAdmin, HRAdministrator): every department.
- department-scoped (HRManager): only the subject's assigned departments.
  An empty assignment reaches nothing.
- everything else (Employee, unknown): no department-level reach. Access to
  one's own record is decided elsewhere.
"""

from __future__ import annotations

import logging

from .catalog import PermissionCatalog, RoleScope
from .departments import normalize_department_id
from .subject import Subject

logger = logging.getLogger(__name__)


class ScopeResolver:
    def __init__(self, catalog: PermissionCatalog) -> None:
        self._catalog = catalog

    def is_unrestricted(self, role: object) -> bool:
        return self._catalog.scope_of(role) is RoleScope.UNRESTRICTED

    def is_department_scoped(self, role: object) -> bool:
        return self._catalog.scope_of(role) is RoleScope.DEPARTMENT

    def can_access(self, subject: Subject, resource_department_id: object) -> bool:
        if self.is_unrestricted(subject.role):
            return True

        if not self.is_department_scoped(subject.role):
            return False

        dept = normalize_department_id(resource_department_id)
        if dept is None:
            logger.debug("Unrecognized department reference denied user_id=%s", subject.user_id)
            return False

        return dept in subject.assigned_departments

    def visible_departments(self, subject: Subject) -> frozenset[str] | None:
        """
        Departments ``subject`` may see, for narrowing list queries.

        ``None`` means no narrowing (unrestricted role). Otherwise the exact
        set, which is empty for roles without department reach.
        """

        if self.is_unrestricted(subject.role):
            return None
        if self.is_department_scoped(subject.role):
            return subject.assigned_departments
        return frozenset()
