"""
Authorization facade: the single call surface for gates, guards and routes.

Algorithm for ``authorize(subject, requirement, resource)``:

1. No subject, or subject not authenticated -> deny, before anything else.
2. Permission check via the decision engine. Deny -> stop here; the scope
   resolver is never consulted for a subject lacking the base permission.
3. If a resource is given and carries a department, the scope resolver must
   also grant access to that department.
4. Otherwise the permission result stands alone.

Every failure is the same ``False``; callers that need to tell "not logged
in" from "forbidden" inspect ``subject.is_authenticated`` themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TypeVar

from .catalog import PermissionCatalog
from .departments import NO_DEPARTMENT, department_field
from .engine import DecisionEngine
from .requirements import Requirement
from .scope import ScopeResolver
from .subject import Subject

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Authorizer:
    def __init__(
        self,
        catalog: PermissionCatalog,
        engine: DecisionEngine | None = None,
        scope: ScopeResolver | None = None,
    ) -> None:
        self._catalog = catalog
        self._engine = engine or DecisionEngine(catalog)
        self._scope = scope or ScopeResolver(catalog)

    @property
    def catalog(self) -> PermissionCatalog:
        return self._catalog

    @property
    def scope(self) -> ScopeResolver:
        return self._scope

    def authorize(
        self,
        subject: Subject | None,
        requirement: Requirement,
        resource: object = None,
    ) -> bool:
        if subject is None or not subject.is_authenticated:
            logger.debug("authz: denied unauthenticated requirement=%s", requirement)
            return False

        if not self._engine.evaluate(subject.role, requirement):
            logger.debug(
                "authz: denied role=%s user_id=%s requirement=%s",
                subject.role.value,
                subject.user_id,
                requirement,
            )
            return False

        dept = department_field(resource)
        if dept is NO_DEPARTMENT:
            logger.debug(
                "authz: allowed role=%s user_id=%s requirement=%s",
                subject.role.value,
                subject.user_id,
                requirement,
            )
            return True

        allowed = self._scope.can_access(subject, dept)
        logger.debug(
            "authz: %s role=%s user_id=%s requirement=%s department=%s",
            "allowed" if allowed else "denied (scope)",
            subject.role.value,
            subject.user_id,
            requirement,
            dept,
        )
        return allowed

    def filter_authorized(
        self,
        subject: Subject | None,
        requirement: Requirement,
        resources: Iterable[T],
    ) -> list[T]:
        """Keep the resources ``authorize`` grants, in their original order."""
        return [r for r in resources if self.authorize(subject, requirement, r)]
