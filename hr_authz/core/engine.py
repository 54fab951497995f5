"""
Permission decision engine.

Answers one question: does a role satisfy a declared requirement? The only
input besides the role is the catalog; there is no role hierarchy and no
hidden fallback, so an unknown role, an unknown key or an empty requirement
all come out as a plain ``False``.
"""

from __future__ import annotations

import logging

from .catalog import PermissionCatalog
from .requirements import AllOf, AnyOf, Requirement, Single

logger = logging.getLogger(__name__)


class DecisionEngine:
    def __init__(self, catalog: PermissionCatalog) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> PermissionCatalog:
        return self._catalog

    def evaluate(self, role: object, requirement: Requirement) -> bool:
        """
        Evaluate ``requirement`` against the permissions ``role`` holds.

        - ``Single(p)``: ``p`` is held.
        - ``AnyOf(ps)``: ``ps`` is non-empty and at least one is held.
        - ``AllOf(ps)``: ``ps`` is non-empty and every one is held.
        """

        held = self._catalog.permissions_for(role)

        if isinstance(requirement, Single):
            return requirement.permission in held

        if isinstance(requirement, AnyOf):
            if not requirement.keys:
                logger.debug("Empty any() requirement denied role=%s", role)
                return False
            return any(p in held for p in requirement.keys)

        if isinstance(requirement, AllOf):
            if not requirement.keys:
                logger.debug("Empty all() requirement denied role=%s", role)
                return False
            return all(p in held for p in requirement.keys)

        logger.warning("Unsupported requirement type %s denied", type(requirement).__name__)
        return False
