"""Closed role enumeration and tolerant role parsing."""

from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Role(str, Enum):
    SUPER_ADMIN = "SuperAdmin"
    HR_MANAGER = "HRManager"
    HR_ADMINISTRATOR = "HRAdministrator"
    EMPLOYEE = "Employee"

    # Sentinel for absent / unrecognized roles. Never present in the catalog.
    UNKNOWN = "Unknown"

    @classmethod
    def known(cls) -> tuple[Role, ...]:
        """Every role the catalog must define (the sentinel excluded)."""
        return tuple(r for r in cls if r is not cls.UNKNOWN)


# Spellings seen in stored user records and older tokens.
_ALIASES: dict[str, Role] = {
    "superadmin": Role.SUPER_ADMIN,
    "super_admin": Role.SUPER_ADMIN,
    "super admin": Role.SUPER_ADMIN,
    "hrmanager": Role.HR_MANAGER,
    "hr_manager": Role.HR_MANAGER,
    "hr manager": Role.HR_MANAGER,
    "hradministrator": Role.HR_ADMINISTRATOR,
    "hr_administrator": Role.HR_ADMINISTRATOR,
    "hr administrator": Role.HR_ADMINISTRATOR,
    "hr_admin": Role.HR_ADMINISTRATOR,
    "hr": Role.HR_ADMINISTRATOR,
    "employee": Role.EMPLOYEE,
}


def parse_role(value: object) -> Role:
    """
    Map a raw role value onto the closed enumeration.

    Anything that is not a recognized spelling becomes ``Role.UNKNOWN``;
    it is never coerced to a real role.
    """

    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return Role.UNKNOWN

    role = _ALIASES.get(value.strip().lower())
    if role is None:
        logger.debug("Unrecognized role value %r treated as unknown", value)
        return Role.UNKNOWN
    return role
