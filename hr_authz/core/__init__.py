"""
Authorization decision core.

This package has no dependency on the web or database layers
(hr_authz.db, hr_authz.security). Build an ``Authorizer`` from a
``PermissionCatalog`` and ask it about a ``Subject`` and a requirement.
"""

from .catalog import CatalogConfigError, PermissionCatalog, RoleScope, default_catalog, load_catalog
from .departments import department_of, normalize_department_id
from .engine import DecisionEngine
from .facade import Authorizer
from .gating import Gate, GuardAction, GuardOutcome, RoleGuard, RouteGuard, SessionState
from .requirements import AllOf, AnyOf, Requirement, Single, requirement_from_config
from .roles import Role, parse_role
from .scope import ScopeResolver
from .subject import Subject

__all__ = [
    "AllOf",
    "AnyOf",
    "Authorizer",
    "CatalogConfigError",
    "DecisionEngine",
    "Gate",
    "GuardAction",
    "GuardOutcome",
    "PermissionCatalog",
    "Requirement",
    "Role",
    "RoleGuard",
    "RoleScope",
    "RouteGuard",
    "ScopeResolver",
    "SessionState",
    "Single",
    "Subject",
    "default_catalog",
    "department_of",
    "load_catalog",
    "normalize_department_id",
    "parse_role",
    "requirement_from_config",
]
