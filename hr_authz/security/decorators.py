from __future__ import annotations

from collections.abc import Callable

from hr_authz.core import Requirement


def requires(requirement: Requirement) -> Callable:
    """
    Declare the permission requirement of a route handler.

    Implementation detail:
    - This decorator does NOT perform the check itself.
    - It attaches metadata that the global ``enforce_authorization``
      dependency reads after routing. Keys are validated against the
      catalog at app startup.
    """

    def decorator(fn: Callable) -> Callable:
        setattr(fn, "__authz_requirement__", requirement)
        return fn

    return decorator


def roles_allowed(*roles: str) -> Callable:
    """Role allowlist for a handler (role-only check, no permissions)."""

    def decorator(fn: Callable) -> Callable:
        existing = set(getattr(fn, "__authz_roles__", set()))
        setattr(fn, "__authz_roles__", existing | set(roles))
        return fn

    return decorator


def department_scoped(param: str | None = None) -> Callable:
    """
    Enable department scoping for a handler.

    ``param`` names the path/query parameter holding the target department;
    without it only list queries are narrowed.
    """

    def decorator(fn: Callable) -> Callable:
        setattr(fn, "__authz_department_scoped__", True)
        if param:
            setattr(fn, "__authz_department_param__", param)
        return fn

    return decorator


def public() -> Callable:
    """Mark a handler as reachable without authentication."""

    def decorator(fn: Callable) -> Callable:
        setattr(fn, "__authz_public__", True)
        return fn

    return decorator
