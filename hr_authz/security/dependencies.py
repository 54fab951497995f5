from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.routing import APIRoute
from sqlalchemy.orm import Session

from hr_authz.core import (
    Authorizer,
    GuardAction,
    PermissionCatalog,
    Requirement,
    RoleGuard,
    RouteGuard,
    SessionState,
    Subject,
)
from hr_authz.db.session import get_db
from hr_authz.security.context import AuthzContext
from hr_authz.security.identity import resolve_subject
from hr_authz.security.route_rules import RouteRules
from hr_authz.settings import Settings

logger = logging.getLogger(__name__)


def _app_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(f"{name} not loaded. Did app startup run?")
    return value


def get_app_settings(request: Request) -> Settings:
    return _app_state(request, "settings")


def get_catalog(request: Request) -> PermissionCatalog:
    return _app_state(request, "catalog")


def get_authorizer(request: Request) -> Authorizer:
    return _app_state(request, "authorizer")


def get_route_rules(request: Request) -> RouteRules:
    return _app_state(request, "route_rules")


def get_subject(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db, use_cache=False),
) -> Subject:
    """The request's subject; resolved once per request and kept on request.state."""

    subject = getattr(request.state, "subject", None)
    if subject is None:
        subject = resolve_subject(request, db, settings)
        request.state.subject = subject
    return subject


def get_session_state(request: Request) -> SessionState | None:
    """
    Pending while the identity backend is still starting; None otherwise
    (the caller resolves the subject).
    """

    if not getattr(request.app.state, "identity_ready", False):
        return SessionState.pending()
    return None


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def _unauthenticated() -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")


def _department_reference(request: Request, param: str | None) -> dict[str, str] | None:
    if not param:
        return None
    raw = request.path_params.get(param)
    if raw is None:
        raw = request.query_params.get(param)
    if raw is None:
        return None
    return {"department_id": raw}


def enforce_authorization(
    request: Request,
    rules: RouteRules = Depends(get_route_rules),
    authorizer: Authorizer = Depends(get_authorizer),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db, use_cache=False),
) -> None:
    """
    Global authorization dependency (route rules + decorator metadata).

    Runs after routing, so handler decorators are visible here. The
    401/403 split is made from ``subject.is_authenticated`` before
    ``authorize`` is called; the decision itself is only ever a boolean.
    """

    rule = rules.match(request.url.path, request.method)

    endpoint = request.scope.get("endpoint")
    if endpoint is not None and getattr(endpoint, "__authz_public__", False):
        return

    decorator_requirement = getattr(endpoint, "__authz_requirement__", None) if endpoint else None
    decorator_roles = set(getattr(endpoint, "__authz_roles__", set())) if endpoint else set()
    decorator_scoped = bool(getattr(endpoint, "__authz_department_scoped__", False)) if endpoint else False
    decorator_param = getattr(endpoint, "__authz_department_param__", None) if endpoint else None

    requirement: Requirement | None = decorator_requirement or rule.requirement
    department_param = decorator_param or rule.department_param
    department_scoped = decorator_scoped or bool(department_param)

    auth_required = rule.auth_required or bool(requirement) or bool(decorator_roles) or department_scoped
    if not auth_required:
        return

    subject = get_subject(request, settings, db)
    if not subject.is_authenticated:
        logger.info("Unauthenticated request path=%s method=%s", request.url.path, request.method)
        raise _unauthenticated()

    allowed_roles = set(rule.allowed_roles or ()) | decorator_roles
    if allowed_roles and not RoleGuard(allowed_roles).allows(subject):
        logger.info("Role %s rejected path=%s user_id=%s", subject.role.value, request.url.path, subject.user_id)
        raise _forbidden("Insufficient role")

    resource = _department_reference(request, department_param)
    if requirement is not None:
        allowed = authorizer.authorize(subject, requirement, resource)
    elif resource is not None:
        # Department-scoped without a permission: the target department alone.
        allowed = authorizer.scope.can_access(subject, resource["department_id"])
    else:
        allowed = True

    if not allowed:
        logger.info(
            "Forbidden path=%s method=%s user_id=%s requirement=%s department=%s",
            request.url.path,
            request.method,
            subject.user_id,
            requirement,
            resource,
        )
        raise _forbidden("You do not have permission to access this resource.")

    context = AuthzContext(
        subject=subject,
        department_scoped=department_scoped,
        visible_departments=authorizer.scope.visible_departments(subject),
    )
    request.state.authz = context
    # FastAPI may hand this same session to the handler.
    db.info["authz"] = context


def require_permission(requirement: Requirement, department_param: str | None = None) -> Callable:
    """
    Per-route dependency: 401 when unauthenticated, 403 when ``authorize``
    denies. Returns the subject for the handler to use.
    """

    def dependency(
        request: Request,
        subject: Subject = Depends(get_subject),
        authorizer: Authorizer = Depends(get_authorizer),
    ) -> Subject:
        if not subject.is_authenticated:
            raise _unauthenticated()
        resource = _department_reference(request, department_param)
        if not authorizer.authorize(subject, requirement, resource):
            raise _forbidden("You do not have permission to access this resource.")
        return subject

    dependency.__authz_requirement__ = requirement  # type: ignore[attr-defined]
    return dependency


def require_roles(*roles: str) -> Callable:
    """Per-route role-only dependency."""

    guard = RoleGuard(roles)

    def dependency(subject: Subject = Depends(get_subject)) -> Subject:
        if not subject.is_authenticated:
            raise _unauthenticated()
        if not guard.allows(subject):
            raise _forbidden("Insufficient role")
        return subject

    return dependency


def guard_page(allowed_roles: Iterable[str] | None = None) -> Callable:
    """
    Page navigation guard.

    - identity backend not ready -> 503 with Retry-After (neutral wait)
    - not logged in -> 303 to the login page, carrying ``next``
    - role outside the allowlist -> 303 to the unauthorized page
    """

    roles = None if allowed_roles is None else tuple(allowed_roles)

    def dependency(
        request: Request,
        settings: Settings = Depends(get_app_settings),
        pending: SessionState | None = Depends(get_session_state),
        db: Session = Depends(get_db, use_cache=False),
    ) -> Subject | None:
        guard = RouteGuard(settings.login_path, settings.unauthorized_path, roles)

        session = pending or SessionState.ready(get_subject(request, settings, db))
        destination = request.url.path
        if request.url.query:
            destination = f"{destination}?{request.url.query}"

        outcome = guard.check(session, destination)
        if outcome.action is GuardAction.WAIT:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Session is being established",
                headers={"Retry-After": "1"},
            )
        if outcome.action is not GuardAction.ALLOW:
            raise HTTPException(status_code=status.HTTP_303_SEE_OTHER, headers={"Location": outcome.location or "/"})
        return session.subject

    return dependency


def validate_declared_requirements(app: FastAPI, catalog: PermissionCatalog) -> None:
    """
    Check every requirement declared on handlers and route dependencies
    against the catalog. Raises ``CatalogConfigError`` on undefined keys.
    """

    def walk(dependant) -> None:
        for dep in dependant.dependencies:
            requirement = getattr(dep.call, "__authz_requirement__", None)
            if requirement is not None:
                catalog.validate_keys(requirement.permissions())
            walk(dep)

    for route in app.routes:
        if not isinstance(route, APIRoute):
            continue
        requirement = getattr(route.endpoint, "__authz_requirement__", None)
        if requirement is not None:
            catalog.validate_keys(requirement.permissions())
        walk(route.dependant)
