"""
Framework-independent gates and guards.

Thin adapters over ``Authorizer``; none of them keeps state between calls,
so a changed subject is always judged afresh.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar
from urllib.parse import urlencode

from .facade import Authorizer
from .requirements import Requirement
from .roles import Role, parse_role
from .subject import Subject

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _resolve(branch: T | Callable[[], T] | None) -> T | None:
    return branch() if callable(branch) else branch


class Gate(Generic[T]):
    """
    Declarative conditional render.

    ``granted`` / ``fallback`` may be values or zero-argument callables; only
    the chosen branch is called. The fallback defaults to nothing (``None``).
    """

    def __init__(
        self,
        authorizer: Authorizer,
        requirement: Requirement,
        granted: T | Callable[[], T],
        fallback: T | Callable[[], T] | None = None,
    ) -> None:
        authorizer.catalog.validate_keys(requirement.permissions())
        self._authorizer = authorizer
        self.requirement = requirement
        self._granted = granted
        self._fallback = fallback

    def allows(self, subject: Subject | None, resource: object = None) -> bool:
        return self._authorizer.authorize(subject, self.requirement, resource)

    def render(self, subject: Subject | None, resource: object = None) -> T | None:
        if self.allows(subject, resource):
            return _resolve(self._granted)
        return _resolve(self._fallback)


@dataclass(frozen=True)
class SessionState:
    """What the identity layer currently knows about the session."""

    subject: Subject | None
    loading: bool = False

    @classmethod
    def pending(cls) -> SessionState:
        return cls(subject=None, loading=True)

    @classmethod
    def ready(cls, subject: Subject | None) -> SessionState:
        return cls(subject=subject, loading=False)


class GuardAction(str, Enum):
    ALLOW = "allow"
    WAIT = "wait"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_UNAUTHORIZED = "redirect_unauthorized"


@dataclass(frozen=True)
class GuardOutcome:
    action: GuardAction
    location: str | None = None

    @property
    def allowed(self) -> bool:
        return self.action is GuardAction.ALLOW


def _role_set(roles: Iterable[object]) -> frozenset[Role]:
    parsed = {parse_role(r) for r in roles}
    parsed.discard(Role.UNKNOWN)
    return frozenset(parsed)


class RoleGuard:
    """Role-membership check only: no permissions, no scope."""

    def __init__(self, allowed_roles: Iterable[object]) -> None:
        self.allowed_roles = _role_set(allowed_roles)

    def allows(self, subject: Subject | None) -> bool:
        if subject is None or not subject.is_authenticated:
            return False
        return subject.role in self.allowed_roles


class RouteGuard:
    """
    Navigation guard.

    Order: session still loading -> wait; not authenticated -> login
    (keeping the requested destination); role outside the allowlist ->
    unauthorized page; otherwise allow. ``allowed_roles=None`` means any
    authenticated role.
    """

    def __init__(
        self,
        login_path: str = "/login",
        unauthorized_path: str = "/unauthorized",
        allowed_roles: Iterable[object] | None = None,
    ) -> None:
        self.login_path = login_path
        self.unauthorized_path = unauthorized_path
        self._roles = None if allowed_roles is None else RoleGuard(allowed_roles)

    def login_location(self, destination: str) -> str:
        return f"{self.login_path}?{urlencode({'next': destination})}"

    def check(self, session: SessionState, destination: str) -> GuardOutcome:
        if session.loading:
            return GuardOutcome(GuardAction.WAIT)

        subject = session.subject
        if subject is None or not subject.is_authenticated:
            logger.info("Guard: unauthenticated navigation to %s", destination)
            return GuardOutcome(GuardAction.REDIRECT_LOGIN, self.login_location(destination))

        if self._roles is not None and not self._roles.allows(subject):
            logger.info(
                "Guard: role %s not allowed for %s user_id=%s",
                subject.role.value,
                destination,
                subject.user_id,
            )
            return GuardOutcome(GuardAction.REDIRECT_UNAUTHORIZED, self.unauthorized_path)

        return GuardOutcome(GuardAction.ALLOW)
