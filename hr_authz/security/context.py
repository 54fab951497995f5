from __future__ import annotations

from dataclasses import dataclass

from hr_authz.core import Subject


@dataclass(frozen=True)
class AuthzContext:
    """
    Per-request authorization context.

    Attached to:
    - request.state (FastAPI request lifetime)
    - Session.info (SQLAlchemy session lifetime), for query scoping
    """

    subject: Subject

    # Scope decisions (driven by route rules / decorators)
    department_scoped: bool

    # None: not narrowed. Otherwise the departments queries are limited to.
    visible_departments: frozenset[str] | None
