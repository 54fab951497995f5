from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .departments import normalize_department_id
from .roles import Role, parse_role


def _normalized_departments(values: Iterable[object] | None) -> frozenset[str]:
    departments: set[str] = set()
    for raw in values or ():
        dept = normalize_department_id(raw)
        if dept is not None:
            departments.add(dept)
    return frozenset(departments)


@dataclass(frozen=True)
class Subject:
    """
    The actor a decision is made for.

    Built per request by the identity layer. Every field is normalized on
    construction, whichever way the instance is created: ``role`` is parsed
    into ``Role`` (unrecognized values become ``Role.UNKNOWN``) and
    ``assigned_departments`` holds normalized ids only, with unusable entries
    dropped.
    """

    role: Role
    is_authenticated: bool
    assigned_departments: frozenset[str] = field(default_factory=frozenset)
    user_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", parse_role(self.role))
        object.__setattr__(self, "is_authenticated", bool(self.is_authenticated))
        object.__setattr__(self, "assigned_departments", _normalized_departments(self.assigned_departments))
        if self.user_id is not None:
            object.__setattr__(self, "user_id", str(self.user_id))

    @classmethod
    def build(
        cls,
        role: object,
        *,
        is_authenticated: bool = True,
        assigned_departments: Iterable[object] | None = None,
        user_id: object = None,
    ) -> Subject:
        return cls(
            role=role,  # type: ignore[arg-type]
            is_authenticated=is_authenticated,
            assigned_departments=assigned_departments,  # type: ignore[arg-type]
            user_id=user_id,  # type: ignore[arg-type]
        )

    @classmethod
    def anonymous(cls) -> Subject:
        return cls(role=Role.UNKNOWN, is_authenticated=False)
