"""
Department identifier normalization.

Department references arrive in two shapes: a bare id (``"D1"``, ``42``) or
an embedded record carrying an id (``{"_id": "D1", "name": "IT"}``, an ORM
row with ``.id``). Every comparison goes through ``normalize_department_id``
so that the two shapes are never compared directly.
"""

from __future__ import annotations

from collections.abc import Mapping

_ID_KEYS = ("id", "_id", "department_id", "departmentId")
_RESOURCE_KEYS = ("department_id", "departmentId", "department")


def _bare_id(value: object) -> str | None:
    # bool is an int subclass; a flag is never a department id.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def normalize_department_id(value: object) -> str | None:
    """
    Return the canonical id for ``value`` or ``None`` when it has none.

    Total and idempotent: never raises, and a normalized id normalizes to
    itself. Only one level of embedding is unwrapped.
    """

    if value is None or isinstance(value, (str, int)):
        return _bare_id(value)

    if isinstance(value, Mapping):
        for key in _ID_KEYS:
            if key in value:
                return _bare_id(value[key])
        return None

    for attr in ("id", "department_id"):
        try:
            candidate = getattr(value, attr)
        except Exception:
            continue
        return _bare_id(candidate)
    return None


class _NoDepartment:
    def __repr__(self) -> str:
        return "NO_DEPARTMENT"


# Marker for resources that carry no department field at all.
NO_DEPARTMENT = _NoDepartment()


def department_field(resource: object) -> object:
    """
    Return the raw department reference a resource carries.

    ``NO_DEPARTMENT`` when the resource has no department field; otherwise
    the field's value as-is (possibly ``None`` or malformed), for the scope
    resolver to normalize.
    """

    if resource is None:
        return NO_DEPARTMENT

    # A bare id stands for the department itself.
    if isinstance(resource, (str, int)):
        return resource

    if isinstance(resource, Mapping):
        for key in _RESOURCE_KEYS:
            if key in resource:
                return resource[key]
        return NO_DEPARTMENT

    for attr in _RESOURCE_KEYS:
        try:
            return getattr(resource, attr)
        except Exception:
            continue
    return NO_DEPARTMENT


def department_of(resource: object) -> str | None:
    """Read and normalize the department a resource is tagged with."""

    raw = department_field(resource)
    if raw is NO_DEPARTMENT:
        return None
    return normalize_department_id(raw)
