"""
Permission catalog and YAML loader.

The catalog is the static role -> permission table every decision consults.

Key ideas:
- Load YAML once at startup (modules + roles).
- Validate eagerly: a missing role or a malformed / undefined permission key
  is a startup error, never a runtime "deny".
- No inheritance. Each role lists its complete permission set, so the file
  alone answers "what can this role do?".
- After construction the catalog is read-only and safe to share.

Expected shape:

    catalog:
      modules:
        leave:
          approve_team: leave.approve.team
          approve_any: leave.approve.any
      roles:
        HRManager:
          scope: department
          display_name: HR Manager
          permissions: [leave.approve.team, ...]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .roles import Role

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[1] / "config" / "permission_catalog.yaml"


class CatalogConfigError(ValueError):
    """Raised when the permission catalog is incomplete or malformed."""


class RoleScope(str, Enum):
    UNRESTRICTED = "unrestricted"
    DEPARTMENT = "department"
    NONE = "none"


# ---- Raw config models ---------------------------------------------------------------


class RoleEntry(BaseModel):
    scope: RoleScope = RoleScope.NONE
    display_name: str | None = None
    description: str | None = None
    permissions: list[str] = Field(default_factory=list)


class CatalogModel(BaseModel):
    modules: dict[str, dict[str, str]] = Field(default_factory=dict)
    roles: dict[str, RoleEntry] = Field(default_factory=dict)


# ---- Runtime catalog -----------------------------------------------------------------


@dataclass(frozen=True)
class RoleDef:
    """Resolved definition of one role."""

    role: Role
    scope: RoleScope
    permissions: frozenset[str]
    display_name: str
    description: str


def _is_malformed_key(key: object) -> bool:
    return not isinstance(key, str) or not key or any(ch.isspace() for ch in key)


class PermissionCatalog:
    """
    Immutable role -> permission-set table.

    Build with ``from_mapping`` / ``load_catalog``; the constructor expects
    already-validated definitions.
    """

    def __init__(
        self,
        modules: Mapping[str, Mapping[str, str]],
        roles: Mapping[Role, RoleDef],
    ) -> None:
        self._modules = MappingProxyType({m: MappingProxyType(dict(a)) for m, a in modules.items()})
        self._roles = MappingProxyType(dict(roles))
        self._all = frozenset(key for actions in modules.values() for key in actions.values())

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> PermissionCatalog:
        """Validate a parsed ``catalog`` section and build the catalog."""

        try:
            model = CatalogModel.model_validate(raw)
        except ValidationError as exc:
            raise CatalogConfigError(f"invalid catalog structure: {exc}") from exc

        # Parse modules
        seen: dict[str, str] = {}
        for module, actions in model.modules.items():
            for action, key in actions.items():
                if _is_malformed_key(key):
                    raise CatalogConfigError(f"permission {module}.{action} has malformed key {key!r}")
                if key in seen:
                    raise CatalogConfigError(
                        f"permission key {key!r} defined twice ({seen[key]} and {module}.{action})"
                    )
                seen[key] = f"{module}.{action}"

        # Parse roles
        roles: dict[Role, RoleDef] = {}
        for name, entry in model.roles.items():
            try:
                role = Role(name)
            except ValueError as exc:
                raise CatalogConfigError(f"catalog defines unknown role {name!r}") from exc
            if role is Role.UNKNOWN:
                raise CatalogConfigError("the unknown-role sentinel cannot hold permissions")

            malformed = [p for p in entry.permissions if _is_malformed_key(p)]
            if malformed:
                raise CatalogConfigError(f"role {name!r} lists malformed permission keys: {malformed!r}")

            unknown = set(entry.permissions).difference(seen)
            if unknown:
                raise CatalogConfigError(f"role {name!r} references unknown permissions: {sorted(unknown)}")

            roles[role] = RoleDef(
                role=role,
                scope=entry.scope,
                permissions=frozenset(entry.permissions),
                display_name=entry.display_name or name,
                description=entry.description or "",
            )

        missing = [r.value for r in Role.known() if r not in roles]
        if missing:
            raise CatalogConfigError(f"catalog is missing roles: {missing}")

        return cls(model.modules, roles)

    # ---- Lookups --------------------------------------------------------------------

    @property
    def modules(self) -> Mapping[str, Mapping[str, str]]:
        return self._modules

    @property
    def roles(self) -> tuple[Role, ...]:
        return tuple(self._roles.keys())

    def permission_key(self, module: str, action: str) -> str:
        try:
            return self._modules[module][action]
        except KeyError as exc:
            raise CatalogConfigError(f"no permission defined for {module}.{action}") from exc

    def permissions_for(self, role: object) -> frozenset[str]:
        """The role's permission set; empty for anything outside the enumeration."""
        role_def = self._roles.get(role) if isinstance(role, Role) else None
        if role_def is None:
            return frozenset()
        return role_def.permissions

    def is_known_permission(self, key: str) -> bool:
        return key in self._all

    def all_permissions(self) -> frozenset[str]:
        return self._all

    def validate_keys(self, keys: Iterable[str]) -> None:
        """Raise ``CatalogConfigError`` if any key is not defined in the catalog."""
        unknown = sorted({k for k in keys if not self.is_known_permission(k)})
        if unknown:
            raise CatalogConfigError(f"undefined permission keys: {unknown}")

    def scope_of(self, role: object) -> RoleScope:
        role_def = self._roles.get(role) if isinstance(role, Role) else None
        return role_def.scope if role_def else RoleScope.NONE

    def display_name(self, role: object) -> str:
        role_def = self._roles.get(role) if isinstance(role, Role) else None
        return role_def.display_name if role_def else str(getattr(role, "value", role))

    def description(self, role: object) -> str:
        role_def = self._roles.get(role) if isinstance(role, Role) else None
        return role_def.description if role_def else ""


def load_catalog(path: Path) -> PermissionCatalog:
    raw_text = path.read_text(encoding="utf-8")
    raw: dict[str, Any] = yaml.safe_load(raw_text) or {}

    if not isinstance(raw, dict) or "catalog" not in raw:
        raise CatalogConfigError(f"Missing top-level 'catalog' key in config: {path}")

    catalog = PermissionCatalog.from_mapping(raw["catalog"] or {})
    logger.info(
        "Loaded permission catalog path=%s roles=%d permissions=%d",
        path,
        len(catalog.roles),
        len(catalog.all_permissions()),
    )
    return catalog


@lru_cache
def default_catalog() -> PermissionCatalog:
    """The packaged catalog, loaded once per process."""
    return load_catalog(DEFAULT_CATALOG_PATH)
