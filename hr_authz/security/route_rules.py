from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from hr_authz.core import PermissionCatalog, Requirement, Role, parse_role, requirement_from_config

logger = logging.getLogger(__name__)


class RouteRuleConfigError(ValueError):
    """Raised when the route rules file is invalid or names undefined permissions."""


class DefaultRule(BaseModel):
    auth_required: bool = True
    roles: list[str] = Field(default_factory=list)


class RouteRule(BaseModel):
    path: str
    methods: list[str] = Field(default_factory=lambda: ["GET"])

    auth_required: bool | None = None
    roles: list[str] = Field(default_factory=list)
    match: Literal["single", "any", "all"] = "single"
    permissions: list[str] = Field(default_factory=list)
    department_param: str | None = None


class RouteRulesModel(BaseModel):
    default: DefaultRule = Field(default_factory=DefaultRule)
    routes: list[RouteRule] = Field(default_factory=list)


@dataclass(frozen=True)
class EffectiveRule:
    """What a request must satisfy once rule and defaults are merged."""

    auth_required: bool
    allowed_roles: frozenset[Role] | None
    requirement: Requirement | None
    department_param: str | None


@dataclass(frozen=True)
class _CompiledRule:
    path: str
    pattern: re.Pattern[str]
    methods: frozenset[str]
    effective: EffectiveRule


def _compile_path(path: str) -> re.Pattern[str]:
    # "{param}" segments match any single path segment.
    return re.compile("^" + re.sub(r"\{[^/]+\}", "[^/]+", path) + "$")


def _parse_roles(names: list[str], where: str) -> frozenset[Role] | None:
    if not names:
        return None
    parsed = frozenset(parse_role(n) for n in names)
    if Role.UNKNOWN in parsed:
        raise RouteRuleConfigError(f"{where} lists unknown roles: {sorted(names)}")
    return parsed


class RouteRules:
    """
    Compiled route rules.

    Construction checks every permission key against the catalog, so a typo
    in a rule fails at startup instead of silently denying every request.
    """

    def __init__(self, model: RouteRulesModel, catalog: PermissionCatalog) -> None:
        self.model = model
        self._default = EffectiveRule(
            auth_required=model.default.auth_required,
            allowed_roles=_parse_roles(model.default.roles, "default"),
            requirement=None,
            department_param=None,
        )
        self._rules = [self._compile(rule, model.default, catalog) for rule in model.routes]

    @staticmethod
    def _compile(rule: RouteRule, default: DefaultRule, catalog: PermissionCatalog) -> _CompiledRule:
        where = f"route {rule.path!r}"
        undefined = sorted({p for p in rule.permissions if not catalog.is_known_permission(p)})
        if undefined:
            raise RouteRuleConfigError(f"{where} references undefined permissions: {undefined}")

        requirement = None
        if rule.permissions:
            try:
                requirement = requirement_from_config(rule.match, rule.permissions)
            except ValueError as exc:
                raise RouteRuleConfigError(f"{where}: {exc}") from exc

        # Any security setting on a rule implies authentication, even under a
        # public default.
        implied_auth = default.auth_required or bool(rule.roles or rule.permissions or rule.department_param)
        effective = EffectiveRule(
            auth_required=implied_auth if rule.auth_required is None else rule.auth_required,
            allowed_roles=_parse_roles(rule.roles or default.roles, where),
            requirement=requirement,
            department_param=rule.department_param,
        )
        return _CompiledRule(
            path=rule.path,
            pattern=_compile_path(rule.path),
            methods=frozenset(m.upper() for m in rule.methods),
            effective=effective,
        )

    def match(self, path: str, method: str) -> EffectiveRule:
        """Exact paths win over templates; unmatched requests get the defaults."""

        method = method.upper()
        candidates = [r for r in self._rules if method in r.methods]
        for rule in candidates:
            if rule.path == path:
                return rule.effective
        for rule in candidates:
            if rule.pattern.match(path):
                return rule.effective
        return self._default


def load_route_rules(path: Path, catalog: PermissionCatalog) -> RouteRules:
    data: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if "security" not in data:
        raise RouteRuleConfigError(f"Missing top-level 'security' key in config: {path}")

    try:
        model = RouteRulesModel.model_validate(data["security"] or {})
    except ValidationError as exc:
        raise RouteRuleConfigError(f"invalid route rules in {path}: {exc}") from exc

    rules = RouteRules(model, catalog)
    logger.info("Loaded route rules path=%s routes=%d", path, len(model.routes))
    return rules
