from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Defaults are local and deterministic (SQLite file, packaged catalog).
    - Every field can be overridden with an ``HR_AUTHZ_`` env var.
    """

    model_config = SettingsConfigDict(env_prefix="HR_AUTHZ_", extra="ignore")

    db_url: str | None = None
    catalog_path: str | None = None
    route_rules_path: str | None = None
    log_level: str = "INFO"
    seed_demo_data: bool = True

    jwt_secret: str = "change-me-for-production"
    jwt_algorithm: str = "HS256"

    login_path: str = "/login"
    unauthorized_path: str = "/unauthorized"

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url

        repo_root = _PACKAGE_DIR.parent
        db_path = repo_root / "hr_authz.db"
        return f"sqlite:///{db_path}"

    def resolved_catalog_path(self) -> Path:
        if self.catalog_path:
            return Path(self.catalog_path)
        return _PACKAGE_DIR / "config" / "permission_catalog.yaml"

    def resolved_route_rules_path(self) -> Path:
        if self.route_rules_path:
            return Path(self.route_rules_path)
        return _PACKAGE_DIR / "config" / "route_rules.yaml"


@lru_cache
def get_settings() -> Settings:
    return Settings()
