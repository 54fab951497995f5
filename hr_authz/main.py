from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from hr_authz.core import Authorizer, load_catalog
from hr_authz.db import filters as _filters  # noqa: F401  (register SQLAlchemy filters)
from hr_authz.db.init_db import init_db
from hr_authz.db.session import build_engine, build_session_factory
from hr_authz.logging_config import configure_app_logging
from hr_authz.routers import admin, employees, health, leave_requests, pages
from hr_authz.security.dependencies import enforce_authorization, validate_declared_requirements
from hr_authz.security.route_rules import load_route_rules
from hr_authz.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        resolved = settings or get_settings()
        configure_app_logging(resolved.log_level)
        logger.info("App startup beginning")
        app.state.settings = resolved
        app.state.identity_ready = False

        # Configuration errors here abort startup.
        catalog = load_catalog(resolved.resolved_catalog_path())
        app.state.catalog = catalog
        app.state.authorizer = Authorizer(catalog)
        app.state.route_rules = load_route_rules(resolved.resolved_route_rules_path(), catalog)
        validate_declared_requirements(app, catalog)

        engine = build_engine(resolved.resolved_db_url())
        app.state.session_factory = build_session_factory(engine)
        init_db(engine, app.state.session_factory, seed=resolved.seed_demo_data)
        logger.info("Database initialized (tables ensured + seed if needed)")

        app.state.identity_ready = True
        yield
        engine.dispose()

    # Global dependency: every route goes through the authorization rules.
    app = FastAPI(dependencies=[Depends(enforce_authorization)], lifespan=lifespan)

    app.include_router(health.router)
    app.include_router(pages.entry_router)
    app.include_router(pages.router)
    app.include_router(employees.router)
    app.include_router(leave_requests.router)
    app.include_router(admin.router)

    return app


app = create_app()
