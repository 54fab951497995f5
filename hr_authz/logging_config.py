from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level for the ``hr_authz`` logger tree.

    Notes:
    - Plain stdlib logging; uvicorn (or the host app) owns the handlers.
    - ``HR_AUTHZ_LOG_LEVEL=DEBUG`` logs every authorization decision.
    """

    normalized = level.upper()
    package_logger = logging.getLogger("hr_authz")
    package_logger.setLevel(normalized)
    package_logger.propagate = True
