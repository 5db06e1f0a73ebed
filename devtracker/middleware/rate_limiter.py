"""
Rate limiting configuration.

The Limiter instance is created in devtracker/__init__.py with no default
limits; this module applies limits per blueprint.

Usage:
    from devtracker.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

WRITE_LIMIT = "60/minute"
READ_LIMIT = "200/minute"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Stage editing, panel configuration, task endpoints: 60/minute
        - Dashboard: 200/minute
        - Health checks: exempt

    Rate limiting is disabled in testing mode.
    """
    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    for bp_name in ("developments", "panel_config", "tasks"):
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(WRITE_LIMIT)(bp)

    bp = app.blueprints.get("dashboard")
    if bp:
        limiter.limit(READ_LIMIT)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info("Rate limiter configured — write: %s, read: %s", WRITE_LIMIT, READ_LIMIT)
