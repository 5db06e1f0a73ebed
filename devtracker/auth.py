"""
Development Tracker
Authorization gate.

Every /api/v1/* request (health probes excepted) must be authorized before
it reaches a service. The services themselves never authorize.

Accepted credentials:
    - API key via X-API-Key header or ?api_key= query param
    - HTTP Basic Auth matching SITE_USERNAME / SITE_PASSWORD

Configuration (env vars / app config):
    API_KEYS          — comma-separated "<key>:<role>" entries, role is
                        editor|viewer (keys without a role are viewers)
    API_AUTH_ENABLED  — "false" disables the gate (development, tests)

Viewers may read; state-changing requests need an editor key.
"""

import logging
import os
from typing import Optional

from flask import current_app, g, jsonify, request

logger = logging.getLogger(__name__)

ROLES = {"editor", "viewer"}

_WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def _parse_api_keys() -> dict[str, str]:
    """Parse API_KEYS into a {key: role} mapping."""
    raw = os.getenv("API_KEYS", "")
    if not raw.strip():
        return {}

    keys = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if ":" in entry:
            key, role = entry.rsplit(":", 1)
            role = role.strip().lower()
            if role not in ROLES:
                logger.warning("Unknown role '%s' for API key, defaulting to 'viewer'", role)
                role = "viewer"
            keys[key.strip()] = role
        else:
            keys[entry] = "viewer"
    return keys


def _is_auth_enabled() -> bool:
    """Env var wins over app config; anything but an explicit 'off' is on."""
    env_val = os.getenv("API_AUTH_ENABLED", "")
    if env_val:
        return env_val.lower() not in ("false", "0", "no", "off")
    try:
        return str(current_app.config.get("API_AUTH_ENABLED", "true")).lower() not in (
            "false", "0", "no", "off",
        )
    except RuntimeError:
        # Outside app context
        return True


def _get_api_key_from_request() -> Optional[str]:
    key = request.headers.get("X-API-Key", "").strip()
    if key:
        return key
    return request.args.get("api_key", "").strip() or None


def _has_valid_basic_auth() -> bool:
    auth = request.authorization
    if not auth:
        return False
    site_user = os.getenv("SITE_USERNAME", "")
    site_pass = os.getenv("SITE_PASSWORD", "")
    if not site_user or not site_pass:
        return False
    return auth.username == site_user and auth.password == site_pass


def _check_content_type():
    """Writes with a body must be JSON (lightweight CSRF mitigation)."""
    if request.method in _WRITE_METHODS:
        ct = request.content_type or ""
        if "application/json" not in ct and request.content_length and request.content_length > 0:
            return jsonify({
                "error": "Content-Type must be application/json for state-changing requests"
            }), 415
    return None


def init_auth(app):
    """Install the authorization gate as a before_request hook."""

    @app.before_request
    def _before_request_auth():
        if not request.path.startswith("/api/v1/"):
            return None
        if request.path.startswith("/api/v1/health"):
            return None
        if request.method == "OPTIONS":
            return None

        csrf_error = _check_content_type()
        if csrf_error:
            return csrf_error

        if not _is_auth_enabled():
            g.current_user_role = "editor"
            g.api_key = "dev-mode"
            return None

        if _has_valid_basic_auth():
            g.current_user_role = "editor"
            g.api_key = "basic-auth"
            return None

        api_key = _get_api_key_from_request()
        if not api_key:
            return jsonify({"error": "Authentication required. Provide X-API-Key header or Basic Auth."}), 401

        api_keys = _parse_api_keys()
        if not api_keys:
            logger.error("API_KEYS env var is not configured but API_AUTH_ENABLED=true")
            return jsonify({"error": "Server authentication not configured"}), 500

        role = api_keys.get(api_key)
        if role is None:
            logger.warning("Invalid API key attempt: %s...", api_key[:8])
            return jsonify({"error": "Invalid API key"}), 401

        if request.method in _WRITE_METHODS and role != "editor":
            logger.warning("Viewer key attempted %s %s", request.method, request.path)
            return jsonify({"error": "Insufficient permissions"}), 403

        g.current_user_role = role
        g.api_key = api_key
        return None

    logger.info("Auth middleware installed (enabled=%s)", _is_auth_enabled())
