"""
Development Tracker
Blueprint registry.
"""

from flask import request


def _page_params(default_limit, max_limit):
    try:
        limit = min(int(request.args.get("limit", default_limit)), max_limit)
    except (ValueError, TypeError):
        limit = default_limit
    try:
        offset = max(int(request.args.get("offset", 0)), 0)
    except (ValueError, TypeError):
        offset = 0
    return max(limit, 0), offset


def paginate_list(rows, default_limit=200, max_limit=1000):
    """Apply limit/offset pagination to an already-built list.

    Query params:
        limit  — max items (default 200, capped at max_limit)
        offset — starting position (default 0)

    Returns:
        (items_list, total_count)
    """
    limit, offset = _page_params(default_limit, max_limit)
    return rows[offset:offset + limit], len(rows)


def json_body():
    """Request JSON, or an empty dict when the body is missing/unparsable."""
    data = request.get_json(silent=True)
    return {} if data is None else data
