"""Shared API helpers and health check."""

import logging
from functools import wraps
from flask import Blueprint, jsonify, request, current_app

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def require_admin_key(f):
    """Decorator requiring the X-Admin-Key header for privileged writes."""
    @wraps(f)
    def decorated(*args, **kwargs):
        expected = current_app.config.get("ADMIN_API_KEY")

        if not expected:
            return jsonify({"error": "ADMIN_API_KEY not set on server"}), 500

        provided_key = request.headers.get("X-Admin-Key")

        if not provided_key:
            return jsonify({"error": "Missing x-admin-key header"}), 403

        if provided_key != expected:
            return jsonify({"error": "Invalid admin key"}), 403

        return f(*args, **kwargs)

    return decorated


def get_actor(data: dict | None = None) -> str:
    """Who is making the request, from body meta, X-Actor header or body."""
    data = data or {}
    meta = data.get("meta") if isinstance(data.get("meta"), dict) else {}
    return (
        meta.get("actor")
        or request.headers.get("X-Actor")
        or data.get("actor")
        or "unknown"
    )


def record_audit(event, actor: str, reason: str, before, after) -> bool:
    """Append an audit entry for a write that has already been saved.

    Returns:
        False if the audit log could not be written
    """
    try:
        current_app.audit_log.append(
            event,
            actor=actor,
            reason=reason,
            before=before,
            after=after,
            ip=request.remote_addr,
            userAgent=request.headers.get("User-Agent", ""),
        )
    except OSError as e:
        logger.error(f"Failed to write audit entry for {getattr(event, 'value', event)}: {e}")
        return False
    return True


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({"status": "ok"})
