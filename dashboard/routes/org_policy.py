"""Organization policy routes."""

from flask import Blueprint, current_app, jsonify, request

from formulary_nudge.audit import AuditEvent
from formulary_nudge.exceptions import StoreError

from .api import get_actor, record_audit, require_admin_key

org_policy_bp = Blueprint("org_policy", __name__, url_prefix="/api/org-policy")


@org_policy_bp.route("", methods=["GET"])
@org_policy_bp.route("/", methods=["GET"])
def get_policy():
    """Current org policy, or the default policy if none is saved."""
    try:
        return jsonify(current_app.policy_store.get_raw())
    except StoreError as e:
        return jsonify({"error": str(e)}), 500


@org_policy_bp.route("", methods=["POST"])
@org_policy_bp.route("/", methods=["POST"])
@require_admin_key
def save_policy():
    """Replace the org policy.

    Accepts either the policy object directly, or
    {"policy": {...}, "meta": {"actor": ..., "reason": ...}}.
    """
    incoming = request.get_json(silent=True)
    if not isinstance(incoming, dict):
        return jsonify({"error": "Policy must be a JSON object"}), 400

    policy = incoming["policy"] if isinstance(incoming.get("policy"), dict) else incoming
    meta = incoming.get("meta") if isinstance(incoming.get("meta"), dict) else {}

    store = current_app.policy_store
    try:
        before = store.get_stored()
        store.save(policy)
    except StoreError as e:
        return jsonify({"error": str(e)}), 500

    audited = record_audit(
        AuditEvent.ORG_POLICY_UPDATE,
        actor=get_actor(incoming),
        reason=meta.get("reason", ""),
        before=before,
        after=policy,
    )

    return jsonify({"status": "saved", "audited": audited})
