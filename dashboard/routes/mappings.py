"""Substitution mapping routes."""

from flask import Blueprint, current_app, jsonify, request

from formulary_nudge.audit import AuditEvent
from formulary_nudge.exceptions import MappingNotFoundError, StoreError
from formulary_nudge.matcher import best_match, suggestions
from formulary_nudge.models import Mapping
from formulary_nudge.severity import is_known_severity

from .api import get_actor, record_audit, require_admin_key

mappings_bp = Blueprint("mappings", __name__, url_prefix="/api/mappings")


@mappings_bp.route("", methods=["GET"])
@mappings_bp.route("/", methods=["GET"])
def list_mappings():
    """All mappings, drafts included."""
    try:
        mappings = current_app.mapping_store.list_mappings()
    except StoreError as e:
        return jsonify({"error": str(e)}), 500
    return jsonify([m.to_dict() for m in mappings])


@mappings_bp.route("", methods=["POST"])
@mappings_bp.route("/", methods=["POST"])
def save_mapping():
    """Create or replace the mapping for an anchor drug.

    Unrecognized severity override text is saved as authored but
    reported back in "warnings", since it resolves as recommendation.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Mapping must be a JSON object"}), 400
    if not data.get("anchor_rxcui"):
        return jsonify({"error": "anchor_rxcui is required"}), 400

    mapping = Mapping.from_dict(data)

    warnings = []
    if mapping.severity_override and not is_known_severity(mapping.severity_override):
        warnings.append(
            f"Unrecognized severity_override {mapping.severity_override!r}; "
            f"it will be treated as recommendation"
        )

    try:
        current_app.mapping_store.upsert(mapping)
    except StoreError as e:
        return jsonify({"error": str(e)}), 500

    return jsonify({
        "status": "saved",
        "entry": mapping.to_dict(),
        "warnings": warnings,
    })


@mappings_bp.route("/<rxcui>/authorize", methods=["POST"])
@require_admin_key
def authorize_mapping(rxcui):
    """Authorize a mapping so prescribers see it."""
    data = request.get_json(silent=True) or {}
    actor = get_actor(data)

    try:
        before, after = current_app.mapping_store.authorize(rxcui, actor)
    except MappingNotFoundError:
        return jsonify({"error": "Mapping not found"}), 404
    except StoreError as e:
        return jsonify({"error": str(e)}), 500

    audited = record_audit(
        AuditEvent.MAPPING_AUTHORIZE,
        actor=actor,
        reason=data.get("reason", ""),
        before=before.to_dict(),
        after=after.to_dict(),
    )

    return jsonify({"status": "authorized", "entry": after.to_dict(), "audited": audited})


@mappings_bp.route("/<rxcui>", methods=["DELETE"])
def delete_mapping(rxcui):
    """Delete the mapping for an anchor drug."""
    try:
        current_app.mapping_store.delete(rxcui)
    except StoreError as e:
        return jsonify({"error": str(e)}), 500
    return jsonify({"status": "deleted"})


@mappings_bp.route("/match", methods=["GET"])
def match_mapping():
    """Find the mapping that best matches a drug name or code.

    Query params:
        q: Drug name, RxCUI or synonym
    """
    query = request.args.get("q", "")
    if not query.strip():
        return jsonify({"error": "Missing q"}), 400

    try:
        mappings = current_app.mapping_store.list_mappings()
    except StoreError as e:
        return jsonify({"error": str(e)}), 500

    result = best_match(query, mappings)
    if result is None:
        return jsonify({"error": "No matching mapping"}), 404
    return jsonify(result.to_dict())


@mappings_bp.route("/suggestions", methods=["GET"])
def mapping_suggestions():
    """Drug names from existing mappings, for type-ahead."""
    try:
        mappings = current_app.mapping_store.list_mappings()
    except StoreError as e:
        return jsonify({"error": str(e)}), 500

    limit = request.args.get("limit", type=int, default=12)
    return jsonify(suggestions(mappings, request.args.get("q", ""), limit=limit))
