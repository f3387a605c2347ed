"""Prescriber output route."""

from flask import Blueprint, current_app, jsonify, request

from formulary_nudge.exceptions import (
    MappingNotFoundError,
    MissingIdentifierError,
    StoreError,
)
from formulary_nudge.matcher import find_authorized_mapping
from formulary_nudge.output import build_output

output_bp = Blueprint("output", __name__, url_prefix="/api/output")


@output_bp.route("", methods=["GET"])
@output_bp.route("/", methods=["GET"])
def get_output():
    """Resolved substitution suggestion for an anchor drug.

    Query params:
        anchor_rxcui: RxCUI of the drug being prescribed
        problems: Optional comma-separated patient conditions
    """
    problems = request.args.get("problems")
    problem_list = (
        [p.strip() for p in problems.split(",") if p.strip()]
        if problems is not None
        else None
    )

    try:
        payload = build_output(
            request.args.get("anchor_rxcui"),
            current_app.policy_store,
            current_app.mapping_store,
            problem_list=problem_list,
        )
    except MissingIdentifierError:
        return jsonify({"error": "Missing anchor_rxcui"}), 400
    except MappingNotFoundError:
        return jsonify({"error": "No mapping found for anchor_rxcui"}), 404
    except StoreError as e:
        return jsonify({"error": str(e)}), 500

    return jsonify(payload)


@output_bp.route("/by-name", methods=["GET"])
def get_output_by_name():
    """Resolved suggestion for a prescribed drug name.

    Only authorized mappings are considered, matched on anchor name.
    """
    name = request.args.get("name", "")
    if not name.strip():
        return jsonify({"error": "Missing name"}), 400

    try:
        mapping = find_authorized_mapping(name, current_app.mapping_store.list_mappings())
        if mapping is None:
            return jsonify({"error": "No authorized mapping for drug"}), 404
        payload = build_output(
            mapping.anchor_rxcui,
            current_app.policy_store,
            current_app.mapping_store,
        )
    except StoreError as e:
        return jsonify({"error": str(e)}), 500

    return jsonify(payload)
