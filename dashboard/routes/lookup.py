"""Drug and condition lookup routes, plus the simulated benefit check."""

from flask import Blueprint, current_app, jsonify, request

from formulary_nudge.benefit_check import simulate_benefit_check
from formulary_nudge.exceptions import LookupServiceError

lookup_bp = Blueprint("lookup", __name__, url_prefix="/api")


@lookup_bp.route("/rxnorm/search", methods=["GET"])
def rxnorm_search():
    """Search RxNorm drugs by name."""
    query = request.args.get("q")
    if not query:
        return jsonify({"error": "Missing q"}), 400

    try:
        results = current_app.rxnorm_client.search(query)
    except LookupServiceError as e:
        return jsonify({"error": str(e)}), 502

    return jsonify(results)


@lookup_bp.route("/conditions/search", methods=["GET"])
def condition_search():
    """Search ICD-10 (default) or ICD-9 conditions.

    Query params:
        terms: Search text (at least 2 characters)
        system: icd10 or icd9
        max: Maximum rows (default 10)
    """
    terms = request.args.get("terms", "")
    system = request.args.get("system", "icd10").lower()
    max_list = request.args.get("max", type=int, default=10)

    client = current_app.clinical_tables_client
    try:
        if system == "icd9":
            results = client.search_icd9(terms, max_list=max_list)
        elif system == "icd10":
            results = client.search_icd10(terms, max_list=max_list)
        else:
            return jsonify({"error": f"Unknown system: {system}"}), 400
    except LookupServiceError as e:
        return jsonify({"error": str(e)}), 502

    return jsonify(results)


@lookup_bp.route("/benefit-check", methods=["GET"])
def benefit_check():
    """Simulated coverage for a drug (demo only)."""
    rxcui = request.args.get("rxcui")
    if not rxcui:
        return jsonify({"error": "Missing rxcui"}), 400

    result = simulate_benefit_check(rxcui, request.args.get("name"))
    return jsonify(result.to_dict())
