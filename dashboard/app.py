"""Flask application factory for the Formulary Nudge API."""

import os

from flask import Flask

from .config import get_config


def create_app(config=None):
    """Create and configure the Flask application.

    Args:
        config: Optional configuration object or dict

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    # Load configuration
    if config is None:
        config = get_config()

    if isinstance(config, dict):
        app.config.from_object(get_config())
        app.config.update(config)
    else:
        app.config.from_object(config)

    # Initialize stores and lookup clients
    from formulary_nudge.audit import AuditLog
    from formulary_nudge.clients import ClinicalTablesClient, RxNormClient
    from formulary_nudge.store import JsonDocumentStore, MappingStore, PolicyStore

    documents = JsonDocumentStore(data_dir=app.config.get("DATA_DIR"))
    app.policy_store = PolicyStore(documents)
    app.mapping_store = MappingStore(documents)
    app.audit_log = AuditLog(
        path=app.config.get("AUDIT_LOG_PATH")
        or os.path.join(documents.data_dir, "audit_log.jsonl")
    )
    app.rxnorm_client = RxNormClient(base_url=app.config.get("RXNAV_BASE_URL"))
    app.clinical_tables_client = ClinicalTablesClient(
        base_url=app.config.get("CLINICAL_TABLES_BASE_URL")
    )

    # Register blueprints
    from .routes.api import api_bp
    from .routes.output import output_bp
    from .routes.org_policy import org_policy_bp
    from .routes.mappings import mappings_bp
    from .routes.lookup import lookup_bp

    app.register_blueprint(api_bp, url_prefix="/api")  # Health
    app.register_blueprint(output_bp)  # Prescriber output at /api/output
    app.register_blueprint(org_policy_bp)  # Org policy at /api/org-policy
    app.register_blueprint(mappings_bp)  # Mappings at /api/mappings
    app.register_blueprint(lookup_bp)  # RxNorm, conditions, benefit check

    @app.after_request
    def add_cors_headers(response):
        origin = app.config.get("CORS_ORIGIN")
        if origin:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, DELETE, OPTIONS"
            response.headers["Access-Control-Allow-Headers"] = (
                "Content-Type, X-Admin-Key, X-Actor"
            )
        return response

    return app


def run_dev_server():
    """Run development server."""
    app = create_app()
    app.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 3001)),
        debug=True,
    )


if __name__ == "__main__":
    run_dev_server()
