"""Dashboard routes."""

from .api import api_bp
from .output import output_bp
from .org_policy import org_policy_bp
from .mappings import mappings_bp
from .lookup import lookup_bp

__all__ = [
    "api_bp",
    "output_bp",
    "org_policy_bp",
    "mappings_bp",
    "lookup_bp",
]
