"""Configuration management for Formulary Nudge."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent

# Load environment variables from .env file
env_path = PROJECT_ROOT / ".env"
if env_path.exists():
    load_dotenv(env_path)
else:
    # Fall back to template for defaults
    template_path = PROJECT_ROOT / ".env.template"
    if template_path.exists():
        load_dotenv(template_path)


class Config:
    """Application configuration."""

    # Organization
    ORG_ID: str = os.getenv("ORG_ID", "ORG_001")

    # JSON document storage
    DATA_DIR: str = os.getenv("DATA_DIR", str(PROJECT_ROOT / "data"))
    AUDIT_LOG_PATH: str | None = os.getenv("AUDIT_LOG_PATH")

    # Admin key required for policy updates and mapping authorization
    ADMIN_API_KEY: str | None = os.getenv("ADMIN_API_KEY")

    # NLM lookup services
    RXNAV_BASE_URL: str = os.getenv("RXNAV_BASE_URL", "https://rxnav.nlm.nih.gov/REST")
    CLINICAL_TABLES_BASE_URL: str = os.getenv(
        "CLINICAL_TABLES_BASE_URL", "https://clinicaltables.nlm.nih.gov/api"
    )
    HTTP_TIMEOUT_SECONDS: int = int(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

    @classmethod
    def get_audit_log_path(cls) -> str:
        """Get the audit log path, defaulting to a file in the data directory."""
        if cls.AUDIT_LOG_PATH:
            return os.path.expanduser(cls.AUDIT_LOG_PATH)
        return os.path.join(os.path.expanduser(cls.DATA_DIR), "audit_log.jsonl")


config = Config()
