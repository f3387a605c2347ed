"""Dashboard configuration."""

import os

from formulary_nudge.config import config as core_config


class Config:
    """Base configuration."""

    # Flask
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-change-in-production")
    DEBUG = os.environ.get("FLASK_DEBUG", "false").lower() == "true"

    # Storage
    DATA_DIR = core_config.DATA_DIR
    AUDIT_LOG_PATH = core_config.get_audit_log_path()

    # Admin key for policy updates and mapping authorization
    ADMIN_API_KEY = core_config.ADMIN_API_KEY or ""

    # Frontend origin allowed to call the API
    CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "http://localhost:5173")

    # Lookup services
    RXNAV_BASE_URL = core_config.RXNAV_BASE_URL
    CLINICAL_TABLES_BASE_URL = core_config.CLINICAL_TABLES_BASE_URL


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


def get_config():
    """Get configuration based on environment."""
    env = os.environ.get("FLASK_ENV", "development")
    if env == "production":
        return ProductionConfig()
    return DevelopmentConfig()
