"""Shared fixtures for Formulary Nudge tests."""

import pytest

from formulary_nudge.store import JsonDocumentStore, MappingStore, PolicyStore


@pytest.fixture
def documents(tmp_path):
    """Document store in a temporary data directory."""
    return JsonDocumentStore(str(tmp_path / "data"))


@pytest.fixture
def policy_store(documents):
    return PolicyStore(documents, org_id="ORG_TEST")


@pytest.fixture
def mapping_store(documents):
    return MappingStore(documents)


@pytest.fixture
def humira_mapping_data():
    """Stored mapping for Humira with a biosimilar substitute."""
    return {
        "anchor_rxcui": "1049221",
        "anchor_name": "Humira 40 MG/0.4ML Pen Injector",
        "anchor_tty": "SBD",
        "substitutes": [
            {"rxcui": "2470444", "name": "Hadlima 40 MG/0.4ML Pen", "tty": "SBD"},
        ],
        "severity_override": "informational",
        "evidence_nuggets": [
            {"id": "N1", "title": "Equivalent efficacy", "detail": ""},
            {"id": "N2", "title": "Lower cost", "detail": "Preferred tier"},
        ],
        "conditions": {
            "mode": "any",
            "include": ["Rheumatoid arthritis"],
            "exclude": [],
        },
        "status": "authorized",
        "updated_at": "2024-03-01T12:00:00.000Z",
        "synonyms": ["adalimumab"],
    }


@pytest.fixture
def policy_with_severity():
    """Factory for org policy documents with a given default severity."""
    def _make(severity):
        return {
            "org_id": "ORG_TEST",
            "alert_types": {
                "formulary_substitution": {
                    "enabled": True,
                    "severity": severity,
                },
            },
        }
    return _make
