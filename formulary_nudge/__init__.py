"""Formulary Nudge.

Formulary substitution authoring and decision support: administrators
map anchor drugs to preferred substitutes, and prescribers see the
suggestion at the severity allowed by org policy.
"""

from .models import (
    SeverityLevel,
    SeveritySource,
    ResolvedSeverity,
    MappingStatus,
    Substitute,
    EvidenceNugget,
    ConditionRule,
    Mapping,
    OrgPolicy,
)
from .severity import (
    normalize_severity,
    severity_rank,
    resolve_severity,
    classify_severity_source,
    resolve,
    is_known_severity,
)
from .exceptions import (
    FormularyNudgeError,
    MissingIdentifierError,
    MappingNotFoundError,
    StoreError,
    LookupServiceError,
)

__all__ = [
    "SeverityLevel",
    "SeveritySource",
    "ResolvedSeverity",
    "MappingStatus",
    "Substitute",
    "EvidenceNugget",
    "ConditionRule",
    "Mapping",
    "OrgPolicy",
    "normalize_severity",
    "severity_rank",
    "resolve_severity",
    "classify_severity_source",
    "resolve",
    "is_known_severity",
    "FormularyNudgeError",
    "MissingIdentifierError",
    "MappingNotFoundError",
    "StoreError",
    "LookupServiceError",
]
