"""Severity resolution for formulary substitution suggestions.

The organization sets a default severity for formulary substitution
alerts. A mapping may carry a severity override, but the override can
only downgrade: the effective severity is whichever of the two is less
interruptive. Unrecognized severity text falls back to
``recommendation`` instead of raising, so resolution never fails.
"""

import logging

from .models import ResolvedSeverity, SeverityLevel, SeveritySource

logger = logging.getLogger(__name__)

_BY_NAME = {level.value: level for level in SeverityLevel}


def _is_absent(value) -> bool:
    return value is None or value == ""


def _raw_text(value) -> str | None:
    if _is_absent(value):
        return None
    if isinstance(value, SeverityLevel):
        return value.value
    return str(value)


def is_known_severity(value) -> bool:
    """Check if a value names one of the canonical severity levels."""
    if isinstance(value, SeverityLevel):
        return True
    if _is_absent(value):
        return False
    return str(value).lower() in _BY_NAME


def normalize_severity(value) -> SeverityLevel:
    """Map free text to a SeverityLevel, case-insensitively.

    Empty, missing or unrecognized text becomes RECOMMENDATION.
    """
    if isinstance(value, SeverityLevel):
        return value
    level = _BY_NAME.get(str(value or "").lower())
    if level is None:
        if not _is_absent(value):
            logger.debug(f"Unrecognized severity {value!r}, using {SeverityLevel.DEFAULT.value}")
        return SeverityLevel.DEFAULT
    return level


def severity_rank(value) -> int:
    """Get the rank of a severity value after normalization."""
    return normalize_severity(value).rank


def resolve_severity(org_default, mapping_override=None) -> SeverityLevel:
    """Compute the effective severity for a mapping.

    Args:
        org_default: Organization default severity (free text or SeverityLevel)
        mapping_override: Optional per-mapping override; absent or empty
            means defer to the org default

    Returns:
        The less interruptive of the two levels
    """
    org = normalize_severity(org_default)
    if _is_absent(mapping_override):
        return org
    override = normalize_severity(mapping_override)
    return SeverityLevel.from_rank(min(org.rank, override.rank))


def classify_severity_source(mapping_override, effective: SeverityLevel) -> SeveritySource:
    """Explain where an effective severity came from.

    An override whose normalized level matches the effective level was
    applied (equal levels count as applied). Otherwise it asked for more
    than the org default and was clipped.
    """
    if _is_absent(mapping_override):
        return SeveritySource.ORG_DEFAULT
    if normalize_severity(mapping_override) == effective:
        return SeveritySource.MAPPING_OVERRIDE_APPLIED
    return SeveritySource.MAPPING_OVERRIDE_CLIPPED


def resolve(org_default, mapping_override=None) -> ResolvedSeverity:
    """Resolve severity and report how it was derived."""
    effective = resolve_severity(org_default, mapping_override)
    source = classify_severity_source(mapping_override, effective)

    if source == SeveritySource.MAPPING_OVERRIDE_CLIPPED:
        logger.debug(
            f"Override {mapping_override!r} exceeds org default {org_default!r}, "
            f"clipped to {effective.value}"
        )

    return ResolvedSeverity(
        severity=effective,
        source=source,
        override_applied=source == SeveritySource.MAPPING_OVERRIDE_APPLIED,
        org_default=_raw_text(org_default) or SeverityLevel.DEFAULT.value,
        mapping_override=_raw_text(mapping_override),
    )
