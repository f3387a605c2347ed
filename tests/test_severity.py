"""Tests for severity resolution and the downgrade-only override policy.

Severity scale, least to most interruptive:
- informational (0): visible context only
- recommendation (1): suggested at order entry
- warning (2): requires acknowledgement
- hard-stop (3): cannot continue without override

A mapping override can lower the org default but never raise it.
"""

import itertools
from dataclasses import FrozenInstanceError

import pytest

from formulary_nudge.models import ResolvedSeverity, SeverityLevel, SeveritySource
from formulary_nudge.severity import (
    classify_severity_source,
    is_known_severity,
    normalize_severity,
    resolve,
    resolve_severity,
    severity_rank,
)

LEVEL_NAMES = ["informational", "recommendation", "warning", "hard-stop"]


class TestSeverityLevel:
    """Test the ordered severity scale."""

    def test_values(self):
        """Test canonical names."""
        assert SeverityLevel.INFORMATIONAL.value == "informational"
        assert SeverityLevel.RECOMMENDATION.value == "recommendation"
        assert SeverityLevel.WARNING.value == "warning"
        assert SeverityLevel.HARD_STOP.value == "hard-stop"

    def test_ranks_follow_declaration_order(self):
        """Test ranks 0 through 3."""
        assert [level.rank for level in SeverityLevel] == [0, 1, 2, 3]
        assert [level.value for level in SeverityLevel] == LEVEL_NAMES

    def test_default_is_recommendation(self):
        """Test the fallback alias is not a separate level."""
        assert SeverityLevel.DEFAULT is SeverityLevel.RECOMMENDATION
        assert len(list(SeverityLevel)) == 4

    def test_from_rank(self):
        """Test rank lookup."""
        assert SeverityLevel.from_rank(0) == SeverityLevel.INFORMATIONAL
        assert SeverityLevel.from_rank(3) == SeverityLevel.HARD_STOP

    def test_ordering(self):
        """Test comparisons use rank."""
        assert SeverityLevel.INFORMATIONAL < SeverityLevel.RECOMMENDATION
        assert SeverityLevel.WARNING < SeverityLevel.HARD_STOP
        assert SeverityLevel.HARD_STOP > SeverityLevel.WARNING
        assert SeverityLevel.WARNING >= SeverityLevel.WARNING
        assert SeverityLevel.RECOMMENDATION <= SeverityLevel.WARNING
        assert min(SeverityLevel.WARNING, SeverityLevel.INFORMATIONAL) == SeverityLevel.INFORMATIONAL


class TestNormalizeSeverity:
    """Test free-text normalization."""

    @pytest.mark.parametrize("text,expected", [
        ("informational", SeverityLevel.INFORMATIONAL),
        ("Recommendation", SeverityLevel.RECOMMENDATION),
        ("WARNING", SeverityLevel.WARNING),
        ("Hard-Stop", SeverityLevel.HARD_STOP),
    ])
    def test_case_insensitive_match(self, text, expected):
        """Test canonical names match regardless of case."""
        assert normalize_severity(text) == expected

    @pytest.mark.parametrize("text", [
        "", None, "bogus-value", "Recomendation", "hard_stop", "hard stop", "3",
        "  warning  ", " hard-stop ",
    ])
    def test_unrecognized_falls_back_to_recommendation(self, text):
        """Test missing or malformed text becomes recommendation."""
        assert normalize_severity(text) == SeverityLevel.RECOMMENDATION

    def test_level_passes_through(self):
        """Test an enum member is returned unchanged."""
        assert normalize_severity(SeverityLevel.HARD_STOP) is SeverityLevel.HARD_STOP

    def test_severity_rank(self):
        """Test rank of normalized text."""
        assert severity_rank("hard-stop") == 3
        assert severity_rank("nonsense") == 1

    def test_is_known_severity(self):
        """Test recognition without fallback."""
        assert is_known_severity("Warning")
        assert is_known_severity(SeverityLevel.INFORMATIONAL)
        assert not is_known_severity("Recomendation")
        assert not is_known_severity("")
        assert not is_known_severity(None)


class TestResolveSeverity:
    """Test the downgrade-only resolution rule."""

    @pytest.mark.parametrize("org,override", list(itertools.product(LEVEL_NAMES, LEVEL_NAMES)))
    def test_effective_rank_is_minimum(self, org, override):
        """Test effective rank equals min(rank(org), rank(override))."""
        result = resolve_severity(org, override)
        assert result.rank == min(severity_rank(org), severity_rank(override))

    @pytest.mark.parametrize("org,override", list(itertools.product(LEVEL_NAMES, LEVEL_NAMES)))
    def test_never_escalates_above_org_default(self, org, override):
        """Test a mapping can never raise severity above the org default."""
        assert resolve_severity(org, override) <= normalize_severity(org)

    @pytest.mark.parametrize("org", LEVEL_NAMES)
    @pytest.mark.parametrize("absent", [None, ""])
    def test_absent_override_uses_org_default(self, org, absent):
        """Test no override defers entirely to the org default."""
        assert resolve_severity(org, absent) == normalize_severity(org)
        assert resolve_severity(org) == normalize_severity(org)

    def test_repeated_calls_are_stable(self):
        """Test resolution has no hidden state."""
        results = {resolve_severity("warning", "informational") for _ in range(10)}
        assert results == {SeverityLevel.INFORMATIONAL}

    def test_unrecognized_org_default(self):
        """Test a bad org default falls back before comparison."""
        assert resolve_severity("bogus-value", "recommendation") == SeverityLevel.RECOMMENDATION
        assert resolve_severity("bogus-value", "hard-stop") == SeverityLevel.RECOMMENDATION
        assert resolve_severity("bogus-value", "informational") == SeverityLevel.INFORMATIONAL

    def test_unrecognized_override(self):
        """Test a bad override falls back independently of the org default."""
        assert resolve_severity("hard-stop", "bogus") == SeverityLevel.RECOMMENDATION
        assert resolve_severity("informational", "bogus") == SeverityLevel.INFORMATIONAL

    def test_never_raises(self):
        """Test odd inputs still resolve."""
        assert resolve_severity(None, None) == SeverityLevel.RECOMMENDATION
        assert resolve_severity(123, 456) == SeverityLevel.RECOMMENDATION

    def test_accepts_enum_members(self):
        """Test SeverityLevel inputs work like their names."""
        assert resolve_severity(SeverityLevel.WARNING, SeverityLevel.INFORMATIONAL) == SeverityLevel.INFORMATIONAL


class TestSeveritySource:
    """Test how an effective severity is explained."""

    def test_no_override_is_org_default(self):
        """Test warning with no override."""
        result = resolve("warning", None)
        assert result.severity == SeverityLevel.WARNING
        assert result.source == SeveritySource.ORG_DEFAULT
        assert result.override_applied is False

    def test_downgrade_is_applied(self):
        """Test warning downgraded to informational."""
        result = resolve("warning", "informational")
        assert result.severity == SeverityLevel.INFORMATIONAL
        assert result.source == SeveritySource.MAPPING_OVERRIDE_APPLIED
        assert result.override_applied is True

    def test_escalation_is_clipped(self):
        """Test hard-stop override capped at recommendation org default."""
        result = resolve("recommendation", "hard-stop")
        assert result.severity == SeverityLevel.RECOMMENDATION
        assert result.source == SeveritySource.MAPPING_OVERRIDE_CLIPPED
        assert result.source.value == "mapping_override_clipped_to_org_default"
        assert result.override_applied is False

    def test_equal_override_is_applied(self):
        """Test an override equal to the org default counts as applied."""
        result = resolve("hard-stop", "hard-stop")
        assert result.severity == SeverityLevel.HARD_STOP
        assert result.source == SeveritySource.MAPPING_OVERRIDE_APPLIED

    def test_empty_override_is_org_default(self):
        """Test empty override text is treated as absent."""
        result = resolve("warning", "")
        assert result.source == SeveritySource.ORG_DEFAULT
        assert result.mapping_override is None

    def test_whitespace_override_is_present(self):
        """Test whitespace-only override is unrecognized text, not absent."""
        result = resolve("hard-stop", "   ")
        assert result.severity == SeverityLevel.RECOMMENDATION
        assert result.source == SeveritySource.MAPPING_OVERRIDE_APPLIED
        assert result.mapping_override == "   "

    def test_padded_org_default_falls_back(self):
        """Test surrounding spaces make org default text unrecognized."""
        assert resolve_severity(" hard-stop ", None) == SeverityLevel.RECOMMENDATION
        assert resolve_severity("hard-stop", "   ") == SeverityLevel.RECOMMENDATION

    def test_override_compared_after_normalization(self):
        """Test case differences do not make an applied override look clipped."""
        result = resolve("warning", "INFORMATIONAL")
        assert result.source == SeveritySource.MAPPING_OVERRIDE_APPLIED
        assert result.mapping_override == "INFORMATIONAL"

    def test_typo_override_resolves_as_recommendation(self):
        """Test a misspelled override is honored as recommendation."""
        result = resolve("warning", "Recomendation")
        assert result.severity == SeverityLevel.RECOMMENDATION
        assert result.source == SeveritySource.MAPPING_OVERRIDE_APPLIED

    def test_classify_directly(self):
        """Test classification without resolving."""
        assert classify_severity_source(None, SeverityLevel.WARNING) == SeveritySource.ORG_DEFAULT
        assert (
            classify_severity_source("warning", SeverityLevel.RECOMMENDATION)
            == SeveritySource.MAPPING_OVERRIDE_CLIPPED
        )

    @pytest.mark.parametrize("org,override", list(itertools.product(LEVEL_NAMES, LEVEL_NAMES)))
    def test_applied_exactly_when_not_above_org(self, org, override):
        """Test applied vs clipped matches the rank comparison."""
        result = resolve(org, override)
        expected_applied = severity_rank(override) <= severity_rank(org)
        assert result.override_applied is expected_applied


class TestResolvedSeverity:
    """Test the serialized resolution."""

    def test_to_dict(self):
        """Test response field names."""
        result = resolve("Warning", "informational")
        assert result.to_dict() == {
            "severity": "informational",
            "severity_source": "mapping_override_applied",
            "override_applied": True,
            "org_default_severity": "Warning",
            "mapping_severity_override": "informational",
        }

    def test_missing_org_default_reported_as_recommendation(self):
        """Test the raw org default field when none was supplied."""
        result = resolve(None)
        assert result.org_default == "recommendation"
        assert result.mapping_override is None

    def test_is_frozen(self):
        """Test results cannot be mutated after resolution."""
        result = resolve("warning")
        assert isinstance(result, ResolvedSeverity)
        with pytest.raises(FrozenInstanceError):
            result.severity = SeverityLevel.HARD_STOP
