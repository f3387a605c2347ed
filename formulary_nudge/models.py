"""Data models for formulary substitution mappings and severity policy."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


MAX_EVIDENCE_NUGGETS = 5
FORMULARY_SUBSTITUTION = "formulary_substitution"


class SeverityLevel(Enum):
    """How interruptive a substitution suggestion is, least to most.

    Declaration order is the rank order. Comparisons use rank, so
    ``SeverityLevel.INFORMATIONAL < SeverityLevel.HARD_STOP``.
    """
    INFORMATIONAL = "informational"    # Visible context only
    RECOMMENDATION = "recommendation"  # Suggested at order entry
    WARNING = "warning"                # Requires acknowledgement
    HARD_STOP = "hard-stop"            # Cannot continue without override

    # Alias used when severity text is missing or unrecognized
    DEFAULT = "recommendation"

    @property
    def rank(self) -> int:
        """Position on the scale, 0 (informational) to 3 (hard-stop)."""
        return list(SeverityLevel).index(self)

    @classmethod
    def from_rank(cls, rank: int) -> "SeverityLevel":
        """Get the level at a given rank."""
        return list(cls)[rank]

    def __lt__(self, other):
        if not isinstance(other, SeverityLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, SeverityLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, SeverityLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, SeverityLevel):
            return NotImplemented
        return self.rank >= other.rank


class SeveritySource(Enum):
    """How the effective severity of a mapping was derived."""
    ORG_DEFAULT = "org_default"                  # No override on the mapping
    MAPPING_OVERRIDE_APPLIED = "mapping_override_applied"
    MAPPING_OVERRIDE_CLIPPED = "mapping_override_clipped_to_org_default"


class MappingStatus(Enum):
    """Governance status of a substitution mapping."""
    DRAFT = "draft"
    AUTHORIZED = "authorized"


def _parse_datetime(val) -> datetime | None:
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val
    # JavaScript-style timestamps end in "Z"
    text = str(val)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Ignoring unparseable timestamp {val!r}")
        return None


def _format_datetime(val: datetime | None) -> str | None:
    return val.isoformat() if val else None


@dataclass(frozen=True)
class ResolvedSeverity:
    """Effective severity for a mapping plus how it was derived.

    Computed on every read from the current org policy; never stored.
    """
    severity: SeverityLevel
    source: SeveritySource
    override_applied: bool
    org_default: str
    mapping_override: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the response fields used by the output endpoint."""
        return {
            "severity": self.severity.value,
            "severity_source": self.source.value,
            "override_applied": self.override_applied,
            "org_default_severity": self.org_default,
            "mapping_severity_override": self.mapping_override,
        }


@dataclass
class Substitute:
    """Alternative medication proposed in place of the anchor."""
    rxcui: str
    name: str = ""
    tty: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"rxcui": self.rxcui, "name": self.name, "tty": self.tty}

    @classmethod
    def from_dict(cls, data: dict) -> "Substitute":
        return cls(
            rxcui=str(data.get("rxcui", "")),
            name=data.get("name") or "",
            tty=data.get("tty"),
        )


@dataclass
class EvidenceNugget:
    """Short supporting claim shown alongside a suggestion."""
    id: str
    title: str = ""
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "detail": self.detail}

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> "EvidenceNugget":
        return cls(
            id=str(data.get("id") or f"N{index + 1}"),
            title=data.get("title") or "",
            detail=data.get("detail") or "",
        )


@dataclass
class ConditionRule:
    """Problem-list conditions gating when a suggestion fires.

    mode "any": at least one include condition must be present.
    mode "all": every include condition must be present.
    Any exclude condition present suppresses the suggestion.
    """
    mode: str = "any"
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "include": list(self.include),
            "exclude": list(self.exclude),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConditionRule":
        include = data.get("include")
        exclude = data.get("exclude")
        return cls(
            mode="all" if data.get("mode") == "all" else "any",
            include=[str(c) for c in include] if isinstance(include, list) else [],
            exclude=[str(c) for c in exclude] if isinstance(exclude, list) else [],
        )


_MAPPING_FIELDS = {
    "anchor_rxcui",
    "anchor_name",
    "anchor_tty",
    "substitutes",
    "severity_override",
    "evidence_nuggets",
    "conditions",
    "status",
    "updated_at",
    "authorized_by",
    "authorized_at",
}


@dataclass
class Mapping:
    """An anchor drug to substitute mapping authored by an administrator."""
    anchor_rxcui: str
    anchor_name: str = ""
    anchor_tty: str | None = None
    substitutes: list[Substitute] = field(default_factory=list)

    # Free text as authored; a downgrade request, not a guaranteed value
    severity_override: str | None = None

    evidence_nuggets: list[EvidenceNugget] = field(default_factory=list)
    conditions: ConditionRule | None = None

    # Governance
    status: MappingStatus = MappingStatus.DRAFT
    updated_at: datetime | None = None
    authorized_by: str | None = None
    authorized_at: datetime | None = None

    # Unmodelled keys (synonyms, aliases, ...) preserved as stored
    extras: dict[str, Any] = field(default_factory=dict)

    def is_authorized(self) -> bool:
        """Check if the mapping has been authorized for prescribers."""
        return self.status == MappingStatus.AUTHORIZED

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored JSON shape."""
        data = dict(self.extras)
        data.update({
            "anchor_rxcui": self.anchor_rxcui,
            "anchor_name": self.anchor_name,
            "anchor_tty": self.anchor_tty,
            "substitutes": [s.to_dict() for s in self.substitutes],
            "severity_override": self.severity_override,
            "evidence_nuggets": [
                n.to_dict() for n in self.evidence_nuggets[:MAX_EVIDENCE_NUGGETS]
            ],
            "conditions": self.conditions.to_dict() if self.conditions else None,
            "status": self.status.value,
            "updated_at": _format_datetime(self.updated_at),
        })
        if self.authorized_by is not None:
            data["authorized_by"] = self.authorized_by
        if self.authorized_at is not None:
            data["authorized_at"] = _format_datetime(self.authorized_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Mapping":
        """Create from a stored or submitted JSON object."""
        status = MappingStatus.DRAFT
        status_val = str(data.get("status") or "").lower()
        if status_val:
            try:
                status = MappingStatus(status_val)
            except ValueError:
                logger.debug(f"Unknown mapping status {data.get('status')!r}, using draft")

        conditions = data.get("conditions")
        nuggets = data.get("evidence_nuggets")
        if not isinstance(nuggets, list):
            nuggets = []

        return cls(
            anchor_rxcui=str(data.get("anchor_rxcui") or ""),
            anchor_name=data.get("anchor_name") or "",
            anchor_tty=data.get("anchor_tty"),
            substitutes=[
                Substitute.from_dict(s)
                for s in data.get("substitutes") or []
                if isinstance(s, dict)
            ],
            severity_override=data.get("severity_override") or None,
            evidence_nuggets=[
                EvidenceNugget.from_dict(n, i)
                for i, n in enumerate(nuggets[:MAX_EVIDENCE_NUGGETS])
                if isinstance(n, dict)
            ],
            conditions=(
                ConditionRule.from_dict(conditions)
                if isinstance(conditions, dict)
                else None
            ),
            status=status,
            updated_at=_parse_datetime(data.get("updated_at")),
            authorized_by=data.get("authorized_by"),
            authorized_at=_parse_datetime(data.get("authorized_at")),
            extras={k: v for k, v in data.items() if k not in _MAPPING_FIELDS},
        )


@dataclass
class OrgPolicy:
    """Organization-wide alert policy."""
    org_id: str = "ORG_001"
    alert_types: dict[str, Any] = field(default_factory=dict)
    extras: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def default(cls, org_id: str = "ORG_001") -> "OrgPolicy":
        """Policy used when none has been saved yet."""
        return cls(
            org_id=org_id,
            alert_types={
                FORMULARY_SUBSTITUTION: {
                    "enabled": True,
                    "severity": SeverityLevel.RECOMMENDATION.value,
                    "timing": ["prescribing"],
                    "display_contexts": ["order-entry"],
                    "governance_required": True,
                },
            },
        )

    @property
    def formulary_substitution_severity(self) -> str:
        """Raw org default severity text for formulary substitution alerts."""
        alert = self.alert_types.get(FORMULARY_SUBSTITUTION)
        if isinstance(alert, dict) and alert.get("severity"):
            return str(alert["severity"])
        return SeverityLevel.DEFAULT.value

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extras)
        data.update({"org_id": self.org_id, "alert_types": self.alert_types})
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "OrgPolicy":
        alert_types = data.get("alert_types")
        return cls(
            org_id=str(data.get("org_id") or "ORG_001"),
            alert_types=alert_types if isinstance(alert_types, dict) else {},
            extras={
                k: v for k, v in data.items() if k not in ("org_id", "alert_types")
            },
        )
