"""Prescriber-facing output for a substitution mapping.

Looks up the org policy and the mapping for an anchor drug, resolves
the effective severity, and builds the response payload. Policy is
read fresh on every call so results always reflect the current org
default.
"""

import logging
from typing import Any

from .exceptions import MappingNotFoundError, MissingIdentifierError
from .matcher import conditions_satisfied
from .severity import resolve
from .store import MappingStore, PolicyStore

logger = logging.getLogger(__name__)


def build_output(
    anchor_rxcui: str | None,
    policy_store: PolicyStore,
    mapping_store: MappingStore,
    problem_list: list[str] | None = None,
) -> dict[str, Any]:
    """Build the output payload for an anchor drug.

    Args:
        anchor_rxcui: RxCUI of the prescribed (anchor) drug
        policy_store: Source of the org default severity
        mapping_store: Source of the substitution mapping
        problem_list: Patient conditions; when given, the payload reports
            whether the mapping's condition rule is met

    Returns:
        Payload with anchor, substitutes and resolved severity fields

    Raises:
        MissingIdentifierError: If anchor_rxcui is empty
        MappingNotFoundError: If no mapping exists for the anchor
    """
    if not anchor_rxcui:
        raise MissingIdentifierError("Missing anchor_rxcui")

    org_default = policy_store.org_default_severity()

    mapping = mapping_store.get(anchor_rxcui)
    if mapping is None:
        raise MappingNotFoundError(anchor_rxcui)

    resolved = resolve(org_default, mapping.severity_override)
    logger.debug(
        f"Anchor {anchor_rxcui}: {resolved.severity.value} ({resolved.source.value})"
    )

    payload = {
        "anchor": {
            "rxcui": mapping.anchor_rxcui,
            "name": mapping.anchor_name,
            "tty": mapping.anchor_tty,
        },
        "substitutes": [s.to_dict() for s in mapping.substitutes],
    }
    payload.update(resolved.to_dict())
    payload.update({
        "mapping_status": mapping.status.value,
        "updated_at": mapping.updated_at.isoformat() if mapping.updated_at else None,
        "evidence_nuggets": [n.to_dict() for n in mapping.evidence_nuggets],
        "conditions": mapping.conditions.to_dict() if mapping.conditions else None,
    })
    if problem_list is not None:
        payload["conditions_met"] = conditions_satisfied(mapping.conditions, problem_list)
    return payload
