"""JSON document storage for org policy and substitution mappings.

Each document is read and written whole. There is no locking; the
service runs as a single process.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any

from .config import config
from .exceptions import MappingNotFoundError, StoreError
from .models import Mapping, MappingStatus, OrgPolicy

logger = logging.getLogger(__name__)

POLICY_FILE = "org_policy.json"
MAPPINGS_FILE = "mappings.json"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JsonDocumentStore:
    """Reads and writes whole JSON documents in a data directory."""

    def __init__(self, data_dir: str | None = None):
        """Initialize document store.

        Args:
            data_dir: Directory holding the JSON files. Defaults to DATA_DIR.
        """
        self.data_dir = os.path.expanduser(data_dir or config.DATA_DIR)

    def path_for(self, name: str) -> str:
        return os.path.join(self.data_dir, name)

    def read(self, name: str, default: Any = None) -> Any:
        """Read a document, returning default when the file is missing."""
        path = self.path_for(name)
        if not os.path.exists(path):
            return default
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"Malformed JSON in {path}: {e}") from e

    def write(self, name: str, data: Any) -> None:
        """Write a document, replacing any previous content."""
        os.makedirs(self.data_dir, exist_ok=True)
        path = self.path_for(name)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logger.debug(f"Wrote {path}")


class PolicyStore:
    """Organization policy document."""

    def __init__(self, documents: JsonDocumentStore, org_id: str | None = None):
        self.documents = documents
        self.org_id = org_id or config.ORG_ID

    def get_stored(self) -> dict:
        """Stored policy as-is, or an empty dict when none is saved."""
        policy = self.documents.read(POLICY_FILE, {})
        return policy if isinstance(policy, dict) else {}

    def get_raw(self) -> dict:
        """Stored policy as-is, or the default policy when none is saved."""
        policy = self.documents.read(POLICY_FILE, None)
        if not policy or not isinstance(policy, dict):
            return OrgPolicy.default(self.org_id).to_dict()
        return policy

    def get(self) -> OrgPolicy:
        return OrgPolicy.from_dict(self.get_raw())

    def save(self, policy: dict | OrgPolicy) -> None:
        if isinstance(policy, OrgPolicy):
            policy = policy.to_dict()
        self.documents.write(POLICY_FILE, policy)
        logger.info(f"Saved org policy {policy.get('org_id', self.org_id)}")

    def org_default_severity(self) -> str:
        """Raw default severity text for formulary substitution alerts."""
        return self.get().formulary_substitution_severity


class MappingStore:
    """Substitution mappings document, keyed by anchor RxCUI."""

    def __init__(self, documents: JsonDocumentStore):
        self.documents = documents

    def _read_rows(self) -> list[dict]:
        rows = self.documents.read(MAPPINGS_FILE, [])
        if isinstance(rows, dict):
            rows = list(rows.values())
        if not isinstance(rows, list):
            raise StoreError(f"{MAPPINGS_FILE} must hold a list of mappings")
        return [r for r in rows if isinstance(r, dict)]

    def _write(self, mappings: list[Mapping]) -> None:
        self.documents.write(MAPPINGS_FILE, [m.to_dict() for m in mappings])

    def list_mappings(self) -> list[Mapping]:
        return [Mapping.from_dict(r) for r in self._read_rows()]

    def get(self, anchor_rxcui: str) -> Mapping | None:
        """Get a mapping by anchor RxCUI."""
        for mapping in self.list_mappings():
            if mapping.anchor_rxcui == anchor_rxcui:
                return mapping
        return None

    def upsert(self, mapping: Mapping) -> Mapping:
        """Save a mapping, replacing any existing one for the same anchor.

        The saved mapping is stamped with updated_at.
        """
        mapping.updated_at = _now()
        existing = [m for m in self.list_mappings() if m.anchor_rxcui != mapping.anchor_rxcui]
        existing.append(mapping)
        self._write(existing)
        logger.info(f"Saved mapping for anchor {mapping.anchor_rxcui} ({mapping.status.value})")
        return mapping

    def authorize(self, anchor_rxcui: str, actor: str) -> tuple[Mapping, Mapping]:
        """Mark a mapping authorized.

        Returns:
            Tuple of (before, after) mappings

        Raises:
            MappingNotFoundError: If no mapping exists for the anchor
        """
        mappings = self.list_mappings()
        for idx, mapping in enumerate(mappings):
            if mapping.anchor_rxcui == anchor_rxcui:
                break
        else:
            raise MappingNotFoundError(anchor_rxcui)

        before = Mapping.from_dict(mapping.to_dict())
        now = _now()
        mapping.status = MappingStatus.AUTHORIZED
        mapping.authorized_by = str(actor)
        mapping.authorized_at = now
        mapping.updated_at = now
        mappings[idx] = mapping
        self._write(mappings)

        logger.info(f"Mapping {anchor_rxcui} authorized by {actor}")
        return before, mapping

    def delete(self, anchor_rxcui: str) -> bool:
        """Delete a mapping. Returns True if one was removed."""
        mappings = self.list_mappings()
        remaining = [m for m in mappings if m.anchor_rxcui != anchor_rxcui]
        self._write(remaining)
        removed = len(remaining) != len(mappings)
        if removed:
            logger.info(f"Deleted mapping for anchor {anchor_rxcui}")
        return removed
