"""Append-only audit log for policy and mapping governance actions."""

import json
import logging
import os
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .config import config

logger = logging.getLogger(__name__)


class AuditEvent(Enum):
    """Governance actions recorded in the audit log."""
    ORG_POLICY_UPDATE = "org_policy_update"
    MAPPING_AUTHORIZE = "mapping_authorize"


class AuditLog:
    """JSON Lines audit trail, one entry per line."""

    def __init__(self, path: str | None = None):
        self.path = os.path.expanduser(path or config.get_audit_log_path())

    def append(
        self,
        event: AuditEvent | str,
        actor: str | None = None,
        reason: str = "",
        before: Any = None,
        after: Any = None,
        **extra: Any,
    ) -> dict[str, Any]:
        """Append an entry to the log.

        Args:
            event: What happened
            actor: Who did it ("unknown" when not supplied)
            reason: Free-text justification
            before: Document state before the change
            after: Document state after the change
            **extra: Request metadata such as ip or user_agent

        Returns:
            The entry as written
        """
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event.value if isinstance(event, AuditEvent) else event,
            "actor": actor or "unknown",
            "reason": reason or "",
            **extra,
            "before": before,
            "after": after,
        }

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")

        logger.info(f"Audit: {entry['event']} by {entry['actor']}")
        return entry

    def entries(self) -> list[dict[str, Any]]:
        """Read all entries, oldest first."""
        if not os.path.exists(self.path):
            return []
        with open(self.path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
