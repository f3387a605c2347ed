"""Clients for NLM drug and condition lookup services.

RxNorm (RxNav) is used to pick anchor and substitute drugs; the NLM
Clinical Tables API is used to pick ICD-10 / ICD-9 conditions for
condition-gated mappings.
"""

import logging

import requests

from .config import config
from .exceptions import LookupServiceError

logger = logging.getLogger(__name__)

MIN_CONDITION_QUERY_LENGTH = 2


class LookupClient:
    """Shared requests session handling for lookup services."""

    def __init__(self, base_url: str, timeout: int | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or config.HTTP_TIMEOUT_SECONDS
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def get(self, path: str, params: dict | None = None):
        """GET a JSON document from the service."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.warning(f"Lookup request to {url} failed: {e}")
            raise LookupServiceError(f"Lookup failed: {e}") from e
        except ValueError as e:
            raise LookupServiceError(f"Lookup returned invalid JSON: {e}") from e


class RxNormClient(LookupClient):
    """Drug search against the RxNav REST API."""

    def __init__(self, base_url: str | None = None, timeout: int | None = None):
        super().__init__(base_url or config.RXNAV_BASE_URL, timeout)

    def search(self, query: str | None) -> list[dict]:
        """Search drugs by name.

        Returns:
            List of {rxcui, name, tty} concepts; empty for a blank query
        """
        q = (query or "").strip()
        if not q:
            return []

        data = self.get("drugs.json", {"name": q}) or {}
        groups = (data.get("drugGroup") or {}).get("conceptGroup") or []

        results = []
        for group in groups:
            for concept in group.get("conceptProperties") or []:
                results.append({
                    "rxcui": concept.get("rxcui"),
                    "name": concept.get("name"),
                    "tty": concept.get("tty"),
                })
        return results


class ClinicalTablesClient(LookupClient):
    """Condition search against the NLM Clinical Tables API."""

    ICD10_PATH = "icd10cm/v3/search"
    ICD9_PATH = "icd9cm_dx/v3/search"

    def __init__(self, base_url: str | None = None, timeout: int | None = None):
        super().__init__(base_url or config.CLINICAL_TABLES_BASE_URL, timeout)

    def _search(self, path: str, terms: str | None, params: dict, max_list: int) -> list[dict]:
        q = (terms or "").strip()
        if len(q) < MIN_CONDITION_QUERY_LENGTH:
            return []

        data = self.get(path, {"terms": q, "maxList": max_list, **params})

        # Response is [total, codes, extra, display_rows]
        rows = data[3] if isinstance(data, list) and len(data) > 3 else None
        if not isinstance(rows, list):
            return []

        return [
            {
                "code": row[0] if len(row) > 0 else None,
                "name": row[1] if len(row) > 1 else "",
            }
            for row in rows
            if isinstance(row, list)
        ]

    def search_icd10(self, terms: str | None, max_list: int = 10) -> list[dict]:
        """Search ICD-10-CM conditions, returning {code, name} rows."""
        return self._search(
            self.ICD10_PATH, terms, {"sf": "code,name", "df": "code,name"}, max_list
        )

    def search_icd9(self, terms: str | None, max_list: int = 10) -> list[dict]:
        """Search ICD-9-CM diagnoses, returning {code, name} rows."""
        return self._search(
            self.ICD9_PATH,
            terms,
            {"sf": "short_name,long_name", "df": "code_dotted,long_name"},
            max_list,
        )
