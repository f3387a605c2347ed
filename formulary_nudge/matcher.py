"""Drug name matching and condition gating for substitution mappings.

Finds the mapping a prescriber's medication refers to, first by exact
normalized name and then by a simple fuzzy score, and checks whether a
mapping's problem-list conditions allow the suggestion to fire.
"""

import re
from dataclasses import dataclass

from .models import ConditionRule, Mapping

# Extra mapping keys that may hold alternative drug names
SYNONYM_FIELDS = ("synonyms", "alias", "aliases", "brand_synonyms")

# Fuzzy scoring weights
CONTAINS_QUERY_SCORE = 80
CONTAINED_IN_QUERY_SCORE = 70
TOKEN_OVERLAP_SCORE = 5

_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^\w\s.-]")


@dataclass
class MatchResult:
    """A mapping found for a drug name query."""
    mapping: Mapping
    how: str
    score: int | None = None  # None for exact matches

    @property
    def is_exact(self) -> bool:
        return self.score is None

    def to_dict(self) -> dict:
        return {
            "mapping": self.mapping.to_dict(),
            "how": self.how,
            "score": self.score,
            "exact": self.is_exact,
        }


def normalize_drug_name(text: str | None) -> str:
    """Normalize a drug name for matching."""
    s = _WHITESPACE_RE.sub(" ", (text or "").lower().strip())
    return _DISALLOWED_RE.sub("", s)


def collect_candidates(mapping: Mapping) -> list[str]:
    """Get every name or code that should match a mapping."""
    base = [
        str(v)
        for v in (mapping.anchor_name, mapping.anchor_rxcui, mapping.anchor_tty)
        if v
    ]

    for sub in mapping.substitutes:
        base.extend(str(v) for v in (sub.name, sub.rxcui, sub.tty) if v)

    for field_name in SYNONYM_FIELDS:
        value = mapping.extras.get(field_name)
        if isinstance(value, list):
            base.extend(str(v) for v in value)
        elif isinstance(value, str):
            base.append(value)

    # De-duplicate, keep first occurrence order
    return list(dict.fromkeys(base))


def _fuzzy_score(query_norm: str, candidate_norm: str) -> int:
    score = 0
    if query_norm in candidate_norm:
        score = CONTAINS_QUERY_SCORE
    if candidate_norm in query_norm:
        score = max(score, CONTAINED_IN_QUERY_SCORE)

    query_tokens = set(query_norm.split())
    candidate_tokens = set(candidate_norm.split())
    score += len(query_tokens & candidate_tokens) * TOKEN_OVERLAP_SCORE
    return score


def best_match(query: str, mappings: list[Mapping]) -> MatchResult | None:
    """Find the mapping that best matches a drug name or code.

    Exact matches win outright. Otherwise the highest fuzzy score wins,
    with the first candidate seen kept on ties.
    """
    query_norm = normalize_drug_name(query)
    if not query_norm:
        return None

    for mapping in mappings:
        for cand in collect_candidates(mapping):
            if normalize_drug_name(cand) == query_norm:
                return MatchResult(mapping=mapping, how=f'Exact match: "{cand}"')

    best: MatchResult | None = None
    for mapping in mappings:
        for cand in collect_candidates(mapping):
            cand_norm = normalize_drug_name(cand)
            if not cand_norm:
                continue
            score = _fuzzy_score(query_norm, cand_norm)
            if score > 0 and (best is None or score > best.score):
                best = MatchResult(
                    mapping=mapping,
                    how=f'Fuzzy match vs "{cand}" (score {score})',
                    score=score,
                )

    return best


def suggestions(mappings: list[Mapping], query: str = "", limit: int = 12) -> list[str]:
    """Get sorted anchor and substitute names, filtered by query."""
    names = set()
    for mapping in mappings:
        if mapping.anchor_name:
            names.add(mapping.anchor_name)
        for sub in mapping.substitutes:
            if sub.name:
                names.add(sub.name)

    ordered = sorted(names)
    q = normalize_drug_name(query)
    if not q:
        return ordered[:limit]
    return [n for n in ordered if q in normalize_drug_name(n)][:limit]


def find_authorized_mapping(drug_name: str, mappings: list[Mapping]) -> Mapping | None:
    """Find the authorized mapping whose anchor name matches a prescribed drug."""
    target = normalize_drug_name(drug_name)
    if not target:
        return None
    for mapping in mappings:
        if mapping.is_authorized() and normalize_drug_name(mapping.anchor_name) == target:
            return mapping
    return None


def conditions_satisfied(rule: ConditionRule | None, problem_list: list[str]) -> bool:
    """Check if a patient's problem list allows a gated suggestion.

    Args:
        rule: The mapping's condition rule, or None for ungated mappings
        problem_list: Patient condition names

    Returns:
        True if the suggestion should be shown
    """
    if rule is None:
        return True

    present = {normalize_drug_name(c) for c in problem_list}

    if any(normalize_drug_name(c) in present for c in rule.exclude):
        return False

    if not rule.include:
        return True

    hits = [normalize_drug_name(c) in present for c in rule.include]
    if rule.mode == "all":
        return all(hits)
    return any(hits)
