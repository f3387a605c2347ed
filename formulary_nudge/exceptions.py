"""Exceptions raised by the Formulary Nudge collaborators.

Severity resolution itself never raises; these cover the storage,
lookup and query layers around it.
"""


class FormularyNudgeError(Exception):
    """Base class for Formulary Nudge errors."""


class MissingIdentifierError(FormularyNudgeError):
    """A required drug identifier was not supplied."""


class MappingNotFoundError(FormularyNudgeError):
    """No substitution mapping exists for the requested anchor."""

    def __init__(self, anchor_rxcui: str):
        super().__init__(f"No mapping found for anchor_rxcui {anchor_rxcui}")
        self.anchor_rxcui = anchor_rxcui


class StoreError(FormularyNudgeError):
    """A stored JSON document could not be read or written."""


class LookupServiceError(FormularyNudgeError):
    """An external drug or condition lookup service failed."""
