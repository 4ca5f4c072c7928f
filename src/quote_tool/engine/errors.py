"""
Engine errors.

Every error represents a rejected operation. The engine state is left
unchanged whenever one of these is raised.
"""
from typing import Optional


class QuoteEngineError(Exception):
    """Base class for rejected engine operations."""


class UnknownCatalogEntry(QuoteEngineError):
    """A referenced id is absent from the catalog."""

    def __init__(self, kind: str, entry_id: str, attribute: Optional[str] = None):
        self.kind = kind
        self.entry_id = entry_id
        self.attribute = attribute
        if attribute:
            message = f"Unknown {kind} '{entry_id}' for attribute '{attribute}'"
        else:
            message = f"Unknown {kind} '{entry_id}'"
        super().__init__(message)


class IncompleteSelection(QuoteEngineError):
    """A quote was requested before base package and contract were chosen."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Selection incomplete, missing: {', '.join(missing)}")


class InvalidStepTransition(QuoteEngineError):
    """Navigation past an incomplete step or outside the wizard range."""

    def __init__(self, current: int, target: int, reason: str):
        self.current = current
        self.target = target
        self.reason = reason
        super().__init__(f"Cannot move from step {current} to step {target}: {reason}")
