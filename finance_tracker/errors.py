"""Exceptions raised by the Finance Tracker core."""

from __future__ import annotations

from typing import List, Sequence


class FinanceTrackerError(Exception):
    """Base class for every error surfaced to the web layer or CLI."""


class RetrievalFailed(FinanceTrackerError):
    """A read against the transaction store failed."""


class WriteFailed(FinanceTrackerError):
    """A create, update or delete against the transaction store failed."""


class ValidationFailed(FinanceTrackerError):
    """Submitted transaction fields violate one or more constraints."""

    def __init__(self, errors: Sequence[str]):
        self.errors: List[str] = list(errors)
        super().__init__("; ".join(self.errors))


class DataIntegrityError(FinanceTrackerError):
    """A stored transaction carries a value outside the closed type set."""
