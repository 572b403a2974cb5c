from __future__ import annotations

from stats_dispatch.core.models import ValidationOutcome


class StatsDispatchError(Exception):
    """Base class for errors raised by the dispatch engine."""


class InputError(StatsDispatchError):
    """Dataset could not be read or is not usable for analysis."""


class ValidationError(StatsDispatchError):
    """A request did not satisfy the preconditions of its test."""

    def __init__(self, outcome: ValidationOutcome) -> None:
        super().__init__(outcome.reason)
        self.outcome = outcome


class ComputationError(StatsDispatchError):
    """A test executor hit numerically degenerate input."""

    def __init__(self, test_name: str, cause: str) -> None:
        super().__init__(f"{test_name}: {cause}")
        self.test_name = test_name
        self.cause = cause
