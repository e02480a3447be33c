"""Exceptions and warnings raised by margeff."""

from __future__ import annotations


class MargeffError(Exception):
    """Base class for all margeff errors."""


class ConfigurationError(MargeffError, ValueError):
    """Invalid or conflicting configuration, rejected before any work is done."""


class RefitError(MargeffError, RuntimeError):
    """A replicate could not be computed.

    Raised per replicate when refitting or re-evaluating fails, and raised
    once more by ``inferences()`` when too few replicates survive.
    """

    def __init__(self, message: str, replicate: int | None = None):
        super().__init__(message)
        self.replicate = replicate


class PreconditionError(MargeffError, RuntimeError):
    """An operation needs state that the input object does not carry."""


class ReplicateFailureWarning(UserWarning):
    """Some replicates failed and were dropped from the summary."""
