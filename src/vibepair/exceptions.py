"""Error types raised by the orchestration layer and its collaborators."""

from __future__ import annotations


class VibePairError(Exception):
    """Base class for vibepair errors."""


class GenerationError(VibePairError):
    """The generation collaborator could not produce a response."""


class ReviewError(VibePairError):
    """The review collaborator could not produce a review."""


class AnalysisError(VibePairError):
    """Every branch of a live analysis pass failed."""

    def __init__(self, message: str, failures: list[BaseException] | None = None):
        super().__init__(message)
        self.failures = list(failures or [])


class WorkflowInProgressError(VibePairError):
    """A pair workflow was started while another one is still running."""
