"""
Exceptions
==========

Errors raised by the estimation engine and its collaborators.

Per-cell solver failures (singular Jacobian, non-convergence, invalid
lambda) are not exceptions: they are reported as statuses in the run-log.
"""


class WSBError(Exception):
    """Base class for all wsb-impact errors."""


class EmptyTimelineError(WSBError, ValueError):
    """The requested window holds no citations, so there is nothing to fit."""

    def __init__(self, message: str = "Timeline has no citation events") -> None:
        super().__init__(message)


class SearchCancelledError(WSBError):
    """A grid search was stopped by its cancellation signal."""

    def __init__(self, completed_cells: int) -> None:
        self.completed_cells = completed_cells
        super().__init__(f"Grid search cancelled after {completed_cells} cells")


class CitationDataError(WSBError, ValueError):
    """A citation history file could not be parsed."""
