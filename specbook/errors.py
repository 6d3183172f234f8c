"""Error taxonomy for specbook operations."""

from __future__ import annotations


class SpecbookError(Exception):
    """Base class for specbook errors."""
    pass


class ObjectNotFoundError(SpecbookError):
    """An operation referenced an object id absent from the index."""

    def __init__(self, object_id: str):
        self.object_id = object_id
        super().__init__(f"Object {object_id} not found.")


class InvalidOperationError(SpecbookError):
    """A structural violation, e.g. moving an object into its own descendant."""
    pass


class AnalysisServiceError(SpecbookError):
    """The external analysis call failed."""
    pass


class AnalysisTimeoutError(AnalysisServiceError):
    """The external analysis call did not finish in time."""
    pass


__all__ = [
    "SpecbookError",
    "ObjectNotFoundError",
    "InvalidOperationError",
    "AnalysisServiceError",
    "AnalysisTimeoutError",
]
