"""
Failure types raised inside the fetch pipeline.

Public entry points never let these escape; they are caught and returned
as the ``error`` of a FetchResult so the UI can display the message.
"""

from __future__ import annotations


class PipelineError(RuntimeError):
    """
    Base class for fetch-level failures with a human-readable message.
    """


class TransportFailure(PipelineError):
    """
    Raised for non-2xx responses and network-level request failures.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WrongContentType(PipelineError):
    """
    Raised when a sheet export returns an HTML page instead of CSV.

    Usually means the sheet was unpublished or its sharing changed.
    """
