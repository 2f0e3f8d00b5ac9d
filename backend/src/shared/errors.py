"""
Error taxonomy for the human-response acquisition flow.
Handlers catch these at their boundary and turn them into text results.
"""
from typing import Any, Dict, Optional


class HumanLoopError(Exception):
    """Base class for all failures raised by the shared modules."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        return self.message


class TaskCreationError(HumanLoopError):
    """The marketplace did not return a HIT id. Fatal to the current call."""


class TransientPollError(HumanLoopError):
    """A single assignment poll failed. The poll loop keeps going."""


class ApprovalError(HumanLoopError):
    """Approving an assignment failed. Never blocks returning the answer."""


class MalformedAnswerError(HumanLoopError):
    """An answer payload was present but not in the expected shape."""


class NotFoundError(HumanLoopError):
    """The requested HIT does not exist."""


class MarketplaceError(HumanLoopError):
    """Any other failed marketplace call."""
