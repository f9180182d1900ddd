"""Exception hierarchy for the finality monitor."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .checker import Clause
    from .models import Snapshot


class MonitorError(Exception):
    """Base class for all monitor errors."""


class FetchError(MonitorError):
    """A single request to the node API failed."""


class TransportError(FetchError):
    """The node could not be reached (connection refused, DNS, timeout...)."""


class HTTPStatusError(FetchError):
    """The node answered with a non-200 status."""
    
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class BodyReadError(FetchError):
    """The response body could not be read in full."""


class DecodeError(FetchError):
    """The response body is not a valid block summary."""


class InvariantViolation(MonitorError):
    """A snapshot broke the checkpoint-consistency rules.
    
    Attributes:
        clause: The rule that failed
        snapshot: The snapshot that was being checked
    """
    
    def __init__(self, message: str, clause: "Clause", snapshot: "Snapshot") -> None:
        super().__init__(message)
        self.clause = clause
        self.snapshot = snapshot
