"""
Finality monitor package.

Liveness and checkpoint-consistency monitor for a single BFT blockchain node.
"""

from .checker import Clause, check_snapshot
from .config import MonitorConfig
from .exceptions import FetchError, InvariantViolation, MonitorError
from .models import BlockSummary, Snapshot
from .monitor import FinalityMonitor
from .sampler import Sampler

__all__ = [
    "BlockSummary",
    "Clause",
    "FetchError",
    "FinalityMonitor",
    "InvariantViolation",
    "MonitorConfig",
    "MonitorError",
    "Sampler",
    "Snapshot",
    "check_snapshot",
]
__version__ = "0.1.0"
