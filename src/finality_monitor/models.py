#!/usr/bin/env python3
"""Data models for the finality monitor.

This module provides immutable data classes for the block summaries returned
by the node API and for the per-round snapshot handed from the sampler to
the checker.
"""

from dataclasses import dataclass
from typing import Any

from .exceptions import DecodeError


@dataclass(frozen=True, slots=True)
class BlockSummary:
    """Summary of a single block as reported by the node.
    
    Attributes:
        number: Block height
        is_finalized: Whether the node considers this block finalized
    """
    
    number: int = 0
    is_finalized: bool = False
    
    @classmethod
    def from_json(cls, payload: Any) -> "BlockSummary":
        """Build a BlockSummary from a decoded JSON body.
        
        Unknown keys are ignored, the node returns a lot more than we need.
        
        Args:
            payload: Decoded JSON value
            
        Returns:
            BlockSummary instance
            
        Raises:
            DecodeError: If the payload does not have the expected shape
        """
        match payload:
            case {"number": int(number), "isFinalized": bool(is_finalized)} if (
                not isinstance(number, bool) and number >= 0
            ):
                return cls(number=number, is_finalized=is_finalized)
            case dict():
                raise DecodeError(
                    "block summary needs a non-negative integer 'number' and "
                    f"a boolean 'isFinalized', got {payload!r}"
                )
            case _:
                raise DecodeError(
                    f"block summary must be a JSON object, got {type(payload).__name__}"
                )


@dataclass(frozen=True, slots=True)
class Snapshot:
    """One sampling round's view of the node.
    
    Fields whose fetch failed are left at their zero value and the failure
    is described in ``errors``.
    
    Attributes:
        best: Height of the chain head
        justified: Height of the latest justified block
        finalized: Height of the latest finalized block
        after_finalized: Summary of the block at ``finalized + 1``
        errors: Fetch failures collected during the round, in fetch order
    """
    
    best: int = 0
    justified: int = 0
    finalized: int = 0
    after_finalized: BlockSummary = BlockSummary()
    errors: tuple[str, ...] = ()
    
    @property
    def ok(self) -> bool:
        """True when every fetch of the round succeeded."""
        return not self.errors
    
    def __str__(self) -> str:
        return (
            f"Best: {self.best}, Justified: {self.justified}, "
            f"Finalized: {self.finalized}, Error: {list(self.errors)}"
        )
