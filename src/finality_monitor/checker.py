#!/usr/bin/env python3
"""Checkpoint-consistency rules for a node snapshot.

With a checkpoint interval ``C`` the node must report, once the head has
reached ``2C - 1``:

- justified exactly one checkpoint ahead of finalized,
- ``C - 1 <= best - justified < 2C - 1``,
- ``2C - 1 <= best - finalized < 3C - 1``,
- the block right after the finalized one not yet finalized.

Before that point nothing may be justified or finalized yet.
"""

from enum import Enum

from .exceptions import InvariantViolation
from .models import Snapshot


class Clause(str, Enum):
    """Names of the individual rules a snapshot is checked against."""
    
    FETCH_ERRORS = "fetch-errors"
    EARLY_PHASE = "early-phase"
    JUSTIFIED_GAP = "justified-gap"
    BEST_JUSTIFIED_RANGE = "best-justified-range"
    BEST_FINALIZED_RANGE = "best-finalized-range"
    SUCCESSOR_FINALIZED = "successor-finalized"


def is_steady_phase(best: int, checkpoint_interval: int) -> bool:
    """True once the head has reached two checkpoints minus one block."""
    return best >= 2 * checkpoint_interval - 1


def check_snapshot(snapshot: Snapshot, checkpoint_interval: int = 180) -> None:
    """Validate one snapshot.
    
    Rules are evaluated in a fixed order and the first one that fails is
    reported. Each call is independent of any earlier snapshot.
    
    Args:
        snapshot: Snapshot produced by the sampler
        checkpoint_interval: Blocks between two BFT checkpoints
        
    Raises:
        InvariantViolation: If the snapshot has fetch errors or breaks a rule
    """
    c = checkpoint_interval
    s = snapshot

    def fail(clause: Clause, message: str) -> InvariantViolation:
        return InvariantViolation(message, clause=clause, snapshot=s)

    if not s.ok:
        raise fail(Clause.FETCH_ERRORS, "\n".join(s.errors))

    if not is_steady_phase(s.best, c):
        if s.justified != 0 or s.finalized != 0:
            raise fail(
                Clause.EARLY_PHASE,
                f"best block height {s.best} is less than 2 epochs - 1 ({2 * c - 1}), "
                f"justified ({s.justified}) and finalized ({s.finalized}) should be 0",
            )
        return

    if s.justified - s.finalized != c:
        raise fail(
            Clause.JUSTIFIED_GAP,
            f"justified block number - finalized block number != {c} "
            f"(justified={s.justified}, finalized={s.finalized})",
        )

    if not c - 1 <= s.best - s.justified < 2 * c - 1:
        raise fail(
            Clause.BEST_JUSTIFIED_RANGE,
            f"expected {c - 1} <= head number - justified block number < {2 * c - 1} "
            f"(best={s.best}, justified={s.justified})",
        )

    if not 2 * c - 1 <= s.best - s.finalized < 3 * c - 1:
        raise fail(
            Clause.BEST_FINALIZED_RANGE,
            f"finalized block number out of bound: expected {2 * c - 1} <= "
            f"head number - finalized block number < {3 * c - 1} "
            f"(best={s.best}, finalized={s.finalized})",
        )

    if s.after_finalized.is_finalized:
        raise fail(
            Clause.SUCCESSOR_FINALIZED,
            f"block {s.finalized + 1} after finalized block {s.finalized} "
            "should not be finalized",
        )
