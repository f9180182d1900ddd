#!/usr/bin/env python3
"""Sampling of the node's best, justified and finalized heights.

Each round issues four fetches in order and bundles whatever came back,
together with a description of every failed fetch, into one Snapshot.
"""

import asyncio
import logging
from collections.abc import Awaitable

from .exceptions import FetchError
from .models import BlockSummary, Snapshot
from .utils.node_client import NodeClient
from .utils.ticker import Ticker

# Get logger for this module
logger = logging.getLogger(__name__)


class Sampler:
    """Produces one Snapshot of the node per ticker period.
    
    A failed fetch never aborts the round. The affected field stays at its
    zero value and the failure is recorded in the snapshot's ``errors``.
    Every round starts from an empty error list.
    """
    
    def __init__(self, client: NodeClient, ticker: Ticker) -> None:
        """Initialize the Sampler.
        
        Args:
            client: Node API client used for all fetches
            ticker: Ticker pacing the rounds
        """
        self.client = client
        self.ticker = ticker
        self.rounds_sampled = 0
    
    async def sample(self) -> Snapshot:
        """Run a single sampling round.
        
        Returns:
            Snapshot of the node, with any fetch failures listed in ``errors``
        """
        errors: list[str] = []
        
        best = await self._fetch("best block", self.client.get_best(), errors)
        justified = await self._fetch("justified block", self.client.get_justified(), errors)
        finalized = await self._fetch("finalized block", self.client.get_finalized(), errors)
        after_finalized = await self._fetch(
            "block after finalized",
            self.client.get_block(finalized.number + 1),
            errors,
        )
        
        self.rounds_sampled += 1
        return Snapshot(
            best=best.number,
            justified=justified.number,
            finalized=finalized.number,
            after_finalized=after_finalized,
            errors=tuple(errors),
        )
    
    async def run(self, queue: asyncio.Queue[Snapshot]) -> None:
        """Sample forever, handing each snapshot to ``queue``.
        
        ``queue.put`` blocks while the consumer still holds an unread
        snapshot, so the sampler never runs more than one round ahead.
        
        Args:
            queue: Bounded queue read by the checker
        """
        logger.info(f"Sampler started, one round every {self.ticker.period} seconds")
        while True:
            await self.ticker.tick()
            snapshot = await self.sample()
            logger.debug(f"Round {self.rounds_sampled}: {snapshot}")
            await queue.put(snapshot)
    
    @staticmethod
    async def _fetch(
        what: str,
        request: Awaitable[BlockSummary],
        errors: list[str],
    ) -> BlockSummary:
        try:
            return await request
        except FetchError as e:
            message = f"Error getting {what}: {e}"
            logger.warning(message)
            errors.append(message)
            return BlockSummary()
