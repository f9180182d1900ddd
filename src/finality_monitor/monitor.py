"""
Finality monitor service.

Runs the sampler as a background task and checks every snapshot it produces
against the checkpoint-consistency rules. The first failure stops the monitor.
"""

import asyncio
import logging
from typing import NoReturn

from .checker import check_snapshot
from .config import MonitorConfig
from .exceptions import InvariantViolation
from .models import Snapshot
from .sampler import Sampler
from .utils.node_client import NodeClient
from .utils.ticker import Clock, Ticker

logger = logging.getLogger(__name__)


class FinalityMonitor:
    """
    Wires the sampler to the checker through a one-slot queue.
    
    The monitor owns the node client and closes it when ``run`` exits.
    """
    
    STATUS_LOG_ROUNDS = 30  # passing rounds between status lines

    def __init__(
        self,
        config: MonitorConfig,
        client: NodeClient | None = None,
        clock: Clock | None = None,
    ):
        """
        Initialize the monitor.

        Args:
            config: Monitor configuration
            client: Node client, built from ``config`` when omitted
            clock: Time source for the sampling ticker
        """
        self.config = config
        self.client = client or NodeClient(
            base_url=config.node_url,
            timeout=config.request_timeout,
            retry_count=config.retry_count,
        )
        self.sampler = Sampler(
            client=self.client,
            ticker=Ticker(config.sampling_interval, clock=clock),
        )
        self.rounds_checked = 0

    def check(self, snapshot: Snapshot) -> None:
        """
        Check one snapshot.

        Raises:
            InvariantViolation: If the snapshot fails any rule
        """
        self.rounds_checked += 1
        try:
            check_snapshot(snapshot, self.config.checkpoint_interval)
        except InvariantViolation as e:
            logger.critical(
                f"Round {self.rounds_checked} failed [{e.clause.value}]: {e}"
            )
            logger.critical(f"Snapshot: {snapshot}")
            raise

        logger.debug(f"Round {self.rounds_checked} passed: {snapshot}")
        if self.rounds_checked % self.STATUS_LOG_ROUNDS == 0:
            logger.info(
                f"Status: {self.rounds_checked} rounds checked, "
                f"best={snapshot.best}, justified={snapshot.justified}, "
                f"finalized={snapshot.finalized}"
            )

    async def _next_snapshot(
        self,
        queue: asyncio.Queue[Snapshot],
        sampler_task: asyncio.Task,
    ) -> Snapshot:
        """Wait for the next snapshot, surfacing a crashed sampler."""
        get_task = asyncio.create_task(queue.get())
        done, _ = await asyncio.wait(
            {get_task, sampler_task}, return_when=asyncio.FIRST_COMPLETED
        )
        if get_task in done:
            return get_task.result()

        get_task.cancel()
        try:
            await get_task
        except asyncio.CancelledError:
            pass  # Expected when cancelling
        # Raises whatever killed the sampler
        sampler_task.result()
        raise RuntimeError("Sampler stopped without an error")

    async def run(self) -> NoReturn:
        """
        Monitor the node until a snapshot fails a check.

        Raises:
            InvariantViolation: On the first failed round
        """
        logger.info(f"Finality monitor starting for {self.config.node_url}")
        logger.info(f"Checkpoint interval: {self.config.checkpoint_interval} blocks")

        queue: asyncio.Queue[Snapshot] = asyncio.Queue(maxsize=1)
        sampler_task = asyncio.create_task(self.sampler.run(queue), name="sampler")
        try:
            while True:
                snapshot = await self._next_snapshot(queue, sampler_task)
                self.check(snapshot)
        finally:
            if not sampler_task.done():
                sampler_task.cancel()
                try:
                    await sampler_task
                except asyncio.CancelledError:
                    pass  # Expected when cancelling
            await self.client.aclose()
            logger.info(f"Finality monitor stopped after {self.rounds_checked} rounds")
