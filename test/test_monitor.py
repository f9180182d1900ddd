#!/usr/bin/env python3
"""Tests for FinalityMonitor wiring the sampler to the checker."""

import asyncio
import logging
from unittest.mock import AsyncMock

import httpx
import pytest

from fakes import NODE_URL, FakeNode, respond_with
from finality_monitor.checker import Clause
from finality_monitor.config import MonitorConfig
from finality_monitor.exceptions import InvariantViolation
from finality_monitor.models import Snapshot
from finality_monitor.monitor import FinalityMonitor
from finality_monitor.utils.node_client import NodeClient


class ScriptedNode(FakeNode):
    """Fake node that moves to the next scripted heights on every round.
    
    The last entry is repeated once the script runs out.
    """

    def __init__(self, rounds):
        super().__init__()
        self.rounds = list(rounds)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/blocks/best" and self.rounds:
            self.set_heights(*self.rounds.pop(0))
        return super().handler(request)


def make_monitor(node: FakeNode, clock, **config) -> FinalityMonitor:
    client = NodeClient(base_url=NODE_URL, transport=httpx.MockTransport(node.handler))
    return FinalityMonitor(MonitorConfig(node_url=NODE_URL, **config), client=client, clock=clock)


async def run_until_failure(monitor: FinalityMonitor):
    with pytest.raises(InvariantViolation) as exc_info:
        await asyncio.wait_for(monitor.run(), timeout=5)
    return exc_info.value


class TestFinalityMonitor:
    """Test suite for FinalityMonitor."""
    
    def test_builds_client_from_config(self):
        monitor = FinalityMonitor(MonitorConfig(node_url=NODE_URL, request_timeout=3, retry_count=2))
        assert monitor.client.base_url == NODE_URL
        assert monitor.client.retry_count == 2
        assert monitor.sampler.ticker.period == 2
    
    def test_check_counts_rounds(self, virtual_clock):
        monitor = make_monitor(FakeNode(), virtual_clock)
        monitor.check(Snapshot(best=1))
        monitor.check(Snapshot(best=2))
        assert monitor.rounds_checked == 2
    
    def test_check_raises_on_violation(self, virtual_clock, caplog):
        monitor = make_monitor(FakeNode(), virtual_clock)
        with caplog.at_level(logging.CRITICAL, logger="finality_monitor.monitor"):
            with pytest.raises(InvariantViolation):
                monitor.check(Snapshot(best=10, justified=180))
        assert "[early-phase]" in caplog.text
    
    @pytest.mark.asyncio
    async def test_stops_on_first_violation(self, virtual_clock):
        node = ScriptedNode([
            (100, 0, 0),
            (358, 0, 0),
            (500, 320, 140),
            (501, 320, 100),  # justified - finalized = 220
        ])
        monitor = make_monitor(node, virtual_clock)
        
        violation = await run_until_failure(monitor)
        
        assert violation.clause is Clause.JUSTIFIED_GAP
        assert violation.snapshot.best == 501
        assert monitor.rounds_checked == 4
    
    @pytest.mark.asyncio
    async def test_successor_already_finalized(self, virtual_clock):
        node = ScriptedNode([(500, 320, 140)])
        node.finalized_blocks.add(141)
        monitor = make_monitor(node, virtual_clock)
        
        violation = await run_until_failure(monitor)
        
        assert violation.clause is Clause.SUCCESSOR_FINALIZED
        assert monitor.rounds_checked == 1
    
    @pytest.mark.asyncio
    async def test_fetch_error_fails_round(self, virtual_clock):
        node = ScriptedNode([(500, 320, 140)])
        node.failures["/blocks/justified"] = respond_with(503)
        monitor = make_monitor(node, virtual_clock)
        
        violation = await run_until_failure(monitor)
        
        assert violation.clause is Clause.FETCH_ERRORS
        assert "Error getting justified block" in str(violation)
        assert monitor.rounds_checked == 1
    
    @pytest.mark.asyncio
    async def test_retry_absorbs_transient_fetch_error(self, virtual_clock):
        node = ScriptedNode([(100, 0, 0), (102, 0, 0), (104, 0, 180)])
        monitor = make_monitor(node, virtual_clock, retry_count=1)
        attempts = []

        def flaky_once(request):
            attempts.append(request)
            if len(attempts) == 1:
                return httpx.Response(503)
            return httpx.Response(200, json={"number": node.justified, "isFinalized": False})

        node.failures["/blocks/justified"] = flaky_once
        
        violation = await run_until_failure(monitor)
        
        assert violation.clause is Clause.EARLY_PHASE
        assert monitor.rounds_checked == 3
    
    @pytest.mark.asyncio
    async def test_rounds_are_paced_by_sampling_interval(self, virtual_clock):
        node = ScriptedNode([(1, 0, 0), (2, 0, 0), (3, 0, 0), (4, 180, 0)])
        monitor = make_monitor(node, virtual_clock, sampling_interval=5)
        
        await run_until_failure(monitor)
        
        assert virtual_clock.sleeps[:4] == [5, 5, 5, 5]
    
    @pytest.mark.asyncio
    async def test_client_closed_after_run(self, virtual_clock):
        node = ScriptedNode([(10, 1, 0)])
        monitor = make_monitor(node, virtual_clock)
        
        await run_until_failure(monitor)
        
        assert monitor.client._client.is_closed
    
    @pytest.mark.asyncio
    async def test_sampler_crash_propagates(self, virtual_clock):
        monitor = make_monitor(FakeNode(), virtual_clock)
        monitor.sampler.sample = AsyncMock(side_effect=RuntimeError("sampler exploded"))
        
        with pytest.raises(RuntimeError, match="sampler exploded"):
            await asyncio.wait_for(monitor.run(), timeout=5)
        assert monitor.rounds_checked == 0
    
    @pytest.mark.asyncio
    async def test_periodic_status_line(self, virtual_clock, caplog):
        node = ScriptedNode([(1, 0, 0), (2, 0, 0), (3, 0, 0), (4, 0, 1)])
        monitor = make_monitor(node, virtual_clock)
        monitor.STATUS_LOG_ROUNDS = 2
        
        with caplog.at_level(logging.INFO, logger="finality_monitor.monitor"):
            await run_until_failure(monitor)
        
        assert "Status: 2 rounds checked, best=2" in caplog.text
