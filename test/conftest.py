"""Shared fixtures for the finality monitor tests."""

import httpx
import pytest

from fakes import NODE_URL, FakeNode, VirtualClock
from finality_monitor.utils.node_client import NodeClient


@pytest.fixture
def virtual_clock():
    """A clock that never really sleeps."""
    return VirtualClock()


@pytest.fixture
def fake_node():
    """A node at genesis."""
    return FakeNode()


@pytest.fixture
def node_client(fake_node):
    """NodeClient talking to ``fake_node`` through a mock transport."""
    return NodeClient(
        base_url=NODE_URL,
        timeout=10.0,
        transport=httpx.MockTransport(fake_node.handler),
    )
