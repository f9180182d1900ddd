#!/usr/bin/env python3
"""Configuration management for the finality monitor.

This module provides a type-safe configuration dataclass with validation.
Configuration is loaded from environment variables with defaults matching
the node's standard checkpoint parameters.
"""

import logging
import math
import os
from dataclasses import dataclass, replace
from typing import ClassVar
from urllib.parse import urlparse

# Get logger for this module
logger = logging.getLogger(__name__)

DEFAULT_NODE_URL = "http://localhost:8689/"


def _env_number(name: str, default: str, kind: type[int] | type[float] = int) -> int | float:
    """Read a numeric environment variable.
    
    Raises:
        ValueError: If the variable is set to something that is not a number
    """
    raw = os.environ.get(name, default).strip()
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(
            f"{name} must be numeric, got {raw!r}"
        ) from None


@dataclass(frozen=True, slots=True)
class MonitorConfig:
    """Configuration for monitoring a single node.
    
    Attributes:
        node_url: Base HTTP(S) address of the node API
        sampling_interval: Seconds between two sampling rounds (one block interval)
        checkpoint_interval: Number of blocks between two BFT checkpoints
        request_timeout: Per-request HTTP timeout in seconds
        retry_count: Extra attempts for a failed fetch within one round
    """
    
    node_url: str = DEFAULT_NODE_URL
    sampling_interval: float = 2  # seconds, one block interval
    checkpoint_interval: int = 180  # blocks between two bft checkpoints
    request_timeout: float = 10  # seconds
    retry_count: int = 0
    
    MAX_SAMPLING_INTERVAL: ClassVar[int] = 300
    MAX_REQUEST_TIMEOUT: ClassVar[int] = 120
    MAX_RETRY_COUNT: ClassVar[int] = 10
    
    def __post_init__(self) -> None:
        """Validate monitor configuration."""
        if not self.node_url:
            raise ValueError("Node URL is required (NODE_URL)")
        
        parsed = urlparse(self.node_url)
        if parsed.scheme not in ('http', 'https'):
            raise ValueError(
                f"Invalid node URL scheme: {parsed.scheme or '(none)'}. "
                "Expected http or https"
            )
        if not parsed.netloc:
            raise ValueError(f"Node URL has no host: {self.node_url}")
        
        if not math.isfinite(self.sampling_interval):
            raise ValueError(f"Sampling interval must be a finite number, got {self.sampling_interval}")
        if self.sampling_interval <= 0:
            raise ValueError(f"Sampling interval must be positive, got {self.sampling_interval}")
        if self.sampling_interval > self.MAX_SAMPLING_INTERVAL:
            raise ValueError(
                f"Sampling interval too long (max {self.MAX_SAMPLING_INTERVAL}s), "
                f"got {self.sampling_interval}"
            )
        
        if self.checkpoint_interval < 1:
            raise ValueError(f"Checkpoint interval must be at least 1, got {self.checkpoint_interval}")
        
        if not math.isfinite(self.request_timeout):
            raise ValueError(f"Request timeout must be a finite number, got {self.request_timeout}")
        if self.request_timeout <= 0:
            raise ValueError(f"Request timeout must be positive, got {self.request_timeout}")
        if self.request_timeout > self.MAX_REQUEST_TIMEOUT:
            raise ValueError(
                f"Request timeout too long (max {self.MAX_REQUEST_TIMEOUT}s), "
                f"got {self.request_timeout}"
            )
        
        if self.retry_count < 0:
            raise ValueError(f"Retry count must be non-negative, got {self.retry_count}")
        if self.retry_count > self.MAX_RETRY_COUNT:
            raise ValueError(
                f"Retry count too high (max {self.MAX_RETRY_COUNT}), got {self.retry_count}"
            )
    
    @classmethod
    def from_env(cls) -> "MonitorConfig":
        """Load configuration from environment variables.
        
        Returns:
            MonitorConfig instance with loaded values
            
        Raises:
            ValueError: If an environment variable is malformed or out of range
        """
        return cls(
            node_url=os.environ.get("NODE_URL", DEFAULT_NODE_URL).strip(),
            sampling_interval=_env_number("SAMPLING_INTERVAL", "2", float),
            checkpoint_interval=_env_number("CHECKPOINT_INTERVAL", "180"),
            request_timeout=_env_number("REQUEST_TIMEOUT", "10", float),
            retry_count=_env_number("RETRY_COUNT", "0"),
        )
    
    def with_node_url(self, node_url: str) -> "MonitorConfig":
        """Return a copy of this config pointing at another node."""
        return replace(self, node_url=node_url)
    
    def log_config(self) -> None:
        """Log the configuration in a readable format."""
        logger.info("=" * 60)
        logger.info("Finality Monitor Configuration")
        logger.info("=" * 60)
        logger.info(f"  Node URL: {self.node_url}")
        logger.info(f"  Sampling Interval: {self.sampling_interval} seconds")
        logger.info(f"  Checkpoint Interval: {self.checkpoint_interval} blocks")
        logger.info(f"  Request Timeout: {self.request_timeout} seconds")
        logger.info(f"  Retry Count: {self.retry_count}")
        logger.info("=" * 60)
