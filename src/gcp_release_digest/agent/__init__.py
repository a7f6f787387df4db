"""
Release Digest Agent - orchestrates the release notes digest.

This module provides the agent that:
- Builds the channel routing from configuration
- Fetches products and release notes per channel
- Summarizes each product's notes with the hosted model
- Posts announcements, summaries and closing messages to chat webhooks
"""

from .orchestrator import ReleaseDigestAgent
from .models import (
    GENERAL_CHANNEL,
    Channel,
    ChannelPlan,
    ChannelResult,
    ConfigurationError,
    DigestConfig,
    DigestResult,
    ProductResult,
    StepStatus,
)

__all__ = [
    "ReleaseDigestAgent",
    "GENERAL_CHANNEL",
    "Channel",
    "ChannelPlan",
    "ChannelResult",
    "ConfigurationError",
    "DigestConfig",
    "DigestResult",
    "ProductResult",
    "StepStatus",
]
