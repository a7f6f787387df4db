"""GCP Release Digest: summarized Google Cloud release notes, posted to chat webhooks."""

__version__ = "0.1.0"

# Main agent exports
from .agent import ReleaseDigestAgent, DigestConfig, DigestResult, ConfigurationError

__all__ = [
    "ReleaseDigestAgent",
    "DigestConfig",
    "DigestResult",
    "ConfigurationError",
]
