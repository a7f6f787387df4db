"""Observability utilities (logging with run correlation)."""

from .logger import (
    configure_logging,
    get_logger,
    new_correlation_id,
    bind_correlation_id,
    get_correlation_id,
)
