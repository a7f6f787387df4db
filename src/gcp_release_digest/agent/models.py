"""
Data models for the digest agent.
"""

from dataclasses import dataclass, field
from enum import Enum
import dotenv
from typing import Any, Dict, List, Mapping, Optional, Tuple
import os

from gcp_release_digest.communicator import (
    DEFAULT_CLOSING_MESSAGE,
    DEFAULT_WEBHOOK_RATE_LIMIT,
)
from gcp_release_digest.release_notes import (
    DEFAULT_QUERY_LOCATION,
    DEFAULT_RELEASE_NOTES_TABLE,
    ReleaseNoteQuery,
    ReleaseNoteType,
)

dotenv.load_dotenv()

GENERAL_CHANNEL = "GENERAL"


class ConfigurationError(ValueError):
    """Missing or invalid configuration; raised before any external call."""


class StepStatus(Enum):
    """Status of a channel or product step."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


def _int_setting(environ: Mapping[str, str], key: str, default: int, minimum: int = 0) -> int:
    raw = (environ.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ConfigurationError(f"{key} must be >= {minimum}, got {value}")
    return value


def _float_setting(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = (environ.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class DigestConfig:
    """Configuration for one digest run, read from the environment at each invocation."""
    project_id: str
    model: str
    model_location: str
    cadence_days: int

    # release note type -> webhook URL, only the configured ones
    webhooks: Dict[str, str] = field(default_factory=dict, repr=False)
    general_webhook: Optional[str] = field(default=None, repr=False)

    webhook_rate_limit: int = DEFAULT_WEBHOOK_RATE_LIMIT
    webhook_timeout: float = 30.0
    max_workers: int = 8
    bigquery_location: str = DEFAULT_QUERY_LOCATION
    release_notes_table: str = DEFAULT_RELEASE_NOTES_TABLE
    closing_message: str = DEFAULT_CLOSING_MESSAGE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DigestConfig":
        """
        Load configuration from environment variables.

        Raises:
            ConfigurationError: If required values are missing or invalid, or
                if neither ``GENERAL`` nor any category webhook is set.
        """
        env = os.environ if environ is None else environ

        def get(key: str) -> str:
            return (env.get(key) or "").strip()

        missing = [key for key in ("PROJECT_ID", "MODEL", "MODEL_LOCATION", "CADENCE") if not get(key)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        try:
            cadence_days = int(get("CADENCE"))
        except ValueError as e:
            raise ConfigurationError(f"CADENCE must be an integer number of days, got {get('CADENCE')!r}") from e
        if cadence_days < 0:
            raise ConfigurationError(f"CADENCE must not be negative, got {cadence_days}")

        webhooks = {label: get(label) for label in ReleaseNoteType.labels() if get(label)}
        general_webhook = get(GENERAL_CHANNEL) or None

        if not general_webhook and not webhooks:
            raise ConfigurationError(
                "At least one channel environment variable needs to be provided "
                "(either GENERAL or any of the specific channels)."
            )

        return cls(
            project_id=get("PROJECT_ID"),
            model=get("MODEL"),
            model_location=get("MODEL_LOCATION"),
            cadence_days=cadence_days,
            webhooks=webhooks,
            general_webhook=general_webhook,
            webhook_rate_limit=_int_setting(env, "WEBHOOK_RATE_LIMIT", DEFAULT_WEBHOOK_RATE_LIMIT, minimum=1),
            webhook_timeout=_float_setting(env, "WEBHOOK_TIMEOUT", 30.0),
            max_workers=_int_setting(env, "MAX_WORKERS", 8, minimum=1),
            bigquery_location=get("BIGQUERY_LOCATION") or DEFAULT_QUERY_LOCATION,
            release_notes_table=get("RELEASE_NOTES_TABLE") or DEFAULT_RELEASE_NOTES_TABLE,
            closing_message=get("CLOSING_MESSAGE") or DEFAULT_CLOSING_MESSAGE,
        )


@dataclass(frozen=True)
class Channel:
    """A release note type (or ``GENERAL``) routed to one webhook."""
    release_note_type: str
    webhook_url: str = field(repr=False)

    @property
    def is_general(self) -> bool:
        return self.release_note_type == GENERAL_CHANNEL


@dataclass(frozen=True)
class ChannelPlan:
    """
    Routing for one run, built once from configuration and shared read-only
    by every worker.

    Types without a dedicated webhook are ``unassigned`` and fall through to
    the general channel, if there is one.
    """
    specific: Tuple[Channel, ...]
    general: Optional[Channel]
    unassigned_types: Tuple[str, ...]

    @classmethod
    def from_config(cls, config: DigestConfig) -> "ChannelPlan":
        specific = tuple(
            Channel(release_note_type=label, webhook_url=config.webhooks[label])
            for label in ReleaseNoteType.labels()
            if config.webhooks.get(label)
        )
        unassigned = tuple(label for label in ReleaseNoteType.labels() if not config.webhooks.get(label))
        general = (
            Channel(release_note_type=GENERAL_CHANNEL, webhook_url=config.general_webhook)
            if config.general_webhook
            else None
        )
        if general is None and not specific:
            raise ConfigurationError(
                "At least one channel environment variable needs to be provided "
                "(either GENERAL or any of the specific channels)."
            )
        return cls(specific=specific, general=general, unassigned_types=unassigned)

    @property
    def channels(self) -> Tuple[Channel, ...]:
        return self.specific + ((self.general,) if self.general else ())

    def query_for(self, channel: Channel, cadence_days: int) -> ReleaseNoteQuery:
        if channel.is_general:
            return ReleaseNoteQuery.for_types(cadence_days, self.unassigned_types)
        return ReleaseNoteQuery.for_type(cadence_days, channel.release_note_type)


@dataclass
class ProductResult:
    """Outcome of fetch -> summarize -> deliver for one product."""
    product: str
    status: StepStatus = StepStatus.PENDING
    release_note_count: int = 0
    delivery_status: Optional[str] = None
    error: Optional[str] = None
    started_at: Optional[float] = None
    completed_at: Optional[float] = None


@dataclass
class ChannelResult:
    """Outcome of one channel."""
    release_note_type: str
    status: StepStatus = StepStatus.PENDING
    products: List[str] = field(default_factory=list)
    announce_status: Optional[str] = None
    closing_status: Optional[str] = None
    product_results: List[ProductResult] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed_products(self) -> List[ProductResult]:
        return [r for r in self.product_results if r.status == StepStatus.FAILED]


@dataclass
class DigestResult:
    """Result of the entire digest run."""
    success: bool
    run_id: str
    cadence_days: int
    channels: List[ChannelResult] = field(default_factory=list)
    total_duration: Optional[float] = None
    error_message: Optional[str] = None

    def summary(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "channels": len(self.channels),
            "failed_channels": [c.release_note_type for c in self.channels if c.status == StepStatus.FAILED],
            "products": sum(len(c.products) for c in self.channels),
            "failed_products": sum(len(c.failed_products) for c in self.channels),
        }
