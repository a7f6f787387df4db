from .models import (
    CONTENT_TYPE,
    DEFAULT_CLOSING_MESSAGE,
    ChatMessage,
    WebhookDeliveryError,
    is_success_status,
)
from .interfaces import ICommunicator
from .rate_limiter import (
    DEFAULT_WEBHOOK_RATE_LIMIT,
    DEFAULT_WEBHOOK_RATE_PERIOD,
    RateLimiter,
    get_webhook_rate_limiter,
)
from .chat_communicator import ChatWebhookCommunicator

__all__ = [
    "CONTENT_TYPE",
    "DEFAULT_CLOSING_MESSAGE",
    "ChatMessage",
    "WebhookDeliveryError",
    "is_success_status",
    "ICommunicator",
    "DEFAULT_WEBHOOK_RATE_LIMIT",
    "DEFAULT_WEBHOOK_RATE_PERIOD",
    "RateLimiter",
    "get_webhook_rate_limiter",
    "ChatWebhookCommunicator",
]
