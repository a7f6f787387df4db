# communicator/chat_communicator.py
from __future__ import annotations

from datetime import date
from typing import Optional, Sequence
import logging

import requests

from gcp_release_digest.release_notes import Product

from .interfaces import ICommunicator
from .models import CONTENT_TYPE, ChatMessage, WebhookDeliveryError, is_success_status
from .rate_limiter import RateLimiter, get_webhook_rate_limiter

DEFAULT_TIMEOUT = 30.0


def _redact(webhook_url: str) -> str:
    # chat webhook URLs embed their key and token in the query string
    return webhook_url.split("?", 1)[0]


class ChatWebhookCommunicator(ICommunicator):
    """
    Chat communicator for posting messages to incoming webhook URLs.

    Only product summaries go through the rate limiter; the announcement
    and the closing message are a single post per channel.
    """

    def __init__(
        self,
        rate_limiter: Optional[RateLimiter] = None,
        timeout: float = DEFAULT_TIMEOUT,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.rate_limiter = rate_limiter or get_webhook_rate_limiter()
        self.timeout = timeout

    def send_message(self, webhook_url: str, message: ChatMessage) -> str:
        """
        Post a message to a webhook.

        Args:
            webhook_url: Incoming webhook URL
            message: Message to post

        Returns:
            The response status line, e.g. ``"200 OK"``
        """
        if not webhook_url:
            raise ValueError("webhook_url is required")

        try:
            response = requests.post(
                webhook_url,
                json=message.to_payload(),
                headers={"Content-Type": CONTENT_TYPE},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Webhook request error ({_redact(webhook_url)}): {e}")
            raise WebhookDeliveryError(f"Error sending via webhook: {e}") from e

        status = f"{response.status_code} {response.reason or ''}".strip()
        if is_success_status(status):
            self.logger.info(f"Message sent via webhook, status: {status}")
        else:
            self.logger.warning(
                f"Webhook {_redact(webhook_url)} answered {status}: {response.text[:200]}"
            )
        return status

    def announce(
        self,
        webhook_url: str,
        cadence_days: int,
        products: Sequence[Product],
        today: Optional[date] = None,
    ) -> str:
        message = ChatMessage.announcement(cadence_days, products, today=today)
        return self.send_message(webhook_url, message)

    def send_summary(self, product: str, summary: str, webhook_url: str) -> str:
        self.rate_limiter.acquire()
        self.logger.info(f"Sending summary of {product} via webhook...")
        return self.send_message(webhook_url, ChatMessage.summary(product, summary))

    def send_closing_message(self, webhook_url: str, text: str) -> str:
        return self.send_message(webhook_url, ChatMessage.closing(text))

    def cleanup(self) -> None:
        """Clean up resources."""
        # No resources to clean up for webhook implementation
        self.logger.info("ChatWebhookCommunicator cleaned up")
