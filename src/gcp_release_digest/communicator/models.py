# communicator/models.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Optional, Sequence

from gcp_release_digest.release_notes import Product

DEFAULT_CLOSING_MESSAGE = "That's all folks!"
CONTENT_TYPE = "application/json; charset=UTF-8"


class WebhookDeliveryError(RuntimeError):
    """Transport failure while posting to a webhook."""


def is_success_status(status: str) -> bool:
    """True for a ``2xx`` status line such as ``"200 OK"``."""
    return bool(status) and status.strip()[:1] == "2"


@dataclass(frozen=True)
class ChatMessage:
    """
    A chat webhook message.

    Serialized as ``{"text": ...}``; the text uses the ``*bold*`` markup that
    Google Chat and Slack webhooks both render.
    """
    text: str

    def to_payload(self) -> Dict[str, Any]:
        return {"text": self.text}

    @classmethod
    def announcement(
        cls,
        cadence_days: int,
        products: Sequence[Product],
        today: Optional[date] = None,
    ) -> "ChatMessage":
        """List the products found since ``today - cadence_days``.

        An empty product list gives an empty text.
        """
        if not products:
            return cls(text="")

        since = (today or date.today()) - timedelta(days=cadence_days)
        product_list = "".join(f"* *{p.name}*\n" for p in products)
        return cls(
            text=(
                f"*Found release notes for {len(products)} products since {since.strftime('%Y-%m-%d')}*\n"
                f"{product_list}\n\n*And here it is...*"
            )
        )

    @classmethod
    def summary(cls, product: str, summary: str) -> "ChatMessage":
        return cls(text=f"*{product}:*\n\n{summary}\n\n")

    @classmethod
    def closing(cls, text: str = DEFAULT_CLOSING_MESSAGE) -> "ChatMessage":
        return cls(text=f"*{text}*")
