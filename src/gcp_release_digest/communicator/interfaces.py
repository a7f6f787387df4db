# communicator/interfaces.py
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Sequence

from gcp_release_digest.release_notes import Product

from .models import ChatMessage


class ICommunicator(ABC):
    @abstractmethod
    def send_message(self, webhook_url: str, message: ChatMessage) -> str:
        """Post one message. Returns the response status line."""
        raise NotImplementedError

    @abstractmethod
    def announce(
        self,
        webhook_url: str,
        cadence_days: int,
        products: Sequence[Product],
        today: Optional[date] = None,
    ) -> str:
        """Announce the products that have release notes in the window."""
        raise NotImplementedError

    @abstractmethod
    def send_summary(self, product: str, summary: str, webhook_url: str) -> str:
        """Deliver one product summary (rate limited)."""
        raise NotImplementedError

    @abstractmethod
    def send_closing_message(self, webhook_url: str, text: str) -> str:
        """Signal that every summary of the channel has been posted."""
        raise NotImplementedError

    @abstractmethod
    def cleanup(self) -> None:
        """Release resources (clients, sessions, etc.)."""
        raise NotImplementedError
