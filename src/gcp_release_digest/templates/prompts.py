from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class PromptTemplate(ABC):
    """Interface for a release note summarization prompt template."""

    @abstractmethod
    def render(self, product: str, release_notes_json: str) -> str:
        """Return the full prompt string."""
        raise NotImplementedError


@dataclass(frozen=True)
class ProductDigestTemplate(PromptTemplate):
    """
    One casual paragraph per product.

    The model is told to leave out the release note categories and the
    version-specific detail; channels are already split by category and the
    chat message links nowhere, so both would only be noise.
    """
    instructions: str = (
        "Summarize descriptions into a single, plain paragraph like one person would say it to another. "
        "Don't mention the type of release notes. Don't go into details about specific versions. "
        "Keep it short. "
    )

    def render(self, product: str, release_notes_json: str) -> str:
        return f"Here are release notes for {product}: {release_notes_json}\n\n{self.instructions}"
