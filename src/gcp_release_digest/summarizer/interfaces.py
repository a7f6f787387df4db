from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional
import json

from gcp_release_digest.release_notes import ReleaseNote


class SummarizationError(RuntimeError):
    """Transport or model failure while summarizing."""


@dataclass
class SummarizationRequest:
    """Release notes of one product to be summarized."""
    product: str
    release_notes: List[ReleaseNote] = field(default_factory=list)

    def get_release_notes_json(self) -> str:
        """Flatten notes into ``[type, description, type, description, ...]`` JSON."""
        flattened: List[str] = []
        for note in self.release_notes:
            flattened.extend([note.release_note_type, note.description])
        return json.dumps(flattened, ensure_ascii=False)


@dataclass
class SummarizationConfig:
    """Configuration for the hosted model."""
    project_id: str
    location: str
    model_name: str = "gemini-2.0-flash"
    # low temperature and diversity keep summaries stable run-to-run
    temperature: float = 0.2
    top_k: int = 5
    top_p: float = 0.95
    max_output_tokens: Optional[int] = None

    def __post_init__(self):
        if not self.project_id:
            raise ValueError("project_id is required")
        if not self.location:
            raise ValueError("location is required")
        if not self.model_name:
            raise ValueError("model_name is required")


class ISummarizer(ABC):
    """Interface for release note summarization using LLMs."""

    @abstractmethod
    def summarize(self, request: SummarizationRequest) -> str:
        """Return a single-paragraph summary of the product's release notes."""
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Cleanup resources."""
        pass
