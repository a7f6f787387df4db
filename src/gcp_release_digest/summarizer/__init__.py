"""
Summarizer Package

Turns one product's release notes into a short, conversational paragraph.
"""

from .interfaces import (
    ISummarizer,
    SummarizationConfig,
    SummarizationError,
    SummarizationRequest,
)
from .summarizer import VertexSummarizer
from .factory import SummarizerFactory

__all__ = [
    "ISummarizer",
    "SummarizationConfig",
    "SummarizationError",
    "SummarizationRequest",
    "VertexSummarizer",
    "SummarizerFactory",
]
