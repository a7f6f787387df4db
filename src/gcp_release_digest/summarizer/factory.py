import logging
from typing import Any, Dict, Optional

from .interfaces import ISummarizer, SummarizationConfig


class SummarizerFactory:
    """Factory for creating summarizer instances."""

    @classmethod
    def create_summarizer(
        cls,
        project_id: str,
        location: str,
        model_name: str,
        config_overrides: Optional[Dict[str, Any]] = None,
        client: Optional[Any] = None,
    ) -> ISummarizer:
        """Create a Vertex AI summarizer with the default sampling parameters."""
        config_dict: Dict[str, Any] = {
            "project_id": project_id,
            "location": location,
            "model_name": model_name,
        }
        if config_overrides:
            config_dict.update(config_overrides)
        return cls.create_from_config(SummarizationConfig(**config_dict), client=client)

    @classmethod
    def create_from_config(
        cls,
        config: SummarizationConfig,
        client: Optional[Any] = None,
    ) -> ISummarizer:
        """Create a summarizer from an explicit configuration."""
        logger = logging.getLogger(__name__)
        logger.info(f"Creating summarizer for model {config.model_name} in {config.location}")
        from .summarizer import VertexSummarizer
        return VertexSummarizer(config, client=client)
