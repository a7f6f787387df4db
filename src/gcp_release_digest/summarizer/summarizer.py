import logging
import threading
import time
from typing import Any, List, Optional

from google import genai
from google.genai import types

from gcp_release_digest.templates import PromptTemplate, ProductDigestTemplate

from .interfaces import (
    ISummarizer,
    SummarizationConfig,
    SummarizationError,
    SummarizationRequest,
)


class VertexSummarizer(ISummarizer):
    """Release note summarizer backed by a Gemini model hosted on Vertex AI."""

    def __init__(
        self,
        config: SummarizationConfig,
        *,
        client: Optional[Any] = None,
        template: Optional[PromptTemplate] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.template = template or ProductDigestTemplate()
        self.logger = logger or logging.getLogger(__name__)
        self._client = client
        self._client_lock = threading.Lock()

    def _get_client(self) -> Any:
        with self._client_lock:
            if self._client is None:
                try:
                    self._client = genai.Client(
                        vertexai=True,
                        project=self.config.project_id,
                        location=self.config.location,
                    )
                except Exception as e:
                    raise SummarizationError(f"Failed to initialize Vertex AI client: {e}") from e
                self.logger.info(
                    f"Vertex AI client initialized ({self.config.project_id}, {self.config.location})"
                )
            return self._client

    def _generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.config.temperature,
            top_k=self.config.top_k,
            top_p=self.config.top_p,
            max_output_tokens=self.config.max_output_tokens,
        )

    def build_prompt(self, request: SummarizationRequest) -> str:
        return self.template.render(request.product, request.get_release_notes_json())

    @staticmethod
    def _extract_text(response: Any) -> str:
        """Join the text of every part of every candidate with single spaces."""
        text_parts: List[str] = []
        for candidate in getattr(response, "candidates", None) or []:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                text = getattr(part, "text", None)
                if text:
                    text_parts.append(text)
        return " ".join(text_parts)

    def summarize(self, request: SummarizationRequest) -> str:
        start_time = time.time()
        prompt = self.build_prompt(request)
        client = self._get_client()

        self.logger.info(f"Asking for summary of {request.product} with model {self.config.model_name}")
        try:
            response = client.models.generate_content(
                model=self.config.model_name,
                contents=prompt,
                config=self._generation_config(),
            )
        except Exception as e:
            self.logger.error(f"Summarization failed for {request.product}: {e}")
            raise SummarizationError(f"Error summarizing {request.product}: {e}") from e

        summary = self._extract_text(response)
        if not summary:
            self.logger.warning(f"Model returned no text for {request.product} (blocked or empty candidates)")
        self.logger.info(
            f"Summarization of {request.product} executed with success in {time.time() - start_time:.2f}s"
        )
        return summary

    def cleanup(self) -> None:
        with self._client_lock:
            if self._client is not None and hasattr(self._client, "close"):
                try:
                    self._client.close()
                except Exception as e:
                    self.logger.warning(f"Error closing Vertex AI client: {e}")
            self._client = None
        self.logger.info("Cleanup completed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()
