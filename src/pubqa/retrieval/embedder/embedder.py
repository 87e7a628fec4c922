from __future__ import annotations

import logging
from typing import List, Optional

import requests

from pubqa.utils.errors import PubQAError
from pubqa.utils.settings import settings

logger = logging.getLogger(__name__)


class EmbeddingFailure(PubQAError):
    """Embedding backend could not produce a vector; fatal to the request."""

    code = "EMBEDDING_ERROR"


class Embedder:
    """Embeds text using the Gemini embedContent REST endpoint."""

    def __init__(
            self,
            api_key: Optional[str] = None,
            model_id: Optional[str] = None,
            base_url: Optional[str] = None,
            timeout: Optional[int] = None,
            max_input_chars: Optional[int] = None,
    ):
        """
        Initialize Embedder with optional overrides.
        If any parameter is None, it will be loaded from settings.

        Args:
            api_key: Gemini API key
            model_id: Embedding model name (default: text-embedding-004)
            base_url: Gemini REST base URL
            timeout: Request timeout in seconds
            max_input_chars: Longest text accepted by the backend
        """
        if api_key is None:
            settings.require("GEMINI_API_KEY")
        self.api_key = api_key or settings.gemini.api_key
        self.model_id = model_id or settings.gemini.embedding_model
        self.base_url = (base_url or settings.gemini.base_url).rstrip("/")
        self.timeout = timeout or settings.gemini.timeout_s
        self.max_input_chars = max_input_chars or settings.gemini.embedding_max_input_chars

        logger.info("Embedder initialized: %s", self.model_id)

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model_id}:embedContent"

    def embed_query(self, query: str) -> List[float]:
        """Embed a single query text. No retry at this layer."""
        if len(query) > self.max_input_chars:
            raise EmbeddingFailure(
                f"Text content too long for embedding (max {self.max_input_chars:,} characters)"
            )

        logger.info("Generating query embedding for text length: %d", len(query))
        payload = {
            "model": f"models/{self.model_id}",
            "content": {"parts": [{"text": query}]},
        }
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }

        try:
            response = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Embedding request failed: %s", e)
            raise EmbeddingFailure("Failed to generate embedding", details=str(e)) from e

        if not response.ok:
            logger.error("Embedding API Error: %s %s", response.status_code, response.text[:500])
            raise EmbeddingFailure(f"Failed to generate embedding: {response.status_code}")

        try:
            vector = [float(v) for v in response.json()["embedding"]["values"]]
        except (ValueError, KeyError, TypeError) as e:
            raise EmbeddingFailure("Invalid embedding response format", details=str(e)) from e

        if not vector:
            raise EmbeddingFailure("Embedding backend returned an empty vector")

        logger.info("Generated query embedding with dimension: %d", len(vector))
        return vector
