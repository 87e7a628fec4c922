from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from pubqa.utils.settings import settings

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Base class for generation backend failures."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ProviderOverloadedError(ProviderError):
    """Backend is temporarily overloaded (HTTP 503); retryable."""


class ProviderQuotaError(ProviderError):
    """Rate limit or quota exhausted (HTTP 429); not retried."""


class ProviderHTTPError(ProviderError):
    """Any other non-success status."""


class MalformedResponseError(ProviderError):
    """Success status but the response envelope carries no text."""


class ProviderTransportError(ProviderError):
    """Connection error or timeout before a status was received."""


def classify_status(status_code: int, body: str) -> ProviderError:
    """Map a non-success HTTP status onto a typed provider error."""
    message = f"Generation API failed: {status_code}"
    if status_code == 503:
        return ProviderOverloadedError(message, status_code, body)
    if status_code == 429:
        return ProviderQuotaError(message, status_code, body)
    return ProviderHTTPError(message, status_code, body)


def extract_text(data: Any) -> str:
    """Pull the generated text out of a generateContent envelope."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError(f"Invalid generation response format: {e}") from e
    if not isinstance(text, str):
        raise MalformedResponseError("Invalid generation response format: text is not a string")
    return text


class GeminiProvider:
    """Gemini generateContent REST provider."""

    def __init__(
            self,
            api_key: Optional[str] = None,
            model_name: Optional[str] = None,
            base_url: Optional[str] = None,
            timeout: Optional[int] = None,
    ):
        if api_key is None:
            settings.require("GEMINI_API_KEY")
        self.api_key = api_key or settings.gemini.api_key
        self.model_name = model_name or settings.gemini.generation_model
        self.base_url = (base_url or settings.gemini.base_url).rstrip('/')
        self.timeout = timeout or settings.gemini.timeout_s

        logger.info(f"GeminiProvider: {self.base_url}, model: {self.model_name}")

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model_name}:generateContent"

    def generate(
            self,
            prompt: str,
            temperature: float,
            max_new_tokens: int,
    ) -> str:
        """
        Generate text for a single prompt.

        Args:
            prompt: The input prompt
            temperature: Sampling temperature
            max_new_tokens: Maximum number of output tokens

        Raises:
            ProviderOverloadedError: HTTP 503
            ProviderQuotaError: HTTP 429
            ProviderHTTPError: any other non-success status
            MalformedResponseError: success without usable text
            ProviderTransportError: network failure or timeout
        """
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }
        payload: Dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_new_tokens,
            },
        }

        try:
            response = requests.post(
                self.url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ GeminiProvider request error: {e}")
            raise ProviderTransportError(f"Generation request failed: {e}") from e

        if not response.ok:
            logger.error(f"❌ Response status: {response.status_code}")
            logger.error(f"❌ Response body: {response.text[:500]}")
            raise classify_status(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Generation response is not JSON: {e}") from e

        return extract_text(data)
