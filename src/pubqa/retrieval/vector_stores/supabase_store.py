from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from pubqa.utils.errors import PubQAError
from pubqa.utils.settings import settings
from pubqa.utils.types import Candidate

logger = logging.getLogger(__name__)

# undefined_function (PostgreSQL) / function not in schema cache (PostgREST)
_FUNCTION_NOT_FOUND_CODES = {"42883", "PGRST202"}


class VectorStoreError(PubQAError):
    """Similarity search failed; fatal to the request."""

    code = "RETRIEVAL_ERROR"


class MatchFunctionNotFoundError(VectorStoreError):
    """The similarity-search stored procedure does not exist."""

    code = "MATCH_FUNCTION_NOT_FOUND"


class SupabaseStore:
    """Read side of the article store: the ``match_articles`` RPC over PostgREST."""

    def __init__(
            self,
            url: Optional[str] = None,
            service_role_key: Optional[str] = None,
            match_function: Optional[str] = None,
            timeout: Optional[int] = None,
    ):
        if url is None or service_role_key is None:
            settings.require("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY")
        self.url = (url or settings.supabase.url).rstrip("/")
        self.service_role_key = service_role_key or settings.supabase.service_role_key
        self.match_function = match_function or settings.supabase.match_function
        self.timeout = timeout or settings.supabase.timeout_s

        logger.info(f"SupabaseStore: {self.url} (rpc={self.match_function})")

    @property
    def rpc_url(self) -> str:
        return f"{self.url}/rest/v1/rpc/{self.match_function}"

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
            "Content-Type": "application/json",
        }

    def _raise_for_error(self, response: requests.Response) -> None:
        try:
            error: Dict[str, Any] = response.json()
        except ValueError:
            error = {}
        if not isinstance(error, dict):
            error = {}

        code = str(error.get("code", ""))
        message = error.get("message") or response.text[:300]
        logger.error(f"Supabase RPC error: {response.status_code} {code} {message}")

        if code in _FUNCTION_NOT_FOUND_CODES:
            raise MatchFunctionNotFoundError(
                f'Database function "{self.match_function}" not found. Please create the function first.',
                details=message,
            )
        raise VectorStoreError(f"Database error: {message}", details=code or None)

    def search(
            self,
            vector: List[float],
            threshold: float,
            limit: int,
    ) -> List[Candidate]:
        """
        Run the similarity RPC.

        Args:
            vector: Query embedding
            threshold: Minimum similarity (exclusive)
            limit: Maximum number of rows

        Returns:
            Candidates ordered by similarity, highest first.
        """
        payload = {
            "query_embedding": vector,
            "match_threshold": threshold,
            "match_count": limit,
        }

        try:
            response = requests.post(
                self.rpc_url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Supabase unreachable: {e}")
            raise VectorStoreError("Vector store unreachable", details=str(e)) from e

        if not response.ok:
            self._raise_for_error(response)

        try:
            rows = response.json() or []
        except ValueError as e:
            raise VectorStoreError("Invalid similarity search response", details=str(e)) from e

        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            logger.error(f"Unexpected similarity search payload: {str(rows)[:300]}")
            raise VectorStoreError("Invalid similarity search response", details="expected a list of rows")

        try:
            candidates = [Candidate.from_record(row) for row in rows]
        except (ValueError, KeyError, TypeError) as e:
            raise VectorStoreError("Invalid similarity search response", details=str(e)) from e

        return candidates
