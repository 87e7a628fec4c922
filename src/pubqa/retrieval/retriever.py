from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from pubqa.retrieval.vector_stores.supabase_store import SupabaseStore
from pubqa.utils.settings import settings
from pubqa.utils.types import Candidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetrievalProfile:
    """Named threshold/limit pair for a similarity search."""
    name: str
    threshold: float
    limit: int


class VectorRetriever:
    """Similarity retrieval over saved articles with primary and backfill profiles."""

    def __init__(
            self,
            vector_store: Optional[SupabaseStore] = None,
            primary_threshold: Optional[float] = None,
            primary_limit: Optional[int] = None,
            backfill_threshold: Optional[float] = None,
            backfill_base_limit: Optional[int] = None,
    ):
        self.vector_store = vector_store or SupabaseStore()
        self.primary_threshold = primary_threshold if primary_threshold is not None else settings.retrieval.primary_threshold
        self.primary_limit = primary_limit or settings.retrieval.primary_limit
        self.backfill_threshold = backfill_threshold if backfill_threshold is not None else settings.retrieval.backfill_threshold
        self.backfill_base_limit = backfill_base_limit if backfill_base_limit is not None else settings.retrieval.backfill_base_limit

        logger.info(
            f"VectorRetriever initialized (primary={self.primary_threshold}/{self.primary_limit}, "
            f"backfill={self.backfill_threshold}/{self.backfill_base_limit}+excluded)"
        )

    def primary_profile(self) -> RetrievalProfile:
        return RetrievalProfile("primary", self.primary_threshold, self.primary_limit)

    def backfill_profile(self, excluded_count: int) -> RetrievalProfile:
        return RetrievalProfile("backfill", self.backfill_threshold, self.backfill_base_limit + excluded_count)

    def retrieve(
            self,
            query_vector: List[float],
            threshold: float,
            limit: int,
    ) -> List[Candidate]:
        """Top-``limit`` candidates with similarity strictly above ``threshold``, best first."""
        if limit <= 0:
            return []

        rows = self.vector_store.search(query_vector, threshold=threshold, limit=limit)

        # the store may be lenient about threshold/ordering; enforce both here
        candidates = [
            c for c in rows
            if c.similarity is not None and c.similarity > threshold
        ]
        candidates.sort(key=lambda c: c.similarity, reverse=True)
        return candidates[:limit]

    def retrieve_profile(self, query_vector: List[float], profile: RetrievalProfile) -> List[Candidate]:
        results = self.retrieve(query_vector, threshold=profile.threshold, limit=profile.limit)
        logger.info(
            f"Retrieved {len(results)} candidates ({profile.name}: "
            f"threshold={profile.threshold}, limit={profile.limit})"
        )
        return results

    def retrieve_primary(self, query_vector: List[float]) -> List[Candidate]:
        return self.retrieve_profile(query_vector, self.primary_profile())

    def retrieve_backfill(self, query_vector: List[float], excluded_count: int) -> List[Candidate]:
        return self.retrieve_profile(query_vector, self.backfill_profile(excluded_count))
