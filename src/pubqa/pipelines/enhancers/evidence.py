from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from pubqa.retrieval.retriever import VectorRetriever
from pubqa.retrieval.vector_stores.supabase_store import VectorStoreError
from pubqa.utils.settings import settings
from pubqa.utils.types import Candidate, EvidenceItem, EvidenceSet, RelevanceScore

logger = logging.getLogger(__name__)


class EvidenceAssembler:
    """Relevance cutoff, backfill and fallback for the generation evidence set."""

    def __init__(
            self,
            retriever: VectorRetriever,
            cutoff: Optional[float] = None,
            fallback_top_n: Optional[int] = None,
    ):
        self.retriever = retriever
        self.cutoff = cutoff if cutoff is not None else settings.relevance.cutoff
        self.fallback_top_n = fallback_top_n if fallback_top_n is not None else settings.retrieval.fallback_top_n

    def _log_scores(self, primary: Sequence[Candidate], by_id: Dict[str, RelevanceScore]) -> None:
        logger.info("📊 Article scores:")
        for idx, candidate in enumerate(primary, 1):
            score = by_id.get(candidate.id)
            shown = f"{score.score:g}" if score else "N/A"
            logger.info(f"  Article {idx}: {shown}/10 - {candidate.title[:50]}...")

    def backfill(
            self,
            query_vector: List[float],
            primary: Sequence[Candidate],
            kept: Sequence[Candidate],
            excluded_count: int,
    ) -> List[Candidate]:
        """
        Second, wider retrieval to replace excluded candidates.

        Anything already in the kept set or in the original primary pool is
        skipped, so a rejected primary candidate is never reintroduced.
        Failures are logged and yield no additions.
        """
        logger.info(f"🔄 Retrieving {excluded_count} additional articles to compensate...")
        try:
            more = self.retriever.retrieve_backfill(query_vector, excluded_count)
        except VectorStoreError as e:
            logger.error(f"❌ Additional search error: {e}")
            return []

        seen_ids = {c.id for c in kept} | {c.id for c in primary}
        additions: List[Candidate] = []
        for candidate in more:
            if candidate.id in seen_ids:
                continue
            seen_ids.add(candidate.id)
            additions.append(candidate)
            if len(additions) == excluded_count:
                break

        logger.info(f"  ✅ Added {len(additions)} new articles")
        for idx, candidate in enumerate(additions, 1):
            similarity = f"{candidate.similarity:.3f}" if candidate.similarity is not None else "N/A"
            logger.info(f"    {idx}. {candidate.title[:50]}... (similarity: {similarity})")
        return additions

    def assemble(
            self,
            primary: Sequence[Candidate],
            scores: Sequence[RelevanceScore],
            query_vector: List[float],
    ) -> EvidenceSet:
        """
        Build the evidence set from first-pass candidates and their scores.

        Args:
            primary: First-pass candidates, similarity order
            scores: Relevance scores, possibly empty
            query_vector: Query embedding, reused for backfill

        Returns:
            Kept candidates followed by backfill additions, or the top
            primary candidates when nothing survives.
        """
        if not primary:
            return EvidenceSet()

        if not scores:
            logger.info("⚠️ No relevance scores available, using all articles")
            return EvidenceSet(
                items=[EvidenceItem(candidate=c) for c in primary],
                highly_relevant_count=len(primary),
            )

        by_id = {s.candidate_id: s for s in scores}
        self._log_scores(primary, by_id)

        kept: List[Candidate] = []
        for idx, candidate in enumerate(primary, 1):
            score = by_id.get(candidate.id)
            if score is not None and score.score >= self.cutoff:
                kept.append(candidate)
            elif score is not None:
                logger.info(f"  ❌ EXCLUDED Article {idx} (score: {score.score:g}): {candidate.title[:50]}...")

        excluded_count = len(primary) - len(kept)
        logger.info(f"🔍 Filtered from {len(primary)} to {len(kept)} relevant articles ({excluded_count} excluded)")

        additions: List[Candidate] = []
        if excluded_count > 0:
            additions = self.backfill(query_vector, primary, kept, excluded_count)
        else:
            logger.info("✅ No articles excluded, no additional search needed")

        items = [EvidenceItem(candidate=c, relevance=by_id.get(c.id)) for c in kept]
        items.extend(EvidenceItem(candidate=c, supplementary=True) for c in additions)

        if not items:
            logger.info(f"No highly relevant articles found, using top {self.fallback_top_n}")
            items = [
                EvidenceItem(candidate=c, relevance=by_id.get(c.id))
                for c in primary[:self.fallback_top_n]
            ]

        evidence = EvidenceSet(
            items=items,
            highly_relevant_count=len(kept),
            supplementary_count=len(additions),
            excluded_count=excluded_count,
            backfill_attempted=excluded_count > 0,
        )
        logger.info(
            f"Final article set: {evidence.total_used} articles "
            f"({len(kept)} highly relevant + {len(additions)} additional)"
        )
        return evidence
