from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from pubqa.generation.prompts.builder import PromptBuilder
from pubqa.generation.prompts.types.language import Language
from pubqa.generation.providers.gemini_provider import GeminiProvider, ProviderError
from pubqa.utils.parse import extract_json_object
from pubqa.utils.settings import settings
from pubqa.utils.types import Candidate, RelevanceScore

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 10


def _as_position(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _as_score(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def parse_relevance_scores(
        data: Any,
        candidates: Sequence[Candidate],
) -> List[RelevanceScore]:
    """
    Turn the model's ``relevanceScores`` payload into scores keyed by candidate id.

    Entries with an unknown article number or an unusable score are dropped.
    A repeated article number keeps the last entry.

    Args:
        data: Parsed JSON object from the model
        candidates: Candidates in the order they were numbered in the prompt

    Returns:
        Scores in candidate order.
    """
    if not isinstance(data, dict):
        logger.warning(f"Expected dict, got {type(data)}")
        return []

    entries = data.get("relevanceScores")
    if not isinstance(entries, list):
        logger.warning("Missing required field: relevanceScores")
        return []

    by_position: Dict[int, RelevanceScore] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue

        position = _as_position(entry.get("articleNumber"))
        if position is None or not 1 <= position <= len(candidates):
            logger.warning(f"Ignoring score for unknown article number: {entry.get('articleNumber')!r}")
            continue

        score = _as_score(entry.get("relevanceScore"))
        if score is None or not MIN_SCORE <= score <= MAX_SCORE:
            logger.warning(f"Ignoring invalid relevance score for article {position}: {entry.get('relevanceScore')!r}")
            continue

        by_position[position] = RelevanceScore(
            candidate_id=candidates[position - 1].id,
            position=position,
            score=score,
            reason=str(entry.get("reason") or ""),
        )

    return [by_position[pos] for pos in sorted(by_position)]


class RelevanceEvaluator:
    """LLM-graded topical relevance (1-10) for first-pass candidates.

    Never raises on backend or parse problems: the caller gets an empty list
    and treats every candidate as relevant.
    """

    def __init__(
            self,
            llm: Optional[GeminiProvider] = None,
            prompt_builder: Optional[PromptBuilder] = None,
            temperature: Optional[float] = None,
            max_tokens: Optional[int] = None,
    ):
        self.llm = llm or GeminiProvider()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.temperature = temperature if temperature is not None else settings.relevance.temperature
        self.max_tokens = max_tokens or settings.relevance.max_tokens

    def score(
            self,
            question: str,
            candidates: Sequence[Candidate],
            language: Language,
    ) -> List[RelevanceScore]:
        """Score candidates against the question; empty list on any failure."""
        if not candidates:
            return []

        prompt = self.prompt_builder.build_relevance_prompt(question, candidates, language)
        logger.info("Evaluating article relevance...")

        try:
            raw = self.llm.generate(
                prompt=prompt,
                temperature=self.temperature,
                max_new_tokens=self.max_tokens,
            )
        except ProviderError as e:
            logger.error(f"❌ Relevance check failed: {e}")
            return []

        logger.debug(f"Raw relevance response: {raw[:500]}")

        extraction = extract_json_object(raw)
        if not extraction.ok:
            logger.warning(f"❌ No usable JSON in relevance response ({extraction.status.value})")
            return []

        scores = parse_relevance_scores(extraction.data, candidates)
        logger.info(f"✅ Relevance evaluation completed: {len(scores)}/{len(candidates)} scored")
        return scores

    @property
    def name(self) -> str:
        return "relevance"
