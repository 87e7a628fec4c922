from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, List, Optional

from pubqa.generation.answer_generator import AnswerGenerator
from pubqa.generation.prompts.builder import PromptBuilder
from pubqa.generation.prompts.types.language import Language
from pubqa.pipelines.base import BasePipeline
from pubqa.pipelines.enhancers.evidence import EvidenceAssembler
from pubqa.pipelines.enhancers.relevance import RelevanceEvaluator
from pubqa.retrieval.embedder.embedder import Embedder
from pubqa.retrieval.retriever import VectorRetriever
from pubqa.utils.errors import QuestionValidationError
from pubqa.utils.logging_config import preview
from pubqa.utils.settings import settings
from pubqa.utils.types import AnswerResult, Candidate, EvidenceSet, SearchInfo

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    START = "start"
    VALIDATE = "validate"
    EMBED = "embed"
    RETRIEVE_PRIMARY = "retrieve_primary"
    EMPTY_RESULT = "empty_result"
    EVALUATE_RELEVANCE = "evaluate_relevance"
    ASSEMBLE_EVIDENCE = "assemble_evidence"
    GENERATE = "generate"
    RESPOND = "respond"


def validate_question(question: Any, max_length: Optional[int] = None) -> str:
    """
    Check an incoming question and return it trimmed.

    The length cap applies to the question as received.

    Raises:
        QuestionValidationError: not a string, blank, or too long
    """
    max_length = max_length or settings.question.max_length

    if not isinstance(question, str) or not question.strip():
        raise QuestionValidationError("Please enter a question.")
    if len(question) > max_length:
        raise QuestionValidationError(f"Question is too long (max {max_length} characters)")
    return question.strip()


def max_similarity(candidates: List[Candidate]) -> Optional[float]:
    scores = [c.similarity for c in candidates if c.similarity is not None]
    return round(max(scores), 3) if scores else None


class QAPipeline(BasePipeline):
    """Embed, retrieve, grade, assemble and answer over saved articles."""

    def __init__(
            self,
            embedder: Optional[Embedder] = None,
            retriever: Optional[VectorRetriever] = None,
            relevance_evaluator: Optional[RelevanceEvaluator] = None,
            evidence_assembler: Optional[EvidenceAssembler] = None,
            answer_generator: Optional[AnswerGenerator] = None,
            prompt_builder: Optional[PromptBuilder] = None,
            max_question_length: Optional[int] = None,
    ):
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.embedder = embedder or Embedder()
        self.retriever = retriever or VectorRetriever()
        self.relevance_evaluator = relevance_evaluator or RelevanceEvaluator(prompt_builder=self.prompt_builder)
        self.evidence_assembler = evidence_assembler or EvidenceAssembler(retriever=self.retriever)
        self.answer_generator = answer_generator or AnswerGenerator(prompt_builder=self.prompt_builder)
        self.max_question_length = max_question_length or settings.question.max_length

        logger.info("QAPipeline initialized")

    def _enter(self, stage: PipelineStage) -> None:
        logger.debug(f"Stage: {stage.value}")

    def _empty_result(self, question: str, language: Language) -> AnswerResult:
        self._enter(PipelineStage.EMPTY_RESULT)
        logger.info("No articles found above the primary threshold")
        return AnswerResult(
            answer=self.prompt_builder.fallback("empty_result", language, question=question),
            sources=[],
            search_info=SearchInfo(
                articles_found=0,
                threshold=self.retriever.primary_threshold,
                relevant_articles=0,
            ),
        )

    def answer(self, question: str) -> AnswerResult:
        """
        Answer a question from saved articles.

        Raises:
            QuestionValidationError: before any remote call
            EmbeddingFailure, VectorStoreError, GenerationError: request-fatal
                backend failures
        """
        start_time = time.time()
        self._enter(PipelineStage.START)

        self._enter(PipelineStage.VALIDATE)
        question = validate_question(question, self.max_question_length)
        language = Language.detect(question)
        logger.info(f"🔍 Processing question ({language.label}): {preview(question)}")

        self._enter(PipelineStage.EMBED)
        query_vector = self.embedder.embed_query(question)

        self._enter(PipelineStage.RETRIEVE_PRIMARY)
        primary = self.retriever.retrieve_primary(query_vector)
        if not primary:
            return self._empty_result(question, language)

        self._enter(PipelineStage.EVALUATE_RELEVANCE)
        scores = self.relevance_evaluator.score(question, primary, language)

        self._enter(PipelineStage.ASSEMBLE_EVIDENCE)
        evidence: EvidenceSet = self.evidence_assembler.assemble(primary, scores, query_vector)

        self._enter(PipelineStage.GENERATE)
        answer = self.answer_generator.generate(question, evidence.items, language)

        self._enter(PipelineStage.RESPOND)
        total_time = (time.time() - start_time) * 1000
        logger.info(
            f"✅ Answered with {evidence.total_used} sources "
            f"({evidence.highly_relevant_count} relevant + {evidence.supplementary_count} supplementary) "
            f"in {total_time:.0f}ms"
        )

        return AnswerResult(
            answer=answer,
            sources=evidence.candidates,
            search_info=SearchInfo(
                articles_found=len(primary),
                threshold=self.retriever.primary_threshold,
                highly_relevant_articles=evidence.highly_relevant_count,
                supplementary_articles=evidence.supplementary_count,
                total_used_articles=evidence.total_used,
                max_similarity=max_similarity(primary),
            ),
        )
