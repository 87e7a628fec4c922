from __future__ import annotations

import logging
from functools import lru_cache

from pubqa.generation.answer_generator import AnswerGenerator
from pubqa.generation.prompts.builder import PromptBuilder
from pubqa.generation.providers.gemini_provider import GeminiProvider
from pubqa.pipelines.enhancers.evidence import EvidenceAssembler
from pubqa.pipelines.enhancers.relevance import RelevanceEvaluator
from pubqa.pipelines.qa import QAPipeline
from pubqa.retrieval.embedder.embedder import Embedder
from pubqa.retrieval.retriever import VectorRetriever
from pubqa.retrieval.vector_stores.supabase_store import SupabaseStore

logger = logging.getLogger(__name__)


# ============================================================================
# Core Components (Cached)
# ============================================================================


@lru_cache(maxsize=1)
def get_embedder() -> Embedder:
    """Get the cached embedder instance."""
    logger.info("Loading embedder...")
    return Embedder()


@lru_cache(maxsize=1)
def get_vector_store() -> SupabaseStore:
    """Get the cached vector store instance."""
    logger.info("Loading vector store...")
    return SupabaseStore()


@lru_cache(maxsize=1)
def get_llm() -> GeminiProvider:
    """Get the cached generation provider."""
    logger.info("Loading LLM provider...")
    return GeminiProvider()


@lru_cache(maxsize=1)
def get_prompt_builder() -> PromptBuilder:
    logger.info("Creating PromptBuilder...")
    return PromptBuilder()


@lru_cache(maxsize=1)
def get_retriever() -> VectorRetriever:
    return VectorRetriever(vector_store=get_vector_store())


# ============================================================================
# Enhancers (Cached)
# ============================================================================


@lru_cache(maxsize=1)
def get_relevance_evaluator() -> RelevanceEvaluator:
    logger.info("Creating RelevanceEvaluator...")
    return RelevanceEvaluator(llm=get_llm(), prompt_builder=get_prompt_builder())


@lru_cache(maxsize=1)
def get_evidence_assembler() -> EvidenceAssembler:
    return EvidenceAssembler(retriever=get_retriever())


@lru_cache(maxsize=1)
def get_answer_generator() -> AnswerGenerator:
    return AnswerGenerator(llm=get_llm(), prompt_builder=get_prompt_builder())


# ============================================================================
# Pipelines
# ============================================================================


@lru_cache(maxsize=1)
def get_qa_pipeline() -> QAPipeline:
    """Get the cached question-answering pipeline."""
    logger.info("Loading QA pipeline...")
    return QAPipeline(
        embedder=get_embedder(),
        retriever=get_retriever(),
        relevance_evaluator=get_relevance_evaluator(),
        evidence_assembler=get_evidence_assembler(),
        answer_generator=get_answer_generator(),
        prompt_builder=get_prompt_builder(),
    )
