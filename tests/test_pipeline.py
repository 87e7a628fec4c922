"""End-to-end pipeline behaviour with fake collaborators."""
import json

import pytest

from pubqa.generation.answer_generator import AnswerGenerator
from pubqa.generation.providers.gemini_provider import ProviderTransportError
from pubqa.pipelines.enhancers.evidence import EvidenceAssembler
from pubqa.pipelines.enhancers.relevance import RelevanceEvaluator
from pubqa.pipelines.qa import QAPipeline, validate_question
from pubqa.retrieval.embedder.embedder import EmbeddingFailure
from pubqa.retrieval.retriever import VectorRetriever
from pubqa.utils.errors import QuestionValidationError


def build_pipeline(fakes, prompt_builder, store, llm, embedder=None):
    retriever = VectorRetriever(
        vector_store=store,
        primary_threshold=0.4,
        primary_limit=7,
        backfill_threshold=0.35,
        backfill_base_limit=15,
    )
    return QAPipeline(
        embedder=embedder or fakes.Embedder(),
        retriever=retriever,
        relevance_evaluator=RelevanceEvaluator(llm=llm, prompt_builder=prompt_builder),
        evidence_assembler=EvidenceAssembler(retriever=retriever, cutoff=5, fallback_top_n=3),
        answer_generator=AnswerGenerator(llm=llm, prompt_builder=prompt_builder, sleep=fakes.Sleep()),
        prompt_builder=prompt_builder,
        max_question_length=1000,
    )


def _relevance_json(values):
    return json.dumps({"relevanceScores": [
        {"articleNumber": idx, "relevanceScore": value, "reason": "r"}
        for idx, value in enumerate(values, 1)
    ]})


def test_full_answer_with_backfill(primary_pool, candidate_factory, fakes, prompt_builder):
    backfill = [candidate_factory(i, similarity=0.5 - 0.01 * i) for i in range(8, 12)]
    store = fakes.Store(primary_pool, backfill)
    llm = fakes.LLM(_relevance_json([9, 2, 8, 7, 3, 6, 1]), "Grounded answer.")

    result = build_pipeline(fakes, prompt_builder, store, llm).answer("  Does metformin help?  ")

    assert result.answer == "Grounded answer."
    assert [s.id for s in result.sources] == ["art-1", "art-3", "art-4", "art-6", "art-8", "art-9", "art-10"]
    info = result.search_info.to_dict()
    assert info == {
        "articlesFound": 7,
        "highlyRelevantArticles": 4,
        "supplementaryArticles": 3,
        "totalUsedArticles": 7,
        "threshold": 0.4,
        "maxSimilarity": 0.9,
    }
    assert len(llm.calls) == 2
    assert "(Supplementary article)" in llm.calls[1]["prompt"]
    assert "Does metformin help?" in llm.calls[1]["prompt"]


def test_empty_retrieval_short_circuits(fakes, prompt_builder):
    store = fakes.Store([])
    llm = fakes.LLM()

    result = build_pipeline(fakes, prompt_builder, store, llm).answer("Anything about zinc?")

    assert result.sources == []
    assert result.answer.startswith("I couldn't find any relevant information")
    assert result.search_info.to_dict() == {"articlesFound": 0, "threshold": 0.4, "relevantArticles": 0}
    assert llm.calls == []
    assert len(store.calls) == 1


def test_korean_question_gets_korean_prompts(primary_pool, fakes, prompt_builder):
    store = fakes.Store(primary_pool)
    llm = fakes.LLM(_relevance_json([8] * 7), "답변")

    result = build_pipeline(fakes, prompt_builder, store, llm).answer("메트포르민은 효과가 있나요?")

    assert result.answer == "답변"
    assert "의학 논문 관련성 평가자" in llm.calls[0]["prompt"]
    assert "[논문 1]" in llm.calls[1]["prompt"]


def test_relevance_failure_uses_full_pool(primary_pool, fakes, prompt_builder):
    store = fakes.Store(primary_pool)
    llm = fakes.LLM(ProviderTransportError("timeout"), "answer")

    result = build_pipeline(fakes, prompt_builder, store, llm).answer("Does X help?")

    assert [s.id for s in result.sources] == [c.id for c in primary_pool]
    assert result.search_info.supplementary_articles == 0
    assert len(store.calls) == 1


def test_overlong_question_rejected_before_any_call(fakes, prompt_builder):
    embedder = fakes.Embedder()
    store = fakes.Store()
    llm = fakes.LLM()
    pipeline = build_pipeline(fakes, prompt_builder, store, llm, embedder=embedder)

    with pytest.raises(QuestionValidationError):
        pipeline.answer("a" * 1001)

    assert embedder.calls == []
    assert store.calls == []
    assert llm.calls == []


def test_embedding_failure_is_fatal(fakes, prompt_builder):
    store = fakes.Store()
    embedder = fakes.Embedder(error=EmbeddingFailure("Failed to generate embedding: 500"))

    with pytest.raises(EmbeddingFailure):
        build_pipeline(fakes, prompt_builder, store, fakes.LLM(), embedder=embedder).answer("q")

    assert store.calls == []


@pytest.mark.parametrize("question", [None, 42, "", "   \n"])
def test_validate_question_rejects(question):
    with pytest.raises(QuestionValidationError):
        validate_question(question, max_length=1000)


def test_validate_question_limit_is_on_raw_length():
    assert validate_question("a" * 1000, max_length=1000) == "a" * 1000
    with pytest.raises(QuestionValidationError):
        validate_question(" " + "a" * 1000, max_length=1000)
