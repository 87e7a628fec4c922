from pubqa.generation.prompts.types.language import Language
from pubqa.utils.types import EvidenceItem, RelevanceScore


def test_relevance_prompt_numbers_articles_and_truncates(prompt_builder, candidate_factory):
    long_abstract = "x" * 500
    candidates = [candidate_factory(1, abstract=long_abstract), candidate_factory(2)]

    prompt = prompt_builder.build_relevance_prompt("Does X help?", candidates, Language.ENGLISH)

    assert 'User\'s question: "Does X help?"' in prompt
    assert "the 2 articles below" in prompt
    assert 'Article 1: "Article title 1"' in prompt
    assert 'Article 2: "Article title 2"' in prompt
    assert "x" * 300 + "..." in prompt
    assert "x" * 301 not in prompt
    assert '"relevanceScores"' in prompt


def test_korean_relevance_prompt(prompt_builder, candidate_factory):
    prompt = prompt_builder.build_relevance_prompt("효과가 있나요?", [candidate_factory(1)], Language.KOREAN)

    assert "논문 1:" in prompt
    assert "1개 논문" in prompt


def test_answer_prompt_lists_evidence(prompt_builder, candidate_factory):
    scored = candidate_factory(1, similarity=0.8123, authors="")
    backfilled = candidate_factory(2, similarity=0.5)
    items = [
        EvidenceItem(scored, relevance=RelevanceScore("art-1", 1, 8.0, "on topic")),
        EvidenceItem(backfilled, supplementary=True),
    ]

    prompt = prompt_builder.build_answer_prompt("Does X help?", items, Language.ENGLISH)

    assert '[Article 1] ID: art-1, Title: "Article title 1"' in prompt
    assert "Authors: Not specified" in prompt
    assert "Similarity Score: 0.812" in prompt
    assert "Relevance Score: 8/10" in prompt
    assert '[Article 2] ID: art-2' in prompt
    assert "(Supplementary article)" in prompt
    assert "Relevance Score: N/A (supplementary)" in prompt
    assert prompt.rstrip().endswith("**DETAILED ANSWER (Assess relevance → Check answerability → Write evidence-based response):**")
    assert "Does X help?" in prompt


def test_supplementary_marker_only_on_backfill(prompt_builder, candidate_factory):
    prompt = prompt_builder.build_answer_prompt(
        "q", [EvidenceItem(candidate_factory(1))], Language.ENGLISH
    )
    assert "(Supplementary article)" not in prompt


def test_fallback_names_count(prompt_builder):
    text = prompt_builder.fallback("overloaded", Language.ENGLISH, count=4, question="Does X help?")

    assert "4 relevant article(s)" in text
    assert '"Does X help?"' in text


def test_korean_fallbacks(prompt_builder):
    assert "논문 2개" in prompt_builder.fallback("service_error", Language.KOREAN, count=2)
    assert "찾지 못했습니다" in prompt_builder.fallback("empty_result", Language.KOREAN)


def test_bundled_prompts_are_complete(prompt_builder):
    assert prompt_builder.missing_sections() == []


def test_partial_prompts_file_reports_missing_sections(tmp_path):
    from pubqa.generation.prompts.builder import PromptBuilder

    path = tmp_path / "prompts.yaml"
    path.write_text("relevance:\n  en:\n    template: x\nanswer: {}\n", encoding="utf-8")

    missing = PromptBuilder(prompts_path=path).missing_sections()

    assert missing == ["relevance.ko", "answer.ko", "answer.en", "fallback.ko", "fallback.en"]
