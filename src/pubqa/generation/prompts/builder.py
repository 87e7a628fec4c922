from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from pubqa.generation.prompts.types.language import Language
from pubqa.utils.settings import settings
from pubqa.utils.types import Candidate, EvidenceItem

logger = logging.getLogger(__name__)

DEFAULT_PROMPTS_PATH = Path(__file__).parent / "templates" / "prompts.yaml"
REQUIRED_SECTIONS = ("relevance", "answer", "fallback")


def load_prompts(path: Path) -> Dict[str, Any]:
    """Load prompt templates from YAML file."""
    if not path.exists():
        raise FileNotFoundError(f"Prompts file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        prompts = yaml.safe_load(f)

    logger.info(f"Loaded prompts from {path}")
    return prompts


def excerpt(text: str, limit: int) -> str:
    return (text or "")[:limit]


class PromptBuilder:
    """Builds language-matched relevance, answer and fallback texts.

    The language is always passed in by the caller; nothing here detects it.
    """

    def __init__(
            self,
            prompts_path: Optional[Path] = None,
            excerpt_chars: Optional[int] = None,
    ):
        self.prompts = load_prompts(prompts_path or DEFAULT_PROMPTS_PATH)
        self.excerpt_chars = excerpt_chars or settings.relevance.excerpt_chars

    def _section(self, name: str, language: Language) -> Dict[str, Any]:
        return self.prompts[name][language.value]

    def missing_sections(self) -> List[str]:
        """Prompt sections (``name.lang``) absent from the loaded file."""
        prompts = self.prompts if isinstance(self.prompts, dict) else {}
        missing: List[str] = []
        for name in REQUIRED_SECTIONS:
            section = prompts.get(name)
            for language in Language:
                if not isinstance(section, dict) or language.value not in section:
                    missing.append(f"{name}.{language.value}")
        return missing

    def build_relevance_prompt(
            self,
            question: str,
            candidates: Sequence[Candidate],
            language: Language,
    ) -> str:
        """
        Build the relevance grading prompt.

        Candidates are numbered 1..N in the given order; the model answers
        with those numbers.

        Args:
            question: User question
            candidates: First-pass candidates, similarity order
            language: Prompt language
        """
        section = self._section("relevance", language)
        digest = section["digest_separator"].join(
            section["digest_item"].format(
                number=idx,
                title=candidate.title,
                excerpt=excerpt(candidate.abstract, self.excerpt_chars),
            )
            for idx, candidate in enumerate(candidates, 1)
        )
        return section["template"].format(
            question=question,
            count=len(candidates),
            articles=digest,
        )

    def format_evidence_item(
            self,
            ordinal: int,
            item: EvidenceItem,
            language: Language,
    ) -> str:
        labels = self._section("answer", language)["labels"]
        candidate = item.candidate

        similarity = f"{candidate.similarity:.3f}" if candidate.similarity is not None else "N/A"
        if item.relevance is not None:
            relevance = f"{labels['relevance']}: {item.relevance.score:g}/10"
        else:
            relevance = f"{labels['relevance']}: {labels['relevance_missing']}"

        lines: List[str] = [
            f"[{labels['article']} {ordinal}] ID: {candidate.id}, {labels['title']}: \"{candidate.title}\"",
            f"{labels['authors']}: {candidate.authors or labels['not_specified']}",
            f"{labels['pub_date']}: {candidate.pub_date or labels['not_specified']}",
            f"{labels['similarity']}: {similarity}",
            relevance,
        ]
        if item.supplementary:
            lines.append(labels["supplementary"])
        lines.extend([
            "",
            labels["abstract"],
            candidate.abstract,
            "",
            "---",
        ])
        return "\n".join(lines)

    def build_answer_prompt(
            self,
            question: str,
            evidence: Sequence[EvidenceItem],
            language: Language,
    ) -> str:
        """Build the grounded answer prompt from the final evidence set."""
        section = self._section("answer", language)
        context = section["context_separator"].join(
            self.format_evidence_item(idx, item, language)
            for idx, item in enumerate(evidence, 1)
        )
        return section["template"].format(context=context, question=question)

    def fallback(
            self,
            kind: str,
            language: Language,
            count: int = 0,
            question: str = "",
    ) -> str:
        """Fixed fallback text (``overloaded``, ``quota_exceeded``, ``service_error``, ``empty_result``)."""
        template = self._section("fallback", language)[kind]
        return template.format(count=count, question=question)
