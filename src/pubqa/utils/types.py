"""Core data models for a single question-answering request."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Candidate:
    """Stored article returned by a similarity search."""
    id: str
    title: str
    abstract: str
    authors: str = ""
    pub_date: str = ""
    pubmed_url: str = ""
    is_free: bool = False
    translated_title: Optional[str] = None
    translated_abstract: Optional[str] = None
    similarity: Optional[float] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Candidate:
        """Build a candidate from a snake_case store row."""
        similarity = record.get("similarity")
        return cls(
            id=str(record["id"]),
            title=record.get("title") or "",
            abstract=record.get("abstract") or "",
            authors=record.get("authors") or "",
            pub_date=record.get("pub_date") or "",
            pubmed_url=record.get("pubmed_url") or "",
            is_free=bool(record.get("is_free") or False),
            translated_title=record.get("translated_title") or None,
            translated_abstract=record.get("translated_abstract") or None,
            similarity=float(similarity) if similarity is not None else None,
        )

    def to_article(self) -> Dict[str, Any]:
        """Public camelCase Article shape; empty translations are omitted."""
        article: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "abstract": self.abstract,
            "authors": self.authors,
            "pubDate": self.pub_date,
            "pubmedUrl": self.pubmed_url,
            "isFree": self.is_free,
        }
        if self.translated_title:
            article["translatedTitle"] = self.translated_title
        if self.translated_abstract:
            article["translatedAbstract"] = self.translated_abstract
        return article


@dataclass(frozen=True)
class RelevanceScore:
    """LLM relevance judgement for one candidate.

    ``position`` is the 1-based ordinal used in the relevance prompt;
    ``candidate_id`` is resolved from it at parse time.
    """
    candidate_id: str
    position: int
    score: float
    reason: str = ""


@dataclass(frozen=True)
class EvidenceItem:
    """Candidate selected for generation."""
    candidate: Candidate
    relevance: Optional[RelevanceScore] = None
    supplementary: bool = False


@dataclass
class EvidenceSet:
    """Final evidence used for generation plus diagnostic counts."""
    items: List[EvidenceItem] = field(default_factory=list)
    highly_relevant_count: int = 0
    supplementary_count: int = 0
    excluded_count: int = 0
    backfill_attempted: bool = False

    @property
    def total_used(self) -> int:
        return len(self.items)

    @property
    def candidates(self) -> List[Candidate]:
        return [item.candidate for item in self.items]

    @property
    def ids(self) -> List[str]:
        return [item.candidate.id for item in self.items]

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class SearchInfo:
    """Diagnostic counts returned next to the answer."""
    articles_found: int
    threshold: float
    highly_relevant_articles: Optional[int] = None
    supplementary_articles: Optional[int] = None
    total_used_articles: Optional[int] = None
    max_similarity: Optional[float] = None
    relevant_articles: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.articles_found == 0:
            return {
                "articlesFound": 0,
                "threshold": self.threshold,
                "relevantArticles": self.relevant_articles or 0,
            }
        return {
            "articlesFound": self.articles_found,
            "highlyRelevantArticles": self.highly_relevant_articles,
            "supplementaryArticles": self.supplementary_articles,
            "totalUsedArticles": self.total_used_articles,
            "threshold": self.threshold,
            "maxSimilarity": self.max_similarity,
        }


@dataclass(frozen=True)
class AnswerResult:
    """Terminal artifact of the pipeline."""
    answer: str
    sources: List[Candidate]
    search_info: SearchInfo

    def to_dict(self) -> Dict[str, Any]:
        return {
            "answer": self.answer,
            "sources": [source.to_article() for source in self.sources],
            "searchInfo": self.search_info.to_dict(),
        }
