from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case fields, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AskRequest(BaseModel):
    """Ask request model. /ask endpoint."""
    question: str = Field(..., description="Question about the saved articles")


class Article(CamelModel):
    """Saved article used as a source."""
    id: str
    title: str
    abstract: str
    authors: str = ""
    pub_date: str = ""
    pubmed_url: str = ""
    is_free: bool = False
    translated_title: Optional[str] = None
    translated_abstract: Optional[str] = None


class SearchInfo(CamelModel):
    """Retrieval diagnostics; the empty-result shape only carries the first two and relevantArticles."""
    articles_found: int
    threshold: float
    highly_relevant_articles: Optional[int] = None
    supplementary_articles: Optional[int] = None
    total_used_articles: Optional[int] = None
    max_similarity: Optional[float] = None
    relevant_articles: Optional[int] = None


class AskResponse(CamelModel):
    """Response model for /ask."""
    answer: str
    sources: List[Article]
    search_info: SearchInfo


class ErrorResponse(BaseModel):
    """Structured error body."""
    error: str
    code: Optional[str] = None
    details: Optional[str] = None
