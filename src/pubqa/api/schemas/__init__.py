from __future__ import annotations

from pubqa.api.schemas.ask import Article, AskRequest, AskResponse, ErrorResponse, SearchInfo
from pubqa.api.schemas.health import HealthResponse

__all__ = [
    # Ask
    "AskRequest",
    "AskResponse",
    "Article",
    "SearchInfo",
    "ErrorResponse",
    # Health
    "HealthResponse",
]
