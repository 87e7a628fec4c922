from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    missing_credentials: List[str]
    missing_prompts: List[str]
    models: Dict[str, str]
    retrieval: Dict[str, Any]
