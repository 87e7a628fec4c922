from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from pubqa.api.dependencies import get_prompt_builder
from pubqa.api.schemas.health import HealthResponse
from pubqa.generation.prompts.builder import PromptBuilder
from pubqa.utils.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/info", tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check(
        prompt_builder: PromptBuilder = Depends(get_prompt_builder),
) -> HealthResponse:
    """Configuration readiness; makes no remote calls."""
    missing = settings.missing_credentials()
    missing_prompts = prompt_builder.missing_sections()

    return HealthResponse(
        status="ok" if not missing and not missing_prompts else "degraded",
        missing_prompts=missing_prompts,
        missing_credentials=missing,
        models={
            "embedding": settings.gemini.embedding_model,
            "generation": settings.gemini.generation_model,
        },
        retrieval={
            "match_function": settings.supabase.match_function,
            "primary_threshold": settings.retrieval.primary_threshold,
            "primary_limit": settings.retrieval.primary_limit,
            "backfill_threshold": settings.retrieval.backfill_threshold,
            "relevance_cutoff": settings.relevance.cutoff,
        },
    )
