from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from pubqa.api.dependencies import get_qa_pipeline
from pubqa.api.schemas.ask import AskRequest, AskResponse, ErrorResponse
from pubqa.pipelines.qa import QAPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ask", tags=["Ask"])


@router.post(
    "",
    response_model=AskResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def ask(
        request: AskRequest,
        pipeline: QAPipeline = Depends(get_qa_pipeline),
) -> Dict[str, Any]:
    """
    Answer a question from the saved articles.

    Runs in the worker threadpool; the pipeline makes blocking remote calls.
    """
    result = pipeline.answer(request.question)
    return result.to_dict()
