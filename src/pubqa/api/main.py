from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pubqa.api.dependencies import get_qa_pipeline
from pubqa.api.routers import ask, health
from pubqa.utils.errors import PubQAError, QuestionValidationError
from pubqa.utils.logging_config import setup_logging
from pubqa.utils.settings import settings

setup_logging(level=settings.app.log_level)
logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Failed to process your question."


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    logger.info("🚀 Starting PubQA API server...")

    missing = settings.missing_credentials()
    if missing:
        logger.warning("=" * 80)
        logger.warning(f"⚠️ Missing credentials: {', '.join(missing)}")
        logger.warning("   /ask will answer 500 CONFIGURATION_ERROR until they are set in .env")
        logger.warning("=" * 80)
    else:
        get_qa_pipeline()
        logger.info(f"✓ Embedder: {settings.gemini.embedding_model}")
        logger.info(f"✓ LLM: {settings.gemini.generation_model}")
        logger.info(f"✓ Match function: {settings.supabase.match_function}")
        logger.info("✓ PubQA API server is ready to accept requests!")

    yield

    logger.info("Shutting down PubQA API server...")


app = FastAPI(
    title="PubQA API",
    description="Grounded question answering over saved PubMed abstracts",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    logger.info(f"📨 Incoming: {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = (time.time() - start_time) * 1000
    logger.info(
        f"📤 Response: {request.method} {request.url.path} "
        f"Status={response.status_code} Time={process_time:.2f}ms"
    )

    return response


@app.exception_handler(QuestionValidationError)
async def question_validation_handler(request: Request, exc: QuestionValidationError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected request body: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "Please enter a question.", "code": QuestionValidationError.code},
    )


@app.exception_handler(PubQAError)
async def pipeline_error_handler(request: Request, exc: PubQAError):
    logger.error(f"❌ {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": FAILURE_MESSAGE,
            "code": exc.code,
            "details": exc.details or exc.message,
        },
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"{type(exc).__name__}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": FAILURE_MESSAGE,
            "code": "INTERNAL_ERROR",
            "details": str(exc),
        },
    )


# Routers
app.include_router(ask.router)
app.include_router(health.router)


@app.get("/api")
async def root():
    return {
        "name": "PubQA API",
        "version": "0.1.0",
        "docs": "/docs",
        "endpoints": {
            "ask": "/ask",
            "health": "/info/health",
        },
    }


def run() -> None:
    import uvicorn

    uvicorn.run(
        "pubqa.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
        reload_excludes=["*.pyc", "__pycache__"],
        log_level=settings.app.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run()
