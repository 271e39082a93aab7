"""FastAPI application for the YouTube ingestion service.

Exposes the ingestion pipeline over HTTP plus a health check.
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from httpx import AsyncClient

from src.ingestion.config import get_config
from src.ingestion.pipeline import IngestionPipeline
from src.ingestion.schemas import IngestRequest, IngestResult
from src.ingestion.youtube_service import YouTubeService
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Global resources initialized in lifespan
http_client = None
pipeline = None


# ==============================================================================
# Lifespan Management
# ==============================================================================


async def lifespan(app: FastAPI):  # type: ignore[misc]
    """Lifecycle manager for the FastAPI application.

    Configuration is loaded and validated once here; the pipeline and its
    shared HTTP client live for the whole process.
    """
    global http_client, pipeline

    logger.info("application_startup_started")

    try:
        config = get_config()
        http_client = AsyncClient(follow_redirects=True)
        pipeline = IngestionPipeline(
            config,
            youtube_service=YouTubeService(config, http_client=http_client),
        )

        if not config.embedding_api_key:
            logger.warning("embedding_api_key_missing")

        logger.info("application_startup_completed")

    except Exception:
        logger.exception("application_startup_failed")
        raise

    yield  # Application runs here

    logger.info("application_shutdown_started")

    if http_client:
        await http_client.aclose()

    logger.info("application_shutdown_completed")


# ==============================================================================
# FastAPI Application Setup
# ==============================================================================

app = FastAPI(
    title="YouTube Ingestion API",
    description="Stores YouTube transcripts as embedded chunks for semantic retrieval",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==============================================================================
# API Endpoints
# ==============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint.

    Returns:
        Health status and timestamp.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "services": {
            "pipeline": pipeline is not None,
            "http_client": http_client is not None,
        },
    }


@app.post("/api/store-document")
async def store_document_endpoint(request: IngestRequest) -> dict[str, Any]:
    """Ingest a YouTube video into the vector store.

    Args:
        request: Body with ``url`` and optional ``documentId``.

    Returns:
        ``{ok, message, chunksCreated, videoTitle}`` on success, or
        ``{ok, error, suggestion}`` on failure.
    """
    logger.info(
        "store_document_request",
        url=request.url,
        document_id=request.document_id,
    )

    if pipeline is None:
        logger.error("store_document_rejected", reason="pipeline_not_initialized")
        return IngestResult.failure("Ingestion pipeline is not initialized").to_response()

    result = await pipeline.store_document(request)
    return result.to_response()
