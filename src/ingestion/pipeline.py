"""Pipeline orchestrator for YouTube document ingestion."""

from typing import Any

import structlog
from pydantic import ValidationError

from src.utils.logging import get_logger

from .chunking_service import ChunkingService
from .config import IngestionConfig, get_config
from .embedding_service import EmbeddingService
from .errors import (
    EmptyDocumentError,
    IngestionError,
    InvalidRequestError,
    InvalidVideoURLError,
    TranscriptUnavailableError,
    TranscriptUnavailableReason,
)
from .schemas import ChunkWithEmbedding, IngestRequest, IngestResult
from .storage_service import StorageService
from .video_id import extract_video_id
from .youtube_service import YouTubeService


class IngestionPipeline:
    """Orchestrates ingestion of a single YouTube video.

    Fetch the transcript, resolve the title, chunk the title-prefixed text,
    embed every chunk and store the result. Stages run strictly in sequence
    and nothing is retried. ``store_document`` never raises: every failure is
    logged once and returned as a failed ``IngestResult``.
    """

    def __init__(
        self,
        config: IngestionConfig | None = None,
        youtube_service: YouTubeService | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ):
        """Initialize pipeline with all required services.

        Args:
            config: Configuration object. If None, loads from environment.
            youtube_service: Pre-built YouTube service, e.g. one sharing the
                application's HTTP client.
            logger: Structured logger to report through. Defaults to the
                module logger.
        """
        self.config = config or get_config()
        self.logger = logger or get_logger(__name__)
        self.youtube_service = youtube_service or YouTubeService(self.config)
        self.chunking_service = ChunkingService(self.config)
        self.embedding_service = EmbeddingService(self.config)
        self.storage_service = StorageService(self.config)

        self.logger.info(
            "pipeline_initialized",
            table=self.config.table_name,
            embedding_model=self.config.embedding_model,
        )

    async def store_document(
        self, request: IngestRequest | dict[str, Any] | None
    ) -> IngestResult:
        """Ingest one video and report the outcome.

        Args:
            request: Request body with ``url`` and optional ``documentId``.

        Returns:
            IngestResult describing success (chunk count, title) or failure
            (error message and suggestion).
        """
        log = self.logger
        try:
            request = self._parse_request(request)
            log = log.bind(url=request.url, document_id=request.document_id)
            log.info("ingestion_started")

            return await self._ingest(request, log)

        except IngestionError as e:
            log.warning(
                "ingestion_rejected",
                error_type=type(e).__name__,
                error=str(e),
            )
            return IngestResult.failure(str(e), e.suggestion)

        except Exception as e:
            log.exception("ingestion_failed", error_type=type(e).__name__)
            return IngestResult.failure(str(e))

    async def search(
        self,
        query: str,
        match_count: int = 5,
        filter_metadata: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Embed a query and return the most similar stored chunks."""
        self.config.require_embedding_key()
        query_embedding = await self.embedding_service.embed_text(query)
        return await self.storage_service.search_documents(
            query_embedding,
            match_count=match_count,
            filter_metadata=filter_metadata,
        )

    def _parse_request(
        self, request: IngestRequest | dict[str, Any] | None
    ) -> IngestRequest:
        if not isinstance(request, IngestRequest):
            try:
                request = IngestRequest.model_validate(request or {})
            except ValidationError as e:
                raise InvalidRequestError(f"Invalid request body: {e}") from e

        if not request.url or not request.url.strip():
            raise InvalidRequestError("URL is required in the request body")
        return request

    async def _ingest(
        self, request: IngestRequest, log: structlog.stdlib.BoundLogger
    ) -> IngestResult:
        url = request.url.strip()

        # 1. Resolve the video
        video_id = extract_video_id(url)
        if not video_id:
            raise InvalidVideoURLError("Invalid YouTube URL. Could not extract video ID.")
        log = log.bind(video_id=video_id)

        # 2. Configuration must be complete before any network call
        self.config.require_embedding_key()

        # 3. Fetch transcript
        transcript = await self.youtube_service.get_transcript(video_id)
        if not transcript.strip():
            raise TranscriptUnavailableError(
                video_id, TranscriptUnavailableReason.NOT_FOUND
            )
        log.info("transcript_ready", length=len(transcript))

        # 4. Resolve title
        video_title = await self.youtube_service.get_video_title(video_id)
        log.info("video_title_resolved", video_title=video_title)

        # 5. Chunk and annotate
        chunks = self.chunking_service.chunk_document(
            video_id=video_id,
            video_title=video_title,
            transcript=transcript,
            source=url,
            document_id=request.document_id,
        )
        if not chunks or not chunks[0].content:
            raise EmptyDocumentError("Document has no content to embed after splitting")

        # 6. Generate embeddings
        embeddings = await self.embedding_service.embed_batch(
            [chunk.content for chunk in chunks]
        )
        chunks_with_embeddings = [
            ChunkWithEmbedding(
                content=chunk.content, metadata=chunk.metadata, embedding=embedding
            )
            for chunk, embedding in zip(chunks, embeddings, strict=True)
        ]

        # 7. Store in vector database
        await self.storage_service.save_chunks(chunks_with_embeddings)

        log.info("ingestion_completed", chunks_created=len(chunks))
        return IngestResult.success(video_title, len(chunks))
