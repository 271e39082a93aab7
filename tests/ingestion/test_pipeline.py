"""Unit tests for the ingestion pipeline orchestrator."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.ingestion.config import IngestionConfig
from src.ingestion.errors import TranscriptUnavailableError, TranscriptUnavailableReason
from src.ingestion.pipeline import IngestionPipeline
from src.ingestion.schemas import ChunkWithEmbedding, IngestRequest

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


@pytest.mark.unit
class TestIngestionPipeline:
    """Test suite for IngestionPipeline class."""

    @pytest.fixture
    def config(self) -> IngestionConfig:
        """Create test configuration."""
        return IngestionConfig(
            embedding_provider="gemini",
            embedding_api_key="test_key",
            supabase_url="https://test.supabase.co",
            supabase_key="test_key",
            chunk_size=100,
            chunk_overlap=20,
        )

    @pytest.fixture
    def youtube_service(self) -> MagicMock:
        """Create mock YouTube service."""
        service = MagicMock()
        service.get_transcript = AsyncMock(return_value="never gonna give you up " * 20)
        service.get_video_title = AsyncMock(return_value="Test Video")
        return service

    @pytest.fixture
    def mocks(self) -> Iterator[dict[str, MagicMock]]:
        """Patch embedding and storage services."""
        with (
            patch("src.ingestion.pipeline.EmbeddingService") as mock_embedding,
            patch("src.ingestion.pipeline.StorageService") as mock_storage,
        ):
            embedding = MagicMock()
            embedding.embed_batch = AsyncMock(
                side_effect=lambda texts: [[0.1, 0.2] for _ in texts]
            )
            embedding.embed_text = AsyncMock(return_value=[0.5, 0.5])
            mock_embedding.return_value = embedding

            storage = MagicMock()
            storage.save_chunks = AsyncMock()
            storage.search_documents = AsyncMock(return_value=[{"content": "hit"}])
            mock_storage.return_value = storage

            yield {"embedding": embedding, "storage": storage}

    @pytest.fixture
    def pipeline(
        self,
        config: IngestionConfig,
        youtube_service: MagicMock,
        mocks: dict[str, MagicMock],
    ) -> IngestionPipeline:
        """Create pipeline with mocked services."""
        return IngestionPipeline(config, youtube_service=youtube_service)

    def test_pipeline_initialization(
        self, config: IngestionConfig, mocks: dict[str, MagicMock]
    ) -> None:
        """Test pipeline builds its own services when none are injected."""
        with patch("src.ingestion.pipeline.YouTubeService") as mock_youtube:
            pipeline = IngestionPipeline(config)

            assert pipeline.config == config
            assert pipeline.youtube_service is mock_youtube.return_value
            assert pipeline.chunking_service is not None
            assert pipeline.embedding_service is mocks["embedding"]
            assert pipeline.storage_service is mocks["storage"]

    def test_pipeline_initialization_without_config(
        self, youtube_service: MagicMock, mocks: dict[str, MagicMock]
    ) -> None:
        """Test pipeline loads config from the environment by default."""
        with patch("src.ingestion.pipeline.get_config") as mock_get_config:
            mock_get_config.return_value = IngestionConfig()

            pipeline = IngestionPipeline(youtube_service=youtube_service)

            assert pipeline.config is mock_get_config.return_value
            mock_get_config.assert_called_once()

    @pytest.mark.asyncio
    async def test_store_document_success(
        self,
        pipeline: IngestionPipeline,
        youtube_service: MagicMock,
        mocks: dict[str, MagicMock],
    ) -> None:
        """Test a full successful run."""
        result = await pipeline.store_document({"url": VIDEO_URL, "documentId": "doc-7"})

        assert result.ok is True
        assert result.video_title == "Test Video"
        assert result.chunks_created > 1
        assert result.message == (
            f'Successfully processed video "Test Video" with {result.chunks_created} chunks'
        )

        youtube_service.get_transcript.assert_awaited_once_with("dQw4w9WgXcQ")
        youtube_service.get_video_title.assert_awaited_once_with("dQw4w9WgXcQ")

        saved: list[ChunkWithEmbedding] = mocks["storage"].save_chunks.await_args.args[0]
        assert len(saved) == result.chunks_created
        assert [c.metadata.chunk_index for c in saved] == list(range(len(saved)))
        assert all(c.metadata.total_chunks == len(saved) for c in saved)
        assert all(c.metadata.document_id == "doc-7" for c in saved)
        assert all(c.metadata.source == VIDEO_URL for c in saved)
        assert all(c.embedding == [0.1, 0.2] for c in saved)
        assert saved[0].content.startswith("Video title: Test Video | Video context: never")

    @pytest.mark.asyncio
    async def test_store_document_response_shape(self, pipeline: IngestionPipeline) -> None:
        """Test the success response uses the camelCase contract."""
        result = await pipeline.store_document(IngestRequest(url="dQw4w9WgXcQ"))

        assert set(result.to_response()) == {"ok", "message", "chunksCreated", "videoTitle"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [None, {}, {"url": ""}, {"url": "   "}, {"url": 42}])
    async def test_missing_url(
        self, pipeline: IngestionPipeline, youtube_service: MagicMock, body: object
    ) -> None:
        """Test requests without a usable URL fail before any fetch."""
        result = await pipeline.store_document(body)

        assert result.ok is False
        assert result.error
        youtube_service.get_transcript.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_url(
        self, pipeline: IngestionPipeline, youtube_service: MagicMock
    ) -> None:
        """Test an unparsable URL reports an invalid URL error."""
        result = await pipeline.store_document({"url": "not-a-url"})

        assert result.ok is False
        assert result.error == "Invalid YouTube URL. Could not extract video ID."
        assert result.suggestion
        youtube_service.get_transcript.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_before_network(
        self,
        config: IngestionConfig,
        youtube_service: MagicMock,
        mocks: dict[str, MagicMock],
    ) -> None:
        """Test a missing embedding key stops the run before any external call."""
        config.embedding_api_key = ""
        pipeline = IngestionPipeline(config, youtube_service=youtube_service)

        result = await pipeline.store_document({"url": VIDEO_URL})

        assert result.ok is False
        assert "GEMINI_API_KEY" in result.error
        youtube_service.get_transcript.assert_not_called()
        youtube_service.get_video_title.assert_not_called()
        mocks["embedding"].embed_batch.assert_not_called()
        mocks["storage"].save_chunks.assert_not_called()

    @pytest.mark.asyncio
    async def test_transcript_unavailable(
        self,
        pipeline: IngestionPipeline,
        youtube_service: MagicMock,
        mocks: dict[str, MagicMock],
    ) -> None:
        """Test an unavailable transcript fails without embedding or storing."""
        youtube_service.get_transcript.side_effect = TranscriptUnavailableError(
            "dQw4w9WgXcQ", TranscriptUnavailableReason.DISABLED
        )

        result = await pipeline.store_document({"url": VIDEO_URL})

        assert result.ok is False
        assert result.error.startswith("Could not fetch transcript for this video.")
        assert result.suggestion == "Try using a video with captions enabled."
        mocks["embedding"].embed_batch.assert_not_called()
        mocks["storage"].save_chunks.assert_not_called()

    @pytest.mark.asyncio
    async def test_blank_transcript(
        self,
        pipeline: IngestionPipeline,
        youtube_service: MagicMock,
        mocks: dict[str, MagicMock],
    ) -> None:
        """Test a whitespace-only transcript counts as unavailable."""
        youtube_service.get_transcript.return_value = "   "

        result = await pipeline.store_document({"url": VIDEO_URL})

        assert result.ok is False
        assert "Could not fetch transcript" in result.error
        youtube_service.get_video_title.assert_not_called()
        mocks["storage"].save_chunks.assert_not_called()

    @pytest.mark.asyncio
    async def test_embedding_failure(
        self, pipeline: IngestionPipeline, mocks: dict[str, MagicMock]
    ) -> None:
        """Test embedding errors become a generic failure."""
        mocks["embedding"].embed_batch.side_effect = Exception("Embedding API error")

        result = await pipeline.store_document({"url": VIDEO_URL})

        assert result.ok is False
        assert result.error == "Embedding API error"
        assert result.suggestion is None
        mocks["storage"].save_chunks.assert_not_called()

    @pytest.mark.asyncio
    async def test_storage_failure(
        self, pipeline: IngestionPipeline, mocks: dict[str, MagicMock]
    ) -> None:
        """Test storage errors become a generic failure."""
        mocks["storage"].save_chunks.side_effect = Exception("Database error")

        result = await pipeline.store_document({"url": VIDEO_URL})

        assert result.ok is False
        assert result.error == "Database error"

    @pytest.mark.asyncio
    async def test_injected_logger_is_used(
        self, config: IngestionConfig, youtube_service: MagicMock, mocks: dict[str, MagicMock]
    ) -> None:
        """Test events go through the injected logger."""
        logger = MagicMock()
        logger.bind.return_value = logger
        pipeline = IngestionPipeline(config, youtube_service=youtube_service, logger=logger)

        await pipeline.store_document({"url": "not-a-url"})

        logger.bind.assert_called_with(url="not-a-url", document_id=None)
        logger.warning.assert_called_once()
        assert logger.warning.call_args.args[0] == "ingestion_rejected"

    @pytest.mark.asyncio
    async def test_search(
        self, pipeline: IngestionPipeline, mocks: dict[str, MagicMock]
    ) -> None:
        """Test search embeds the query and delegates to storage."""
        results = await pipeline.search("rick astley", match_count=2)

        assert results == [{"content": "hit"}]
        mocks["embedding"].embed_text.assert_awaited_once_with("rick astley")
        mocks["storage"].search_documents.assert_awaited_once_with(
            [0.5, 0.5], match_count=2, filter_metadata=None
        )
