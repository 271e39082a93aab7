"""Storage service for document chunks in the Supabase vector store."""

from typing import Any

from supabase import Client, create_client

from src.utils.logging import get_logger

from .config import IngestionConfig
from .schemas import ChunkWithEmbedding

logger = get_logger(__name__)


class StorageService:
    """Service for storing embedded chunks in Supabase.

    Rows follow the common Supabase vector-store layout (``content``,
    ``metadata``, ``embedding``) so that the configured match function can
    run similarity search over them.
    """

    def __init__(self, config: IngestionConfig):
        """Initialize storage service with configuration.

        Args:
            config: Configuration object with Supabase credentials and table.
        """
        self.config = config
        self.client: Client = create_client(
            config.supabase_url,
            config.supabase_key,
        )
        logger.info(
            "storage_service_initialized",
            supabase_url=config.supabase_url,
            table=config.table_name,
        )

    async def save_chunks(self, chunks: list[ChunkWithEmbedding]) -> None:
        """Save chunks with embeddings to the vector table.

        Args:
            chunks: List of chunks with embeddings to save.

        Raises:
            Exception: If database operation fails. Nothing is rolled back.
        """
        if not chunks:
            return

        try:
            data = [
                {
                    "content": chunk.content,
                    "metadata": chunk.metadata.to_record(),
                    "embedding": chunk.embedding,
                }
                for chunk in chunks
            ]

            self.client.table(self.config.table_name).insert(data).execute()
            logger.info(
                "chunks_saved",
                count=len(chunks),
                video_id=chunks[0].metadata.video_id,
            )

        except Exception as e:
            logger.exception(
                "chunks_save_failed",
                count=len(chunks),
                error_type=type(e).__name__,
            )
            raise

    async def search_documents(
        self,
        query_embedding: list[float],
        match_count: int = 5,
        filter_metadata: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Search for similar chunks using vector similarity.

        Args:
            query_embedding: Query embedding vector.
            match_count: Number of results to return (default: 5).
            filter_metadata: Optional JSONB filter for metadata (default: None).

        Returns:
            List of matching rows with similarity scores.

        Raises:
            Exception: If search operation fails.
        """
        try:
            response = self.client.rpc(
                self.config.query_name,
                {
                    "query_embedding": query_embedding,
                    "match_count": match_count,
                    "filter": filter_metadata or {},
                },
            ).execute()

            results: list[dict[str, Any]] = response.data or []
            logger.info(
                "vector_search_completed",
                results=len(results),
                match_count=match_count,
            )
            return results

        except Exception as e:
            logger.exception(
                "vector_search_failed",
                error_type=type(e).__name__,
            )
            raise
