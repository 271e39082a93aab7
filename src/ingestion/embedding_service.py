"""Embedding service for generating text embeddings via OpenAI-compatible APIs."""

from openai import AsyncOpenAI

from src.utils.logging import get_logger

from .config import IngestionConfig

logger = get_logger(__name__)


class EmbeddingService:
    """Service for generating text embeddings.

    Gemini, OpenAI and Ollama are all reached through their OpenAI-compatible
    embeddings endpoint. Batches are sent one after another, each as a single
    request, and the returned vectors keep the input order.
    """

    def __init__(self, config: IngestionConfig):
        """Initialize embedding service with configuration.

        Args:
            config: Configuration object with embedding provider settings.
        """
        self.config = config
        self.client = self._get_client()
        logger.info(
            "embedding_service_initialized",
            provider=config.embedding_provider,
            model=config.embedding_model,
            base_url=config.embedding_base_url,
        )

    def _get_client(self) -> AsyncOpenAI:
        """Initialize OpenAI-compatible client based on provider.

        Returns:
            Configured AsyncOpenAI client instance.
        """
        if self.config.embedding_provider == "ollama":
            # Ollama doesn't require a real API key
            return AsyncOpenAI(
                base_url=self.config.embedding_base_url,
                api_key="ollama",
            )
        return AsyncOpenAI(
            base_url=self.config.embedding_base_url,
            api_key=self.config.embedding_api_key,
        )

    async def embed_text(self, text: str) -> list[float]:
        """Generate embedding for a single text.

        Args:
            text: Text content to embed.

        Returns:
            Embedding vector as a list of floats.
        """
        embeddings = await self.embed_batch([text])
        return embeddings[0]

    async def embed_batch(
        self, texts: list[str], batch_size: int | None = None
    ) -> list[list[float]]:
        """Generate embeddings for multiple texts with batching.

        Args:
            texts: List of text strings to embed.
            batch_size: Texts per request (default: configured batch size).

        Returns:
            List of embedding vectors in the same order as input texts.

        Raises:
            ValueError: If the API returns a different number of vectors.
            Exception: If an embedding request fails.
        """
        batch_size = batch_size or self.config.embedding_batch_size
        logger.info(
            "batch_embedding_started",
            count=len(texts),
            batch_size=batch_size,
        )

        embeddings: list[list[float]] = []

        for i in range(0, len(texts), batch_size):
            batch = texts[i : i + batch_size]
            batch_num = i // batch_size + 1

            try:
                response = await self.client.embeddings.create(
                    input=batch,
                    model=self.config.embedding_model,
                )
            except Exception as e:
                logger.exception(
                    "batch_embedding_failed",
                    batch_num=batch_num,
                    error_type=type(e).__name__,
                )
                raise

            if len(response.data) != len(batch):
                raise ValueError(
                    f"Embedding API returned {len(response.data)} vectors "
                    f"for {len(batch)} inputs"
                )

            ordered = sorted(response.data, key=lambda item: item.index)
            embeddings.extend(item.embedding for item in ordered)
            logger.debug("batch_completed", batch_num=batch_num, count=len(batch))

        logger.info(
            "batch_embedding_completed",
            total_embeddings=len(embeddings),
        )
        return embeddings
