"""Chunking service for fixed-size, overlapping transcript segmentation."""

from src.utils.logging import get_logger

from .config import IngestionConfig
from .schemas import Chunk, ChunkMetadata

logger = get_logger(__name__)


def build_page_content(video_title: str, transcript: str) -> str:
    """Combine title and transcript into the text that gets chunked."""
    return f"Video title: {video_title} | Video context: {transcript}"


def split_text(text: str, chunk_size: int, chunk_overlap: int) -> list[str]:
    """Split text into fixed-size windows that overlap by ``chunk_overlap``.

    Windows advance by ``chunk_size - chunk_overlap`` characters. The last
    window ends at the end of the text and may be shorter than ``chunk_size``.

    Args:
        text: Text to split.
        chunk_size: Window length in characters.
        chunk_overlap: Characters shared by consecutive windows.

    Returns:
        List of non-empty windows covering the whole text, empty for empty text.

    Raises:
        ValueError: If the window parameters are inconsistent.

    Examples:
        >>> split_text("abcdefghij", chunk_size=4, chunk_overlap=1)
        ['abcd', 'defg', 'ghij']
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if not 0 <= chunk_overlap < chunk_size:
        raise ValueError("chunk_overlap must be in [0, chunk_size)")

    step = chunk_size - chunk_overlap
    chunks: list[str] = []
    start = 0
    while start < len(text):
        end = min(start + chunk_size, len(text))
        chunks.append(text[start:end])
        if end == len(text):
            break
        start += step
    return chunks


class ChunkingService:
    """Service for splitting a video transcript into annotated chunks.

    The title-prefixed transcript is cut into overlapping windows, then every
    window gets the video's identifying metadata. Chunk positions are only
    assigned once the full list is known, so ``total_chunks`` is exact.
    """

    def __init__(self, config: IngestionConfig):
        """Initialize chunking service with configuration.

        Args:
            config: Configuration object with window size and overlap.
        """
        self.config = config
        logger.info(
            "chunking_service_initialized",
            chunk_size=config.chunk_size,
            chunk_overlap=config.chunk_overlap,
        )

    def chunk_document(
        self,
        video_id: str,
        video_title: str,
        transcript: str,
        source: str,
        document_id: str | None = None,
    ) -> list[Chunk]:
        """Chunk a transcript and annotate every chunk with metadata.

        Args:
            video_id: YouTube video ID.
            video_title: Title shown in the page content and metadata.
            transcript: Full transcript text.
            source: URL the caller submitted.
            document_id: Optional caller-side document identifier.

        Returns:
            List of Chunk objects ready for embedding generation.
        """
        page_content = build_page_content(video_title, transcript)
        texts = split_text(page_content, self.config.chunk_size, self.config.chunk_overlap)

        logger.info(
            "chunking_completed",
            video_id=video_id,
            content_length=len(page_content),
            chunks_created=len(texts),
        )
        return annotate_chunks(
            texts,
            video_id=video_id,
            video_title=video_title,
            source=source,
            document_id=document_id,
        )


def annotate_chunks(
    texts: list[str],
    video_id: str,
    video_title: str,
    source: str,
    document_id: str | None = None,
) -> list[Chunk]:
    """Attach positional and identifying metadata to split texts."""
    total = len(texts)
    return [
        Chunk(
            content=text,
            metadata=ChunkMetadata(
                video_id=video_id,
                video_title=video_title,
                document_id=document_id,
                chunk_index=index,
                total_chunks=total,
                source=source,
            ),
        )
        for index, text in enumerate(texts)
    ]
