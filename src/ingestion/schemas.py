"""Pydantic schemas for the YouTube ingestion pipeline."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class IngestRequest(BaseModel):
    """Incoming ingestion request.

    Both fields are optional at the schema level so that a missing URL is
    reported through the pipeline's own failure result rather than a
    validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    url: str | None = None
    document_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("documentId", "document_id"),
        serialization_alias="documentId",
    )


class CaptionTrack(BaseModel):
    """Single caption track advertised by the watch page player response."""

    language_code: str = ""
    kind: str | None = None  # "asr" for auto-generated tracks
    base_url: str = ""
    display_name: str = ""

    @property
    def is_auto_generated(self) -> bool:
        return self.kind == "asr"

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CaptionTrack":
        """Build a track from a raw ``captionTracks`` entry."""
        language_code = payload.get("languageCode") or ""
        name = payload.get("name") or {}
        display_name = name.get("simpleText")
        if not display_name and name.get("runs"):
            display_name = name["runs"][0].get("text")

        return cls(
            language_code=language_code,
            kind=payload.get("kind"),
            base_url=payload.get("baseUrl") or "",
            display_name=display_name or language_code,
        )


class ChunkMetadata(BaseModel):
    """Identifying metadata stored alongside every chunk.

    Serialized with camelCase keys, which is the shape persisted in the
    vector store's ``metadata`` column.
    """

    model_config = ConfigDict(populate_by_name=True)

    video_id: str = Field(alias="videoId")
    video_title: str = Field(alias="videoTitle")
    document_id: str | None = Field(default=None, alias="documentId")
    chunk_index: int = Field(alias="chunkIndex", ge=0)
    total_chunks: int = Field(alias="totalChunks", ge=1)
    source: str

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class Chunk(BaseModel):
    """Fixed-size window of the title-prefixed transcript."""

    content: str
    metadata: ChunkMetadata


class ChunkWithEmbedding(Chunk):
    """Chunk with embedding vector.

    This is what gets stored in the vector database.
    """

    embedding: list[float]


class IngestResult(BaseModel):
    """Outcome of one ingestion request.

    Successful runs fill ``message``, ``chunks_created`` and ``video_title``;
    failed runs fill ``error`` and optionally ``suggestion``.
    """

    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    message: str | None = None
    chunks_created: int | None = Field(default=None, alias="chunksCreated")
    video_title: str | None = Field(default=None, alias="videoTitle")
    error: str | None = None
    suggestion: str | None = None

    @classmethod
    def success(cls, video_title: str, chunks_created: int) -> "IngestResult":
        return cls(
            ok=True,
            message=(
                f'Successfully processed video "{video_title}" '
                f"with {chunks_created} chunks"
            ),
            chunks_created=chunks_created,
            video_title=video_title,
        )

    @classmethod
    def failure(cls, error: str, suggestion: str | None = None) -> "IngestResult":
        return cls(ok=False, error=error, suggestion=suggestion)

    def to_response(self) -> dict[str, Any]:
        """Serialize to the camelCase response body, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
