"""Exception hierarchy for the ingestion pipeline.

Every expected failure carries a user-facing ``suggestion`` that ends up in the
``{ok: false, error, suggestion}`` response.
"""

from enum import Enum

CAPTIONS_SUGGESTION = "Try using a video with captions enabled."


class IngestionError(Exception):
    """Base class for failures the pipeline reports to the caller."""

    suggestion: str | None = CAPTIONS_SUGGESTION


class InvalidRequestError(IngestionError):
    """The request body is missing required fields."""

    suggestion = "Send a JSON body with a 'url' field."


class InvalidVideoURLError(IngestionError):
    """No video ID could be extracted from the URL."""

    suggestion = (
        "Use a youtube.com/watch?v=..., youtu.be/... or youtube.com/embed/... "
        "link, or a bare 11-character video ID."
    )


class ConfigurationError(IngestionError):
    """A required setting is missing."""

    suggestion = None


class EmptyDocumentError(IngestionError):
    """Splitting produced nothing to embed."""


class TranscriptUnavailableReason(str, Enum):
    DISABLED = "disabled"
    NOT_FOUND = "not_found"
    FETCH_FAILED = "fetch_failed"


_REASON_DETAILS = {
    TranscriptUnavailableReason.DISABLED: "Captions appear to be disabled for this video.",
    TranscriptUnavailableReason.NOT_FOUND: "No usable caption track was found.",
    TranscriptUnavailableReason.FETCH_FAILED: "The video page could not be retrieved.",
}


class TranscriptUnavailableError(IngestionError):
    """No transcript could be extracted for the video."""

    def __init__(self, video_id: str, reason: TranscriptUnavailableReason):
        self.video_id = video_id
        self.reason = reason
        super().__init__(
            "Could not fetch transcript for this video. "
            f"{_REASON_DETAILS[reason]} "
            "The video may not have captions, or they may be disabled. "
            "Please try a different video with captions enabled."
        )
