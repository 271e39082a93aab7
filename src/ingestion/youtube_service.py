"""YouTube service for scraping transcripts and titles from public endpoints."""

import json
import re
from typing import Any

import httpx

from src.utils.logging import get_logger

from .caption_parsers import extract_event_texts, parse_caption_payload
from .config import IngestionConfig
from .errors import TranscriptUnavailableError, TranscriptUnavailableReason
from .schemas import CaptionTrack
from .video_id import watch_url

logger = get_logger(__name__)

OEMBED_URL = "https://www.youtube.com/oembed"
UNKNOWN_TITLE = "Unknown Title"

_PLAYER_RESPONSE_RE = re.compile(r"ytInitialPlayerResponse\s*=\s*(?=\{)")
_CAPTION_TRACKS_RE = re.compile(r'"captionTracks"\s*:\s*(?=\[)')
_json_decoder = json.JSONDecoder()


def _decode_json_at(html: str, pattern: re.Pattern[str]) -> Any | None:
    """Decode the JSON value that starts right after ``pattern`` matches."""
    match = pattern.search(html)
    if not match:
        return None
    try:
        value, _ = _json_decoder.raw_decode(html, match.end())
    except json.JSONDecodeError:
        return None
    return value


def extract_player_response(html: str) -> dict[str, Any] | None:
    """Find and decode the ``ytInitialPlayerResponse`` object in a watch page."""
    value = _decode_json_at(html, _PLAYER_RESPONSE_RE)
    return value if isinstance(value, dict) else None


def extract_caption_tracks(html: str) -> list[dict[str, Any]]:
    """Find a raw ``"captionTracks": [...]`` array anywhere in the page."""
    value = _decode_json_at(html, _CAPTION_TRACKS_RE)
    return value if isinstance(value, list) else []


def player_caption_tracks(player_response: dict[str, Any]) -> list[dict[str, Any]]:
    renderer = (player_response.get("captions") or {}).get(
        "playerCaptionsTracklistRenderer"
    ) or {}
    return renderer.get("captionTracks") or []


def select_caption_track(tracks: list[CaptionTrack]) -> CaptionTrack | None:
    """Pick a caption track by language preference.

    Manual English first, then any English, then any ``en-*`` variant, then
    whatever comes first.
    """
    if not tracks:
        return None
    preferences = (
        lambda t: t.language_code == "en" and not t.is_auto_generated,
        lambda t: t.language_code == "en",
        lambda t: t.language_code.startswith("en"),
    )
    for matches in preferences:
        for track in tracks:
            if matches(track):
                return track
    return tracks[0]


def with_format(base_url: str, fmt: str) -> str:
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}fmt={fmt}"


class YouTubeService:
    """Service for fetching YouTube transcripts and titles by scraping.

    The watch page embeds the player response, which lists the caption
    tracks. Tracks are fetched as json3 first and as XML second; the XML body
    goes through the caption parser chain. The service never retries: each
    fallback step is attempted once.
    """

    def __init__(
        self, config: IngestionConfig, http_client: httpx.AsyncClient | None = None
    ):
        """Initialize YouTube service with configuration.

        Args:
            config: Configuration object with scraping headers.
            http_client: Shared HTTP client. One is created if omitted.
        """
        self.config = config
        self.http_client = http_client or httpx.AsyncClient(follow_redirects=True)
        self.page_headers = {
            "User-Agent": config.user_agent,
            "Accept-Language": config.accept_language,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }
        self.caption_headers = {"User-Agent": config.user_agent}
        logger.info("youtube_service_initialized")

    async def aclose(self) -> None:
        await self.http_client.aclose()

    async def get_video_title(self, video_id: str) -> str:
        """Fetch the video title from the oEmbed endpoint.

        The title is cosmetic, so every failure falls back to a placeholder.

        Args:
            video_id: YouTube video ID.

        Returns:
            The video title, or "Unknown Title".
        """
        try:
            response = await self.http_client.get(
                OEMBED_URL, params={"url": watch_url(video_id), "format": "json"}
            )
            if response.status_code == 200:
                title = response.json().get("title")
                if title:
                    return str(title)
            logger.warning(
                "video_title_unavailable",
                video_id=video_id,
                status_code=response.status_code,
            )
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.warning(
                "video_title_fetch_failed",
                video_id=video_id,
                error_type=type(e).__name__,
                error=str(e),
            )
        return UNKNOWN_TITLE

    async def get_transcript(self, video_id: str) -> str:
        """Fetch the full transcript text for a video.

        Args:
            video_id: YouTube video ID.

        Returns:
            Caption segments joined by single spaces.

        Raises:
            TranscriptUnavailableError: If no transcript could be extracted.
                The reason tells "disabled", "not found" and "fetch failed"
                apart.
        """
        logger.info("fetching_transcript", video_id=video_id)

        html = await self._fetch_watch_page(video_id)

        captions_disabled = False
        player_response = extract_player_response(html)
        if player_response is not None:
            captions_disabled = "captions" not in player_response
            tracks = [
                CaptionTrack.from_payload(t) for t in player_caption_tracks(player_response)
            ]
            logger.info("caption_tracks_found", video_id=video_id, count=len(tracks))

            track = select_caption_track(tracks)
            if track and track.base_url:
                logger.info(
                    "caption_track_selected",
                    video_id=video_id,
                    track=track.display_name,
                    auto_generated=track.is_auto_generated,
                )
                transcript = await self._fetch_track_text(track)
                if transcript:
                    logger.info(
                        "transcript_fetched", video_id=video_id, length=len(transcript)
                    )
                    return transcript
        else:
            logger.info("player_response_not_found", video_id=video_id)

        raw_tracks = [CaptionTrack.from_payload(t) for t in extract_caption_tracks(html)]
        if raw_tracks:
            captions_disabled = False
            logger.info(
                "caption_tracks_found_via_regex", video_id=video_id, count=len(raw_tracks)
            )
            track = raw_tracks[0]
            if track.base_url:
                transcript = await self._fetch_track_text(track)
                if transcript:
                    logger.info(
                        "transcript_fetched", video_id=video_id, length=len(transcript)
                    )
                    return transcript

        reason = (
            TranscriptUnavailableReason.DISABLED
            if captions_disabled
            else TranscriptUnavailableReason.NOT_FOUND
        )
        logger.warning("transcript_unavailable", video_id=video_id, reason=reason.value)
        raise TranscriptUnavailableError(video_id, reason)

    async def _fetch_watch_page(self, video_id: str) -> str:
        try:
            response = await self.http_client.get(
                watch_url(video_id), headers=self.page_headers
            )
        except httpx.HTTPError as e:
            logger.warning(
                "watch_page_fetch_failed",
                video_id=video_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise TranscriptUnavailableError(
                video_id, TranscriptUnavailableReason.FETCH_FAILED
            ) from e

        if response.status_code != 200:
            logger.warning(
                "watch_page_fetch_failed",
                video_id=video_id,
                status_code=response.status_code,
            )
            raise TranscriptUnavailableError(
                video_id, TranscriptUnavailableReason.FETCH_FAILED
            )
        return response.text

    async def _fetch_track_text(self, track: CaptionTrack) -> str | None:
        """Fetch one caption track, json3 first and XML second."""
        body = await self._fetch_caption_body(with_format(track.base_url, "json3"))
        if body is not None:
            try:
                texts = extract_event_texts(json.loads(body))
            except json.JSONDecodeError:
                texts = None
                logger.info("json_captions_unparseable", length=len(body))
            if texts:
                logger.info("json_captions_parsed", segments=len(texts))
                return " ".join(texts)

        body = await self._fetch_caption_body(track.base_url)
        if body is None:
            return None
        logger.debug("xml_captions_received", length=len(body), preview=body[:500])
        return parse_caption_payload(body)

    async def _fetch_caption_body(self, url: str) -> str | None:
        try:
            response = await self.http_client.get(url, headers=self.caption_headers)
        except httpx.HTTPError as e:
            logger.warning(
                "caption_fetch_failed", error_type=type(e).__name__, error=str(e)
            )
            return None

        if response.status_code != 200:
            logger.warning("caption_fetch_failed", status_code=response.status_code)
            return None
        return response.text
