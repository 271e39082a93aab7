"""Parsers for YouTube caption payloads.

Caption endpoints answer in several shapes depending on the video and the
requested format: ``json3`` event lists, ``<text>`` XML (plain or CDATA), or
JSON served where XML was requested. Each parser here takes the raw payload
and returns the decoded text segments, or None when the payload does not have
its shape. ``parse_caption_payload`` tries them in order and keeps the first
non-empty result; the generic tag scrape goes last because it is the most
likely to pick up noise.
"""

import json
import re
from collections.abc import Callable, Iterable
from typing import Any

from src.utils.logging import get_logger

logger = get_logger(__name__)

CaptionParser = Callable[[str], list[str] | None]

# "&amp;" goes first, so double-escaped entities such as "&amp;lt;" decode fully
_ENTITY_REPLACEMENTS = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&apos;", "'"),
    ("&nbsp;", " "),
    ("\\n", " "),
    ("\n", " "),
)

_TEXT_TAG_RE = re.compile(r"<text[^>]*>([^<]+)</text>", re.IGNORECASE)
_CDATA_TAG_RE = re.compile(
    r"<text[^>]*><!\[CDATA\[(.*?)\]\]></text>", re.IGNORECASE | re.DOTALL
)
_GENERIC_TAG_RE = re.compile(r">([^<]{2,})<")


def decode_html_entities(text: str | None) -> str:
    """Decode the entities YouTube uses in captions and flatten newlines.

    Examples:
        >>> decode_html_entities("Tom &amp; Jerry\\nsay &quot;hi&quot; ")
        'Tom & Jerry say "hi"'
    """
    if not text:
        return ""
    for entity, replacement in _ENTITY_REPLACEMENTS:
        text = text.replace(entity, replacement)
    return text.strip()


def _decoded(fragments: Iterable[str]) -> list[str] | None:
    texts = [decoded for decoded in map(decode_html_entities, fragments) if decoded]
    return texts or None


def extract_event_texts(data: Any) -> list[str] | None:
    """Flatten ``events[].segs[].utf8`` from a json3 caption document.

    Events, segments or text values of the wrong shape are skipped, so a
    malformed document yields None rather than raising.
    """
    if not isinstance(data, dict) or not isinstance(data.get("events"), list):
        return None

    fragments = []
    for event in data["events"]:
        if not isinstance(event, dict) or not isinstance(event.get("segs"), list):
            continue
        for seg in event["segs"]:
            utf8 = seg.get("utf8") if isinstance(seg, dict) else None
            if isinstance(utf8, str) and utf8 and utf8 != "\n":
                fragments.append(utf8)
    return _decoded(fragments)


def parse_json_events(payload: str) -> list[str] | None:
    """Parse a json3 response body."""
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        return None
    return extract_event_texts(data)


def parse_text_tags(payload: str) -> list[str] | None:
    """Plain ``<text start=".." dur="..">body</text>`` elements."""
    return _decoded(_TEXT_TAG_RE.findall(payload))


def parse_cdata_tags(payload: str) -> list[str] | None:
    """``<text>`` elements whose body is wrapped in CDATA."""
    return _decoded(_CDATA_TAG_RE.findall(payload))


def parse_embedded_json(payload: str) -> list[str] | None:
    """JSON event document served where XML was requested."""
    if '"events"' not in payload:
        return None
    return parse_json_events(payload)


def parse_generic_tags(payload: str) -> list[str] | None:
    """Any text of two or more characters between tags."""
    texts = [
        decoded
        for decoded in map(decode_html_entities, _GENERIC_TAG_RE.findall(payload))
        if decoded and not decoded.startswith("<?") and "encoding" not in decoded
    ]
    return texts or None


CAPTION_PARSERS: tuple[CaptionParser, ...] = (
    parse_text_tags,
    parse_cdata_tags,
    parse_embedded_json,
    parse_generic_tags,
)


def first_successful_parse(
    payload: str, parsers: Iterable[CaptionParser] = CAPTION_PARSERS
) -> str | None:
    """Run parsers in order and join the first non-empty result.

    Args:
        payload: Raw caption response body.
        parsers: Parsers to try, in priority order.

    Returns:
        Segments joined by single spaces, or None if every parser came up empty.
    """
    for parser in parsers:
        texts = parser(payload)
        if texts:
            logger.info("caption_parser_matched", parser=parser.__name__, segments=len(texts))
            return " ".join(texts)
    return None


def parse_caption_payload(payload: str) -> str | None:
    """Parse an XML-format caption response with the full fallback chain."""
    return first_successful_parse(payload, CAPTION_PARSERS)
