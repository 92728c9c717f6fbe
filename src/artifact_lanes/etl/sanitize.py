"""Post-process classification results into schema-conformant values.

sanitize() is pure and idempotent for a fixed source text: feeding its
output back in returns an equal result.
"""

import re
from dataclasses import replace

from ..schema import (
    DEFAULT_LANE,
    DEFAULT_PUBLISH_TARGET,
    LANES,
    MARKUP_PATTERN,
    MAX_SUMMARY_CHARS,
    MAX_TAG_LENGTH,
    MAX_TITLE_CHARS,
    MAX_TITLE_WORDS,
    PUBLISH_TARGETS,
)
from .classify import ClassificationResult, vocabulary_tags

MIN_TAGS = 3
MAX_ENRICHED_TAGS = 7
FILLER_TAGS = ("artifact", "snippet", "draft")

MAX_CONTENT_WORDS = 220
ELLIPSIS = "…"

FALLBACK_TITLE_WORDS = 8
FALLBACK_SUMMARY_CHARS = 140
UNTITLED = "Untitled Artifact"

WORD_PATTERN = re.compile(r"\S+")


def sanitize(
    result: ClassificationResult,
    source_text: str,
    lane_override: str | None = None,
) -> ClassificationResult:
    """Coerce a raw classification into valid artifact fields.

    Args:
        result: Oracle output (remote or heuristic)
        source_text: Original artifact body, used for tag enrichment and fallbacks
        lane_override: Caller-chosen lane; wins when it is a valid lane

    Returns:
        New ClassificationResult with status "draft" and cleaned fields
    """
    content = clip_words((result.content or "").strip() or source_text, MAX_CONTENT_WORDS)

    return replace(
        result,
        lane=resolve_lane(result.lane, lane_override),
        status="draft",
        title=clean_title(result.title) or clean_title(_first_words(source_text)) or UNTITLED,
        tags=enrich_tags(result.tags, source_text),
        summary=clean_summary(result.summary) or clean_summary(content[:FALLBACK_SUMMARY_CHARS]),
        publish_targets=clean_publish_targets(result.publish_targets),
        content=content,
    )


def resolve_lane(lane: str, override: str | None = None) -> str:
    if override in LANES:
        return override
    return lane if lane in LANES else DEFAULT_LANE


def clean_title(title: str) -> str:
    """Strip markup, cap words and length, and capitalize each word."""
    words = MARKUP_PATTERN.sub("", title or "").split()[:MAX_TITLE_WORDS]
    titled = " ".join(word[:1].upper() + word[1:] for word in words)
    return titled[:MAX_TITLE_CHARS].rstrip()


def slugify_tag(tag: str) -> str:
    """Coerce a free-form tag into `[a-z0-9-]{1,30}` form (may return "")."""
    slug = re.sub(r"[^a-z0-9-]+", "-", str(tag).lower()).strip("-")
    return slug[:MAX_TAG_LENGTH].strip("-")


def enrich_tags(tags: list[str], source_text: str) -> list[str]:
    """Union oracle tags with vocabulary hits, cap at 7, pad to 3."""
    merged: list[str] = []
    for tag in [slugify_tag(t) for t in tags] + vocabulary_tags(source_text.lower()):
        if tag and tag not in merged:
            merged.append(tag)

    merged = merged[:MAX_ENRICHED_TAGS]
    for filler in FILLER_TAGS:
        if len(merged) >= MIN_TAGS:
            break
        if filler not in merged:
            merged.append(filler)

    return merged


def clean_publish_targets(targets) -> list[str]:
    if not isinstance(targets, list):
        return [DEFAULT_PUBLISH_TARGET]

    kept = []
    for target in targets:
        if target in PUBLISH_TARGETS and target not in kept:
            kept.append(target)

    return kept or [DEFAULT_PUBLISH_TARGET]


def clean_summary(summary: str) -> str:
    return " ".join((summary or "").split())[:MAX_SUMMARY_CHARS].rstrip()


def clip_words(text: str, max_words: int) -> str:
    """Keep the first `max_words` words (original spacing) plus an ellipsis."""
    text = text.strip()
    words = list(WORD_PATTERN.finditer(text))
    if len(words) <= max_words:
        return text
    return text[: words[max_words - 1].end()] + ELLIPSIS


def _first_words(text: str) -> str:
    return " ".join(text.split()[:FALLBACK_TITLE_WORDS])
