"""Frontmatter codec for artifact markdown documents.

Documents look like::

    ---
    title: "Keep Artifacts Atomic"
    lane: "A"
    ...
    ---

    Body text.

Each metadata line holds a JSON-encoded value. Parsing is deliberately
lenient: hand-edited files are common, so malformed lines are skipped
rather than raised.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

from artifact_lanes.schema import FIELD_ORDER, ArtifactRecord

FENCE = "---"

# Closing fence must sit on its own line
CLOSING_FENCE_PATTERN = re.compile(r"\r?\n---[ \t]*(?:\r?\n|$)")

METADATA_LINE_PATTERN = re.compile(r"^([A-Za-z_]+):\s*(.*)$")
LINE_BREAK_PATTERN = re.compile(r"\r?\n")


@dataclass
class FrontmatterSplit:
    """Raw metadata block and body of a document."""

    metadata_raw: str
    body: str


def split_frontmatter(document: str) -> FrontmatterSplit:
    """Split a document into its raw metadata block and body.

    Args:
        document: Full document text

    Returns:
        FrontmatterSplit; metadata_raw is empty when no complete fenced
        block opens the document
    """
    if document.startswith(FENCE):
        match = CLOSING_FENCE_PATTERN.search(document, len(FENCE))
        if match:
            return FrontmatterSplit(
                metadata_raw=document[len(FENCE) : match.start()].strip(),
                body=document[match.end() :].strip(),
            )

    return FrontmatterSplit(metadata_raw="", body=document.strip())


def parse_metadata(metadata_raw: str) -> dict[str, Any]:
    """Parse `key: value` lines into a mapping.

    Values are JSON-decoded when possible; otherwise the raw text is kept
    with surrounding double quotes removed. Lines that do not look like
    `key: value` are ignored.
    """
    metadata: dict[str, Any] = {}
    for line in LINE_BREAK_PATTERN.split(metadata_raw):
        match = METADATA_LINE_PATTERN.match(line)
        if not match:
            continue

        key, value = match.group(1), match.group(2)
        try:
            metadata[key] = json.loads(value)
        except (ValueError, RecursionError):
            metadata[key] = re.sub(r'^"|"$', "", value)

    return metadata


def parse_document(document: str) -> tuple[dict[str, Any], str]:
    """Split a document and parse its metadata block.

    Returns:
        Tuple of (metadata mapping, body)
    """
    parts = split_frontmatter(document)
    return parse_metadata(parts.metadata_raw), parts.body


def serialize_record(record: ArtifactRecord) -> str:
    """Render a record as a fenced metadata block followed by its body."""
    lines = [FENCE]
    for key, value in record.frontmatter().items():
        lines.append(f"{key}: {json.dumps(value, ensure_ascii=False)}")
    lines.append(FENCE)
    lines.append("")

    return "\n".join(lines) + "\n" + record.body.strip() + "\n"


def record_from_document(document: str) -> ArtifactRecord:
    """Rebuild an ArtifactRecord from a serialized document."""
    metadata, body = parse_document(document)
    fields = {key: metadata[key] for key in FIELD_ORDER if key in metadata}
    fields["body"] = body
    return ArtifactRecord.from_dict(fields)


def to_slug(text: str, max_length: int = 60) -> str:
    """Convert a title into a filesystem-friendly slug.

    Example:
        to_slug("Keep Artifacts Atomic!")  # "keep-artifacts-atomic"
    """
    slug = re.sub(r"[^a-z0-9\s-]", "", str(text or "").lower()).strip()
    slug = re.sub(r"\s+", "-", slug)[:max_length]
    return slug or "artifact"
