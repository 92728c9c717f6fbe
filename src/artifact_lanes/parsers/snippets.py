"""Extract candidate artifact snippets from a chat log."""

import logging
import re
from datetime import datetime
from pathlib import Path

from artifact_lanes.parsers.frontmatter import serialize_record
from artifact_lanes.schema import ArtifactRecord
from artifact_lanes.utils import atomic_write_text

logger = logging.getLogger(__name__)

PARAGRAPH_BREAK = re.compile(r"\r?\n\s*\r?\n")
SENTENCE_BREAK = re.compile(r"[.!?]\s")

SEED_KEYWORDS = (
    "nudge",
    "heuristic",
    "kernel",
    "prompt",
    "rubric",
    "diagram",
    "agent",
    "loop",
    "alpha",
    "beta",
    "gamma",
    "north star",
    "donkey",
)

MIN_SNIPPET_CHARS = 80
MAX_SNIPPET_CHARS = 800
SHORT_SNIPPET_CHARS = 400
MAX_SNIPPETS = 20


def split_paragraphs(text: str) -> list[str]:
    """Split text on blank lines, dropping empty blocks."""
    return [block.strip() for block in PARAGRAPH_BREAK.split(text) if block.strip()]


def is_candidate(block: str) -> bool:
    """Check whether a paragraph looks like a self-contained atomic idea."""
    if not MIN_SNIPPET_CHARS <= len(block) <= MAX_SNIPPET_CHARS:
        return False

    lower = block.lower()
    has_keyword = any(keyword in lower for keyword in SEED_KEYWORDS)
    sentences = len(SENTENCE_BREAK.findall(block))

    return has_keyword or (sentences >= 1 and len(block) <= SHORT_SNIPPET_CHARS)


def extract_snippets(text: str, limit: int = MAX_SNIPPETS) -> list[str]:
    """Return up to `limit` candidate snippets in log order."""
    return [block for block in split_paragraphs(text) if is_candidate(block)][:limit]


def write_drafts(chatlog: Path, out_dir: Path, now: datetime | None = None) -> list[Path]:
    """Write each candidate snippet from a chat log as a draft document.

    Drafts carry an empty title and the chat log path as their only
    source reference; normalization fills in the rest.

    Args:
        chatlog: Path to the chat log text file
        out_dir: Directory for draft markdown files
        now: Timestamp used in draft filenames (defaults to current time)

    Returns:
        Paths of written drafts
    """
    text = chatlog.read_text(encoding="utf-8", errors="replace")
    stamp = re.sub(r"[:.]", "-", (now or datetime.now()).isoformat())

    written = []
    for i, content in enumerate(extract_snippets(text), 1):
        draft = ArtifactRecord(title="", source_refs=[str(chatlog)], body=content)
        path = out_dir / f"{stamp}-snippet-{i:02d}.md"
        atomic_write_text(path, serialize_record(draft))
        written.append(path)

    logger.info(f"Extracted {len(written)} draft(s) from {chatlog.name}")
    return written
