"""Artifact record schema: lanes, limits and the persisted record type."""

import re
from dataclasses import dataclass, field
from typing import Any

# Lane code -> human-readable meaning
LANES = {
    "A": "Heuristic",
    "B": "Visual",
    "C": "Meta-Prompt",
    "D": "System Shard",
    "E": "Reflection",
}
DEFAULT_LANE = "A"

STATUSES = ("draft", "publish")
PUBLISH_TARGETS = ("twitter", "github", "image", "gist")
DEFAULT_PUBLISH_TARGET = "github"

# Title limits
MAX_TITLE_CHARS = 80
MAX_TITLE_WORDS = 12
MARKUP_PATTERN = re.compile(r"[`*_\[\]<>]")

# Tag limits
TAG_PATTERN = re.compile(r"[a-z0-9-]{1,30}")
MAX_TAG_LENGTH = 30
MAX_TAGS = 10

MAX_SUMMARY_CHARS = 240
MIN_BODY_CHARS = 20
STRICT_MAX_BODY_CHARS = 6000

REQUIRED_KEYS = ("title", "lane", "status", "tags", "summary", "publish_targets")

# Serialization order of the frontmatter block
FIELD_ORDER = ("title", "lane", "status", "tags", "source_refs", "summary", "publish_targets")

# Controlled tag vocabulary; hyphens match spaces in source text
TAG_VOCABULARY = (
    "kernel",
    "heuristic",
    "prompt",
    "diagram",
    "agent",
    "north-star",
    "donkey",
    "alpha",
    "beta",
    "gamma",
)


@dataclass
class ArtifactRecord:
    """A normalized artifact: frontmatter fields plus free-text body."""

    title: str
    lane: str = DEFAULT_LANE
    status: str = "draft"
    tags: list[str] = field(default_factory=list)
    source_refs: list[str] = field(default_factory=list)
    summary: str = ""
    publish_targets: list[str] = field(default_factory=lambda: [DEFAULT_PUBLISH_TARGET])
    body: str = ""

    def frontmatter(self) -> dict[str, Any]:
        """Return frontmatter fields in serialization order."""
        return {key: getattr(self, key) for key in FIELD_ORDER}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = self.frontmatter()
        data["body"] = self.body
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ArtifactRecord":
        """Create ArtifactRecord from a parsed frontmatter mapping."""
        return cls(
            title=data.get("title", ""),
            lane=data.get("lane", DEFAULT_LANE),
            status=data.get("status", "draft"),
            tags=list(data.get("tags", [])),
            source_refs=list(data.get("source_refs", [])),
            summary=data.get("summary", ""),
            publish_targets=list(data.get("publish_targets", [DEFAULT_PUBLISH_TARGET])),
            body=data.get("body", ""),
        )
