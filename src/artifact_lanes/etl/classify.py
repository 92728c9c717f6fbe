"""Artifact classification: remote model oracle with a local heuristic fallback."""

import logging
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ..config import DEFAULT_OPENAI_CONFIG, OpenAIConfig
from ..schema import DEFAULT_LANE, DEFAULT_PUBLISH_TARGET, TAG_VOCABULARY
from .llm import chat_json
from .retry import DEFAULT_RETRY_POLICY, RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)


@dataclass
class ClassificationResult:
    """Classification of one artifact, before sanitization."""

    title: str
    lane: str
    status: str = "draft"
    tags: list[str] = field(default_factory=list)
    summary: str = ""
    publish_targets: Any = field(default_factory=lambda: [DEFAULT_PUBLISH_TARGET])
    content: str | None = None  # Lightly edited body, if the oracle produced one
    method: str = "heuristic"  # "heuristic" or "remote"

    @classmethod
    def from_dict(cls, data: dict[str, Any], method: str = "remote") -> "ClassificationResult":
        """Build a result from loosely-typed model output.

        Missing or mistyped fields fall back to empty values; the sanitizer
        is responsible for enforcing the schema.
        """
        tags = data.get("tags")
        content = data.get("content")
        return cls(
            title=str(data.get("title") or ""),
            lane=str(data.get("lane") or ""),
            status=str(data.get("status") or "draft"),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
            summary=str(data.get("summary") or ""),
            publish_targets=data.get("publish_targets"),
            content=content if isinstance(content, str) and content.strip() else None,
            method=method,
        )


class ClassificationOracle(ABC):
    """Turns artifact text into a ClassificationResult."""

    @abstractmethod
    def classify(self, content: str, hints: str = "") -> ClassificationResult:
        """Classify artifact text.

        Args:
            content: Artifact body
            hints: Raw frontmatter of the source document, if any

        Returns:
            Unsanitized ClassificationResult
        """


class HeuristicOracle(ClassificationOracle):
    """Deterministic offline classifier based on keyword scans."""

    TITLE_WORDS = 8
    SUMMARY_CHARS = 140

    # Scanned in order; first match wins. B outranks C etc. for mixed text.
    LANE_PATTERNS = [
        ("B", re.compile(r"diagram|graph|visual|schematic|svg")),
        ("C", re.compile(r"prompt|rubric|template")),
        ("D", re.compile(r"schema|json|code|task graph|api")),
        ("E", re.compile(r"insight|note|reflection|aphorism")),
    ]

    def classify(self, content: str, hints: str = "") -> ClassificationResult:
        first_line = content.splitlines()[0].strip() if content.strip() else ""
        title = " ".join((first_line or content).split()[: self.TITLE_WORDS])
        lower = content.lower()

        return ClassificationResult(
            title=title,
            lane=self.detect_lane(lower),
            tags=vocabulary_tags(lower),
            summary=" ".join(content[: self.SUMMARY_CHARS].split()),
            method="heuristic",
        )

    def detect_lane(self, lower_text: str) -> str:
        """Return the first lane whose keywords appear in the text."""
        for lane, pattern in self.LANE_PATTERNS:
            if pattern.search(lower_text):
                return lane
        return DEFAULT_LANE


def vocabulary_tags(lower_text: str) -> list[str]:
    """Vocabulary terms present in lowercased text, in vocabulary order."""
    return [term for term in TAG_VOCABULARY if term.replace("-", " ") in lower_text]


class RemoteOracle(ClassificationOracle):
    """Classifier backed by one structured-output chat completion."""

    TEMPERATURE = 0.2

    SYSTEM_PROMPT = """You are an editor that normalizes small atomic artifacts into a strict JSON schema.

Allowed lanes: ["A"(Heuristic), "B"(Visual), "C"(Meta-Prompt), "D"(System Shard), "E"(Reflection)].
Return ONLY a single JSON object with keys: title, lane, status, tags, summary, publish_targets, content.
- title: concise title (<= 10 words)
- lane: one of A,B,C,D,E
- status: "draft"
- tags: 3-7 slugs
- summary: one sentence
- publish_targets: subset of ["twitter","github","image","gist"]
- content: lightly edited, concise version of the source

Optionally use frontmatter hints if present.
"""

    def __init__(self, config: OpenAIConfig | None = None):
        self.config = config or DEFAULT_OPENAI_CONFIG

    def classify(self, content: str, hints: str = "") -> ClassificationResult:
        user = f"FRONTMATTER:\n{hints or '(none)'}\n\nCONTENT:\n{content}"
        data = chat_json(
            self.SYSTEM_PROMPT, user, config=self.config, temperature=self.TEMPERATURE
        )
        return ClassificationResult.from_dict(data, method="remote")


class FallbackOracle(ClassificationOracle):
    """Retry a primary oracle with backoff, then degrade to a fallback oracle.

    Failures of the primary never escape: after the last attempt the
    fallback's answer is returned instead.
    """

    def __init__(
        self,
        primary: ClassificationOracle,
        fallback: ClassificationOracle,
        policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.primary = primary
        self.fallback = fallback
        self.policy = policy
        self.sleep = sleep

    def classify(self, content: str, hints: str = "") -> ClassificationResult:
        try:
            return call_with_retry(
                lambda: self.primary.classify(content, hints),
                policy=self.policy,
                sleep=self.sleep,
                label="remote classification",
            )
        except Exception as e:
            logger.warning(f"Falling back to heuristic classification: {e}")
            return self.fallback.classify(content, hints)


def build_oracle(
    config: OpenAIConfig | None = None,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> ClassificationOracle:
    """Pick the oracle for a run: remote-with-fallback when configured, else heuristic."""
    config = config or DEFAULT_OPENAI_CONFIG
    if dry_run or not config.enabled:
        return HeuristicOracle()
    return FallbackOracle(RemoteOracle(config), HeuristicOracle(), sleep=sleep)
