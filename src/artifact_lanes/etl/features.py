"""Semantic feature extraction for normalized artifacts.

For each artifact a feature record is produced with key phrases, topics,
tags, lane probabilities, a summary, bullets and an embedding. The remote
service is used when configured; otherwise (or when the chat call keeps
failing) a word-frequency fallback fills in the same keys.
"""

import logging
import re
import time
from collections import Counter
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from ..config import DEFAULT_OPENAI_CONFIG, OpenAIConfig
from ..parsers.frontmatter import parse_document
from ..schema import DEFAULT_LANE
from ..utils import atomic_write_json
from .llm import chat_json, embed
from .retry import DEFAULT_RETRY_POLICY, RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 4000
PAUSE_SECONDS = 0.15
OUTPUT_SUFFIX = ".features.json"

STOP_WORDS = set(
    "the a an and or of to for with from in on at by is are was were be been as it this "
    "that these those you your we our".split()
)

FALLBACK_CHAT_MODEL = "fallback"
FALLBACK_LANE_PROBS = {"A": 0.5, "B": 0.1, "C": 0.2, "D": 0.1, "E": 0.1}

FEATURES_PROMPT = (
    "You extract concise semantic features from short technical notes. "
    "Return ONLY a JSON object with keys: key_phrases(array<=12), topics(array<=6), "
    "tags(array 3-7 slug), lane_probs(object A-E), recommended_lane(A-E), "
    "summary(one sentence), bullets(array 3-5)."
)


@dataclass
class FeatureRecord:
    """Extracted features for one artifact."""

    key_phrases: list[str] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    lane_probs: dict[str, float] = field(default_factory=dict)
    recommended_lane: str = DEFAULT_LANE
    summary: str = ""
    bullets: list[str] = field(default_factory=list)
    embedding: list[float] = field(default_factory=list)
    model_info: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeatureRecord":
        """Build from model output, ignoring unknown and mistyped keys."""
        record = cls()

        for key in ("key_phrases", "topics", "tags", "bullets"):
            value = data.get(key)
            if isinstance(value, list):
                setattr(record, key, [str(item) for item in value])

        lane_probs = data.get("lane_probs")
        if isinstance(lane_probs, dict):
            record.lane_probs = {
                str(lane): float(prob)
                for lane, prob in lane_probs.items()
                if isinstance(prob, (int, float)) and not isinstance(prob, bool)
            }

        if isinstance(data.get("recommended_lane"), str):
            record.recommended_lane = data["recommended_lane"]
        if isinstance(data.get("summary"), str):
            record.summary = data["summary"]

        return record


def simple_key_phrases(text: str, k: int = 8) -> list[str]:
    """Most frequent non-stop-words longer than two characters."""
    words = re.sub(r"[^a-z0-9\s]", " ", text.lower()).split()
    counts = Counter(w for w in words if w not in STOP_WORDS and len(w) > 2)
    return [word for word, _ in counts.most_common(k)]


def fallback_features(title: str, summary: str, body: str) -> FeatureRecord:
    """Offline features derived from word frequencies."""
    phrases = simple_key_phrases("\n".join([title, summary, body]), 8)
    tags = list(dict.fromkeys(phrases[:5]))

    return FeatureRecord(
        key_phrases=phrases,
        topics=phrases[:3],
        tags=tags,
        lane_probs=dict(FALLBACK_LANE_PROBS),
        recommended_lane=DEFAULT_LANE,
        summary=summary or body[:160],
        bullets=[f"Focus on {p}" for p in phrases[:3]],
        embedding=[],
        model_info={"chat_model": FALLBACK_CHAT_MODEL, "embed_model": "none"},
    )


class FeatureExtractor:
    """Extract feature records, remotely when possible."""

    def __init__(
        self,
        config: OpenAIConfig | None = None,
        dry_run: bool = False,
        policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or DEFAULT_OPENAI_CONFIG
        self.remote = self.config.enabled and not dry_run
        self.policy = policy
        self.sleep = sleep

    def extract(self, document: str, name: str = "artifact") -> FeatureRecord:
        """Extract features from a serialized artifact document."""
        metadata, body = parse_document(document)
        title = str(metadata.get("title") or "")
        summary = str(metadata.get("summary") or "")

        if not self.remote:
            return fallback_features(title, summary, body)

        content = f"{title}\n\n{summary}\n\n{body}"[:MAX_CONTENT_CHARS]

        try:
            data = call_with_retry(
                lambda: chat_json(FEATURES_PROMPT, content, config=self.config),
                policy=self.policy,
                sleep=self.sleep,
                label=f"feature chat for {name}",
            )
            features = FeatureRecord.from_dict(data)
            chat_model = self.config.model
        except Exception as e:
            logger.warning(f"chat failed for {name}: {e}")
            features = fallback_features(title, summary, body)
            chat_model = FALLBACK_CHAT_MODEL

        try:
            features.embedding = embed(content, config=self.config)
            embed_model = self.config.embed_model
        except Exception as e:
            logger.warning(f"embed failed for {name}: {e}")
            features.embedding = []
            embed_model = "failed"

        features.model_info = {"chat_model": chat_model, "embed_model": embed_model}
        return features

    def run(self, input_dir: Path, out_dir: Path, max_count: int = 20) -> list[Path]:
        """Write `<stem>.features.json` for up to `max_count` artifacts.

        Raises:
            FileNotFoundError: If `input_dir` does not exist
        """
        if not input_dir.is_dir():
            raise FileNotFoundError(f"Input dir not found: {input_dir}")

        files = sorted(p for p in input_dir.iterdir() if p.is_file() and p.suffix == ".md")
        files = files[:max_count]
        logger.info(f"Extracting features for {len(files)} file(s) from {input_dir} -> {out_dir}")

        written = []
        for i, path in enumerate(files):
            if i and self.remote:
                self.sleep(PAUSE_SECONDS)

            text = path.read_text(encoding="utf-8", errors="replace")
            features = self.extract(text, name=path.name)
            out_path = out_dir / (path.name.removesuffix(".md") + OUTPUT_SUFFIX)
            atomic_write_json(out_path, features.to_dict())
            written.append(out_path)

        return written
