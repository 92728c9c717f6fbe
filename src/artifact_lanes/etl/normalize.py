"""Normalization stage: draft markdown -> schema-conformant artifact records."""

import logging
import time
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ..parsers.frontmatter import serialize_record, split_frontmatter
from ..schema import ArtifactRecord
from ..utils import atomic_write_text
from ..validation.validator import validate_document
from .classify import ClassificationOracle, HeuristicOracle
from .dedup import DedupSet
from .sanitize import sanitize

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".norm.md"
REMOTE_PAUSE_SECONDS = 0.15  # Courtesy pause after each successful remote call


@dataclass
class NormalizeSummary:
    """Counts for one normalization run."""

    written: list[Path] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)
    rejected: dict[str, list[str]] = field(default_factory=dict)
    methods: Counter = field(default_factory=Counter)

    @property
    def processed(self) -> int:
        return len(self.written) + len(self.duplicates) + len(self.rejected)


class NormalizeRun:
    """One pass of the normalization pipeline over a set of drafts.

    Documents are processed strictly in order, one at a time. The
    duplicate set lives on the run, so a new run starts with nothing seen.
    """

    def __init__(
        self,
        oracle: ClassificationOracle | None = None,
        lane_override: str | None = None,
        sleep: Callable[[float], None] = time.sleep,
        pause_seconds: float = REMOTE_PAUSE_SECONDS,
    ):
        self.oracle = oracle or HeuristicOracle()
        self.lane_override = lane_override
        self.sleep = sleep
        self.pause_seconds = pause_seconds
        self.dedup = DedupSet()

    def normalize_document(self, document: str) -> tuple[ArtifactRecord, str]:
        """Classify and sanitize one raw document.

        Returns:
            Tuple of (record, oracle method used)
        """
        parts = split_frontmatter(document)
        result = self.oracle.classify(parts.body, parts.metadata_raw)
        clean = sanitize(result, parts.body, lane_override=self.lane_override)

        record = ArtifactRecord(
            title=clean.title,
            lane=clean.lane,
            status=clean.status,
            tags=clean.tags,
            source_refs=[],
            summary=clean.summary,
            publish_targets=clean.publish_targets,
            body=(clean.content or parts.body).strip(),
        )
        return record, result.method

    def process_file(self, path: Path, out_dir: Path, summary: NormalizeSummary) -> None:
        """Normalize one draft file and write it unless it is a duplicate or invalid."""
        document = path.read_text(encoding="utf-8", errors="replace")
        record, method = self.normalize_document(document)
        summary.methods[method] += 1

        if method == "remote" and self.pause_seconds:
            self.sleep(self.pause_seconds)

        if not self.dedup.check_and_add(record.body):
            logger.info(f"Skipping {path.name}: duplicate content")
            summary.duplicates.append(path.name)
            return

        text = serialize_record(record)
        errors = validate_document(text)
        if errors:
            logger.warning(f"Skipping {path.name}: {'; '.join(errors)}")
            summary.rejected[path.name] = errors
            return

        out_path = out_dir / (path.name.removesuffix(".md") + OUTPUT_SUFFIX)
        atomic_write_text(out_path, text)
        summary.written.append(out_path)
        logger.debug(f"{path.name} -> {out_path.name} (lane {record.lane}, {method})")

    def run(self, input_dir: Path, out_dir: Path, max_count: int = 50) -> NormalizeSummary:
        """Normalize up to `max_count` drafts from `input_dir` into `out_dir`.

        Raises:
            FileNotFoundError: If `input_dir` does not exist
        """
        if not input_dir.is_dir():
            raise FileNotFoundError(f"Input dir not found: {input_dir}")

        out_dir.mkdir(parents=True, exist_ok=True)
        files = sorted(p for p in input_dir.iterdir() if p.is_file() and p.suffix == ".md")
        files = files[:max_count]

        logger.info(f"Normalizing {len(files)} draft(s) from {input_dir} -> {out_dir}")

        summary = NormalizeSummary()
        for path in files:
            self.process_file(path, out_dir, summary)

        logger.info(
            f"Wrote {len(summary.written)}, skipped {len(summary.duplicates)} duplicate(s), "
            f"rejected {len(summary.rejected)}; methods: {dict(summary.methods)}"
        )
        return summary
