"""Schema and content validation for artifact markdown files.

Validation re-parses each document from disk, independently of the code
that wrote it, and reports every violation rather than the first one.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..parsers.frontmatter import parse_document, to_slug
from ..schema import (
    LANES,
    MARKUP_PATTERN,
    MAX_SUMMARY_CHARS,
    MAX_TAGS,
    MAX_TITLE_CHARS,
    MAX_TITLE_WORDS,
    MIN_BODY_CHARS,
    PUBLISH_TARGETS,
    REQUIRED_KEYS,
    STATUSES,
    STRICT_MAX_BODY_CHARS,
    TAG_PATTERN,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 2


@dataclass
class FileResult:
    """Validation outcome for a single file."""

    file: str
    errors: list[str] = field(default_factory=list)
    title: str = ""

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class ValidationReport:
    """Aggregate validation outcome for a directory."""

    results: list[FileResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def invalid(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def exit_code(self) -> int:
        return EXIT_INVALID if self.invalid else EXIT_OK

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total": self.total,
            "invalid": self.invalid,
            "results": [{"file": r.file, "errors": r.errors} for r in self.results],
        }

    def to_lines(self) -> list[str]:
        """Human-readable report, one OK/ERR entry per file plus a summary."""
        lines = []
        for r in self.results:
            if r.ok:
                lines.append(f"OK  {r.file}")
            else:
                lines.append(f"ERR {r.file}")
                lines.extend(f"  - {error}" for error in r.errors)
        lines.append("")
        lines.append(f"Checked {self.total} file(s). Invalid: {self.invalid}.")
        return lines


def _text(value: Any) -> str:
    """Render a frontmatter value as text; falsy values become ''."""
    if not value:
        return ""
    if isinstance(value, list):
        return ",".join(_text(v) for v in value)
    return str(value)


def validate_metadata(metadata: dict[str, Any], body: str, strict: bool = False) -> list[str]:
    """Check parsed frontmatter and body against the artifact schema.

    Args:
        metadata: Parsed frontmatter mapping
        body: Document body
        strict: Also enforce the maximum body length

    Returns:
        List of error descriptions (empty when valid)
    """
    errors = [f"missing frontmatter key: {key}" for key in REQUIRED_KEYS if key not in metadata]

    title = _text(metadata.get("title")).strip()
    if not title:
        errors.append("title is empty")
    if len(title) > MAX_TITLE_CHARS:
        errors.append(f"title exceeds {MAX_TITLE_CHARS} chars")
    if len(title.split()) > MAX_TITLE_WORDS:
        errors.append(f"title exceeds {MAX_TITLE_WORDS} words")
    if MARKUP_PATTERN.search(title):
        errors.append("title contains markdown characters")

    lane = _text(metadata.get("lane")).replace('"', "")
    if lane not in LANES:
        errors.append(f"invalid lane: {lane}")

    status = _text(metadata.get("status")).replace('"', "")
    if status not in STATUSES:
        errors.append(f"invalid status: {status}")

    tags = metadata.get("tags")
    tags = tags if isinstance(tags, list) else []
    if not tags:
        errors.append("tags empty")
    if len(tags) > MAX_TAGS:
        errors.append(f"too many tags (>{MAX_TAGS})")
    bad_tags = [str(t) for t in tags if not TAG_PATTERN.fullmatch(str(t))]
    if bad_tags:
        errors.append(f"bad tag slugs: {','.join(bad_tags)}")

    targets = metadata.get("publish_targets")
    targets = targets if isinstance(targets, list) else []
    if not targets:
        errors.append("publish_targets empty")
    bad_targets = [str(t) for t in targets if t not in PUBLISH_TARGETS]
    if bad_targets:
        errors.append(f"invalid publish_targets: {','.join(bad_targets)}")

    summary = _text(metadata.get("summary")).strip()
    if not summary:
        errors.append("summary empty")
    if len(summary) > MAX_SUMMARY_CHARS:
        errors.append(f"summary exceeds {MAX_SUMMARY_CHARS} chars")

    body_length = len((body or "").strip())
    if body_length < MIN_BODY_CHARS:
        errors.append("content body too short")
    if strict and body_length > STRICT_MAX_BODY_CHARS:
        errors.append(f"content body too long (>{STRICT_MAX_BODY_CHARS} chars)")

    return errors


def validate_document(text: str, strict: bool = False) -> list[str]:
    """Parse a document and validate it. See validate_metadata()."""
    metadata, body = parse_document(text)
    return validate_metadata(metadata, body, strict=strict)


def find_markdown_files(root: Path) -> list[Path]:
    """Recursively list `*.md` files, skipping hidden files and directories."""
    files = []
    for path in sorted(root.iterdir()):
        if path.name.startswith("."):
            continue
        if path.is_dir() and not path.is_symlink():
            files.extend(find_markdown_files(path))
        elif path.is_file() and path.suffix == ".md":
            files.append(path)
    return files


def flag_duplicate_titles(results: list[FileResult]) -> None:
    """Add a duplicate-title error to every file whose title slug is shared."""
    by_slug: dict[str, list[FileResult]] = defaultdict(list)
    for r in results:
        by_slug[to_slug(r.title or Path(r.file).stem)].append(r)

    for slug, group in by_slug.items():
        if len(group) > 1:
            for r in group:
                r.errors.append(f"duplicate title slug: {slug}")


def validate_directory(
    root: Path, strict: bool = False, relative_to: Path | None = None
) -> ValidationReport:
    """Validate every markdown file under `root`.

    Args:
        root: Directory to scan recursively
        strict: Also enforce the maximum body length
        relative_to: Base for reported file paths (defaults to `root`)

    Returns:
        ValidationReport covering all files, including cross-file duplicates
    """
    base = relative_to or root
    results = []

    for path in find_markdown_files(root):
        text = path.read_text(encoding="utf-8", errors="replace")
        metadata, body = parse_document(text)
        try:
            shown = str(path.relative_to(base))
        except ValueError:
            shown = str(path)

        results.append(
            FileResult(
                file=shown,
                errors=validate_metadata(metadata, body, strict=strict),
                title=_text(metadata.get("title")),
            )
        )

    flag_duplicate_titles(results)

    report = ValidationReport(results=results)
    logger.debug(f"Validated {report.total} file(s) under {root}: {report.invalid} invalid")
    return report
