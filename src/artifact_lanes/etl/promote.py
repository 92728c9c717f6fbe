"""Route normalized artifacts into lane folders."""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from ..parsers.frontmatter import parse_document, to_slug
from ..schema import DEFAULT_LANE

logger = logging.getLogger(__name__)

LANE_DIRS = {
    "A": "a-heuristics",
    "B": "b-visual",
    "C": "c-prompts",
    "D": "d-system-shards",
    "E": "e-reflections",
}


def lane_dir(lane: str) -> str:
    """Folder name for a lane; unknown lanes go to lane A."""
    return LANE_DIRS.get(lane, LANE_DIRS[DEFAULT_LANE])


@dataclass
class Promotion:
    """One planned or completed source -> destination move."""

    source: Path
    destination: Path


def plan_promotion(path: Path, dest_root: Path) -> Promotion:
    """Work out where a normalized artifact belongs."""
    metadata, _ = parse_document(path.read_text(encoding="utf-8", errors="replace"))
    lane = str(metadata.get("lane") or DEFAULT_LANE).replace('"', "")
    slug = to_slug(metadata.get("title") or "Artifact")
    return Promotion(source=path, destination=dest_root / lane_dir(lane) / f"{slug}.md")


def promote(
    src_dir: Path,
    dest_root: Path,
    max_count: int = 100,
    move: bool = False,
    dry_run: bool = False,
) -> list[Promotion]:
    """Copy (or move) normalized artifacts into `<dest_root>/<lane-dir>/<slug>.md`.

    Args:
        src_dir: Directory of normalized artifacts
        dest_root: Root of the lane folders
        max_count: Maximum number of files to promote
        move: Move instead of copy
        dry_run: Only plan; touch nothing

    Returns:
        Promotions performed (or planned, for a dry run)

    Raises:
        FileNotFoundError: If `src_dir` does not exist
    """
    if not src_dir.is_dir():
        raise FileNotFoundError(f"Source dir not found: {src_dir}")

    files = sorted(p for p in src_dir.iterdir() if p.is_file() and p.suffix == ".md")
    promotions = [plan_promotion(p, dest_root) for p in files[:max_count]]

    for promotion in promotions:
        if dry_run:
            logger.info(f"[dry-run] {promotion.source.name} -> {promotion.destination}")
            continue

        promotion.destination.parent.mkdir(parents=True, exist_ok=True)
        if move:
            shutil.move(str(promotion.source), str(promotion.destination))
        else:
            shutil.copyfile(promotion.source, promotion.destination)
        logger.info(
            f"{'moved' if move else 'copied'} {promotion.source.name} -> {promotion.destination}"
        )

    return promotions
