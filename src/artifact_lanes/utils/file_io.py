"""Atomic file writes for artifact output."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any


def atomic_write(path: Path | str, write_func: Callable[[Path], None]) -> None:
    """Write a file via a temporary sibling and rename it into place.

    Readers never observe a half-written artifact: either the previous
    file (if any) or the complete new one exists at `path`.

    Args:
        path: Destination file path
        write_func: Callable that writes the full content to the given path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")

    try:
        write_func(tmp_path)
        tmp_path.replace(path)
    except Exception:
        if tmp_path.exists():
            tmp_path.unlink()
        raise


def atomic_write_text(path: Path | str, text: str) -> None:
    """Atomically write UTF-8 text to a file."""

    def write_text(tmp_path: Path) -> None:
        tmp_path.write_text(text, encoding="utf-8")

    atomic_write(path, write_text)


def atomic_write_json(path: Path | str, data: Any, indent: int = 2) -> None:
    """Atomically write JSON data to a file."""

    def write_json(tmp_path: Path) -> None:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)

    atomic_write(path, write_json)
