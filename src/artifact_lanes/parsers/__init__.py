"""Parsers for artifact documents and chat logs."""

from .frontmatter import (
    parse_document,
    parse_metadata,
    record_from_document,
    serialize_record,
    split_frontmatter,
    to_slug,
)
from .snippets import extract_snippets

__all__ = [
    "extract_snippets",
    "parse_document",
    "parse_metadata",
    "record_from_document",
    "serialize_record",
    "split_frontmatter",
    "to_slug",
]
