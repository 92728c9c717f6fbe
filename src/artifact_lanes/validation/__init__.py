"""Artifact schema validation."""

from .validator import ValidationReport, validate_directory, validate_document

__all__ = ["ValidationReport", "validate_directory", "validate_document"]
