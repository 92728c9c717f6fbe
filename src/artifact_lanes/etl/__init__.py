"""Normalization, classification and feature extraction stages."""

from .classify import (
    ClassificationOracle,
    ClassificationResult,
    FallbackOracle,
    HeuristicOracle,
    RemoteOracle,
)
from .normalize import NormalizeRun
from .sanitize import sanitize

__all__ = [
    "ClassificationOracle",
    "ClassificationResult",
    "FallbackOracle",
    "HeuristicOracle",
    "NormalizeRun",
    "RemoteOracle",
    "sanitize",
]
