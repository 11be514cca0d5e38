"""Evidence extraction and marker discovery."""

from taskaudit.extraction.base import EvidenceExtractor, ExtractorRegistry
from taskaudit.extraction.context import FileContextLoader
from taskaudit.extraction.detectors import (
    ArchivePathDetector,
    ContextKeywordDetector,
    DocumentHeaderDetector,
    ExplicitMarkerDetector,
    default_extractors,
)
from taskaudit.extraction.markers import MarkerScanner, find_markers

__all__ = [
    "EvidenceExtractor",
    "ExtractorRegistry",
    "ExplicitMarkerDetector",
    "ArchivePathDetector",
    "ContextKeywordDetector",
    "DocumentHeaderDetector",
    "default_extractors",
    "FileContextLoader",
    "MarkerScanner",
    "find_markers",
]
