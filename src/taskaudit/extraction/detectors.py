"""Built-in evidence extractors."""

import re
from datetime import datetime
from pathlib import PurePosixPath
from typing import Iterable, List, Optional, Pattern, Tuple

from taskaudit.clock import age_in_days
from taskaudit.extraction.base import EvidenceExtractor
from taskaudit.models import AnalysisConfig, Evidence, EvidenceKind, FileContext, TaskMarker

# (label, pattern) pairs; one evidence per label per scanned line
COMPLETION_INDICATORS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("checked box", re.compile(r"\[[xX]\]")),
    ("checkmark", re.compile("[✓✔✅☑]")),
    ("strikethrough", re.compile(r"~~[^~]+~~|<(del|s|strike)>.+?</\1>", re.IGNORECASE)),
    ("completion word", re.compile(r"\b(done|completed|fixed|resolved)\b", re.IGNORECASE)),
)

# Checked in declaration order; only the first max_context_categories count
CONTEXT_CATEGORIES: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("deployed", re.compile(r"\bdeployed\b", re.IGNORECASE)),
    ("released", re.compile(r"\breleased\b", re.IGNORECASE)),
    ("shipped", re.compile(r"\bshipped\b", re.IGNORECASE)),
    ("completed on", re.compile(r"\bcompleted\s+on\b", re.IGNORECASE)),
    ("date", re.compile(r"\b\d{4}-\d{2}-\d{2}\b|\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b")),
)

PHASE_PATTERN = re.compile(r"(?<![a-z])(?:phase|version|v)[\s_-]?(\d+)(?!\d)", re.IGNORECASE)

HEADER_STATUS_PATTERN = re.compile(
    r"^[\s>*_#-]*status[\s*_]*[:=][\s*_]*(superseded|archived|obsolete)\b",
    re.IGNORECASE,
)
HEADER_NOTE_PATTERN = re.compile(r"\b(superseded by|replaced by|migrated to)\b", re.IGNORECASE)
ISO_DATE_PATTERN = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")


def _normalise_segment(value: str) -> str:
    return value.strip("_.-").lower()


def matched_archive_patterns(file_path: str, patterns: Iterable[str]) -> List[Tuple[str, str]]:
    """Return (segment, pattern) pairs for directory segments matching archive patterns.

    A segment matches when it equals the pattern, or equals it once leading and
    trailing ``_``, ``.`` and ``-`` are stripped from both. Each pattern is
    reported at most once.
    """
    directories = PurePosixPath(file_path.replace("\\", "/")).parts[:-1]
    matches: List[Tuple[str, str]] = []
    for pattern in patterns:
        wanted = _normalise_segment(pattern)
        if not wanted:
            continue
        for segment in directories:
            if segment.lower() == pattern.lower() or _normalise_segment(segment) == wanted:
                matches.append((segment, pattern))
                break
    return matches


class ExplicitMarkerDetector(EvidenceExtractor):
    """Completion indicators in the marker text or the adjacent lines."""

    name = "explicit-marker"

    def extract(
        self,
        marker: TaskMarker,
        context: FileContext,
        config: AnalysisConfig,
        now: datetime,
    ) -> List[Evidence]:
        sources = [("marker text", marker.text)]
        for label, offset in (("preceding line", -1), ("following line", 1)):
            text = context.line(marker.line_number + offset)
            if text is not None:
                sources.append((label, text))

        evidence = []
        for where, text in sources:
            for label, pattern in COMPLETION_INDICATORS:
                match = pattern.search(text)
                if match:
                    evidence.append(
                        Evidence(
                            kind=EvidenceKind.EXPLICIT_MARKER,
                            weight=config.weights.explicit_marker,
                            description=f"{label.capitalize()} '{match.group(0)}' in {where}",
                        )
                    )
        return evidence


class ArchivePathDetector(EvidenceExtractor):
    """Archive-like directories or an earlier phase number in the path."""

    name = "archive-path"

    def extract(
        self,
        marker: TaskMarker,
        context: FileContext,
        config: AnalysisConfig,
        now: datetime,
    ) -> List[Evidence]:
        evidence = [
            Evidence(
                kind=EvidenceKind.ARCHIVE_PATH,
                weight=config.weights.archive_directory,
                description=f"Directory '{segment}' matches archive pattern '{pattern}'",
            )
            for segment, pattern in matched_archive_patterns(marker.file_path, config.archive_patterns)
        ]

        phase = self._earlier_phase(marker.file_path, config.current_phase)
        if phase is not None:
            evidence.append(
                Evidence(
                    kind=EvidenceKind.ARCHIVE_PATH,
                    weight=config.weights.phase_mismatch,
                    description=f"Path refers to phase {phase}, before current phase {config.current_phase}",
                )
            )
        return evidence

    @staticmethod
    def _earlier_phase(file_path: str, current_phase: Optional[int]) -> Optional[int]:
        if current_phase is None:
            return None
        for match in PHASE_PATTERN.finditer(file_path):
            number = int(match.group(1))
            if number < current_phase:
                return number
        return None


class ContextKeywordDetector(EvidenceExtractor):
    """Shipped-status keywords in the lines around the marker."""

    name = "context-keyword"

    def extract(
        self,
        marker: TaskMarker,
        context: FileContext,
        config: AnalysisConfig,
        now: datetime,
    ) -> List[Evidence]:
        if not context.available or config.max_context_categories == 0:
            return []

        window = context.window(marker.line_number, config.context_window, config.context_window)
        evidence = []
        for label, pattern in CONTEXT_CATEGORIES:
            match = next((m for m in map(pattern.search, window) if m), None)
            if match is None:
                continue
            evidence.append(
                Evidence(
                    kind=EvidenceKind.CONTEXT_KEYWORD,
                    weight=config.weights.context_keyword,
                    description=f"Nearby context mentions {label} ('{match.group(0)}')",
                )
            )
            if len(evidence) >= config.max_context_categories:
                break
        return evidence


class DocumentHeaderDetector(EvidenceExtractor):
    """Signs that the containing document as a whole is obsolete."""

    name = "document-header"

    def extract(
        self,
        marker: TaskMarker,
        context: FileContext,
        config: AnalysisConfig,
        now: datetime,
    ) -> List[Evidence]:
        descriptions = []
        header = context.header(config.header_lines)

        status = next((m for m in map(HEADER_STATUS_PATTERN.search, header) if m), None)
        if status:
            descriptions.append(f"Document status is '{status.group(1).lower()}'")
        else:
            note = next((m for m in map(HEADER_NOTE_PATTERN.search, header) if m), None)
            if note:
                descriptions.append(f"Document header says '{note.group(1).lower()}'")

        latest = self._latest_date(header)
        if latest is not None:
            age = age_in_days(latest, now)
            if age > config.document_stale_after_days:
                descriptions.append(f"Document header dated {latest.date().isoformat()} ({int(age)} days ago)")

        if matched_archive_patterns(marker.file_path, config.archive_patterns):
            descriptions.append("Document is stored in an archive location")

        return [
            Evidence(
                kind=EvidenceKind.DOCUMENT_HEADER,
                weight=config.weights.document_header,
                description=description,
            )
            for description in descriptions
        ]

    @staticmethod
    def _latest_date(lines: Iterable[str]) -> Optional[datetime]:
        latest = None
        for line in lines:
            for year, month, day in ISO_DATE_PATTERN.findall(line):
                try:
                    found = datetime(int(year), int(month), int(day))
                except ValueError:
                    continue
                if latest is None or found > latest:
                    latest = found
        return latest


def default_extractors() -> List[EvidenceExtractor]:
    return [
        ExplicitMarkerDetector(),
        ArchivePathDetector(),
        ContextKeywordDetector(),
        DocumentHeaderDetector(),
    ]
