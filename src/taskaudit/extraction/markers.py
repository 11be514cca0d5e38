"""Scanning a repository for task markers."""

import os
import re
from pathlib import Path
from typing import Iterator, List, Pattern, Tuple

import structlog

from taskaudit.models import MarkerKind, RepositoryConfig, TaskMarker

logger = structlog.get_logger(__name__)

COMMENT_MARKER_PATTERN = re.compile(
    r"(?://|#|/\*|\*|<!--|--)\s*(TODO|FIXME|HACK|BUG|XXX|OPTIMIZE|REFACTOR)\b:?\s*(.*?)\s*(?:\*/|-->)?\s*$"
)
CHECKLIST_PATTERN = re.compile(r"^\s*[-*+]\s+\[ \]\s+\S")
SECTION_HEADER_PATTERN = re.compile(r"^#{1,6}\s*(?:TODO|To\s*Do|Tasks?|Action\s+Items?)\s*:?\s*$", re.IGNORECASE)

MARKDOWN_EXTENSIONS = {".md", ".mdx", ".markdown"}

LINE_PATTERNS: Tuple[Tuple[MarkerKind, Pattern[str]], ...] = (
    (MarkerKind.CHECKLIST_ITEM, CHECKLIST_PATTERN),
    (MarkerKind.SECTION_HEADER, SECTION_HEADER_PATTERN),
    (MarkerKind.GENERIC_COMMENT, COMMENT_MARKER_PATTERN),
)


def find_markers(file_path: str, text: str) -> List[TaskMarker]:
    """Extract task markers from the text of one file.

    Markdown files are checked for unchecked checklist items and TODO section
    headers as well as comment markers; other files only for comment markers.

    Args:
        file_path: Path recorded on each marker
        text: File content

    Returns:
        Markers in line order
    """
    is_markdown = Path(file_path).suffix.lower() in MARKDOWN_EXTENSIONS
    markers = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        for kind, pattern in LINE_PATTERNS:
            if kind is not MarkerKind.GENERIC_COMMENT and not is_markdown:
                continue
            if pattern.search(line):
                markers.append(
                    TaskMarker(
                        file_path=file_path,
                        line_number=line_number,
                        text=line.strip(),
                        marker_kind=kind,
                    )
                )
                break
    return markers


class MarkerScanner:
    """Walks a repository and collects task markers."""

    def __init__(self, config: RepositoryConfig) -> None:
        """Initialize the scanner.

        Args:
            config: Repository configuration

        Raises:
            ValueError: If repository path is invalid
        """
        self.config = config
        if not config.repo_path.is_dir():
            raise ValueError(f"Repository path does not exist: {config.repo_path}")

    def scan(self) -> List[TaskMarker]:
        markers: List[TaskMarker] = []
        for relative_path in self.iter_files():
            path = self.config.repo_path / relative_path
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.info("scan_file_skipped", file_path=relative_path, error=str(e))
                continue
            markers.extend(find_markers(relative_path, text))

        logger.info("scan_completed", repo_path=str(self.config.repo_path), markers=len(markers))
        return markers

    def iter_files(self) -> Iterator[str]:
        """Yield repository-relative POSIX paths of files to scan, sorted."""
        root = self.config.repo_path
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if f"{d}/" not in self.config.excluded_paths)
            for filename in sorted(filenames):
                full_path = Path(dirpath) / filename
                relative_path = full_path.relative_to(root).as_posix()
                if not self._should_include_file(relative_path):
                    continue
                try:
                    if full_path.stat().st_size > self.config.max_file_size_bytes:
                        continue
                except OSError:
                    continue
                yield relative_path

    def _should_include_file(self, file_path: str) -> bool:
        """Check if a file should be included based on configuration.

        Args:
            file_path: Repository-relative file path

        Returns:
            True if file should be included
        """
        # Check excluded paths
        candidate = f"{file_path}/" if not file_path.endswith("/") else file_path
        for excluded in self.config.excluded_paths:
            if candidate.startswith(excluded) or f"/{excluded}" in candidate:
                return False

        if not self.config.included_extensions:
            return True

        return Path(file_path).suffix.lower() in self.config.included_extensions
