"""Data models for task markers and their file context."""

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MarkerKind(str, Enum):
    """Shape of the annotation a marker was extracted from."""

    GENERIC_COMMENT = "generic-comment-marker"
    CHECKLIST_ITEM = "checklist-item"
    SECTION_HEADER = "section-header-marker"


class TaskMarker(BaseModel):
    """A single unresolved task annotation found in a repository."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "file_path": "docs/_archive/PLAN.md",
                "line_number": 12,
                "text": "- [x] Add tests",
                "marker_kind": "checklist-item",
            }
        },
    )

    file_path: str = Field(..., min_length=1, description="Path of the file containing the marker")
    line_number: int = Field(..., gt=0, description="1-based line number of the marker")
    text: str = Field(..., description="Raw marker text")
    marker_kind: MarkerKind = Field(..., description="Kind of marker")

    @field_validator("file_path")
    @classmethod
    def _path_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("file_path must not be blank")
        return value

    @property
    def location(self) -> str:
        """Return ``path:line`` for display."""
        return f"{self.file_path}:{self.line_number}"


class FileContext(BaseModel):
    """Read-only view of the file surrounding a marker.

    ``lines`` is ``None`` when the file could not be read; extractors that
    need context then produce no evidence.
    """

    model_config = ConfigDict(frozen=True)

    file_path: str = Field(..., description="Path of the file")
    lines: Optional[Tuple[str, ...]] = Field(None, description="File lines without newlines")

    @classmethod
    def unavailable(cls, file_path: str) -> "FileContext":
        return cls(file_path=file_path, lines=None)

    @classmethod
    def from_text(cls, file_path: str, text: str) -> "FileContext":
        return cls(file_path=file_path, lines=tuple(text.splitlines()))

    @property
    def available(self) -> bool:
        return self.lines is not None

    def line(self, line_number: int) -> Optional[str]:
        """Return the 1-based line, or None when out of range or unavailable."""
        if self.lines is None or line_number < 1 or line_number > len(self.lines):
            return None
        return self.lines[line_number - 1]

    def neighbours(self, line_number: int) -> Tuple[str, ...]:
        """Return the single preceding and following lines that exist."""
        found = []
        for number in (line_number - 1, line_number + 1):
            text = self.line(number)
            if text is not None:
                found.append(text)
        return tuple(found)

    def window(self, line_number: int, before: int, after: int) -> Tuple[str, ...]:
        """Return up to ``before``/``after`` lines around a line, excluding it."""
        if self.lines is None:
            return ()
        start = max(0, line_number - 1 - before)
        end = min(len(self.lines), line_number + after)
        return tuple(
            text
            for index, text in enumerate(self.lines[start:end], start=start + 1)
            if index != line_number
        )

    def header(self, count: int) -> Tuple[str, ...]:
        if self.lines is None:
            return ()
        return self.lines[:count]
