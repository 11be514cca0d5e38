"""Loading file context for markers."""

import threading
from pathlib import Path
from typing import Dict, Optional

import structlog

from taskaudit.models import FileContext, TaskMarker

logger = structlog.get_logger(__name__)


class FileContextLoader:
    """Reads marker files from disk, once per file.

    Relative marker paths are resolved against ``root_path``. Read failures
    produce an unavailable context instead of an error.
    """

    def __init__(self, root_path: Optional[Path] = None, max_file_size_bytes: int = 5_000_000) -> None:
        """Initialize the loader.

        Args:
            root_path: Directory relative marker paths resolve against (default: cwd)
            max_file_size_bytes: Larger files are treated as unavailable
        """
        self.root_path = Path(root_path) if root_path is not None else Path.cwd()
        self.max_file_size_bytes = max_file_size_bytes
        self._cache: Dict[str, FileContext] = {}
        self._lock = threading.Lock()

    def __call__(self, marker: TaskMarker) -> FileContext:
        return self.load(marker.file_path)

    def load(self, file_path: str) -> FileContext:
        # Called from worker threads; each file is read once
        with self._lock:
            if file_path not in self._cache:
                self._cache[file_path] = self._read(file_path)
            return self._cache[file_path]

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def _read(self, file_path: str) -> FileContext:
        path = Path(file_path)
        if not path.is_absolute():
            path = self.root_path / path

        try:
            if path.stat().st_size > self.max_file_size_bytes:
                logger.info("context_file_too_large", file_path=file_path)
                return FileContext.unavailable(file_path)
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.info("context_unavailable", file_path=file_path, error=str(e))
            return FileContext.unavailable(file_path)

        return FileContext.from_text(file_path, text)
