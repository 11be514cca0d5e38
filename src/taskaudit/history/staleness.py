"""Staleness evidence backed by an injectable version-history capability."""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional

import structlog

from taskaudit.clock import age_in_days
from taskaudit.models import AnalysisConfig, Evidence, EvidenceKind, TaskMarker

logger = structlog.get_logger(__name__)

# Returns the last modification time of a file, or None when unknown
LastModifiedProvider = Callable[[str], Awaitable[Optional[datetime]]]


class StalenessEnricher:
    """Adds a stale-file fact when a file has not changed for a long time.

    The provider is the only external dependency of the engine. Any failure
    or timeout is treated as "unavailable" and contributes no evidence.

    Settings left unset follow the ``AnalysisConfig`` of each run (see
    ``begin_run``); explicitly passed values always win.
    """

    def __init__(
        self,
        provider: LastModifiedProvider,
        stale_after_days: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        weight: Optional[float] = None,
    ) -> None:
        """Initialize the enricher.

        Args:
            provider: Async callable returning a file's last modification time
            stale_after_days: Minimum age, in days, for a file to count as stale
            timeout_seconds: Per-call timeout for the provider
            weight: Weight of the emitted evidence

        Raises:
            ValueError: If a threshold is not positive
        """
        if stale_after_days is not None and stale_after_days <= 0:
            raise ValueError("stale_after_days must be positive")
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

        self.provider = provider
        self._overrides = {
            "stale_after_days": stale_after_days,
            "timeout_seconds": timeout_seconds,
            "weight": weight,
        }
        self._apply(AnalysisConfig())
        self._lookups: Dict[str, "asyncio.Task[Optional[datetime]]"] = {}
        self._failure_logged = False

    @classmethod
    def from_config(cls, provider: LastModifiedProvider, config: AnalysisConfig) -> "StalenessEnricher":
        """Build an enricher with every setting pinned to ``config``."""
        return cls(
            provider,
            stale_after_days=config.stale_after_days,
            timeout_seconds=config.enricher_timeout_seconds,
            weight=config.weights.stale_file,
        )

    def begin_run(self, config: Optional[AnalysisConfig] = None) -> None:
        """Reset per-run state (memoised lookups, failure logging).

        Args:
            config: Configuration of the run; supplies unset settings
        """
        if config is not None:
            self._apply(config)
        self._lookups = {}
        self._failure_logged = False

    def _apply(self, config: AnalysisConfig) -> None:
        defaults = {
            "stale_after_days": config.stale_after_days,
            "timeout_seconds": config.enricher_timeout_seconds,
            "weight": config.weights.stale_file,
        }
        for name, default in defaults.items():
            value = self._overrides[name]
            setattr(self, name, default if value is None else value)

    async def last_modified(self, file_path: str) -> Optional[datetime]:
        """Look up a file once per run; concurrent callers share the lookup."""
        task = self._lookups.get(file_path)
        if task is None:
            task = asyncio.ensure_future(self._fetch(file_path))
            self._lookups[file_path] = task
        return await asyncio.shield(task)

    async def enrich(self, marker: TaskMarker, now: datetime) -> List[Evidence]:
        modified = await self.last_modified(marker.file_path)
        if modified is None:
            return []

        age = age_in_days(modified, now)
        if age <= self.stale_after_days:
            return []

        return [
            Evidence(
                kind=EvidenceKind.STALE_FILE,
                weight=self.weight,
                description=f"File not modified in {int(age)} days",
            )
        ]

    async def _fetch(self, file_path: str) -> Optional[datetime]:
        try:
            return await asyncio.wait_for(self.provider(file_path), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            self._log_unavailable(file_path, "timeout")
        except Exception as e:
            self._log_unavailable(file_path, str(e))
        return None

    def _log_unavailable(self, file_path: str, reason: str) -> None:
        if self._failure_logged:
            return
        self._failure_logged = True
        logger.warning("version_history_unavailable", file_path=file_path, reason=reason)
