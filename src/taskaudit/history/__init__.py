"""Version-history signals for completion analysis."""

from taskaudit.history.git_history import GitHistoryProvider
from taskaudit.history.staleness import LastModifiedProvider, StalenessEnricher

__all__ = [
    "GitHistoryProvider",
    "LastModifiedProvider",
    "StalenessEnricher",
]
