"""Git-backed version-history provider."""

import asyncio
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import git
from git import Repo


class GitHistoryProvider:
    """Answers "when was this file last changed?" from Git history.

    A ``Repo`` and its persistent ``git cat-file`` pipes are not thread-safe,
    so lookups from worker threads are serialised.
    """

    def __init__(self, repo_path: Path, branch: str = "HEAD") -> None:
        """Initialize the provider.

        Args:
            repo_path: Path to the Git repository
            branch: Revision whose history is consulted

        Raises:
            ValueError: If repository path is invalid
        """
        repo_path = Path(repo_path)
        if not repo_path.exists():
            raise ValueError(f"Repository path does not exist: {repo_path}")

        try:
            self.repo = Repo(repo_path, search_parent_directories=True)
        except git.exc.InvalidGitRepositoryError as e:
            raise ValueError(f"Invalid Git repository: {repo_path}") from e

        self.repo_path = repo_path
        self.branch = branch
        # Marker paths are relative to repo_path, which may sit below the work tree root
        self._prefix = repo_path.resolve().relative_to(Path(self.repo.working_tree_dir).resolve())
        self._lock = threading.Lock()

    def last_modified(self, file_path: str) -> Optional[datetime]:
        """Return the commit date of the latest commit touching a file.

        Args:
            file_path: Path relative to the repository path

        Returns:
            Aware UTC datetime, or None if the file has no history
        """
        with self._lock:
            try:
                commit = next(
                    self.repo.iter_commits(self.branch, paths=(self._prefix / file_path).as_posix(), max_count=1),
                    None,
                )
                if commit is None:
                    return None
                committed_date = commit.committed_date
            except (git.exc.GitCommandError, ValueError):
                # Empty repository or unknown revision
                return None

        return datetime.fromtimestamp(committed_date, tz=timezone.utc)

    async def __call__(self, file_path: str) -> Optional[datetime]:
        return await asyncio.to_thread(self.last_modified, file_path)
