"""Tests for the staleness enricher and the Git history provider."""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import git
import pytest
from structlog.testing import capture_logs

from taskaudit import analyze
from taskaudit.history import GitHistoryProvider, StalenessEnricher
from taskaudit.models import AnalysisConfig, EvidenceKind, EvidenceWeights, TaskMarker

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_marker(file_path="src/app.py"):
    return TaskMarker(file_path=file_path, line_number=1, text="# TODO: x", marker_kind="generic-comment-marker")


# ============================================================================
# StalenessEnricher
# ============================================================================


@pytest.mark.asyncio
async def test_stale_file():
    """Test an old file yields one stale-file fact."""
    provider = AsyncMock(return_value=datetime(2025, 1, 1, tzinfo=timezone.utc))
    enricher = StalenessEnricher(provider)

    evidence = await enricher.enrich(make_marker(), NOW)

    assert len(evidence) == 1
    assert evidence[0].kind is EvidenceKind.STALE_FILE
    assert evidence[0].weight == 0.25
    assert evidence[0].description == "File not modified in 365 days"
    provider.assert_awaited_once_with("src/app.py")


@pytest.mark.asyncio
async def test_recent_file():
    """Test a recently modified file yields nothing."""
    enricher = StalenessEnricher(AsyncMock(return_value=datetime(2025, 12, 1, tzinfo=timezone.utc)))

    assert await enricher.enrich(make_marker(), NOW) == []


@pytest.mark.asyncio
async def test_naive_datetime_is_utc():
    """Test naive provider answers are taken as UTC."""
    enricher = StalenessEnricher(AsyncMock(return_value=datetime(2025, 1, 1)))

    evidence = await enricher.enrich(make_marker(), NOW)

    assert evidence[0].description == "File not modified in 365 days"


@pytest.mark.asyncio
async def test_untracked_file():
    """Test a file without history yields nothing."""
    enricher = StalenessEnricher(AsyncMock(return_value=None))

    assert await enricher.enrich(make_marker(), NOW) == []


@pytest.mark.asyncio
async def test_provider_timeout():
    """Test a slow provider is treated as unavailable."""

    async def slow(file_path):
        await asyncio.sleep(1)
        return datetime(2000, 1, 1, tzinfo=timezone.utc)

    enricher = StalenessEnricher(slow, timeout_seconds=0.01)

    assert await enricher.enrich(make_marker(), NOW) == []


@pytest.mark.asyncio
async def test_provider_failure_logged_once_per_run():
    """Test failures are logged once per run and contribute nothing."""
    provider = AsyncMock(side_effect=RuntimeError("no history"))
    enricher = StalenessEnricher(provider)

    with capture_logs() as logs:
        first = await enricher.enrich(make_marker("a.py"), NOW)
        second = await enricher.enrich(make_marker("b.py"), NOW)
        enricher.begin_run()
        await enricher.enrich(make_marker("a.py"), NOW)

    assert first == second == []
    events = [log for log in logs if log["event"] == "version_history_unavailable"]
    assert len(events) == 2
    assert events[0]["reason"] == "no history"


@pytest.mark.asyncio
async def test_lookups_are_memoised_per_run():
    """Test concurrent lookups of one file share a single provider call."""
    provider = AsyncMock(return_value=datetime(2025, 1, 1, tzinfo=timezone.utc))
    enricher = StalenessEnricher(provider)

    await asyncio.gather(*(enricher.enrich(make_marker(), NOW) for _ in range(5)))
    assert provider.await_count == 1

    enricher.begin_run()
    await enricher.enrich(make_marker(), NOW)
    assert provider.await_count == 2


@pytest.mark.parametrize("kwargs", [{"stale_after_days": 0}, {"timeout_seconds": 0}])
def test_enricher_invalid_arguments(kwargs):
    """Test non-positive thresholds are rejected."""
    with pytest.raises(ValueError):
        StalenessEnricher(AsyncMock(), **kwargs)


# ============================================================================
# GitHistoryProvider
# ============================================================================


@pytest.fixture
def test_repo(tmp_path):
    """Create a temporary Git repository for testing."""
    repo_path = tmp_path / "repo"
    repo_path.mkdir()
    repo = git.Repo.init(repo_path)

    # Configure git
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    (repo_path / "README.md").write_text("# Test Project\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit", author_date="2020-06-15T12:00:00", commit_date="2020-06-15T12:00:00")

    (repo_path / "docs").mkdir()
    (repo_path / "docs" / "guide.md").write_text("- [ ] Write guide\n")
    repo.index.add(["docs/guide.md"])
    repo.index.commit("Add guide", author_date="2022-06-15T12:00:00", commit_date="2022-06-15T12:00:00")

    (repo_path / "untracked.md").write_text("TODO\n")
    return repo_path


def test_git_provider_invalid_path():
    """Test GitHistoryProvider with a missing path."""
    with pytest.raises(ValueError, match="Repository path does not exist"):
        GitHistoryProvider(Path("/nonexistent/path"))


def test_git_provider_not_a_repository(tmp_path):
    """Test GitHistoryProvider outside a Git repository."""
    with pytest.raises(ValueError, match="Invalid Git repository"):
        GitHistoryProvider(tmp_path)


def test_git_provider_last_modified(test_repo):
    """Test the date of the latest commit touching a file."""
    provider = GitHistoryProvider(test_repo)

    modified = provider.last_modified("README.md")

    assert modified.tzinfo is not None
    assert modified.year == 2020
    assert provider.last_modified("docs/guide.md").year == 2022


def test_git_provider_untracked_file(test_repo):
    """Test untracked files have no history."""
    assert GitHistoryProvider(test_repo).last_modified("untracked.md") is None


def test_git_provider_subdirectory(test_repo):
    """Test paths relative to a directory below the work tree root."""
    provider = GitHistoryProvider(test_repo / "docs")

    assert provider.last_modified("guide.md").year == 2022


def test_git_provider_empty_repository(tmp_path):
    """Test a repository without commits."""
    git.Repo.init(tmp_path)

    assert GitHistoryProvider(tmp_path).last_modified("README.md") is None


@pytest.mark.asyncio
async def test_git_provider_as_enricher(test_repo):
    """Test the provider plugs into the staleness enricher."""
    enricher = StalenessEnricher(GitHistoryProvider(test_repo))

    evidence = await enricher.enrich(make_marker("README.md"), NOW)

    assert len(evidence) == 1
    assert evidence[0].kind is EvidenceKind.STALE_FILE


@pytest.fixture
def busy_repo(tmp_path):
    """Create a repository with many committed files."""
    repo = git.Repo.init(tmp_path)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    paths = []
    for index in range(24):
        path = f"docs/note_{index:02d}.md"
        (tmp_path / "docs").mkdir(exist_ok=True)
        (tmp_path / path).write_text(f"- [ ] Item {index}\n")
        paths.append(path)
    repo.index.add(paths)
    repo.index.commit("Add notes", author_date="2019-06-15T12:00:00", commit_date="2019-06-15T12:00:00")
    return tmp_path, paths


@pytest.mark.asyncio
async def test_git_provider_concurrent_lookups(busy_repo):
    """Test lookups from many worker threads at once."""
    repo_path, paths = busy_repo
    provider = GitHistoryProvider(repo_path)

    dates = await asyncio.gather(*(provider(path) for path in paths))

    assert [d.year for d in dates] == [2019] * len(paths)


def test_analyze_with_git_history_and_workers(busy_repo):
    """Test a full run over a Git repository with parallel workers."""
    repo_path, paths = busy_repo
    markers = [
        TaskMarker(file_path=path, line_number=1, text="- [ ] Item", marker_kind="checklist-item") for path in paths
    ]
    config = AnalysisConfig(reference_time=NOW, root_path=repo_path, max_workers=8, enricher_timeout_seconds=30.0)

    results = analyze(markers, config=config, enricher=StalenessEnricher(GitHistoryProvider(repo_path)))

    assert len(results) == len(paths)
    for result in results:
        assert any(reason.startswith("File not modified in") for reason in result.reasons)


# ============================================================================
# Settings from the run configuration
# ============================================================================


@pytest.mark.asyncio
async def test_unset_settings_follow_run_config():
    """Test thresholds left unset come from the run's configuration."""
    provider = AsyncMock(return_value=datetime(2025, 11, 1, tzinfo=timezone.utc))
    enricher = StalenessEnricher(provider)
    config = AnalysisConfig(stale_after_days=30, weights=EvidenceWeights(stale_file=0.5))

    assert await enricher.enrich(make_marker(), NOW) == []

    enricher.begin_run(config)
    evidence = await enricher.enrich(make_marker(), NOW)

    assert enricher.stale_after_days == 30
    assert evidence[0].weight == 0.5
    assert evidence[0].description == "File not modified in 61 days"


@pytest.mark.asyncio
async def test_explicit_settings_win_over_run_config():
    """Test values passed to the enricher are kept."""
    provider = AsyncMock(return_value=datetime(2025, 11, 1, tzinfo=timezone.utc))
    enricher = StalenessEnricher(provider, stale_after_days=90, timeout_seconds=5.0)

    enricher.begin_run(AnalysisConfig(stale_after_days=30, enricher_timeout_seconds=1.0))

    assert enricher.stale_after_days == 90
    assert enricher.timeout_seconds == 5.0
    assert await enricher.enrich(make_marker(), NOW) == []


def test_from_config_pins_settings():
    """Test building an enricher from a configuration."""
    config = AnalysisConfig(stale_after_days=45, enricher_timeout_seconds=0.5, weights=EvidenceWeights(stale_file=0.1))

    enricher = StalenessEnricher.from_config(AsyncMock(), config)
    enricher.begin_run(AnalysisConfig())

    assert (enricher.stale_after_days, enricher.timeout_seconds, enricher.weight) == (45, 0.5, 0.1)
