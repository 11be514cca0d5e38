"""Tests for the command-line interface."""

import json

import git
import pytest
import structlog
from typer.testing import CliRunner

from taskaudit.cli import app, configure_logging

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore the default structlog configuration after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def project(tmp_path):
    """Create a project tree with one archived and one active marker."""
    (tmp_path / "docs" / "_archive").mkdir(parents=True)
    (tmp_path / "docs" / "_archive" / "PLAN.md").write_text("# Old plan\n\n- [ ] Add tests ✅\n")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("def run():\n    # TODO: add retries\n    return 1\n")
    return tmp_path


def test_scan(project, tmp_path):
    """Test listing markers."""
    output = tmp_path / "out" / "markers.json"

    result = runner.invoke(app, ["scan", str(project), "--output", str(output)])

    assert result.exit_code == 0
    assert "Found 2 markers" in result.output
    markers = json.loads(output.read_text())
    assert [m["file_path"] for m in markers] == ["docs/_archive/PLAN.md", "src/app.py"]
    assert markers[0]["marker_kind"] == "checklist-item"


def test_scan_missing_path(tmp_path):
    """Test scanning a missing directory fails cleanly."""
    result = runner.invoke(app, ["scan", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_analyze_json_output(project, tmp_path):
    """Test analysis results written as JSON."""
    output = tmp_path / "report.json"

    result = runner.invoke(
        app, ["analyze", str(project), "--no-git", "--format", "json", "--output", str(output)]
    )

    assert result.exit_code == 0
    report = json.loads(output.read_text())
    assert report["summary"]["total"] == 2
    assert report["summary"]["tier_counts"]["very-high"] == 1
    assert report["summary"]["tier_counts"]["active"] == 1
    assert report["summary"]["reduction_potential"] == 50.0
    scores = {r["marker"]["file_path"]: r["score"] for r in report["results"]}
    assert scores["src/app.py"] == 0.0
    assert scores["docs/_archive/PLAN.md"] >= 90.0


def test_analyze_min_score(project, tmp_path):
    """Test --min-score limits reported results, not the summary."""
    output = tmp_path / "report.json"

    result = runner.invoke(
        app,
        ["analyze", str(project), "--no-git", "--format", "json", "--min-score", "50", "--output", str(output)],
    )

    assert result.exit_code == 0
    report = json.loads(output.read_text())
    assert report["summary"]["total"] == 2
    assert [r["marker"]["file_path"] for r in report["results"]] == ["docs/_archive/PLAN.md"]


def test_analyze_summary(project):
    """Test the summary view."""
    result = runner.invoke(app, ["analyze", str(project), "--no-git"])

    assert result.exit_code == 0
    assert "Completion Confidence" in result.output
    assert "Reduction potential:" in result.output
    assert "Top Cleanup Candidates" in result.output


def test_analyze_without_repository_falls_back(project):
    """Test Git history is skipped outside a repository."""
    result = runner.invoke(app, ["analyze", str(project)])

    assert result.exit_code == 0
    assert "Git history unavailable" in result.output


def test_analyze_with_git_history(project, tmp_path):
    """Test analysis of a Git repository uses its history."""
    repo = git.Repo.init(project)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()
    repo.index.add(["docs/_archive/PLAN.md", "src/app.py"])
    repo.index.commit("Initial commit", author_date="2015-06-15T12:00:00", commit_date="2015-06-15T12:00:00")
    output = tmp_path / "report.json"

    result = runner.invoke(app, ["analyze", str(project), "--format", "json", "--output", str(output)])

    assert result.exit_code == 0
    report = json.loads(output.read_text())
    reasons = {r["marker"]["file_path"]: r["reasons"] for r in report["results"]}
    assert any(reason.startswith("File not modified in") for reason in reasons["src/app.py"])


def test_analyze_unknown_format(project):
    """Test an unknown format is rejected."""
    result = runner.invoke(app, ["analyze", str(project), "--no-git", "--format", "xml"])

    assert result.exit_code == 1
    assert "Unknown format" in result.output


def test_configure_logging_rejects_unknown_level():
    """Test invalid log levels are reported."""
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("CHATTY")


def test_version():
    """Test the version command."""
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.output
