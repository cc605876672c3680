"""Tests for repo root detection and git change listing."""
import subprocess
from pathlib import Path

import pytest

from riskgate.utils.repo import (
    ExecError,
    changed_files_since,
    current_revision,
    find_repo_root,
    resolve_repo_root,
    run_git,
)


def _git(repo: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, check=True, capture_output=True)


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository with one commit on a base branch."""
    repo = tmp_path / "test_repo"
    repo.mkdir()
    _git(repo, "init")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "user.name", "Test User")

    (repo / "README.md").write_text("# Test Repo\n")
    _git(repo, "add", "README.md")
    _git(repo, "commit", "-m", "Initial commit")
    _git(repo, "branch", "base")
    return repo


class TestFindRepoRoot:
    def test_finds_contract_marker(self, tmp_path: Path):
        """Should find the directory holding the risk-policy contract."""
        (tmp_path / "risk-policy.contract.json").write_text("{}")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_repo_root(nested) == tmp_path

    def test_nearest_marker_wins(self, tmp_path: Path):
        (tmp_path / "risk-policy.contract.json").write_text("{}")
        inner = tmp_path / "inner"
        (inner / ".git").mkdir(parents=True)

        assert find_repo_root(inner) == inner

    def test_explicit_override_must_be_directory(self, tmp_path: Path):
        with pytest.raises(RuntimeError, match="not a directory"):
            resolve_repo_root(tmp_path, tmp_path / "missing")

    def test_explicit_override_wins(self, tmp_path: Path):
        assert resolve_repo_root(tmp_path / "ignored", tmp_path) == tmp_path.resolve()


class TestGitQueries:
    def test_changed_files_since_base(self, git_repo: Path):
        (git_repo / "db").mkdir()
        (git_repo / "db" / "schema.ts").write_text("export {}\n")
        (git_repo / "README.md").write_text("# Changed\n")
        _git(git_repo, "add", ".")
        _git(git_repo, "commit", "-m", "Change schema")

        assert changed_files_since(git_repo, "base") == ["README.md", "db/schema.ts"]

    def test_unknown_base_falls_back_to_previous_commit(self, git_repo: Path):
        (git_repo / "app.py").write_text("print('hi')\n")
        _git(git_repo, "add", "app.py")
        _git(git_repo, "commit", "-m", "Add app")

        assert changed_files_since(git_repo, "origin/does-not-exist") == ["app.py"]

    def test_current_revision_is_head(self, git_repo: Path):
        head = subprocess.run(
            ["git", "rev-parse", "HEAD"], cwd=git_repo, check=True, capture_output=True, text=True
        ).stdout.strip()
        assert current_revision(git_repo) == head

    def test_run_git_check_raises(self, git_repo: Path):
        with pytest.raises(ExecError, match="command failed"):
            run_git(["rev-parse", "no-such-ref"], repo_root=git_repo)
        assert run_git(["rev-parse", "no-such-ref"], repo_root=git_repo, check=False).returncode != 0
