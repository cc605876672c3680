"""Repository root detection and git queries."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from riskgate.policy.types import DEFAULT_CONTRACT_RELATIVE_PATH


@dataclass(frozen=True)
class ExecResult:
    """Result envelope for subprocess execution."""

    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str


class ExecError(RuntimeError):
    """Raised when a command returns non-zero in check mode."""

    def __init__(self, result: ExecResult):
        rendered = " ".join(result.argv)
        detail = (result.stderr or result.stdout).strip()
        super().__init__(f"command failed ({result.returncode}): {rendered}\n{detail}")
        self.result = result


def run_git(args: list[str], *, repo_root: Path, check: bool = True) -> ExecResult:
    """Run a git command rooted at the repository."""
    argv = ["git", *args]
    completed = subprocess.run(argv, cwd=repo_root, capture_output=True, text=True, check=False)
    result = ExecResult(
        argv=tuple(argv),
        cwd=repo_root.resolve(),
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )
    if check and result.returncode != 0:
        raise ExecError(result)
    return result


def find_repo_root(start: Path) -> Path | None:
    """Walk upward from ``start`` to the nearest contract or ``.git`` marker.

    A directory holding the risk-policy contract wins over one that only
    holds ``.git``, at the same level.
    """
    current = start.resolve()
    while True:
        if (current / DEFAULT_CONTRACT_RELATIVE_PATH).is_file() or (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def resolve_repo_root(start: Path, override: Path | None = None) -> Path:
    """Return the explicit root when given, else the detected one.

    Raises:
        RuntimeError: If the override is not a directory or no root is found
    """
    if override is not None:
        root = override.resolve()
        if not root.is_dir():
            raise RuntimeError(f"Explicit repo root is not a directory: {root}")
        return root
    detected = find_repo_root(start)
    if detected is None:
        raise RuntimeError(
            f"No repository root found. Started at: {start}\n"
            f"Checked markers: {DEFAULT_CONTRACT_RELATIVE_PATH}, .git/"
        )
    return detected


def current_revision(repo_root: Path) -> str:
    """Return the full HEAD commit id."""
    return run_git(["rev-parse", "HEAD"], repo_root=repo_root).stdout.strip()


def changed_files_since(repo_root: Path, base_ref: str) -> list[str]:
    """List files changed between ``base_ref`` and HEAD as POSIX paths.

    Falls back to ``HEAD~1`` when the merge-base diff is unavailable
    (shallow clones, missing remote refs).
    """
    result = run_git(["diff", "--name-only", f"{base_ref}...HEAD"], repo_root=repo_root, check=False)
    if result.returncode != 0:
        result = run_git(["diff", "--name-only", "HEAD~1"], repo_root=repo_root)
    return sorted({Path(line.strip()).as_posix() for line in result.stdout.splitlines() if line.strip()})
