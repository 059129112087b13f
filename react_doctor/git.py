"""Read-only git queries: file listing, content search and change sets."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable
from pathlib import Path

from react_doctor.constants import DEFAULT_BRANCH_CANDIDATES, SOURCE_FILE_PATTERN
from react_doctor.types import DiffInfo

logger = logging.getLogger("react_doctor.git")

GIT_TIMEOUT_SECONDS = 60


def _git(args: list[str], cwd: str | Path) -> subprocess.CompletedProcess | None:
    """Run git; None when git is missing or the call cannot complete."""
    try:
        return subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=False,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except (FileNotFoundError, OSError, subprocess.TimeoutExpired) as e:
        logger.debug("git %s failed in %s: %s", " ".join(args), cwd, e)
        return None


def _lines(args: list[str], cwd: str | Path) -> list[str] | None:
    result = _git(args, cwd)
    if result is None or result.returncode != 0:
        return None
    return [line for line in result.stdout.splitlines() if line]


def _unique(paths: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(paths))


def list_files(directory: str | Path) -> list[str] | None:
    """Tracked plus untracked-but-not-ignored files, relative to ``directory``."""
    return _lines(["ls-files", "--cached", "--others", "--exclude-standard"], directory)


def grep_files(directory: str | Path, pattern: str, pathspecs: list[str]) -> bool | None:
    """True if any file matching ``pathspecs`` contains ``pattern``.

    None means git could not answer (not a repository, git missing).
    """
    result = _git(["grep", "-ql", "-E", pattern, "--", *pathspecs], directory)
    if result is None:
        return None
    if result.returncode == 0:
        return True
    if result.returncode == 1:
        return False
    return None


def is_git_repository(directory: str | Path) -> bool:
    result = _git(["rev-parse", "--is-inside-work-tree"], directory)
    return result is not None and result.returncode == 0 and result.stdout.strip() == "true"


def get_current_branch(directory: str | Path) -> str | None:
    result = _git(["rev-parse", "--abbrev-ref", "HEAD"], directory)
    if result is None or result.returncode != 0:
        return None
    branch = result.stdout.strip()
    return None if branch in ("", "HEAD") else branch


def branch_exists(directory: str | Path, branch: str) -> bool:
    result = _git(["rev-parse", "--verify", "--quiet", branch], directory)
    return result is not None and result.returncode == 0


def detect_default_branch(directory: str | Path) -> str | None:
    for candidate in DEFAULT_BRANCH_CANDIDATES:
        if branch_exists(directory, candidate):
            return candidate
    return None


def get_uncommitted_files(directory: str | Path) -> list[str]:
    """Added, modified or renamed paths in the working tree and index, plus untracked files."""
    diff_args = ["diff", "--name-only", "--relative", "--diff-filter=ACMR"]
    tracked = _lines([*diff_args, "HEAD"], directory)
    if tracked is None:
        # No HEAD yet: only the index can differ
        tracked = _lines([*diff_args, "--cached"], directory) or []
    untracked = _lines(["ls-files", "--others", "--exclude-standard"], directory) or []
    return _unique([*tracked, *untracked])


def get_changed_files_since(directory: str | Path, base_branch: str) -> list[str] | None:
    merge_base = _git(["merge-base", base_branch, "HEAD"], directory)
    if merge_base is None or merge_base.returncode != 0:
        return None
    base_commit = merge_base.stdout.strip()
    return _lines(
        ["diff", "--name-only", "--relative", "--diff-filter=ACMR", base_commit, "HEAD"],
        directory,
    )


def get_diff_info(directory: str | Path, base_branch: str | None = None) -> DiffInfo | None:
    """Resolve the change scope for a diff scan.

    Uncommitted changes win when present; otherwise the current branch is
    compared with ``base_branch`` (or the first default branch that exists).
    Returns None when version control offers no usable signal.
    """
    if not is_git_repository(directory):
        return None

    current_branch = get_current_branch(directory)
    uncommitted = get_uncommitted_files(directory)
    if uncommitted:
        return DiffInfo(
            changed_files=uncommitted,
            current_branch=current_branch,
            is_current_changes=True,
        )

    if base_branch and not branch_exists(directory, base_branch):
        logger.warning("Base branch %r does not exist", base_branch)
        return None
    resolved_base = base_branch or detect_default_branch(directory)
    if resolved_base is None or resolved_base == current_branch:
        return None

    changed = get_changed_files_since(directory, resolved_base)
    if changed is None:
        return None
    return DiffInfo(
        changed_files=changed,
        current_branch=current_branch,
        base_branch=resolved_base,
    )


def filter_source_files(paths: Iterable[str]) -> list[str]:
    """Keep only JS/TS source files, preserving order."""
    return [p for p in paths if SOURCE_FILE_PATTERN.search(p)]
