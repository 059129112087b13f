import json
import shutil
import subprocess
from pathlib import Path

import pytest

from react_doctor.analyzers.base import Analyzer, AnalyzerContext
from react_doctor.analyzers.process import CommandResult
from react_doctor.config import RuntimeEnvironment
from react_doctor.types import Diagnostic


@pytest.fixture
def environment():
    """Offline-free, non-interactive environment with no explicit binaries."""
    return RuntimeEnvironment(is_automated=True)


@pytest.fixture
def make_diagnostic():
    def _make(
        severity="error",
        plugin="react",
        rule="jsx-key",
        file_path="src/App.tsx",
        line=1,
        **kwargs,
    ):
        return Diagnostic(
            file_path=file_path,
            plugin=plugin,
            rule=rule,
            severity=severity,
            message=kwargs.pop("message", f"{plugin}/{rule} triggered"),
            line=line,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_project(tmp_path):
    """Write a package.json (plus optional files) and return the directory."""

    def _make(package_json, directory: Path | None = None, files: dict | None = None):
        root = directory or tmp_path / "app"
        root.mkdir(parents=True, exist_ok=True)
        (root / "package.json").write_text(json.dumps(package_json))
        for name, content in (files or {}).items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return root

    return _make


class FakeAnalyzer(Analyzer):
    """Records invocations; returns canned diagnostics or raises."""

    def __init__(self, name="fake", check_label="fake", diagnostics=None, error=None):
        self.name = name
        self.check_label = check_label
        self.diagnostics = diagnostics or []
        self.error = error
        self.calls: list[AnalyzerContext] = []

    async def run(self, context):
        self.calls.append(context)
        if self.error is not None:
            raise self.error
        return list(self.diagnostics)


@pytest.fixture
def fake_analyzer():
    def _make(**kwargs):
        return FakeAnalyzer(**kwargs)

    return _make


class FakeRunner:
    """Stand-in for run_command: records args and replays queued results."""

    def __init__(self, results=None, handler=None):
        self.results = list(results or [])
        self.handler = handler
        self.calls: list[list[str]] = []
        self.envs: list = []

    async def __call__(self, args, cwd, env=None):
        self.calls.append(list(args))
        self.envs.append(env)
        if self.handler is not None:
            return self.handler(args, cwd)
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def fake_runner():
    def _make(results=None, handler=None):
        return FakeRunner(results=results, handler=handler)

    return _make


@pytest.fixture
def command_result():
    def _make(stdout="", stderr="", returncode=0):
        return CommandResult(returncode=returncode, stdout=stdout, stderr=stderr)

    return _make


# ─── Git ─────────────────────────────────────────────────────────────

def run_git(cwd: Path, *args: str) -> str:
    return subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    ).stdout


@pytest.fixture
def git():
    return run_git


@pytest.fixture
def git_repo(tmp_path):
    """Empty repository on branch ``main`` with one initial commit."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "-q")
    run_git(repo, "config", "user.email", "dev@example.com")
    run_git(repo, "config", "user.name", "Dev")
    run_git(repo, "config", "commit.gpgsign", "false")
    run_git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    (repo / "README.md").write_text("readme\n")
    run_git(repo, "add", ".")
    run_git(repo, "commit", "-q", "-m", "init")
    return repo
