"""Data types for React Doctor."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

Severity = Literal["error", "warning"]

FRAMEWORKS = (
    "nextjs",
    "vite",
    "cra",
    "remix",
    "gatsby",
    "expo",
    "react-native",
    "unknown",
)

CATEGORIES = (
    "Correctness",
    "Performance",
    "Architecture",
    "Security",
    "Bundle Size",
    "Accessibility",
    "Next.js",
    "React Native",
    "Server",
    "State & Effects",
    "TypeScript",
    "React Compiler",
    "Dead Code",
    "Other",
)


@dataclass(frozen=True)
class Diagnostic:
    """A single normalized finding."""
    file_path: str
    plugin: str
    rule: str
    severity: Severity
    message: str
    help: str = ""
    line: int = 0
    column: int = 0
    category: str = "Other"

    @property
    def rule_key(self) -> str:
        return f"{self.plugin}/{self.rule}"

    def to_dict(self) -> dict:
        return {
            "filePath": self.file_path,
            "plugin": self.plugin,
            "rule": self.rule,
            "severity": self.severity,
            "message": self.message,
            "help": self.help,
            "line": self.line,
            "column": self.column,
            "category": self.category,
        }


@dataclass(frozen=True)
class ProjectInfo:
    """Descriptor of the scanned codebase."""
    root_directory: Path
    project_name: str
    react_version: str | None
    framework: str  # one of FRAMEWORKS
    has_typescript: bool
    has_react_compiler: bool
    source_file_count: int


@dataclass(frozen=True)
class WorkspacePackage:
    name: str
    directory: Path


@dataclass(frozen=True)
class DiffInfo:
    """An active change scope. None in its place means a full scan."""
    changed_files: list[str]
    current_branch: str | None
    base_branch: str | None = None
    is_current_changes: bool = False


@dataclass(frozen=True)
class ScoreResult:
    score: int
    label: str


@dataclass(frozen=True)
class EstimatedScoreResult:
    score: int
    label: str
    estimated_score: int
    estimated_label: str


@dataclass
class ScanResult:
    """Result of one project scan, consumed by the CLI renderer and CI gate."""
    diagnostics: list[Diagnostic]
    score_result: ScoreResult | None
    skipped_checks: list[str] = field(default_factory=list)
    project: ProjectInfo | None = None
    elapsed_ms: float = 0.0
    include_paths: list[str] = field(default_factory=list)
    # check label -> failure detail, for each entry of skipped_checks
    skip_reasons: dict[str, str] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return not self.skipped_checks

    @property
    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == "error")

    @property
    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.severity == "warning")


@dataclass
class DiagnoseResult:
    """Result of the library-level ``diagnose()`` entry point."""
    diagnostics: list[Diagnostic]
    score: ScoreResult | None
    project: ProjectInfo
    elapsed_ms: float
