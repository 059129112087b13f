"""Analyzer - Base Class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from react_doctor.config import RuntimeEnvironment
from react_doctor.types import Diagnostic, ProjectInfo


@dataclass(frozen=True)
class AnalyzerContext:
    """Everything an analyzer may read for one invocation."""
    root_directory: Path
    project: ProjectInfo
    environment: RuntimeEnvironment
    # None means the whole project; a list (possibly empty) is an explicit subset
    include_paths: list[str] | None = None

    @property
    def is_diff_mode(self) -> bool:
        return self.include_paths is not None


class Analyzer(ABC):
    """One external analysis engine behind the common Diagnostic schema."""

    name: str = "analyzer"
    # Label recorded in ScanResult.skipped_checks when this analyzer fails
    check_label: str = "analyzer"

    @abstractmethod
    async def run(self, context: AnalyzerContext) -> list[Diagnostic]:
        """Return diagnostics or raise AnalyzerError."""
