"""
React Doctor — Scan Orchestrator.

Resolves the project and its config, runs the lint and dead-code analyzers
concurrently, combines their output and scores it. Analyzer failures degrade
the result into skipped checks; only a missing manifest or a missing React
dependency aborts a scan.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from react_doctor.analyzers.base import Analyzer, AnalyzerContext
from react_doctor.analyzers.knip import DeadCodeAnalyzer
from react_doctor.analyzers.oxlint import LintAnalyzer
from react_doctor.combine import combine_diagnostics, compute_jsx_include_paths
from react_doctor.config import RuntimeEnvironment
from react_doctor.exceptions import AnalyzerError, NoReactDependencyError
from react_doctor.project import discover_project
from react_doctor.scoring import calculate_score
from react_doctor.types import DiagnoseResult, Diagnostic, ProjectInfo, ScanResult
from react_doctor.user_config import ReactDoctorConfig, load_config

logger = logging.getLogger("react_doctor.scan")

# scan() reads the user config itself unless the caller passes one
_MISSING = object()


@dataclass
class ScanOptions:
    """Caller-supplied options; None defers to the user config, then the default."""
    lint: bool | None = None
    dead_code: bool | None = None
    verbose: bool | None = None
    score_only: bool = False
    offline: bool = False
    include_paths: list[str] = field(default_factory=list)
    package_json_directory: Path | None = None


@dataclass(frozen=True)
class ResolvedScanOptions:
    lint: bool
    dead_code: bool
    verbose: bool
    score_only: bool
    offline: bool
    include_paths: list[str]

    @property
    def is_diff_mode(self) -> bool:
        return bool(self.include_paths)


def _pick(option: bool | None, configured: bool | None, default: bool) -> bool:
    if option is not None:
        return option
    if configured is not None:
        return configured
    return default


def merge_scan_options(options: ScanOptions, config: ReactDoctorConfig | None) -> ResolvedScanOptions:
    """Explicit option > user config > built-in default."""
    return ResolvedScanOptions(
        lint=_pick(options.lint, config.lint if config else None, True),
        dead_code=_pick(options.dead_code, config.dead_code if config else None, True),
        verbose=_pick(options.verbose, config.verbose if config else None, False),
        score_only=options.score_only,
        offline=options.offline,
        include_paths=list(options.include_paths),
    )


@dataclass
class _AnalyzerOutcome:
    diagnostics: list[Diagnostic]
    failure: str | None = None


async def _run_analyzer(analyzer: Analyzer, context: AnalyzerContext) -> _AnalyzerOutcome:
    try:
        return _AnalyzerOutcome(await analyzer.run(context))
    except AnalyzerError as e:
        logger.error("%s failed (non-fatal, skipping): %s", analyzer.name, e)
        return _AnalyzerOutcome([], failure=str(e))
    except Exception as e:
        logger.exception("%s crashed (non-fatal, skipping)", analyzer.name)
        return _AnalyzerOutcome([], failure=f"{type(e).__name__}: {e}")


async def _skip() -> _AnalyzerOutcome:
    return _AnalyzerOutcome([])


@dataclass
class _PipelineResult:
    project: ProjectInfo
    diagnostics: list[Diagnostic]
    skip_reasons: dict[str, str]


async def _run_pipeline(
    directory: Path,
    scan_options: ScanOptions,
    config: ReactDoctorConfig | None,
    environment: RuntimeEnvironment,
    lint_analyzer: Analyzer,
    dead_code_analyzer: Analyzer,
) -> tuple[_PipelineResult, ResolvedScanOptions]:
    project = discover_project(directory, scan_options.package_json_directory)
    options = merge_scan_options(scan_options, config)
    if not project.react_version:
        raise NoReactDependencyError()

    context = AnalyzerContext(
        root_directory=directory,
        project=project,
        environment=environment,
        include_paths=compute_jsx_include_paths(options.include_paths),
    )
    is_diff_mode = options.is_diff_mode

    lint_outcome, dead_code_outcome = await asyncio.gather(
        _run_analyzer(lint_analyzer, context) if options.lint else _skip(),
        _run_analyzer(dead_code_analyzer, context)
        if options.dead_code and not is_diff_mode
        else _skip(),
    )

    skip_reasons: dict[str, str] = {}
    for analyzer, outcome in ((lint_analyzer, lint_outcome), (dead_code_analyzer, dead_code_outcome)):
        if outcome.failure is not None:
            skip_reasons[analyzer.check_label] = outcome.failure

    diagnostics = combine_diagnostics(
        lint_outcome.diagnostics,
        dead_code_outcome.diagnostics,
        directory,
        is_diff_mode,
        config,
    )
    return _PipelineResult(project, diagnostics, skip_reasons), options


async def scan(
    directory: str | Path,
    options: ScanOptions | None = None,
    environment: RuntimeEnvironment | None = None,
    lint_analyzer: Analyzer | None = None,
    dead_code_analyzer: Analyzer | None = None,
    config: ReactDoctorConfig | None | object = _MISSING,
) -> ScanResult:
    """Scan one project for the CLI.

    ``config`` is the user config already loaded for ``directory`` (None when
    it has none); it is read from disk when not passed.

    Raises:
        NoPackageJsonError: no manifest at the resolved manifest directory.
        NoReactDependencyError: the manifest does not depend on React.
    """
    started = time.perf_counter()
    options = options or ScanOptions()
    environment = environment or RuntimeEnvironment.from_env()

    directory = Path(directory).resolve()
    if config is _MISSING:
        config = load_config(directory)

    pipeline, resolved = await _run_pipeline(
        directory,
        options,
        config,
        environment,
        lint_analyzer or LintAnalyzer(),
        dead_code_analyzer or DeadCodeAnalyzer(),
    )

    offline = resolved.offline or environment.offline
    score_result = None if offline else calculate_score(pipeline.diagnostics)
    elapsed_ms = (time.perf_counter() - started) * 1000

    logger.info(
        "Scanned %s: %d diagnostics, skipped %s in %.0fms",
        pipeline.project.project_name,
        len(pipeline.diagnostics),
        list(pipeline.skip_reasons) or "nothing",
        elapsed_ms,
    )
    return ScanResult(
        diagnostics=pipeline.diagnostics,
        score_result=score_result,
        skipped_checks=list(pipeline.skip_reasons),
        project=pipeline.project,
        elapsed_ms=elapsed_ms,
        include_paths=resolved.include_paths,
        skip_reasons=pipeline.skip_reasons,
    )


async def diagnose(
    directory: str | Path,
    lint: bool | None = None,
    dead_code: bool | None = None,
    package_json_directory: str | Path | None = None,
    include_paths: list[str] | None = None,
    environment: RuntimeEnvironment | None = None,
    lint_analyzer: Analyzer | None = None,
    dead_code_analyzer: Analyzer | None = None,
) -> DiagnoseResult:
    """Library entry point: diagnostics, local score, project and timing.

    Raises:
        NoPackageJsonError: no manifest at the resolved manifest directory.
        NoReactDependencyError: the manifest does not depend on React.
    """
    started = time.perf_counter()
    resolved_directory = Path(directory).resolve()
    resolved_package_json_directory = (
        Path(package_json_directory).resolve() if package_json_directory else None
    )

    pipeline, _resolved = await _run_pipeline(
        resolved_directory,
        ScanOptions(
            lint=lint,
            dead_code=dead_code,
            include_paths=include_paths or [],
            package_json_directory=resolved_package_json_directory,
        ),
        load_config(resolved_directory),
        environment or RuntimeEnvironment.from_env(),
        lint_analyzer or LintAnalyzer(),
        dead_code_analyzer or DeadCodeAnalyzer(),
    )
    return DiagnoseResult(
        diagnostics=pipeline.diagnostics,
        score=calculate_score(pipeline.diagnostics),
        project=pipeline.project,
        elapsed_ms=(time.perf_counter() - started) * 1000,
    )
