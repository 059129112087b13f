"""
React Doctor — CLI.

    react-doctor [DIRECTORY] [--no-lint] [--no-dead-code] [--verbose] [--score]
                 [--offline] [--diff [BASE]] [--project NAMES]
                 [--fail-on error|warning|none] [-y/--yes]
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from pathlib import Path

import click
from rich.console import Console

from react_doctor import __version__
from react_doctor.cli import render
from react_doctor.config import RuntimeEnvironment
from react_doctor.constants import FAIL_ON_LEVELS, OFFLINE_FLAG_MESSAGE, OFFLINE_MESSAGE
from react_doctor.exceptions import ProjectNotFoundError, ReactDoctorError
from react_doctor.git import filter_source_files, get_diff_info
from react_doctor.project import discover_react_subprojects, list_workspace_packages
from react_doctor.report import build_share_url, should_fail, write_diagnostics_directory
from react_doctor.scan import ScanOptions, merge_scan_options, scan
from react_doctor.scoring import estimate_score
from react_doctor.types import ScanResult, WorkspacePackage
from react_doctor.user_config import ReactDoctorConfig, load_config

console = Console()
logger = logging.getLogger("react_doctor.cli")


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s — %(message)s",
        datefmt="%H:%M:%S",
    )


# ─── Project selection ───────────────────────────────────────────────


def resolve_project_flag(project_flag: str, packages: list[WorkspacePackage]) -> list[Path]:
    directories = []
    for requested in (name.strip() for name in project_flag.split(",")):
        if not requested:
            continue
        match = next(
            (p for p in packages if p.name == requested or p.directory.name == requested),
            None,
        )
        if match is None:
            available = ", ".join(p.name for p in packages)
            raise ProjectNotFoundError(f'Project "{requested}" not found. Available: {available}')
        directories.append(match.directory)
    return directories


def prompt_project_selection(packages: list[WorkspacePackage], root: Path) -> list[Path]:
    console.print("[bold]Select projects to scan[/]")
    for index, package in enumerate(packages, start=1):
        relative = package.directory.relative_to(root) if package.directory != root else Path(".")
        console.print(f"  [cyan]{index}[/] {package.name} [dim]{relative}[/]")
    while True:
        answer = click.prompt("Projects (comma-separated numbers, or 'all')", default="all")
        if answer.strip().lower() == "all":
            return [p.directory for p in packages]
        try:
            indices = [int(part) for part in answer.split(",") if part.strip()]
        except ValueError:
            indices = []
        if indices and all(1 <= i <= len(packages) for i in indices):
            return [packages[i - 1].directory for i in dict.fromkeys(indices)]
        console.print(f"[red]Enter numbers between 1 and {len(packages)}.[/]")


def select_projects(
    root: Path,
    project_flag: str | None,
    interactive: bool,
) -> list[Path]:
    """Workspace packages (or React sub-directories) to scan, in order."""
    packages = list_workspace_packages(root) or discover_react_subprojects(root)
    if not packages:
        return [root]
    if project_flag:
        return resolve_project_flag(project_flag, packages)
    if len(packages) == 1 or not interactive:
        return [p.directory for p in packages]
    return prompt_project_selection(packages, root)


# ─── Diff scope ──────────────────────────────────────────────────────


def resolve_diff_request(option: str | None, config: ReactDoctorConfig | None) -> str | bool:
    """False for a full scan, True for automatic base detection, or a base branch."""
    configured = config.diff if config else None
    requested = option if option is not None else configured
    if requested == "" and isinstance(configured, str) and configured:
        # Bare --diff picks up the configured base branch
        requested = configured
    if requested is None or requested is False:
        return False
    if requested is True or requested == "":
        return True
    return str(requested)


def resolve_include_paths(directory: Path, diff_request: str | bool, quiet: bool) -> list[str] | None:
    """Changed source files for a diff scan; [] for a full scan; None when nothing to scan."""
    if diff_request is False:
        return []
    base_branch = diff_request if isinstance(diff_request, str) else None
    diff_info = get_diff_info(directory, base_branch)
    if diff_info is None:
        if not quiet:
            console.print("[dim]No changes detected against a base branch. Running a full scan.[/]\n")
        return []

    source_files = filter_source_files(diff_info.changed_files)
    if not quiet:
        if diff_info.is_current_changes:
            console.print("[dim]Scanning uncommitted changes.[/]")
        else:
            console.print(
                f"[dim]Scanning changes on [cyan]{diff_info.current_branch}[/] "
                f"against [cyan]{diff_info.base_branch}[/].[/]"
            )
    if not source_files:
        if not quiet:
            console.print("[dim]No changed source files. Nothing to scan.[/]\n")
        return None
    return source_files


# ─── Per-project run ─────────────────────────────────────────────────


async def _scan_project(
    directory: Path,
    options: ScanOptions,
    config: ReactDoctorConfig | None,
    environment: RuntimeEnvironment,
    verbose: bool,
) -> ScanResult:
    if options.score_only:
        result = await scan(directory, options, environment, config=config)
        if result.score_result is not None:
            console.print(str(result.score_result.score))
        else:
            console.print(f"[dim]{OFFLINE_FLAG_MESSAGE if options.offline else OFFLINE_MESSAGE}[/]")
        return result

    with console.status("[bold blue]Running lint checks and detecting dead code...[/]"):
        result = await scan(directory, options, environment, config=config)
    project = result.project
    is_diff_mode = bool(result.include_paths)
    render.render_project_detection(
        console,
        project,
        config_loaded=config is not None,
        changed_file_count=len(result.include_paths) if is_diff_mode else None,
    )

    no_score_message = OFFLINE_FLAG_MESSAGE if options.offline else OFFLINE_MESSAGE
    if not result.diagnostics:
        render.render_clean_result(console, result, no_score_message)
        return result

    estimate = None
    if not (options.offline or environment.offline):
        estimate = await estimate_score(result.diagnostics, environment)

    render.render_diagnostics(console, result.diagnostics, verbose)
    render.render_summary(
        console,
        result,
        no_score_message,
        total_source_files=len(result.include_paths) if is_diff_mode else project.source_file_count,
        diagnostics_directory=write_diagnostics_directory(result.diagnostics),
        share_url=build_share_url(result.diagnostics, result.score_result, project.project_name),
        estimate=estimate,
    )
    render.render_skipped_checks(console, result)
    return result


def _exit_on_signal(signum, _frame) -> None:
    logger.debug("Received signal %d, exiting", signum)
    sys.exit(0)


# ─── Command ─────────────────────────────────────────────────────────


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", prog_name="react-doctor")
@click.argument("directory", default=".", type=click.Path(file_okay=False, path_type=Path))
@click.option("--lint/--no-lint", default=None, help="Run or skip linting")
@click.option("--dead-code/--no-dead-code", default=None, help="Run or skip dead code detection")
@click.option("--verbose", is_flag=True, help="Show file details per rule and debug logs")
@click.option("--score", "score_only", is_flag=True, help="Output only the score")
@click.option("--offline", is_flag=True, help="Skip the network and do not calculate the score")
@click.option(
    "--diff",
    "diff",
    is_flag=False,
    flag_value="",
    default=None,
    metavar="[BASE]",
    help="Scan only changed files (against BASE, or the detected default branch)",
)
@click.option("--project", "project_flag", default=None, help="Workspace project(s) to scan, comma-separated")
@click.option(
    "--fail-on",
    type=click.Choice(FAIL_ON_LEVELS),
    default=None,
    help="Exit with status 1 on: error, warning, or none (default: none)",
)
@click.option("-y", "--yes", "assume_yes", is_flag=True, help="Skip prompts and scan all projects")
def main(
    directory: Path,
    lint: bool | None,
    dead_code: bool | None,
    verbose: bool,
    score_only: bool,
    offline: bool,
    diff: str | None,
    project_flag: str | None,
    fail_on: str | None,
    assume_yes: bool,
) -> None:
    """Diagnose React codebase health."""
    setup_logging(verbose)
    # Absent flag defers to the user config
    verbose_option = True if verbose else None
    signal.signal(signal.SIGTERM, _exit_on_signal)
    environment = RuntimeEnvironment.from_env()
    root = directory.resolve()

    if not root.is_dir():
        console.print(f"[red]✗ Directory not found: {root}[/]")
        sys.exit(1)

    if not score_only:
        console.print(f"react-doctor v{__version__}\n")

    failed = False
    try:
        interactive = not (assume_yes or environment.is_automated or score_only)
        for project_directory in select_projects(root, project_flag, interactive):
            config = load_config(project_directory)
            resolved = merge_scan_options(
                ScanOptions(lint=lint, dead_code=dead_code, verbose=verbose_option), config
            )
            include_paths = resolve_include_paths(
                project_directory, resolve_diff_request(diff, config), quiet=score_only
            )
            if include_paths is None:
                continue

            if not score_only:
                console.print(f"[dim]Scanning {project_directory}...[/]\n")
            options = ScanOptions(
                lint=lint,
                dead_code=dead_code,
                verbose=verbose_option,
                score_only=score_only,
                offline=offline,
                include_paths=include_paths,
            )
            result = asyncio.run(
                _scan_project(project_directory, options, config, environment, resolved.verbose)
            )

            effective_fail_on = fail_on or (config.fail_on if config else None) or "none"
            failed = should_fail(result.diagnostics, effective_fail_on) or failed
            if not score_only:
                console.print()
    except ReactDoctorError as e:
        console.print(f"[red]✗ {e}[/]")
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(0)

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
