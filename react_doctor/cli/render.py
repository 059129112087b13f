"""Rich rendering of scan results."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from react_doctor.constants import (
    OXLINT_NODE_REQUIREMENT,
    PERFECT_SCORE,
    SCORE_GOOD_THRESHOLD,
    SCORE_OK_THRESHOLD,
)
from react_doctor.project import format_framework_name
from react_doctor.report import build_file_line_map, collect_affected_files, format_file_lines, group_by_rule
from react_doctor.types import Diagnostic, EstimatedScoreResult, ProjectInfo, ScanResult

SCORE_BAR_WIDTH_CHARS = 50


def score_style(score: int) -> str:
    if score >= SCORE_GOOD_THRESHOLD:
        return "green"
    if score >= SCORE_OK_THRESHOLD:
        return "yellow"
    return "red"


def severity_style(severity: str) -> str:
    return "red" if severity == "error" else "yellow"


def get_doctor_face(score: int) -> tuple[str, str]:
    if score >= SCORE_GOOD_THRESHOLD:
        return "◠ ◠", " ▽ "
    if score >= SCORE_OK_THRESHOLD:
        return "• •", " ─ "
    return "x x", " ▽ "


def build_score_bar(score: int, width: int = SCORE_BAR_WIDTH_CHARS) -> Text:
    filled = round(score / PERFECT_SCORE * width)
    bar = Text("█" * filled, style=score_style(score))
    bar.append("░" * (width - filled), style="dim")
    return bar


def format_elapsed_time(elapsed_ms: float) -> str:
    if elapsed_ms < 1000:
        return f"{round(elapsed_ms)}ms"
    return f"{elapsed_ms / 1000:.1f}s"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


# ─── Sections ────────────────────────────────────────────────────────


def render_project_detection(
    console: Console,
    project: ProjectInfo,
    config_loaded: bool,
    changed_file_count: int | None = None,
) -> None:
    ok = "[green]✔[/]"
    language = "TypeScript" if project.has_typescript else "JavaScript"
    console.print(f"{ok} Detecting framework. Found [cyan]{format_framework_name(project.framework)}[/].")
    console.print(f"{ok} Detecting React version. Found [cyan]React {escape(str(project.react_version))}[/].")
    console.print(f"{ok} Detecting language. Found [cyan]{language}[/].")
    compiler = "[cyan]Found React Compiler.[/]" if project.has_react_compiler else "Not found."
    console.print(f"{ok} Detecting React Compiler. {compiler}")
    if changed_file_count is not None:
        console.print(f"{ok} Scanning [cyan]{changed_file_count}[/] changed source files.")
    else:
        console.print(f"{ok} Found [cyan]{project.source_file_count}[/] source files.")
    if config_loaded:
        console.print(f"{ok} Loaded [cyan]react-doctor config[/].")
    console.print()


def render_diagnostics(console: Console, diagnostics: list[Diagnostic], verbose: bool) -> None:
    for _rule_key, rule_diagnostics in group_by_rule(diagnostics):
        first = rule_diagnostics[0]
        style = severity_style(first.severity)
        icon = "✗" if first.severity == "error" else "⚠"
        count = f" [{style}]({len(rule_diagnostics)})[/]" if len(rule_diagnostics) > 1 else ""
        console.print(f"  [{style}]{icon}[/] {escape(first.message)}{count}")
        if first.help:
            for line in first.help.splitlines():
                console.print(f"    [dim]{escape(line)}[/]")
        if verbose:
            for file_path, lines in build_file_line_map(rule_diagnostics).items():
                console.print(f"    [dim]{escape(format_file_lines(file_path, lines))}[/]")
        console.print()


def _branding(result: ScanResult, no_score_message: str) -> list[Text]:
    lines: list[Text] = []
    score_result = result.score_result
    if score_result is None:
        lines.append(Text.assemble("React Doctor ", ("(www.react.doctor)", "dim")))
        lines.append(Text(""))
        lines.append(Text(no_score_message, style="dim"))
        return lines

    style = score_style(score_result.score)
    eyes, mouth = get_doctor_face(score_result.score)
    for row in ("┌─────┐", f"│ {eyes} │", f"│ {mouth} │", "└─────┘"):
        lines.append(Text(row, style=style))
    lines.append(Text.assemble("React Doctor ", ("(www.react.doctor)", "dim")))
    lines.append(Text(""))
    lines.append(
        Text.assemble(
            (str(score_result.score), f"bold {style}"),
            f" / {PERFECT_SCORE}  ",
            (score_result.label, style),
        )
    )
    lines.append(Text(""))
    lines.append(build_score_bar(score_result.score))
    return lines


def _counts_line(result: ScanResult, total_source_files: int) -> Text:
    line = Text()
    if result.error_count:
        line.append(f"✗ {_plural(result.error_count, 'error')}  ", style="red")
    if result.warning_count:
        line.append(f"⚠ {_plural(result.warning_count, 'warning')}  ", style="yellow")
    affected = len(collect_affected_files(result.diagnostics))
    if total_source_files > 0:
        line.append(f"across {affected}/{total_source_files} files", style="dim")
    else:
        line.append(f"across {_plural(affected, 'file')}", style="dim")
    line.append(f"  in {format_elapsed_time(result.elapsed_ms)}", style="dim")
    return line


def render_summary(
    console: Console,
    result: ScanResult,
    no_score_message: str,
    total_source_files: int,
    diagnostics_directory: Path | None = None,
    share_url: str | None = None,
    estimate: EstimatedScoreResult | None = None,
) -> None:
    body = [*_branding(result, no_score_message), Text(""), _counts_line(result, total_source_files)]
    if estimate is not None and estimate.estimated_score > estimate.score:
        body.append(
            Text.assemble(
                "Estimated score after fixing: ",
                (f"{estimate.estimated_score}", f"bold {score_style(estimate.estimated_score)}"),
                f" ({estimate.estimated_label})",
            )
        )
    console.print(Panel(Group(*body), expand=False, padding=(1, 2)))

    if diagnostics_directory is not None:
        console.print(f"\n  [dim]Full diagnostics written to {escape(str(diagnostics_directory))}[/]")
    if share_url:
        console.print(f"\n  [dim]Share your results:[/] [cyan]{escape(share_url)}[/]")


def render_clean_result(console: Console, result: ScanResult, no_score_message: str) -> None:
    """Output for a scan with no diagnostics."""
    if result.skipped_checks:
        label = " and ".join(result.skipped_checks)
        console.print(f"[yellow]No issues detected, but {label} checks failed — results are incomplete.[/]")
        console.print("\n  [dim]Score not shown — some checks could not complete.[/]")
        return
    console.print("[green]✔ No issues found![/]\n")
    if result.score_result is None:
        console.print(f"  [dim]{no_score_message}[/]")
        return
    console.print(Panel(Group(*_branding(result, no_score_message)), expand=False, padding=(1, 2)))


def render_skipped_checks(console: Console, result: ScanResult) -> None:
    if not result.skipped_checks:
        return
    label = " and ".join(result.skipped_checks)
    console.print(f"\n  [yellow]Note: {label} checks failed — score may be incomplete.[/]")
    for check, reason in result.skip_reasons.items():
        if "native binding" in reason.lower():
            console.print(
                f"  [dim]{check}: oxlint native binding not found. Upgrade to Node "
                f"{OXLINT_NODE_REQUIREMENT} or run: npx -p oxlint@latest react-doctor@latest[/]"
            )
        else:
            console.print(f"  [dim]{check}: {escape(reason)}[/]")
