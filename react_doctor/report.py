"""Report side artifacts: rule groups, the diagnostics directory, share URL, CI gate."""

from __future__ import annotations

import json
import logging
import tempfile
import uuid
from pathlib import Path
from urllib.parse import urlencode

from react_doctor.constants import SHARE_BASE_URL
from react_doctor.types import Diagnostic, ScoreResult

logger = logging.getLogger("react_doctor.report")

SEVERITY_ORDER = {"error": 0, "warning": 1}


def group_by_rule(diagnostics: list[Diagnostic]) -> list[tuple[str, list[Diagnostic]]]:
    """``plugin/rule`` groups in first-seen order, error groups first."""
    groups: dict[str, list[Diagnostic]] = {}
    for diagnostic in diagnostics:
        groups.setdefault(diagnostic.rule_key, []).append(diagnostic)
    return sorted(groups.items(), key=lambda item: SEVERITY_ORDER[item[1][0].severity])


def collect_affected_files(diagnostics: list[Diagnostic]) -> set[str]:
    return {d.file_path for d in diagnostics}


def build_file_line_map(diagnostics: list[Diagnostic]) -> dict[str, list[int]]:
    file_lines: dict[str, list[int]] = {}
    for diagnostic in diagnostics:
        lines = file_lines.setdefault(diagnostic.file_path, [])
        if diagnostic.line > 0:
            lines.append(diagnostic.line)
    return file_lines


def format_file_lines(file_path: str, lines: list[int]) -> str:
    if not lines:
        return file_path
    return f"{file_path}: {', '.join(str(line) for line in lines)}"


def format_rule_summary(rule_key: str, rule_diagnostics: list[Diagnostic]) -> str:
    first = rule_diagnostics[0]
    sections = [
        f"Rule: {rule_key}",
        f"Severity: {first.severity}",
        f"Category: {first.category}",
        f"Count: {len(rule_diagnostics)}",
        "",
        first.message,
    ]
    if first.help:
        sections += ["", f"Suggestion: {first.help}"]
    sections += ["", "Files:"]
    for file_path, lines in build_file_line_map(rule_diagnostics).items():
        sections.append(f"  {format_file_lines(file_path, lines)}")
    return "\n".join(sections) + "\n"


def write_diagnostics_directory(
    diagnostics: list[Diagnostic],
    parent: Path | None = None,
) -> Path | None:
    """Write one summary per rule plus diagnostics.json; None if the write fails."""
    base = parent if parent is not None else Path(tempfile.gettempdir())
    output_directory = base / f"react-doctor-{uuid.uuid4()}"
    try:
        output_directory.mkdir(parents=True)
        for rule_key, rule_diagnostics in group_by_rule(diagnostics):
            file_name = rule_key.replace("/", "--") + ".txt"
            (output_directory / file_name).write_text(
                format_rule_summary(rule_key, rule_diagnostics), encoding="utf-8"
            )
        (output_directory / "diagnostics.json").write_text(
            json.dumps([d.to_dict() for d in diagnostics], indent=2), encoding="utf-8"
        )
    except OSError as e:
        logger.warning("Could not write diagnostics to %s: %s", output_directory, e)
        return None
    return output_directory


def build_share_url(
    diagnostics: list[Diagnostic],
    score_result: ScoreResult | None,
    project_name: str,
) -> str:
    error_count = sum(1 for d in diagnostics if d.severity == "error")
    warning_count = len(diagnostics) - error_count
    affected_file_count = len(collect_affected_files(diagnostics))

    params: dict[str, str] = {"p": project_name}
    if score_result is not None:
        params["s"] = str(score_result.score)
    if error_count:
        params["e"] = str(error_count)
    if warning_count:
        params["w"] = str(warning_count)
    if affected_file_count:
        params["f"] = str(affected_file_count)
    return f"{SHARE_BASE_URL}?{urlencode(params)}"


def should_fail(diagnostics: list[Diagnostic], fail_on: str) -> bool:
    """Fail-on policy: ``error`` any error, ``warning`` any diagnostic, ``none`` never."""
    if fail_on == "error":
        return any(d.severity == "error" for d in diagnostics)
    if fail_on == "warning":
        return bool(diagnostics)
    return False
