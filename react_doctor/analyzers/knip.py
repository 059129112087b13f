"""Dead-Code Adapter - runs knip and maps its JSON report to Diagnostics."""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

from react_doctor.analyzers.base import Analyzer, AnalyzerContext
from react_doctor.analyzers.process import CommandRunner, retry_async, run_command
from react_doctor.constants import (
    ERROR_PREVIEW_LENGTH_CHARS,
    KNIP_RETRY_BACKOFF_SECONDS,
    MAX_KNIP_RETRIES,
)
from react_doctor.exceptions import AnalyzerError
from react_doctor.types import Diagnostic

logger = logging.getLogger("react_doctor.analyzers.knip")

KNIP_PLUGIN = "knip"
KNIP_CATEGORY = "Dead Code"
KNIP_ARGS = ["--reporter", "json", "--no-progress", "--no-exit-code"]

# Issue type -> (message, help template)
ISSUE_MESSAGES = {
    "files": ("Unused file", "Delete the file or import it from an entry point"),
    "exports": ("Unused export", "Remove the export of `{name}` or use it elsewhere"),
    "types": ("Unused type", "Remove the exported type `{name}` or use it elsewhere"),
    "duplicates": ("Duplicate export", "`{name}` are exported more than once; keep a single export"),
}


def _unused_file(file_path: str) -> Diagnostic:
    message, help_text = ISSUE_MESSAGES["files"]
    return Diagnostic(
        file_path=file_path,
        plugin=KNIP_PLUGIN,
        rule="files",
        severity="warning",
        message=message,
        help=help_text,
        category=KNIP_CATEGORY,
    )


def _symbol(file_path: str, issue_type: str, item: dict) -> Diagnostic:
    message, help_template = ISSUE_MESSAGES[issue_type]
    return Diagnostic(
        file_path=file_path,
        plugin=KNIP_PLUGIN,
        rule=issue_type,
        severity="warning",
        message=message,
        help=help_template.format(name=item.get("name", "")),
        line=int(item.get("line") or 0),
        column=int(item.get("col") or 0),
        category=KNIP_CATEGORY,
    )


def _duplicate(file_path: str, group: list) -> Diagnostic:
    names = ", ".join(item.get("name", "") for item in group if isinstance(item, dict))
    first = group[0] if group and isinstance(group[0], dict) else {}
    message, help_template = ISSUE_MESSAGES["duplicates"]
    return Diagnostic(
        file_path=file_path,
        plugin=KNIP_PLUGIN,
        rule="duplicates",
        severity="warning",
        message=message,
        help=help_template.format(name=names),
        line=int(first.get("line") or 0),
        column=int(first.get("col") or 0),
        category=KNIP_CATEGORY,
    )


def parse_knip_output(stdout: str) -> list[Diagnostic]:
    """Map knip's ``--reporter json`` output to Diagnostics.

    Accepts both the top-level ``files`` list of older reporters and the
    per-issue ``files`` entries of newer ones.

    Raises:
        AnalyzerError: stdout is not a JSON report.
    """
    stdout = stdout.strip()
    if not stdout:
        return []
    try:
        report = json.loads(stdout)
    except json.JSONDecodeError:
        raise AnalyzerError(
            "knip", f"could not parse output: {stdout[:ERROR_PREVIEW_LENGTH_CHARS]}"
        ) from None
    if not isinstance(report, dict):
        raise AnalyzerError("knip", f"unexpected report shape: {stdout[:ERROR_PREVIEW_LENGTH_CHARS]}")

    diagnostics: list[Diagnostic] = []
    seen_files: set[str] = set()
    for file_path in report.get("files") or []:
        if isinstance(file_path, str) and file_path not in seen_files:
            seen_files.add(file_path)
            diagnostics.append(_unused_file(file_path))

    for issue in report.get("issues") or []:
        file_path = issue.get("file")
        if not file_path:
            continue
        if issue.get("files") and file_path not in seen_files:
            seen_files.add(file_path)
            diagnostics.append(_unused_file(file_path))
        for issue_type in ("exports", "types"):
            for item in issue.get(issue_type) or []:
                if isinstance(item, dict):
                    diagnostics.append(_symbol(file_path, issue_type, item))
        for group in issue.get("duplicates") or []:
            if isinstance(group, list) and group:
                diagnostics.append(_duplicate(file_path, group))
    return diagnostics


def resolve_knip_command(root_directory: Path, knip_binary: str | None = None) -> list[str] | None:
    if knip_binary:
        return [knip_binary]
    local_binary = root_directory / "node_modules" / ".bin" / "knip"
    if local_binary.is_file():
        return [str(local_binary)]
    npx = shutil.which("npx")
    if npx is None:
        return None
    return [npx, "--yes", "knip"]


class DeadCodeAnalyzer(Analyzer):
    """Runs knip over the whole project; retried on transient failure."""

    name = "knip"
    check_label = "dead code"

    def __init__(
        self,
        runner: CommandRunner | None = None,
        command: list[str] | None = None,
        attempts: int = MAX_KNIP_RETRIES,
        backoff: float = KNIP_RETRY_BACKOFF_SECONDS,
    ):
        self._runner = runner or run_command
        self._command = command
        self._attempts = attempts
        self._backoff = backoff

    async def _run_once(self, args: list[str], cwd: Path) -> list[Diagnostic]:
        try:
            result = await self._runner(args, cwd)
        except (OSError, TimeoutError) as e:
            raise AnalyzerError("knip", str(e)) from e
        if not result.stdout.strip() and result.returncode != 0:
            raise AnalyzerError("knip", result.stderr.strip() or f"exit code {result.returncode}")
        return parse_knip_output(result.stdout)

    async def run(self, context: AnalyzerContext) -> list[Diagnostic]:
        command = self._command
        if command is None:
            command = resolve_knip_command(context.root_directory, context.environment.knip_binary)
        if command is None:
            raise AnalyzerError("knip", "knip is not installed and npx is unavailable")

        args = [*command, *KNIP_ARGS]
        diagnostics = await retry_async(
            lambda: self._run_once(args, context.root_directory),
            attempts=self._attempts,
            backoff=self._backoff,
            retry_on=(AnalyzerError,),
            label="knip",
        )
        logger.debug("knip reported %d findings", len(diagnostics))
        return diagnostics
