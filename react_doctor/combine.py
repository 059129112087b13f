"""Diagnostic Combiner: merge analyzer output, built-in checks and suppressions."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from fnmatch import fnmatch
from pathlib import Path

from react_doctor.analyzers.reduced_motion import check_reduced_motion
from react_doctor.constants import JSX_FILE_PATTERN
from react_doctor.types import Diagnostic
from react_doctor.user_config import ReactDoctorConfig

BuiltinCheck = Callable[[Path], list[Diagnostic]]


def compute_jsx_include_paths(include_paths: list[str]) -> list[str] | None:
    """Narrow a diff's files to JSX/TSX.

    An empty input means "no subset" and yields None; a non-empty input with
    no component files yields an empty list, which scans nothing.
    """
    if not include_paths:
        return None
    return [path for path in include_paths if JSX_FILE_PATTERN.search(path)]


def _is_ignored_file(file_path: str, patterns: Iterable[str]) -> bool:
    normalized = file_path.replace("\\", "/")
    return any(fnmatch(normalized, pattern) for pattern in patterns)


def filter_ignored_diagnostics(
    diagnostics: list[Diagnostic],
    config: ReactDoctorConfig,
) -> list[Diagnostic]:
    ignored_rules = set(config.ignore.rules)
    ignored_files = config.ignore.files
    return [
        d for d in diagnostics
        if d.rule_key not in ignored_rules and not _is_ignored_file(d.file_path, ignored_files)
    ]


def combine_diagnostics(
    lint_diagnostics: list[Diagnostic],
    dead_code_diagnostics: list[Diagnostic],
    directory: str | Path,
    is_diff_mode: bool,
    config: ReactDoctorConfig | None,
    builtin_check: BuiltinCheck = check_reduced_motion,
) -> list[Diagnostic]:
    """Lint, then dead code, then the reduced-motion check (full scans only).

    Order is kept because renderers take a rule group's text from its first
    member.
    """
    combined = [*lint_diagnostics, *dead_code_diagnostics]
    if not is_diff_mode:
        combined.extend(builtin_check(Path(directory)))
    if config is None:
        return combined
    return filter_ignored_diagnostics(combined, config)
