"""
React Doctor — Diagnose React codebase health.

Runs oxlint and knip over a React project, merges their findings and
derives a 0-100 health score.
"""

__version__ = "0.1.0"

from react_doctor.exceptions import NoPackageJsonError, NoReactDependencyError, ReactDoctorError
from react_doctor.git import filter_source_files, get_diff_info
from react_doctor.scan import diagnose
from react_doctor.types import (
    DiagnoseResult,
    Diagnostic,
    DiffInfo,
    ProjectInfo,
    ScoreResult,
)
from react_doctor.user_config import ReactDoctorConfig

__all__ = [
    "DiagnoseResult",
    "Diagnostic",
    "DiffInfo",
    "NoPackageJsonError",
    "NoReactDependencyError",
    "ProjectInfo",
    "ReactDoctorConfig",
    "ReactDoctorError",
    "ScoreResult",
    "__version__",
    "diagnose",
    "filter_source_files",
    "get_diff_info",
]
