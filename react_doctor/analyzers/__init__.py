"""External analysis engines behind one Diagnostic-producing interface."""

from react_doctor.analyzers.base import Analyzer, AnalyzerContext
from react_doctor.analyzers.knip import DeadCodeAnalyzer
from react_doctor.analyzers.oxlint import LintAnalyzer

__all__ = ["Analyzer", "AnalyzerContext", "DeadCodeAnalyzer", "LintAnalyzer"]
