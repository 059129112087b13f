"""Tests for report artifacts: rule grouping, diagnostics directory, share URL, CI gate."""

from __future__ import annotations

import json
from urllib.parse import parse_qs, urlsplit

import pytest

from react_doctor.report import (
    build_file_line_map,
    build_share_url,
    format_rule_summary,
    group_by_rule,
    should_fail,
    write_diagnostics_directory,
)
from react_doctor.types import ScoreResult


# ─── Rule groups ─────────────────────────────────────────────────────


class TestGroupByRule:
    def test_error_groups_first_then_first_seen(self, make_diagnostic):
        diagnostics = [
            make_diagnostic("warning", plugin="knip", rule="exports"),
            make_diagnostic("error", rule="jsx-key"),
            make_diagnostic("warning", plugin="react-perf", rule="jsx-no-new-object-as-prop"),
            make_diagnostic("error", rule="no-danger"),
            make_diagnostic("error", rule="jsx-key", line=9),
        ]

        groups = group_by_rule(diagnostics)

        assert [key for key, _ in groups] == [
            "react/jsx-key",
            "react/no-danger",
            "knip/exports",
            "react-perf/jsx-no-new-object-as-prop",
        ]
        assert len(groups[0][1]) == 2

    def test_empty(self):
        assert group_by_rule([]) == []


class TestFormatRuleSummary:
    def test_lists_files_with_lines(self, make_diagnostic):
        diagnostics = [
            make_diagnostic(file_path="src/A.tsx", line=3, help="Add a key"),
            make_diagnostic(file_path="src/A.tsx", line=8, help="Add a key"),
            make_diagnostic(file_path="package.json", line=0, help="Add a key"),
        ]

        summary = format_rule_summary("react/jsx-key", diagnostics)

        assert "Rule: react/jsx-key" in summary
        assert "Count: 3" in summary
        assert "Suggestion: Add a key" in summary
        assert "  src/A.tsx: 3, 8" in summary
        assert "  package.json\n" in summary

    def test_line_map_skips_unknown_lines(self, make_diagnostic):
        line_map = build_file_line_map([make_diagnostic(line=0), make_diagnostic(line=4)])
        assert line_map == {"src/App.tsx": [4]}


# ─── Diagnostics directory ───────────────────────────────────────────


class TestWriteDiagnosticsDirectory:
    def test_writes_rule_files_and_json(self, tmp_path, make_diagnostic):
        diagnostics = [
            make_diagnostic(rule="jsx-key"),
            make_diagnostic("warning", plugin="knip", rule="files", file_path="src/Old.tsx", line=0),
        ]

        output = write_diagnostics_directory(diagnostics, parent=tmp_path)

        assert output is not None
        assert output.parent == tmp_path
        assert output.name.startswith("react-doctor-")
        assert (output / "react--jsx-key.txt").is_file()
        assert (output / "knip--files.txt").is_file()
        dumped = json.loads((output / "diagnostics.json").read_text())
        assert [entry["filePath"] for entry in dumped] == ["src/App.tsx", "src/Old.tsx"]

    def test_unique_directory_per_call(self, tmp_path, make_diagnostic):
        first = write_diagnostics_directory([make_diagnostic()], parent=tmp_path)
        second = write_diagnostics_directory([make_diagnostic()], parent=tmp_path)
        assert first != second

    def test_write_failure_returns_none(self, tmp_path, make_diagnostic):
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("")
        assert write_diagnostics_directory([make_diagnostic()], parent=blocker) is None


# ─── Share URL ───────────────────────────────────────────────────────


class TestBuildShareUrl:
    def test_includes_counts_and_score(self, make_diagnostic):
        diagnostics = [
            make_diagnostic("error", file_path="src/A.tsx"),
            make_diagnostic("warning", file_path="src/A.tsx"),
            make_diagnostic("warning", file_path="src/B.tsx"),
        ]

        url = build_share_url(diagnostics, ScoreResult(98, "Great"), "my app")

        params = parse_qs(urlsplit(url).query)
        assert params == {"p": ["my app"], "s": ["98"], "e": ["1"], "w": ["2"], "f": ["2"]}

    def test_omits_missing_parts(self):
        params = parse_qs(urlsplit(build_share_url([], None, "web")).query)
        assert params == {"p": ["web"]}


# ─── CI gate ─────────────────────────────────────────────────────────


class TestShouldFail:
    @pytest.mark.parametrize(
        "severities,fail_on,expected",
        [
            (["warning"], "error", False),
            (["warning", "error"], "error", True),
            (["warning"], "warning", True),
            ([], "warning", False),
            (["error"], "none", False),
        ],
    )
    def test_policy(self, make_diagnostic, severities, fail_on, expected):
        diagnostics = [make_diagnostic(severity) for severity in severities]
        assert should_fail(diagnostics, fail_on) is expected
