"""Tests for the oxlint adapter: output mapping, batching and invocation."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from react_doctor.analyzers.base import AnalyzerContext
from react_doctor.analyzers.node import NodeResolution
from react_doctor.analyzers.oxlint import (
    PLUGIN_CATEGORY_MAP,
    REACT_COMPILER_MESSAGE,
    RULE_CATEGORY_MAP,
    RULE_HELP_MAP,
    LintAnalyzer,
    OxlintCommand,
    batch_include_paths,
    clean_diagnostic_message,
    estimate_args_length,
    parse_oxlint_output,
    parse_rule_code,
    resolve_diagnostic_category,
    resolve_oxlint_command,
)
from react_doctor.analyzers.process import CommandResult
from react_doctor.config import RuntimeEnvironment
from react_doctor.constants import SPAWN_ARGS_MAX_LENGTH_CHARS
from react_doctor.exceptions import AnalyzerError, NativeBindingError
from react_doctor.types import CATEGORIES, ProjectInfo


def _entry(filename="src/App.tsx", code="eslint-plugin-react(jsx-key)", **overrides):
    entry = {
        "code": code,
        "message": "Missing key prop",
        "help": "",
        "severity": "error",
        "filename": filename,
        "labels": [{"span": {"offset": 10, "length": 3, "line": 4, "column": 7}}],
    }
    entry.update(overrides)
    return entry


def _report(*entries):
    return json.dumps({"diagnostics": list(entries)})


def _context(root, include_paths=None, has_typescript=False, environment=None):
    project = ProjectInfo(
        root_directory=root,
        project_name="app",
        react_version="^19.0.0",
        framework="vite",
        has_typescript=has_typescript,
        has_react_compiler=False,
        source_file_count=3,
    )
    return AnalyzerContext(root, project, environment or RuntimeEnvironment(), include_paths)


def _fake_oxlint(args, cwd):
    """Reports one jsx-key error for every .tsx path it was given."""
    paths = [arg for arg in args if arg.endswith(".tsx")]
    return CommandResult(0, _report(*(_entry(filename=p) for p in paths)), "")


# ─── Output mapping ──────────────────────────────────────────────────


class TestParseRuleCode:
    def test_strips_eslint_plugin_prefix(self):
        assert parse_rule_code("eslint-plugin-react(jsx-key)") == ("react", "jsx-key")
        assert parse_rule_code("eslint-plugin-jsx-a11y(alt-text)") == ("jsx-a11y", "alt-text")

    def test_plain_plugin(self):
        assert parse_rule_code("react-doctor(no-giant-component)") == (
            "react-doctor",
            "no-giant-component",
        )

    def test_unparseable_code(self):
        assert parse_rule_code("no-debugger") == ("unknown", "no-debugger")


class TestCleanDiagnosticMessage:
    def test_strips_embedded_location(self):
        message, _ = clean_diagnostic_message(
            "Hook called conditionally src/App.tsx:12:4 more detail", "", "react", "rules-of-hooks"
        )
        assert message == "Hook called conditionally"

    def test_keeps_original_when_cleaning_empties_it(self):
        message, _ = clean_diagnostic_message("src/App.tsx:1:1", "", "react", "jsx-key")
        assert message == "src/App.tsx:1:1"

    def test_help_falls_back_to_rule_table(self):
        _, help_text = clean_diagnostic_message("msg", "", "react-doctor", "no-moment")
        assert help_text == RULE_HELP_MAP["no-moment"]

    def test_explicit_help_wins(self):
        _, help_text = clean_diagnostic_message("msg", "do this", "react-doctor", "no-moment")
        assert help_text == "do this"

    def test_compiler_plugin_demotes_message_to_help(self):
        message, help_text = clean_diagnostic_message(
            "Cannot reassign variable after render src/A.tsx:3:1", "orig help", "react-hooks-js", "immutability"
        )
        assert message == REACT_COMPILER_MESSAGE
        assert help_text == "Cannot reassign variable after render"


class TestResolveDiagnosticCategory:
    def test_rule_key_first(self):
        assert resolve_diagnostic_category("react-doctor", "no-secrets-in-client-code") == "Security"

    def test_plugin_fallback(self):
        assert resolve_diagnostic_category("jsx-a11y", "alt-text") == "Accessibility"
        assert resolve_diagnostic_category("react-hooks-js", "refs") == "React Compiler"

    def test_other(self):
        assert resolve_diagnostic_category("unicorn", "whatever") == "Other"

    def test_mapped_categories_are_known(self):
        mapped = set(PLUGIN_CATEGORY_MAP.values()) | set(RULE_CATEGORY_MAP.values())
        assert mapped <= set(CATEGORIES)


class TestParseOxlintOutput:
    def test_empty_stdout(self):
        assert parse_oxlint_output("") == []

    def test_maps_entry(self):
        [diagnostic] = parse_oxlint_output(_report(_entry()))
        assert diagnostic.file_path == "src/App.tsx"
        assert diagnostic.plugin == "react"
        assert diagnostic.rule == "jsx-key"
        assert diagnostic.severity == "error"
        assert (diagnostic.line, diagnostic.column) == (4, 7)
        assert diagnostic.category == "Correctness"

    def test_drops_entries_without_code_or_outside_jsx(self):
        output = _report(
            _entry(code=""),
            _entry(filename="src/util.ts"),
            _entry(filename="src/Button.jsx"),
        )
        assert [d.file_path for d in parse_oxlint_output(output)] == ["src/Button.jsx"]

    def test_no_labels_defaults_to_zero(self):
        [diagnostic] = parse_oxlint_output(_report(_entry(labels=[])))
        assert (diagnostic.line, diagnostic.column) == (0, 0)

    def test_warning_severity(self):
        [diagnostic] = parse_oxlint_output(_report(_entry(severity="warning")))
        assert diagnostic.severity == "warning"

    def test_invalid_json(self):
        with pytest.raises(AnalyzerError, match="could not parse output"):
            parse_oxlint_output("Segmentation fault")


# ─── Batching ────────────────────────────────────────────────────────


class TestBatchIncludePaths:
    def test_single_batch_when_short(self):
        assert batch_include_paths(["oxlint"], ["a.tsx", "b.tsx"]) == [["a.tsx", "b.tsx"]]

    def test_each_batch_fits(self):
        base = ["node", "/x/oxlint", "-c", "/tmp/cfg.json", "--format", "json"]
        paths = [f"src/feature_{i:04d}/Component{i:04d}.tsx" for i in range(1000)]

        batches = batch_include_paths(base, paths)

        assert len(batches) > 1
        assert [p for batch in batches for p in batch] == paths
        for batch in batches:
            assert estimate_args_length(base) + estimate_args_length(batch) <= SPAWN_ARGS_MAX_LENGTH_CHARS

    def test_oversized_path_gets_own_batch(self):
        huge = "x" * 50 + ".tsx"
        assert batch_include_paths([], ["a.tsx", huge, "b.tsx"], max_length=20) == [
            ["a.tsx"],
            [huge],
            ["b.tsx"],
        ]


# ─── Command resolution ──────────────────────────────────────────────

NVM_NODE = NodeResolution("/home/dev/.nvm/versions/node/v22.12.0/bin/node", "v22.12.0", is_path_node=False)
NVM_BIN = "/home/dev/.nvm/versions/node/v22.12.0/bin"
PATH_NODE = NodeResolution("/usr/bin/node", "v24.1.0", is_path_node=True)


def _which(available):
    """shutil.which stand-in keyed by (name, search path)."""

    def which(name, path=None):
        return available.get((name, path))

    return which


class TestResolveOxlintCommand:
    def test_explicit_binary_needs_no_node(self, tmp_path):
        with patch("react_doctor.analyzers.oxlint.resolve_node_for_oxlint", return_value=None):
            command = resolve_oxlint_command(tmp_path, oxlint_binary="/opt/oxlint")
        assert command == OxlintCommand(["/opt/oxlint"])

    def test_local_install_runs_through_resolved_node(self, tmp_path):
        local = tmp_path / "node_modules" / "oxlint" / "bin" / "oxlint"
        local.parent.mkdir(parents=True)
        local.write_text("")
        with patch("react_doctor.analyzers.oxlint.resolve_node_for_oxlint", return_value=NVM_NODE):
            command = resolve_oxlint_command(tmp_path)
        assert command.args == [NVM_NODE.binary_path, str(local)]
        assert command.environment() is None

    def test_npx_fallback_puts_nvm_node_first_on_path(self, tmp_path):
        which = _which({("npx", None): "/usr/bin/npx"})
        with (
            patch("react_doctor.analyzers.oxlint.resolve_node_for_oxlint", return_value=NVM_NODE),
            patch("react_doctor.analyzers.oxlint.shutil.which", side_effect=which),
        ):
            command = resolve_oxlint_command(tmp_path)

        assert command.args == ["/usr/bin/npx", "--yes", "oxlint"]
        assert command.path_prefix == NVM_BIN
        assert command.environment()["PATH"].split(os.pathsep)[0] == NVM_BIN

    def test_npx_beside_resolved_node_preferred(self, tmp_path):
        which = _which({("npx", NVM_BIN): f"{NVM_BIN}/npx", ("npx", None): "/usr/bin/npx"})
        with (
            patch("react_doctor.analyzers.oxlint.resolve_node_for_oxlint", return_value=NVM_NODE),
            patch("react_doctor.analyzers.oxlint.shutil.which", side_effect=which),
        ):
            command = resolve_oxlint_command(tmp_path)
        assert command.args[0] == f"{NVM_BIN}/npx"

    def test_path_oxlint_puts_nvm_node_first_on_path(self, tmp_path):
        which = _which({("oxlint", None): "/usr/local/bin/oxlint"})
        with (
            patch("react_doctor.analyzers.oxlint.resolve_node_for_oxlint", return_value=NVM_NODE),
            patch("react_doctor.analyzers.oxlint.shutil.which", side_effect=which),
        ):
            command = resolve_oxlint_command(tmp_path)
        assert command == OxlintCommand(["/usr/local/bin/oxlint"], NVM_BIN)

    def test_compatible_path_node_keeps_environment(self, tmp_path):
        which = _which({("oxlint", None): "/usr/local/bin/oxlint"})
        with (
            patch("react_doctor.analyzers.oxlint.resolve_node_for_oxlint", return_value=PATH_NODE),
            patch("react_doctor.analyzers.oxlint.shutil.which", side_effect=which),
        ):
            command = resolve_oxlint_command(tmp_path)
        assert command.path_prefix is None
        assert command.environment() is None

    def test_path_oxlint_without_compatible_node(self, tmp_path):
        which = _which({("oxlint", None): "/usr/local/bin/oxlint", ("npx", None): "/usr/bin/npx"})
        with (
            patch("react_doctor.analyzers.oxlint.resolve_node_for_oxlint", return_value=None),
            patch("react_doctor.analyzers.oxlint.shutil.which", side_effect=which),
        ):
            assert resolve_oxlint_command(tmp_path) is None


# ─── Invocation ──────────────────────────────────────────────────────


class TestLintAnalyzer:
    @pytest.mark.asyncio
    async def test_batched_run_matches_unbatched(self, tmp_path, fake_runner):
        paths = [f"src/feature_{i:04d}/Component{i:04d}.tsx" for i in range(1000)]
        assert sum(len(p) + 1 for p in paths) > SPAWN_ARGS_MAX_LENGTH_CHARS
        runner = fake_runner(handler=_fake_oxlint)

        batched = await LintAnalyzer(runner=runner, command=["oxlint"]).run(_context(tmp_path, paths))
        unbatched = parse_oxlint_output(_fake_oxlint(["oxlint", *paths], tmp_path).stdout)

        assert len(runner.calls) > 1
        assert set(batched) == set(unbatched)
        assert [d.file_path for d in batched] == paths

    @pytest.mark.asyncio
    async def test_full_scan_targets_project_root(self, tmp_path, fake_runner, command_result):
        runner = fake_runner([command_result(stdout=_report())])
        await LintAnalyzer(runner=runner, command=["oxlint"]).run(_context(tmp_path))

        [args] = runner.calls
        assert args[0] == "oxlint"
        assert args[-1] == "."
        assert args[args.index("--format") + 1] == "json"
        assert "--tsconfig" not in args

    @pytest.mark.asyncio
    async def test_typescript_adds_tsconfig(self, tmp_path, fake_runner, command_result):
        runner = fake_runner([command_result(stdout=_report())])
        await LintAnalyzer(runner=runner, command=["oxlint"]).run(_context(tmp_path, has_typescript=True))
        args = runner.calls[0]
        assert args[args.index("--tsconfig") + 1] == "./tsconfig.json"

    @pytest.mark.asyncio
    async def test_empty_subset_does_not_spawn(self, tmp_path, fake_runner):
        runner = fake_runner()
        result = await LintAnalyzer(runner=runner, command=["oxlint"]).run(_context(tmp_path, []))
        assert result == []
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_config_file_written_then_removed(self, tmp_path, fake_runner, command_result):
        seen = {}

        def handler(args, cwd):
            config_path = Path(args[args.index("-c") + 1])
            seen["path"] = config_path
            seen["config"] = json.loads(config_path.read_text())
            return command_result(stdout=_report())

        await LintAnalyzer(runner=fake_runner(handler=handler), command=["oxlint"]).run(_context(tmp_path))

        assert "react" in seen["config"]["plugins"]
        assert not seen["path"].exists()

    @pytest.mark.asyncio
    async def test_config_removed_on_failure(self, tmp_path, fake_runner):
        seen = {}

        def handler(args, cwd):
            seen["path"] = Path(args[args.index("-c") + 1])
            raise OSError("spawn failed")

        with pytest.raises(AnalyzerError):
            await LintAnalyzer(runner=fake_runner(handler=handler), command=["oxlint"]).run(_context(tmp_path))
        assert not seen["path"].exists()

    @pytest.mark.asyncio
    async def test_stderr_only_raises(self, tmp_path, fake_runner, command_result):
        runner = fake_runner([command_result(stderr="boom", returncode=1)])
        with pytest.raises(AnalyzerError, match="boom"):
            await LintAnalyzer(runner=runner, command=["oxlint"]).run(_context(tmp_path))

    @pytest.mark.asyncio
    async def test_native_binding_error(self, tmp_path, fake_runner, command_result):
        runner = fake_runner([command_result(stderr="Cannot find native binding", returncode=1)])
        with pytest.raises(NativeBindingError):
            await LintAnalyzer(runner=runner, command=["oxlint"]).run(_context(tmp_path))

    @pytest.mark.asyncio
    async def test_missing_node_raises(self, tmp_path):
        with patch("react_doctor.analyzers.oxlint.resolve_oxlint_command", return_value=None):
            with pytest.raises(AnalyzerError, match="Node"):
                await LintAnalyzer().run(_context(tmp_path))

    @pytest.mark.asyncio
    async def test_resolved_path_prefix_reaches_every_batch(self, tmp_path, fake_runner):
        paths = [f"src/feature_{i:04d}/Component{i:04d}.tsx" for i in range(1000)]
        runner = fake_runner(handler=_fake_oxlint)
        command = OxlintCommand(["/usr/bin/npx", "--yes", "oxlint"], NVM_BIN)

        with patch("react_doctor.analyzers.oxlint.resolve_oxlint_command", return_value=command):
            await LintAnalyzer(runner=runner).run(_context(tmp_path, paths))

        assert len(runner.envs) > 1
        assert all(env["PATH"].split(os.pathsep)[0] == NVM_BIN for env in runner.envs)

    @pytest.mark.asyncio
    async def test_fixed_command_inherits_environment(self, tmp_path, fake_runner, command_result):
        runner = fake_runner([command_result(stdout=_report())])
        await LintAnalyzer(runner=runner, command=["oxlint"]).run(_context(tmp_path))
        assert runner.envs == [None]
