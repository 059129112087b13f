"""Tests for version-control queries against throwaway repositories."""

from __future__ import annotations

from react_doctor.git import (
    detect_default_branch,
    filter_source_files,
    get_current_branch,
    get_diff_info,
    grep_files,
    is_git_repository,
    list_files,
)


class TestRepositoryQueries:
    def test_not_a_repository(self, tmp_path):
        assert not is_git_repository(tmp_path)
        assert list_files(tmp_path) is None
        assert get_diff_info(tmp_path) is None

    def test_current_and_default_branch(self, git_repo):
        assert is_git_repository(git_repo)
        assert get_current_branch(git_repo) == "main"
        assert detect_default_branch(git_repo) == "main"

    def test_grep(self, git_repo, git):
        (git_repo / "Fade.tsx").write_text("const reduce = useReducedMotion();\n")
        git(git_repo, "add", ".")
        assert grep_files(git_repo, "useReducedMotion", ["*.tsx"]) is True
        assert grep_files(git_repo, "prefers-reduced-motion", ["*.tsx"]) is False


# ─── Change scope ────────────────────────────────────────────────────


class TestGetDiffInfo:
    def test_uncommitted_changes_win(self, git_repo, git):
        (git_repo / "README.md").write_text("changed\n")
        (git_repo / "New.tsx").write_text("export {}\n")

        info = get_diff_info(git_repo)

        assert info.is_current_changes
        assert info.current_branch == "main"
        assert info.base_branch is None
        assert sorted(info.changed_files) == ["New.tsx", "README.md"]

    def test_deleted_files_are_not_in_scope(self, git_repo, git):
        (git_repo / "Old.tsx").write_text("export {}\n")
        git(git_repo, "add", ".")
        git(git_repo, "commit", "-q", "-m", "old")
        (git_repo / "Old.tsx").unlink()
        (git_repo / "README.md").write_text("changed\n")

        info = get_diff_info(git_repo)

        assert info.is_current_changes
        assert info.changed_files == ["README.md"]

    def test_clean_default_branch_has_no_scope(self, git_repo):
        assert get_diff_info(git_repo) is None

    def test_feature_branch_against_main(self, git_repo, git):
        git(git_repo, "checkout", "-q", "-b", "feature")
        (git_repo / "src").mkdir()
        (git_repo / "src" / "Button.tsx").write_text("export {}\n")
        git(git_repo, "add", ".")
        git(git_repo, "commit", "-q", "-m", "button")

        info = get_diff_info(git_repo)

        assert not info.is_current_changes
        assert info.current_branch == "feature"
        assert info.base_branch == "main"
        assert info.changed_files == ["src/Button.tsx"]

    def test_explicit_base_branch(self, git_repo, git):
        git(git_repo, "checkout", "-q", "-b", "develop")
        git(git_repo, "checkout", "-q", "-b", "feature")
        (git_repo / "A.jsx").write_text("export {}\n")
        git(git_repo, "add", ".")
        git(git_repo, "commit", "-q", "-m", "a")

        info = get_diff_info(git_repo, "develop")

        assert info.base_branch == "develop"
        assert info.changed_files == ["A.jsx"]

    def test_missing_base_branch(self, git_repo, git):
        git(git_repo, "checkout", "-q", "-b", "feature")
        assert get_diff_info(git_repo, "does-not-exist") is None

    def test_paths_relative_to_subdirectory(self, git_repo, git):
        web = git_repo / "apps" / "web"
        web.mkdir(parents=True)
        (web / "package.json").write_text("{}\n")
        git(git_repo, "add", ".")
        git(git_repo, "commit", "-q", "-m", "web")
        git(git_repo, "checkout", "-q", "-b", "feature")
        (web / "Page.tsx").write_text("export {}\n")
        git(git_repo, "add", ".")
        git(git_repo, "commit", "-q", "-m", "page")

        info = get_diff_info(web)

        assert info.changed_files == ["Page.tsx"]


class TestFilterSourceFiles:
    def test_keeps_js_and_ts_in_order(self):
        paths = ["README.md", "src/b.ts", "src/A.tsx", "styles.css", "x.js", "y.jsx", "data.json"]
        assert filter_source_files(paths) == ["src/b.ts", "src/A.tsx", "x.js", "y.jsx"]
