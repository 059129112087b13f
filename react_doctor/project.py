"""Project Descriptor Resolver: framework, React version, language and compiler facts."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from react_doctor import git
from react_doctor.constants import IGNORED_DIRECTORIES, SOURCE_FILE_PATTERN
from react_doctor.exceptions import NoPackageJsonError
from react_doctor.monorepo import (
    find_monorepo_root,
    get_workspace_patterns,
    is_monorepo_root,
    read_package_json,
    resolve_workspace_directories,
)
from react_doctor.types import ProjectInfo, WorkspacePackage

logger = logging.getLogger("react_doctor.project")

# Checked in this order; first match wins
FRAMEWORK_PACKAGES = {
    "next": "nextjs",
    "vite": "vite",
    "react-scripts": "cra",
    "@remix-run/react": "remix",
    "gatsby": "gatsby",
    "expo": "expo",
    "react-native": "react-native",
}

FRAMEWORK_DISPLAY_NAMES = {
    "nextjs": "Next.js",
    "vite": "Vite",
    "cra": "Create React App",
    "remix": "Remix",
    "gatsby": "Gatsby",
    "expo": "Expo",
    "react-native": "React Native",
    "unknown": "React",
}

REACT_DEPENDENCY_NAMES = {"react", "react-native", "next"}

REACT_COMPILER_PACKAGES = {
    "babel-plugin-react-compiler",
    "react-compiler-runtime",
    "eslint-plugin-react-compiler",
}

REACT_COMPILER_CONFIG_PATTERN = re.compile(r"react-compiler|reactCompiler")

COMPILER_CONFIG_FILENAMES = (
    # Next.js
    "next.config.js",
    "next.config.mjs",
    "next.config.ts",
    "next.config.cjs",
    # Babel
    ".babelrc",
    ".babelrc.json",
    "babel.config.js",
    "babel.config.json",
    "babel.config.cjs",
    "babel.config.mjs",
    # Vite
    "vite.config.js",
    "vite.config.ts",
    "vite.config.mjs",
    "vite.config.cjs",
    # Expo
    "app.json",
    "app.config.js",
    "app.config.ts",
)


@dataclass
class DependencyInfo:
    react_version: str | None = None
    framework: str = "unknown"

    @property
    def is_complete(self) -> bool:
        return self.react_version is not None and self.framework != "unknown"

    def fill_from(self, other: DependencyInfo) -> None:
        """Take facts from ``other`` only where this one is still undetermined."""
        if self.react_version is None:
            self.react_version = other.react_version
        if self.framework == "unknown":
            self.framework = other.framework


def format_framework_name(framework: str) -> str:
    return FRAMEWORK_DISPLAY_NAMES.get(framework, "React")


def collect_all_dependencies(package_json: dict) -> dict[str, str]:
    merged: dict[str, str] = {}
    for key in ("peerDependencies", "dependencies", "devDependencies"):
        section = package_json.get(key)
        if isinstance(section, dict):
            merged.update(section)
    return merged


def detect_framework(dependencies: dict[str, str]) -> str:
    for package_name, framework in FRAMEWORK_PACKAGES.items():
        if dependencies.get(package_name):
            return framework
    return "unknown"


def extract_dependency_info(package_json: dict) -> DependencyInfo:
    dependencies = collect_all_dependencies(package_json)
    return DependencyInfo(
        react_version=dependencies.get("react") or None,
        framework=detect_framework(dependencies),
    )


def has_react_dependency(package_json: dict) -> bool:
    return any(name in REACT_DEPENDENCY_NAMES for name in collect_all_dependencies(package_json))


# ─── Workspace search ────────────────────────────────────────────────


def find_react_in_workspaces(root_directory: Path, package_json: dict) -> DependencyInfo:
    """First workspace claiming each missing fact wins."""
    result = DependencyInfo()
    for pattern in get_workspace_patterns(root_directory, package_json):
        for workspace_directory in resolve_workspace_directories(root_directory, pattern):
            info = extract_dependency_info(read_package_json(workspace_directory / "package.json"))
            result.fill_from(info)
            if result.is_complete:
                return result
    return result


def find_dependency_info_from_monorepo_root(directory: Path) -> DependencyInfo:
    monorepo_root = find_monorepo_root(directory)
    if monorepo_root is None:
        return DependencyInfo()

    package_json_path = monorepo_root / "package.json"
    if not package_json_path.is_file():
        return DependencyInfo()

    root_package_json = read_package_json(package_json_path)
    # The root's own claim takes precedence over any sub-workspace's
    info = extract_dependency_info(root_package_json)
    if not info.is_complete:
        info.fill_from(find_react_in_workspaces(monorepo_root, root_package_json))
    return info


# ─── Independent detections ──────────────────────────────────────────


def count_source_files_via_filesystem(root_directory: Path) -> int:
    count = 0
    for _root, dirs, files in os.walk(root_directory):
        dirs[:] = [d for d in dirs if not d.startswith(".") and d not in IGNORED_DIRECTORIES]
        count += sum(1 for f in files if SOURCE_FILE_PATTERN.search(f))
    return count


def count_source_files(root_directory: Path) -> int:
    files = git.list_files(root_directory)
    if files is None:
        return count_source_files_via_filesystem(root_directory)
    return sum(1 for f in files if SOURCE_FILE_PATTERN.search(f))


def _has_compiler_package(package_json: dict) -> bool:
    return any(name in REACT_COMPILER_PACKAGES for name in collect_all_dependencies(package_json))


def _file_contains_compiler(path: Path) -> bool:
    if not path.is_file():
        return False
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False
    return REACT_COMPILER_CONFIG_PATTERN.search(content) is not None


def detect_react_compiler(directory: Path, package_json: dict) -> bool:
    if _has_compiler_package(package_json):
        return True
    if any(_file_contains_compiler(directory / name) for name in COMPILER_CONFIG_FILENAMES):
        return True
    for ancestor in directory.parents:
        ancestor_package_json = ancestor / "package.json"
        if ancestor_package_json.is_file() and _has_compiler_package(
            read_package_json(ancestor_package_json)
        ):
            return True
    return False


# ─── Public API ──────────────────────────────────────────────────────


def discover_project(
    directory: str | Path,
    package_json_directory: str | Path | None = None,
) -> ProjectInfo:
    """Describe the project rooted at ``directory``.

    ``package_json_directory`` supports split layouts where the manifest lives
    apart from the sources. TypeScript, the source-file count and compiler
    config files are always read from ``directory``.

    Raises:
        NoPackageJsonError: the manifest directory has no package.json file.
    """
    scan_directory = Path(directory)
    manifest_directory = Path(package_json_directory) if package_json_directory else scan_directory
    package_json_path = manifest_directory / "package.json"
    if not package_json_path.is_file():
        raise NoPackageJsonError(manifest_directory)

    package_json = read_package_json(package_json_path)
    info = extract_dependency_info(package_json)

    if not info.is_complete:
        info.fill_from(find_react_in_workspaces(manifest_directory, package_json))

    if not info.is_complete and not is_monorepo_root(manifest_directory):
        info.fill_from(find_dependency_info_from_monorepo_root(manifest_directory))

    name = package_json.get("name")
    project_name = name if isinstance(name, str) and name else scan_directory.name

    project = ProjectInfo(
        root_directory=scan_directory,
        project_name=project_name,
        react_version=info.react_version,
        framework=info.framework,
        has_typescript=(scan_directory / "tsconfig.json").exists(),
        has_react_compiler=detect_react_compiler(scan_directory, package_json),
        source_file_count=count_source_files(scan_directory),
    )
    logger.debug("Discovered project %s", project)
    return project


def list_workspace_packages(
    root_directory: str | Path,
    package_json_directory: str | Path | None = None,
) -> list[WorkspacePackage]:
    """React-dependent packages declared as workspaces of the root manifest."""
    root = Path(root_directory)
    effective_directory = Path(package_json_directory) if package_json_directory else root
    package_json_path = effective_directory / "package.json"
    if not package_json_path.is_file():
        return []

    package_json = read_package_json(package_json_path)
    packages = []
    for pattern in get_workspace_patterns(effective_directory, package_json):
        for workspace_directory in resolve_workspace_directories(root, pattern):
            workspace_json = read_package_json(workspace_directory / "package.json")
            if not has_react_dependency(workspace_json):
                continue
            name = workspace_json.get("name") or workspace_directory.name
            packages.append(WorkspacePackage(name=name, directory=workspace_directory))
    return packages


def discover_react_subprojects(
    root_directory: str | Path,
    package_json_directory: str | Path | None = None,
) -> list[WorkspacePackage]:
    """The root (if it uses React) plus immediate sub-directories that do."""
    root = Path(root_directory)
    effective_directory = Path(package_json_directory) if package_json_directory else root
    if not effective_directory.is_dir():
        return []

    packages = []
    root_package_json_path = root / "package.json"
    if root_package_json_path.is_file():
        root_package_json = read_package_json(root_package_json_path)
        if has_react_dependency(root_package_json):
            name = root_package_json.get("name") or root.name
            packages.append(WorkspacePackage(name=name, directory=root))

    for entry in sorted(effective_directory.iterdir()):
        if not entry.is_dir() or entry.name.startswith(".") or entry.name == "node_modules":
            continue
        package_json_path = entry / "package.json"
        if not package_json_path.is_file():
            continue
        package_json = read_package_json(package_json_path)
        if not has_react_dependency(package_json):
            continue
        packages.append(
            WorkspacePackage(name=package_json.get("name") or entry.name, directory=entry)
        )
    return packages
