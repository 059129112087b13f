"""Workspace-root detection and workspace pattern expansion."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger("react_doctor.monorepo")


def read_package_json(path: Path) -> dict:
    """Read a package.json; unreadable or non-object manifests read as empty."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _declares_workspaces(package_json: dict) -> bool:
    workspaces = package_json.get("workspaces")
    if isinstance(workspaces, list):
        return True
    return isinstance(workspaces, dict) and bool(workspaces.get("packages"))


def is_monorepo_root(directory: Path) -> bool:
    if (directory / "pnpm-workspace.yaml").is_file():
        return True
    if (directory / "nx.json").is_file():
        return True
    package_json_path = directory / "package.json"
    if not package_json_path.is_file():
        return False
    return _declares_workspaces(read_package_json(package_json_path))


def find_monorepo_root(start_directory: Path) -> Path | None:
    """Walk ancestors of ``start_directory`` (exclusive) for a workspace root."""
    for ancestor in Path(start_directory).parents:
        if is_monorepo_root(ancestor):
            return ancestor
    return None


def parse_pnpm_workspace_patterns(root_directory: Path) -> list[str]:
    """Extract the ``packages:`` list from pnpm-workspace.yaml."""
    workspace_path = root_directory / "pnpm-workspace.yaml"
    if not workspace_path.is_file():
        return []

    patterns: list[str] = []
    inside_packages = False
    for line in workspace_path.read_text(encoding="utf-8", errors="replace").splitlines():
        trimmed = line.strip()
        if trimmed == "packages:":
            inside_packages = True
            continue
        if inside_packages and trimmed.startswith("-"):
            pattern = trimmed[1:].strip().replace('"', "").replace("'", "")
            patterns.append(pattern)
        elif inside_packages and trimmed and not trimmed.startswith("#"):
            inside_packages = False
    return patterns


def get_workspace_patterns(root_directory: Path, package_json: dict) -> list[str]:
    pnpm_patterns = parse_pnpm_workspace_patterns(root_directory)
    if pnpm_patterns:
        return pnpm_patterns

    workspaces = package_json.get("workspaces")
    if isinstance(workspaces, list):
        return [p for p in workspaces if isinstance(p, str)]
    if isinstance(workspaces, dict) and isinstance(workspaces.get("packages"), list):
        return [p for p in workspaces["packages"] if isinstance(p, str)]
    return []


def resolve_workspace_directories(root_directory: Path, pattern: str) -> list[Path]:
    """Expand one workspace pattern to directories holding a package.json.

    Supports a single ``*`` segment (``packages/*``, ``apps/*/ClientApp``);
    a trailing ``/**`` is treated as ``/*``.
    """
    clean = pattern.replace('"', "").replace("'", "")
    if clean.endswith("/**"):
        clean = clean[:-3] + "/*"

    if "*" not in clean:
        directory = root_directory / clean
        if directory.is_dir() and (directory / "package.json").is_file():
            return [directory]
        return []

    wildcard_index = clean.index("*")
    base_directory = root_directory / clean[:wildcard_index]
    suffix = clean[wildcard_index + 1:].lstrip("/")

    if not base_directory.is_dir():
        return []

    directories = []
    for entry in sorted(base_directory.iterdir()):
        candidate = entry / suffix if suffix else entry
        if candidate.is_dir() and (candidate / "package.json").is_file():
            directories.append(candidate)
    return directories
