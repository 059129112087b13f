"""Locate a Node.js runtime that oxlint supports."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger("react_doctor.analyzers.node")


@dataclass(frozen=True)
class NodeResolution:
    binary_path: str
    version: str
    is_path_node: bool


def parse_node_version(version: str) -> tuple[int, int, int]:
    parts = version.strip().lstrip("v").split(".")
    numbers = []
    for part in parts[:3]:
        try:
            numbers.append(int(part))
        except ValueError:
            numbers.append(0)
    while len(numbers) < 3:
        numbers.append(0)
    return numbers[0], numbers[1], numbers[2]


def is_compatible_with_oxlint(version: tuple[int, int, int]) -> bool:
    """^20.19.0 || >=22.12.0"""
    major, minor, _ = version
    if major == 20:
        return minor >= 19
    if major == 22:
        return minor >= 12
    return major > 22


def get_node_version(binary_path: str) -> str | None:
    try:
        result = subprocess.run(
            [binary_path, "--version"],
            capture_output=True,
            text=True,
            check=False,
            timeout=10,
        )
    except (FileNotFoundError, OSError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def get_nvm_directory(environ: dict[str, str] | None = None) -> Path | None:
    env = os.environ if environ is None else environ
    configured = env.get("NVM_DIR")
    if configured and Path(configured).is_dir():
        return Path(configured)
    default = Path.home() / ".nvm"
    return default if default.is_dir() else None


def find_compatible_nvm_binary(nvm_directory: Path | None) -> str | None:
    if nvm_directory is None:
        return None
    versions_directory = nvm_directory / "versions" / "node"
    if not versions_directory.is_dir():
        return None

    candidates = [
        (parse_node_version(entry.name), entry)
        for entry in versions_directory.iterdir()
        if entry.name.startswith("v")
    ]
    compatible = sorted(
        (c for c in candidates if is_compatible_with_oxlint(c[0])),
        key=lambda c: c[0],
        reverse=True,
    )
    if not compatible:
        return None
    binary = compatible[0][1] / "bin" / "node"
    return str(binary) if binary.exists() else None


def resolve_node_for_oxlint(explicit_binary: str | None = None) -> NodeResolution | None:
    """Pick a Node binary for oxlint, or None when no compatible one exists."""
    if explicit_binary:
        version = get_node_version(explicit_binary)
        if version is None:
            logger.warning("Configured Node binary %s is not runnable", explicit_binary)
            return None
        return NodeResolution(explicit_binary, version, is_path_node=False)

    path_node = shutil.which("node")
    if path_node:
        version = get_node_version(path_node)
        if version and is_compatible_with_oxlint(parse_node_version(version)):
            return NodeResolution(path_node, version, is_path_node=True)
        logger.debug("Node on PATH (%s) is not compatible with oxlint", version)

    nvm_binary = find_compatible_nvm_binary(get_nvm_directory())
    if nvm_binary is None:
        return None
    version = get_node_version(nvm_binary)
    if version is None:
        return None
    return NodeResolution(nvm_binary, version, is_path_node=False)
