"""Built-in check: motion libraries without prefers-reduced-motion handling."""

from __future__ import annotations

import logging
from pathlib import Path

from react_doctor import git
from react_doctor.monorepo import read_package_json
from react_doctor.types import Diagnostic

logger = logging.getLogger("react_doctor.analyzers.reduced_motion")

MOTION_LIBRARY_PACKAGES = frozenset({
    "framer-motion",
    "motion",
    "react-spring",
    "@react-spring/web",
    "react-native-reanimated",
    "gsap",
    "@formkit/auto-animate",
    "lottie-react",
})

REDUCED_MOTION_GREP_PATTERN = "prefers-reduced-motion|useReducedMotion"
REDUCED_MOTION_FILE_GLOBS = ["*.ts", "*.tsx", "*.js", "*.jsx", "*.css", "*.scss"]

REDUCED_MOTION_DIAGNOSTIC = Diagnostic(
    file_path="package.json",
    plugin="react-doctor",
    rule="require-reduced-motion",
    severity="error",
    message=(
        "Project uses a motion library but has no prefers-reduced-motion handling "
        "— required for accessibility (WCAG 2.3.3)"
    ),
    help=(
        "Add `useReducedMotion()` from your animation library, or a "
        "`@media (prefers-reduced-motion: reduce)` CSS query"
    ),
    category="Accessibility",
)


def uses_motion_library(package_json: dict) -> bool:
    names: set[str] = set()
    for key in ("dependencies", "devDependencies"):
        section = package_json.get(key)
        if isinstance(section, dict):
            names.update(section)
    return not MOTION_LIBRARY_PACKAGES.isdisjoint(names)


def check_reduced_motion(root_directory: str | Path) -> list[Diagnostic]:
    """One synthetic error at package.json when motion handling is missing.

    A failed search (no git, not a repository) counts as "no handling found".
    """
    root = Path(root_directory)
    package_json_path = root / "package.json"
    if not package_json_path.is_file():
        return []
    if not uses_motion_library(read_package_json(package_json_path)):
        return []

    found = git.grep_files(root, REDUCED_MOTION_GREP_PATTERN, REDUCED_MOTION_FILE_GLOBS)
    if found:
        return []
    if found is None:
        logger.debug("git grep unavailable in %s; assuming no reduced-motion handling", root)
    return [REDUCED_MOTION_DIAGNOSTIC]
