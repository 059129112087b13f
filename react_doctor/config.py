"""
React Doctor — Runtime configuration.

Process-wide settings read once from environment variables and passed
explicitly to the orchestrator and analyzers.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from react_doctor.constants import (
    ESTIMATE_SCORE_API_URL,
    FETCH_TIMEOUT_SECONDS,
)

AUTOMATED_ENV_VARS = (
    "CI",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "BUILDKITE",
    "CIRCLECI",
    "JENKINS_URL",
    "TF_BUILD",
    "CODEBUILD_BUILD_ID",
    "REACT_DOCTOR_NON_INTERACTIVE",
)

PROXY_ENV_VARS = ("HTTPS_PROXY", "https_proxy", "HTTP_PROXY", "http_proxy")


def _is_truthy(value: str | None) -> bool:
    if not value:
        return False
    return value.strip().lower() not in ("0", "false", "no", "off")


@dataclass(frozen=True)
class RuntimeEnvironment:
    """Snapshot of the environment-driven switches."""
    is_automated: bool = False
    offline: bool = False
    proxy_url: str | None = None
    node_binary: str | None = None
    oxlint_binary: str | None = None
    knip_binary: str | None = None
    plugin_path: str | None = None
    estimate_score_api_url: str = ESTIMATE_SCORE_API_URL
    fetch_timeout: float = FETCH_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RuntimeEnvironment:
        env = os.environ if environ is None else environ
        proxy_url = next((env[name] for name in PROXY_ENV_VARS if env.get(name)), None)
        return cls(
            is_automated=any(_is_truthy(env.get(name)) for name in AUTOMATED_ENV_VARS),
            offline=_is_truthy(env.get("REACT_DOCTOR_OFFLINE")),
            proxy_url=proxy_url,
            node_binary=env.get("REACT_DOCTOR_NODE") or None,
            oxlint_binary=env.get("REACT_DOCTOR_OXLINT_BIN") or None,
            knip_binary=env.get("REACT_DOCTOR_KNIP_BIN") or None,
            plugin_path=env.get("REACT_DOCTOR_PLUGIN_PATH") or None,
            estimate_score_api_url=env.get(
                "REACT_DOCTOR_ESTIMATE_SCORE_API_URL", ESTIMATE_SCORE_API_URL
            ),
            fetch_timeout=float(env.get("REACT_DOCTOR_FETCH_TIMEOUT", FETCH_TIMEOUT_SECONDS)),
        )
