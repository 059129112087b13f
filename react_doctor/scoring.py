"""
React Doctor — Scoring Engine.

The current score is computed locally from the diagnostic list. The
"estimated score after fix" comes from a remote endpoint and is purely
advisory: any network or payload problem simply yields None.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

import httpx

from react_doctor.config import RuntimeEnvironment
from react_doctor.constants import (
    ERROR_RULE_PENALTY,
    PERFECT_SCORE,
    SCORE_GOOD_THRESHOLD,
    SCORE_LABEL_CRITICAL,
    SCORE_LABEL_GREAT,
    SCORE_LABEL_NEEDS_WORK,
    SCORE_OK_THRESHOLD,
    WARNING_RULE_PENALTY,
)
from react_doctor.types import Diagnostic, EstimatedScoreResult, ScoreResult

logger = logging.getLogger("react_doctor.scoring")


def get_score_label(score: int) -> str:
    if score >= SCORE_GOOD_THRESHOLD:
        return SCORE_LABEL_GREAT
    if score >= SCORE_OK_THRESHOLD:
        return SCORE_LABEL_NEEDS_WORK
    return SCORE_LABEL_CRITICAL


def compute_raw_score(diagnostics: Iterable[Diagnostic]) -> float:
    penalty = 0.0
    for diagnostic in diagnostics:
        penalty += ERROR_RULE_PENALTY if diagnostic.severity == "error" else WARNING_RULE_PENALTY
    return max(0.0, min(float(PERFECT_SCORE), PERFECT_SCORE - penalty))


def calculate_score(diagnostics: Iterable[Diagnostic]) -> ScoreResult:
    """Score in [0, 100]: 100 minus per-diagnostic penalties, clamped, rounded half up."""
    score = int(math.floor(compute_raw_score(diagnostics) + 0.5))
    return ScoreResult(score=score, label=get_score_label(score))


def _parse_estimate(payload: object) -> EstimatedScoreResult | None:
    if not isinstance(payload, dict):
        return None
    try:
        score = int(payload["score"])
        estimated_score = int(payload["estimatedScore"])
    except (KeyError, TypeError, ValueError):
        return None
    return EstimatedScoreResult(
        score=score,
        label=str(payload.get("label") or get_score_label(score)),
        estimated_score=estimated_score,
        estimated_label=str(payload.get("estimatedLabel") or get_score_label(estimated_score)),
    )


async def estimate_score(
    diagnostics: list[Diagnostic],
    environment: RuntimeEnvironment,
    client: httpx.AsyncClient | None = None,
) -> EstimatedScoreResult | None:
    """Ask the score service for the score after fixing ``diagnostics``."""
    if environment.offline:
        return None

    body = {"diagnostics": [d.to_dict() for d in diagnostics]}
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            timeout=environment.fetch_timeout,
            proxy=environment.proxy_url,
        )
    try:
        response = await client.post(environment.estimate_score_api_url, json=body)
        response.raise_for_status()
        return _parse_estimate(response.json())
    except httpx.HTTPError as e:
        logger.debug("Score estimate unavailable: %s", e)
        return None
    except ValueError as e:
        logger.debug("Score estimate returned invalid JSON: %s", e)
        return None
    finally:
        if owns_client:
            await client.aclose()
