"""Constants for React Doctor."""

import re

SOURCE_FILE_PATTERN = re.compile(r"\.(tsx?|jsx?)$")
JSX_FILE_PATTERN = re.compile(r"\.(tsx|jsx)$")

# ─── Scoring ─────────────────────────────────────────────────────────

PERFECT_SCORE = 100
SCORE_GOOD_THRESHOLD = 75
SCORE_OK_THRESHOLD = 50

ERROR_RULE_PENALTY = 1.5
WARNING_RULE_PENALTY = 0.75

SCORE_LABEL_GREAT = "Great"
SCORE_LABEL_NEEDS_WORK = "Needs work"
SCORE_LABEL_CRITICAL = "Critical"

# ─── Remote endpoints ────────────────────────────────────────────────

ESTIMATE_SCORE_API_URL = "https://www.react.doctor/api/estimate-score"
SHARE_BASE_URL = "https://www.react.doctor/share"
FETCH_TIMEOUT_SECONDS = 10.0

OFFLINE_MESSAGE = "You are offline, could not calculate score. Reconnect to calculate."
OFFLINE_FLAG_MESSAGE = "Score not calculated. Remove --offline to calculate score."

# ─── Analyzers ───────────────────────────────────────────────────────

# Windows CreateProcessW caps the command line at 32,767 chars; leave room
# for the executable path and quoting.
SPAWN_ARGS_MAX_LENGTH_CHARS = 24_000

ERROR_PREVIEW_LENGTH_CHARS = 200

MAX_KNIP_RETRIES = 5
KNIP_RETRY_BACKOFF_SECONDS = 0.5

OXLINT_NODE_REQUIREMENT = "^20.19.0 || >=22.12.0"
OXLINT_RECOMMENDED_NODE_MAJOR = 24

SUBPROCESS_TIMEOUT_SECONDS = 600

# ─── Version control ─────────────────────────────────────────────────

DEFAULT_BRANCH_CANDIDATES = ("main", "master")

# Directories skipped when counting source files without git
IGNORED_DIRECTORIES = {"node_modules", "dist", "build", "coverage"}

# ─── Configuration files ─────────────────────────────────────────────

CONFIG_FILENAME = "react-doctor.config.json"
PACKAGE_JSON_CONFIG_KEY = "reactDoctor"

FAIL_ON_LEVELS = ("error", "warning", "none")
