"""User configuration: react-doctor.config.json or the package.json ``reactDoctor`` key."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from react_doctor.constants import CONFIG_FILENAME, PACKAGE_JSON_CONFIG_KEY

logger = logging.getLogger("react_doctor.user_config")


class IgnoreConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    rules: list[str] = Field(default_factory=list, description="plugin/rule keys to suppress")
    files: list[str] = Field(default_factory=list, description="File globs to suppress")


class ReactDoctorConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ignore: IgnoreConfig = Field(default_factory=IgnoreConfig)
    lint: bool | None = None
    dead_code: bool | None = Field(None, alias="deadCode")
    verbose: bool | None = None
    diff: bool | str | None = None
    fail_on: Literal["error", "warning", "none"] | None = Field(None, alias="failOn")


def _read_json(path: Path) -> object:
    return json.loads(path.read_text(encoding="utf-8"))


def load_config(root_directory: str | Path) -> ReactDoctorConfig | None:
    """Load the project's config. Never raises on malformed content."""
    root = Path(root_directory)
    config_path = root / CONFIG_FILENAME

    if config_path.is_file():
        try:
            raw = _read_json(config_path)
            if isinstance(raw, dict):
                return ReactDoctorConfig.model_validate(raw)
            logger.warning("%s must be a JSON object, ignoring.", CONFIG_FILENAME)
        except (json.JSONDecodeError, OSError, ValidationError) as e:
            logger.warning("Failed to parse %s: %s", CONFIG_FILENAME, e)

    package_json_path = root / "package.json"
    if package_json_path.is_file():
        try:
            package_json = _read_json(package_json_path)
            embedded = package_json.get(PACKAGE_JSON_CONFIG_KEY) if isinstance(package_json, dict) else None
            if isinstance(embedded, dict):
                return ReactDoctorConfig.model_validate(embedded)
        except (json.JSONDecodeError, OSError, ValidationError) as e:
            logger.warning("Ignoring %s in package.json: %s", PACKAGE_JSON_CONFIG_KEY, e)
            return None

    return None
