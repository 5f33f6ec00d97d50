"""
Settings loader for the lifecycle manager.

Values come from defaults, an optional YAML file and environment variables
(highest precedence). A .env file in the working directory is honoured.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from llcm.config.regions import ALLOWED_REGIONS, DEFAULT_REGIONS
from llcm.errors import BadConfigError

ENV_PREFIX = "LLCM"


def default_num_workers() -> int:
    """Twice the CPU count plus one."""
    return (os.cpu_count() or 1) * 2 + 1


class LlcmSettings(BaseModel):
    """Tunables and CLI defaults."""
    num_workers: int = Field(default_factory=default_num_workers, ge=1)
    max_retry_attempts: int = Field(default=10, ge=1)
    delay_time_sec: int = 3
    regions: List[str] = Field(default_factory=lambda: list(DEFAULT_REGIONS))
    profile: Optional[str] = None
    log_level: str = "info"
    output_type: str = "compressedtext"
    client_type: str = "cloudwatch"

    @field_validator("regions")
    @classmethod
    def validate_regions(cls, v: List[str]) -> List[str]:
        unsupported = [region for region in v if region not in ALLOWED_REGIONS]
        if unsupported:
            raise ValueError(f"unsupported region: {', '.join(unsupported)}")
        return v


# Environment variable -> settings field
_ENV_OVERRIDES: Dict[str, str] = {
    "AWS_PROFILE": "profile",
    f"{ENV_PREFIX}_LOG_LEVEL": "log_level",
    f"{ENV_PREFIX}_OUTPUT_TYPE": "output_type",
    f"{ENV_PREFIX}_NUM_WORKERS": "num_workers",
    f"{ENV_PREFIX}_MAX_RETRY_ATTEMPTS": "max_retry_attempts",
    f"{ENV_PREFIX}_DELAY_TIME_SEC": "delay_time_sec",
    f"{ENV_PREFIX}_CLIENT_TYPE": "client_type",
}


def load_settings(config_path: Optional[Path] = None) -> LlcmSettings:
    """
    Load settings from an optional YAML file and the environment.

    Args:
        config_path: YAML file with top-level keys matching LlcmSettings fields.
            When given, the file must exist.

    Returns:
        LlcmSettings instance

    Raises:
        BadConfigError: If the file is missing or unreadable, or a value is invalid.
    """
    load_dotenv(find_dotenv(usecwd=True))

    config_data: Dict[str, Any] = {}
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise BadConfigError(f"Configuration file not found: {config_path}")
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise BadConfigError(f"Invalid configuration file {config_path}: {e}") from e
        if not isinstance(config_data, dict):
            raise BadConfigError(f"Configuration file must contain a mapping: {config_path}")

    for env_name, field_name in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            config_data[field_name] = value

    try:
        return LlcmSettings(**config_data)
    except ValidationError as e:
        raise BadConfigError(f"Invalid settings: {e}") from e
