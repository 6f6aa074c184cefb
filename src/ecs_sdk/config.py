"""
Configuration management for the SDK.

Settings come from built-in defaults, an optional YAML file and the usual AWS
environment variables, in that order of precedence (last wins).
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

CONFIG_ENV_VAR = "ECS_SDK_CONFIG"


@dataclass
class SdkConfig:
    """Runtime settings for the stack engine and the resource client."""

    # AWS session
    aws_region: str = "us-east-1"
    aws_profile: Optional[str] = None

    # Stack creation
    stack_create_timeout: int = 10  # minutes

    # Stack waits
    stack_wait_delay: float = 30
    stack_wait_max_attempts: int = 120

    # Change set creation waits
    change_set_wait_delay: float = 5
    change_set_wait_max_attempts: int = 120

    # Log tailing
    log_group_prefix: str = "/docker-compose/"
    log_poll_interval: float = 0.5

    def get_log_group(self, name: str) -> str:
        """Get the CloudWatch log group used by a project."""
        return f"{self.log_group_prefix}{name}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SdkConfig":
        """Create config from dictionary."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)


def _read_yaml(path: Path) -> Dict[str, Any]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return data


def load_config(path: Optional[Union[str, Path]] = None) -> SdkConfig:
    """
    Load SDK configuration.

    Args:
        path: YAML file to read. Falls back to $ECS_SDK_CONFIG when not given;
            a missing explicit file is an error, a missing default is not.

    Returns:
        The merged configuration
    """
    data: Dict[str, Any] = {}

    if path is not None:
        data.update(_read_yaml(Path(path)))
    elif os.environ.get(CONFIG_ENV_VAR):
        env_path = Path(os.environ[CONFIG_ENV_VAR])
        if env_path.exists():
            data.update(_read_yaml(env_path))

    region = os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION")
    if region:
        data["aws_region"] = region
    if os.environ.get("AWS_PROFILE"):
        data["aws_profile"] = os.environ["AWS_PROFILE"]

    return SdkConfig.from_dict(data)
