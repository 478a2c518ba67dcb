"""Runtime settings for kubeup."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ValidationError

from .errors import ConfigurationError
from .utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".kubeup" / "config.yaml"
ENV_PREFIX = "KUBEUP_"


class Settings(BaseModel):
    """Settings shared by the CLI and the upgrade coordinator."""

    context: Optional[str] = None
    ssh_user: str = "root"
    ssh_port: int = 22
    ssh_identity_file: Optional[Path] = None
    use_sudo: bool = False
    command_timeout: Optional[float] = None
    machine_id_path: str = "/etc/machine-id"
    kubeadm_api_version: str = "kubeadm.k8s.io/v1beta3"
    image_repository: str = "registry.k8s.io"
    log_level: str = "INFO"

    class Config:
        extra = "forbid"


def _read_config_file(path: Path) -> Dict[str, Any]:
    """Read a YAML or JSON settings file."""
    try:
        with open(path, "r") as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to read config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def _env_overrides() -> Dict[str, str]:
    """Collect KUBEUP_* environment variables that name a setting."""
    overrides = {}
    for field_name in Settings.model_fields:
        value = os.environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if value is not None:
            overrides[field_name] = value
    return overrides


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a file and the environment.

    An explicit ``path`` must exist. Without one, the default location is
    used when present. Environment variables take precedence over the file.
    """
    values: Dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        values.update(_read_config_file(path))
        logger.info(f"Loaded settings from {path}")
    elif DEFAULT_CONFIG_PATH.exists():
        values.update(_read_config_file(DEFAULT_CONFIG_PATH))
        logger.debug(f"Loaded settings from {DEFAULT_CONFIG_PATH}")

    values.update(_env_overrides())

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
