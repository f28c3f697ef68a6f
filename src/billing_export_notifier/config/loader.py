"""Configuration loader for Billing Export Notifier."""

from __future__ import annotations

import os
from pathlib import Path

import requests
import yaml
from pydantic import ValidationError

from billing_export_notifier.config.schema import Config

METADATA_PROJECT_ID_URL = (
    "http://metadata.google.internal/computeMetadata/v1/project/project-id"
)


class ConfigurationError(Exception):
    """Missing or malformed configuration."""

    pass


# Environment variable -> nested config key
ENV_MAPPINGS: dict[str, tuple[str, ...]] = {
    "PROJECT_ID": ("bigquery", "project_id"),
    "BILLING_ACCOUNT_ID": ("bigquery", "billing_account_id"),
    "DATASET_ID": ("bigquery", "dataset_id"),
    "PARTITION_TABLE_NAME": ("bigquery", "partition_table_name"),
    "BIGQUERY_LOCATION": ("bigquery", "location"),
    "SLACK_OAUTH_TOKEN": ("slack", "oauth_token"),
    "SLACK_CHANNEL_ID": ("slack", "channel_id"),
    "DETECT_ABNORMALY_PERCENTAGE": ("anomaly_detection", "threshold_percentage"),
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        # An override section with every key commented out loads as None
        if value is None and isinstance(result.get(key), dict):
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir() -> Path:
    """Find the config directory, searching up from current directory."""
    if config_dir := os.environ.get("CONFIG_DIR"):
        return Path(config_dir)

    current = Path.cwd()
    while current != current.parent:
        config_path = current / "config"
        if config_path.is_dir():
            return config_path
        current = current.parent

    return Path("config")


def _read_yaml(path: Path) -> dict:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping, not {type(data).__name__}")
    return data


def _section(config_data: dict, key: str) -> dict:
    """Get a nested section, treating an empty YAML section as an empty mapping."""
    section = config_data.get(key)
    if section is None:
        section = config_data[key] = {}
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Config section '{key}' must be a mapping, not {type(section).__name__}"
        )
    return section


def load_config(
    config_path: str | Path | None = None,
    environment: str | None = None,
) -> Config:
    """
    Load configuration from YAML files and environment variables.

    Loads config.yaml as base, merges environment-specific overrides
    (e.g., config.prod.yaml), then applies environment variables. If no
    project ID is configured, it is read from the GCE metadata server.

    Args:
        config_path: Path to config directory. If None, searches for config/ directory.
        environment: Environment name (dev, staging, prod). If None, uses CONFIG_ENV
                    environment variable or defaults to 'dev'.

    Returns:
        Config: Validated, immutable configuration object.

    Raises:
        ConfigurationError: If a required setting is missing or malformed.
    """
    config_dir = Path(config_path) if config_path else _find_config_dir()
    environment = environment or os.environ.get("CONFIG_ENV", "dev")

    config_data: dict = {}

    base_config_path = config_dir / "config.yaml"
    if base_config_path.exists():
        config_data = _read_yaml(base_config_path)

    env_config_path = config_dir / f"config.{environment}.yaml"
    if env_config_path.exists():
        config_data = _deep_merge(config_data, _read_yaml(env_config_path))

    config_data = _apply_env_overrides(config_data)

    # A metadata failure is reported together with the other invalid settings
    metadata_error: ConfigurationError | None = None
    bigquery = _section(config_data, "bigquery")
    if not bigquery.get("project_id"):
        print("PROJECT_ID is not set, using the metadata server instead")
        try:
            bigquery["project_id"] = _get_metadata_project_id()
        except ConfigurationError as e:
            metadata_error = e

    config_data["environment"] = environment

    try:
        return Config(**config_data)
    except ValidationError as e:
        message = _describe_validation_error(e)
        if metadata_error is not None:
            message = f"{message}; {metadata_error}"
        raise ConfigurationError(message) from e


def _apply_env_overrides(config_data: dict) -> dict:
    """Apply environment variable overrides to configuration."""
    for env_var, path in ENV_MAPPINGS.items():
        if value := os.environ.get(env_var):
            current = config_data
            for key in path[:-1]:
                current = _section(current, key)
            # Types are coerced by the schema so a bad threshold fails validation
            current[path[-1]] = value

    return config_data


def _get_metadata_project_id(timeout: float = 2.0) -> str:
    """
    Read the project ID from the GCE metadata server.

    Only reachable when running on Google Cloud (Cloud Functions, Cloud Run, GCE).

    Raises:
        ConfigurationError: If the metadata server cannot be reached.
    """
    try:
        response = requests.get(
            METADATA_PROJECT_ID_URL,
            headers={"Metadata-Flavor": "Google"},
            timeout=timeout,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise ConfigurationError(
            f"PROJECT_ID is not set and the metadata server is unavailable: {e}"
        ) from e

    project_id = response.text.strip()
    if not project_id:
        raise ConfigurationError("PROJECT_ID is not set and the metadata server returned none")
    return project_id


def _describe_validation_error(error: ValidationError) -> str:
    """Build a one-line summary naming each invalid setting and its env vars."""
    problems = []
    for detail in error.errors():
        path = tuple(str(part) for part in detail["loc"])
        name = ".".join(path)
        # A missing section is reported once at its own path; name every variable under it
        env_vars = [
            env_var
            for env_var, env_path in ENV_MAPPINGS.items()
            if env_path[: len(path)] == path
        ]
        if env_vars:
            name = f"{name} ({', '.join(env_vars)})"
        problems.append(f"{name}: {detail['msg']}")
    return "Invalid configuration: " + "; ".join(problems)
