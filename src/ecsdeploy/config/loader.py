"""Configuration loader for ecsdeploy.

Builds the immutable DeployConfig from command-line options, ``ECSDEPLOY_*``
environment variables and built-in defaults, in that priority order.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ecsdeploy.config.defaults import DEFAULT_DEPLOY_CONFIG
from ecsdeploy.config.validator import first_error_field, flatten_pydantic_errors
from ecsdeploy.lib.errors import ConfigError
from ecsdeploy.models.deployment import DeployConfig

logger = logging.getLogger(__name__)

# Environment variable to field name mapping
ENV_VAR_MAP = {
    "region": "ECSDEPLOY_REGION",
    "cluster": "ECSDEPLOY_CLUSTER",
    "service": "ECSDEPLOY_SERVICE",
    "family": "ECSDEPLOY_FAMILY",
    "repository": "ECSDEPLOY_ECR_REPO",
    "build_context": "ECSDEPLOY_BUILD_CONTEXT",
    "dockerfile": "ECSDEPLOY_DOCKERFILE",
    "platform": "ECSDEPLOY_PLATFORM",
    "timeout": "ECSDEPLOY_TIMEOUT",
    "poll_interval": "ECSDEPLOY_POLL_INTERVAL",
    "state_file": "ECSDEPLOY_STATE_FILE",
}

_NUMERIC_FIELDS = ("timeout", "poll_interval")


def _parse_env_value(field_name: str, value: str) -> Any:
    """Parse environment variable value to the field's type.

    Args:
        field_name: Name of the field (used to determine type)
        value: String value from environment variable

    Returns:
        Parsed value (float or str)

    Raises:
        ValueError: If value cannot be parsed
    """
    if field_name in _NUMERIC_FIELDS:
        return float(value)
    if not value.strip():
        raise ValueError(f"empty value for {field_name}")
    return value


def _get_env_value(field_name: str, env_vars: Mapping[str, str]) -> Any | None:
    """Get environment variable value for a field.

    Args:
        field_name: Name of field to get
        env_vars: Environment variables mapping

    Returns:
        Parsed value or None if not found or invalid
    """
    env_var_name = ENV_VAR_MAP.get(field_name)
    if not env_var_name or env_var_name not in env_vars:
        return None

    try:
        return _parse_env_value(field_name, env_vars[env_var_name])
    except ValueError:
        logger.warning(
            f"Ignoring invalid value for {env_var_name}: {env_vars[env_var_name]!r}"
        )
        return None


def resolve_deploy_config(
    cli_options: Mapping[str, Any] | None = None,
    env_vars: Mapping[str, str] | None = None,
    defaults: Mapping[str, Any] | None = None,
) -> DeployConfig:
    """Resolve the deployment configuration with priority hierarchy.

    Priority (highest to lowest):
    1. Command-line options (values that are not None)
    2. Environment variables (ECSDEPLOY_* vars)
    3. Built-in defaults

    Args:
        cli_options: Option values from the command line
        env_vars: Environment mapping (defaults to os.environ)
        defaults: Default values (defaults to DEFAULT_DEPLOY_CONFIG)

    Returns:
        Frozen DeployConfig

    Raises:
        ConfigError: If the resolved values fail validation
    """
    cli_options = cli_options or {}
    env = os.environ if env_vars is None else env_vars
    base = DEFAULT_DEPLOY_CONFIG if defaults is None else defaults

    resolved: dict[str, Any] = {}
    for field in DeployConfig.model_fields:
        # Priority 1: CLI option
        if cli_options.get(field) is not None:
            resolved[field] = cli_options[field]
        # Priority 2: Environment variable
        elif (env_value := _get_env_value(field, env)) is not None:
            resolved[field] = env_value
        # Priority 3: Built-in default (model defaults cover the rest)
        elif field in base:
            resolved[field] = base[field]

    try:
        config = DeployConfig(**resolved)
    except PydanticValidationError as exc:
        raise ConfigError(
            field=first_error_field(exc),
            message="; ".join(flatten_pydantic_errors(exc)),
        ) from exc

    logger.debug(f"Resolved deploy configuration: {config.model_dump()}")
    return config
