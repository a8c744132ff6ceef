"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.userhub.runtime.config.config_data import ConfigData


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    def replacer(match):
        var_expr = match.group(1)

        # Handle default values: ${VAR:-default}
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        # Handle error messages: ${VAR:?message}
        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        # Handle required variables: ${VAR}
        else:
            var_name = var_expr
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name} not set")
            return value

    # Match ${...} patterns
    pattern = r'\$\{([^}]+)\}'
    return re.sub(pattern, replacer, text)


def apply_environment_overrides(env_mode: str) -> list[str]:
    """Promote ``{ENV}_``-prefixed variables to their unprefixed names.

    Returns:
        Names of the variables that were set
    """
    prefix = f"{env_mode.upper()}_"
    promoted = []
    for var_name, var_value in list(os.environ.items()):
        if not var_name.startswith(prefix):
            continue
        new_var_name = var_name[len(prefix):]
        os.environ[new_var_name] = var_value
        promoted.append(new_var_name)
        logger.debug(f"Set environment variable {new_var_name} from {var_name}")
    return promoted


def load_templated_yaml(file_path: Path, env_mode: str | None = None) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file
        env_mode: Environment whose prefixed variables override plain ones
            (defaults to APP_ENVIRONMENT, then "development")

    Returns:
        Parsed YAML with environment variables substituted

    Raises:
        ValueError: If required environment variables are missing or the
            resulting configuration does not validate
    """
    env_mode = env_mode or os.getenv("APP_ENVIRONMENT", "development")
    logger.info(f"Loading configuration for environment: {env_mode}")

    if not file_path.exists():
        logger.warning(f"{file_path} not found; using built-in configuration defaults")
        return ConfigData()

    with open(file_path) as f:
        content = f.read()

    promoted = apply_environment_overrides(env_mode)
    if promoted:
        logger.info(f"Applied environment-specific overrides: {promoted}")

    # Substitute environment variables
    substituted_content = substitute_env_vars(content)

    # Parse YAML
    try:
        loaded = yaml.safe_load(substituted_content)
        if not loaded:
            raise ValueError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    # Validate and return as ConfigData
    try:
        config_data = loaded.get("config", {})
        config = ConfigData(**config_data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    if config.app.environment == "production" and not config.jwt.secret:
        raise ValueError("jwt.secret must be configured in production")

    return config
