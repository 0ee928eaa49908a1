"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.products_api.runtime.config.config_data import ConfigData
from src.products_api.runtime.config.settings import EnvironmentVariables


PLACEHOLDER = re.compile(
    r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:-|:\?)(?P<arg>[^}]*))?\}"
)


def _resolve_placeholder(match: re.Match) -> str:
    name, op, arg = match.group("name", "op", "arg")
    value = os.environ.get(name)
    if value is not None:
        return value
    if op == ":-":
        return arg
    if op == ":?":
        raise ValueError(f"Required environment variable {name}: {arg}")
    raise ValueError(f"Required environment variable {name} not set")


def substitute_env_vars(text: str) -> str:
    """Expand ``${NAME}``, ``${NAME:-default}`` and ``${NAME:?message}`` in text.

    A bare ``${NAME}`` or ``${NAME:?message}`` whose variable is unset raises
    ValueError naming the variable.
    """
    return PLACEHOLDER.sub(_resolve_placeholder, text)


def promote_environment_overrides(env_mode: str) -> list[str]:
    """Copy ``<ENV>_NAME`` variables to ``NAME`` for the active environment.

    Returns the names of the variables that were set.
    """
    prefix = f"{env_mode.upper()}_"
    promoted = []
    for var_name, var_value in list(os.environ.items()):
        if not var_name.startswith(prefix) or var_name == prefix:
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
        env_mode: Environment name; read from APP_ENVIRONMENT when omitted

    Returns:
        Parsed YAML with environment variables substituted

    Raises:
        ValueError: If required environment variables are missing or the
            content does not validate
        FileNotFoundError: If the YAML file doesn't exist
    """
    with open(file_path) as f:
        content = f.read()

    if env_mode is None:
        env_mode = EnvironmentVariables().environment
    logger.info(f"Loading configuration for environment: {env_mode}")

    promoted = promote_environment_overrides(env_mode)
    if promoted:
        logger.info(f"Applying environment-specific overrides: {promoted}")

    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content)
        if not loaded:
            raise ValueError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    try:
        config_data = loaded.get("config", {}) or {}
        app_section = config_data.setdefault("app", {}) or {}
        app_section.setdefault("environment", env_mode)
        config_data["app"] = app_section
        config = ConfigData(**config_data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    return config


def load_config() -> ConfigData:
    """Load the configuration named by APP_CONFIG_FILE, falling back to defaults."""
    env = EnvironmentVariables()
    path = Path(env.config_file)
    if not path.exists():
        logger.warning(f"Configuration file {path} not found; using defaults")
        return ConfigData.model_validate({"app": {"environment": env.environment}})
    return load_templated_yaml(path, env.environment)
