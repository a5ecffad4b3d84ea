"""Load ``config.yaml`` with shell-style environment placeholders."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.storefront.runtime.config.config_data import ConfigData

_PLACEHOLDER = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:[-?])(?P<arg>[^}]*))?\}")


def _resolve(match: re.Match) -> str:
    name, op, arg = match.group("name"), match.group("op"), match.group("arg")
    value = os.getenv(name)
    if value is not None:
        return value
    if op == ":-":
        return arg
    if op == ":?":
        raise ValueError(f"Required environment variable {name}: {arg}")
    raise ValueError(f"Required environment variable {name} not set")


def substitute_env_vars(text: str) -> str:
    """Expand ``${VAR}``, ``${VAR:-default}`` and ``${VAR:?message}``.

    Raises:
        ValueError: If a variable without a default is not set
    """
    return _PLACEHOLDER.sub(_resolve, text)


def apply_environment_overrides(env_mode: str) -> None:
    """Promote ``<ENV>_``-prefixed variables to their unprefixed names.

    With ``APP_ENVIRONMENT=production`` the variable ``PRODUCTION_VNPAY_TMN_CODE``
    becomes ``VNPAY_TMN_CODE`` before the template is rendered.
    """
    prefix = f"{env_mode.upper()}_"
    promoted = {
        name[len(prefix):]: value
        for name, value in os.environ.items()
        if name.startswith(prefix) and len(name) > len(prefix)
    }
    if promoted:
        logger.info("Applying {} overrides: {}", env_mode, sorted(promoted))
    os.environ.update(promoted)


def load_templated_yaml(file_path: Path) -> ConfigData:
    """Render the template at ``file_path`` and validate its ``config`` section.

    Raises:
        ValueError: On missing variables, malformed YAML or invalid values
        FileNotFoundError: If the file does not exist
    """
    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration for environment: {}", env_mode)
    apply_environment_overrides(env_mode)

    rendered = substitute_env_vars(file_path.read_text(encoding="utf-8"))
    try:
        document = yaml.safe_load(rendered)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not isinstance(document, dict):
        raise ValueError(f"{file_path} does not contain a configuration mapping")

    try:
        return ConfigData.model_validate(document.get("config") or {})
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def load_config(file_path: Path) -> ConfigData:
    """Load ``file_path`` when it exists, otherwise fall back to defaults."""
    if not file_path.exists():
        logger.warning("Configuration file {} not found; using defaults", file_path)
        return ConfigData()
    return load_templated_yaml(file_path)
