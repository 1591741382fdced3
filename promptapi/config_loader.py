"""
Configuration loader for promptapi.

Loads the application configuration from YAML with support for
environment variable interpolation, and the API descriptor (base URL plus
documentation) from a JSON or YAML file.
"""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .models import (
    ApiConfig,
    CompletionConfig,
    OrchestrationConfig,
    ExecutorConfig,
    ApiSourceConfig,
    ServerConfig,
    LoggingConfig,
    LangfuseConfig,
    AppConfig,
)

logger = logging.getLogger(__name__)

# Default config paths relative to the working directory
DEFAULT_CONFIG_PATH = Path("config") / "config.yaml"

# Regex for environment variable interpolation: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def resolve_env_vars(value: str) -> str:
    """
    Resolve environment variable references in a string.

    Supports ${VAR} and ${VAR:-default} syntax.

    Args:
        value: String potentially containing env var references

    Returns:
        String with env vars resolved
    """

    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(var_name, default_value)

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any) -> Any:
    """Recursively substitute environment variables in a data structure."""
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    return data


def _as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _parse_completion_config(data: dict) -> CompletionConfig:
    """Parse completion service configuration from dict."""
    return CompletionConfig(
        base_url=data.get("base_url") or "",
        api_key=data.get("api_key") or "",
        model=data.get("model") or "gpt-4o-mini",
        temperature=float(data.get("temperature", 0.2)),
        timeout=float(data.get("timeout", 60)),
    )


def _parse_orchestration_config(data: dict) -> OrchestrationConfig:
    """Parse orchestration limits from dict."""
    max_depth = int(data.get("max_depth", 5))
    if max_depth < 1:
        raise ConfigError(f"orchestration.max_depth must be >= 1, got {max_depth}")
    return OrchestrationConfig(
        max_depth=max_depth,
        session_timeout=float(data.get("session_timeout", 0)),
        max_payload_chars=int(data.get("max_payload_chars", 8000)),
    )


def _parse_executor_config(data: dict) -> ExecutorConfig:
    """Parse target-API executor configuration from dict."""
    return ExecutorConfig(
        timeout=float(data.get("timeout", 30)),
        user_agent=data.get("user_agent") or "promptapi/0.1.0",
    )


def _parse_api_source_config(data: dict) -> ApiSourceConfig:
    return ApiSourceConfig(
        config_path=data.get("config_path") or "apis/fire-and-ice.json",
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server configuration from dict."""
    origins = data.get("cors_origins", ["*"])
    if isinstance(origins, str):
        origins = [o.strip() for o in origins.split(",") if o.strip()]

    return ServerConfig(
        host=data.get("host", "0.0.0.0"),
        port=int(data.get("port", 3000)),
        workers=int(data.get("workers", 1)),
        reload=_as_bool(data.get("reload"), False),
        public_dir=data.get("public_dir") or "",
        cors_origins=tuple(origins),
    )


def _parse_logging_config(data: dict) -> LoggingConfig:
    return LoggingConfig(level=data.get("level", "INFO"))


def _parse_langfuse_config(data: dict) -> LangfuseConfig:
    """Parse Langfuse configuration from dict."""
    return LangfuseConfig(
        public_key=data.get("public_key") or "",
        secret_key=data.get("secret_key") or "",
        host=data.get("host") or "",
        debug=_as_bool(data.get("debug"), False),
    )


def parse_app_config(raw_config: dict) -> AppConfig:
    """
    Build an AppConfig from an already-loaded mapping.

    Environment variable references are resolved before parsing.

    Raises:
        ConfigError: If a section has the wrong shape or an invalid value
    """
    raw_config = _substitute_env_vars_recursive(raw_config)

    sections = {}
    for name in (
        "completion",
        "orchestration",
        "executor",
        "api",
        "server",
        "logging",
        "langfuse",
    ):
        section = raw_config.get(name) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"Config section '{name}' must be a mapping")
        sections[name] = section

    try:
        return AppConfig(
            version=str(raw_config.get("version", "1.0")),
            completion=_parse_completion_config(sections["completion"]),
            orchestration=_parse_orchestration_config(sections["orchestration"]),
            executor=_parse_executor_config(sections["executor"]),
            api=_parse_api_source_config(sections["api"]),
            server=_parse_server_config(sections["server"]),
            logging=_parse_logging_config(sections["logging"]),
            langfuse=_parse_langfuse_config(sections["langfuse"]),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration value: {e}") from e


def load_app_config(path: Optional[str] = None) -> AppConfig:
    """
    Load application configuration from a YAML file.

    A ``.env`` file in the working directory is loaded first so its values
    are visible to ``${VAR}`` interpolation.

    Args:
        path: Path to the YAML configuration file. If None, uses the
              CONFIG_PATH env var or the default path (config/config.yaml).

    Returns:
        AppConfig with all configuration loaded. Defaults are used when
        the file does not exist.

    Raises:
        ConfigError: If the file cannot be parsed or is invalid
    """
    load_dotenv()

    if path is None:
        path = os.environ.get("CONFIG_PATH", str(DEFAULT_CONFIG_PATH))

    config_path = Path(path)

    if not config_path.exists():
        logger.warning(f"Config file not found at {config_path}, using defaults")
        return parse_app_config({})

    logger.info(f"Loading configuration from {config_path}")

    try:
        with open(config_path, "r") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {config_path}: {e}") from e

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")

    app_config = parse_app_config(raw_config)
    logger.debug(
        f"Configuration loaded: version={app_config.version}, "
        f"model={app_config.completion.model}, "
        f"max_depth={app_config.orchestration.max_depth}"
    )
    return app_config


def parse_api_config(data: Any, source: str = "<api config>") -> ApiConfig:
    """
    Validate an API descriptor mapping and build an ApiConfig.

    Both ``baseUrl`` and ``documentation`` must be non-empty strings.
    ``base_url`` is accepted as an alias for ``baseUrl``.

    Raises:
        ConfigError: If the structure is invalid
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid API configuration in {source}: expected an object")

    base_url = data.get("baseUrl", data.get("base_url"))
    documentation = data.get("documentation")

    if not isinstance(base_url, str) or not base_url.strip():
        raise ConfigError(f"Invalid API configuration in {source}: missing baseUrl")
    if not isinstance(documentation, str) or not documentation.strip():
        raise ConfigError(
            f"Invalid API configuration in {source}: missing documentation"
        )

    return ApiConfig(base_url=base_url.strip(), documentation=documentation)


def load_api_config(path: Optional[str] = None) -> ApiConfig:
    """
    Load the API descriptor file.

    Files ending in ``.yaml`` or ``.yml`` are read as YAML; anything else
    is read as JSON.

    Args:
        path: Path to the descriptor. If None, uses API_CONFIG_PATH env var
              or the ``api.config_path`` default.

    Raises:
        ConfigError: If the file is missing, unparseable or invalid
    """
    if path is None:
        path = os.environ.get("API_CONFIG_PATH", ApiSourceConfig().config_path)

    api_path = Path(path)
    if not api_path.exists():
        raise ConfigError(f"Could not load API configuration from '{api_path}': not found")

    try:
        with open(api_path, "r", encoding="utf-8") as f:
            if api_path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(
            f"Could not load API configuration from '{api_path}': {e}"
        ) from e

    api_config = parse_api_config(data, source=str(api_path))
    logger.info(f"API configuration loaded from {api_path}: {api_config.base_url}")
    return api_config
