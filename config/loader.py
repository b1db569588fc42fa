"""
Security Gateway Configuration Loader

Loads configuration from YAML files with environment variable interpolation.

Environment Variable Interpolation:
- ${VAR_NAME} - Required variable, raises error if not set
- ${VAR_NAME:-default} - Optional variable with default value

Example:
```yaml
identity_backend:
  type: http
  url: "${IDENTITY_URL:-http://localhost:9200}"
  service_headers:
    authorization: "${IDENTITY_SERVICE_AUTH}"
```
"""

import os
import re
from pathlib import Path
from typing import Any, Optional, Union
import logging

import yaml

from .schema import SecurityConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "security.yaml"

# Pattern for environment variable substitution: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r'\$\{([^}:]+)(?::-([^}]*))?\}')


def interpolate_env_vars(value: Any) -> Any:
    """
    Recursively interpolate environment variables in configuration values.

    Supports:
    - ${VAR_NAME} - Required, raises KeyError if not set
    - ${VAR_NAME:-default} - Optional with default value
    """
    if isinstance(value, str):
        def replace_env_var(match):
            var_name = match.group(1)
            default_value = match.group(2)

            env_value = os.environ.get(var_name)

            if env_value is not None:
                return env_value
            elif default_value is not None:
                return default_value
            else:
                raise KeyError(
                    f"Environment variable '{var_name}' is required but not set. "
                    f"Set it or provide a default: ${{{var_name}:-default}}"
                )

        return ENV_VAR_PATTERN.sub(replace_env_var, value)

    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]

    else:
        return value


def load_config_from_file(
    config_path: Union[str, Path],
    interpolate: bool = True
) -> SecurityConfig:
    """
    Load security configuration from a YAML file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        KeyError: If required environment variable is not set
        yaml.YAMLError: If YAML is malformed
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, 'r') as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        raw_config = {}

    if interpolate:
        try:
            raw_config = interpolate_env_vars(raw_config)
        except KeyError as e:
            logger.error(f"Configuration error: {e}")
            raise

    config = SecurityConfig.from_dict(raw_config)
    for message in config.deprecation_warnings():
        logger.warning(message)
    return config


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    working_dir: Optional[Union[str, Path]] = None,
) -> SecurityConfig:
    """
    Load security configuration with sensible defaults.

    Search order for configuration:
    1. Explicit config_path if provided
    2. security.yaml in working_dir (or working_dir/config)
    3. security.yaml in current directory (or ./config)
    4. Default configuration
    """
    if config_path:
        return load_config_from_file(config_path)

    search_paths = []

    if working_dir:
        working_dir = Path(working_dir)
        search_paths.append(working_dir / CONFIG_FILENAME)
        search_paths.append(working_dir / "config" / CONFIG_FILENAME)

    cwd = Path.cwd()
    search_paths.append(cwd / CONFIG_FILENAME)
    search_paths.append(cwd / "config" / CONFIG_FILENAME)

    for path in search_paths:
        if path.exists():
            logger.info(f"Found configuration at {path}")
            return load_config_from_file(path)

    logger.info(f"No {CONFIG_FILENAME} found, using default configuration")
    return SecurityConfig()


def create_default_config(output_path: Optional[Union[str, Path]] = None) -> Path:
    """
    Create a default security.yaml configuration file.

    Returns:
        Path to created configuration file
    """
    output_path = Path(output_path) if output_path else Path(CONFIG_FILENAME)

    default_config = """# Security gateway configuration
# Environment variables can be used: ${VAR_NAME} or ${VAR_NAME:-default}

security:
  enabled: true

authorization:
  application: "authz-gate"

# Denied saved objects calls are always audited; granted ones only when enabled
audit:
  enabled: false
  sink: "log"
  # sink: "file"
  # path: "./data/audit.jsonl"

identity_backend:
  type: "http"
  url: "${IDENTITY_URL:-http://localhost:9200}"
  timeout: 10

spaces:
  enabled: false

server:
  host: "0.0.0.0"
  port: 8000

# Saved object types and the operations they permit (empty list = none)
saved_object_types:
  dashboard: [create, bulk_create, get, bulk_get, find, update, delete]
  visualization: [create, bulk_create, get, bulk_get, find, update, delete]
  config: [get, bulk_get, find, update]
"""

    with open(output_path, 'w') as f:
        f.write(default_config)

    logger.info(f"Created default configuration at {output_path}")
    return output_path
