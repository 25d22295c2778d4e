"""pagerender configuration system.

Configuration is YAML-based; `pagerender serve --port` overrides the port.
Supports environment variable substitution (${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.pagerender/config.yaml
3. ./pagerender.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pagerender.exceptions import ConfigError

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class TemplatesConfig:
    """Template backing store configuration.

    Attributes:
        directory: Directory holding page and layout fragments
        page_pattern: Glob matching page fragments
        layout_pattern: Glob matching shared layout fragments
        strict_undefined: Fail the render when a template references missing data
        autoescape: HTML-escape values rendered into templates
    """

    directory: str = "./templates"
    page_pattern: str = "*.page.tmpl"
    layout_pattern: str = "*.layout.tmpl"
    strict_undefined: bool = True
    autoescape: bool = True

    def __post_init__(self) -> None:
        """Validate template configuration."""
        for attr in ("directory", "page_pattern", "layout_pattern"):
            if not getattr(self, attr):
                raise ConfigError(f"templates.{attr} must not be empty")

    @property
    def path(self) -> Path:
        """Templates directory as a Path."""
        return Path(self.directory)


@dataclass
class AppConfig:
    """Top-level application configuration.

    Only ``use_cache``, ``templates`` and ``defaults`` affect rendering; ``port``
    and ``in_production`` are read by the web layer.

    Attributes:
        use_cache: Compile every page once at startup and serve from the cache
        port: Port the development server listens on
        in_production: Production mode (CSRF cookie sent with the Secure flag)
        templates: Template backing store settings
        defaults: Data merged into every render payload
    """

    use_cache: bool = True
    port: int = 8080
    in_production: bool = False
    templates: TemplatesConfig = field(default_factory=TemplatesConfig)
    defaults: dict[str, Any] = field(default_factory=dict)

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate application configuration."""
        if not 0 < self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}. Must be 1-65535")

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax, e.g. ``directory: ${TEMPLATES_DIR}``.

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ConfigError: If a referenced variable is not set
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ConfigError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.pagerender/config.yaml
    2. ./pagerender.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".pagerender" / "config.yaml",
        start_path / "pagerender.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(data: dict[str, Any]) -> AppConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        AppConfig instance

    Raises:
        ConfigError: If a value is invalid
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")
    data = substitute_env_vars(data)

    templates = TemplatesConfig()
    if "templates" in data:
        templates_data = data["templates"] or {}
        if not isinstance(templates_data, dict):
            raise ConfigError("templates must be a mapping")
        templates = TemplatesConfig(
            directory=str(templates_data.get("directory", templates.directory)),
            page_pattern=templates_data.get("page_pattern", templates.page_pattern),
            layout_pattern=templates_data.get("layout_pattern", templates.layout_pattern),
            strict_undefined=templates_data.get("strict_undefined", templates.strict_undefined),
            autoescape=templates_data.get("autoescape", templates.autoescape),
        )

    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ConfigError("defaults must be a mapping")

    try:
        port = int(data.get("port", 8080))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid port: {data.get('port')!r}") from e

    return AppConfig(
        use_cache=bool(data.get("use_cache", True)),
        port=port,
        in_production=bool(data.get("in_production", False)),
        templates=templates,
        defaults=defaults,
    )


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> AppConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        AppConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
        ConfigError: If the file holds invalid values
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path) as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = AppConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# pagerender configuration

# Compile every page once at startup. When false, every request
# recompiles its page from source (useful while editing templates).
use_cache: true

# Development server settings
port: 8080
in_production: false  # mark the CSRF cookie Secure (HTTPS only)

# Template backing store
templates:
  directory: "./templates"
  page_pattern: "*.page.tmpl"      # one file per page
  layout_pattern: "*.layout.tmpl"  # shared layouts merged into every page
  strict_undefined: true           # missing data fails the render
  autoescape: true

# Data merged into every render (payload values win)
# defaults:
#   site_name: "My site"
'''
